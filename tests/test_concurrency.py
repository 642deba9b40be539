from concurrent.futures import ThreadPoolExecutor

from tokenup.database.session import session_scope
from tokenup.store.sql import SqlDataStore

WORKERS = 8


def _seed(store, fans=WORKERS):
    owner = store.create_user(username="owner", password_hash="h", name="Owner")
    certificate = store.create_certificate(
        user_id=owner.id,
        title="Research",
        issuer="IEEE",
        image_url="https://example.com/p.pdf",
        certificate_type="RESEARCH_PAPER",
        token_value=4,
    )
    users = [
        store.create_user(username=f"fan{i}", password_hash="h", name=f"Fan {i}")
        for i in range(fans)
    ]
    return owner, certificate, users


def _seed_pending(store, owner_id, count=WORKERS):
    return [
        store.create_certificate(
            user_id=owner_id,
            title=f"Course {i}",
            issuer="NPTEL",
            image_url="https://example.com/c.png",
            certificate_type="NPTEL",
            token_value=2,
        )
        for i in range(count)
    ]


def _verify_and_reconcile_tasks(certificates, owner_id):
    """Verifies of every certificate with a reconcile after each one"""
    tasks = []
    for certificate in certificates:
        tasks.append(("verify", certificate.id))
        tasks.append(("reconcile", owner_id))
    return tasks


class TestMemoryStoreConcurrency:
    def test_two_users_like_concurrently(self, memory_store):
        _, certificate, users = _seed(memory_store, fans=2)

        with ThreadPoolExecutor(max_workers=2) as pool:
            list(pool.map(lambda u: memory_store.like_certificate(u.id, certificate.id), users))

        assert memory_store.get_certificate(certificate.id).likes_count == 2
        assert len(memory_store.get_likes(certificate.id)) == 2

    def test_same_user_likes_concurrently(self, memory_store):
        _, certificate, users = _seed(memory_store, fans=1)

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            created = list(
                pool.map(
                    lambda _: memory_store.like_certificate(users[0].id, certificate.id),
                    range(WORKERS),
                )
            )

        assert created.count(True) == 1
        assert memory_store.get_certificate(certificate.id).likes_count == 1

    def test_concurrent_verifies_award_once(self, memory_store):
        owner, certificate, _ = _seed(memory_store, fans=0)

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            outcomes = list(
                pool.map(lambda _: memory_store.verify_and_award(certificate.id), range(WORKERS))
            )

        assert sum(o.awarded for o in outcomes) == 1
        assert memory_store.get_user(owner.id).total_tokens == 4

    def test_reconcile_racing_verifies_never_double_credits(self, memory_store):
        owner, _, _ = _seed(memory_store, fans=0)
        certificates = _seed_pending(memory_store, owner.id)
        memory_store.update_user_tokens(owner.id, 3)

        def run(task):
            action, target = task
            if action == "verify":
                return memory_store.verify_and_award(target)
            return memory_store.reconcile_user_tokens(target)

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            list(pool.map(run, _verify_and_reconcile_tasks(certificates, owner.id)))

        assert memory_store.sum_verified_tokens(owner.id) == 2 * WORKERS
        assert memory_store.get_user(owner.id).total_tokens == 2 * WORKERS

    def test_concurrent_comments_keep_count(self, memory_store):
        _, certificate, users = _seed(memory_store)

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            list(
                pool.map(
                    lambda u: memory_store.add_comment(u.id, certificate.id, f"nice {u.id}"),
                    users * 3,
                )
            )

        assert len(memory_store.get_comments(certificate.id)) == WORKERS * 3
        assert memory_store.get_certificate(certificate.id).comments_count == WORKERS * 3


class TestSqlStoreConcurrency:
    def test_likes_from_many_users(self, file_session_factory):
        with session_scope(file_session_factory) as db:
            _, certificate, users = _seed(SqlDataStore(db))

        def like(user):
            with session_scope(file_session_factory) as db:
                return SqlDataStore(db).like_certificate(user.id, certificate.id)

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(like, users))

        with session_scope(file_session_factory) as db:
            store = SqlDataStore(db)
            stored = store.get_certificate(certificate.id)
            assert all(results)
            assert stored.likes_count == WORKERS
            assert len(store.get_likes(certificate.id)) == WORKERS

    def test_concurrent_verifies_award_once(self, file_session_factory):
        with session_scope(file_session_factory) as db:
            owner, certificate, _ = _seed(SqlDataStore(db), fans=0)

        def verify(_):
            with session_scope(file_session_factory) as db:
                return SqlDataStore(db).verify_and_award(certificate.id).awarded

        with ThreadPoolExecutor(max_workers=4) as pool:
            awarded = list(pool.map(verify, range(WORKERS)))

        with session_scope(file_session_factory) as db:
            store = SqlDataStore(db)
            assert awarded.count(True) == 1
            assert store.get_user(owner.id).total_tokens == 4
            assert store.sum_verified_tokens(owner.id) == 4

    def test_reconcile_racing_verifies_never_double_credits(self, file_session_factory):
        with session_scope(file_session_factory) as db:
            store = SqlDataStore(db)
            owner, _, _ = _seed(store, fans=0)
            certificates = _seed_pending(store, owner.id)
            store.update_user_tokens(owner.id, 3)

        def run(task):
            action, target = task
            with session_scope(file_session_factory) as db:
                store = SqlDataStore(db)
                if action == "verify":
                    return store.verify_and_award(target).awarded
                return store.reconcile_user_tokens(target).calculated_balance

        with ThreadPoolExecutor(max_workers=4) as pool:
            list(pool.map(run, _verify_and_reconcile_tasks(certificates, owner.id)))

        with session_scope(file_session_factory) as db:
            store = SqlDataStore(db)
            assert store.sum_verified_tokens(owner.id) == 2 * WORKERS
            assert store.get_user(owner.id).total_tokens == 2 * WORKERS

    def test_concurrent_comments_keep_count(self, file_session_factory):
        with session_scope(file_session_factory) as db:
            _, certificate, users = _seed(SqlDataStore(db))

        def comment(user):
            with session_scope(file_session_factory) as db:
                return SqlDataStore(db).add_comment(user.id, certificate.id, f"nice {user.id}")

        with ThreadPoolExecutor(max_workers=4) as pool:
            list(pool.map(comment, users * 2))

        with session_scope(file_session_factory) as db:
            store = SqlDataStore(db)
            assert len(store.get_comments(certificate.id)) == WORKERS * 2
            assert store.get_certificate(certificate.id).comments_count == WORKERS * 2
