import pytest

from tokenup.core.exceptions import NotFoundError, ValidationError
from tokenup.services.engagement_service import EngagementService


@pytest.fixture
def service(store, settings):
    return EngagementService(store, settings)


@pytest.fixture
def users(store):
    return [
        store.create_user(username=name, password_hash="h", name=name.title(), avatar=f"https://a/{name}.png")
        for name in ("owner", "fan", "other")
    ]


@pytest.fixture
def certificate(store, users):
    return store.create_certificate(
        user_id=users[0].id,
        title="Hackathon Winner",
        issuer="HackMIT",
        image_url="https://example.com/h.png",
        certificate_type="HACKATHON",
        token_value=2,
    )


class TestLikes:
    def test_like_like_unlike(self, service, store, users, certificate):
        fan = users[1]

        first = service.like(fan.id, certificate.id)
        second = service.like(fan.id, certificate.id)
        after_unlike = service.unlike(fan.id, certificate.id)

        assert (first.liked, first.likes_count) == (True, 1)
        assert (second.liked, second.likes_count) == (True, 1)
        assert (after_unlike.liked, after_unlike.likes_count) == (False, 0)
        assert store.get_likes(certificate.id) == []

    def test_unlike_without_like_is_noop(self, service, users, certificate):
        status = service.unlike(users[1].id, certificate.id)

        assert status.liked is False
        assert status.likes_count == 0

    def test_likes_from_several_users(self, service, users, certificate):
        for user in users:
            service.like(user.id, certificate.id)

        likes = service.get_likes(certificate.id)

        assert {like.user_id for like in likes} == {u.id for u in users}
        assert service.like_status(users[0].id, certificate.id).likes_count == 3
        assert service.has_liked(users[2].id, certificate.id) is True

    def test_unknown_certificate(self, service, users):
        with pytest.raises(NotFoundError):
            service.like(users[0].id, 999)
        with pytest.raises(NotFoundError):
            service.get_likes(999)


class TestComments:
    def test_comment_carries_poster_summary(self, service, store, users, certificate):
        fan = users[1]

        comment = service.comment(fan.id, certificate.id, "  Congrats!  ")

        assert comment.content == "Congrats!"
        assert comment.user.id == fan.id
        assert comment.user.name == "Fan"
        assert comment.user.avatar == "https://a/fan.png"
        assert store.get_certificate(certificate.id).comments_count == 1

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    def test_blank_comment_rejected(self, service, store, users, certificate, content):
        with pytest.raises(ValidationError):
            service.comment(users[1].id, certificate.id, content)

        assert store.get_certificate(certificate.id).comments_count == 0

    def test_long_comment_rejected(self, service, settings, users, certificate):
        with pytest.raises(ValidationError):
            service.comment(users[1].id, certificate.id, "x" * (settings.MAX_COMMENT_LENGTH + 1))

    def test_list_comments_newest_first(self, service, users, certificate):
        service.comment(users[1].id, certificate.id, "first")
        service.comment(users[2].id, certificate.id, "second")
        service.comment(users[1].id, certificate.id, "third")

        comments = service.list_comments(certificate.id)

        assert [c.content for c in comments] == ["third", "second", "first"]
        assert [c.user.id for c in comments] == [users[1].id, users[2].id, users[1].id]

    def test_comment_on_unknown_certificate(self, service, users):
        with pytest.raises(NotFoundError):
            service.comment(users[0].id, 999, "hello")
        with pytest.raises(NotFoundError):
            service.list_comments(999)
