from datetime import date, datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from tokenup.core.exceptions import AuthorizationError
from tokenup.schemas.certificate import Certificate
from tokenup.schemas.user import User
from tokenup.services.report_service import ReportService

TODAY = date(2024, 3, 10)


def _at(day: date, hour: int = 12) -> datetime:
    return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)


def _user(id, total_tokens=0, is_admin=False, created=TODAY):
    return User(
        id=id,
        username=f"user{id}",
        name=f"User {id}",
        total_tokens=total_tokens,
        is_admin=is_admin,
        created_at=_at(created),
    )


def _certificate(id, certificate_type, is_verified=False, created=TODAY):
    return Certificate(
        id=id,
        user_id=1,
        title=f"Cert {id}",
        issuer="Issuer",
        image_url="https://example.com/c.png",
        certificate_type=certificate_type,
        token_value=1,
        is_verified=is_verified,
        created_at=_at(created),
    )


@pytest.fixture
def mock_store():
    return Mock()


@pytest.fixture
def service(mock_store, settings):
    return ReportService(mock_store, settings)


@pytest.fixture
def admin_user():
    return _user(100, is_admin=True)


class TestLeaderboard:
    def test_default_limit(self, service, mock_store, settings):
        mock_store.get_top_users.return_value = []

        service.leaderboard()

        mock_store.get_top_users.assert_called_once_with(settings.LEADERBOARD_DEFAULT_LIMIT)

    @pytest.mark.parametrize("requested,expected", [(0, 0), (-5, 0), (5, 5), (1000, 100)])
    def test_limit_clamped(self, service, mock_store, requested, expected):
        mock_store.get_top_users.return_value = []

        service.leaderboard(requested)

        mock_store.get_top_users.assert_called_once_with(expected)

    def test_leaderboard_with_memory_store(self, memory_store, settings):
        low = memory_store.create_user(username="low", password_hash="h", name="Low")
        first_tie = memory_store.create_user(username="tie1", password_hash="h", name="Tie 1")
        second_tie = memory_store.create_user(username="tie2", password_hash="h", name="Tie 2")
        memory_store.update_user_tokens(low.id, 1)
        memory_store.update_user_tokens(second_tie.id, 4)
        memory_store.update_user_tokens(first_tie.id, 4)

        ranked = ReportService(memory_store, settings).leaderboard()

        assert [u.id for u in ranked] == [first_tie.id, second_tie.id, low.id]

    def test_zero_limit_is_empty(self, store, settings):
        user = store.create_user(username="solo", password_hash="h", name="Solo")
        store.update_user_tokens(user.id, 3)

        assert ReportService(store, settings).leaderboard(0) == []


class TestAnalytics:
    def test_requires_admin(self, service, mock_store):
        with pytest.raises(AuthorizationError):
            service.analytics(_user(1), today=TODAY)

        mock_store.get_certificates.assert_not_called()

    def test_type_distribution_in_table_order(self, service, mock_store, admin_user):
        mock_store.get_certificates.return_value = [
            _certificate(1, "UDEMY"),
            _certificate(2, "NPTEL"),
            _certificate(3, "UDEMY"),
        ]
        mock_store.list_users.return_value = [admin_user]

        report = service.analytics(admin_user, today=TODAY)

        assert [(d.type, d.label, d.count) for d in report.certificate_type_distribution] == [
            ("NPTEL", "NPTEL Course", 1),
            ("UDEMY", "Udemy Course", 2),
        ]

    def test_token_buckets_always_present(self, service, mock_store, admin_user):
        mock_store.get_certificates.return_value = []
        mock_store.list_users.return_value = [
            _user(1, 0),
            _user(2, 10),
            _user(3, 11),
            _user(4, 30),
            _user(5, 51),
            _user(6, 200),
        ]

        report = service.analytics(admin_user, today=TODAY)

        assert {b.range: b.count for b in report.token_distribution} == {
            "0-10": 2,
            "11-20": 1,
            "21-30": 1,
            "31-50": 0,
            "51+": 2,
        }
        assert [b.range for b in report.token_distribution] == [
            "0-10",
            "11-20",
            "21-30",
            "31-50",
            "51+",
        ]

    def test_daily_activity_last_seven_days(self, service, mock_store, admin_user):
        mock_store.get_certificates.return_value = [
            _certificate(1, "UDEMY", is_verified=True, created=TODAY),
            _certificate(2, "UDEMY", created=TODAY),
            _certificate(3, "NPTEL", is_verified=True, created=TODAY - timedelta(days=6)),
            _certificate(4, "NPTEL", created=TODAY - timedelta(days=7)),
        ]
        mock_store.list_users.return_value = [admin_user]

        report = service.analytics(admin_user, today=TODAY)

        activity = report.daily_activity
        assert len(activity) == 7
        assert activity[0].date == TODAY - timedelta(days=6)
        assert activity[-1].date == TODAY
        assert (activity[0].certificates, activity[0].verifications) == (1, 1)
        assert (activity[-1].certificates, activity[-1].verifications) == (2, 1)
        assert sum(day.certificates for day in activity) == 3

    def test_user_growth_is_measured(self, service, mock_store):
        admin_user = _user(1, is_admin=True, created=TODAY - timedelta(days=30))
        mock_store.get_certificates.return_value = []
        mock_store.list_users.return_value = [
            admin_user,
            _user(2, created=TODAY - timedelta(days=2)),
            _user(3, created=TODAY),
            _user(4, created=TODAY),
        ]

        report = service.analytics(admin_user, today=TODAY)

        growth = report.user_growth
        assert [g.new_users for g in growth] == [0, 0, 0, 0, 1, 0, 2]
        assert [g.cumulative_users for g in growth] == [1, 1, 1, 1, 2, 2, 4]

    def test_total_stats(self, service, mock_store, admin_user):
        mock_store.get_certificates.return_value = [
            _certificate(1, "UDEMY", is_verified=True),
            _certificate(2, "NPTEL"),
        ]
        mock_store.list_users.return_value = [admin_user, _user(2, 3), _user(3, 5)]

        stats = service.analytics(admin_user, today=TODAY).total_stats

        assert stats.total_certificates == 2
        assert stats.verified_certificates == 1
        assert stats.total_tokens_awarded == 8
        assert stats.active_users == 2
