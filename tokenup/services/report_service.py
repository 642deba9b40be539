import logging
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import List, Mapping, Optional, Tuple

from tokenup.config import Settings
from tokenup.core.certificate_types import CERTIFICATE_TYPES, CertificateTypeInfo
from tokenup.core.exceptions import AuthorizationError
from tokenup.schemas.analytics import (
    AnalyticsReport,
    CertificateTypeCount,
    DailyActivity,
    DailySignups,
    TokenBucketCount,
    TotalStats,
)
from tokenup.schemas.user import User
from tokenup.store.base import DataStore

logger = logging.getLogger(__name__)

# (label, lower bound, upper bound inclusive; None means open-ended)
TOKEN_BUCKETS: Tuple[Tuple[str, int, Optional[int]], ...] = (
    ("0-10", 0, 10),
    ("11-20", 11, 20),
    ("21-30", 21, 30),
    ("31-50", 31, 50),
    ("51+", 51, None),
)

ACTIVITY_WINDOW_DAYS = 7


def _utc_date(value: datetime) -> date:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).date()


def _bucket_label(total_tokens: int) -> str:
    for label, low, high in TOKEN_BUCKETS:
        if total_tokens >= low and (high is None or total_tokens <= high):
            return label
    return TOKEN_BUCKETS[0][0]


class ReportService:
    """Read-only rollups computed from the store on every request."""

    def __init__(
        self,
        store: DataStore,
        settings: Settings,
        certificate_types: Mapping[str, CertificateTypeInfo] = CERTIFICATE_TYPES,
    ):
        self.store = store
        self.settings = settings
        self.certificate_types = certificate_types

    def leaderboard(self, limit: Optional[int] = None) -> List[User]:
        if limit is None:
            limit = self.settings.LEADERBOARD_DEFAULT_LIMIT
        limit = max(0, min(limit, self.settings.LEADERBOARD_MAX_LIMIT))
        return self.store.get_top_users(limit)

    def analytics(self, acting_user: User, today: Optional[date] = None) -> AnalyticsReport:
        """Certificate, token and activity rollups. Admin only.

        Every figure comes from stored rows and timestamps; nothing is
        extrapolated.
        """
        if not acting_user.is_admin:
            raise AuthorizationError("Admin access required for analytics")

        today = today or datetime.now(timezone.utc).date()
        certificates = self.store.get_certificates()
        users = self.store.list_users()

        type_counts = Counter(c.certificate_type for c in certificates)
        type_distribution = [
            CertificateTypeCount(type=key, label=info.label, count=type_counts[key])
            for key, info in self.certificate_types.items()
            if type_counts[key] > 0
        ]
        # types no longer in the table still show up rather than vanish
        type_distribution.extend(
            CertificateTypeCount(type=key, label=key, count=count)
            for key, count in sorted(type_counts.items())
            if key not in self.certificate_types
        )

        bucket_counts = Counter(_bucket_label(u.total_tokens) for u in users)
        token_distribution = [
            TokenBucketCount(range=label, count=bucket_counts[label])
            for label, _, _ in TOKEN_BUCKETS
        ]

        days = [
            today - timedelta(days=offset)
            for offset in range(ACTIVITY_WINDOW_DAYS - 1, -1, -1)
        ]
        created_per_day: Counter = Counter()
        verified_per_day: Counter = Counter()
        for certificate in certificates:
            day = _utc_date(certificate.created_at)
            created_per_day[day] += 1
            if certificate.is_verified:
                verified_per_day[day] += 1
        daily_activity = [
            DailyActivity(
                date=day,
                certificates=created_per_day[day],
                verifications=verified_per_day[day],
            )
            for day in days
        ]

        signup_days = [_utc_date(u.created_at) for u in users]
        signups_per_day = Counter(signup_days)
        user_growth = [
            DailySignups(
                date=day,
                new_users=signups_per_day[day],
                cumulative_users=sum(1 for d in signup_days if d <= day),
            )
            for day in days
        ]

        total_stats = TotalStats(
            total_certificates=len(certificates),
            verified_certificates=sum(1 for c in certificates if c.is_verified),
            total_tokens_awarded=sum(u.total_tokens for u in users),
            active_users=sum(1 for u in users if u.total_tokens > 0),
        )
        logger.info(
            f"Analytics generated for admin {acting_user.id}: "
            f"{total_stats.total_certificates} certificates, {len(users)} users"
        )
        return AnalyticsReport(
            certificate_type_distribution=type_distribution,
            token_distribution=token_distribution,
            daily_activity=daily_activity,
            user_growth=user_growth,
            total_stats=total_stats,
            generated_at=datetime.now(timezone.utc),
        )
