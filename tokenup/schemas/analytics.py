from datetime import date as Date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class CertificateTypeCount(BaseModel):
    type: str
    label: str
    count: int


class TokenBucketCount(BaseModel):
    range: str
    count: int


class DailyActivity(BaseModel):
    date: Date
    certificates: int = Field(..., description="Certificates created that day")
    verifications: int = Field(..., description="Certificates created that day that are verified")


class DailySignups(BaseModel):
    date: Date
    new_users: int
    cumulative_users: int


class TotalStats(BaseModel):
    total_certificates: int
    verified_certificates: int
    total_tokens_awarded: int
    active_users: int


class AnalyticsReport(BaseModel):
    certificate_type_distribution: List[CertificateTypeCount]
    token_distribution: List[TokenBucketCount]
    daily_activity: List[DailyActivity]
    user_growth: List[DailySignups]
    total_stats: TotalStats
    generated_at: datetime


class TokenBalance(BaseModel):
    """Recorded balance and verified-certificate sum read as one unit"""

    user_id: int
    recorded_balance: int
    calculated_balance: int
    verified_certificates: int


class TokenIntegrityCheck(BaseModel):
    """Token balance integrity result"""

    status: str = Field(..., description="OK or MISMATCH")
    user_id: int
    calculated_balance: int = Field(..., description="Sum of verified certificate token values")
    recorded_balance: int
    verified_certificates: int
    adjusted_by: Optional[int] = Field(None, description="Delta applied by a reconcile")
    verified_at: datetime
