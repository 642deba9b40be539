from fastapi import APIRouter, Depends

from tokenup.core.auth_middleware import get_current_user
from tokenup.deps import get_report_service
from tokenup.schemas.analytics import AnalyticsReport
from tokenup.schemas.user import User as UserSchema
from tokenup.services.report_service import ReportService

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsReport)
def get_analytics(
    current_user: UserSchema = Depends(get_current_user),
    report_service: ReportService = Depends(get_report_service),
) -> AnalyticsReport:
    return report_service.analytics(current_user)
