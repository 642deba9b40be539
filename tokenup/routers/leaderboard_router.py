from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from tokenup.deps import get_report_service
from tokenup.schemas.user import User as UserSchema
from tokenup.services.report_service import ReportService

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("", response_model=List[UserSchema])
def get_leaderboard(
    limit: Optional[int] = Query(None, description="Clamped to 0..LEADERBOARD_MAX_LIMIT"),
    report_service: ReportService = Depends(get_report_service),
) -> List[UserSchema]:
    """Users ranked by total tokens, ties broken by earliest account"""
    return report_service.leaderboard(limit)
