from fastapi import APIRouter, Depends

from tokenup.deps import get_data_store
from tokenup.schemas.health import HealthCheckResponse
from tokenup.store.base import DataStore

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
def health_check(store: DataStore = Depends(get_data_store)) -> HealthCheckResponse:
    """Health check endpoint."""

    return HealthCheckResponse(storage_backend=store.name)
