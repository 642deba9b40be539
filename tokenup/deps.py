from typing import Iterator

from fastapi import Depends, Request

from tokenup.config import Settings
from tokenup.database.session import session_scope
from tokenup.services.auth_service import AuthService
from tokenup.services.certificate_service import CertificateService
from tokenup.services.engagement_service import EngagementService
from tokenup.services.report_service import ReportService
from tokenup.services.user_service import UserService
from tokenup.store.base import DataStore
from tokenup.store.sql import SqlDataStore


def get_settings_dep(request: Request) -> Settings:
    return request.app.container.config.config()


def get_data_store(
    request: Request, settings: Settings = Depends(get_settings_dep)
) -> Iterator[DataStore]:
    """One store per request; the SQL store owns one session for its lifetime."""
    database = request.app.container.database
    if settings.uses_memory_store:
        yield database.memory_store()
        return

    with session_scope(database.session_factory()) as db:
        yield SqlDataStore(db)


def get_auth_service(
    request: Request, store: DataStore = Depends(get_data_store)
) -> AuthService:
    return request.app.container.services.auth_service(store=store)


def get_user_service(
    request: Request, store: DataStore = Depends(get_data_store)
) -> UserService:
    return request.app.container.services.user_service(store=store)


def get_certificate_service(
    request: Request, store: DataStore = Depends(get_data_store)
) -> CertificateService:
    return request.app.container.services.certificate_service(store=store)


def get_engagement_service(
    request: Request, store: DataStore = Depends(get_data_store)
) -> EngagementService:
    return request.app.container.services.engagement_service(store=store)


def get_report_service(
    request: Request, store: DataStore = Depends(get_data_store)
) -> ReportService:
    return request.app.container.services.report_service(store=store)
