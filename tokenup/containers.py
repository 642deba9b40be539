from dependency_injector import containers, providers

from tokenup.config import get_settings
from tokenup.database.connection import create_db_engine, create_session_factory
from tokenup.services.auth_service import AuthService
from tokenup.services.certificate_service import CertificateService
from tokenup.services.engagement_service import EngagementService
from tokenup.services.report_service import ReportService
from tokenup.services.user_service import UserService
from tokenup.store.memory import MemoryDataStore


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(get_settings)


class DatabaseModule(containers.DeclarativeContainer):
    """Storage backends. The SQL store itself is built per request."""

    config = providers.DependenciesContainer()

    engine = providers.Singleton(create_db_engine, settings=config.config)
    session_factory = providers.Singleton(create_session_factory, engine=engine)
    memory_store = providers.Singleton(MemoryDataStore)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies. Callers pass ``store=`` per request."""

    config = providers.DependenciesContainer()

    auth_service = providers.Factory(AuthService, settings=config.config)
    user_service = providers.Factory(UserService)
    certificate_service = providers.Factory(CertificateService, settings=config.config)
    engagement_service = providers.Factory(EngagementService, settings=config.config)
    report_service = providers.Factory(ReportService, settings=config.config)


class Container(containers.DeclarativeContainer):
    """Application container."""

    config = providers.Container(ConfigModule)
    database = providers.Container(DatabaseModule, config=config)
    services = providers.Container(ServiceModule, config=config)
