"""
Application context built once at startup and handed to every request handler.
"""

from dataclasses import dataclass

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.config import Settings
from adapters.storage_adapter import BaseStorageBackend, build_storage_backend
from domain.models.database import create_db_engine, create_session_factory
from services.auth_service import AuthService


@dataclass
class AppContext:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    storage: BaseStorageBackend
    auth: AuthService

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = create_db_engine(settings)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=create_session_factory(engine),
            storage=build_storage_backend(settings),
            auth=AuthService(settings),
        )

    def close(self):
        self.engine.dispose()
