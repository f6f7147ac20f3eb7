from typing import Optional

from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app_logging import app_logger


class Base(DeclarativeBase):
    pass


class Database:
    """
    Owns the engine and the session factory for one database URL.

    A single instance is created by the process bootstrap (FastAPI lifespan) and handed to services;
    tests build their own instance on an in-memory SQLite database.
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.database_url = database_url
        self.engine: Engine = self._create_engine(database_url, echo)
        self.session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    @staticmethod
    def _create_engine(database_url: str, echo: bool) -> Engine:
        if database_url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
                # One shared connection, otherwise every session sees an empty database
                kwargs["poolclass"] = StaticPool
            return create_engine(database_url, echo=echo, **kwargs)
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    def session(self) -> Session:
        return self.session_factory()

    def init_db(self) -> None:
        # Import models so every table is registered on Base.metadata
        from models import user, loan, membership, subscription, payment, bank_partner, content, enquiry  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        app_logger.info(f"Database initialised: {self._masked_url()}")

    def dispose(self) -> None:
        self.engine.dispose()

    def _masked_url(self) -> str:
        url = self.engine.url
        return url.render_as_string(hide_password=True)


def build_database(database_url: Optional[str] = None) -> Database:
    from config import app_config

    return Database(database_url or app_config.DATABASE_URL)
