import logging
from typing import Iterator

from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine, Session, SQLModel

logger = logging.getLogger(__name__)


# Helper function to ensure URL format is correct
def get_db_url(url: str) -> str:
    if not url:
        return "sqlite:///todo.db"
    # Ensure URL starts with postgresql:// and does NOT use an async driver
    url = url.replace("postgres://", "postgresql://", 1)
    return url.replace("+asyncpg", "").replace("+aiosqlite", "")


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class Database:
    """
    Owns the engine for the lifetime of the process.

    Built once at application startup and disposed on shutdown; request
    handlers only ever see sessions opened from it.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = get_db_url(url)

        # --- CONFIGURATION FOR SQLITE ---
        if self.url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            # An in-memory database lives inside one connection, so every
            # session has to share it.
            if _is_memory_sqlite(self.url):
                kwargs["poolclass"] = StaticPool
            self.engine = create_engine(self.url, echo=echo, **kwargs)

        # --- CONFIGURATION FOR POSTGRESQL ---
        else:
            self.engine = create_engine(
                self.url,
                echo=echo,
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10
            )

    def create_all(self) -> None:
        # Models must be imported so their tables are registered on the metadata.
        from .. import models  # noqa: F401

        SQLModel.metadata.create_all(self.engine)

    def session(self) -> Iterator[Session]:
        with Session(self.engine) as session:
            yield session

    def dispose(self) -> None:
        logger.info("Releasing database connections")
        self.engine.dispose()
