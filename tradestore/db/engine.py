"""
Store connection management.

Uses synchronous SQLAlchemy with the NullPool pattern: every operation opens
its own connection to the SQLite file and closes it on exit, so nothing is
held between calls.

The pysqlite driver's own transaction handling is switched off and an
explicit BEGIN is emitted for every SQLAlchemy transaction, which makes DDL
batches (DROP + CREATE) atomic alongside ordinary writes.
"""

from contextlib import contextmanager
from typing import Dict, Generator, Optional
import logging

from pydantic import BaseModel, ConfigDict
from sqlalchemy import event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import NullPool
from sqlmodel import create_engine

from tradestore.core.config import Settings, settings

# Configure logger
logger = logging.getLogger(__name__)


class StoreConfig(BaseModel):
    """Explicit configuration handle for one SQLite store file."""

    model_config = ConfigDict(frozen=True)

    database_path: str = ""
    echo: bool = False
    busy_timeout_seconds: float = 5.0
    lock_retries: int = 3

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None) -> "StoreConfig":
        source = source or settings
        return cls(
            database_path=source.TRADESTORE_DATABASE_PATH,
            echo=source.DEBUG,
            busy_timeout_seconds=source.STORE_BUSY_TIMEOUT_SECONDS,
            lock_retries=source.STORE_LOCK_RETRIES,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.database_path)

    @property
    def url(self) -> str:
        return f"sqlite:///{self.database_path}"


def _enable_transactional_ddl(engine: Engine) -> None:
    """Let SQLAlchemy own BEGIN/COMMIT instead of the pysqlite driver."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_store_engine(config: StoreConfig) -> Engine:
    """Create an engine for the store file named by ``config``.

    Raises:
        ValueError: The config carries no database path
    """
    if not config.is_configured:
        raise ValueError("Store database path is not set")

    engine = create_engine(
        config.url,
        poolclass=NullPool,      # One connection per operation, closed on release
        echo=config.echo,        # Log SQL statements when DEBUG=true
        connect_args={
            "timeout": config.busy_timeout_seconds,
        },
    )
    _enable_transactional_ddl(engine)

    logger.debug(f"Store engine configured for {config.database_path} (NullPool)")
    return engine


_engines: Dict[StoreConfig, Engine] = {}


def get_engine(config: StoreConfig) -> Engine:
    """Engine for a config, created once per distinct config."""
    engine = _engines.get(config)
    if engine is None:
        engine = create_store_engine(config)
        _engines[config] = engine
    return engine


def dispose_engines() -> None:
    """Dispose every cached engine (tests and shutdown)."""
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()


@contextmanager
def get_connection(config: StoreConfig) -> Generator[Connection, None, None]:
    """
    Scoped connection without a committed transaction.

    Use for reads; anything left open is rolled back when the block exits.

    Usage:
        with get_connection(config) as conn:
            rows = conn.execute(text("SELECT * FROM Trade")).mappings().all()

    Yields:
        Connection: Open store connection
    """
    with get_engine(config).connect() as conn:
        yield conn


@contextmanager
def get_transaction(config: StoreConfig) -> Generator[Connection, None, None]:
    """
    Scoped connection inside one transaction.

    Commits when the block exits normally, rolls back on any exception.

    Usage:
        with get_transaction(config) as conn:
            for stmt in statements:
                conn.execute(text(stmt.sql), stmt.params)
            # Auto-commits on context exit

    Yields:
        Connection: Store connection with an open transaction
    """
    with get_engine(config).begin() as conn:
        yield conn
