import logging
import threading
from concurrent.futures import Future
from typing import Iterator, Optional

from fastapi import Depends, Request
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import Session, SQLModel, create_engine, text


logger = logging.getLogger(__name__)

# Fixed pool configuration; not tunable per call.
POOL_SIZE = 10
POOL_TIMEOUT = 5  # seconds to wait for a pooled connection
CONNECT_TIMEOUT = 5  # seconds to establish a new connection
POOL_RECYCLE = 45  # seconds before an idle connection is replaced


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///") or ":memory:" in url


def build_engine(url: str, echo: bool = False) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": CONNECT_TIMEOUT},
            # in-memory databases live inside one connection, so share it
            poolclass=StaticPool if _is_memory_sqlite(url) else NullPool,
        )
    return create_engine(
        url,
        echo=echo,
        pool_size=POOL_SIZE,
        pool_timeout=POOL_TIMEOUT,
        pool_recycle=POOL_RECYCLE,
        pool_pre_ping=True,
        connect_args={"connect_timeout": CONNECT_TIMEOUT},
    )


def init_db(engine: Engine) -> None:
    """Create any missing tables."""
    from .models import budget, transaction  # noqa: F401  (register tables)

    SQLModel.metadata.create_all(engine)


class Database:
    """Process-wide database handle.

    ``connect()`` is safe to call on every request: the first caller opens the
    engine and verifies it with a round trip, concurrent callers wait on that
    same attempt, and a failed attempt is forgotten so the next call retries.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._attempt: Optional[Future] = None
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        return self._engine is not None

    def connect(self) -> Engine:
        if self._engine is not None:
            return self._engine

        with self._lock:
            if self._engine is not None:
                return self._engine
            attempt = self._attempt
            owner = attempt is None
            if owner:
                attempt = self._attempt = Future()

        if owner:
            try:
                engine = self._open()
            except Exception as exc:
                logger.error("Database connection error: %s", exc)
                with self._lock:
                    self._attempt = None
                attempt.set_exception(exc)
            else:
                logger.info("Connected to database")
                with self._lock:
                    self._engine = engine
                    self._attempt = None
                attempt.set_result(engine)

        return attempt.result()

    def _open(self) -> Engine:
        engine = build_engine(self.url, echo=self.echo)
        try:
            with engine.connect() as conn:
                if self.url.startswith("sqlite") and not _is_memory_sqlite(self.url):
                    conn.exec_driver_sql("PRAGMA journal_mode=WAL;")
                conn.execute(text("SELECT 1"))
            init_db(engine)
        except Exception:
            engine.dispose()
            raise
        return engine

    def dispose(self) -> None:
        with self._lock:
            engine, self._engine = self._engine, None
        if engine is not None:
            engine.dispose()
            logger.info("Database connection closed")


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_session(database: Database = Depends(get_database)) -> Iterator[Session]:
    with Session(database.connect()) as session:
        yield session
