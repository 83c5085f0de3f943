"""Database connection, session and transaction management."""

from contextlib import contextmanager
from typing import Callable, Generator, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from formproof.logging_config import get_logger
from formproof.settings import settings
from formproof.storage.models import Base

logger = get_logger(__name__)

T = TypeVar("T")

# Errors meaning another transaction touched the same rows first
CONFLICT_ERRORS = (StaleDataError, IntegrityError)

# SQLSTATE serialization_failure and deadlock_detected
CONFLICT_SQLSTATES = {"40001", "40P01"}
LOCK_ERROR_MARKERS = (
    "database is locked",
    "database table is locked",
    "deadlock",
    "could not serialize",
    "lock wait timeout",
)


def is_write_conflict(exc: BaseException) -> bool:
    """Tell whether ``exc`` is a lost race that a fresh attempt can win.

    Operational errors only count when the driver reports a lock or
    serialization failure. Anything else (missing tables, bad credentials)
    surfaces on the first attempt.
    """
    if isinstance(exc, CONFLICT_ERRORS):
        return True
    if not isinstance(exc, OperationalError):
        return False
    orig = exc.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in CONFLICT_SQLSTATES:
        return True
    message = str(orig).lower()
    return any(marker in message for marker in LOCK_ERROR_MARKERS)


class Database:
    """Database connection manager."""

    def __init__(self, database_url: str | None = None, max_attempts: int | None = None):
        """Initialize database connection.

        Args:
            database_url: Database URL (defaults to settings)
            max_attempts: Attempts per transaction before a conflict is raised
        """
        self.database_url = database_url or settings.database_url
        self.max_attempts = max_attempts or settings.transaction_max_attempts

        connect_args = {}
        if self.database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        self.engine = create_engine(
            self.database_url,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )
        logger.info("database_initialized", url=self.engine.url.render_as_string(hide_password=True))

    def create_tables(self) -> None:
        """Create all tables in the database."""
        # Register mapped classes with Base.metadata
        from formproof.ledger import models as _ledger_models  # noqa: F401
        from formproof.referral import models as _referral_models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("tables_created")

    def drop_tables(self) -> None:
        """Drop all tables from the database."""
        from formproof.ledger import models as _ledger_models  # noqa: F401
        from formproof.referral import models as _referral_models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)
        logger.warning("tables_dropped")

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide a transactional scope for database operations.

        Yields:
            Database session
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def run_transaction(self, fn: Callable[[Session], T]) -> T:
        """Run ``fn`` in a transaction, re-running it on write conflicts.

        ``fn`` receives a fresh session on every attempt and must do all of
        its reads through it. Any other exception aborts the transaction and
        propagates without a retry.

        Args:
            fn: Read-modify-write body

        Returns:
            Whatever ``fn`` returns on the committed attempt
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.05, max=1),
            retry=retry_if_exception(is_write_conflict),
            before_sleep=_log_conflict,
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                with self.session() as session:
                    return fn(session)
        raise AssertionError("unreachable")  # pragma: no cover


def _log_conflict(retry_state) -> None:
    logger.warning(
        "transaction_conflict_retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()),
    )


_default_db: Database | None = None


def get_database() -> Database:
    """Return the process-wide database built from settings."""
    global _default_db
    if _default_db is None:
        _default_db = Database()
    return _default_db
