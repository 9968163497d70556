"""Retry, write-guard and admission control around database access."""

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, TypeVar

from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session

from tvtantrum_catalog_service.config import get_read_retry_attempts, get_read_retry_base_delay
from tvtantrum_catalog_service.errors import CapacityError, StorageUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS = (
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    sa_exc.DisconnectionError,
)


def is_transient_storage_error(error: BaseException) -> bool:
    """True for dropped connections and similar errors worth retrying."""
    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return True
    return isinstance(error, TRANSIENT_ERRORS)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for idempotent reads."""
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 5.0

    @classmethod
    def from_config(cls) -> "RetryPolicy":
        return cls(
            max_attempts=max(1, get_read_retry_attempts()),
            base_delay=get_read_retry_base_delay(),
        )

    def delay_for(self, attempt: int) -> float:
        """Delay before the attempt following ``attempt`` (1-based)."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)


def call_with_retry(
        operation: Callable[[], T],
        policy: Optional[RetryPolicy] = None,
        description: str = "read"
) -> T:
    """
    Run an idempotent read, retrying transient storage errors.

    Args:
        operation: Zero-argument callable; it must open its own session so
            each attempt gets a fresh connection
        policy: Retry policy (default: from config)
        description: Label used in log messages

    Returns:
        Whatever operation returns

    Raises:
        CapacityError: The connection pool timed out
        StorageUnavailableError: Every attempt hit a transient error
    """
    policy = policy or RetryPolicy.from_config()

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return operation()
        except sa_exc.TimeoutError as e:
            logger.warning(f"Connection pool exhausted during {description}")
            raise CapacityError("Database connection pool exhausted") from e
        except sa_exc.SQLAlchemyError as e:
            if not is_transient_storage_error(e):
                raise
            logger.warning(
                f"Transient storage error during {description} "
                f"(attempt {attempt}/{policy.max_attempts}): {e}"
            )
            if attempt >= policy.max_attempts:
                raise StorageUnavailableError(
                    f"Storage unavailable after {attempt} attempts"
                ) from e
            time.sleep(policy.delay_for(attempt))

    # max_attempts is always >= 1, so the loop returns or raises
    raise StorageUnavailableError("No read attempts were made")


def run_read(
        session_factory: Callable[[], Session],
        work: Callable[[Session], T],
        policy: Optional[RetryPolicy] = None,
        description: str = "read"
) -> T:
    """Run ``work`` in a fresh session per attempt, with read retries."""
    def attempt() -> T:
        db = session_factory()
        try:
            return work(db)
        finally:
            db.close()

    return call_with_retry(attempt, policy, description)


@contextmanager
def guarded_write(db: Session, description: str = "write") -> Iterator[Session]:
    """
    Wrap a write so storage failures roll back and surface as catalog errors.

    Writes are never retried; a dropped connection could otherwise apply
    the same mutation twice.
    """
    try:
        yield db
    except sa_exc.TimeoutError as e:
        db.rollback()
        logger.warning(f"Connection pool exhausted during {description}")
        raise CapacityError("Database connection pool exhausted") from e
    except sa_exc.SQLAlchemyError as e:
        db.rollback()
        if is_transient_storage_error(e):
            logger.error(f"Storage unavailable during {description}: {e}")
            raise StorageUnavailableError(f"Storage unavailable during {description}") from e
        raise


class RequestGate:
    """
    Caps how many requests run at once in this process.

    Requests over the cap are rejected immediately rather than queued, so
    latency stays bounded during traffic spikes.
    """

    def __init__(self, max_concurrent: int = 1000, retry_after: int = 5):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.max_concurrent = max_concurrent
        self.retry_after = retry_after
        self._semaphore = threading.BoundedSemaphore(max_concurrent)
        self._lock = threading.Lock()
        self._active = 0

    @property
    def active(self) -> int:
        return self._active

    @contextmanager
    def admit(self) -> Iterator[None]:
        """Hold a slot for the duration of the block, or raise CapacityError."""
        if not self._semaphore.acquire(blocking=False):
            logger.warning(f"Rejecting request: {self.max_concurrent} requests already in flight")
            raise CapacityError("Too many concurrent requests", retry_after=self.retry_after)
        with self._lock:
            self._active += 1
        try:
            yield
        finally:
            with self._lock:
                self._active -= 1
            self._semaphore.release()
