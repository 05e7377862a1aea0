from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from utils.exceptions import StoreTimeoutError, StoreUnavailableError
from utils.logging_utils import get_sanitized_logger

logger = get_sanitized_logger(__name__)

_TIMEOUT_MARKERS = ("timeout", "timed out", "canceling statement", "database is locked")


class BaseRepositoryImpl:
    """
    Opens one short-lived session per store operation from the shared
    session factory and translates driver failures into store errors.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except PoolTimeoutError as e:
            session.rollback()
            logger.error(f"Store timeout waiting for a connection: {e}")
            raise StoreTimeoutError("Catalog store timed out") from e
        except OperationalError as e:
            session.rollback()
            if any(marker in str(e.orig).lower() for marker in _TIMEOUT_MARKERS):
                logger.error(f"Store call timed out: {e.orig}")
                raise StoreTimeoutError("Catalog store timed out") from e
            logger.error(f"Store unavailable: {e.orig}")
            raise StoreUnavailableError("Catalog store unavailable") from e
        except DBAPIError as e:
            session.rollback()
            logger.error(f"Store error: {e.orig}")
            raise StoreUnavailableError("Catalog store unavailable") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
