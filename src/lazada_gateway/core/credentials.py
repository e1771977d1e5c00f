"""
Credential persistence for the connected Lazada seller.

The store keeps the one credential row in the database and serves reads from
an in-memory copy while that copy is present and unexpired. Writes commit
first and only then swap the cached reference, so concurrent readers see
either the old or the new credential.
"""

import datetime
import logging
import threading
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from lazada_gateway.core.client import utc_now
from lazada_gateway.core.errors import StoreUnavailable
from lazada_gateway.core.models import CREDENTIAL_ROW_ID, Credential, LazadaCredentialRecord

logger = logging.getLogger("credentials")


def is_expired(credential: Credential, now: datetime.datetime) -> bool:
    """Return True when ``now >= credential.expires_at``."""
    return credential.is_expired(now)


class CredentialStore:
    """Interface for credential persistence."""

    def load(self) -> Optional[Credential]:
        """Return the stored credential, or None if none was ever saved."""
        raise NotImplementedError

    def save(self, credential: Credential) -> None:
        """Replace any stored credential with ``credential``."""
        raise NotImplementedError

    def is_expired(self, credential: Credential, now: datetime.datetime) -> bool:
        return is_expired(credential, now)


class SqlCredentialStore(CredentialStore):
    """SQLAlchemy backed store with a lock-guarded read cache."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        clock: Callable[[], datetime.datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self._lock = threading.Lock()
        self._cached: Optional[Credential] = None

    def load(self) -> Optional[Credential]:
        """
        Return the cached credential while it is unexpired, else read the database.

        An absent or expired result is never served from memory, so a
        credential saved by another worker on the same database is picked up.
        """
        with self._lock:
            cached = self._cached
        if cached is not None and not cached.is_expired(self._clock()):
            return cached

        try:
            with self._session_factory() as db:
                record = db.get(LazadaCredentialRecord, CREDENTIAL_ROW_ID)
                credential = Credential.from_record(record) if record else None
        except SQLAlchemyError as e:
            logger.error("Error reading Lazada credential: %s", e)
            raise StoreUnavailable("Credential store is not readable") from e

        with self._lock:
            # A save may have landed while we were reading; it wins.
            if self._cached is cached:
                self._cached = credential
            return self._cached

    def save(self, credential: Credential) -> None:
        try:
            with self._session_factory() as db:
                db.merge(credential.to_record())
                db.commit()
        except SQLAlchemyError as e:
            logger.error("Error writing Lazada credential: %s", e)
            raise StoreUnavailable("Credential store is not writable") from e

        with self._lock:
            self._cached = credential
        logger.info("Stored Lazada credential expiring at %s", credential.expires_at.isoformat())

    def invalidate(self) -> None:
        """Drop the cached copy so the next load reads the database."""
        with self._lock:
            self._cached = None
