"""
Admin bearer-token sessions.

Storage is behind `SessionStore` so sessions can live in memory, a cache or
a database without changing callers.
"""

import hmac
import secrets
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from jinvault.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SESSION_TTL = 24 * 60 * 60
TOKEN_BYTES = 32


@dataclass(frozen=True)
class Session:
    token: str
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class SessionStore(ABC):
    """Storage backend for admin sessions."""

    @abstractmethod
    def get(self, token: str) -> Session | None:
        pass

    @abstractmethod
    def set(self, session: Session) -> None:
        pass

    @abstractmethod
    def delete(self, token: str) -> None:
        pass

    @abstractmethod
    def sweep(self, now: float) -> int:
        """Remove expired sessions.

        Returns:
            Number of sessions removed
        """
        pass


class InMemorySessionStore(SessionStore):
    """Process-local store, one instance per SessionManager."""

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def get(self, token: str) -> Session | None:
        return self._sessions.get(token)

    def set(self, session: Session) -> None:
        self._sessions[session.token] = session

    def delete(self, token: str) -> None:
        self._sessions.pop(token, None)

    def sweep(self, now: float) -> int:
        expired = [token for token, s in self._sessions.items() if s.is_expired(now)]
        for token in expired:
            del self._sessions[token]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


class SessionManager:
    """Issues and validates admin sessions against a configured password."""

    def __init__(
        self,
        password: str | None,
        store: SessionStore | None = None,
        ttl: float = DEFAULT_SESSION_TTL,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            password: Admin password; None disables login entirely
            store: Session storage, in-memory when omitted
            ttl: Session lifetime in seconds
            clock: Time source, injectable for tests
        """
        self.password = password
        self.store = store or InMemorySessionStore()
        self.ttl = ttl
        self.clock = clock

    @property
    def enabled(self) -> bool:
        return bool(self.password)

    def login(self, password: str) -> str | None:
        """Create a session if `password` matches.

        Returns:
            64-character hex token, or None on a wrong password
        """
        if not self.enabled:
            logger.warning("Admin login attempted but no admin password is configured")
            return None

        if not hmac.compare_digest(password.encode(), self.password.encode()):
            logger.warning("Admin login failed: invalid password")
            return None

        now = self.clock()
        token = secrets.token_hex(TOKEN_BYTES)
        self.store.set(Session(token=token, created_at=now, expires_at=now + self.ttl))
        logger.info("Admin session created")
        return token

    def validate(self, token: str | None) -> bool:
        """Check a token, dropping it if it has expired."""
        if not token:
            return False

        session = self.store.get(token)
        if session is None:
            return False

        if session.is_expired(self.clock()):
            self.store.delete(token)
            return False
        return True

    def validate_header(self, authorization: str | None) -> bool:
        """Validate an `Authorization: Bearer <token>` header value."""
        if not authorization or not authorization.startswith("Bearer "):
            return False
        return self.validate(authorization[len("Bearer ") :])

    def logout(self, token: str) -> None:
        self.store.delete(token)

    def sweep(self) -> int:
        """Drop expired sessions, meant to be called periodically."""
        removed = self.store.sweep(self.clock())
        if removed:
            logger.info(f"Removed {removed} expired admin sessions")
        return removed
