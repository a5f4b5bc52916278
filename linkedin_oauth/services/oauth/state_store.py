"""CSRF state token storage for the authorization code flow.

A state token is issued once per authorization attempt and may be consumed
exactly once by the matching callback. Unknown, expired and already-consumed
tokens all validate as ``False``.
"""
from __future__ import annotations

import logging
import secrets
import string
import threading
import time
from typing import Callable, Protocol

import redis

from linkedin_oauth.core.exceptions import StateStoreUnavailableError

logger = logging.getLogger(__name__)

STATE_TOKEN_LENGTH = 16
STATE_TOKEN_ALPHABET = string.ascii_letters + string.digits


def generate_state_token(length: int = STATE_TOKEN_LENGTH) -> str:
    """Generate a random alphanumeric state token."""
    return "".join(secrets.choice(STATE_TOKEN_ALPHABET) for _ in range(length))


class StateStore(Protocol):
    """Minimal interface the OAuth client needs from a state store."""

    def issue(self) -> str:  # pragma: no cover - protocol stub
        ...

    def validate_and_consume(self, token: str) -> bool:  # pragma: no cover - protocol stub
        ...


class InMemoryStateStore(StateStore):
    """Process-local store guarded by a single lock.

    Both ``issue`` and ``validate_and_consume`` run under the lock, so a token
    validates at most once even when callbacks arrive concurrently.
    """

    def __init__(
        self,
        ttl_seconds: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._pending: dict[str, float] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def _is_expired(self, issued_at: float, now: float) -> bool:
        return self._ttl is not None and now - issued_at > self._ttl

    def _evict_expired(self, now: float) -> None:
        if self._ttl is None:
            return
        expired = [token for token, issued_at in self._pending.items() if self._is_expired(issued_at, now)]
        for token in expired:
            del self._pending[token]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired OAuth states")

    def issue(self) -> str:
        token = generate_state_token()
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            self._pending[token] = now
        return token

    def validate_and_consume(self, token: str) -> bool:
        if not token:
            return False
        with self._lock:
            issued_at = self._pending.get(token)
            if issued_at is None:
                return False
            del self._pending[token]
            if self._is_expired(issued_at, self._clock()):
                logger.info("Rejected expired OAuth state")
                return False
        return True


class RedisStateStore(StateStore):
    """Redis-backed store shared by every process serving callbacks."""

    KEY_PREFIX = "oauth:state:"
    MAX_ISSUE_ATTEMPTS = 5

    def __init__(self, client: redis.Redis, ttl_seconds: int | None = 600) -> None:
        self._client = client
        self._ttl = ttl_seconds

    def _key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}{token}"

    def issue(self) -> str:
        for _ in range(self.MAX_ISSUE_ATTEMPTS):
            token = generate_state_token()
            # NX keeps a colliding token from resetting a pending attempt
            try:
                created = self._client.set(self._key(token), "1", ex=self._ttl, nx=True)
            except redis.RedisError as e:
                logger.error(f"Redis error issuing OAuth state: {e}")
                raise StateStoreUnavailableError("redis error on issue") from e
            if created:
                return token
            logger.warning("OAuth state collision in Redis, regenerating")
        raise StateStoreUnavailableError("unable to allocate a unique state token")

    def validate_and_consume(self, token: str) -> bool:
        if not token:
            return False
        # GETDEL is atomic, so concurrent callbacks cannot both see the token
        try:
            return self._client.getdel(self._key(token)) is not None
        except redis.RedisError as e:
            logger.error(f"Redis error consuming OAuth state: {e}")
            raise StateStoreUnavailableError("redis error on consume") from e
