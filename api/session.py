"""Keystream session storage: signed tokens over a Redis or in-memory store.

A session is a small JSON document (the deck order and round counter) keyed
by a random ID. Clients never see the raw ID, only a token signed with the
service secret, so a deck cannot be reached by guessing IDs.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable
from uuid import uuid4

import redis.asyncio as redis
from itsdangerous import BadSignature, URLSafeTimedSerializer
from redis.exceptions import RedisError

from config import config

logger = logging.getLogger(__name__)

SessionData = dict[str, Any]


class SessionSigner:
    """Turns raw session IDs into tamper-proof tokens and back."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._serializer = URLSafeTimedSerializer(
            secret_key or config.security.secret_key,
            salt="keystream-session",
        )

    def sign(self, session_id: str) -> str:
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Recover the session ID carried by a token.

        Tokens older than ``max_age`` seconds (default: the session TTL) are
        refused along with forged ones; both yield None.
        """
        try:
            return self._serializer.loads(token, max_age=max_age or config.session_ttl)
        except BadSignature:
            # SignatureExpired is a BadSignature
            return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Return the process-wide signer, creating it on first use."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


class SessionStore(ABC):
    """Where keystream sessions live between requests."""

    @abstractmethod
    async def get(self, session_id: str) -> SessionData | None:
        """Return a live session's data, or None if unknown or expired."""

    @abstractmethod
    async def set(self, session_id: str, data: SessionData, ttl: int | None = None) -> None:
        """Store a session's data and restart its time to live."""

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """Forget a session; unknown IDs are ignored."""

    def new_session_id(self) -> str:
        return uuid4().hex


class InMemorySessionStore(SessionStore):
    """
    Process-local store used when Redis is unreachable.

    Entries carry a monotonic deadline. Expired entries are dropped when
    read, and every write sweeps the others, so sessions that are abandoned
    without being closed do not accumulate.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[SessionData, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, session_id: str) -> SessionData | None:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        data, deadline = entry
        if deadline <= self._clock():
            del self._entries[session_id]
            return None
        return data

    async def set(self, session_id: str, data: SessionData, ttl: int | None = None) -> None:
        now = self._clock()
        self._evict_expired(now)
        self._entries[session_id] = (data, now + (ttl or config.session_ttl))

    async def delete(self, session_id: str) -> None:
        self._entries.pop(session_id, None)

    def _evict_expired(self, now: float) -> None:
        expired = [sid for sid, (_, deadline) in self._entries.items() if deadline <= now]
        for sid in expired:
            del self._entries[sid]
        if expired:
            logger.debug("Evicted %d expired sessions", len(expired))


class RedisSessionStore(SessionStore):
    """Store sessions as JSON strings under ``solitaire:session:<id>``; Redis expires them."""

    prefix = "solitaire:session:"

    def __init__(self, redis_client: redis.Redis) -> None:
        self._redis = redis_client

    async def get(self, session_id: str) -> SessionData | None:
        raw = await self._redis.get(self.prefix + session_id)
        return None if raw is None else json.loads(raw)

    async def set(self, session_id: str, data: SessionData, ttl: int | None = None) -> None:
        await self._redis.setex(
            self.prefix + session_id,
            ttl or config.session_ttl,
            json.dumps(data),
        )

    async def delete(self, session_id: str) -> None:
        await self._redis.delete(self.prefix + session_id)


_session_store: SessionStore | None = None


async def get_session_store() -> SessionStore:
    """Return the active store, connecting to Redis on first use if it answers."""
    global _session_store

    if _session_store is None:
        client = redis.from_url(config.redis.url)
        try:
            await client.ping()
        except (RedisError, OSError) as exc:
            logger.warning(
                "Redis unavailable at %s (%s); keeping sessions in memory",
                config.redis.url,
                exc,
            )
            _session_store = InMemorySessionStore()
        else:
            _session_store = RedisSessionStore(client)
    return _session_store


def set_session_store(store: SessionStore | None) -> None:
    """Install a specific store; None makes the next call detect one again."""
    global _session_store
    _session_store = store


async def create_session(data: SessionData) -> str:
    """Persist a new session and return the signed token that names it."""
    store = await get_session_store()
    session_id = store.new_session_id()
    await store.set(session_id, data)
    logger.info("Opened keystream session %s", session_id)
    return get_session_signer().sign(session_id)


async def get_session(session_id: str) -> SessionData | None:
    return await (await get_session_store()).get(session_id)


async def update_session(session_id: str, data: SessionData) -> None:
    await (await get_session_store()).set(session_id, data)


async def delete_session(session_id: str) -> None:
    await (await get_session_store()).delete(session_id)
    logger.info("Closed keystream session %s", session_id)


def extract_session_id(token: str) -> str | None:
    """Raw session ID for a client token, or None if it is forged or too old."""
    return get_session_signer().unsign(token)
