"""Keystream API endpoints."""

import asyncio
import time
import weakref
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, HTTPException

from api.schemas import (
    CardResponse,
    DeckResponse,
    NewStreamRequest,
    NewStreamResponse,
    StreamRequest,
    StreamResponse,
    ValueResponse,
)
from api.session import (
    create_session,
    delete_session,
    extract_session_id,
    get_session,
    update_session,
)
from config import config
from solitaire.cards import JOKER_A, JOKER_B, DeckIntegrityError, card_label, is_joker
from solitaire.engine import SolitaireEngine

router = APIRouter()

# Session data keys
SESSION_KEY_DECK = "deck"
SESSION_KEY_ROUNDS = "rounds"
SESSION_KEY_CREATED_AT = "created_at"
SESSION_KEY_LAST_ACTIVITY = "last_activity"

# One lock per session: load, advance and save run as a single critical section.
# Held weakly, so a lock lives only while a request holds or awaits it.
_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()


def _session_lock(session_id: str) -> asyncio.Lock:
    """Get the lock guarding a session's deck."""
    lock = _locks.get(session_id)
    if lock is None:
        lock = _locks[session_id] = asyncio.Lock()
    return lock


async def _session_id(
    token: Annotated[str, Header(alias="X-Session-ID")],
) -> str:
    """Resolve the signed session header to a raw session ID."""
    session_id = extract_session_id(token)
    if session_id is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session token")
    return session_id


def _serialize_engine(engine: SolitaireEngine, rounds: int) -> dict[str, Any]:
    """Serialize engine state for session storage."""
    return {
        SESSION_KEY_DECK: list(engine.deck),
        SESSION_KEY_ROUNDS: rounds,
    }


def _deserialize_engine(data: dict[str, Any]) -> tuple[SolitaireEngine, int]:
    """
    Restore an engine and its round count from session data.

    Raises:
        DeckIntegrityError: If the stored deck is not a complete deck
    """
    try:
        engine = SolitaireEngine.from_order(data[SESSION_KEY_DECK])
    except ValueError as exc:
        raise DeckIntegrityError(f"Stored deck is corrupt: {exc}") from exc
    return engine, int(data.get(SESSION_KEY_ROUNDS, 0))


async def _load(session_id: str) -> tuple[SolitaireEngine, int, dict[str, Any]]:
    """Load a session's engine, or 404 if the session is gone."""
    session_data = await get_session(session_id)
    if not session_data or SESSION_KEY_DECK not in session_data:
        raise HTTPException(status_code=404, detail="Session not found")
    engine, rounds = _deserialize_engine(session_data)
    return engine, rounds, session_data


async def _save(
    session_id: str,
    engine: SolitaireEngine,
    rounds: int,
    session_data: dict[str, Any],
) -> None:
    """Save engine state back to the session store."""
    session_data.update(_serialize_engine(engine, rounds))
    session_data[SESSION_KEY_LAST_ACTIVITY] = int(time.time())
    session_data.setdefault(SESSION_KEY_CREATED_AT, int(time.time()))
    await update_session(session_id, session_data)


def _deck_response(engine: SolitaireEngine, rounds: int) -> DeckResponse:
    """Convert engine state to response."""
    deck = engine.deck
    return DeckResponse(
        order=list(deck),
        cards=[
            CardResponse(card=c, label=card_label(c), is_joker=is_joker(c))
            for c in deck
        ],
        joker_a_index=deck.index(JOKER_A),
        joker_b_index=deck.index(JOKER_B),
        rounds=rounds,
    )


@router.post("/new")
async def new_stream(request: NewStreamRequest | None = None) -> NewStreamResponse:
    """Create a new keystream session."""
    order = request.order if request is not None else None
    engine = SolitaireEngine(order)
    now = int(time.time())
    data = _serialize_engine(engine, 0)
    data[SESSION_KEY_CREATED_AT] = now
    data[SESSION_KEY_LAST_ACTIVITY] = now
    token = await create_session(data)
    return NewStreamResponse(session_id=token)


@router.get("/deck")
async def get_deck(session_id: Annotated[str, Depends(_session_id)]) -> DeckResponse:
    """Get the current deck of a session."""
    engine, rounds, _ = await _load(session_id)
    return _deck_response(engine, rounds)


@router.post("/next")
async def next_value(session_id: Annotated[str, Depends(_session_id)]) -> ValueResponse:
    """Run one round and return its value (0 when no value was produced)."""
    async with _session_lock(session_id):
        engine, rounds, session_data = await _load(session_id)
        value = engine.advance_and_emit()
        rounds += 1
        await _save(session_id, engine, rounds, session_data)
    return ValueResponse(value=value, rounds=rounds)


@router.post("/stream")
async def stream(
    request: StreamRequest,
    session_id: Annotated[str, Depends(_session_id)],
) -> StreamResponse:
    """Produce a batch of values from a session."""
    if request.count > config.keystream.max_batch:
        raise HTTPException(
            status_code=422,
            detail=f"count must not exceed {config.keystream.max_batch}",
        )

    async with _session_lock(session_id):
        engine, rounds, session_data = await _load(session_id)
        values = []
        while len(values) < request.count:
            value = engine.advance_and_emit()
            rounds += 1
            if value or not request.skip_empty:
                values.append(value)
        await _save(session_id, engine, rounds, session_data)
    return StreamResponse(values=values, rounds=rounds)


@router.delete("/session", status_code=204)
async def close_stream(session_id: Annotated[str, Depends(_session_id)]) -> None:
    """Discard a session and its deck."""
    async with _session_lock(session_id):
        await delete_session(session_id)
