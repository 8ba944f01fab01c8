"""Solitaire keystream engine."""

import logging
import threading
from typing import Iterable

from solitaire.cards import (
    IDENTITY_ORDER,
    JOKER_A,
    JOKER_B,
    NO_OUTPUT,
    check_integrity,
    parse_order,
)
from solitaire.events import DeckEvent, EventEmitter, EventHandler, StepType
from solitaire.steps import count_cut, move_down, output_value, triple_cut

logger = logging.getLogger(__name__)


class SolitaireEngine:
    """
    Keystream generator driven by a 54-card deck.

    The deck order is the only state. Each call to advance_and_emit runs the
    full round under a lock and commits the new order only after the round
    has completed and the deck has passed its integrity check, so callers
    never observe a partially permuted deck.
    """

    def __init__(self, order: Iterable[int] | None = None) -> None:
        """
        Initialize an engine.

        Args:
            order: Starting order, top card first (identity order if omitted)

        Raises:
            ValueError: If order is not a permutation of 1..54
        """
        self._deck: tuple[int, ...] = IDENTITY_ORDER if order is None else parse_order(order)
        self._lock = threading.Lock()
        self.events = EventEmitter()

    @classmethod
    def initialize(cls) -> "SolitaireEngine":
        """Create an engine with the deck in identity order."""
        return cls()

    @classmethod
    def from_order(cls, order: Iterable[int]) -> "SolitaireEngine":
        """Create an engine that continues from a saved or keyed order."""
        return cls(order)

    @property
    def deck(self) -> tuple[int, ...]:
        """Return a snapshot of the current order, top card first."""
        return self._deck

    def subscribe(self, handler: EventHandler, step: StepType | None = None) -> None:
        """Receive a DeckEvent for each step of every committed round."""
        self.events.subscribe(handler, step)

    def unsubscribe(self, handler: EventHandler, step: StepType | None = None) -> None:
        """Stop receiving round events."""
        self.events.unsubscribe(handler, step)

    def advance_and_emit(self) -> int:
        """
        Run one round and return its keystream value.

        Returns:
            1..52, or NO_OUTPUT (0) when the output card is a joker

        Raises:
            DeckIntegrityError: If the deck has been corrupted
        """
        trace = self.events.has_subscribers or logger.isEnabledFor(logging.DEBUG)

        with self._lock:
            deck = move_down(self._deck, JOKER_A, 1)
            after_a = deck
            deck = move_down(deck, JOKER_B, 2)
            after_b = deck
            deck = triple_cut(deck)
            after_triple = deck
            deck = count_cut(deck)
            check_integrity(deck)
            value = output_value(deck)
            self._deck = deck

        logger.debug("Round produced %d", value)
        if trace:
            for event in (
                DeckEvent(StepType.JOKER_A_MOVED, after_a),
                DeckEvent(StepType.JOKER_B_MOVED, after_b),
                DeckEvent(StepType.TRIPLE_CUT, after_triple),
                DeckEvent(StepType.COUNT_CUT, deck),
                DeckEvent(StepType.OUTPUT, deck, value),
            ):
                logger.debug("%s", event)
                self.events.emit(event)

        return value

    def take(self, count: int) -> list[int]:
        """
        Run count rounds and return every value, including NO_OUTPUT rounds.

        Raises:
            ValueError: If count is negative
        """
        if count < 0:
            raise ValueError("Count must not be negative")
        return [self.advance_and_emit() for _ in range(count)]

    def next_value(self) -> int:
        """Run rounds until one produces a value, and return it."""
        value = self.advance_and_emit()
        while value == NO_OUTPUT:
            value = self.advance_and_emit()
        return value

    def __repr__(self) -> str:
        return f"SolitaireEngine(top={self._deck[0]}, bottom={self._deck[-1]})"
