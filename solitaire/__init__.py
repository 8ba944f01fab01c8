"""Solitaire keystream engine."""

from solitaire.cards import (
    DECK_SIZE,
    JOKER_A,
    JOKER_B,
    NO_OUTPUT,
    DeckIntegrityError,
    card_label,
)
from solitaire.engine import SolitaireEngine
from solitaire.events import DeckEvent, StepType

__all__ = [
    "DECK_SIZE",
    "JOKER_A",
    "JOKER_B",
    "NO_OUTPUT",
    "DeckIntegrityError",
    "card_label",
    "SolitaireEngine",
    "DeckEvent",
    "StepType",
]
