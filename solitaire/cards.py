"""Card identities, labels, and deck validation."""

from enum import Enum
from typing import Iterable, Sequence

DECK_SIZE = 54
SUIT_SIZE = 13

JOKER_A = 53
JOKER_B = 54
JOKERS = frozenset({JOKER_A, JOKER_B})

# Both jokers count as 53 wherever a card's value is used as a count.
JOKER_COUNT_VALUE = 53

NO_OUTPUT = 0

IDENTITY_ORDER: tuple[int, ...] = tuple(range(1, DECK_SIZE + 1))


class DeckIntegrityError(AssertionError):
    """Raised when the deck no longer holds each of 1..54 exactly once."""


class Suit(Enum):
    """Card suits in bridge order."""

    CLUBS = 0
    DIAMONDS = 1
    HEARTS = 2
    SPADES = 3

    def __str__(self) -> str:
        symbols = {
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
        }
        return symbols[self]


_RANK_LABELS = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")


def is_joker(card: int) -> bool:
    """Check if a card identity is one of the two jokers."""
    return card in JOKERS


def count_value(card: int) -> int:
    """Return the value a card contributes when used as a count."""
    return JOKER_COUNT_VALUE if is_joker(card) else card


def card_label(card: int) -> str:
    """Return a display label like 'A♣', '10♥', 'JA'."""
    if card == JOKER_A:
        return "JA"
    if card == JOKER_B:
        return "JB"
    if not 1 <= card <= DECK_SIZE - len(JOKERS):
        raise ValueError(f"Invalid card: {card}")
    suit = Suit((card - 1) // SUIT_SIZE)
    return f"{_RANK_LABELS[(card - 1) % SUIT_SIZE]}{suit}"


def order_problems(order: Sequence[int]) -> list[str]:
    """
    Describe every way an ordering differs from a complete deck.

    Returns:
        An empty list for a valid deck, otherwise human-readable problems
    """
    problems = []
    if len(order) != DECK_SIZE:
        problems.append(f"expected {DECK_SIZE} cards, got {len(order)}")

    seen: set[int] = set()
    duplicates: set[int] = set()
    for card in order:
        if card in seen:
            duplicates.add(card)
        seen.add(card)

    if duplicates:
        problems.append(f"duplicate cards: {sorted(duplicates)}")
    missing = set(IDENTITY_ORDER) - seen
    if missing:
        problems.append(f"missing cards: {sorted(missing)}")
    unknown = seen - set(IDENTITY_ORDER)
    if unknown:
        problems.append(f"unknown cards: {sorted(unknown)}")
    return problems


def parse_order(cards: Iterable[int]) -> tuple[int, ...]:
    """
    Validate a caller-supplied deck ordering.

    Raises:
        ValueError: If the ordering is not a permutation of 1..54
    """
    order = tuple(cards)
    problems = order_problems(order)
    if problems:
        raise ValueError(f"Invalid deck order: {'; '.join(problems)}")
    return order


def check_integrity(order: Sequence[int]) -> None:
    """Fail loudly if the engine's own deck has been corrupted."""
    problems = order_problems(order)
    if problems:
        raise DeckIntegrityError(f"Deck integrity violated: {'; '.join(problems)}")
