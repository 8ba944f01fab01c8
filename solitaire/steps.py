"""
Deck permutations used by the keystream round.

Every function here is pure: it takes an ordering and returns a new tuple,
leaving its input untouched. Index 0 is the top of the deck.
"""

from typing import Sequence

from solitaire.cards import (
    JOKER_A,
    JOKER_B,
    NO_OUTPUT,
    DeckIntegrityError,
    count_value,
    is_joker,
)

Order = tuple[int, ...]


def find_index(order: Sequence[int], card: int) -> int:
    """
    Return the position of a card in the deck.

    Raises:
        DeckIntegrityError: If the card is not in the deck
    """
    try:
        return order.index(card)
    except ValueError:
        raise DeckIntegrityError(f"Card {card} is missing from the deck") from None


def move_down_once(order: Sequence[int], card: int) -> Order:
    """
    Move a card one position towards the bottom.

    The bottom card wraps to index 1, just below the top card. It never
    becomes the new top card.
    """
    deck = tuple(order)
    i = find_index(deck, card)
    last = len(deck) - 1
    if i < last:
        return deck[:i] + (deck[i + 1], card) + deck[i + 2 :]
    return (deck[0], card) + deck[1:last]


def move_down(order: Sequence[int], card: int, n: int) -> Order:
    """Apply the single-step move to a card n times."""
    deck = tuple(order)
    for _ in range(n):
        deck = move_down_once(deck, card)
    return deck


def triple_cut(order: Sequence[int]) -> Order:
    """
    Swap the cards above the upper joker with the cards below the lower one.

    The jokers and everything between them stay in place and in order.
    """
    deck = tuple(order)
    lo, hi = sorted((find_index(deck, JOKER_A), find_index(deck, JOKER_B)))
    return deck[hi + 1 :] + deck[lo : hi + 1] + deck[:lo]


def count_cut(order: Sequence[int]) -> Order:
    """
    Move as many top cards as the bottom card's value to just above it.

    The bottom card never moves. A bottom joker counts as 53, which leaves
    the deck unchanged.
    """
    deck = tuple(order)
    n = count_value(deck[-1])
    body = deck[:-1]
    return body[n:] + body[:n] + deck[-1:]


def output_value(order: Sequence[int]) -> int:
    """
    Read the keystream value from the deck.

    The top card's value (jokers count as 53) is the index of the output
    card. A joker there yields NO_OUTPUT.
    """
    target = order[count_value(order[0])]
    if is_joker(target):
        return NO_OUTPUT
    return target
