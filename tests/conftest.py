"""Pytest fixtures for keystream tests."""

import pytest

from solitaire.cards import DECK_SIZE, IDENTITY_ORDER, JOKER_A, JOKER_B
from solitaire.engine import SolitaireEngine


@pytest.fixture
def engine():
    """A fresh engine in identity order."""
    return SolitaireEngine.initialize()


@pytest.fixture
def identity_order():
    """The unkeyed deck, 1..52 followed by Joker A and Joker B."""
    return list(IDENTITY_ORDER)


@pytest.fixture
def jokers_on_top_order():
    """A deck with both jokers on top and the regular cards in order."""
    return [JOKER_A, JOKER_B] + list(range(1, DECK_SIZE - 1))


@pytest.fixture
def null_key_vector():
    """
    Published output of the unkeyed deck.

    The fourth round's output card is a joker, so it produces no value (0).
    """
    return [4, 49, 10, 0, 24, 8, 51, 44, 6, 4, 33, 20, 39, 19, 34, 42]
