"""Tests for the keystream engine."""

import threading

import pytest
from hypothesis import given, settings, strategies as st

from solitaire.cards import IDENTITY_ORDER, JOKER_A, JOKER_B, NO_OUTPUT, DeckIntegrityError
from solitaire.engine import SolitaireEngine
from solitaire.events import StepType

deck_orders = st.permutations(list(IDENTITY_ORDER))


class TestInitialize:
    """Tests for engine creation."""

    def test_identity_order(self, engine):
        """Test a fresh engine holds 1..54 with the jokers last."""
        assert engine.deck == IDENTITY_ORDER
        assert engine.deck[-2:] == (JOKER_A, JOKER_B)
        assert len(engine.deck) == 54

    def test_from_order(self, jokers_on_top_order):
        """Test starting from a keyed order."""
        engine = SolitaireEngine.from_order(jokers_on_top_order)
        assert engine.deck == tuple(jokers_on_top_order)

    def test_invalid_order_rejected(self):
        """Test that a bad starting order raises ValueError."""
        with pytest.raises(ValueError):
            SolitaireEngine.from_order(range(1, 54))

    def test_deck_snapshot_is_immutable(self, engine):
        """Test the deck property cannot be used to alter the engine."""
        with pytest.raises(TypeError):
            engine.deck[0] = 2  # type: ignore[index]


class TestKeystream:
    """Tests for advance_and_emit."""

    def test_null_key_vector(self, engine, null_key_vector):
        """Test the published output of the unkeyed deck."""
        assert engine.take(len(null_key_vector)) == null_key_vector

    def test_first_round_deck(self, engine):
        """Test the deck after the first unkeyed round."""
        assert engine.advance_and_emit() == 4
        assert engine.deck == tuple(range(2, 53)) + (JOKER_A, JOKER_B, 1)

    def test_deterministic(self):
        """Test identically initialized engines produce identical streams."""
        first = SolitaireEngine.initialize()
        second = SolitaireEngine.initialize()
        assert first.take(300) == second.take(300)
        assert first.deck == second.deck

    def test_engines_independent(self):
        """Test engines do not share state."""
        first = SolitaireEngine.initialize()
        second = SolitaireEngine.initialize()
        first.take(10)
        assert second.deck == IDENTITY_ORDER

    def test_cardinality_after_every_round(self, engine):
        """Test every round keeps each card exactly once."""
        for _ in range(1000):
            value = engine.advance_and_emit()
            assert sorted(engine.deck) == list(IDENTITY_ORDER)
            assert 0 <= value <= 52

    def test_resume_from_saved_order(self, engine):
        """Test a resumed engine continues the same stream."""
        engine.take(25)
        resumed = SolitaireEngine.from_order(engine.deck)
        assert resumed.take(50) == engine.take(50)

    def test_next_value_skips_no_output(self, engine, null_key_vector):
        """Test next_value draws again on joker rounds."""
        expected = [v for v in null_key_vector if v != NO_OUTPUT]
        assert [engine.next_value() for _ in range(len(expected))] == expected

    def test_take_zero(self, engine):
        """Test taking nothing leaves the deck alone."""
        assert engine.take(0) == []
        assert engine.deck == IDENTITY_ORDER

    def test_take_negative_raises(self, engine):
        """Test a negative count is rejected."""
        with pytest.raises(ValueError):
            engine.take(-1)

    @settings(max_examples=50)
    @given(order=deck_orders)
    def test_any_order_keeps_invariants(self, order):
        """Test rounds from arbitrary orders stay valid."""
        engine = SolitaireEngine.from_order(order)
        for _ in range(5):
            value = engine.advance_and_emit()
            deck = engine.deck
            assert sorted(deck) == list(IDENTITY_ORDER)
            target = deck[53 if deck[0] in (JOKER_A, JOKER_B) else deck[0]]
            if target in (JOKER_A, JOKER_B):
                assert value == NO_OUTPUT
            else:
                assert value == target


class TestIntegrity:
    """Tests for corrupted decks."""

    def test_missing_joker_fails_loudly(self, engine):
        """Test a deck that lost a joker raises instead of emitting."""
        corrupted = engine.deck[:-1] + (1,)
        engine._deck = corrupted

        with pytest.raises(DeckIntegrityError):
            engine.advance_and_emit()
        assert engine.deck == corrupted

    def test_extra_card_fails_loudly(self, engine):
        """Test a deck with an extra card is detected."""
        corrupted = engine.deck + (7,)
        engine._deck = corrupted

        with pytest.raises(DeckIntegrityError):
            engine.advance_and_emit()
        assert engine.deck == corrupted


class TestEvents:
    """Tests for round events."""

    def test_events_per_round(self, engine):
        """Test each round emits one event per step, in order."""
        events = []
        engine.subscribe(events.append)

        value = engine.advance_and_emit()

        assert [e.step for e in events] == [
            StepType.JOKER_A_MOVED,
            StepType.JOKER_B_MOVED,
            StepType.TRIPLE_CUT,
            StepType.COUNT_CUT,
            StepType.OUTPUT,
        ]
        assert events[-1].value == value
        assert events[-1].deck == engine.deck

    def test_first_round_snapshots(self, engine):
        """Test event snapshots match the documented first round."""
        events = []
        engine.subscribe(events.append)
        engine.advance_and_emit()

        by_step = {e.step: e.deck for e in events}
        assert by_step[StepType.JOKER_A_MOVED][-2:] == (JOKER_B, JOKER_A)
        assert by_step[StepType.JOKER_B_MOVED][:2] == (1, JOKER_B)
        assert by_step[StepType.TRIPLE_CUT] == (JOKER_B,) + tuple(range(2, 53)) + (JOKER_A, 1)

    def test_joker_never_on_top_after_its_move(self, engine):
        """Test the moved joker is never at index 0 right after moving."""
        def check_a(event):
            assert event.deck[0] != JOKER_A

        def check_b(event):
            assert event.deck[0] != JOKER_B

        engine.subscribe(check_a, StepType.JOKER_A_MOVED)
        engine.subscribe(check_b, StepType.JOKER_B_MOVED)
        engine.take(500)

    def test_filtered_subscription(self, engine):
        """Test subscribing to a single step."""
        outputs = []
        engine.subscribe(outputs.append, StepType.OUTPUT)

        values = engine.take(3)

        assert [e.value for e in outputs] == values

    def test_unsubscribe(self, engine):
        """Test unsubscribed handlers stop receiving events."""
        events = []
        engine.subscribe(events.append)
        engine.unsubscribe(events.append)

        engine.advance_and_emit()

        assert events == []

    def test_event_str(self, engine):
        """Test event string representation."""
        events = []
        engine.subscribe(events.append, StepType.OUTPUT)
        engine.advance_and_emit()

        assert str(events[0]).startswith("output 4: 2 3 4")


class TestConcurrency:
    """Tests for concurrent callers."""

    def test_threads_see_whole_rounds(self):
        """Test concurrent rounds produce the same values as sequential ones."""
        shared = SolitaireEngine.initialize()
        results: list[int] = []
        results_lock = threading.Lock()

        def worker():
            for _ in range(250):
                value = shared.advance_and_emit()
                with results_lock:
                    results.append(value)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        sequential = SolitaireEngine.initialize()
        expected = sequential.take(1000)

        assert sorted(results) == sorted(expected)
        assert shared.deck == sequential.deck
