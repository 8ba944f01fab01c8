"""Round events for observing the keystream pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Callable


class StepType(Enum):
    """Pipeline steps of one keystream round."""

    JOKER_A_MOVED = auto()
    JOKER_B_MOVED = auto()
    TRIPLE_CUT = auto()
    COUNT_CUT = auto()
    OUTPUT = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").lower()


@dataclass(frozen=True)
class DeckEvent:
    """
    Immutable record of the deck after one pipeline step.

    Events are emitted only once a round has been committed, so the deck
    snapshots they carry never describe a half-finished engine.
    """

    step: StepType
    deck: tuple[int, ...]
    value: int | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        cards = " ".join(str(card) for card in self.deck)
        if self.value is None:
            return f"{self.step}: {cards}"
        return f"{self.step} {self.value}: {cards}"


# Type alias for event handlers
EventHandler = Callable[[DeckEvent], None]


class EventEmitter:
    """Simple event emitter, optionally filtered by step type."""

    def __init__(self) -> None:
        self._handlers: dict[StepType | None, list[EventHandler]] = {}

    def subscribe(
        self,
        handler: EventHandler,
        step: StepType | None = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Function to call when event occurs
            step: Specific step to subscribe to, or None for all steps
        """
        self._handlers.setdefault(step, []).append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        step: StepType | None = None,
    ) -> None:
        """Unsubscribe a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(step, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: DeckEvent) -> None:
        """Emit an event to all subscribers."""
        for handler in self._handlers.get(event.step, []):
            handler(event)
        for handler in self._handlers.get(None, []):
            handler(event)

    @property
    def has_subscribers(self) -> bool:
        """Check if anything is listening."""
        return any(self._handlers.values())
