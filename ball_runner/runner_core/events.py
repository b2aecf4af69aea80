"""Engine events and their dispatch to collaborators.

Events are plain frozen records. The engine collects them while a command
runs and hands them to listeners once the command has finished, so a
listener always sees a consistent engine state.

Event Hierarchy:
    GameEvent (base)
    ├── BallJumped - a jump impulse was applied
    ├── RotateBall - presentation should spin the ball
    ├── ItemCollected - a box broke or a collectible was picked up
    └── GameOver - the session ended (emitted once per session)
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameEvent:
    """Base class for all engine events."""

    tick: int = field(default=0)


@dataclass(frozen=True)
class BallJumped(GameEvent):
    direction: str = field(default="none")


@dataclass(frozen=True)
class RotateBall(GameEvent):
    pass


@dataclass(frozen=True)
class ItemCollected(GameEvent):
    entity_id: int = field(default=0)
    kind: str = field(default="")  # "normal", "milestone" or "collectible"
    points: int = field(default=0)
    score: int = field(default=0)


@dataclass(frozen=True)
class GameOver(GameEvent):
    final_score: int = field(default=0)
    reason: str = field(default="")


Listener = Callable[[GameEvent], None]


class EventDispatcher:
    """Fans events out to listeners.

    A failing listener is logged and skipped; the remaining listeners still
    receive the event and the engine never sees the error.
    """

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, events: Iterable[GameEvent]) -> None:
        for event in events:
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception:
                    logger.exception(
                        "Listener %r failed on %s", listener, type(event).__name__
                    )
