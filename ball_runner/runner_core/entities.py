"""
Entities
========

Mutable records for everything the ball can run into, plus the store that
owns them during a session.

Boxes are anchored at their top-left corner; collectibles and hazards are
anchored at their centre. This mirrors how each kind is laid out on screen.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ball_runner.runner_core.config_loader import GameConfig, get_config

# (left, top, right, bottom) in world space
Rect = Tuple[float, float, float, float]


class BoxKind(str, enum.Enum):
    """Box variants."""
    NORMAL = "normal"
    MILESTONE = "milestone"


def centered_rect(x: float, y: float, size: float) -> Rect:
    """Square bounding box centred on (x, y)."""
    half = size / 2
    return (x - half, y - half, x + half, y + half)


def corner_rect(x: float, y: float, size: float) -> Rect:
    """Square bounding box with its top-left corner at (x, y)."""
    return (x, y, x + size, y + size)


@dataclass
class Box:
    """A breakable box."""
    uid: int
    x: float
    y: float
    kind: BoxKind
    points: int
    broken: bool = False

    @property
    def active(self) -> bool:
        return not self.broken


@dataclass
class Collectible:
    """A pickup worth a fixed number of points."""
    uid: int
    x: float
    y: float
    collected: bool = False

    @property
    def active(self) -> bool:
        return not self.collected


@dataclass
class Hazard:
    """A triangle obstacle. Touching it ends the game."""
    uid: int
    x: float
    y: float
    hit: bool = False

    @property
    def active(self) -> bool:
        return not self.hit


class EntityField:
    """
    Owns the ordered entity collections for one session.

    Handles:
    - Entity creation with per-session unique ids
    - Bounding boxes per kind
    - Culling entities that fell behind the camera
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize an empty field.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._box_size = config.entities.box_size
        self._collectible_size = config.entities.collectible_size
        self._hazard_size = config.entities.hazard_size

        self._boxes: List[Box] = []
        self._collectibles: List[Collectible] = []
        self._hazards: List[Hazard] = []
        self._next_uid = 0

    @property
    def boxes(self) -> List[Box]:
        """Boxes in spawn order."""
        return self._boxes

    @property
    def collectibles(self) -> List[Collectible]:
        """Collectibles in spawn order."""
        return self._collectibles

    @property
    def hazards(self) -> List[Hazard]:
        """Hazards in spawn order."""
        return self._hazards

    @property
    def box_count(self) -> int:
        """Number of boxes currently present, broken or not."""
        return len(self._boxes)

    def _allocate_uid(self) -> int:
        uid = self._next_uid
        self._next_uid += 1
        return uid

    def add_box(
        self,
        x: float,
        y: float,
        kind: BoxKind = BoxKind.NORMAL,
        points: Optional[int] = None
    ) -> Box:
        """
        Add a box with its top-left corner at (x, y).

        Args:
            x: Left edge.
            y: Top edge.
            kind: Normal or milestone.
            points: Reward override. Defaults to the configured value for the kind.

        Returns:
            The created Box.
        """
        if points is None:
            scoring = self._config.scoring
            points = scoring.milestone_points if kind == BoxKind.MILESTONE else scoring.box_points

        box = Box(uid=self._allocate_uid(), x=x, y=y, kind=kind, points=points)
        self._boxes.append(box)
        return box

    def add_collectible(self, x: float, y: float) -> Collectible:
        """Add a collectible centred on (x, y)."""
        collectible = Collectible(uid=self._allocate_uid(), x=x, y=y)
        self._collectibles.append(collectible)
        return collectible

    def add_hazard(self, x: float, y: float) -> Hazard:
        """Add a hazard centred on (x, y)."""
        hazard = Hazard(uid=self._allocate_uid(), x=x, y=y)
        self._hazards.append(hazard)
        return hazard

    def box_rect(self, box: Box) -> Rect:
        return corner_rect(box.x, box.y, self._box_size)

    def collectible_rect(self, collectible: Collectible) -> Rect:
        return centered_rect(collectible.x, collectible.y, self._collectible_size)

    def hazard_rect(self, hazard: Hazard) -> Rect:
        return centered_rect(hazard.x, hazard.y, self._hazard_size)

    def cull(self, min_x: float) -> int:
        """
        Drop every entity whose x is not beyond min_x.

        Args:
            min_x: Entities must have x > min_x to survive.

        Returns:
            Number of entities removed.
        """
        before = len(self._boxes) + len(self._collectibles) + len(self._hazards)
        self._boxes = [b for b in self._boxes if b.x > min_x]
        self._collectibles = [c for c in self._collectibles if c.x > min_x]
        self._hazards = [h for h in self._hazards if h.x > min_x]
        return before - (len(self._boxes) + len(self._collectibles) + len(self._hazards))

    def clear(self) -> None:
        """Remove everything and restart id allocation."""
        self._boxes = []
        self._collectibles = []
        self._hazards = []
        self._next_uid = 0
