"""
State Snapshot
==============

Immutable copies of engine state for presentation, plus fixed-size numpy
packing for agent observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple, TYPE_CHECKING
import numpy as np

from ball_runner.runner_core.config_loader import GameConfig, get_config
from ball_runner.runner_core.rules import GamePhase

if TYPE_CHECKING:
    from ball_runner.runner_core.entities import EntityField
    from ball_runner.runner_core.physics_world import BallBody


@dataclass(frozen=True)
class BallState:
    x: float
    y: float
    vx: float
    vy: float


@dataclass(frozen=True)
class BoxState:
    uid: int
    x: float
    y: float
    kind: str
    points: int
    broken: bool


@dataclass(frozen=True)
class CollectibleState:
    uid: int
    x: float
    y: float
    collected: bool


@dataclass(frozen=True)
class HazardState:
    uid: int
    x: float
    y: float
    hit: bool


@dataclass(frozen=True)
class GameSnapshot:
    """
    Complete read-only game state for one tick.

    Entity positions are in world space; use to_screen_x() to draw them.
    """
    phase: GamePhase
    tick: int
    score: int
    last_milestone: int
    camera: float
    ball: BallState
    boxes: Tuple[BoxState, ...]
    collectibles: Tuple[CollectibleState, ...]
    hazards: Tuple[HazardState, ...]

    # Viewport info (for drawing and normalization)
    screen_width: float
    screen_height: float
    ground_level: float

    # Packed array sizes
    max_boxes: int
    max_collectibles: int
    max_hazards: int

    def to_screen_x(self, world_x: float) -> float:
        """Convert a world X coordinate to screen space."""
        return world_x - self.camera

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to a fixed-size observation dictionary."""
        box_xy, box_flag, box_mask = _pack(
            [(b.x, b.y) for b in self.boxes],
            [b.broken for b in self.boxes],
            self.max_boxes
        )
        box_points = np.zeros(self.max_boxes, dtype=np.int32)
        for i, box in enumerate(self.boxes[:self.max_boxes]):
            box_points[i] = box.points

        col_xy, col_flag, col_mask = _pack(
            [(c.x, c.y) for c in self.collectibles],
            [c.collected for c in self.collectibles],
            self.max_collectibles
        )
        haz_xy, haz_flag, haz_mask = _pack(
            [(h.x, h.y) for h in self.hazards],
            [h.hit for h in self.hazards],
            self.max_hazards
        )

        return {
            # Ball: x, y, vx, vy
            "ball": np.array(
                [self.ball.x, self.ball.y, self.ball.vx, self.ball.vy],
                dtype=np.float32
            ),
            "camera": np.array(self.camera, dtype=np.float32),
            "score": np.array(self.score, dtype=np.int64),
            "last_milestone": np.array(self.last_milestone, dtype=np.int64),
            "ground_level": np.array(self.ground_level, dtype=np.float32),

            # Entity arrays
            "box_xy": box_xy,
            "box_broken": box_flag,
            "box_points": box_points,
            "box_mask": box_mask,
            "collectible_xy": col_xy,
            "collectible_collected": col_flag,
            "collectible_mask": col_mask,
            "hazard_xy": haz_xy,
            "hazard_hit": haz_flag,
            "hazard_mask": haz_mask,
        }


def _pack(
    positions: Sequence[Tuple[float, float]],
    flags: Sequence[bool],
    size: int
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Pack entity positions and flags into padded arrays with a mask."""
    xy = np.zeros((size, 2), dtype=np.float32)
    flag = np.zeros(size, dtype=np.int8)
    mask = np.zeros(size, dtype=np.int8)

    count = min(len(positions), size)
    if count > 0:
        xy[:count] = np.asarray(positions[:count], dtype=np.float32)
        flag[:count] = np.asarray(flags[:count], dtype=np.int8)
        mask[:count] = 1
    return xy, flag, mask


class SnapshotBuilder:
    """Builds game state snapshots."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._screen_width = float(config.screen.width)
        self._screen_height = float(config.screen.height)
        self._ground_level = config.ground_level
        self._max_boxes = config.observation.max_boxes
        self._max_collectibles = config.observation.max_collectibles
        self._max_hazards = config.observation.max_hazards

    def build(
        self,
        phase: GamePhase,
        tick: int,
        score: int,
        last_milestone: int,
        camera: float,
        ball: "BallBody",
        entities: "EntityField"
    ) -> GameSnapshot:
        """Build a snapshot from current game state."""
        x, y = ball.position
        vx, vy = ball.velocity

        return GameSnapshot(
            phase=phase,
            tick=tick,
            score=score,
            last_milestone=last_milestone,
            camera=camera,
            ball=BallState(x=x, y=y, vx=vx, vy=vy),
            boxes=tuple(
                BoxState(
                    uid=b.uid,
                    x=b.x,
                    y=b.y,
                    kind=b.kind.value,
                    points=b.points,
                    broken=b.broken
                )
                for b in entities.boxes
            ),
            collectibles=tuple(
                CollectibleState(uid=c.uid, x=c.x, y=c.y, collected=c.collected)
                for c in entities.collectibles
            ),
            hazards=tuple(
                HazardState(uid=h.uid, x=h.x, y=h.y, hit=h.hit)
                for h in entities.hazards
            ),
            screen_width=self._screen_width,
            screen_height=self._screen_height,
            ground_level=self._ground_level,
            max_boxes=self._max_boxes,
            max_collectibles=self._max_collectibles,
            max_hazards=self._max_hazards
        )
