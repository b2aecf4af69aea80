"""
Game Rules
==========

Handles game phases, termination conditions, and input mapping.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from ball_runner.runner_core.config_loader import GameConfig, get_config

logger = logging.getLogger(__name__)


class GamePhase(str, enum.Enum):
    """Top-level game mode."""
    NAME_ENTRY = "name_entry"
    MENU = "menu"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class JumpDirection(str, enum.Enum):
    """Horizontal hint attached to a jump."""
    NONE = "none"
    LEFT = "left"
    RIGHT = "right"


@dataclass
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    reason: str

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, reason)


class PhaseMachine:
    """
    Tracks the current phase and rejects transitions the game never makes.

    NameEntry -> Menu -> Playing -> GameOver -> Menu | Playing.
    Playing -> Playing is allowed so a running session can be restarted.
    """

    TRANSITIONS: Dict[GamePhase, FrozenSet[GamePhase]] = {
        GamePhase.NAME_ENTRY: frozenset({GamePhase.MENU}),
        GamePhase.MENU: frozenset({GamePhase.PLAYING}),
        GamePhase.PLAYING: frozenset({GamePhase.PLAYING, GamePhase.GAME_OVER}),
        GamePhase.GAME_OVER: frozenset({GamePhase.MENU, GamePhase.PLAYING}),
    }

    def __init__(self, initial: GamePhase = GamePhase.MENU):
        self._phase = initial

    @property
    def phase(self) -> GamePhase:
        """Current phase."""
        return self._phase

    def can_enter(self, target: GamePhase) -> bool:
        """True if target is reachable from the current phase."""
        return target in self.TRANSITIONS[self._phase]

    def enter(self, target: GamePhase) -> bool:
        """
        Move to target if the transition is allowed.

        Args:
            target: Phase to enter.

        Returns:
            True if the phase changed (or was re-entered), False if rejected.
        """
        if not self.can_enter(target):
            logger.debug("Ignoring phase change %s -> %s", self._phase.value, target.value)
            return False
        logger.debug("Phase %s -> %s", self._phase.value, target.value)
        self._phase = target
        return True


class TerminationRules:
    """
    Handles game termination conditions.

    - Ground: ball centre at or below the ground line
    - Hazard: ball touched a hazard this tick
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize termination rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._ground_level = config.ground_level

    @property
    def ground_level(self) -> float:
        """Y coordinate of the ground line."""
        return self._ground_level

    def check_ground(self, ball_y: float) -> TerminationResult:
        """Ground contact check, run right after the ball moves."""
        if ball_y >= self._ground_level:
            return TerminationResult.game_over("ground")
        return TerminationResult.none()

    def check_hazard(self, hazard_hit: bool) -> TerminationResult:
        """Hazard contact check, run after collision resolution."""
        if hazard_hit:
            return TerminationResult.game_over("hazard")
        return TerminationResult.none()


def direction_from_touch(
    touch_x: float,
    screen_width: float,
    dead_zone: float = 50.0
) -> JumpDirection:
    """
    Map a tap position to a jump direction.

    Args:
        touch_x: Screen X of the tap.
        screen_width: Viewport width.
        dead_zone: Half-width of the straight-jump band around the centre.

    Returns:
        RIGHT beyond centre + dead_zone, LEFT before centre - dead_zone, else NONE.
    """
    center = screen_width / 2
    if touch_x > center + dead_zone:
        return JumpDirection.RIGHT
    if touch_x < center - dead_zone:
        return JumpDirection.LEFT
    return JumpDirection.NONE


def normalize_player_name(raw: str, min_length: int = 2) -> Optional[str]:
    """
    Validate a player name.

    Args:
        raw: Text as typed.
        min_length: Minimum length after stripping whitespace.

    Returns:
        The stripped name, or None if it is too short.
    """
    name = raw.strip()
    if len(name) < min_length:
        return None
    return name
