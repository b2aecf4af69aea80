"""
Scoring System
==============

Tracks the session score and milestone progression.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ball_runner.runner_core.config_loader import GameConfig, get_config


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    source: str          # "box", "milestone" or "collectible"
    total: int

    def __repr__(self) -> str:
        return f"ScoreEvent({self.source}+{self.points}={self.total})"


class ScoreTracker:
    """
    Tracks game score and the last rewarded milestone.

    Score never decreases while a session runs. The milestone is the highest
    multiple of the milestone interval that has already produced a bonus box.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._interval = config.scoring.milestone_interval
        self._score: int = 0
        self._last_milestone: int = 0

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def last_milestone(self) -> int:
        """Highest milestone already rewarded."""
        return self._last_milestone

    def add_points(self, points: int, source: str = "bonus") -> ScoreEvent:
        """
        Add points to the score.

        Args:
            points: Non-negative amount to add.
            source: Label for the event.

        Returns:
            ScoreEvent describing the points awarded.
        """
        if points < 0:
            raise ValueError(f"Score can only grow, got {points} points")
        self._score += points
        return ScoreEvent(points=points, source=source, total=self._score)

    def current_milestone(self) -> int:
        """Score rounded down to the milestone interval."""
        return (self._score // self._interval) * self._interval

    def advance_milestone(self) -> Optional[int]:
        """
        Claim the current milestone if it has not been rewarded yet.

        A jump over several milestones in one tick claims only the highest.

        Returns:
            The newly claimed milestone, or None.
        """
        milestone = self.current_milestone()
        if milestone > self._last_milestone and milestone > 0:
            self._last_milestone = milestone
            return milestone
        return None

    def reset(self) -> None:
        """Reset score and milestone to zero."""
        self._score = 0
        self._last_milestone = 0
