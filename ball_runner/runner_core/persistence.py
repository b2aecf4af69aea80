"""
Profile Persistence
===================

Stores the player name and the high score record in a small JSON file.

Storage failures never propagate: a broken or unreadable file reads as "no
stored data" and a failed write reports False. Either way the game goes on.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HighScore:
    """Best score and who set it."""
    name: str
    score: int


@dataclass(frozen=True)
class Profile:
    """Everything persisted between sessions."""
    player_name: Optional[str] = None
    high_score: Optional[HighScore] = None

    @property
    def has_player(self) -> bool:
        """False on the very first launch; forces name entry."""
        return bool(self.player_name)


class ProfileStore:
    """
    JSON-backed player profile.

    File layout:
        {"player_name": "Ada", "high_score": {"name": "Ada", "score": 420}}
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize the store.

        Args:
            path: JSON file location. Parent directories are created on write.
        """
        self._path = Path(path)
        self._profile = Profile()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def profile(self) -> Profile:
        """Last loaded or written profile."""
        return self._profile

    def load(self) -> Profile:
        """
        Read the stored profile.

        Returns:
            The stored Profile, or an empty one if nothing usable is stored.
        """
        if not self._path.exists():
            self._profile = Profile()
            return self._profile

        try:
            with open(self._path, "r") as f:
                raw = json.load(f)
            self._profile = self._parse(raw)
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.warning("Could not read profile %s: %s", self._path, e)
            self._profile = Profile()
        return self._profile

    @staticmethod
    def _parse(raw: Any) -> Profile:
        if not isinstance(raw, dict):
            raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
        name = raw.get("player_name")
        high_score = None
        record = raw.get("high_score")
        if record is not None:
            if not isinstance(record, dict):
                raise ValueError("high_score must be a JSON object")
            high_score = HighScore(name=str(record["name"]), score=int(record["score"]))
        return Profile(
            player_name=str(name) if name else None,
            high_score=high_score
        )

    def _write(self, profile: Profile) -> bool:
        data: Dict[str, Any] = {"player_name": profile.player_name}
        if profile.high_score is not None:
            data["high_score"] = {
                "name": profile.high_score.name,
                "score": profile.high_score.score,
            }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning("Could not write profile %s: %s", self._path, e)
            return False
        return True

    def save_player_name(self, name: str) -> bool:
        """
        Persist the player name.

        The in-memory profile is updated even when the write fails.

        Returns:
            True if the file was written.
        """
        self._profile = Profile(player_name=name, high_score=self._profile.high_score)
        return self._write(self._profile)

    def is_new_high_score(self, score: int) -> bool:
        """True if score beats the stored record. Ties do not count."""
        record = self._profile.high_score
        return record is None or score > record.score

    def submit_score(self, name: str, score: int) -> bool:
        """
        Record a finished game.

        Args:
            name: Player name.
            score: Final score.

        Returns:
            True if the score is a new high score (recorded in memory; the
            file write may still fail and is logged).
        """
        if not self.is_new_high_score(score):
            return False

        self._profile = Profile(
            player_name=self._profile.player_name,
            high_score=HighScore(name=name, score=score)
        )
        self._write(self._profile)
        return True
