"""
Game Session
============

Host around CoreGame that plays the collaborator roles: it validates names,
maps taps to jumps, and records finished games in the profile store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ball_runner.runner_core.config_loader import GameConfig, get_config
from ball_runner.runner_core.events import GameEvent, GameOver
from ball_runner.runner_core.game import CoreGame, TickResult
from ball_runner.runner_core.persistence import HighScore, ProfileStore
from ball_runner.runner_core.rules import (
    GamePhase,
    direction_from_touch,
    normalize_player_name,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameResult:
    """Outcome shown on the game over screen."""
    player_name: str
    final_score: int
    reason: str
    new_high_score: bool


class GameSession:
    """
    One player's run of the app.

    Starts in NAME_ENTRY when no player name is stored, otherwise in MENU.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        store: Optional[ProfileStore] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize session.

        Args:
            config: Game configuration. Uses default if None.
            store: Profile store. Uses the configured profile path if None.
            seed: Random seed for the obstacle course.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._store = store if store is not None else ProfileStore(config.profile_path)
        profile = self._store.load()

        self._player_name: Optional[str] = profile.player_name
        initial = GamePhase.MENU if profile.has_player else GamePhase.NAME_ENTRY
        self._game = CoreGame(config=config, seed=seed, initial_phase=initial)
        self._game.subscribe(self._on_event)

        self._last_result: Optional[GameResult] = None

    @property
    def game(self) -> CoreGame:
        return self._game

    @property
    def phase(self) -> GamePhase:
        return self._game.phase

    @property
    def player_name(self) -> Optional[str]:
        return self._player_name

    @property
    def high_score(self) -> Optional[HighScore]:
        return self._store.profile.high_score

    @property
    def last_result(self) -> Optional[GameResult]:
        """Result of the most recent finished game."""
        return self._last_result

    def submit_name(self, raw: str) -> bool:
        """
        Accept a player name and move to the menu.

        Returns:
            False if the name is too short or the phase is not NAME_ENTRY.
        """
        if self.phase != GamePhase.NAME_ENTRY:
            return False

        name = normalize_player_name(raw, self._config.input.name_min_length)
        if name is None:
            logger.debug("Rejected player name %r", raw)
            return False

        self._player_name = name
        self._store.save_player_name(name)
        return self._game.enter_menu()

    def start(self) -> bool:
        """
        Start a new run from the menu or the game over screen.

        Returns:
            True if a run started.
        """
        if self.phase not in (GamePhase.MENU, GamePhase.GAME_OVER):
            return False
        self._last_result = None
        self._game.reset()
        return self._game.is_playing

    def back_to_menu(self) -> bool:
        """Leave the game over screen."""
        if self.phase != GamePhase.GAME_OVER:
            return False
        return self._game.enter_menu()

    def tap(self, touch_x: float) -> bool:
        """
        Forward one tap to the engine as a jump.

        Args:
            touch_x: Screen X of the tap.

        Returns:
            True if the jump was applied.
        """
        direction = direction_from_touch(
            touch_x,
            self._config.screen.width,
            self._config.input.dead_zone
        )
        return self._game.jump(direction)

    def tick(self) -> TickResult:
        """Advance the engine by one tick."""
        return self._game.tick()

    def _on_event(self, event: GameEvent) -> None:
        if not isinstance(event, GameOver):
            return
        name = self._player_name or ""
        new_high = self._store.submit_score(name, event.final_score)
        self._last_result = GameResult(
            player_name=name,
            final_score=event.final_score,
            reason=event.reason,
            new_high_score=new_high
        )
