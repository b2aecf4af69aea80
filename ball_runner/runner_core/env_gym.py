"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the Ball Runner game.
One step = an optional jump followed by one tick. Reward is the score gained.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from ball_runner.runner_core.config_loader import GameConfig, load_config
from ball_runner.runner_core.events import GameEvent
from ball_runner.runner_core.game import CoreGame
from ball_runner.runner_core.rules import JumpDirection
from ball_runner.runner_core.state_snapshot import GameSnapshot

logger = logging.getLogger(__name__)

# Discrete action -> jump direction (None = do not jump)
ACTIONS = (
    None,
    JumpDirection.NONE,
    JumpDirection.LEFT,
    JumpDirection.RIGHT,
)


class BallRunnerEnv(gym.Env):
    """
    Ball Runner as a Gymnasium environment.

    Action Space:
        Discrete(4): 0 wait, 1 jump straight, 2 jump left, 3 jump right.

    Observation Space:
        Dict mirroring GameSnapshot.to_obs_dict().

    Reward:
        Points scored during the step.

    Info:
        Contains score, delta_score, tick, terminated_reason, etc.
    """

    metadata = {
        "render_modes": [],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[GameConfig] = None,
        debug: bool = False,
    ):
        """
        Initialize Ball Runner environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            config: Preloaded configuration (takes precedence over config_path).
            debug: If True, log every step at DEBUG level.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)
        self._debug = debug
        self._game = CoreGame(config=self._config)

        self.action_space = spaces.Discrete(len(ACTIONS))
        self.observation_space = self._build_observation_space()

        if self._debug:
            logger.debug(
                "BallRunnerEnv initialized: screen %dx%d, ground %.1f",
                self._config.screen.width,
                self._config.screen.height,
                self._config.ground_level,
            )

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        obs = self._config.observation
        int64_max = np.iinfo(np.int64).max

        return spaces.Dict({
            "ball": spaces.Box(low=-np.inf, high=np.inf, shape=(4,), dtype=np.float32),
            "camera": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "score": spaces.Box(low=0, high=int64_max, shape=(), dtype=np.int64),
            "last_milestone": spaces.Box(low=0, high=int64_max, shape=(), dtype=np.int64),
            "ground_level": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),

            "box_xy": spaces.Box(low=-np.inf, high=np.inf, shape=(obs.max_boxes, 2), dtype=np.float32),
            "box_broken": spaces.MultiBinary(obs.max_boxes),
            "box_points": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(obs.max_boxes,), dtype=np.int32),
            "box_mask": spaces.MultiBinary(obs.max_boxes),
            "collectible_xy": spaces.Box(
                low=-np.inf, high=np.inf, shape=(obs.max_collectibles, 2), dtype=np.float32
            ),
            "collectible_collected": spaces.MultiBinary(obs.max_collectibles),
            "collectible_mask": spaces.MultiBinary(obs.max_collectibles),
            "hazard_xy": spaces.Box(low=-np.inf, high=np.inf, shape=(obs.max_hazards, 2), dtype=np.float32),
            "hazard_hit": spaces.MultiBinary(obs.max_hazards),
            "hazard_mask": spaces.MultiBinary(obs.max_hazards),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        snapshot = self._game.reset(seed=seed)

        obs = self._snapshot_to_obs(snapshot)
        info = self._game.get_info()
        info["delta_score"] = 0

        return obs, info

    def step(
        self,
        action: Union[int, np.integer, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: Index into ACTIONS.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        if isinstance(action, np.ndarray):
            action = action.item()
        action = int(action)
        if not 0 <= action < len(ACTIONS):
            raise ValueError(f"Invalid action {action}, expected 0..{len(ACTIONS) - 1}")

        # Jump events are dispatched by jump() itself, not returned by tick()
        jump_events: List[GameEvent] = []
        direction = ACTIONS[action]
        if direction is not None:
            collect = jump_events.append
            self._game.subscribe(collect)
            try:
                self._game.jump(direction)
            finally:
                self._game.unsubscribe(collect)

        result = self._game.tick()

        obs = self._snapshot_to_obs(result.snapshot)
        reward = float(result.delta_score)
        terminated = result.game_over
        truncated = (not terminated) and self._game.tick_count >= self._config.caps.max_ticks

        info = self._game.get_info()
        info["delta_score"] = result.delta_score
        info["events"] = [type(e).__name__ for e in jump_events + result.events]

        if self._debug:
            logger.debug(
                "Step: action=%d, delta_score=%d, tick=%d, camera=%.1f",
                action, result.delta_score, self._game.tick_count, self._game.camera
            )
            if terminated:
                logger.debug("TERMINATED: %s", info.get("terminated_reason", "unknown"))

        return obs, reward, terminated, truncated, info

    def _snapshot_to_obs(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        """Convert snapshot to observation dict."""
        return snapshot.to_obs_dict()

    def close(self) -> None:
        """Nothing to release; present for the Gymnasium API."""
        return None

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
