"""
Runner Core - The game engine and its collaborators.

This module provides the fixed-step simulation, the Gymnasium environment
wrapper, and the supporting systems (physics, spawning, collisions, scoring,
persistence).

Main exports:
- CoreGame: Low-level game simulation
- GameSession: Name entry, menu, tap input and high score bookkeeping
- BallRunnerEnv: Gymnasium environment for single-agent training
- ProfileStore: JSON-backed player name and high score
- GameConfig: Configuration loaded from game_config.yaml
"""

from ball_runner.runner_core.config_loader import GameConfig, load_config
from ball_runner.runner_core.events import (
    BallJumped,
    GameEvent,
    GameOver,
    ItemCollected,
    RotateBall,
)
from ball_runner.runner_core.game import CoreGame, TickResult
from ball_runner.runner_core.rules import GamePhase, JumpDirection
from ball_runner.runner_core.state_snapshot import GameSnapshot
from ball_runner.runner_core.persistence import HighScore, ProfileStore
from ball_runner.runner_core.session import GameResult, GameSession
from ball_runner.runner_core.env_gym import BallRunnerEnv
from ball_runner.runner_core.replay_recorder import (
    Replay,
    ReplayRecorder,
    record_episode,
    replay_actions,
    verify_replay,
    generate_replay_filename,
)

__all__ = [
    "GameConfig",
    "load_config",
    "GameEvent",
    "BallJumped",
    "RotateBall",
    "ItemCollected",
    "GameOver",
    "CoreGame",
    "TickResult",
    "GamePhase",
    "JumpDirection",
    "GameSnapshot",
    "HighScore",
    "ProfileStore",
    "GameResult",
    "GameSession",
    "BallRunnerEnv",
    "Replay",
    "ReplayRecorder",
    "record_episode",
    "replay_actions",
    "verify_replay",
    "generate_replay_filename",
]
