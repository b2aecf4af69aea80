"""
Replay Recorder
===============

Records Ball Runner episodes so they can be re-simulated later.

The whole course is generated from the seed, so a replay only needs the
seed, the action taken on every tick and a hash of the gameplay config.
Per-tick scores and event names are stored alongside for inspection and
for checking that a re-run took the same path.

Usage:
    from ball_runner.runner_core import BallRunnerEnv, ReplayRecorder

    recorder = ReplayRecorder(BallRunnerEnv(), agent_name="my_agent")
    obs, info = recorder.reset(seed=42)

    done = False
    while not done:
        obs, reward, terminated, truncated, info = recorder.step(your_agent(obs))
        done = terminated or truncated

    path = recorder.save(directory="replays")
    verify_replay(path)
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ball_runner.runner_core.config_loader import GameConfig, get_config
from ball_runner.runner_core.env_gym import BallRunnerEnv

logger = logging.getLogger(__name__)

REPLAY_FORMAT = 1

# Config sections that shape the course or the ball's path
HASHED_SECTIONS = ("screen", "physics", "entities", "spawning", "scoring")


class ReplayMismatchError(ValueError):
    """A replay does not match the config or the simulation it is checked against."""


def generate_replay_filename(
    agent_name: str = "replay",
    seed: Optional[int] = None,
    directory: Optional[Union[str, Path]] = None
) -> Path:
    """
    Build a timestamped path: {agent}_{YYYYMMDD_HHMMSS}[_s{seed}].json
    """
    parts = [agent_name, datetime.now().strftime("%Y%m%d_%H%M%S")]
    if seed is not None:
        parts.append(f"s{seed}")
    return Path(directory or ".") / ("_".join(parts) + ".json")


def compute_config_hash(config: Optional[GameConfig] = None) -> str:
    """Short md5 of every gameplay section of the config."""
    if config is None:
        config = get_config()
    hash_data = {name: dataclasses.asdict(getattr(config, name)) for name in HASHED_SECTIONS}
    return hashlib.md5(json.dumps(hash_data, sort_keys=True).encode()).hexdigest()[:8]


@dataclass
class Replay:
    """
    One recorded episode.

    actions, scores and events are parallel per-tick lists: entry i is the
    action chosen before tick i + 1, the score after it and the names of the
    events it produced (jump events first).
    """
    seed: Optional[int]
    agent: str
    config_hash: str
    actions: List[int] = field(default_factory=list)
    scores: List[int] = field(default_factory=list)
    events: List[List[str]] = field(default_factory=list)
    termination_reason: str = ""
    end_tick: Optional[int] = None

    @property
    def final_score(self) -> int:
        return self.scores[-1] if self.scores else 0

    @property
    def total_ticks(self) -> int:
        return len(self.actions)

    @property
    def jump_ticks(self) -> List[int]:
        """Ticks on which the ball actually jumped."""
        return [i + 1 for i, names in enumerate(self.events) if "BallJumped" in names]

    @property
    def finished(self) -> bool:
        return self.end_tick is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": REPLAY_FORMAT,
            "seed": self.seed,
            "agent": self.agent,
            "config_hash": self.config_hash,
            "actions": list(self.actions),
            "scores": list(self.scores),
            "events": [list(names) for names in self.events],
            "jumps": self.jump_ticks,
            "final_score": self.final_score,
            "total_ticks": self.total_ticks,
            "termination_reason": self.termination_reason,
            "end_tick": self.end_tick,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Replay":
        """
        Rebuild a replay from its saved form.

        Raises:
            ValueError: Unknown format or malformed fields.
        """
        if data.get("format") != REPLAY_FORMAT:
            raise ValueError(f"Unsupported replay format: {data.get('format')!r}")
        actions = [int(a) for a in data["actions"]]
        events = [list(names) for names in data.get("events", [[] for _ in actions])]
        if len(events) != len(actions):
            raise ValueError("Replay events and actions differ in length")
        return cls(
            seed=data["seed"],
            agent=str(data.get("agent", "unknown")),
            config_hash=str(data["config_hash"]),
            actions=actions,
            scores=[int(s) for s in data.get("scores", [])],
            events=events,
            termination_reason=str(data.get("termination_reason", "")),
            end_tick=data.get("end_tick"),
        )


class ReplayRecorder:
    """
    Wraps a BallRunnerEnv and records every step of the current episode.

    Recording starts on reset() and stops when the episode terminates or
    is truncated; later steps pass through unrecorded.
    """

    def __init__(self, env: BallRunnerEnv, agent_name: str = "unknown"):
        self.env = env
        self.agent_name = agent_name
        self._config_hash = compute_config_hash(env.config)
        self._replay = Replay(seed=None, agent=agent_name, config_hash=self._config_hash)
        self._recording = False

    @property
    def recording(self) -> bool:
        """Whether steps are currently being recorded."""
        return self._recording

    @property
    def replay(self) -> Replay:
        """The episode recorded so far."""
        return self._replay

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """Reset the environment and start a new recording."""
        self._replay = Replay(seed=seed, agent=self.agent_name, config_hash=self._config_hash)
        self._recording = True
        return self.env.reset(seed=seed, options=options)

    def step(
        self,
        action: Union[int, np.integer, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        if isinstance(action, np.ndarray):
            action = action.item()
        action = int(action)

        obs, reward, terminated, truncated, info = self.env.step(action)

        if self._recording:
            replay = self._replay
            replay.actions.append(action)
            replay.scores.append(int(info["score"]))
            replay.events.append(list(info.get("events", [])))

            if terminated or truncated:
                replay.termination_reason = info.get("terminated_reason") or "truncated"
                replay.end_tick = int(info["tick"])
                self._recording = False
                logger.debug(
                    "Recording finished: %s at tick %d, score %d, %d jumps",
                    replay.termination_reason, replay.end_tick,
                    replay.final_score, len(replay.jump_ticks)
                )

        return obs, reward, terminated, truncated, info

    def get_replay_data(self) -> Dict[str, Any]:
        """The recorded episode in its saved form."""
        return self._replay.to_dict()

    def save(
        self,
        path: Optional[Union[str, Path]] = None,
        overwrite: bool = True,
        directory: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Write the recording as JSON.

        Args:
            path: Target file. A timestamped name in directory is used if None.
            overwrite: If False, refuse to replace an existing file.
            directory: Where generated names go (ignored when path is given).

        Returns:
            The written path.

        Raises:
            FileExistsError: path exists and overwrite is False.
        """
        if path is None:
            path = generate_replay_filename(self.agent_name, self._replay.seed, directory)
        path = Path(path)

        if path.exists() and not overwrite:
            raise FileExistsError(f"Replay file already exists: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self._replay.to_dict(), f, indent=2)

        logger.info(
            "Replay saved: %s (seed=%s, ticks=%d, final score=%d)",
            path, self._replay.seed, self._replay.total_ticks, self._replay.final_score
        )
        return path


def load_replay(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a replay file written by ReplayRecorder.save()."""
    with open(path, "r") as f:
        return json.load(f)


def replay_actions(
    actions: Sequence[int],
    seed: Optional[int],
    config: Optional[GameConfig] = None
) -> int:
    """
    Re-simulate a recorded episode headless.

    Args:
        actions: Recorded action indices.
        seed: Seed the episode was recorded with.
        config: Configuration to replay under. Uses default if None.

    Returns:
        Final score.
    """
    env = BallRunnerEnv(config=config if config is not None else get_config())
    _, info = env.reset(seed=seed)
    for action in actions:
        _, _, terminated, truncated, info = env.step(action)
        if terminated or truncated:
            break
    return int(info["score"])


def verify_replay(
    replay: Union[str, Path, Mapping[str, Any], Replay],
    config: Optional[GameConfig] = None
) -> int:
    """
    Check a replay against the current config and re-run it.

    Args:
        replay: A replay file, its loaded dict, or a Replay.
        config: Configuration to check against. Uses default if None.

    Returns:
        Final score of the re-run.

    Raises:
        ReplayMismatchError: The config hash differs, or the re-run ends
            with a different score.
    """
    if isinstance(replay, (str, Path)):
        replay = load_replay(replay)
    if not isinstance(replay, Replay):
        replay = Replay.from_dict(replay)
    if config is None:
        config = get_config()

    expected_hash = compute_config_hash(config)
    if replay.config_hash != expected_hash:
        raise ReplayMismatchError(
            f"Replay recorded under config {replay.config_hash}, current is {expected_hash}"
        )

    score = replay_actions(replay.actions, replay.seed, config)
    if score != replay.final_score:
        raise ReplayMismatchError(
            f"Re-run scored {score}, replay recorded {replay.final_score}"
        )
    return score


def record_episode(
    env: BallRunnerEnv,
    agent_fn: Callable[[Dict[str, np.ndarray]], int],
    seed: int,
    save_path: Optional[Union[str, Path]] = None,
    agent_name: str = "unknown"
) -> Dict[str, Any]:
    """
    Play one episode with agent_fn and return its replay data.

    Args:
        env: Environment to play in.
        agent_fn: Maps an observation to an action index.
        seed: Episode seed.
        save_path: If provided, the replay is also written there.
        agent_name: Stored in the replay.
    """
    recorder = ReplayRecorder(env, agent_name=agent_name)
    obs, _ = recorder.reset(seed=seed)
    while recorder.recording:
        obs, *_ = recorder.step(agent_fn(obs))

    if save_path:
        recorder.save(save_path)
    return recorder.get_replay_data()
