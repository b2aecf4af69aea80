"""
Tests for Gymnasium environment API.
"""

import dataclasses

import pytest
import numpy as np

from ball_runner.runner_core.config_loader import load_config
from ball_runner.runner_core.env_gym import BallRunnerEnv


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def env():
    env = BallRunnerEnv()
    yield env
    env.close()


class TestBallRunnerEnv:
    """Test single environment API."""

    def test_reset_returns_obs_and_info(self, env):
        """Reset should return (observation, info) tuple."""
        result = env.reset(seed=42)

        assert isinstance(result, tuple)
        assert len(result) == 2

        obs, info = result
        assert isinstance(obs, dict)
        assert isinstance(info, dict)
        assert info["score"] == 0
        assert info["delta_score"] == 0

    def test_observation_in_space(self, env):
        obs, _ = env.reset(seed=42)
        assert env.observation_space.contains(obs)
        obs, *_ = env.step(3)
        assert env.observation_space.contains(obs)

    def test_observation_structure(self, env):
        """Observation should have expected keys and shapes."""
        obs, _ = env.reset(seed=42)

        for key in ("ball", "camera", "score", "last_milestone", "ground_level"):
            assert key in obs

        max_boxes = env.config.observation.max_boxes
        assert obs["box_xy"].shape == (max_boxes, 2)
        assert obs["box_broken"].shape == (max_boxes,)
        assert obs["box_mask"].shape == (max_boxes,)
        assert obs["hazard_xy"].shape == (env.config.observation.max_hazards, 2)
        assert obs["ball"].tolist() == [200, 600, 0, 0]

    def test_step_returns_five_values(self, env):
        env.reset(seed=42)
        result = env.step(0)

        assert len(result) == 5
        obs, reward, terminated, truncated, info = result
        assert isinstance(obs, dict)
        assert isinstance(reward, float)
        assert isinstance(terminated, bool)
        assert isinstance(truncated, bool)
        assert isinstance(info, dict)

    def test_jump_actions(self, env):
        env.reset(seed=42)
        obs, _, _, _, info = env.step(2)
        assert obs["ball"][2] == pytest.approx(-5.0 * 0.95)
        assert info["events"][:2] == ["BallJumped", "RotateBall"]

    def test_jump_events_reported_once(self, env):
        env.reset(seed=42)
        _, _, _, _, info = env.step(1)
        assert info["events"].count("BallJumped") == 1
        _, _, _, _, info = env.step(0)
        assert "BallJumped" not in info["events"]
        assert len(env.game._dispatcher._listeners) == 0

    def test_numpy_action(self, env):
        env.reset(seed=42)
        obs, *_ = env.step(np.array(3))
        assert obs["ball"][2] > 0

    def test_invalid_action(self, env):
        env.reset(seed=42)
        with pytest.raises(ValueError):
            env.step(4)
        with pytest.raises(ValueError):
            env.step(-1)

    def test_falling_episode_terminates_on_ground(self, env):
        env.reset(seed=42)
        steps = 0
        terminated = truncated = False
        info = {}
        while not (terminated or truncated):
            _, reward, terminated, truncated, info = env.step(0)
            assert reward == 0.0
            steps += 1
        assert terminated
        assert not truncated
        assert steps == 16
        assert info["terminated_reason"] == "ground"

    def test_reward_is_score_delta(self, env):
        env.reset(seed=42)
        env.game.entities.add_box(190, 590)
        _, reward, _, _, info = env.step(0)
        assert reward == 10.0
        assert info["delta_score"] == 10
        assert info["score"] == 10

    def test_truncation(self, config):
        caps = dataclasses.replace(config.caps, max_ticks=5)
        env = BallRunnerEnv(config=dataclasses.replace(config, caps=caps))
        env.reset(seed=1)
        for _ in range(4):
            _, _, terminated, truncated, _ = env.step(0)
            assert not truncated
        _, _, terminated, truncated, _ = env.step(0)
        assert truncated
        assert not terminated

    def test_deterministic_with_seed(self, config):
        """Same seed and actions give identical observations."""
        actions = [3, 0, 0, 0, 0, 0, 1, 0, 0, 0, 0, 3, 0, 0, 0]
        runs = []
        for _ in range(2):
            env = BallRunnerEnv(config=config)
            obs, _ = env.reset(seed=123)
            for action in actions:
                obs, *_ = env.step(action)
            runs.append(obs)
            env.close()

        for key in runs[0]:
            np.testing.assert_array_equal(runs[0][key], runs[1][key])

    def test_reset_mid_episode(self, env):
        env.reset(seed=5)
        for _ in range(5):
            env.step(3)
        obs, info = env.reset(seed=5)
        assert info["tick"] == 0
        assert obs["ball"].tolist() == [200, 600, 0, 0]
