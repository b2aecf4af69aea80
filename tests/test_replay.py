"""
Tests for replay recording and headless re-simulation.
"""

import dataclasses
import json

import pytest

from ball_runner.runner_core.config_loader import load_config
from ball_runner.runner_core.env_gym import BallRunnerEnv
from ball_runner.runner_core.replay_recorder import (
    Replay,
    ReplayMismatchError,
    ReplayRecorder,
    compute_config_hash,
    generate_replay_filename,
    load_replay,
    record_episode,
    replay_actions,
    verify_replay,
)


@pytest.fixture
def config():
    base = load_config()
    return dataclasses.replace(base, caps=dataclasses.replace(base.caps, max_ticks=600))


def hopper(obs):
    """Jump right whenever the ball is falling low."""
    x, y, vx, vy = obs["ball"]
    if vy > 0 and y > 540:
        return 3
    return 0


def with_spawning(config, **changes):
    return dataclasses.replace(config, spawning=dataclasses.replace(config.spawning, **changes))


class TestReplayRecorder:

    def test_records_actions_and_scores(self, config):
        recorder = ReplayRecorder(BallRunnerEnv(config=config), agent_name="idle")
        recorder.reset(seed=9)
        done = False
        while not done:
            _, _, terminated, truncated, _ = recorder.step(0)
            done = terminated or truncated

        data = recorder.get_replay_data()
        assert data["seed"] == 9
        assert data["agent"] == "idle"
        assert data["actions"] == [0] * 16
        assert data["total_ticks"] == 16
        assert data["final_score"] == 0
        assert data["termination_reason"] == "ground"
        assert data["end_tick"] == 16
        assert data["jumps"] == []
        assert data["events"][-1] == ["GameOver"]
        assert not recorder.recording

    def test_steps_after_game_over_are_not_recorded(self, config):
        recorder = ReplayRecorder(BallRunnerEnv(config=config))
        recorder.reset(seed=9)
        while recorder.recording:
            recorder.step(0)
        recorder.step(1)
        assert recorder.replay.total_ticks == 16

    def test_jump_ticks_follow_actions(self, config):
        data = record_episode(BallRunnerEnv(config=config), hopper, seed=4)
        expected = [i + 1 for i, action in enumerate(data["actions"]) if action != 0]
        assert expected
        assert data["jumps"] == expected
        for tick in expected:
            assert data["events"][tick - 1][:2] == ["BallJumped", "RotateBall"]

    def test_truncated_episode_reason(self, config):
        data = record_episode(BallRunnerEnv(config=config), hopper, seed=4)
        assert data["total_ticks"] == 600
        assert data["end_tick"] == 600
        assert data["termination_reason"] == "truncated"

    def test_save_and_load(self, config, tmp_path):
        path = tmp_path / "replays" / "run.json"
        data = record_episode(
            BallRunnerEnv(config=config), hopper, seed=4, save_path=str(path), agent_name="hopper"
        )
        loaded = load_replay(path)
        assert loaded == data
        assert loaded["config_hash"] == compute_config_hash(config)
        assert Replay.from_dict(loaded).jump_ticks == data["jumps"]

    def test_save_generates_name(self, config, tmp_path):
        recorder = ReplayRecorder(BallRunnerEnv(config=config), agent_name="idle")
        recorder.reset(seed=3)
        path = recorder.save(directory=tmp_path)
        assert path.parent == tmp_path
        assert path.name.endswith("_s3.json")
        assert path.exists()

    def test_refuses_overwrite(self, config, tmp_path):
        path = tmp_path / "run.json"
        recorder = ReplayRecorder(BallRunnerEnv(config=config))
        recorder.reset(seed=1)
        recorder.save(path)
        with pytest.raises(FileExistsError):
            recorder.save(path, overwrite=False)

    def test_generated_filename(self, tmp_path):
        path = generate_replay_filename("hopper", seed=7, directory=tmp_path)
        assert path.parent == tmp_path
        assert path.name.startswith("hopper_")
        assert path.name.endswith("_s7.json")

    def test_unknown_format_rejected(self, config):
        data = record_episode(BallRunnerEnv(config=config), hopper, seed=4)
        data["format"] = 99
        with pytest.raises(ValueError):
            Replay.from_dict(data)


class TestConfigHash:

    @pytest.mark.parametrize("changes", [
        {"batch_spacing": 50.0},
        {"box_min_height": 10.0},
        {"milestone_lead": 250.0},
        {"hazard_lead_range": 400.0},
        {"collectible_min_height": 300.0},
    ])
    def test_course_layout_changes_hash(self, config, changes):
        assert compute_config_hash(with_spawning(config, **changes)) != compute_config_hash(config)

    def test_physics_changes_hash(self, config):
        changed = dataclasses.replace(
            config, physics=dataclasses.replace(config.physics, gravity=0.6)
        )
        assert compute_config_hash(changed) != compute_config_hash(config)

    def test_episode_cap_does_not_change_hash(self, config):
        assert compute_config_hash(config) == compute_config_hash(load_config())


class TestReplayActions:

    def test_replay_reproduces_score(self, config):
        data = record_episode(BallRunnerEnv(config=config), hopper, seed=21)
        assert data["final_score"] > 0
        assert replay_actions(data["actions"], data["seed"], config) == data["final_score"]

    def test_different_seed_changes_course(self, config):
        a = BallRunnerEnv(config=config)
        b = BallRunnerEnv(config=config)
        obs_a, _ = a.reset(seed=1)
        obs_b, _ = b.reset(seed=2)
        assert obs_a["box_xy"].tolist() != obs_b["box_xy"].tolist()


class TestVerifyReplay:

    @pytest.fixture
    def saved(self, config, tmp_path):
        path = tmp_path / "run.json"
        record_episode(BallRunnerEnv(config=config), hopper, seed=21, save_path=path)
        return path

    def test_verifies_saved_file(self, config, saved):
        assert verify_replay(saved, config) == load_replay(saved)["final_score"]

    def test_rejects_other_course_layout(self, config, saved):
        with pytest.raises(ReplayMismatchError):
            verify_replay(saved, with_spawning(config, batch_spacing=50.0))

    def test_rejects_tampered_score(self, config, saved):
        data = json.loads(saved.read_text())
        data["scores"][-1] += 1
        with pytest.raises(ReplayMismatchError):
            verify_replay(data, config)
