"""
Tests for configuration loading and validation.
"""

import os

import pytest
import yaml

import ball_runner
from ball_runner.runner_core.config_loader import get_config, load_config, reload_config


DEFAULT_PATH = os.path.join(os.path.dirname(ball_runner.__file__), "game_config.yaml")


@pytest.fixture
def raw_config():
    with open(DEFAULT_PATH, "r") as f:
        return yaml.safe_load(f)


def write_config(tmp_path, raw):
    path = tmp_path / "game_config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(raw, f)
    return str(path)


class TestDefaults:
    """Values shipped in game_config.yaml."""

    def test_screen_geometry(self):
        config = load_config()
        assert config.screen.width == 400
        assert config.screen.height == 800
        assert config.ground_level == 700
        assert config.spawn_point == (200, 600)

    def test_physics_constants(self):
        physics = load_config().physics
        assert physics.gravity == pytest.approx(0.8)
        assert physics.jump_power == pytest.approx(-15.0)
        assert physics.horizontal_jump == pytest.approx(5.0)
        assert physics.friction == pytest.approx(0.95)

    def test_scoring_constants(self):
        scoring = load_config().scoring
        assert scoring.box_points == 10
        assert scoring.milestone_points == 50
        assert scoring.collectible_points == 25
        assert scoring.milestone_interval == 100

    def test_collectibles_disabled_by_default(self):
        assert load_config().spawning.collectibles_enabled is False

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reload_replaces_cache(self):
        before = get_config()
        after = reload_config()
        assert after is not before
        assert get_config() is after


class TestValidation:
    """Bad files are rejected."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_friction_out_of_range(self, tmp_path, raw_config):
        raw_config["physics"]["friction"] = 1.5
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_hazard_chance_out_of_range(self, tmp_path, raw_config):
        raw_config["spawning"]["hazard_spawn_chance"] = -0.1
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_spawn_point_below_ground(self, tmp_path, raw_config):
        raw_config["screen"]["spawn_offset"] = 50
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_valid_copy_loads(self, tmp_path, raw_config):
        raw_config["scoring"]["box_points"] = 7
        config = load_config(write_config(tmp_path, raw_config))
        assert config.scoring.box_points == 7
