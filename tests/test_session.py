"""
Tests for the session host, input rules and profile persistence.
"""

import json
import logging

import pytest

from ball_runner.runner_core.config_loader import load_config
from ball_runner.runner_core.persistence import HighScore, ProfileStore
from ball_runner.runner_core.rules import (
    GamePhase,
    JumpDirection,
    direction_from_touch,
    normalize_player_name,
)
from ball_runner.runner_core.session import GameSession


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def store(tmp_path):
    return ProfileStore(tmp_path / "profile.json")


@pytest.fixture
def session(config, store):
    session = GameSession(config=config, store=store, seed=42)
    session.submit_name("Ada")
    return session


def play_until_over(session, limit=100):
    for _ in range(limit):
        if session.tick().game_over:
            return
    raise AssertionError("game did not end")


class TestInputRules:
    """Touch mapping and name validation."""

    @pytest.mark.parametrize("touch_x, expected", [
        (399, JumpDirection.RIGHT),
        (251, JumpDirection.RIGHT),
        (250, JumpDirection.NONE),
        (200, JumpDirection.NONE),
        (150, JumpDirection.NONE),
        (149, JumpDirection.LEFT),
        (0, JumpDirection.LEFT),
    ])
    def test_direction_from_touch(self, touch_x, expected):
        assert direction_from_touch(touch_x, 400, 50) == expected

    def test_name_is_stripped(self):
        assert normalize_player_name("  Ada  ") == "Ada"

    @pytest.mark.parametrize("raw", ["", " ", "A", "  A  "])
    def test_short_names_rejected(self, raw):
        assert normalize_player_name(raw) is None


class TestNameEntry:
    """First launch flow."""

    def test_first_launch_asks_for_name(self, config, store):
        session = GameSession(config=config, store=store)
        assert session.phase == GamePhase.NAME_ENTRY
        assert session.player_name is None
        assert session.start() is False

    def test_short_name_keeps_name_entry(self, config, store):
        session = GameSession(config=config, store=store)
        assert session.submit_name(" A ") is False
        assert session.phase == GamePhase.NAME_ENTRY

    def test_valid_name_moves_to_menu(self, config, store):
        session = GameSession(config=config, store=store)
        assert session.submit_name("  Ada ")
        assert session.phase == GamePhase.MENU
        assert session.player_name == "Ada"

        with open(store.path) as f:
            assert json.load(f)["player_name"] == "Ada"

    def test_stored_name_skips_name_entry(self, config, store):
        GameSession(config=config, store=store).submit_name("Ada")
        session = GameSession(config=config, store=ProfileStore(store.path))
        assert session.phase == GamePhase.MENU
        assert session.player_name == "Ada"


class TestPlay:
    """Starting, tapping and finishing a run."""

    def test_start_from_menu(self, session):
        assert session.start()
        assert session.phase == GamePhase.PLAYING

    def test_tap_right(self, session):
        session.start()
        assert session.tap(390)
        assert session.game.physics.ball.velocity == pytest.approx((5.0, -15.0))

    def test_tap_left(self, session):
        session.start()
        assert session.tap(10)
        assert session.game.physics.ball.velocity == pytest.approx((-5.0, -15.0))

    def test_tap_centre_keeps_horizontal_speed(self, session):
        session.start()
        session.tap(390)
        session.tick()
        vx = session.game.physics.ball.velocity[0]
        session.tap(200)
        assert session.game.physics.ball.velocity == pytest.approx((vx, -15.0))

    def test_tap_ignored_in_menu(self, session):
        assert session.tap(390) is False

    def test_game_over_records_result(self, session):
        session.start()
        play_until_over(session)
        assert session.phase == GamePhase.GAME_OVER
        result = session.last_result
        assert result.player_name == "Ada"
        assert result.final_score == 0
        assert result.reason == "ground"
        assert result.new_high_score is True
        assert session.high_score == HighScore(name="Ada", score=0)

    def test_tie_is_not_a_new_high_score(self, session):
        session.start()
        play_until_over(session)
        session.start()
        play_until_over(session)
        assert session.last_result.new_high_score is False

    def test_higher_score_replaces_record(self, session, store):
        session.start()
        play_until_over(session)
        session.start()
        session.game.scorer.add_points(30)
        play_until_over(session)
        assert session.last_result.new_high_score is True
        assert session.high_score.score == 30

        with open(store.path) as f:
            assert json.load(f)["high_score"] == {"name": "Ada", "score": 30}

    def test_play_again_and_back_to_menu(self, session):
        session.start()
        assert session.back_to_menu() is False
        play_until_over(session)
        assert session.start()
        assert session.last_result is None
        play_until_over(session)
        assert session.back_to_menu()
        assert session.phase == GamePhase.MENU


class TestPersistence:
    """Storage problems never stop the game."""

    def test_missing_file_is_empty_profile(self, store):
        profile = store.load()
        assert profile.player_name is None
        assert profile.high_score is None
        assert not profile.has_player

    def test_round_trip(self, store):
        store.save_player_name("Ada")
        assert store.submit_score("Ada", 120)
        profile = ProfileStore(store.path).load()
        assert profile.player_name == "Ada"
        assert profile.high_score == HighScore(name="Ada", score=120)

    def test_strict_comparison(self, store):
        store.submit_score("Ada", 50)
        assert store.submit_score("Bob", 50) is False
        assert store.profile.high_score.name == "Ada"
        assert store.submit_score("Bob", 51) is True
        assert store.profile.high_score == HighScore(name="Bob", score=51)

    def test_corrupt_file_reads_as_empty(self, store, caplog):
        store.path.write_text("{not json")
        with caplog.at_level(logging.WARNING):
            profile = store.load()
        assert profile.player_name is None
        assert "Could not read profile" in caplog.text

    @pytest.mark.parametrize("content", [
        "null",
        "[1, 2]",
        '"x"',
        '{"player_name": "Ada", "high_score": 7}',
    ])
    def test_wrong_json_shape_reads_as_empty(self, config, store, content, caplog):
        store.path.write_text(content)
        with caplog.at_level(logging.WARNING):
            session = GameSession(config=config, store=store)
        assert session.phase == GamePhase.NAME_ENTRY
        assert store.profile.high_score is None
        assert "Could not read profile" in caplog.text

    def test_unwritable_store_does_not_block_game_over(self, config, tmp_path, caplog):
        # A directory cannot be opened as a file
        broken = ProfileStore(tmp_path)
        with caplog.at_level(logging.WARNING):
            session = GameSession(config=config, store=broken)
            assert session.submit_name("Ada")
            assert session.start()
            play_until_over(session)

        assert session.phase == GamePhase.GAME_OVER
        assert session.last_result.final_score == 0
        assert "Could not write profile" in caplog.text
