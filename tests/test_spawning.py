"""
Tests for procedural spawning, culling and milestones.
"""

import dataclasses

import pytest

from ball_runner.runner_core.config_loader import load_config
from ball_runner.runner_core.entities import BoxKind, EntityField
from ball_runner.runner_core.game import CoreGame
from ball_runner.runner_core.rng import EntitySpawner


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def hazard_config(config):
    """Hazards roll every tick once allowed."""
    spawning = dataclasses.replace(config.spawning, hazard_spawn_chance=1.0)
    return dataclasses.replace(config, spawning=spawning)


@pytest.fixture
def game(config):
    game = CoreGame(config=config, seed=11)
    game.reset()
    return game


def keep_airborne(game):
    game.physics.place_ball(200, 300, velocity=(0.0, -game.config.physics.gravity))


class TestBoxSpawning:
    """Batch placement ahead of the camera."""

    def test_reset_spawns_one_batch(self, game):
        boxes = game.entities.boxes
        assert len(boxes) == 3
        assert all(b.kind == BoxKind.NORMAL for b in boxes)
        assert all(not b.broken for b in boxes)
        assert game.entities.collectibles == []
        assert game.entities.hazards == []

    def test_batch_bands(self, config):
        field = EntityField(config)
        spawner = EntitySpawner(config, seed=5)
        for _ in range(20):
            field.clear()
            camera = 1234.0
            boxes = spawner.spawn_boxes(field, camera)
            for i, box in enumerate(boxes):
                assert camera + 400 + i * 200 <= box.x <= camera + 400 + i * 200 + 100
                assert 400 <= box.y <= 600
                assert box.points == 10

    def test_same_seed_same_course(self, config):
        a = CoreGame(config=config, seed=99)
        b = CoreGame(config=config, seed=99)
        a.reset()
        b.reset()
        for _ in range(10):
            a.tick()
            b.tick()
        assert [(x.x, x.y) for x in a.entities.boxes] == [(x.x, x.y) for x in b.entities.boxes]

    def test_reset_with_seed_replays_course(self, game):
        first = [(b.x, b.y) for b in game.reset(seed=3).boxes]
        game.tick()
        second = [(b.x, b.y) for b in game.reset(seed=3).boxes]
        assert first == second

    def test_refills_while_below_minimum(self, game):
        game.tick()
        assert game.entities.box_count == 6
        game.tick()
        game.tick()
        assert game.entities.box_count == 12
        game.tick()
        assert game.entities.box_count == 12

    def test_ids_unique(self, game):
        for _ in range(5):
            game.tick()
        ids = [b.uid for b in game.entities.boxes]
        assert len(ids) == len(set(ids))


class TestCulling:
    """Entities behind the camera are dropped."""

    def test_cull_keeps_strictly_ahead(self, config):
        field = EntityField(config)
        field.add_box(-100, 500)
        kept = field.add_box(-99.9, 500)
        field.add_hazard(-150, 500)
        removed = field.cull(-100)
        assert removed == 2
        assert field.boxes == [kept]
        assert field.hazards == []

    def test_engine_culls_behind_camera(self, game):
        old = game.entities.add_box(-100, 300)
        keep_airborne(game)
        game.tick()
        assert old not in game.entities.boxes


class TestHazardSpawning:
    """Hazards appear only once the score threshold is reached."""

    def test_no_hazards_below_threshold(self, hazard_config):
        game = CoreGame(config=hazard_config, seed=2)
        game.reset()
        game.scorer.add_points(499)
        for _ in range(5):
            keep_airborne(game)
            game.tick()
        assert game.entities.hazards == []

    def test_hazards_at_threshold(self, hazard_config):
        game = CoreGame(config=hazard_config, seed=2)
        game.reset()
        game.scorer.add_points(500)
        keep_airborne(game)
        game.tick()
        assert len(game.entities.hazards) == 1
        hazard = game.entities.hazards[0]
        assert 400 <= hazard.x <= 600
        assert 450 <= hazard.y <= 600
        assert not hazard.hit

    def test_below_threshold_draws_no_randomness(self, config, hazard_config):
        """Hazard chance must not shift the box course before 500 points."""
        a = CoreGame(config=config, seed=8)
        b = CoreGame(config=hazard_config, seed=8)
        a.reset()
        b.reset()
        for _ in range(5):
            a.tick()
            b.tick()
        assert [(x.x, x.y) for x in a.entities.boxes] == [(x.x, x.y) for x in b.entities.boxes]


class TestCollectibles:
    """The per-tick collectible rule is dormant by default."""

    def test_no_collectibles_by_default(self, game):
        for _ in range(10):
            keep_airborne(game)
            game.tick()
        assert game.entities.collectibles == []

    def test_manual_spawn(self, game):
        collectible = game.spawn_collectible()
        assert collectible is not None
        assert 400 <= collectible.x <= 600
        assert 350 <= collectible.y <= 550

    def test_manual_spawn_outside_play(self, config):
        game = CoreGame(config=config)
        assert game.spawn_collectible() is None

    def test_enabled_rule_spawns(self, config):
        spawning = dataclasses.replace(
            config.spawning, collectibles_enabled=True, collectible_spawn_chance=1.0
        )
        game = CoreGame(config=dataclasses.replace(config, spawning=spawning), seed=4)
        game.reset()
        keep_airborne(game)
        game.tick()
        assert len(game.entities.collectibles) == 1


class TestMilestones:
    """A bonus box for every new multiple of 100 points."""

    def test_milestone_at_100(self, game):
        game.scorer.add_points(100)
        keep_airborne(game)
        game.tick()
        assert game.last_milestone == 100
        milestones = [b for b in game.entities.boxes if b.kind == BoxKind.MILESTONE]
        assert len(milestones) == 1
        assert milestones[0].x == pytest.approx(500)
        assert milestones[0].y == pytest.approx(650)
        assert milestones[0].points == 50

    def test_milestone_claimed_once(self, game):
        game.scorer.add_points(100)
        for _ in range(3):
            keep_airborne(game)
            game.tick()
        milestones = [b for b in game.entities.boxes if b.kind == BoxKind.MILESTONE]
        assert len(milestones) == 1

    def test_skipped_milestones_claim_highest(self, game):
        game.scorer.add_points(250)
        keep_airborne(game)
        game.tick()
        assert game.last_milestone == 200
        milestones = [b for b in game.entities.boxes if b.kind == BoxKind.MILESTONE]
        assert len(milestones) == 1

    def test_no_milestone_at_zero(self, game):
        keep_airborne(game)
        game.tick()
        assert game.last_milestone == 0
        assert all(b.kind == BoxKind.NORMAL for b in game.entities.boxes)
