"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml


@dataclass(frozen=True)
class ScreenConfig:
    """Viewport geometry. The ground and spawn point are derived from it."""
    width: int
    height: int
    ground_offset: float         # Ground line distance from the bottom edge
    spawn_offset: float          # Ball spawn distance from the bottom edge


@dataclass(frozen=True)
class PhysicsConfig:
    """Ball kinematics."""
    gravity: float
    jump_power: float
    horizontal_jump: float
    friction: float
    dt: float


@dataclass(frozen=True)
class EntityConfig:
    """Bounding box edge lengths."""
    ball_size: float
    box_size: float
    collectible_size: float
    hazard_size: float


@dataclass(frozen=True)
class SpawnConfig:
    """Procedural spawn rules. Heights are measured upward from the ground."""
    min_boxes: int
    batch_size: int
    batch_spacing: float
    batch_jitter: float
    box_min_height: float
    box_height_range: float
    milestone_lead: float
    milestone_height: float
    hazard_score_threshold: int
    hazard_spawn_chance: float
    hazard_lead_range: float
    hazard_min_height: float
    hazard_height_range: float
    collectibles_enabled: bool
    collectible_spawn_chance: float
    collectible_lead_range: float
    collectible_min_height: float
    collectible_height_range: float
    cull_margin: float


@dataclass(frozen=True)
class ScoringConfig:
    """Point values."""
    box_points: int
    milestone_points: int
    collectible_points: int
    milestone_interval: int


@dataclass(frozen=True)
class InputConfig:
    """Touch mapping and name entry rules."""
    dead_zone: float
    name_min_length: int


@dataclass(frozen=True)
class CapsConfig:
    """Episode limits."""
    max_ticks: int


@dataclass(frozen=True)
class ObservationConfig:
    """Fixed array sizes for packed observations."""
    max_boxes: int
    max_collectibles: int
    max_hazards: int


@dataclass(frozen=True)
class StorageConfig:
    """Player profile location."""
    profile_path: str


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    screen: ScreenConfig
    physics: PhysicsConfig
    entities: EntityConfig
    spawning: SpawnConfig
    scoring: ScoringConfig
    input: InputConfig
    caps: CapsConfig
    observation: ObservationConfig
    storage: StorageConfig

    @property
    def ground_level(self) -> float:
        """World Y of the ground line. Reaching it ends the game."""
        return self.screen.height - self.screen.ground_offset

    @property
    def spawn_point(self) -> Tuple[float, float]:
        """World position of the ball at session start."""
        return (self.screen.width / 2, self.screen.height - self.screen.spawn_offset)

    @property
    def profile_path(self) -> Path:
        """Expanded profile path."""
        return Path(os.path.expanduser(self.storage.profile_path))


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


def _require_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    screen = config.screen
    _require_positive("screen.width", screen.width)
    _require_positive("screen.height", screen.height)

    # Spawn point must be strictly above the ground or the first tick ends the game
    if screen.spawn_offset <= screen.ground_offset:
        raise ValueError(
            f"screen.spawn_offset ({screen.spawn_offset}) must exceed "
            f"screen.ground_offset ({screen.ground_offset})"
        )

    if not 0.0 < config.physics.friction <= 1.0:
        raise ValueError(f"physics.friction must be within (0, 1], got {config.physics.friction}")
    _require_positive("physics.dt", config.physics.dt)

    entities = config.entities
    _require_positive("entities.ball_size", entities.ball_size)
    _require_positive("entities.box_size", entities.box_size)
    _require_positive("entities.collectible_size", entities.collectible_size)
    _require_positive("entities.hazard_size", entities.hazard_size)

    spawning = config.spawning
    if spawning.batch_size < 1:
        raise ValueError(f"spawning.batch_size must be at least 1, got {spawning.batch_size}")
    _require_probability("spawning.hazard_spawn_chance", spawning.hazard_spawn_chance)
    _require_probability("spawning.collectible_spawn_chance", spawning.collectible_spawn_chance)

    if config.scoring.milestone_interval < 1:
        raise ValueError(
            f"scoring.milestone_interval must be at least 1, got {config.scoring.milestone_interval}"
        )

    if config.input.name_min_length < 1:
        raise ValueError(f"input.name_min_length must be at least 1, got {config.input.name_min_length}")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    screen_data = raw["screen"]
    screen = ScreenConfig(
        width=int(screen_data["width"]),
        height=int(screen_data["height"]),
        ground_offset=float(screen_data.get("ground_offset", 100)),
        spawn_offset=float(screen_data.get("spawn_offset", 200))
    )

    physics_data = raw["physics"]
    physics = PhysicsConfig(
        gravity=float(physics_data["gravity"]),
        jump_power=float(physics_data["jump_power"]),
        horizontal_jump=float(physics_data["horizontal_jump"]),
        friction=float(physics_data["friction"]),
        dt=float(physics_data.get("dt", 1.0))
    )

    entity_data = raw["entities"]
    entities = EntityConfig(
        ball_size=float(entity_data["ball_size"]),
        box_size=float(entity_data["box_size"]),
        collectible_size=float(entity_data["collectible_size"]),
        hazard_size=float(entity_data["hazard_size"])
    )

    spawn_data = raw["spawning"]
    spawning = SpawnConfig(
        min_boxes=int(spawn_data["min_boxes"]),
        batch_size=int(spawn_data["batch_size"]),
        batch_spacing=float(spawn_data["batch_spacing"]),
        batch_jitter=float(spawn_data["batch_jitter"]),
        box_min_height=float(spawn_data["box_min_height"]),
        box_height_range=float(spawn_data["box_height_range"]),
        milestone_lead=float(spawn_data["milestone_lead"]),
        milestone_height=float(spawn_data["milestone_height"]),
        hazard_score_threshold=int(spawn_data["hazard_score_threshold"]),
        hazard_spawn_chance=float(spawn_data["hazard_spawn_chance"]),
        hazard_lead_range=float(spawn_data["hazard_lead_range"]),
        hazard_min_height=float(spawn_data["hazard_min_height"]),
        hazard_height_range=float(spawn_data["hazard_height_range"]),
        collectibles_enabled=bool(spawn_data.get("collectibles_enabled", False)),
        collectible_spawn_chance=float(spawn_data.get("collectible_spawn_chance", 0.02)),
        collectible_lead_range=float(spawn_data.get("collectible_lead_range", 200)),
        collectible_min_height=float(spawn_data.get("collectible_min_height", 150)),
        collectible_height_range=float(spawn_data.get("collectible_height_range", 200)),
        cull_margin=float(spawn_data["cull_margin"])
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        box_points=int(scoring_data["box_points"]),
        milestone_points=int(scoring_data["milestone_points"]),
        collectible_points=int(scoring_data["collectible_points"]),
        milestone_interval=int(scoring_data["milestone_interval"])
    )

    input_data = raw.get("input", {})
    input_config = InputConfig(
        dead_zone=float(input_data.get("dead_zone", 50)),
        name_min_length=int(input_data.get("name_min_length", 2))
    )

    caps_data = raw.get("caps", {})
    caps = CapsConfig(
        max_ticks=int(caps_data.get("max_ticks", 36000))
    )

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_boxes=int(obs_data.get("max_boxes", 32)),
        max_collectibles=int(obs_data.get("max_collectibles", 16)),
        max_hazards=int(obs_data.get("max_hazards", 16))
    )

    storage_data = raw.get("storage", {})
    storage = StorageConfig(
        profile_path=str(storage_data.get("profile_path", "~/.ball_runner/profile.json"))
    )

    config = GameConfig(
        screen=screen,
        physics=physics,
        entities=entities,
        spawning=spawning,
        scoring=scoring,
        input=input_config,
        caps=caps,
        observation=observation,
        storage=storage
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
