"""
RNG - Entity Spawner
====================

Seeded spawn rules for boxes, milestone boxes, hazards and collectibles.
Every random draw goes through one random.Random so a seed reproduces the
whole obstacle course.
"""

from __future__ import annotations

import random
from typing import List, Optional

from ball_runner.runner_core.config_loader import GameConfig, get_config
from ball_runner.runner_core.entities import (
    Box,
    BoxKind,
    Collectible,
    EntityField,
    Hazard,
)


class EntitySpawner:
    """
    Places new entities just beyond the right edge of the screen.

    Positions are relative to the camera, heights are measured upward from
    the ground line.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize spawner.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rules = config.spawning
        self._screen_width = config.screen.width
        self._ground_level = config.ground_level
        self._rng = random.Random(seed)

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the generator with optional new seed.

        Args:
            seed: New random seed. Keeps current stream if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)

    def _ahead(self, camera: float) -> float:
        """World X of the right screen edge."""
        return camera + self._screen_width

    def needs_boxes(self, field: EntityField) -> bool:
        """True while fewer boxes than the configured minimum exist."""
        return field.box_count < self._rules.min_boxes

    def spawn_boxes(self, field: EntityField, camera: float) -> List[Box]:
        """
        Spawn one batch of normal boxes ahead of the camera.

        Box i lands at x = edge + i*spacing + U(0, jitter) and
        y = ground - min_height - U(0, height_range).

        Returns:
            The new boxes in spawn order.
        """
        rules = self._rules
        start_x = self._ahead(camera)
        boxes = []
        for i in range(rules.batch_size):
            x = start_x + i * rules.batch_spacing + self._rng.random() * rules.batch_jitter
            y = self._ground_level - rules.box_min_height - self._rng.random() * rules.box_height_range
            boxes.append(field.add_box(x, y, BoxKind.NORMAL))
        return boxes

    def spawn_milestone_box(self, field: EntityField, camera: float) -> Box:
        """Spawn a milestone box just ahead of the camera, close to the ground."""
        x = self._ahead(camera) + self._rules.milestone_lead
        y = self._ground_level - self._rules.milestone_height
        return field.add_box(x, y, BoxKind.MILESTONE)

    def maybe_spawn_hazard(
        self,
        field: EntityField,
        camera: float,
        score: int
    ) -> Optional[Hazard]:
        """
        Roll for a hazard.

        Nothing is drawn from the generator below the score threshold, so an
        early run replays identically regardless of the hazard chance.

        Returns:
            The new hazard, or None.
        """
        rules = self._rules
        if score < rules.hazard_score_threshold:
            return None
        if self._rng.random() >= rules.hazard_spawn_chance:
            return None
        x = self._ahead(camera) + self._rng.random() * rules.hazard_lead_range
        y = self._ground_level - rules.hazard_min_height - self._rng.random() * rules.hazard_height_range
        return field.add_hazard(x, y)

    def spawn_collectible(self, field: EntityField, camera: float) -> Collectible:
        """Spawn one collectible ahead of the camera."""
        rules = self._rules
        x = self._ahead(camera) + self._rng.random() * rules.collectible_lead_range
        y = self._ground_level - rules.collectible_min_height - self._rng.random() * rules.collectible_height_range
        return field.add_collectible(x, y)

    def maybe_spawn_collectible(self, field: EntityField, camera: float) -> Optional[Collectible]:
        """
        Per-tick collectible rule.

        Disabled by default (spawning.collectibles_enabled). While disabled it
        draws nothing from the generator.
        """
        rules = self._rules
        if not rules.collectibles_enabled:
            return None
        if self._rng.random() >= rules.collectible_spawn_chance:
            return None
        return self.spawn_collectible(field, camera)
