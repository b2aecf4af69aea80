"""
Collision System
================

Axis-aligned overlap tests between the ball and field entities.

Overlap is strict: rectangles that only share an edge do not collide.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ball_runner.runner_core.entities import (
    Box,
    Collectible,
    EntityField,
    Hazard,
    Rect,
)


def rects_overlap(a: Rect, b: Rect) -> bool:
    """
    Check whether two (left, top, right, bottom) rectangles overlap.

    Args:
        a: First rectangle.
        b: Second rectangle.

    Returns:
        True if the interiors intersect.
    """
    a_left, a_top, a_right, a_bottom = a
    b_left, b_top, b_right, b_bottom = b
    return (
        a_right > b_left
        and a_left < b_right
        and a_bottom > b_top
        and a_top < b_bottom
    )


@dataclass
class CollisionResult:
    """Contacts resolved during one tick, in resolution order."""
    boxes: List[Box] = field(default_factory=list)
    collectibles: List[Collectible] = field(default_factory=list)
    hazard: Optional[Hazard] = None

    @property
    def fatal(self) -> bool:
        return self.hazard is not None


class CollisionSystem:
    """
    Resolves ball contacts against the entity field.

    Boxes are checked first, then collectibles, then hazards. Each contact
    flips the entity's terminal flag so it can never be resolved twice. The
    first hazard contact stops resolution.
    """

    def resolve(self, ball_rect: Rect, entities: EntityField) -> CollisionResult:
        """
        Find and mark every new contact.

        Args:
            ball_rect: Ball bounding box after this tick's move.
            entities: The entity field to test against.

        Returns:
            CollisionResult listing the entities that were just hit.
        """
        result = CollisionResult()

        for box in entities.boxes:
            if box.broken:
                continue
            if rects_overlap(ball_rect, entities.box_rect(box)):
                box.broken = True
                result.boxes.append(box)

        for collectible in entities.collectibles:
            if collectible.collected:
                continue
            if rects_overlap(ball_rect, entities.collectible_rect(collectible)):
                collectible.collected = True
                result.collectibles.append(collectible)

        for hazard in entities.hazards:
            if hazard.hit:
                continue
            if rects_overlap(ball_rect, entities.hazard_rect(hazard)):
                hazard.hit = True
                result.hazard = hazard
                break

        return result
