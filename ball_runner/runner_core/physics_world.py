"""
Physics World
=============

Manages the pymunk Space and the ball body.

The ball uses a custom integrator: gravity lands on the velocity before the
position moves, and horizontal friction is applied after the move. pymunk's
default order (position first) would shift every trajectory by one tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import pymunk

from ball_runner.runner_core.config_loader import GameConfig, get_config
from ball_runner.runner_core.entities import Rect, centered_rect


@dataclass
class BallBody:
    """
    The player ball in the physics world.

    Wraps the pymunk Body with game-specific accessors.
    """
    body: pymunk.Body
    size: float

    @property
    def position(self) -> Tuple[float, float]:
        return self.body.position.x, self.body.position.y

    @property
    def velocity(self) -> Tuple[float, float]:
        return self.body.velocity.x, self.body.velocity.y

    @property
    def x(self) -> float:
        return self.body.position.x

    @property
    def y(self) -> float:
        return self.body.position.y

    @property
    def rect(self) -> Rect:
        """Bounding box centred on the ball."""
        return centered_rect(self.body.position.x, self.body.position.y, self.size)


class PhysicsWorld:
    """
    Fixed-step kinematics for the ball.

    Handles:
    - Space creation with configured gravity
    - Ball placement and jump impulses
    - One integration step per tick, followed by horizontal friction
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize physics world.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._dt = config.physics.dt
        self._friction = config.physics.friction

        self._space = pymunk.Space()
        self._space.gravity = (0.0, config.physics.gravity)

        body = pymunk.Body(1.0, float("inf"))
        body.position_func = self._integrate_position
        body.velocity_func = self._keep_velocity
        self._space.add(body)

        self._ball = BallBody(body=body, size=config.entities.ball_size)
        self.place_ball(*config.spawn_point)

    @staticmethod
    def _integrate_position(body: pymunk.Body, dt: float) -> None:
        # Semi-implicit Euler: v += g*dt, then p += v*dt
        body.velocity = body.velocity + body.space.gravity * dt
        body.position = body.position + body.velocity * dt

    @staticmethod
    def _keep_velocity(body: pymunk.Body, gravity, damping: float, dt: float) -> None:
        # Gravity was already applied in _integrate_position
        return None

    @property
    def space(self) -> pymunk.Space:
        """The pymunk Space instance."""
        return self._space

    @property
    def ball(self) -> BallBody:
        """The ball body."""
        return self._ball

    def place_ball(
        self,
        x: float,
        y: float,
        velocity: Tuple[float, float] = (0.0, 0.0)
    ) -> None:
        """
        Teleport the ball.

        Args:
            x: World X.
            y: World Y.
            velocity: New velocity (default at rest).
        """
        self._ball.body.position = (x, y)
        self._ball.body.velocity = velocity

    def jump(self, horizontal: Optional[float] = None) -> None:
        """
        Apply a jump impulse.

        Vertical velocity is replaced by the jump power. Horizontal velocity is
        replaced only when a horizontal speed is given.

        Args:
            horizontal: New horizontal velocity, or None to keep the current one.
        """
        vx, _ = self._ball.velocity
        if horizontal is not None:
            vx = horizontal
        self._ball.body.velocity = (vx, self._config.physics.jump_power)

    def step(self) -> None:
        """Advance the ball by one tick: gravity, move, then horizontal friction."""
        self._space.step(self._dt)
        vx, vy = self._ball.velocity
        self._ball.body.velocity = (vx * self._friction, vy)

    def is_grounded(self, ground_level: float) -> bool:
        """True once the ball centre reaches the ground line."""
        return self._ball.y >= ground_level

    def reset(self) -> None:
        """Return the ball to the spawn point at rest."""
        self.place_ball(*self._config.spawn_point)
