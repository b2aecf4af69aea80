"""
Core Game
=========

Main game orchestrator combining physics, spawning, collisions, scoring, and rules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ball_runner.runner_core.collision_system import CollisionSystem
from ball_runner.runner_core.config_loader import GameConfig, get_config
from ball_runner.runner_core.entities import BoxKind, Collectible, EntityField
from ball_runner.runner_core.events import (
    BallJumped,
    EventDispatcher,
    GameEvent,
    GameOver,
    ItemCollected,
    Listener,
    RotateBall,
)
from ball_runner.runner_core.physics_world import PhysicsWorld
from ball_runner.runner_core.rng import EntitySpawner
from ball_runner.runner_core.rules import (
    GamePhase,
    JumpDirection,
    PhaseMachine,
    TerminationResult,
    TerminationRules,
)
from ball_runner.runner_core.scoring import ScoreTracker
from ball_runner.runner_core.state_snapshot import GameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Result of a single tick."""
    snapshot: GameSnapshot
    events: List[GameEvent]
    delta_score: int
    game_over: bool
    termination_reason: str


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Ball physics
    - Camera follow
    - Entity spawning and culling
    - Milestone rewards
    - Collision resolution and scoring
    - Phase transitions and events
    - State snapshots

    One tick = one fixed physics step plus all world updates.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        initial_phase: GamePhase = GamePhase.MENU
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            initial_phase: Phase before the first reset (NAME_ENTRY or MENU).
        """
        if config is None:
            config = get_config()

        self._config = config

        # Initialize subsystems
        self._physics = PhysicsWorld(config)
        self._entities = EntityField(config)
        self._spawner = EntitySpawner(config, seed)
        self._collisions = CollisionSystem()
        self._scorer = ScoreTracker(config)
        self._termination = TerminationRules(config)
        self._phases = PhaseMachine(initial_phase)
        self._snapshot_builder = SnapshotBuilder(config)
        self._dispatcher = EventDispatcher()

        # Game state
        self._camera: float = 0.0
        self._tick_count: int = 0
        self._termination_reason: str = ""

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def physics(self) -> PhysicsWorld:
        """Physics world instance."""
        return self._physics

    @property
    def entities(self) -> EntityField:
        """Entity field."""
        return self._entities

    @property
    def spawner(self) -> EntitySpawner:
        """Entity spawner."""
        return self._spawner

    @property
    def scorer(self) -> ScoreTracker:
        """Score tracker."""
        return self._scorer

    @property
    def phase(self) -> GamePhase:
        """Current phase."""
        return self._phases.phase

    @property
    def score(self) -> int:
        """Current score."""
        return self._scorer.score

    @property
    def last_milestone(self) -> int:
        """Highest milestone already rewarded."""
        return self._scorer.last_milestone

    @property
    def camera(self) -> float:
        """Camera offset (world X of the left screen edge)."""
        return self._camera

    @property
    def tick_count(self) -> int:
        """Ticks advanced since the last reset."""
        return self._tick_count

    @property
    def is_playing(self) -> bool:
        """True while a run is in progress."""
        return self._phases.phase == GamePhase.PLAYING

    @property
    def is_over(self) -> bool:
        """True if the session has ended."""
        return self._phases.phase == GamePhase.GAME_OVER

    @property
    def termination_reason(self) -> str:
        """Reason for game end, or empty string."""
        return self._termination_reason

    def subscribe(self, listener: Listener) -> None:
        """Register a collaborator for engine events."""
        self._dispatcher.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        """Stop delivering events to a listener. Unknown listeners are ignored."""
        self._dispatcher.unsubscribe(listener)

    def enter_menu(self) -> bool:
        """
        Move to the menu (after name entry or from the game over screen).

        Returns:
            True if the phase changed.
        """
        if self._phases.phase == GamePhase.MENU:
            return False
        return self._phases.enter(GamePhase.MENU)

    def reset(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Start a fresh session.

        Clears every entity, puts the ball back at the spawn point at rest,
        zeroes camera, score and milestone, enters PLAYING and spawns the
        first batch of boxes. A reset while already playing restarts the run
        without emitting GameOver.

        Args:
            seed: New random seed. Keeps the current stream if None.

        Returns:
            Initial game snapshot, or the current one if the phase forbids
            starting (name entry).
        """
        if not self._phases.can_enter(GamePhase.PLAYING):
            logger.debug("Ignoring reset during %s", self._phases.phase.value)
            return self.snapshot()

        if self._phases.phase == GamePhase.PLAYING:
            logger.debug("Restarting a running session at score %d", self._scorer.score)

        self._spawner.reset(seed)

        # Reset subsystems
        self._physics.reset()
        self._entities.clear()
        self._scorer.reset()

        # Reset state
        self._camera = 0.0
        self._tick_count = 0
        self._termination_reason = ""
        self._phases.enter(GamePhase.PLAYING)

        # Initial spawn burst
        self._spawner.spawn_boxes(self._entities, self._camera)

        return self.snapshot()

    def jump(self, direction: JumpDirection = JumpDirection.NONE) -> bool:
        """
        Apply a jump impulse.

        Args:
            direction: RIGHT or LEFT also sets the horizontal speed; NONE keeps it.

        Returns:
            True if the jump was applied, False outside PLAYING.
        """
        if not self.is_playing:
            return False

        direction = JumpDirection(direction)
        speed = self._config.physics.horizontal_jump
        if direction == JumpDirection.RIGHT:
            self._physics.jump(speed)
        elif direction == JumpDirection.LEFT:
            self._physics.jump(-speed)
        else:
            self._physics.jump()

        self._dispatcher.emit([
            BallJumped(tick=self._tick_count, direction=direction.value),
            RotateBall(tick=self._tick_count),
        ])
        return True

    def tick(self) -> TickResult:
        """
        Advance the simulation by one fixed step.

        Order: gravity/move/friction, ground check, camera follow, box
        spawn, collectible hook, hazard spawn, cull, milestone, collisions.
        Outside PLAYING this is a no-op returning the current snapshot.

        Returns:
            TickResult with the new snapshot and the events of this tick.
        """
        if not self.is_playing:
            return TickResult(
                snapshot=self.snapshot(),
                events=[],
                delta_score=0,
                game_over=self.is_over,
                termination_reason=self._termination_reason
            )

        score_before = self._scorer.score
        events: List[GameEvent] = []
        self._tick_count += 1

        self._physics.step()

        term = self._termination.check_ground(self._physics.ball.y)
        if not term.terminated:
            self._update_world()
            term = self._resolve_collisions(events)

        if term.terminated:
            self._end_game(term, events)

        self._dispatcher.emit(events)

        return TickResult(
            snapshot=self.snapshot(),
            events=events,
            delta_score=self._scorer.score - score_before,
            game_over=term.terminated,
            termination_reason=term.reason
        )

    def _update_world(self) -> None:
        """Camera follow, spawning, culling and milestone rewards."""
        half_width = self._config.screen.width / 2
        ball_x = self._physics.ball.x
        if ball_x > self._camera + half_width:
            self._camera = ball_x - half_width

        if self._spawner.needs_boxes(self._entities):
            self._spawner.spawn_boxes(self._entities, self._camera)

        self._spawner.maybe_spawn_collectible(self._entities, self._camera)
        self._spawner.maybe_spawn_hazard(self._entities, self._camera, self._scorer.score)

        self._entities.cull(self._camera - self._config.spawning.cull_margin)

        if self._scorer.advance_milestone() is not None:
            self._spawner.spawn_milestone_box(self._entities, self._camera)

    def _resolve_collisions(self, events: List[GameEvent]) -> TerminationResult:
        """Score every new contact and report a hazard hit."""
        contacts = self._collisions.resolve(self._physics.ball.rect, self._entities)

        for box in contacts.boxes:
            source = "milestone" if box.kind == BoxKind.MILESTONE else "box"
            self._scorer.add_points(box.points, source)
            events.append(ItemCollected(
                tick=self._tick_count,
                entity_id=box.uid,
                kind=box.kind.value,
                points=box.points,
                score=self._scorer.score
            ))

        points = self._config.scoring.collectible_points
        for collectible in contacts.collectibles:
            self._scorer.add_points(points, "collectible")
            events.append(ItemCollected(
                tick=self._tick_count,
                entity_id=collectible.uid,
                kind="collectible",
                points=points,
                score=self._scorer.score
            ))

        return self._termination.check_hazard(contacts.fatal)

    def _end_game(self, term: TerminationResult, events: List[GameEvent]) -> None:
        self._phases.enter(GamePhase.GAME_OVER)
        self._termination_reason = term.reason
        logger.info(
            "Game over (%s) at tick %d with score %d",
            term.reason, self._tick_count, self._scorer.score
        )
        events.append(GameOver(
            tick=self._tick_count,
            final_score=self._scorer.score,
            reason=term.reason
        ))

    def spawn_collectible(self) -> Optional[Collectible]:
        """
        Spawn one collectible ahead of the camera.

        The per-tick collectible rule is disabled by default; this is the
        manual entry point for it.

        Returns:
            The new collectible, or None outside PLAYING.
        """
        if not self.is_playing:
            return None
        return self._spawner.spawn_collectible(self._entities, self._camera)

    def snapshot(self) -> GameSnapshot:
        """Build current game state snapshot."""
        return self._snapshot_builder.build(
            phase=self._phases.phase,
            tick=self._tick_count,
            score=self._scorer.score,
            last_milestone=self._scorer.last_milestone,
            camera=self._camera,
            ball=self._physics.ball,
            entities=self._entities
        )

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "score": self._scorer.score,
            "last_milestone": self._scorer.last_milestone,
            "tick": self._tick_count,
            "camera": self._camera,
            "phase": self._phases.phase.value,
            "boxes": self._entities.box_count,
            "hazards": len(self._entities.hazards),
            "terminated_reason": self._termination_reason,
        }
