"""
Human Play Mode
================

Play Ball Runner interactively in a pygame window.

Controls:
    - Click: Jump (left of centre steers left, right of centre steers right)
    - Space: Jump straight up
    - Enter: Confirm name / start / play again
    - M: Back to menu from the game over screen
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--fps FPS] [--profile PATH]
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from typing import Dict, Optional, Tuple

import numpy as np
import pygame

from ball_runner.runner_core.config_loader import GameConfig, load_config
from ball_runner.runner_core.events import BallJumped, GameEvent, GameOver, ItemCollected, RotateBall
from ball_runner.runner_core.persistence import ProfileStore
from ball_runner.runner_core.rules import GamePhase, JumpDirection
from ball_runner.runner_core.session import GameSession
from ball_runner.runner_core.state_snapshot import GameSnapshot

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 20


class SoundBank:
    """
    Short synthesized effects played in response to engine events.

    Any mixer failure is logged and the game continues silently.
    """

    # name -> (start Hz, end Hz, seconds)
    TONES: Dict[str, Tuple[float, float, float]] = {
        "jump": (520.0, 780.0, 0.08),
        "collect": (880.0, 1320.0, 0.12),
        "game_over": (440.0, 110.0, 0.6),
    }

    def __init__(self, volume: float = 0.4):
        self._sounds: Dict[str, pygame.mixer.Sound] = {}
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init()
            for name, (start, end, seconds) in self.TONES.items():
                sound = self._synthesize(start, end, seconds)
                sound.set_volume(volume)
                self._sounds[name] = sound
        except pygame.error as e:
            logger.warning("Sound disabled: %s", e)
            self._sounds = {}

    @staticmethod
    def _synthesize(start_hz: float, end_hz: float, seconds: float) -> pygame.mixer.Sound:
        """Frequency sweep with a linear fade out."""
        rate, _, channels = pygame.mixer.get_init()
        n = max(1, int(rate * seconds))
        freq = np.linspace(start_hz, end_hz, n)
        phase = 2 * np.pi * np.cumsum(freq) / rate
        envelope = np.linspace(1.0, 0.0, n)
        wave = (np.sin(phase) * envelope * 32767 * 0.8).astype(np.int16)
        if channels > 1:
            wave = np.repeat(wave[:, None], channels, axis=1)
        return pygame.sndarray.make_sound(np.ascontiguousarray(wave))

    def play(self, name: str) -> None:
        sound = self._sounds.get(name)
        if sound is None:
            return
        try:
            sound.play()
        except pygame.error as e:
            logger.warning("Could not play %s: %s", name, e)

    def on_event(self, event: GameEvent) -> None:
        """Engine listener."""
        if isinstance(event, BallJumped):
            self.play("jump")
        elif isinstance(event, ItemCollected):
            self.play("collect")
        elif isinstance(event, GameOver):
            self.play("game_over")


class RunnerRenderer:
    """
    Draws every screen of the game.

    World Y maps 1:1 to screen Y; world X is shifted by the camera.
    """

    def __init__(self, config: GameConfig):
        self._config = config
        self._width = config.screen.width
        self._height = config.screen.height

        # Colors
        self._sky_top = (135, 190, 235)
        self._sky_bottom = (220, 240, 255)
        self._ground = (110, 80, 50)
        self._grass = (90, 170, 70)
        self._ball = (30, 30, 30)
        self._box = (139, 90, 43)
        self._milestone = (255, 140, 0)
        self._collectible = (60, 200, 90)
        self._hazard = (255, 68, 68)
        self._panel = (255, 255, 255)
        self._accent = (74, 144, 226)
        self._text_dark = (40, 40, 60)
        self._text_light = (110, 110, 130)

        pygame.font.init()
        self._font_huge = pygame.font.Font(None, 64)
        self._font_large = pygame.font.Font(None, 40)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_small = pygame.font.Font(None, 20)

        self._bg_surface = self._create_gradient_background()

    def _create_gradient_background(self) -> pygame.Surface:
        surface = pygame.Surface((self._width, self._height))
        for y in range(self._height):
            t = y / self._height
            color = tuple(
                int(top * (1 - t) + bottom * t)
                for top, bottom in zip(self._sky_top, self._sky_bottom)
            )
            pygame.draw.line(surface, color, (0, y), (self._width, y))
        return surface

    def _blit_centered(self, screen: pygame.Surface, surf: pygame.Surface, y: int) -> None:
        screen.blit(surf, ((self._width - surf.get_width()) // 2, y))

    # ----- playing -----

    def render_game(
        self,
        screen: pygame.Surface,
        snapshot: GameSnapshot,
        ball_angle: float,
        high_score: Optional[int]
    ) -> None:
        screen.blit(self._bg_surface, (0, 0))

        ground_y = int(snapshot.ground_level)
        pygame.draw.rect(screen, self._ground, (0, ground_y, self._width, self._height - ground_y))
        pygame.draw.rect(screen, self._grass, (0, ground_y, self._width, 8))

        box_size = int(self._config.entities.box_size)
        for box in snapshot.boxes:
            sx = int(snapshot.to_screen_x(box.x))
            if sx > self._width or sx + box_size < 0:
                continue
            color = self._milestone if box.kind == "milestone" else self._box
            surf = pygame.Surface((box_size, box_size), pygame.SRCALPHA)
            alpha = 110 if box.broken else 255
            surf.fill((*color, alpha))
            pygame.draw.rect(surf, (0, 0, 0, alpha), surf.get_rect(), 2)
            pygame.draw.line(surf, (0, 0, 0, alpha), (0, 0), (box_size, box_size), 1)
            pygame.draw.line(surf, (0, 0, 0, alpha), (box_size, 0), (0, box_size), 1)
            screen.blit(surf, (sx, int(box.y)))

        radius = int(self._config.entities.collectible_size / 2)
        for collectible in snapshot.collectibles:
            if collectible.collected:
                continue
            center = (int(snapshot.to_screen_x(collectible.x)), int(collectible.y))
            pygame.draw.circle(screen, self._collectible, center, radius)

        half = self._config.entities.hazard_size / 2
        for hazard in snapshot.hazards:
            cx = snapshot.to_screen_x(hazard.x)
            cy = hazard.y
            pygame.draw.polygon(screen, self._hazard, [
                (cx, cy - half),
                (cx - half, cy + half),
                (cx + half, cy + half),
            ])
            pygame.draw.line(screen, self._panel, (cx, cy - half / 3), (cx, cy + half / 3), 2)

        self._draw_ball(screen, snapshot, ball_angle)
        self._draw_hud(screen, snapshot.score, high_score)

    def _draw_ball(self, screen: pygame.Surface, snapshot: GameSnapshot, angle: float) -> None:
        cx = int(snapshot.to_screen_x(snapshot.ball.x))
        cy = int(snapshot.ball.y)
        r = int(self._config.entities.ball_size / 2)
        pygame.draw.circle(screen, self._panel, (cx, cy), r)
        pygame.draw.circle(screen, self._ball, (cx, cy), r, 2)
        # Spokes show the rotation
        for k in range(3):
            a = math.radians(angle) + k * 2 * math.pi / 3
            end = (cx + int(math.cos(a) * (r - 3)), cy + int(math.sin(a) * (r - 3)))
            pygame.draw.line(screen, self._ball, (cx, cy), end, 2)

    def _draw_hud(self, screen: pygame.Surface, score: int, high_score: Optional[int]) -> None:
        panel = pygame.Surface((160, 60), pygame.SRCALPHA)
        panel.fill((255, 255, 255, 220))
        screen.blit(panel, (10, 10))
        screen.blit(self._font_large.render(f"Score: {score}", True, self._text_dark), (20, 16))
        if high_score is not None:
            screen.blit(self._font_small.render(f"High: {high_score}", True, self._text_light), (20, 48))

        hint = self._font_small.render("Click to jump, sides to steer", True, self._text_light)
        self._blit_centered(screen, hint, self._height - 30)

    # ----- menus -----

    def _draw_lines(self, screen: pygame.Surface, lines, y: int) -> None:
        for line in lines:
            self._blit_centered(screen, self._font_small.render(line, True, self._text_light), y)
            y += 22

    def render_name_entry(self, screen: pygame.Surface, text: str, blink: bool) -> None:
        screen.blit(self._bg_surface, (0, 0))
        self._blit_centered(screen, self._font_huge.render("Ball Runner", True, self._accent), 140)
        prompt = self._font_medium.render("Enter your name to start playing:", True, self._text_dark)
        self._blit_centered(screen, prompt, 240)

        box = pygame.Rect(60, 280, self._width - 120, 44)
        pygame.draw.rect(screen, self._panel, box, border_radius=8)
        pygame.draw.rect(screen, self._accent, box, 2, border_radius=8)
        shown = text + ("|" if blink else "")
        screen.blit(self._font_medium.render(shown, True, self._text_dark), (box.x + 12, box.y + 12))

        self._blit_centered(
            screen, self._font_medium.render("Press ENTER", True, self._accent), 350
        )
        self._draw_lines(screen, [
            "Click to jump, left/right side to steer",
            "Boxes 10 pts, orange milestone boxes 50 pts",
            "Green balls 25 pts",
            "Red triangles appear after 500 pts: avoid them",
            "Don't touch the ground!",
        ], 430)

    def render_menu(self, screen: pygame.Surface, player_name: str, high_score) -> None:
        screen.blit(self._bg_surface, (0, 0))
        self._blit_centered(screen, self._font_huge.render("Ball Runner", True, self._accent), 140)
        self._blit_centered(
            screen, self._font_medium.render(f"Welcome, {player_name}!", True, self._text_dark), 220
        )
        if high_score is not None:
            self._blit_centered(
                screen,
                self._font_large.render(f"High Score: {high_score.score}", True, self._text_dark),
                280
            )
            self._blit_centered(
                screen, self._font_small.render(f"by {high_score.name}", True, self._text_light), 318
            )

        button = pygame.Rect((self._width - 180) // 2, 380, 180, 56)
        pygame.draw.rect(screen, self._accent, button, border_radius=12)
        label = self._font_large.render("PLAY", True, self._panel)
        screen.blit(label, label.get_rect(center=button.center))
        self._draw_lines(screen, ["Click or press ENTER to play", "ESC to quit"], 470)

    def render_game_over(self, screen: pygame.Surface, session: GameSession) -> None:
        overlay = pygame.Surface((self._width, self._height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 150))
        screen.blit(overlay, (0, 0))

        box = pygame.Rect(30, 220, self._width - 60, 300)
        pygame.draw.rect(screen, self._panel, box, border_radius=16)
        pygame.draw.rect(screen, self._accent, box, 3, border_radius=16)

        result = session.last_result
        self._blit_centered(screen, self._font_huge.render("Game Over!", True, self._text_dark), 245)
        self._blit_centered(
            screen, self._font_medium.render(session.player_name or "", True, self._text_light), 305
        )

        y = 340
        if result is not None and result.new_high_score:
            self._blit_centered(
                screen, self._font_medium.render("NEW HIGH SCORE!", True, self._milestone), y
            )
            y += 32
        score = result.final_score if result is not None else 0
        self._blit_centered(screen, self._font_large.render(f"Score: {score}", True, self._text_dark), y)
        y += 44

        record = session.high_score
        if record is not None and not (result is not None and result.new_high_score):
            text = f"High Score: {record.score} by {record.name}"
            self._blit_centered(screen, self._font_small.render(text, True, self._text_light), y)

        self._draw_lines(screen, ["ENTER / click: play again", "M: back to menu"], 470)


class HumanPlayer:
    """
    Human-playable Ball Runner.

    One engine tick per rendered frame.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        store: Optional[ProfileStore] = None,
        seed: Optional[int] = None,
        target_fps: int = 60
    ):
        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps

        pygame.init()
        self._screen = pygame.display.set_mode((config.screen.width, config.screen.height))
        pygame.display.set_caption("Ball Runner")
        self._clock = pygame.time.Clock()

        self._session = GameSession(config=config, store=store, seed=seed)
        self._renderer = RunnerRenderer(config)
        self._sounds = SoundBank()
        self._session.game.subscribe(self._sounds.on_event)
        self._session.game.subscribe(self._on_event)

        # State
        self._running = True
        self._name_text = ""
        self._frame = 0
        self._ball_angle = 0.0
        self._spin = 0.0

    def run(self) -> int:
        """Run the game loop. Returns the last score."""
        pygame.key.start_text_input()

        while self._running:
            self._handle_events()

            if self._session.phase == GamePhase.PLAYING:
                self._session.tick()
                self._ball_angle = (self._ball_angle + self._spin) % 360
                self._spin *= 0.9

            self._render()
            self._frame += 1
            self._clock.tick(self._target_fps)

        pygame.quit()
        return self._session.game.score

    def _on_event(self, event: GameEvent) -> None:
        if isinstance(event, RotateBall):
            self._spin = 24.0

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self._running = False
            elif self._session.phase == GamePhase.NAME_ENTRY:
                self._handle_name_entry(event)
            elif self._session.phase == GamePhase.MENU:
                if self._is_confirm(event):
                    self._session.start()
            elif self._session.phase == GamePhase.PLAYING:
                self._handle_playing(event)
            elif self._session.phase == GamePhase.GAME_OVER:
                if event.type == pygame.KEYDOWN and event.key == pygame.K_m:
                    self._session.back_to_menu()
                elif self._is_confirm(event):
                    self._session.start()

    @staticmethod
    def _is_confirm(event) -> bool:
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            return True
        return event.type == pygame.KEYDOWN and event.key in (pygame.K_RETURN, pygame.K_KP_ENTER)

    def _handle_name_entry(self, event) -> None:
        if event.type == pygame.TEXTINPUT:
            self._name_text = (self._name_text + event.text)[:NAME_MAX_LENGTH]
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_BACKSPACE:
                self._name_text = self._name_text[:-1]
            elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                if self._session.submit_name(self._name_text):
                    self._name_text = ""

    def _handle_playing(self, event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self._session.tap(event.pos[0])
        elif event.type == pygame.KEYDOWN and event.key == pygame.K_SPACE:
            self._session.game.jump(JumpDirection.NONE)

    def _render(self) -> None:
        phase = self._session.phase
        if phase == GamePhase.NAME_ENTRY:
            blink = (self._frame // 30) % 2 == 0
            self._renderer.render_name_entry(self._screen, self._name_text, blink)
        elif phase == GamePhase.MENU:
            self._renderer.render_menu(
                self._screen, self._session.player_name or "", self._session.high_score
            )
        else:
            record = self._session.high_score
            self._renderer.render_game(
                self._screen,
                self._session.game.snapshot(),
                self._ball_angle,
                record.score if record is not None else None
            )
            if phase == GamePhase.GAME_OVER:
                self._renderer.render_game_over(self._screen, self._session)

        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play Ball Runner interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--profile", type=str, default=None, help="Profile JSON path")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level")

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    config = load_config(args.config)
    store = ProfileStore(args.profile) if args.profile else None
    player = HumanPlayer(config=config, store=store, seed=args.seed, target_fps=args.fps)
    score = player.run()
    logger.info("Final score: %d", score)
    return 0


if __name__ == "__main__":
    sys.exit(main())
