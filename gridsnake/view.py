"""
view.py — View layer.

Draws one frame from a GameSnapshot; never touches the model.

  - Pre-rendered board surface (drawn once, blitted every frame)
  - Snake with a head highlight and a colour fade toward the tail
  - Pulsing food dot
  - HUD panel with zero-padded score and best score
  - High-score table beside the board
  - Overlays for waiting / paused / game over, and the name-entry dialog

Public API:
    GameView(screen)                 — bind to a pygame surface
    view.render(snapshot, name_text) — draw the current frame
"""

import math
from typing import Optional

import pygame

from .config import (
    WIDTH, PANEL_H, GAME_W, GAME_H, SIDE_X, SIDE_W,
    OFFSET_X, OFFSET_Y, CELL, GRID_SIZE, MAX_NAME_LEN,
    BG, BOARD_BG, GRID_COL, SNAKE_COL, HEAD_COL, SNAKE_DIM, FOOD_COL,
    UI_COL, TITLE_COL, BLACK, PANEL_BG, BORDER_COL,
    STATE_WAITING, STATE_PAUSED, STATE_OVER,
)
from .model import GameSnapshot


# ─────────────────────── colour helpers ──────────────────────────
def _lerp_color(c1: tuple, c2: tuple, t: float) -> tuple:
    t = max(0.0, min(1.0, t))
    return tuple(int(c1[i] + (c2[i] - c1[i]) * t) for i in range(3))


def _with_alpha(color: tuple, alpha: int) -> tuple:
    return (*color[:3], max(0, min(255, alpha)))


def _brighten(color: tuple, factor: float) -> tuple:
    return tuple(min(255, int(c * factor)) for c in color[:3])


def _padded(score: int) -> str:
    return str(score).rjust(4, "0")


# ─────────────────────────── GameView ────────────────────────────
class GameView:
    """Renders the complete game frame from a GameSnapshot."""

    def __init__(self, screen: pygame.Surface):
        self.screen = screen
        self._init_fonts()
        self._build_static_surfaces()
        self._anim_tick: int = 0

    # ── Main entry ───────────────────────────────────────────────
    def render(self, snap: GameSnapshot, name_text: Optional[str] = None) -> None:
        self._anim_tick += 1

        self.screen.fill(BG)
        self.screen.blit(self._board_surf, (OFFSET_X, OFFSET_Y))
        self._draw_food(snap.food)
        self._draw_snake(snap)
        pygame.draw.rect(self.screen, BORDER_COL,
                         (OFFSET_X - 2, OFFSET_Y - 2, GAME_W + 4, GAME_H + 4), 2)

        self._draw_panel(snap)
        self._draw_high_scores(snap)

        if snap.state == STATE_WAITING:
            self._draw_waiting_overlay()
        elif snap.state == STATE_PAUSED:
            self._draw_paused_overlay()
        elif snap.state == STATE_OVER:
            self._draw_game_over_overlay(snap)

        if snap.pending_high_score is not None:
            self._draw_name_dialog(snap.pending_high_score, name_text or "")

        pygame.display.flip()

    # ── Static surface pre-builds ─────────────────────────────────
    def _build_static_surfaces(self) -> None:
        self._board_surf = pygame.Surface((GAME_W, GAME_H))
        self._board_surf.fill(BOARD_BG)
        for x in range(GRID_SIZE + 1):
            pygame.draw.line(self._board_surf, GRID_COL,
                             (x * CELL, 0), (x * CELL, GAME_H))
        for y in range(GRID_SIZE + 1):
            pygame.draw.line(self._board_surf, GRID_COL,
                             (0, y * CELL), (GAME_W, y * CELL))

    # ── Board content ────────────────────────────────────────────
    def _draw_food(self, food: tuple[int, int]) -> None:
        pulse = 0.75 + 0.25 * math.sin(self._anim_tick * 0.12)
        r = max(3, int((CELL / 2 - 2) * pulse))
        x = OFFSET_X + food[0] * CELL + CELL // 2
        y = OFFSET_Y + food[1] * CELL + CELL // 2
        pygame.draw.circle(self.screen, FOOD_COL, (x, y), r)
        pygame.draw.circle(self.screen, (255, 255, 220),
                           (x - max(1, r // 3), y - max(1, r // 3)), max(1, r // 3))

    def _draw_snake(self, snap: GameSnapshot) -> None:
        length = len(snap.snake)
        for i, (sx, sy) in enumerate(snap.snake):
            rect = pygame.Rect(OFFSET_X + sx * CELL + 1, OFFSET_Y + sy * CELL + 1,
                               CELL - 2, CELL - 2)
            if i == 0:
                pygame.draw.rect(self.screen, HEAD_COL, rect, border_radius=5)
                continue
            # Body fades toward the tail
            t = 1.0 - (i / max(length - 1, 1)) * 0.6
            color = _lerp_color(SNAKE_DIM, SNAKE_COL, t)
            pygame.draw.rect(self.screen, color, rect, border_radius=3)
        if snap.snake:
            self._draw_eyes(snap.snake[0], snap.direction)

    def _draw_eyes(self, head: tuple[int, int], direction: tuple[int, int]) -> None:
        cx = OFFSET_X + head[0] * CELL + CELL // 2
        cy = OFFSET_Y + head[1] * CELL + CELL // 2
        dx, dy = direction
        px, py = -dy, dx  # perpendicular

        for sign in (+1, -1):
            ex = int(cx + dx * 4 + sign * px * 4)
            ey = int(cy + dy * 4 + sign * py * 4)
            pygame.draw.rect(self.screen, BLACK, (ex - 1, ey - 1, 3, 3))

    # ── HUD Panel ─────────────────────────────────────────────────
    def _draw_panel(self, snap: GameSnapshot) -> None:
        pygame.draw.rect(self.screen, PANEL_BG, (0, 0, WIDTH, PANEL_H))
        pygame.draw.line(self.screen, BORDER_COL,
                         (0, PANEL_H - 1), (WIDTH, PANEL_H - 1), 1)

        title = self.font_big.render("SNAKE", True, TITLE_COL)
        self.screen.blit(title, title.get_rect(midleft=(16, PANEL_H // 2)))

        score = self.font_med.render(f"SCORE: {_padded(snap.score)}", True, UI_COL)
        best = self.font_med.render(f"BEST:  {_padded(snap.best)}", True, UI_COL)
        self.screen.blit(score, score.get_rect(topright=(WIDTH - 16, 10)))
        self.screen.blit(best, best.get_rect(topright=(WIDTH - 16, 32)))

        if snap.state == STATE_PAUSED:
            badge = self.font_tiny.render("[ PAUSED ]", True, FOOD_COL)
            self.screen.blit(badge, badge.get_rect(center=(WIDTH // 2, PANEL_H // 2)))

    # ── High-score table ─────────────────────────────────────────
    def _draw_high_scores(self, snap: GameSnapshot) -> None:
        pygame.draw.rect(self.screen, PANEL_BG, (SIDE_X, OFFSET_Y, SIDE_W, GAME_H))
        pygame.draw.rect(self.screen, BORDER_COL, (SIDE_X, OFFSET_Y, SIDE_W, GAME_H), 1)

        head = self.font_small.render("HIGH SCORES", True, TITLE_COL)
        self.screen.blit(head, head.get_rect(midtop=(SIDE_X + SIDE_W // 2, OFFSET_Y + 10)))

        cy = OFFSET_Y + 40
        if not snap.high_scores:
            empty = self.font_tiny.render("no scores yet", True, _lerp_color(UI_COL, BG, 0.5))
            self.screen.blit(empty, empty.get_rect(midtop=(SIDE_X + SIDE_W // 2, cy)))
            return

        for rank, record in enumerate(snap.high_scores, start=1):
            name = self.font_tiny.render(f"{rank}. {record.name}", True, UI_COL)
            pts = self.font_tiny.render(_padded(record.score), True, FOOD_COL)
            date = self.font_tiny.render(record.date, True, _lerp_color(UI_COL, BG, 0.5))
            self.screen.blit(name, (SIDE_X + 10, cy))
            self.screen.blit(pts, pts.get_rect(topright=(SIDE_X + SIDE_W - 10, cy)))
            self.screen.blit(date, (SIDE_X + 24, cy + 15))
            cy += 40

    # ── Overlay infrastructure ────────────────────────────────────
    def _draw_overlay_base(self) -> None:
        surf = pygame.Surface((GAME_W, GAME_H), pygame.SRCALPHA)
        surf.fill((0, 0, 0, 178))
        self.screen.blit(surf, (OFFSET_X, OFFSET_Y))

    def _draw_animated_title(self, title: str, color: tuple,
                             cy: int, font: pygame.font.Font) -> int:
        pulse = 0.82 + 0.18 * math.sin(self._anim_tick * 0.05)
        surf = font.render(title, True, _brighten(color, pulse))
        cx = OFFSET_X + GAME_W // 2
        self.screen.blit(surf, surf.get_rect(center=(cx, cy + surf.get_height() // 2)))
        return cy + surf.get_height() + 14

    def _draw_text_line(self, text: str, color: tuple,
                        cy: int, font: pygame.font.Font) -> int:
        surf = font.render(text, True, color)
        self.screen.blit(surf, surf.get_rect(center=(OFFSET_X + GAME_W // 2, cy)))
        return cy + surf.get_height() + 8

    def _draw_button(self, label: str, color: tuple, cy: int) -> int:
        btn_w = max(220, self.font_small.size(label)[0] + 40)
        btn_h = 36
        bx = OFFSET_X + GAME_W // 2 - btn_w // 2
        bg = pygame.Surface((btn_w, btn_h), pygame.SRCALPHA)
        bg.fill(_with_alpha(color, 40))
        self.screen.blit(bg, (bx, cy))
        pygame.draw.rect(self.screen, color, (bx, cy, btn_w, btn_h), 2, border_radius=4)
        txt = self.font_small.render(label, True, color)
        self.screen.blit(txt, txt.get_rect(center=(OFFSET_X + GAME_W // 2, cy + btn_h // 2)))
        return cy + btn_h + 10

    # ── State overlays ────────────────────────────────────────────
    def _draw_waiting_overlay(self) -> None:
        self._draw_overlay_base()
        cy = OFFSET_Y + GAME_H // 2 - 80
        cy = self._draw_animated_title("SNAKE", TITLE_COL, cy, self.font_title)
        cy += 6
        cy = self._draw_button("ENTER — START GAME", TITLE_COL, cy)
        cy += 6
        cy = self._draw_text_line("ARROWS / WASD: MOVE", UI_COL, cy, self.font_tiny)
        self._draw_text_line("SPACE / P: PAUSE    R: RESET", UI_COL, cy, self.font_tiny)

    def _draw_paused_overlay(self) -> None:
        self._draw_overlay_base()
        cy = OFFSET_Y + GAME_H // 2 - 36
        cy = self._draw_animated_title("PAUSED", FOOD_COL, cy, self.font_title)
        cy += 6
        self._draw_text_line("PRESS SPACE TO CONTINUE", UI_COL, cy, self.font_med)

    def _draw_game_over_overlay(self, snap: GameSnapshot) -> None:
        self._draw_overlay_base()
        cy = OFFSET_Y + GAME_H // 2 - 80
        cy = self._draw_animated_title("GAME OVER", FOOD_COL, cy, self.font_title)
        cy = self._draw_text_line(f"SCORE: {snap.score}", UI_COL, cy, self.font_med)
        cy += 10
        self._draw_button("R / ENTER — PLAY AGAIN", TITLE_COL, cy)

    def _draw_name_dialog(self, score: int, text: str) -> None:
        w, h = 340, 170
        x = OFFSET_X + GAME_W // 2 - w // 2
        y = OFFSET_Y + GAME_H // 2 - h // 2
        pygame.draw.rect(self.screen, PANEL_BG, (x, y, w, h), border_radius=6)
        pygame.draw.rect(self.screen, SNAKE_COL, (x, y, w, h), 2, border_radius=6)

        cy = y + 26
        cy = self._draw_text_line("NEW HIGH SCORE!", TITLE_COL, cy, self.font_big)
        cy = self._draw_text_line(f"You scored {score} points!", UI_COL, cy, self.font_small)

        # Input box with a blinking caret
        box = pygame.Rect(x + 30, cy, w - 60, 30)
        pygame.draw.rect(self.screen, BOARD_BG, box)
        pygame.draw.rect(self.screen, SNAKE_COL, box, 1)
        caret = "_" if (self._anim_tick // 30) % 2 == 0 else " "
        txt = self.font_med.render(text + caret, True, HEAD_COL)
        self.screen.blit(txt, txt.get_rect(midleft=(box.x + 8, box.centery)))
        counter = self.font_tiny.render(f"{len(text)}/{MAX_NAME_LEN}", True, UI_COL)
        self.screen.blit(counter, counter.get_rect(topright=(box.right, box.bottom + 4)))

        self._draw_text_line("ENTER: SAVE    ESC: SKIP", UI_COL, box.bottom + 30, self.font_tiny)

    # ── Font init ─────────────────────────────────────────────────
    def _init_fonts(self) -> None:
        specs = [
            ("font_title", "courier", 42, True),
            ("font_big",   "courier", 24, True),
            ("font_med",   "courier", 17, False),
            ("font_small", "courier", 14, True),
            ("font_tiny",  "courier", 12, False),
        ]
        for attr, name, size, bold in specs:
            try:
                setattr(self, attr, pygame.font.SysFont(name, size, bold=bold))
            except (pygame.error, OSError):
                setattr(self, attr, pygame.font.SysFont(None, size))
