"""Buttons, HUD and the difficulty modal."""

import pygame
from typing import Callable, List, Optional, Tuple

from klondike import common as C

BTN_BG = (230, 230, 235)
BTN_BG_HOVER = (215, 215, 225)
BTN_BORDER = (160, 160, 170)
BTN_TEXT = (30, 30, 35)
MODAL_SHADE = (0, 0, 0, 200)
MODAL_PANEL_BG = (245, 245, 250)


class Button:
    def __init__(self, text, x, y, w=220, h=48, center=False):
        self.text = text
        self.rect = pygame.Rect(0, 0, w, h)
        if center:
            self.rect.center = (x, y)
        else:
            self.rect.topleft = (x, y)

    def draw(self, screen, hover=False):
        col = BTN_BG_HOVER if hover else BTN_BG
        pygame.draw.rect(screen, col, self.rect, border_radius=10)
        pygame.draw.rect(screen, BTN_BORDER, self.rect, 2, border_radius=10)
        t = C.FONT_UI.render(self.text, True, BTN_TEXT)
        screen.blit(t, (self.rect.centerx - t.get_width() // 2,
                        self.rect.centery - t.get_height() // 2))

    def hovered(self, mouse_pos):
        return self.rect.collidepoint(mouse_pos)


class DifficultyModal:
    """Centered prompt with one button per difficulty and an optional close box."""

    def __init__(self, on_select: Callable[[C.Difficulty], None], on_close: Optional[Callable[[], None]] = None):
        self.on_select = on_select
        self.on_close = on_close
        self.closable = False
        self.visible = False
        self.title = "Select difficulty"
        self.panel = pygame.Rect(0, 0, 460, 220)
        self._buttons: List[Tuple[C.Difficulty, Button]] = []
        self.close_rect = pygame.Rect(0, 0, 28, 28)
        self.relayout()

    def relayout(self):
        self.panel.center = (C.SCREEN_W // 2, C.SCREEN_H // 2)
        self._buttons = []
        y = self.panel.y + 80
        for diff in C.Difficulty:
            b = Button(diff.label, self.panel.centerx, y + 28, w=300, h=48, center=True)
            self._buttons.append((diff, b))
            y += 62
        self.close_rect.topright = (self.panel.right - 10, self.panel.top + 10)

    def open(self, *, closable: bool, title: str = "Select difficulty"):
        self.visible = True
        self.closable = closable
        self.title = title

    def close(self):
        self.visible = False

    def get_action_rect(self, key):
        if key == "close":
            return self.close_rect if self.closable else None
        for diff, b in self._buttons:
            if diff.value == key:
                return b.rect
        return None

    def handle_event(self, e) -> bool:
        """Consume every mouse event while visible."""
        if not self.visible:
            return False
        if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            if self.closable and self.close_rect.collidepoint(e.pos):
                self.close()
                if self.on_close:
                    self.on_close()
                return True
            for diff, b in self._buttons:
                if b.hovered(e.pos):
                    self.close()
                    self.on_select(diff)
                    return True
        return e.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP, pygame.MOUSEMOTION)

    def draw(self, screen):
        if not self.visible:
            return
        shade = pygame.Surface((C.SCREEN_W, C.SCREEN_H), pygame.SRCALPHA)
        shade.fill(MODAL_SHADE)
        screen.blit(shade, (0, 0))
        pygame.draw.rect(screen, MODAL_PANEL_BG, self.panel, border_radius=16)
        pygame.draw.rect(screen, (80, 80, 80), self.panel, width=2, border_radius=16)
        t = C.FONT_TITLE.render(self.title, True, BTN_TEXT)
        screen.blit(t, (self.panel.centerx - t.get_width() // 2, self.panel.y + 24))
        mp = pygame.mouse.get_pos()
        for _diff, b in self._buttons:
            b.draw(screen, hover=b.hovered(mp))
        if self.closable:
            r = self.close_rect
            pygame.draw.line(screen, BTN_TEXT, (r.left + 6, r.top + 6), (r.right - 6, r.bottom - 6), 3)
            pygame.draw.line(screen, BTN_TEXT, (r.left + 6, r.bottom - 6), (r.right - 6, r.top + 6), 3)


def draw_hud(screen, time_text: str, score: int, moves: int):
    items = [time_text, f"Score  {score}", f"Moves  {moves}"]
    x = 178
    for text in items:
        s = C.FONT_UI.render(text, True, C.WHITE)
        screen.blit(s, (x + (260 - s.get_width()) // 2, 24))
        x += 260
    hint = C.FONT_SMALL.render("N: New game   Esc: Close prompt", True, C.LIGHT)
    screen.blit(hint, (16, C.SCREEN_H - hint.get_height() - 12))
