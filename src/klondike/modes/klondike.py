"""Klondike scene: mouse gestures to session intents, and drawing."""

import random

import pygame

from klondike import common as C
from klondike import layout as L
from klondike.audio import SoundBoard
from klondike.events import GamePhase
from klondike.session import GameSession
from klondike.ui import Button, DifficultyModal, draw_hud


class KlondikeGameScene(C.Scene):
    def __init__(self, app, settings=None, sound=None):
        super().__init__(app)
        self.settings = settings or C.Settings()
        rng = random.Random(self.settings.seed) if self.settings.seed is not None else None
        self.sound = sound if sound is not None else SoundBoard(enabled=not self.settings.mute)
        self.session = GameSession(self.settings.difficulty, rng=rng, listeners=[self.sound])

        self.b_new_game = Button("New Game", 0, 0)
        self.b_new_game.rect = L.new_game_button_rect()
        self.modal = DifficultyModal(on_select=self.session.select_difficulty, on_close=self.session.cancel_new_game)

        # primary-button gesture in progress
        self._press_id = None
        self._press_pos = None
        self._drag_active = False

        if self.settings.difficulty is not None:
            self.session.select_difficulty(self.settings.difficulty)
        self._sync_modal()

    @property
    def draw_count(self):
        return self.session.draw_count

    def _sync_modal(self):
        phase = self.session.phase
        if phase is GamePhase.SELECT_DIFFICULTY:
            self.modal.open(closable=False)
        elif phase is GamePhase.NEW_GAME:
            self.modal.open(closable=True, title="New game")
        elif phase is GamePhase.GAME_CLEAR:
            self.modal.open(closable=False, title="Cleared! Play again")
        else:
            self.modal.close()

    def _reset_gesture(self):
        self.session.cancel_drag()
        self._press_id = None
        self._press_pos = None
        self._drag_active = False

    # ----- Input -----
    def handle_event(self, e):
        if self.modal.handle_event(e):
            self._reset_gesture()
            self._sync_modal()
            return

        if e.type == pygame.KEYDOWN:
            phase = self.session.phase
            if e.key == pygame.K_n:
                self.session.click_new_game()
            elif e.key == pygame.K_ESCAPE:
                self.session.cancel_new_game()
            if self.session.phase is not phase:
                self._reset_gesture()
                self._sync_modal()
            return

        if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            self._press_pos = e.pos
            view = self.session.card_at(e.pos)
            self._press_id = view.card_id if view is not None else None
            self._drag_active = self._press_id is not None and self.session.drag_start(self._press_id)

        elif e.type == pygame.MOUSEMOTION and self._drag_active:
            dx, dy = e.rel
            self.session.drag_delta(self._press_id, dx, dy)

        elif e.type == pygame.MOUSEBUTTONUP and e.button == 1 and self._press_pos is not None:
            self._release(e.pos)
            self._reset_gesture()
            self._sync_modal()

    def _release(self, pos):
        if self._drag_active:
            card = self.session.registry.get(self._press_id)
            self.session.drag_end(self._press_id, L.card_rect(card.position))
        elif self._press_id is not None:
            self.session.click_card(self._press_id)
        elif L.stock_area().collidepoint(pos):
            self.session.click_stock_pile()
        elif self.b_new_game.hovered(pos):
            self.session.click_new_game()

    # ----- Tick -----
    def update(self, dt):
        self.session.update(dt * 1000.0)
        self._sync_modal()

    # ----- Drawing -----
    def draw(self, screen):
        screen.fill(C.TABLE_BG)

        C.draw_pile_base(screen, C.STOCK_POS)
        for center in C.PILE_POS:
            C.draw_pile_base(screen, center)
        for suit in C.Suit:
            C.draw_pile_base(screen, C.FOUNDATION_POS[suit])
            C.draw_suit_shape(screen, C.FOUNDATION_POS[suit], suit, C.LIGHT, size=30)

        for view in self.session.snapshot():
            surf = C.get_sprite_surface(view.sprite_key, view.suit, view.rank)
            screen.blit(surf, view.rect().topleft)

        board = self.session.scoreboard
        draw_hud(screen, board.time_text, board.score, board.moves)
        self.b_new_game.draw(screen, hover=self.b_new_game.hovered(pygame.mouse.get_pos()))
        self.modal.draw(screen)

