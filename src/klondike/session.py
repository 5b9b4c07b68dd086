"""Game session: phase control, input intents and the per-tick pipeline.

``GameSession`` is the only owner of the card registry.  Input arrives as
discrete intents (click, drag start/delta/end, stock click, new game);
each intent either acts immediately on an empty-zone-safe flow (drawing,
recycling) or enqueues a move request.  ``update`` is the tick: it drains
the queues in a fixed order, advances the card interpolator and finally
hands the collected notifications to the listeners.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, List, Optional, Sequence, Tuple

import pygame

from klondike import common as C
from klondike import dealing as D
from klondike import layout as L
from klondike import moves as MV
from klondike.events import (
    Event,
    GamePhase,
    MovePerformed,
    PhaseChanged,
    ScoreDelta,
)
from klondike.mechanics import CardMover, WorkQueues, apply_sprite_updates, apply_z_updates
from klondike.registry import CardRegistry, CardView, STOCK

logger = logging.getLogger(__name__)


class Scoreboard:
    """Score, move count and play time, fed purely by notifications."""

    def __init__(self):
        self.score = 0
        self.moves = 0
        self.elapsed = 0.0

    def reset(self):
        self.score = 0
        self.moves = 0
        self.elapsed = 0.0

    def on_event(self, event: Event):
        if isinstance(event, ScoreDelta):
            self.score = max(0, self.score + event.points)
        elif isinstance(event, MovePerformed):
            self.moves += 1

    def tick(self, dt_ms: float):
        self.elapsed += max(0.0, dt_ms) / 1000.0

    @property
    def time_text(self) -> str:
        t = int(self.elapsed)
        return f"{t // 3600:01}:{t // 60 % 60:02}:{t % 60:02}"


class GameSession:
    def __init__(
        self,
        difficulty: Optional[C.Difficulty] = None,
        *,
        rng: Optional[random.Random] = None,
        listeners: Iterable = (),
    ):
        self.registry = CardRegistry()
        self.queues = WorkQueues()
        self.mover = CardMover()
        self.scoreboard = Scoreboard()
        self.difficulty = difficulty or C.Difficulty.EASY
        self.rng = rng or random.Random()
        self.listeners: List = [self.scoreboard, *listeners]
        self.phase = GamePhase.SELECT_DIFFICULTY
        self._drag_id: Optional[int] = None
        self._drag_travel = pygame.Vector2()

    @property
    def draw_count(self) -> int:
        return self.difficulty.draw_count

    def add_listener(self, listener):
        self.listeners.append(listener)

    def _set_phase(self, phase: GamePhase):
        if phase is self.phase:
            return
        logger.debug("Phase %s -> %s", self.phase.name, phase.name)
        self.phase = phase
        self.queues.emit(PhaseChanged(phase))

    # ----- Phase triggers -----
    def select_difficulty(self, difficulty: C.Difficulty, deck: Optional[Sequence[Tuple[C.Suit, int]]] = None):
        if self.phase not in (GamePhase.SELECT_DIFFICULTY, GamePhase.NEW_GAME, GamePhase.GAME_CLEAR):
            return
        self.start_new_game(difficulty, deck=deck)

    def start_new_game(
        self,
        difficulty: Optional[C.Difficulty] = None,
        deck: Optional[Sequence[Tuple[C.Suit, int]]] = None,
    ):
        if difficulty is not None:
            self.difficulty = difficulty
        self.registry.reset()
        self.queues.clear()
        self._drag_id = None
        self.begin_shuffle_and_deal(deck)
        self.begin_deal_to_tableau()
        logger.info("New game dealt (%s)", self.difficulty.label)

    def begin_shuffle_and_deal(self, deck: Optional[Sequence[Tuple[C.Suit, int]]] = None):
        self._set_phase(GamePhase.PREPARE)
        self.scoreboard.reset()
        D.shuffle_into_stock(self.registry, self.queues, rng=self.rng, deck=deck)

    def begin_deal_to_tableau(self):
        self._set_phase(GamePhase.DEAL)
        D.deal_to_tableau(self.registry, self.queues)
        self._set_phase(GamePhase.PLAY)

    def click_new_game(self):
        if self.phase is GamePhase.PLAY:
            self.cancel_drag()
            self._set_phase(GamePhase.NEW_GAME)

    def cancel_new_game(self):
        if self.phase is GamePhase.NEW_GAME:
            self._set_phase(GamePhase.PLAY)

    # ----- Input intents -----
    def click_card(self, card_id: int) -> bool:
        if self.phase is not GamePhase.PLAY:
            return False
        card = self.registry.get(card_id)
        if card is None or not card.clickable or card.dragging:
            return False
        if card.zone == STOCK:
            return D.draw_from_stock(self.registry, self.queues, self.draw_count)

        request = MV.find_click_destination(self.registry, card)
        if request is None:
            return False
        run = self.registry.connected_cards(card_id)
        MV.snapshot_positions(card, run)
        self.queues.request_move(
            request.card_id, request.destination, request.order, source=card.zone, source_order=card.order
        )
        self.queues.request_z(card_id, C.DRAG_CARD_Z)
        for c in run:
            self.queues.request_z(c.card_id, C.DRAG_CARD_Z + c.order)
        return True

    def click_stock_pile(self) -> bool:
        if self.phase is not GamePhase.PLAY:
            return False
        return D.recycle_waste(self.registry, self.queues)

    def _draggable(self, card_id: int):
        card = self.registry.get(card_id)
        if card is None or not card.clickable or card.zone == STOCK:
            return None
        return card

    def drag_start(self, card_id: int) -> bool:
        if self.phase is not GamePhase.PLAY:
            return False
        card = self._draggable(card_id)
        if card is None:
            return False
        MV.snapshot_positions(card, self.registry.connected_cards(card_id))
        self._drag_id = card_id
        self._drag_travel = pygame.Vector2()
        return True

    def drag_delta(self, card_id: int, dx: float, dy: float) -> bool:
        if self.phase is not GamePhase.PLAY or card_id != self._drag_id:
            return False
        card = self._draggable(card_id)
        if card is None:
            return False
        self._drag_travel += (dx, dy)
        if self._drag_travel.length() > C.DRAG_DISTANCE_THRESHOLD:
            card.dragging = True
        for c in [card, *self.registry.connected_cards(card_id)]:
            pos = pygame.Vector3(c.position.x + dx, c.position.y + dy, C.DRAG_CARD_Z + c.order)
            c.position = pos
            c.target_position = pygame.Vector3(pos)
        return True

    def drag_end(self, card_id: int, final_rect: Optional[pygame.Rect] = None) -> bool:
        """Release a dragged card; returns True when a move request was queued.

        A release that never travelled past the drag threshold is a click.
        """
        if card_id != self._drag_id:
            return False
        self._drag_id = None
        card = self._draggable(card_id)
        if card is None:
            return False
        if not card.dragging:
            MV.restore_positions(card, self.registry.connected_cards(card_id))
            return self.click_card(card_id)
        rect = final_rect if final_rect is not None else L.card_rect(card.position)
        request = MV.find_drop_destination(self.registry, card, rect)
        if request is None:
            MV.restore_positions(card, self.registry.connected_cards(card_id))
            card.dragging = False
            return False
        self.queues.request_move(
            request.card_id, request.destination, request.order, source=card.zone, source_order=card.order
        )
        return True

    def cancel_drag(self):
        """Abandon the drag in progress, sending the card and its run back home."""
        if self._drag_id is None:
            return
        card = self.registry.get(self._drag_id)
        if card is not None:
            MV.restore_positions(card, self.registry.connected_cards(card.card_id))
            card.dragging = False
        self._drag_id = None

    # ----- Tick -----
    def process_requests(self):
        for request in self.queues.take_stack():
            MV.resolve_move(self.registry, self.queues, request, self.draw_count)
        if self.queues.take_fill_waste():
            D.reflow_waste(self.registry)
        for index in self.queues.take_adjust_piles():
            D.adjust_pile(self.registry, index)
        apply_z_updates(self.registry, self.queues)
        apply_sprite_updates(self.registry, self.queues)
        if self.queues.take_game_clear():
            D.collect_to_foundations(self.registry, self.queues)
            apply_z_updates(self.registry, self.queues)
            apply_sprite_updates(self.registry, self.queues)
            self._set_phase(GamePhase.GAME_CLEAR)
            logger.info(
                "Game cleared: score %s, %s moves, %s",
                self.scoreboard.score,
                self.scoreboard.moves,
                self.scoreboard.time_text,
            )

    def update(self, dt_ms: float = 0.0):
        self.process_requests()
        self.mover.update(self.registry, dt_ms)
        if self.phase is GamePhase.PLAY:
            self.scoreboard.tick(dt_ms)
        self.dispatch_events()

    def dispatch_events(self):
        for event in self.queues.take_events():
            for listener in self.listeners:
                listener.on_event(event)

    # ----- Queries -----
    def snapshot(self) -> List[CardView]:
        return self.registry.snapshot()

    def card_at(self, pos) -> Optional[CardView]:
        """Topmost card under a screen point."""
        for view in reversed(self.snapshot()):
            if view.rect().collidepoint(pos):
                return view
        return None

    def is_won(self) -> bool:
        return self.phase is GamePhase.GAME_CLEAR

    def check_invariants(self) -> List[str]:
        """Describe any broken zone/order invariant; an empty list means the state is sound."""
        problems = []
        if len(self.registry) != 52:
            problems.append(f"expected 52 cards, found {len(self.registry)}")
        for name, cards in (("stock", self.registry.stock_cards()), ("waste", self.registry.waste_cards())):
            orders = [c.order for c in cards]
            if orders != list(range(len(orders))):
                problems.append(f"{name} orders {orders}")
        for index in range(C.NUM_PILES):
            cards = self.registry.pile_cards(index)
            orders = [c.order for c in cards]
            if orders != list(range(len(orders))):
                problems.append(f"pile {index} orders {orders}")
            faces = [c.face_down for c in cards]
            if faces != sorted(faces, reverse=True):
                problems.append(f"pile {index} has a face-down card above a face-up one")
        for suit in C.Suit:
            ranks = [c.rank for c in self.registry.foundation_cards(suit)]
            if ranks != list(range(1, len(ranks) + 1)):
                problems.append(f"foundation {suit.name} ranks {ranks}")
        return problems
