"""Per-tick work queues, the z/sprite appliers and the card position interpolator."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import pygame

from klondike import common as C
from klondike.events import Event
from klondike.registry import CardRegistry, Zone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackRequest:
    """A proposed move: put ``card_id`` (and its run) into ``destination`` at ``order``.

    ``source`` and ``source_order`` record where the card was when the move was
    proposed; a request whose card has left that spot is stale.
    """

    card_id: int
    destination: Zone
    order: int
    source: Optional[Zone] = None
    source_order: Optional[int] = None


class WorkQueues:
    """
    Per-tick deferred work.
    Input handlers and the move resolver append here; the session drains each
    queue once per tick in a fixed order, so nothing mutates the registry while
    another step is iterating it and every request is handled at most once.
    """

    def __init__(self):
        self.stack: List[StackRequest] = []
        self.fill_waste: int = 0
        self.adjust_piles: List[int] = []
        self.z_updates: List[Tuple[int, float]] = []
        self.sprite_updates: List[int] = []
        self.game_clear: bool = False
        self.events: List[Event] = []

    def request_move(
        self,
        card_id: int,
        destination: Zone,
        order: int,
        source: Optional[Zone] = None,
        source_order: Optional[int] = None,
    ):
        self.stack.append(StackRequest(card_id, destination, order, source, source_order))

    def request_fill_waste(self):
        self.fill_waste += 1

    def request_adjust_pile(self, index: int):
        self.adjust_piles.append(index)

    def request_z(self, card_id: int, value: float):
        self.z_updates.append((card_id, value))

    def request_sprite(self, card_id: int):
        self.sprite_updates.append(card_id)

    def request_game_clear(self):
        self.game_clear = True

    def emit(self, event: Event):
        self.events.append(event)

    # ----- Consumers -----
    def take_stack(self) -> List[StackRequest]:
        out, self.stack = self.stack, []
        return out

    def take_fill_waste(self) -> bool:
        pending, self.fill_waste = self.fill_waste > 0, 0
        return pending

    def take_adjust_piles(self) -> List[int]:
        # Several moves touching one pile still recompute it once
        out = sorted(set(self.adjust_piles))
        self.adjust_piles = []
        return out

    def take_z_updates(self) -> List[Tuple[int, float]]:
        out, self.z_updates = self.z_updates, []
        return out

    def take_sprite_updates(self) -> List[int]:
        out, self.sprite_updates = self.sprite_updates, []
        return out

    def take_game_clear(self) -> bool:
        pending, self.game_clear = self.game_clear, False
        return pending

    def take_events(self) -> List[Event]:
        out, self.events = self.events, []
        return out

    def clear(self):
        self.stack = []
        self.fill_waste = 0
        self.adjust_piles = []
        self.z_updates = []
        self.sprite_updates = []
        self.game_clear = False
        self.events = []

    def is_idle(self) -> bool:
        return not (
            self.stack
            or self.fill_waste
            or self.adjust_piles
            or self.z_updates
            or self.sprite_updates
            or self.game_clear
        )


def apply_z_updates(registry: CardRegistry, queues: WorkQueues) -> int:
    applied = 0
    for card_id, value in queues.take_z_updates():
        card = registry.get(card_id)
        if card is None:
            logger.debug("Dropping z update for unknown card %s", card_id)
            continue
        card.position.z = value
        applied += 1
    return applied


def apply_sprite_updates(registry: CardRegistry, queues: WorkQueues) -> int:
    applied = 0
    for card_id in queues.take_sprite_updates():
        card = registry.get(card_id)
        if card is None:
            logger.debug("Dropping sprite update for unknown card %s", card_id)
            continue
        card.sprite_key = C.sprite_key_for(card.suit, card.rank, card.face_down)
        applied += 1
    return applied


def _xy_distance(a, b) -> float:
    return pygame.Vector2(a.x, a.y).distance_to((b.x, b.y))


class CardMover:
    """
    Eases every card's displayed position toward its target.
    Runs on a fixed step (MOVE_TICK_MS) independent of the frame rate; each
    step closes MOVE_LERP of the remaining distance and snaps the card
    (draw order included) once it is within MOVE_SNAP_DISTANCE.
    """

    def __init__(
        self,
        interval_ms: int = C.MOVE_TICK_MS,
        factor: float = C.MOVE_LERP,
        snap_distance: float = C.MOVE_SNAP_DISTANCE,
    ):
        self.interval_ms = max(1, int(interval_ms))
        self.factor = float(factor)
        self.snap_distance = float(snap_distance)
        self._pending_ms: float = 0.0

    def update(self, registry: CardRegistry, dt_ms: float) -> int:
        """Advance by ``dt_ms`` of wall time; returns how many steps ran."""
        self._pending_ms += max(0.0, dt_ms)
        steps = 0
        while self._pending_ms >= self.interval_ms:
            self._pending_ms -= self.interval_ms
            self.step(registry)
            steps += 1
        return steps

    def step(self, registry: CardRegistry):
        for card in registry:
            pos = card.position
            dst = card.target_position
            if pos == dst:
                continue
            if _xy_distance(pos, dst) > self.snap_distance:
                pos.x += (dst.x - pos.x) * self.factor
                pos.y += (dst.y - pos.y) * self.factor
            if _xy_distance(pos, dst) <= self.snap_distance:
                card.position = pygame.Vector3(dst)

    def settle(self, registry: CardRegistry):
        self._pending_ms = 0.0
        for card in registry:
            card.position = pygame.Vector3(card.target_position)

    def is_settled(self, registry: CardRegistry) -> bool:
        return all(card.position == card.target_position for card in registry)
