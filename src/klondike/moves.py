"""Move resolution.

A move is proposed as a ``StackRequest`` (from a click or a drop) and
committed here in a single step: either the card and its run land in the
destination and every derived effect is queued, or the card and its run
go back to their pre-drag positions and nothing else changes.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import pygame

from klondike import common as C
from klondike import layout as L
from klondike.events import MovePerformed, MoveStep, ScoreDelta
from klondike.mechanics import StackRequest, WorkQueues
from klondike.registry import CardInfo, CardRegistry, Foundation, Tableau, WASTE, Zone
from klondike.rules import can_stack_on_foundation, can_stack_on_tableau, is_game_clear, score_for

logger = logging.getLogger(__name__)


def classify_move(registry: CardRegistry, card: CardInfo, destination: Zone, order: int) -> Optional[MoveStep]:
    """Return the move shape if moving ``card`` to ``destination`` at ``order`` is legal."""
    if card.face_down:
        return None
    source = card.zone
    if isinstance(source, Foundation) and registry.top_of_foundation(card.suit) is not card:
        return None

    if isinstance(destination, Tableau):
        if isinstance(source, Tableau) and source.index == destination.index:
            return None
        if can_stack_on_tableau(registry, destination.index, card) != order:
            return None
        if source == WASTE:
            return MoveStep.WASTE_TO_TABLEAU
        if isinstance(source, Tableau):
            return MoveStep.TABLEAU_TO_TABLEAU
        if isinstance(source, Foundation):
            return MoveStep.FOUNDATION_TO_TABLEAU
        return None

    if isinstance(destination, Foundation):
        if destination.suit != card.suit or order != card.rank:
            return None
        if not can_stack_on_foundation(registry, card):
            return None
        if source == WASTE:
            return MoveStep.WASTE_TO_FOUNDATION
        if isinstance(source, Tableau) and not registry.connected_cards(card.card_id):
            return MoveStep.TABLEAU_TO_FOUNDATION
        return None

    return None


def _landing_position(registry: CardRegistry, destination: Zone, order: int) -> pygame.Vector3:
    if isinstance(destination, Tableau):
        i = destination.index
        return L.tableau_position(i, order, registry.num_face_down(i), registry.num_face_up(i))
    return L.foundation_position(destination.suit, order)


def resolve_move(
    registry: CardRegistry,
    queues: WorkQueues,
    request: StackRequest,
    draw_count: int,
) -> bool:
    """Commit or reject one proposed move.  Returns True when the move was made."""
    card = registry.get(request.card_id)
    if card is None:
        logger.debug("Dropping move for unknown card %s", request.card_id)
        return False
    if request.source is not None and (card.zone, card.order) != (request.source, request.source_order):
        logger.debug("Dropping stale move for %r", card)
        return False

    source = card.zone
    run = registry.connected_cards(card.card_id)
    step = classify_move(registry, card, request.destination, request.order)

    card.dragging = False
    if step is None:
        logger.debug("Rejected %r -> %s[%s]", card, request.destination, request.order)
        restore_positions(card, run)
        return False

    card.target_position = _landing_position(registry, request.destination, request.order)
    card.zone = request.destination
    card.order = request.order
    queues.emit(MovePerformed(step))
    queues.emit(ScoreDelta(step, score_for(step)))

    for offset, follower in enumerate(run, start=1):
        follower.zone = request.destination
        follower.order = request.order + offset

    if isinstance(source, Tableau):
        reveal_top(registry, queues, source.index)
        queues.request_adjust_pile(source.index)
    if isinstance(request.destination, Tableau):
        queues.request_adjust_pile(request.destination.index)

    if isinstance(request.destination, Foundation) and is_game_clear(registry, draw_count):
        queues.request_game_clear()
    elif source == WASTE:
        queues.request_fill_waste()
    return True


def reveal_top(registry: CardRegistry, queues: WorkQueues, pile_index: int) -> bool:
    """Turn up a face-down card left on top of a pile; worth the reveal bonus."""
    top = registry.top_of_pile(pile_index)
    if top is None or not top.face_down:
        return False
    top.face_down = False
    top.clickable = True
    queues.request_sprite(top.card_id)
    queues.emit(ScoreDelta(MoveStep.TABLEAU_REVEAL, score_for(MoveStep.TABLEAU_REVEAL)))
    return True


# ---------- Drag snapshots ----------
def snapshot_positions(card: CardInfo, run: List[CardInfo]) -> None:
    for c in [card, *run]:
        c.previous_position = pygame.Vector3(c.target_position)


def restore_positions(card: CardInfo, run: List[CardInfo]) -> None:
    for c in [card, *run]:
        c.target_position = pygame.Vector3(c.previous_position)


# ---------- Destination search ----------
def _first_tableau_for(registry: CardRegistry, card: CardInfo, piles=None) -> Optional[StackRequest]:
    for index in range(C.NUM_PILES) if piles is None else piles:
        if isinstance(card.zone, Tableau) and card.zone.index == index:
            continue
        order = can_stack_on_tableau(registry, index, card)
        if order is not None:
            return StackRequest(card.card_id, Tableau(index), order)
    return None


def _foundation_for(registry: CardRegistry, card: CardInfo) -> Optional[StackRequest]:
    if can_stack_on_foundation(registry, card):
        return StackRequest(card.card_id, Foundation(card.suit), card.rank)
    return None


def find_click_destination(registry: CardRegistry, card: CardInfo) -> Optional[StackRequest]:
    """Where a click sends a card: its foundation when possible, else the first pile that takes it."""
    if card.face_down:
        return None
    if card.zone == WASTE:
        return _foundation_for(registry, card) or _first_tableau_for(registry, card)
    if isinstance(card.zone, Tableau):
        if not registry.connected_cards(card.card_id):
            request = _foundation_for(registry, card)
            if request is not None:
                return request
        return _first_tableau_for(registry, card)
    if isinstance(card.zone, Foundation):
        if registry.top_of_foundation(card.suit) is not card:
            return None
        return _first_tableau_for(registry, card)
    return None


def find_drop_destination(registry: CardRegistry, card: CardInfo, rect: pygame.Rect) -> Optional[StackRequest]:
    """Where a dragged card lands given the rectangle it was released at."""
    over_foundation = rect.colliderect(L.FOUNDATION_DROP_AREAS[int(card.suit)])
    piles = [i for i, area in enumerate(L.PILE_DROP_AREAS) if rect.colliderect(area)]

    if card.zone == WASTE:
        if over_foundation:
            request = _foundation_for(registry, card)
            if request is not None:
                return request
        return _first_tableau_for(registry, card, piles)
    if isinstance(card.zone, Tableau):
        if over_foundation:
            if registry.connected_cards(card.card_id):
                return None
            return _foundation_for(registry, card)
        return _first_tableau_for(registry, card, piles)
    if isinstance(card.zone, Foundation):
        return _first_tableau_for(registry, card, piles)
    return None
