"""Shuffle, deal, stock/waste flows and the end-of-game collection."""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, Tuple

import pygame

from klondike import common as C
from klondike import layout as L
from klondike.events import CardsDealt, GameCleared, MovePerformed, MoveStep, ScoreDelta
from klondike.mechanics import WorkQueues
from klondike.registry import CardRegistry, Foundation, STOCK, Tableau, WASTE, full_deck
from klondike.rules import score_for

logger = logging.getLogger(__name__)

TABLEAU_CARD_COUNT = sum(range(1, C.NUM_PILES + 1))  # 28


def shuffled_deck(rng: Optional[random.Random] = None) -> List[Tuple[C.Suit, int]]:
    deck = full_deck()
    (rng or random).shuffle(deck)
    return deck


def shuffle_into_stock(
    registry: CardRegistry,
    queues: WorkQueues,
    rng: Optional[random.Random] = None,
    deck: Optional[Sequence[Tuple[C.Suit, int]]] = None,
) -> None:
    """Give every card entity a (suit, rank) from a shuffled deck and stack them all in Stock.

    ``deck`` fixes the permutation (first entry becomes stock order 0);
    otherwise one is drawn from ``rng``.
    """
    if deck is None:
        deck = shuffled_deck(rng)
    elif sorted(deck) != sorted(full_deck()):
        raise ValueError("deck must contain each of the 52 cards exactly once")

    for order, (card, (suit, rank)) in enumerate(zip(registry.cards, deck)):
        card.suit = C.Suit(suit)
        card.rank = rank
        card.zone = STOCK
        card.order = order
        card.clickable = True
        card.dragging = False
        card.face_down = True
        queues.request_sprite(card.card_id)

        pos = L.stock_position(order)
        card.target_position = pos
        card.previous_position = pygame.Vector3(pos)
        card.position = pygame.Vector3(pos)
        queues.request_z(card.card_id, order)


def deal_to_tableau(registry: CardRegistry, queues: WorkQueues) -> int:
    """Deal 1..7 cards from the front of the stock into the seven piles.

    Only the last card of each pile lands face-up.  Returns the number of
    cards dealt (28 for a full stock).
    """
    stock = registry.stock_cards()
    dealt = 0
    for pile_index in range(C.NUM_PILES):
        for order in range(pile_index + 1):
            if dealt >= len(stock):
                break
            card = stock[dealt]
            dealt += 1
            card.zone = Tableau(pile_index)
            card.order = order
            card.face_down = order != pile_index
            card.clickable = not card.face_down
            queues.request_sprite(card.card_id)
            card.target_position = L.tableau_position(pile_index, order, pile_index, 1)

    _renumber_stock(registry)
    queues.emit(CardsDealt())
    return dealt


def _renumber_stock(registry: CardRegistry, leading=()) -> None:
    ordered = list(leading) + registry.stock_cards()
    for order, card in enumerate(ordered):
        card.zone = STOCK
        card.order = order
        card.target_position = L.stock_position(order)


def reflow_waste(registry: CardRegistry) -> None:
    """Lay out the waste fan.

    Waste order is draw order.  The newest MAX_WASTES cards are fanned from
    the waste anchor, oldest visible first; older cards sit under the first
    slot.  Only the newest card is clickable.
    """
    waste = registry.waste_cards()
    hidden = max(0, len(waste) - C.MAX_WASTES)
    for order, card in enumerate(waste):
        card.order = order
        card.clickable = False
        slot = max(0, order - hidden)
        card.target_position = L.waste_position(slot, order)
    if waste:
        waste[-1].clickable = True


def draw_from_stock(registry: CardRegistry, queues: WorkQueues, draw_count: int) -> bool:
    """Turn up to ``draw_count`` cards from the front of the stock onto the waste."""
    drawn = registry.stock_cards()[:max(0, draw_count)]
    if not drawn:
        logger.debug("Stock is empty; nothing to draw")
        return False

    waste = registry.waste_cards()
    next_order = waste[-1].order + 1 if waste else 0
    for i, card in enumerate(drawn):
        card.zone = WASTE
        card.order = next_order + i
        card.face_down = False
        queues.request_sprite(card.card_id)
        # fly above everything until it settles
        queues.request_z(card.card_id, C.DRAG_CARD_Z + card.order)

    _renumber_stock(registry)
    reflow_waste(registry)

    queues.emit(MovePerformed(MoveStep.STOCK_TO_WASTE))
    queues.emit(ScoreDelta(MoveStep.STOCK_TO_WASTE, score_for(MoveStep.STOCK_TO_WASTE)))
    return True


def recycle_waste(registry: CardRegistry, queues: WorkQueues) -> bool:
    """Turn the whole waste back over onto the stock, preserving draw order."""
    waste = registry.waste_cards()
    if not waste:
        logger.debug("Waste is empty; nothing to recycle")
        return False

    for card in waste:
        card.face_down = True
        card.clickable = True
        queues.request_sprite(card.card_id)
    # recycled cards go to the front so they are drawn again in the same sequence
    _renumber_stock(registry, leading=waste)

    queues.emit(MovePerformed(MoveStep.WASTE_TO_STOCK))
    queues.emit(ScoreDelta(MoveStep.WASTE_TO_STOCK, score_for(MoveStep.WASTE_TO_STOCK)))
    return True


def adjust_pile(registry: CardRegistry, pile_index: int) -> None:
    """Recompute every target in a tableau pile from scratch."""
    num_down = registry.num_face_down(pile_index)
    num_up = registry.num_face_up(pile_index)
    for card in registry.pile_cards(pile_index):
        card.target_position = L.tableau_position(pile_index, card.order, num_down, num_up)


def collect_to_foundations(registry: CardRegistry, queues: WorkQueues) -> None:
    """Send every card to its suit's foundation in rank order and announce the win."""
    for card in registry:
        card.zone = Foundation(card.suit)
        card.order = card.rank
        card.clickable = False
        card.dragging = False
        if card.face_down:
            card.face_down = False
            queues.request_sprite(card.card_id)
        card.target_position = L.foundation_position(card.suit, card.rank)
        queues.request_z(card.card_id, card.rank)
    queues.emit(GameCleared())
