"""Move legality, scoring and the win predicate.

Everything here is a pure query over the registry, so input code may call
these speculatively (for hover hints or click auto-moves) without side
effects.
"""

from __future__ import annotations

from typing import Dict, Optional

from klondike import common as C
from klondike.events import MoveStep
from klondike.registry import CardInfo, CardRegistry, Tableau, STOCK, WASTE


MOVE_SCORES: Dict[MoveStep, int] = {
    MoveStep.STOCK_TO_WASTE: 0,
    MoveStep.WASTE_TO_STOCK: -100,
    MoveStep.WASTE_TO_TABLEAU: 5,
    MoveStep.WASTE_TO_FOUNDATION: 10,
    MoveStep.TABLEAU_TO_TABLEAU: 0,
    MoveStep.TABLEAU_TO_FOUNDATION: 15,
    MoveStep.FOUNDATION_TO_TABLEAU: -15,
    MoveStep.TABLEAU_REVEAL: 5,
}


def score_for(step: MoveStep) -> int:
    return MOVE_SCORES[step]


def opposite_colors(a: CardInfo, b: CardInfo) -> bool:
    return C.is_red(a.suit) != C.is_red(b.suit)


def can_stack_on_tableau(registry: CardRegistry, pile_index: int, card: CardInfo) -> Optional[int]:
    """Return the landing order if ``card`` may be placed on the pile, else None.

    An empty pile only takes a King (landing at order 0).  Otherwise the
    card must be the opposite color of the pile's top card and exactly one
    rank lower; it lands at the pile's current size.
    """
    cards = registry.pile_cards(pile_index)
    if not cards:
        return 0 if card.rank == C.NUM_RANKS else None
    top = cards[-1]
    if top.face_down:
        return None
    if opposite_colors(card, top) and card.rank == top.rank - 1:
        return len(cards)
    return None


def can_stack_on_foundation(registry: CardRegistry, card: CardInfo) -> bool:
    """A foundation takes the Ace of its suit first, then each next rank."""
    top = registry.top_of_foundation(card.suit)
    if top is None:
        return card.rank == 1
    return card.suit == top.suit and card.rank == top.rank + 1


def is_game_clear(registry: CardRegistry, draw_count: int) -> bool:
    """True once nothing is left hidden: no stock, no face-down tableau card,
    and a waste small enough that every card in it can still be reached."""
    for card in registry:
        if card.zone == STOCK:
            return False
        if isinstance(card.zone, Tableau) and card.face_down:
            return False

    num_waste = sum(1 for card in registry if card.zone == WASTE)
    if num_waste > C.MAX_WASTES:
        return False
    if draw_count > 1 and num_waste > 1:
        return False
    return True
