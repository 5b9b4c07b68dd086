"""Card positions and drop zones: pile anchors, fan offsets and the pile squeeze."""

import math
from typing import List, Tuple

import pygame

from klondike import common as C


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


def pile_drop_area(pile_index: int) -> pygame.Rect:
    x, _y = C.PILE_POS[pile_index]
    return pygame.Rect(
        x - C.CARD_W // 2,
        C.PILE_AREA_TOP,
        C.CARD_W,
        C.PILE_AREA_BOTTOM - C.PILE_AREA_TOP,
    )


def foundation_drop_area(suit) -> pygame.Rect:
    r = pygame.Rect(0, 0, C.CARD_W, C.CARD_H)
    r.center = C.FOUNDATION_POS[int(suit)]
    return r


def stock_area() -> pygame.Rect:
    r = pygame.Rect(0, 0, C.CARD_W, C.CARD_H)
    r.center = C.STOCK_POS
    return r


PILE_DROP_AREAS: List[pygame.Rect] = [pile_drop_area(i) for i in range(C.NUM_PILES)]
FOUNDATION_DROP_AREAS: List[pygame.Rect] = [foundation_drop_area(s) for s in C.Suit]


def card_rect(center) -> pygame.Rect:
    r = pygame.Rect(0, 0, C.CARD_W, C.CARD_H)
    r.center = (round(center[0]), round(center[1]))
    return r


def pile_spacing(pile_index: int, num_face_down: int, num_face_up: int) -> Tuple[int, int]:
    """Return (face_down_gap, face_up_gap) for a tableau pile.

    When the fanned pile would run past its display area, the face-down
    segment is squeezed first; if that is not enough the face-up segment is
    squeezed too.  Both gaps are clamped to [PILE_OFFSET_Y_MIN, PILE_OFFSET_Y].
    """
    gap_down = C.PILE_OFFSET_Y
    gap_up = C.PILE_OFFSET_Y
    area_h = PILE_DROP_AREAS[pile_index].height

    overflow = C.CARD_H + (num_face_down + num_face_up) * C.PILE_OFFSET_Y - area_h
    if overflow > 0:
        if num_face_down > 0:
            gap_down = _clamp(
                gap_down - math.ceil(overflow / num_face_down),
                C.PILE_OFFSET_Y_MIN,
                C.PILE_OFFSET_Y,
            )
        overflow = C.CARD_H + num_face_down * gap_down + (num_face_up - 1) * gap_up - area_h
        if overflow > 0 and num_face_up > 1:
            gap_up = _clamp(
                gap_up - math.ceil(overflow / (num_face_up - 1)),
                C.PILE_OFFSET_Y_MIN,
                C.PILE_OFFSET_Y,
            )
    return gap_down, gap_up


def tableau_position(pile_index: int, order: int, num_face_down: int, num_face_up: int) -> pygame.Vector3:
    """Centre and draw order of the card at ``order`` in a tableau pile."""
    gap_down, gap_up = pile_spacing(pile_index, num_face_down, num_face_up)
    x, y = C.PILE_POS[pile_index]
    # A card landing at order == pile size sits one gap below the current top
    for i in range(min(order, num_face_down + num_face_up)):
        y += gap_down if i < num_face_down else gap_up
    return pygame.Vector3(x, y, order)


def foundation_position(suit, order: int) -> pygame.Vector3:
    x, y = C.FOUNDATION_POS[int(suit)]
    return pygame.Vector3(x, y, order)


def stock_position(order: int) -> pygame.Vector3:
    x, y = C.STOCK_POS
    return pygame.Vector3(x, y, order)


def waste_position(slot: int, order: int) -> pygame.Vector3:
    """Waste fan: slot 0 is the oldest visible card, each newer one sits lower."""
    x, y = C.WASTE_POS
    return pygame.Vector3(x, y + slot * C.WASTE_OFFSET_Y, order)


def new_game_button_rect() -> pygame.Rect:
    r = pygame.Rect((0, 0), C.NEW_GAME_BUTTON_SIZE)
    r.center = C.NEW_GAME_BUTTON_CENTER
    return r
