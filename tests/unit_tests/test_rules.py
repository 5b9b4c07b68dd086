import pytest

from klondike import common as C
from klondike.events import MoveStep
from klondike.registry import Foundation, STOCK, Tableau, WASTE
from klondike.rules import (
    MOVE_SCORES,
    can_stack_on_foundation,
    can_stack_on_tableau,
    is_game_clear,
    score_for,
)

H, D, CL, S = C.Suit.HEART, C.Suit.DIAMOND, C.Suit.CLUB, C.Suit.SPADE


def test_empty_pile_only_takes_a_king(registry) -> None:
    king = registry.find(S, 13)
    queen = registry.find(S, 12)
    assert can_stack_on_tableau(registry, 0, king) == 0
    assert can_stack_on_tableau(registry, 0, queen) is None


@pytest.mark.parametrize(
    "top, candidate, expected",
    [
        ((H, 7), (S, 6), True),
        ((H, 7), (CL, 6), True),
        ((D, 7), (S, 6), True),
        ((S, 7), (H, 6), True),
        ((CL, 7), (D, 6), True),
        ((H, 7), (D, 6), False),
        ((S, 7), (CL, 6), False),
        ((H, 7), (S, 5), False),
        ((H, 7), (S, 8), False),
        ((H, 2), (S, 1), True),
        ((S, 2), (D, 1), True),
        ((H, 13), (CL, 12), True),
        ((H, 1), (S, 13), False),
    ],
)
def test_tableau_needs_alternating_color_and_one_lower(registry, place, top, candidate, expected) -> None:
    place(registry, *top, Tableau(3), 0)
    card = registry.find(*candidate)
    result = can_stack_on_tableau(registry, 3, card)
    assert (result == 1) is expected
    if not expected:
        assert result is None


def test_face_down_top_takes_nothing(registry, place) -> None:
    place(registry, H, 7, Tableau(1), 0, face_down=True)
    assert can_stack_on_tableau(registry, 1, registry.find(S, 6)) is None


def test_landing_order_is_pile_size(registry, place) -> None:
    place(registry, CL, 10, Tableau(2), 0, face_down=True)
    place(registry, H, 9, Tableau(2), 1)
    place(registry, S, 8, Tableau(2), 2)
    assert can_stack_on_tableau(registry, 2, registry.find(D, 7)) == 3


def test_foundation_starts_with_ace(registry) -> None:
    assert can_stack_on_foundation(registry, registry.find(H, 1))
    assert not can_stack_on_foundation(registry, registry.find(H, 2))
    assert not can_stack_on_foundation(registry, registry.find(H, 13))


def test_foundation_builds_up_in_suit(registry, place) -> None:
    place(registry, H, 1, Foundation(H), 1)
    assert can_stack_on_foundation(registry, registry.find(H, 2))
    assert not can_stack_on_foundation(registry, registry.find(H, 3))
    # other suits still need their own ace
    assert not can_stack_on_foundation(registry, registry.find(D, 2))
    assert can_stack_on_foundation(registry, registry.find(D, 1))


def test_foundation_takes_king_on_queen(registry, place) -> None:
    for rank in range(1, 13):
        place(registry, S, rank, Foundation(S), rank)
    assert can_stack_on_foundation(registry, registry.find(S, 13))


def test_score_table() -> None:
    assert MOVE_SCORES == {
        MoveStep.STOCK_TO_WASTE: 0,
        MoveStep.WASTE_TO_STOCK: -100,
        MoveStep.WASTE_TO_TABLEAU: 5,
        MoveStep.WASTE_TO_FOUNDATION: 10,
        MoveStep.TABLEAU_TO_TABLEAU: 0,
        MoveStep.TABLEAU_TO_FOUNDATION: 15,
        MoveStep.FOUNDATION_TO_TABLEAU: -15,
        MoveStep.TABLEAU_REVEAL: 5,
    }
    assert score_for(MoveStep.TABLEAU_REVEAL) == 5


def _spread_face_up(registry) -> None:
    """Every card face-up in the tableau, nothing in stock or waste."""
    depth = [0] * C.NUM_PILES
    for i, card in enumerate(registry):
        pile = i % C.NUM_PILES
        card.zone = Tableau(pile)
        card.order = depth[pile]
        card.face_down = False
        depth[pile] += 1


@pytest.mark.parametrize("draw_count", [1, 3])
def test_clear_when_nothing_hidden(registry, draw_count) -> None:
    _spread_face_up(registry)
    assert is_game_clear(registry, draw_count)


def test_not_clear_with_face_down_tableau_card(registry) -> None:
    _spread_face_up(registry)
    registry.cards[10].face_down = True
    assert not is_game_clear(registry, 1)


def test_not_clear_with_stock_left(registry) -> None:
    _spread_face_up(registry)
    registry.cards[0].zone = STOCK
    assert not is_game_clear(registry, 1)


@pytest.mark.parametrize(
    "waste_count, draw_count, expected",
    [
        (1, 3, True),
        (2, 3, False),
        (3, 1, True),
        (4, 1, False),
    ],
)
def test_waste_limits(registry, waste_count, draw_count, expected) -> None:
    _spread_face_up(registry)
    for order, card in enumerate(registry.cards[:waste_count]):
        card.zone = WASTE
        card.order = order
    assert is_game_clear(registry, draw_count) is expected
