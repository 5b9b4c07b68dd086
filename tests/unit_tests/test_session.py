import random

import pygame
import pytest

from klondike import common as C
from klondike import layout as L
from klondike.events import CardsDealt, GamePhase, MovePerformed, MoveStep, PhaseChanged, ScoreDelta
from klondike.registry import Foundation, STOCK, Tableau, WASTE, full_deck
from klondike.session import GameSession, Scoreboard


def test_starts_waiting_for_a_difficulty() -> None:
    session = GameSession()
    assert session.phase is GamePhase.SELECT_DIFFICULTY
    assert not session.click_card(0)
    assert not session.click_stock_pile()
    assert not session.drag_start(0)


def test_selecting_a_difficulty_deals(event_log) -> None:
    session = GameSession(listeners=[event_log])
    session.select_difficulty(C.Difficulty.EASY, deck=full_deck())
    session.update()
    assert session.phase is GamePhase.PLAY
    assert event_log.of_type(PhaseChanged) == [
        PhaseChanged(GamePhase.PREPARE),
        PhaseChanged(GamePhase.DEAL),
        PhaseChanged(GamePhase.PLAY),
    ]
    assert event_log.of_type(CardsDealt) == [CardsDealt()]
    assert session.check_invariants() == []


def test_easy_single_stock_click() -> None:
    session = GameSession(C.Difficulty.EASY)
    session.start_new_game(deck=full_deck())
    session.update()
    top_of_stock = session.registry.stock_cards()[-1]

    assert session.click_card(top_of_stock.card_id)
    session.update()

    [card] = session.registry.waste_cards()
    assert not card.face_down and card.clickable
    assert card.sprite_key == C.sprite_key_for(card.suit, card.rank, False)
    assert len(session.registry.stock_cards()) == 23
    assert session.scoreboard.score == 0
    assert session.scoreboard.moves == 1


def test_stock_click_with_empty_waste_does_nothing() -> None:
    session = GameSession(C.Difficulty.EASY)
    session.start_new_game(deck=full_deck())
    assert not session.click_stock_pile()
    session.update()
    assert session.scoreboard.moves == 0


def test_new_game_prompt_can_be_cancelled() -> None:
    session = GameSession(C.Difficulty.EASY)
    session.start_new_game(deck=full_deck())
    before = [(c.card_id, c.zone, c.order) for c in session.registry]

    session.click_new_game()
    assert session.phase is GamePhase.NEW_GAME
    assert not session.click_card(session.registry.stock_cards()[0].card_id)

    session.cancel_new_game()
    assert session.phase is GamePhase.PLAY
    assert [(c.card_id, c.zone, c.order) for c in session.registry] == before


def test_new_game_with_other_difficulty_resets_everything() -> None:
    session = GameSession(C.Difficulty.EASY)
    session.start_new_game(deck=full_deck())
    session.click_card(session.registry.find(C.Suit.CLUB, 2).card_id)
    session.update()
    assert session.scoreboard.moves == 1

    session.click_new_game()
    session.select_difficulty(C.Difficulty.HARD)
    session.update()

    assert session.phase is GamePhase.PLAY
    assert session.draw_count == 3
    assert session.scoreboard.score == 0
    assert session.scoreboard.moves == 0
    assert len(session.registry.stock_cards()) == 24
    assert session.check_invariants() == []


def test_difficulty_is_fixed_during_play() -> None:
    session = GameSession(C.Difficulty.EASY)
    session.start_new_game(deck=full_deck())
    session.select_difficulty(C.Difficulty.HARD)
    assert session.draw_count == 1


def test_new_game_cancels_a_drag() -> None:
    session = GameSession(C.Difficulty.EASY)
    session.start_new_game(deck=full_deck())
    c2 = session.registry.find(C.Suit.CLUB, 2)
    home = pygame.Vector3(c2.target_position)
    session.drag_start(c2.card_id)
    session.drag_delta(c2.card_id, -300, 0)
    session.click_new_game()
    assert c2.target_position == home
    assert not c2.dragging
    assert not session.drag_end(c2.card_id)


def test_double_click_in_one_tick_moves_once() -> None:
    session = GameSession(C.Difficulty.EASY)
    session.start_new_game(deck=full_deck())
    session.update()
    ace = session.registry.find(C.Suit.HEART, 1)
    assert ace.zone == Tableau(0)

    assert session.click_card(ace.card_id)
    assert session.click_card(ace.card_id)
    session.update()

    assert ace.zone == Foundation(C.Suit.HEART)
    assert ace.target_position == L.foundation_position(C.Suit.HEART, 1)
    assert session.scoreboard.moves == 1
    assert session.check_invariants() == []


def test_card_at_picks_topmost() -> None:
    session = GameSession(C.Difficulty.EASY)
    session.start_new_game(deck=full_deck())
    session.mover.settle(session.registry)
    # the second card of the pile overlaps the first one
    view = session.card_at(C.PILE_POS[6])
    assert view.zone == Tableau(6)
    assert view.order == 1
    view = session.card_at((C.PILE_POS[6][0], 388))
    assert (view.suit, view.rank) == (C.Suit.CLUB, 2)
    assert session.card_at((600, 20)) is None


def test_play_time_only_runs_in_play() -> None:
    session = GameSession(C.Difficulty.EASY)
    session.update(5000)
    assert session.scoreboard.elapsed == 0
    session.start_new_game(deck=full_deck())
    session.update(1500)
    assert session.scoreboard.elapsed == pytest.approx(1.5)
    session.click_new_game()
    session.update(1000)
    assert session.scoreboard.elapsed == pytest.approx(1.5)


def test_scoreboard_clamps_and_counts() -> None:
    board = Scoreboard()
    board.on_event(ScoreDelta(MoveStep.WASTE_TO_STOCK, -100))
    assert board.score == 0
    board.on_event(ScoreDelta(MoveStep.TABLEAU_TO_FOUNDATION, 15))
    board.on_event(ScoreDelta(MoveStep.FOUNDATION_TO_TABLEAU, -15))
    board.on_event(ScoreDelta(MoveStep.WASTE_TO_FOUNDATION, 10))
    assert board.score == 10
    board.on_event(MovePerformed(MoveStep.STOCK_TO_WASTE))
    board.on_event(CardsDealt())
    assert board.moves == 1


@pytest.mark.parametrize(
    "seconds, text",
    [(0, "0:00:00"), (59.9, "0:00:59"), (61, "0:01:01"), (3725, "1:02:05")],
)
def test_scoreboard_time_text(seconds, text) -> None:
    board = Scoreboard()
    board.tick(seconds * 1000)
    board.tick(-500)
    assert board.time_text == text


@pytest.mark.parametrize("seed", [1, 2, 3])
@pytest.mark.parametrize("difficulty", list(C.Difficulty))
def test_random_play_keeps_invariants(seed, difficulty) -> None:
    rng = random.Random(seed)
    session = GameSession(difficulty, rng=random.Random(seed))
    session.start_new_game()
    session.update()
    for _ in range(400):
        roll = rng.random()
        if roll < 0.15:
            session.click_stock_pile()
        elif roll < 0.6:
            session.click_card(rng.randrange(52))
        else:
            card = session.registry.get(rng.randrange(52))
            target = rng.choice(C.PILE_POS + C.FOUNDATION_POS)
            if session.drag_start(card.card_id):
                session.drag_delta(card.card_id, target[0] - card.position.x, target[1] - card.position.y)
                session.drag_end(card.card_id)
        session.update(rng.choice([0, 16, 33]))
        assert session.check_invariants() == []
        assert len(session.registry) == 52
        assert sum(1 for c in session.registry if c.zone == STOCK or c.zone == WASTE) <= 24
