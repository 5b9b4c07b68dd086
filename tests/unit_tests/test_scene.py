import pygame
import pytest

from klondike import common as C
from klondike.audio import SoundBoard
from klondike.events import GamePhase
from klondike.modes.klondike import KlondikeGameScene
from klondike.registry import Tableau, full_deck


@pytest.fixture
def scene() -> KlondikeGameScene:
    scene = KlondikeGameScene(None, sound=SoundBoard(enabled=False))
    scene.session.select_difficulty(C.Difficulty.EASY, deck=full_deck())
    scene.update(0)
    scene.session.mover.settle(scene.session.registry)
    return scene


def _drag_to_top_of_screen(scene, card):
    start = (int(card.position.x), int(card.position.y))
    scene.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=start, button=1))
    scene.handle_event(
        pygame.event.Event(pygame.MOUSEMOTION, pos=(start[0], 40), rel=(0, 40 - start[1]), buttons=(1, 0, 0))
    )
    assert card.dragging
    return (start[0], 40)


def test_unrelated_key_mid_drag_keeps_the_gesture(scene) -> None:
    card = scene.session.registry.find(C.Suit.CLUB, 2)
    home = pygame.Vector3(card.target_position)
    end = _drag_to_top_of_screen(scene, card)

    scene.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_SPACE, mod=0))
    scene.handle_event(pygame.event.Event(pygame.MOUSEBUTTONUP, pos=end, button=1))
    scene.update(0.1)

    assert not card.dragging
    assert card.zone == Tableau(6)
    assert card.target_position == home


def test_new_game_key_mid_drag_sends_the_card_home(scene) -> None:
    card = scene.session.registry.find(C.Suit.CLUB, 2)
    home = pygame.Vector3(card.target_position)
    end = _drag_to_top_of_screen(scene, card)

    scene.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_n, mod=0))
    assert scene.session.phase is GamePhase.NEW_GAME
    assert scene.modal.visible
    scene.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_ESCAPE, mod=0))
    scene.handle_event(pygame.event.Event(pygame.MOUSEBUTTONUP, pos=end, button=1))
    scene.update(0.1)

    assert scene.session.phase is GamePhase.PLAY
    assert not card.dragging
    assert card.target_position == home

    # the card can be picked up again from its pile
    assert scene.session.drag_start(card.card_id)
    assert card.previous_position == home
