import pygame
import pytest

from klondike import common as C
from klondike.registry import CardRegistry


@pytest.fixture
def registry() -> CardRegistry:
    return CardRegistry()


@pytest.fixture
def place():
    """Put one card somewhere by hand: place(registry, suit, rank, zone, order, face_down=False)."""

    def _place(registry, suit, rank, zone, order, face_down=False):
        card = registry.find(C.Suit(suit), rank)
        card.zone = zone
        card.order = order
        card.face_down = face_down
        card.clickable = not face_down
        card.sprite_key = C.sprite_key_for(card.suit, card.rank, face_down)
        pos = pygame.Vector3(200 + 10 * order, 300 + 10 * order, order)
        card.target_position = pos
        card.previous_position = pygame.Vector3(pos)
        card.position = pygame.Vector3(pos)
        return card

    return _place


class EventLog:
    def __init__(self):
        self.events = []

    def on_event(self, event):
        self.events.append(event)

    def of_type(self, cls):
        return [e for e in self.events if isinstance(e, cls)]


@pytest.fixture
def event_log() -> EventLog:
    return EventLog()
