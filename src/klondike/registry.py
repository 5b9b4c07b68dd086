"""Card registry.

The registry owns the 52 card records for the lifetime of the process and
answers zone queries over them.  It never enforces game invariants itself:
the rule and move modules are responsible for keeping zones and orders
consistent.  Lookups are linear scans, which is plenty for one deck.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Tuple, Union

import pygame

from klondike import common as C


# ---------- Zones ----------
@dataclass(frozen=True)
class Stock:
    def __str__(self) -> str:
        return "Stock"


@dataclass(frozen=True)
class Waste:
    def __str__(self) -> str:
        return "Waste"


@dataclass(frozen=True)
class Tableau:
    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index < C.NUM_PILES:
            raise ValueError(f"Tableau index out of range: {self.index}")

    def __str__(self) -> str:
        return f"Tableau({self.index})"


@dataclass(frozen=True)
class Foundation:
    suit: C.Suit

    def __post_init__(self) -> None:
        object.__setattr__(self, "suit", C.Suit(self.suit))

    def __str__(self) -> str:
        return f"Foundation({self.suit.name.title()})"


Zone = Union[Stock, Waste, Tableau, Foundation]

STOCK = Stock()
WASTE = Waste()


# ---------- Cards ----------
class CardInfo:
    __slots__ = (
        "card_id",
        "suit",
        "rank",
        "zone",
        "order",
        "face_down",
        "clickable",
        "dragging",
        "previous_position",
        "target_position",
        "position",
        "sprite_key",
    )

    def __init__(self, card_id: int, suit: C.Suit, rank: int):
        self.card_id = card_id
        self.suit = C.Suit(suit)
        self.rank = rank            # 1..13
        self.zone: Zone = STOCK
        self.order = 0
        self.face_down = True
        self.clickable = False
        self.dragging = False
        # target is where the card logically belongs, previous is the pre-drag snapshot,
        # position is what the renderer shows right now
        self.previous_position = pygame.Vector3()
        self.target_position = pygame.Vector3()
        self.position = pygame.Vector3()
        self.sprite_key = C.BACK_SPRITE_KEY

    def __repr__(self):
        return f"{C.RANK_TO_TEXT[self.rank]}{C.SUIT_GLYPHS[self.suit]}{'↓' if self.face_down else '↑'}@{self.zone}[{self.order}]"


class CardView(NamedTuple):
    """Read-only snapshot of one card for renderers and hit-testing."""

    card_id: int
    suit: C.Suit
    rank: int
    zone: Zone
    order: int
    x: float
    y: float
    z: float
    sprite_key: str
    clickable: bool

    def rect(self) -> pygame.Rect:
        r = pygame.Rect(0, 0, C.CARD_W, C.CARD_H)
        r.center = (round(self.x), round(self.y))
        return r


def full_deck() -> List[Tuple[C.Suit, int]]:
    return [(suit, rank) for suit in C.Suit for rank in range(1, C.NUM_RANKS + 1)]


class CardRegistry:
    def __init__(self) -> None:
        self.cards: List[CardInfo] = [
            CardInfo(card_id, suit, rank) for card_id, (suit, rank) in enumerate(full_deck())
        ]
        self.reset()

    def __iter__(self) -> Iterator[CardInfo]:
        return iter(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def reset(self) -> None:
        """Put every card back into the undealt state: stacked face-down in Stock."""
        x, y = C.STOCK_POS
        for order, card in enumerate(self.cards):
            card.zone = STOCK
            card.order = order
            card.face_down = True
            card.clickable = False
            card.dragging = False
            card.target_position = pygame.Vector3(x, y, order)
            card.previous_position = pygame.Vector3(card.target_position)
            card.position = pygame.Vector3(card.target_position)
            card.sprite_key = C.BACK_SPRITE_KEY

    # ----- Lookups -----
    def get(self, card_id: int) -> Optional[CardInfo]:
        for card in self.cards:
            if card.card_id == card_id:
                return card
        return None

    def find(self, suit: C.Suit, rank: int) -> Optional[CardInfo]:
        for card in self.cards:
            if card.suit == suit and card.rank == rank:
                return card
        return None

    def in_zone(self, zone: Zone, *, sort: bool = True) -> List[CardInfo]:
        result = [card for card in self.cards if card.zone == zone]
        if sort:
            result.sort(key=lambda card: card.order)
        return result

    def stock_cards(self) -> List[CardInfo]:
        return self.in_zone(STOCK)

    def waste_cards(self) -> List[CardInfo]:
        return self.in_zone(WASTE)

    def pile_cards(self, index: int) -> List[CardInfo]:
        return self.in_zone(Tableau(index))

    def foundation_cards(self, suit: C.Suit) -> List[CardInfo]:
        return self.in_zone(Foundation(suit))

    def top_of_pile(self, index: int) -> Optional[CardInfo]:
        cards = self.pile_cards(index)
        return cards[-1] if cards else None

    def top_of_foundation(self, suit: C.Suit) -> Optional[CardInfo]:
        cards = self.foundation_cards(suit)
        return cards[-1] if cards else None

    def connected_cards(self, card_id: int) -> List[CardInfo]:
        """Cards stacked on top of the given tableau card, lowest order first."""
        card = self.get(card_id)
        if card is None or not isinstance(card.zone, Tableau):
            return []
        return [c for c in self.in_zone(card.zone) if c.order > card.order]

    def num_face_down(self, index: int) -> int:
        return sum(1 for card in self.pile_cards(index) if card.face_down)

    def num_face_up(self, index: int) -> int:
        return sum(1 for card in self.pile_cards(index) if not card.face_down)

    def snapshot(self) -> List[CardView]:
        """Cards in draw order (back to front)."""
        views = [
            CardView(
                card_id=card.card_id,
                suit=card.suit,
                rank=card.rank,
                zone=card.zone,
                order=card.order,
                x=card.position.x,
                y=card.position.y,
                z=card.position.z,
                sprite_key=card.sprite_key,
                clickable=card.clickable,
            )
            for card in self.cards
        ]
        views.sort(key=lambda view: view.z)
        return views
