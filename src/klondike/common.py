"""Shared constants, settings and card art for Klondike."""

import logging
import os
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

import pygame

logger = logging.getLogger(__name__)


# ---------- Configuration ----------
SCREEN_W, SCREEN_H = 1136, 640
GREEN_TABLE = (2, 100, 40)
TABLE_BG = GREEN_TABLE

CARD_W, CARD_H = 76, 104
CARD_RADIUS = 6

NUM_PILES = 7
NUM_RANKS = 13
MAX_WASTES = 3

# Anchors are card centres in screen space
STOCK_POS = (52, 194)
WASTE_POS = (52, 318)
PILE_POS = [
    (182, 196),
    (310, 196),
    (438, 196),
    (566, 196),
    (694, 196),
    (822, 196),
    (950, 196),
]
FOUNDATION_POS = [
    (1082, 196),
    (1082, 316),
    (1082, 436),
    (1082, 556),
]

WASTE_OFFSET_Y = 32
PILE_OFFSET_Y = 32
PILE_OFFSET_Y_MIN = 12
PILE_AREA_TOP = 144
PILE_AREA_BOTTOM = 608

DRAG_CARD_Z = 100
DRAG_DISTANCE_THRESHOLD = 10

# Card interpolation runs on its own fixed timer
MOVE_TICK_MS = 30
MOVE_LERP = 0.4
MOVE_SNAP_DISTANCE = 2.0

NEW_GAME_BUTTON_CENTER = (848, 580)
NEW_GAME_BUTTON_SIZE = (220, 64)

# Colors
BLACK = (20, 20, 20)
WHITE = (245, 245, 245)
RED = (200, 20, 20)
BLUE = (34, 96, 200)
LIGHT = (220, 220, 220)


class Suit(IntEnum):
    HEART = 0
    DIAMOND = 1
    CLUB = 2
    SPADE = 3


class Difficulty(Enum):
    EASY = "easy"
    HARD = "hard"

    @property
    def draw_count(self) -> int:
        return 1 if self is Difficulty.EASY else 3

    @property
    def label(self) -> str:
        return "Easy (draw 1)" if self is Difficulty.EASY else "Hard (draw 3)"


SUIT_GLYPHS = {Suit.HEART: "♥", Suit.DIAMOND: "♦", Suit.CLUB: "♣", Suit.SPADE: "♠"}
SUIT_NAMES = {Suit.HEART: "Hearts", Suit.DIAMOND: "Diamonds", Suit.CLUB: "Clubs", Suit.SPADE: "Spades"}
RANK_TO_TEXT = {1: "A", 11: "J", 12: "Q", 13: "K"}
for _r in range(2, 11):
    RANK_TO_TEXT[_r] = str(_r)

BACK_SPRITE_KEY = "Back Blue 1"


def is_red(suit):
    return suit in (Suit.HEART, Suit.DIAMOND)


def sprite_key_for(suit, rank, face_down):
    """Image key for a card; matches the card art file stems."""
    if face_down:
        return BACK_SPRITE_KEY
    return f"{SUIT_NAMES[Suit(suit)]} {rank}"


# ---------- Settings ----------
@dataclass(frozen=True)
class Settings:
    difficulty: Optional[Difficulty] = None
    seed: Optional[int] = None
    mute: bool = False
    log_level: str = "WARNING"


_TRUTHY = ("1", "true", "yes", "on")


def load_settings(environ=None) -> Settings:
    """Read runtime settings from the environment; bad values fall back to defaults."""
    env = os.environ if environ is None else environ

    difficulty = None
    raw = env.get("KLONDIKE_DIFFICULTY", "").strip().lower()
    if raw:
        try:
            difficulty = Difficulty(raw)
        except ValueError:
            logger.warning("Ignoring unknown KLONDIKE_DIFFICULTY=%r", raw)

    seed = None
    raw = env.get("KLONDIKE_SEED", "").strip()
    if raw:
        try:
            seed = int(raw)
        except ValueError:
            logger.warning("Ignoring non-integer KLONDIKE_SEED=%r", raw)

    mute = env.get("KLONDIKE_MUTE", "").strip().lower() in _TRUTHY

    log_level = env.get("KLONDIKE_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
    if not isinstance(logging.getLevelName(log_level), int):
        logger.warning("Ignoring unknown KLONDIKE_LOG_LEVEL=%r", log_level)
        log_level = "WARNING"

    return Settings(difficulty=difficulty, seed=seed, mute=mute, log_level=log_level)


# Fonts are initialized via setup_fonts() AFTER pygame.init() in __main__.py
FONT_NAME = None
FONT_SMALL = None
FONT_UI = None
FONT_TITLE = None
FONT_CORNER_RANK = None


def setup_fonts():
    global FONT_NAME, FONT_SMALL, FONT_UI, FONT_TITLE, FONT_CORNER_RANK
    FONT_NAME = pygame.font.get_default_font()
    FONT_SMALL = pygame.font.SysFont(FONT_NAME, 20, bold=True)
    FONT_UI = pygame.font.SysFont(FONT_NAME, 26, bold=True)
    FONT_TITLE = pygame.font.SysFont(FONT_NAME, 44, bold=True)
    FONT_CORNER_RANK = pygame.font.SysFont(FONT_NAME, 22, bold=True)


# ---------- Card art ----------
IMAGE_CARDS_DIR = os.path.join(os.path.dirname(__file__), "assets", "cards")
_IMAGE_EXTS = (".png", ".jpg", ".jpeg", ".webp")

_img_cache = {}      # sprite key -> Surface (or None when no file exists)
_drawn_cache = {}    # sprite key -> fallback Surface


def invalidate_card_caches():
    _img_cache.clear()
    _drawn_cache.clear()


def _find_file_for_stem(stem):
    for ext in _IMAGE_EXTS:
        p = os.path.join(IMAGE_CARDS_DIR, stem + ext)
        if os.path.isfile(p):
            return p
    return None


def _load_scaled(path, size):
    try:
        surf = pygame.image.load(path)
        surf = surf.convert_alpha() if surf.get_alpha() is not None else surf.convert()
        if surf.get_size() != size:
            surf = pygame.transform.smoothscale(surf, size)
        return surf
    except (pygame.error, OSError) as exc:
        logger.warning("Could not load card image %s: %s", path, exc)
        return None


def draw_suit_shape(surface, center, suit, color, size=30):
    x, y = center
    if suit == Suit.DIAMOND:
        half = size // 2
        points = [(x, y - half), (x + half, y), (x, y + half), (x - half, y)]
        pygame.draw.polygon(surface, color, points)
    elif suit == Suit.HEART:
        r = size // 3
        pygame.draw.circle(surface, color, (x - r, y - r), r)
        pygame.draw.circle(surface, color, (x + r, y - r), r)
        tri = [(x - 2 * r, y - r), (x + 2 * r, y - r), (x, y + 2 * r)]
        pygame.draw.polygon(surface, color, tri)
    elif suit == Suit.SPADE:
        r = size // 3
        pygame.draw.circle(surface, color, (x - r, y), r)
        pygame.draw.circle(surface, color, (x + r, y), r)
        tri = [(x - 2 * r, y), (x + 2 * r, y), (x, y - 2 * r)]
        pygame.draw.polygon(surface, color, tri)
        stem_w = max(4, size // 6)
        pygame.draw.rect(surface, color, (x - stem_w // 2, y + r, stem_w, size // 2))
    else:
        r = size // 3
        pygame.draw.circle(surface, color, (x, y - r), r)
        pygame.draw.circle(surface, color, (x - r, y + r // 3), r)
        pygame.draw.circle(surface, color, (x + r, y + r // 3), r)
        stem_w = max(4, size // 6)
        pygame.draw.rect(surface, color, (x - stem_w // 2, y + r, stem_w, size // 2))


def _draw_back():
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0, 0, CARD_W, CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0, 0, CARD_W, CARD_H), width=2, border_radius=CARD_RADIUS)
    inset = 6
    inner_rect = pygame.Rect(inset, inset, CARD_W - 2 * inset, CARD_H - 2 * inset)
    pygame.draw.rect(surf, BLUE, inner_rect, border_radius=4)
    for i in range(-CARD_H, CARD_W, 10):
        pygame.draw.line(surf, LIGHT, (i, inset), (i + CARD_H, CARD_H - inset), 1)
    return surf


def _draw_face(suit, rank):
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0, 0, CARD_W, CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0, 0, CARD_W, CARD_H), width=2, border_radius=CARD_RADIUS)
    color = RED if is_red(suit) else BLACK
    rtxt = FONT_CORNER_RANK.render(RANK_TO_TEXT[rank], True, color)
    surf.blit(rtxt, (6, 4))
    draw_suit_shape(surf, (CARD_W - 16, 16), suit, color, size=14)
    draw_suit_shape(surf, (CARD_W // 2, CARD_H // 2 + 8), suit, color, size=34)
    return surf


def get_sprite_surface(sprite_key, suit, rank):
    """Surface for a sprite key: image file when present, drawn art otherwise."""
    if sprite_key not in _img_cache:
        path = _find_file_for_stem(sprite_key)
        _img_cache[sprite_key] = _load_scaled(path, (CARD_W, CARD_H)) if path else None
    surf = _img_cache[sprite_key]
    if surf is not None:
        return surf
    if sprite_key not in _drawn_cache:
        if sprite_key == BACK_SPRITE_KEY:
            _drawn_cache[sprite_key] = _draw_back()
        else:
            _drawn_cache[sprite_key] = _draw_face(suit, rank)
    return _drawn_cache[sprite_key]


def draw_pile_base(screen, center):
    r = pygame.Rect(0, 0, CARD_W, CARD_H)
    r.center = center
    pygame.draw.rect(screen, (255, 255, 255), r, border_radius=CARD_RADIUS, width=2)


# ---------- Base Scene ----------
class Scene:
    def __init__(self, app):
        self.app = app
        self.next_scene = None
    def handle_event(self, e): pass
    def update(self, dt): pass
    def draw(self, screen): pass
