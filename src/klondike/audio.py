"""Sound effects for moves, played through pygame.mixer."""

import logging
import time
from collections import deque
from pathlib import Path
from typing import Dict, Optional

import pygame

from klondike.events import CardsDealt, Event, MovePerformed, MoveStep

logger = logging.getLogger(__name__)


def sound_for_step(step: MoveStep) -> Optional[str]:
    """Sound key for a move: recycling the waste has its own sound, reveals are silent."""
    if step is MoveStep.WASTE_TO_STOCK:
        return "stock"
    if step is MoveStep.TABLEAU_REVEAL:
        return None
    return "move"


class SoundBoard:
    """Plays move sounds through pygame.mixer; silent when the mixer or files are missing."""

    def __init__(self, enabled: bool = True, asset_dir: Optional[Path] = None):
        self.enabled = enabled
        self.asset_dir = asset_dir or Path(__file__).with_name("assets").joinpath("sounds")
        self.paths = {
            "move": self.asset_dir / "move_card.ogg",
            "stock": self.asset_dir / "move_to_stock.ogg",
        }
        self.min_interval = {"move": 0.03, "stock": 0.1}
        self.last_play: Dict[str, float] = {}
        self.played = deque(maxlen=32)
        self._sounds: Dict[str, "pygame.mixer.Sound"] = {}

    def load(self) -> int:
        """Load whatever sound files exist; returns how many were loaded."""
        if not self.enabled or not pygame.mixer.get_init():
            return 0
        if not self.asset_dir.is_dir():
            logger.info("No sound assets in %s; playing silently", self.asset_dir)
            return 0
        for key, path in self.paths.items():
            if not path.exists():
                logger.warning("Sound file missing: %s", path)
                continue
            try:
                self._sounds[key] = pygame.mixer.Sound(str(path))
            except pygame.error as exc:
                logger.warning("Could not load sound %s: %s", path, exc)
        return len(self._sounds)

    def on_event(self, event: Event):
        if isinstance(event, MovePerformed):
            key = sound_for_step(event.step)
            if key:
                self.play(key)
        elif isinstance(event, CardsDealt):
            self.play("stock")

    def play(self, key: str):
        if not self.enabled:
            return
        now = time.monotonic()
        if now - self.last_play.get(key, float("-inf")) < self.min_interval.get(key, 0.0):
            return
        self.last_play[key] = now
        self.played.append(key)
        sound = self._sounds.get(key)
        if sound is not None:
            sound.play()
