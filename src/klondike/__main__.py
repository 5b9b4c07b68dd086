"""Entry point: settings, logging, window and the frame loop."""

import logging
import os

import pygame

from klondike import common as C
from klondike.modes.klondike import KlondikeGameScene

logger = logging.getLogger(__name__)


def _initial_window_size():
    info = pygame.display.Info()
    # Keep a safety margin so the window never hides under taskbar
    margin_w, margin_h = 120, 140
    w = min(C.SCREEN_W, max(640, info.current_w - margin_w))
    h = min(C.SCREEN_H, max(480, info.current_h - margin_h))
    return w, h


def _init_mixer(settings):
    if settings.mute:
        return False
    try:
        pygame.mixer.init()
    except pygame.error as exc:
        logger.warning("Audio disabled: %s", exc)
        return False
    return True


def main():
    settings = C.load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    os.environ.setdefault("SDL_VIDEO_CENTERED", "1")
    pygame.init()
    _init_mixer(settings)

    # The board is laid out for the full design size; the window may be smaller
    w, h = _initial_window_size()
    screen = pygame.display.set_mode((w, h))
    pygame.display.set_caption("Klondike")
    C.setup_fonts()
    C.invalidate_card_caches()
    clock = pygame.time.Clock()
    frame = pygame.Surface((C.SCREEN_W, C.SCREEN_H))

    scene = KlondikeGameScene(app=None, settings=settings)
    scene.sound.load()

    running = True
    while running:
        dt = clock.tick(60) / 1000.0
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                running = False
                break
            if e.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP, pygame.MOUSEMOTION):
                e = _to_board_event(e, screen.get_size())
            scene.handle_event(e)
        if scene.next_scene is not None:
            scene = scene.next_scene
        scene.update(dt)
        scene.draw(frame)
        if screen.get_size() == frame.get_size():
            screen.blit(frame, (0, 0))
        else:
            screen.blit(pygame.transform.smoothscale(frame, screen.get_size()), (0, 0))
        pygame.display.flip()
    pygame.quit()


def _to_board_event(e, window_size):
    """Map window pixel coordinates onto the fixed board size."""
    sx = C.SCREEN_W / max(1, window_size[0])
    sy = C.SCREEN_H / max(1, window_size[1])
    if sx == 1 and sy == 1:
        return e
    attrs = dict(e.dict)
    x, y = e.pos
    attrs["pos"] = (int(x * sx), int(y * sy))
    if "rel" in attrs:
        rx, ry = e.rel
        attrs["rel"] = (rx * sx, ry * sy)
    return pygame.event.Event(e.type, attrs)


if __name__ == "__main__":
    main()
