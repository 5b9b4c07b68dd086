"""Notification records produced by the core and routed to listeners."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class MoveStep(Enum):
    STOCK_TO_WASTE = "stock_to_waste"
    WASTE_TO_STOCK = "waste_to_stock"
    WASTE_TO_TABLEAU = "waste_to_tableau"
    WASTE_TO_FOUNDATION = "waste_to_foundation"
    TABLEAU_TO_TABLEAU = "tableau_to_tableau"
    TABLEAU_TO_FOUNDATION = "tableau_to_foundation"
    FOUNDATION_TO_TABLEAU = "foundation_to_tableau"
    TABLEAU_REVEAL = "tableau_reveal"


class GamePhase(Enum):
    SELECT_DIFFICULTY = "select_difficulty"
    PREPARE = "prepare"
    DEAL = "deal"
    PLAY = "play"
    NEW_GAME = "new_game"
    GAME_CLEAR = "game_clear"


@dataclass(frozen=True)
class MovePerformed:
    step: MoveStep


@dataclass(frozen=True)
class ScoreDelta:
    step: MoveStep
    points: int


@dataclass(frozen=True)
class CardsDealt:
    pass


@dataclass(frozen=True)
class GameCleared:
    pass


@dataclass(frozen=True)
class PhaseChanged:
    phase: GamePhase


Event = Union[MovePerformed, ScoreDelta, CardsDealt, GameCleared, PhaseChanged]
