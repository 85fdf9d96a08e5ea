"""Abstract decision policy (the seat-side interface to GameState)."""

from abc import ABC, abstractmethod

from sanma.engine.action import Action, LegalActions
from sanma.engine.snapshot import TableSnapshot


class DecisionPolicy(ABC):
    """Base class for automated seats.

    A policy only ever sees a TableSnapshot, which is the information
    barrier: its own closed tiles, everyone's melds and discards, scores and
    the table counters. It never touches the wall or another seat's hand.
    Whatever it returns is validated by GameState exactly like an external
    command.
    """

    def __init__(self, name: str = "CPU"):
        self.name = name

    @abstractmethod
    def choose_turn_action(self, snapshot: TableSnapshot,
                           legal: LegalActions) -> Action:
        """Pick DISCARD, RIICHI, TSUMO or KAN after drawing (or after a pon)."""
        ...

    @abstractmethod
    def choose_claim(self, snapshot: TableSnapshot,
                     legal: LegalActions) -> Action:
        """Pick RON, PON, KAN or SKIP in response to another seat's discard."""
        ...
