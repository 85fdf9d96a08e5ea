"""Typed exceptions raised by the engine.

Judge and scorer functions are pure, so only GameState transitions and
the wall can leave shared state inconsistent. Commands are validated
before anything is mutated; an IllegalAction therefore never changes
state.
"""


class EngineError(Exception):
    """Base class for engine errors."""


class IllegalAction(EngineError):
    """A command was issued out of phase or with tiles the seat does not hold.

    Attributes:
        action: Name of the attempted command (e.g. "discard", "claim").
        seat: Seat that issued it (None for table-level commands).
        reason: Human-readable explanation.
    """

    def __init__(self, action: str, seat, reason: str):
        self.action = action
        self.seat = seat
        self.reason = reason
        super().__init__(f"illegal {action} from seat {seat}: {reason}")


class InvariantViolation(EngineError):
    """Round state broke a structural rule (hand size, wall underflow).

    Fatal to the current round.
    """


class ScoringAmbiguity(EngineError):
    """A (fu, han) pair has no entry in the point table."""

    def __init__(self, fu: int, han: int, reason: str = "no table entry"):
        self.fu = fu
        self.han = han
        super().__init__(f"{han} han {fu} fu: {reason}")
