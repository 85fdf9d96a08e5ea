"""Dealer and prevailing-wind rotation across a match (東風戦 / 半荘)."""

from typing import Sequence

from sanma.config import GameConfig
from sanma.core.player_state import Wind


class RoundCycle:
    """Match-level counters that persist across rounds.

    Attributes:
        round_wind: Prevailing wind (EAST, then SOUTH in a south-length match)
        round_number: 1..rounds_per_wind within the current wind
        dealer_seat: Seat holding the dealer position
        honba: Repeat counter (本場)
        riichi_sticks: Deposits waiting on the table
        is_finished: Whether the match is over
    """

    def __init__(self, config: GameConfig):
        self.config = config
        self.num_players = config.num_players
        self.round_wind = Wind.EAST
        self.round_number = 1
        self.dealer_seat = 0
        self.honba = 0
        self.riichi_sticks = 0
        self.rounds_played = 0
        self.is_finished = False

    @property
    def label(self) -> str:
        honba = f" {self.honba}本場" if self.honba else ""
        return f"{self.round_wind.kanji}{self.round_number}局{honba}"

    def seat_wind(self, seat: int) -> Wind:
        """Seat wind counts from the dealer (東) in turn order."""
        return Wind((seat - self.dealer_seat) % self.num_players)

    def conclude_round(self, dealer_continues: bool, scores: Sequence[int]) -> bool:
        """Advance the counters after a round. Returns True if the match goes on.

        Dealer repeat: honba + 1, no rotation. Otherwise the dealer moves one
        seat on, honba resets and the round number advances; after the last
        round of a wind the prevailing wind flips, or the match ends when its
        configured length is used up. Any negative score ends it at once.
        """
        if self.is_finished:
            return False
        self.rounds_played += 1

        if any(s < 0 for s in scores):
            self.is_finished = True
            return False

        if dealer_continues:
            self.honba += 1
            return True

        self.honba = 0
        self.dealer_seat = (self.dealer_seat + 1) % self.num_players
        self.round_number += 1

        if self.round_number > self.config.rounds_per_wind:
            self.round_number = 1
            if self.round_wind == Wind.EAST and not self.config.is_east_only:
                self.round_wind = Wind.SOUTH
            else:
                self.is_finished = True
                return False

        return True
