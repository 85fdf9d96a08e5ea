"""Match configuration for three-player games."""

from typing import Dict, Optional, Sequence


# Kinds that exist in the three-player set (mpsz short names)
RED_CAPABLE_KINDS = (
    ["1m", "9m"]
    + [f"{n}p" for n in range(1, 10)]
    + [f"{n}s" for n in range(1, 10)]
)

DEFAULT_RED_FIVES = {"5p": 1, "5s": 1}

MATCH_LENGTHS = ("east", "south")
PAYMENT_RULES = ("tsumo_loss", "north_bisection")
DEFAULT_UMA = (10, -10)  # thousands: first place, last place
UMA_UNIT = 1000


class GameConfig:
    """Game configuration.

    Built once before a match and treated as read-only afterwards.

    Attributes:
        length: 'east' (one wind) or 'south' (two winds)
        starting_score: Points each seat starts with
        rounds_per_wind: Rounds played under one prevailing wind
        red_fives: Red tile count per kind name, e.g. {"5p": 1}
        kan_dora: Reveal a new indicator after each quad
        ura_dora: Count rear indicators for riichi winners
        payment_rule: How the absent fourth seat's self-draw share is handled
        honba_unit: Bonus per repeat counter, per payer
        noten_penalty_total: Points moved from not-ready to ready seats at an exhaustive draw
        riichi_deposit: Stick value banked on riichi
        uma: Final bonus in thousands for (first, last); second place gets none
    """

    def __init__(
        self,
        length: str = "south",
        starting_score: int = 35000,
        rounds_per_wind: int = 4,
        red_fives: Optional[Dict[str, int]] = None,
        kan_dora: bool = True,
        ura_dora: bool = True,
        payment_rule: str = "tsumo_loss",
        honba_unit: int = 100,
        noten_penalty_total: int = 2000,
        riichi_deposit: int = 1000,
        uma: Optional[Sequence[int]] = None,
    ):
        if length not in MATCH_LENGTHS:
            raise ValueError(f"length must be one of {MATCH_LENGTHS}, got {length!r}")
        if payment_rule not in PAYMENT_RULES:
            raise ValueError(f"payment_rule must be one of {PAYMENT_RULES}, got {payment_rule!r}")
        if rounds_per_wind < 1:
            raise ValueError(f"rounds_per_wind must be positive, got {rounds_per_wind}")
        if starting_score < 0:
            raise ValueError(f"starting_score must not be negative, got {starting_score}")

        uma = tuple(DEFAULT_UMA if uma is None else uma)
        if len(uma) != 2 or sum(uma) != 0:
            raise ValueError(f"uma must be (first, last) summing to zero, got {uma!r}")

        reds = dict(DEFAULT_RED_FIVES if red_fives is None else red_fives)
        for kind, count in reds.items():
            if kind not in RED_CAPABLE_KINDS:
                raise ValueError(f"red tiles not available for kind {kind!r}")
            if not (0 <= count <= 4):
                raise ValueError(f"red count for {kind} must be 0..4, got {count}")

        self.num_players = 3
        self.length = length
        self.starting_score = starting_score
        self.rounds_per_wind = rounds_per_wind
        self.red_fives = reds
        self.kan_dora = kan_dora
        self.ura_dora = ura_dora
        self.payment_rule = payment_rule
        self.honba_unit = honba_unit
        self.noten_penalty_total = noten_penalty_total
        self.riichi_deposit = riichi_deposit
        self.uma = uma

    @property
    def is_east_only(self) -> bool:
        return self.length == "east"

    def to_dict(self) -> dict:
        """Plain-data form for match logs."""
        return {
            "length": self.length,
            "starting_score": self.starting_score,
            "rounds_per_wind": self.rounds_per_wind,
            "red_fives": dict(self.red_fives),
            "kan_dora": self.kan_dora,
            "ura_dora": self.ura_dora,
            "payment_rule": self.payment_rule,
            "honba_unit": self.honba_unit,
            "noten_penalty_total": self.noten_penalty_total,
            "riichi_deposit": self.riichi_deposit,
            "uma": list(self.uma),
        }
