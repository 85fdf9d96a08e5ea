"""Read-only table snapshots (the information barrier for policies and views)."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from sanma.core.meld import Meld
from sanma.core.player_state import PlayerState, Wind
from sanma.core.tile import Tile
from sanma.engine.action import LegalActions


@dataclass(frozen=True)
class SeatView:
    """What a viewer may see of one seat.

    hand and draw_tile are only filled for the viewer's own seat; for other
    seats only hand_count is known.
    """
    seat: int
    name: str
    score: int
    seat_wind: Wind
    is_dealer: bool
    is_riichi: bool
    melds: Tuple[Meld, ...]
    discards: Tuple[Tile, ...]
    discard_called: Tuple[bool, ...]
    riichi_discard_index: int
    hand_count: int
    hand: Optional[Tuple[Tile, ...]] = None
    draw_tile: Optional[Tile] = None
    is_furiten: bool = False

    @property
    def is_menzen(self) -> bool:
        return all(not m.is_open for m in self.melds)


@dataclass(frozen=True)
class TableSnapshot:
    """Committed table state as seen from one seat."""
    viewer_seat: int
    phase: str
    acting_seat: int
    round_wind: Wind
    round_number: int
    honba: int
    riichi_sticks: int
    wall_remaining: int
    dora_indicators: Tuple[Tile, ...]
    seats: Tuple[SeatView, ...]
    legal: Optional[LegalActions] = None
    last_discard: Optional[Tile] = None
    last_discard_seat: Optional[int] = None

    @property
    def me(self) -> SeatView:
        return self.seats[self.viewer_seat]

    @property
    def opponents(self) -> List[SeatView]:
        return [s for s in self.seats if s.seat != self.viewer_seat]

    @property
    def round_label(self) -> str:
        honba = f" {self.honba}本場" if self.honba else ""
        return f"{self.round_wind.kanji}{self.round_number}局{honba}"


def build_snapshot(
    viewer_seat: int,
    players: List[PlayerState],
    phase: str,
    acting_seat: int,
    round_wind: Wind,
    round_number: int,
    honba: int,
    riichi_sticks: int,
    wall_remaining: int,
    dora_indicators: List[Tile],
    legal: Optional[LegalActions] = None,
    last_discard: Optional[Tile] = None,
    last_discard_seat: Optional[int] = None,
) -> TableSnapshot:
    """Build a TableSnapshot for the given viewer."""
    seats = []
    for p in players:
        own = p.seat == viewer_seat
        hand = p.hand
        seats.append(SeatView(
            seat=p.seat,
            name=p.name,
            score=p.score,
            seat_wind=p.seat_wind,
            is_dealer=p.is_dealer,
            is_riichi=hand.is_riichi,
            melds=tuple(hand.melds),
            discards=tuple(hand.discard_pool),
            discard_called=tuple(hand.discard_called),
            riichi_discard_index=hand.riichi_discard_index,
            hand_count=len(hand.closed_tiles),
            hand=tuple(hand.closed_tiles) if own else None,
            draw_tile=hand.draw_tile if own else None,
            is_furiten=hand.is_furiten if own else False,
        ))

    return TableSnapshot(
        viewer_seat=viewer_seat,
        phase=phase,
        acting_seat=acting_seat,
        round_wind=round_wind,
        round_number=round_number,
        honba=honba,
        riichi_sticks=riichi_sticks,
        wall_remaining=wall_remaining,
        dora_indicators=tuple(dora_indicators),
        seats=tuple(seats),
        legal=legal if legal is not None and legal.seat == viewer_seat else None,
        last_discard=last_discard,
        last_discard_seat=last_discard_seat,
    )
