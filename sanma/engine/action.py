"""Action definitions for the game engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from sanma.core.tile import Tile
from sanma.core.meld import Meld


class ActionType(Enum):
    DISCARD = "discard"
    RIICHI = "riichi"   # Declare riichi and discard tile_id in one step
    TSUMO = "tsumo"
    RON = "ron"
    PON = "pon"
    KAN = "kan"         # Concealed/added on own turn, open in response to a discard
    SKIP = "skip"


class ClaimKind(Enum):
    TSUMO = "tsumo"
    RON = "ron"
    PON = "pon"
    KAN = "kan"


CLAIM_ACTIONS = {
    ClaimKind.TSUMO: ActionType.TSUMO,
    ClaimKind.RON: ActionType.RON,
    ClaimKind.PON: ActionType.PON,
    ClaimKind.KAN: ActionType.KAN,
}

# Priority for resolving conflicting claims on one discard (lower wins)
ACTION_PRIORITY = {
    ActionType.RON: 0,
    ActionType.KAN: 1,
    ActionType.PON: 2,
    ActionType.SKIP: 99,
}


@dataclass(frozen=True)
class Action:
    """A seat's decision.

    tile_id names the tile to discard (DISCARD, RIICHI) or any tile of the
    kind to quad on the seat's own turn (KAN). tile_ids names the hand tiles
    used for a pon (2) or open quad (3) claim; empty means "pick for me".
    """
    action_type: ActionType
    seat: int
    tile_id: Optional[int] = None
    tile_ids: Tuple[int, ...] = ()

    def __repr__(self):
        parts = [self.action_type.value]
        if self.tile_id is not None:
            parts.append(f"tile={self.tile_id}")
        if self.tile_ids:
            parts.append(f"tiles={list(self.tile_ids)}")
        return f"Action({', '.join(parts)}, p{self.seat})"


@dataclass
class LegalActions:
    """Actions open to one seat at a decision point."""
    seat: int
    can_tsumo: bool = False
    riichi_candidates: List[Tile] = field(default_factory=list)
    can_ankan: List[List[Tile]] = field(default_factory=list)
    can_shouminkan: List[Tile] = field(default_factory=list)
    can_discard: List[Tile] = field(default_factory=list)
    can_ron: bool = False
    can_pon: List[Meld] = field(default_factory=list)
    can_daiminkan: List[Meld] = field(default_factory=list)

    @property
    def can_riichi(self) -> bool:
        return len(self.riichi_candidates) > 0

    @property
    def is_response(self) -> bool:
        """Whether this is a response to another seat's discard."""
        return not self.can_discard

    @property
    def has_action(self) -> bool:
        """Whether there's any action available beyond discarding or passing."""
        return (self.can_tsumo or self.can_riichi or
                len(self.can_ankan) > 0 or len(self.can_shouminkan) > 0 or
                len(self.can_pon) > 0 or len(self.can_daiminkan) > 0 or
                self.can_ron)

    def allows(self, action: Action) -> bool:
        """Coarse check that the action type is on offer."""
        t = action.action_type
        if t == ActionType.DISCARD:
            return bool(self.can_discard)
        if t == ActionType.RIICHI:
            return self.can_riichi
        if t == ActionType.TSUMO:
            return self.can_tsumo
        if t == ActionType.RON:
            return self.can_ron
        if t == ActionType.PON:
            return bool(self.can_pon)
        if t == ActionType.KAN:
            return bool(self.can_ankan or self.can_shouminkan or self.can_daiminkan)
        if t == ActionType.SKIP:
            return self.is_response
        return False
