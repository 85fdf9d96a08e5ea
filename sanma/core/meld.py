"""Meld (副露) data structures for pon and quads."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sanma.core.tile import Tile


class MeldType(Enum):
    PON = "pon"                # 碰
    ANKAN = "ankan"            # 暗杠
    DAIMINKAN = "daiminkan"    # 大明杠
    SHOUMINKAN = "shouminkan"  # 加杠 (小明杠)


@dataclass(frozen=True)
class Meld:
    """A frozen meld.

    There is no chi: with only 1m and 9m in the man suit there is no run
    to claim from an upstream seat, and three-player rules drop it for
    every suit.

    Attributes:
        meld_type: Type of meld
        tiles: All tiles in the meld (3 for pon, 4 for quads)
        called_tile: The claimed discard (None for ankan)
        from_seat: Seat the tile was claimed from (None for ankan)
    """
    meld_type: MeldType
    tiles: tuple  # tuple of Tile
    called_tile: Optional[Tile] = None
    from_seat: Optional[int] = None

    def __post_init__(self):
        expected = 3 if self.meld_type == MeldType.PON else 4
        if len(self.tiles) != expected:
            raise ValueError(f"{self.meld_type.value} needs {expected} tiles, got {len(self.tiles)}")
        if any(not t.is_same_kind(self.tiles[0]) for t in self.tiles):
            raise ValueError(f"{self.meld_type.value} tiles must share one kind")

    @property
    def is_open(self) -> bool:
        return self.meld_type != MeldType.ANKAN

    @property
    def is_kan(self) -> bool:
        return self.meld_type != MeldType.PON

    @property
    def tile_index34(self) -> int:
        """The 34 index of the meld's kind."""
        return self.tiles[0].index34
