"""Hand management - closed tiles, melds, discard pool."""

from typing import List, Optional, Set

from sanma.core.tile import Tile, tiles_to_34_array
from sanma.core.meld import Meld


class Hand:
    """Manages a player's hand state during a round.

    Attributes:
        closed_tiles: Tiles in hand (not melded), kept sorted after each change
        melds: Declared melds
        discard_pool: Tiles discarded (in order)
        discard_called: Whether each discard was claimed by someone
        draw_tile: The most recently drawn tile
        is_riichi: Whether riichi has been declared
        is_double_riichi: Whether riichi was declared on the first turn
        is_ippatsu: Whether the one-shot window is still open
        riichi_discard_index: Index in discard_pool of the riichi tile
        declined_kinds: Kinds this seat passed on when it could have won
        is_furiten: Latched furiten flag; only update_furiten() sets it
    """

    def __init__(self):
        self.closed_tiles: List[Tile] = []
        self.melds: List[Meld] = []
        self.discard_pool: List[Tile] = []
        self.discard_called: List[bool] = []
        self.draw_tile: Optional[Tile] = None
        self.is_riichi: bool = False
        self.is_double_riichi: bool = False
        self.is_ippatsu: bool = False
        self.riichi_discard_index: int = -1
        self.declined_kinds: Set[int] = set()
        self.is_furiten: bool = False

    def draw(self, tile: Tile):
        """Take a tile from the wall."""
        self.closed_tiles.append(tile)
        self.closed_tiles.sort()
        self.draw_tile = tile

    def deal(self, tile: Tile):
        """Take a tile during the initial deal (no drawn-tile marker)."""
        self.closed_tiles.append(tile)
        self.closed_tiles.sort()

    def discard(self, tile: Tile):
        """Move a tile from hand to the discard pool."""
        self.closed_tiles.remove(tile)
        self.discard_pool.append(tile)
        self.discard_called.append(False)
        self.draw_tile = None

    def remove_tiles(self, tiles) -> None:
        for t in tiles:
            self.closed_tiles.remove(t)

    def add_meld(self, meld: Meld):
        """Add a meld to the hand."""
        self.melds.append(meld)

    def find_tile(self, tile_id: int) -> Optional[Tile]:
        """Closed tile with this instance id, if held."""
        for t in self.closed_tiles:
            if t.id == tile_id:
                return t
        return None

    def tiles_of_kind(self, index34: int) -> List[Tile]:
        return [t for t in self.closed_tiles if t.index34 == index34]

    def to_34_array(self) -> List[int]:
        """Convert closed tiles to 34-length count array."""
        return tiles_to_34_array(self.closed_tiles)

    @property
    def all_tiles(self) -> List[Tile]:
        """Closed tiles plus every tile inside melds."""
        result = list(self.closed_tiles)
        for meld in self.melds:
            result.extend(meld.tiles)
        return result

    @property
    def is_menzen(self) -> bool:
        """Whether hand is fully closed (門前)."""
        return all(not m.is_open for m in self.melds)

    @property
    def effective_size(self) -> int:
        """Tile count with every meld counted as three (13 waiting, 14 acting)."""
        return len(self.closed_tiles) + 3 * len(self.melds)

    def clone(self) -> 'Hand':
        """Copy for simulation (tiles are shared, containers are not)."""
        h = Hand()
        h.closed_tiles = list(self.closed_tiles)
        h.melds = list(self.melds)
        h.discard_pool = list(self.discard_pool)
        h.discard_called = list(self.discard_called)
        h.draw_tile = self.draw_tile
        h.is_riichi = self.is_riichi
        h.is_double_riichi = self.is_double_riichi
        h.is_ippatsu = self.is_ippatsu
        h.riichi_discard_index = self.riichi_discard_index
        h.declined_kinds = set(self.declined_kinds)
        h.is_furiten = self.is_furiten
        return h
