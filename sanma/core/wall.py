"""Wall and dead wall (牌山与王牌) management for three-player sets."""

import random
from typing import List, Optional, Sequence

from sanma.config import GameConfig
from sanma.core.tile import Tile, SANMA_KINDS, TILE_NAMES_34, next_tile_index
from sanma.engine.errors import InvariantViolation

DEAD_WALL_SIZE = 14
MAX_REPLACEMENTS = 4
MAX_INDICATORS = 5


class Wall:
    """Manages the live wall, dead wall and dora indicators.

    108 tiles: 1m/9m, 1-9p, 1-9s and the seven honors, four copies each.

    Dead wall: 14 tiles
      - Replacement (rinshan) tiles: positions 0-3
      - Dora indicators: positions 4-8 (first revealed at round start)
      - Ura-dora indicators: positions 9-13

    A replacement draw pulls the last live tile into the dead wall so it
    stays at 14 tiles.
    """

    def __init__(self, config: Optional[GameConfig] = None,
                 rng: Optional[random.Random] = None):
        self.config = config or GameConfig()
        self._rng = rng or random.Random()
        self.all_tiles: List[Tile] = []
        self.live_wall: List[Tile] = []
        self.replacement_tiles: List[Tile] = []
        self.indicator_tiles: List[Tile] = []
        self.ura_indicator_tiles: List[Tile] = []
        self._dora_revealed = 0
        self._replacements_drawn = 0
        self._drawn = 0

    @classmethod
    def from_tiles(cls, live_wall_tiles: Sequence[Tile],
                   dead_wall_tiles: Sequence[Tile],
                   config: Optional[GameConfig] = None) -> 'Wall':
        """Build a wall from predetermined tiles (tests, replays).

        The initial dora indicator is revealed.
        """
        if len(dead_wall_tiles) != DEAD_WALL_SIZE:
            raise ValueError(f"dead wall needs {DEAD_WALL_SIZE} tiles, got {len(dead_wall_tiles)}")
        wall = cls(config)
        wall.all_tiles = list(live_wall_tiles) + list(dead_wall_tiles)
        wall.live_wall = list(live_wall_tiles)
        wall._split_dead_wall(list(dead_wall_tiles))
        wall.reveal_initial_dora()
        return wall

    def build(self) -> List[Tile]:
        """Create the pristine 108-tile sequence with configured red tiles."""
        red_counts = {}
        for name, count in self.config.red_fives.items():
            red_counts[TILE_NAMES_34.index(name)] = count

        tiles = []
        for index34 in SANMA_KINDS:
            reds = red_counts.get(index34, 0)
            for copy in range(4):
                tiles.append(Tile(index34 * 4 + copy, is_red=copy < reds))

        self.all_tiles = tiles
        self.live_wall = list(tiles)
        self.replacement_tiles = []
        self.indicator_tiles = []
        self.ura_indicator_tiles = []
        self._dora_revealed = 0
        self._replacements_drawn = 0
        self._drawn = 0
        return list(tiles)

    def shuffle(self):
        """Uniform permutation of the live wall (Fisher-Yates)."""
        self._rng.shuffle(self.live_wall)
        self.all_tiles = list(self.live_wall)

    def set_dead_wall(self):
        """Slice the 14-tile tail off the live wall."""
        if self.indicator_tiles:
            raise InvariantViolation("dead wall already set")
        if len(self.live_wall) < DEAD_WALL_SIZE:
            raise InvariantViolation("not enough tiles for a dead wall")
        dead = self.live_wall[-DEAD_WALL_SIZE:]
        del self.live_wall[-DEAD_WALL_SIZE:]
        self._split_dead_wall(dead)

    def _split_dead_wall(self, dead: List[Tile]):
        self.replacement_tiles = dead[0:4]
        self.indicator_tiles = dead[4:9]
        self.ura_indicator_tiles = dead[9:14]

    def prepare(self) -> 'Wall':
        """build + shuffle + set_dead_wall + reveal_initial_dora."""
        self.build()
        self.shuffle()
        self.set_dead_wall()
        self.reveal_initial_dora()
        return self

    @property
    def remaining(self) -> int:
        """Number of drawable tiles remaining in live wall."""
        return len(self.live_wall)

    @property
    def is_empty(self) -> bool:
        return len(self.live_wall) == 0

    @property
    def dead_wall_size(self) -> int:
        return (len(self.replacement_tiles) + len(self.indicator_tiles)
                + len(self.ura_indicator_tiles))

    @property
    def tiles_in_play(self) -> int:
        """Tiles handed out by draw() or draw_replacement()."""
        return self._drawn

    @property
    def replacements_left(self) -> int:
        return min(MAX_REPLACEMENTS - self._replacements_drawn, len(self.replacement_tiles))

    def draw(self) -> Tile:
        """Draw the next tile from the live wall."""
        if not self.live_wall:
            raise InvariantViolation("draw from an empty wall")
        self._drawn += 1
        return self.live_wall.pop(0)

    def draw_replacement(self) -> Tile:
        """Draw a replacement tile from the dead wall (after a quad).

        Does not reveal an indicator; the caller decides that.
        """
        if self.replacements_left <= 0:
            raise InvariantViolation("no replacement tiles left")
        tile = self.replacement_tiles.pop(0)
        self._replacements_drawn += 1
        self._drawn += 1
        if self.live_wall:
            self.replacement_tiles.append(self.live_wall.pop())
        return tile

    def reveal_initial_dora(self):
        """Expose exactly one indicator."""
        if not self.indicator_tiles:
            raise InvariantViolation("dead wall not set")
        self._dora_revealed = 1

    def reveal_next_dora(self) -> Optional[Tile]:
        """Expose one more indicator (quad bonus). Returns it, or None at the cap."""
        if self._dora_revealed >= MAX_INDICATORS:
            return None
        self._dora_revealed += 1
        return self.indicator_tiles[self._dora_revealed - 1]

    @property
    def dora_indicators(self) -> List[Tile]:
        """Currently revealed dora indicator tiles."""
        return self.indicator_tiles[:self._dora_revealed]

    @property
    def ura_indicators(self) -> List[Tile]:
        """Rear indicators paired with the revealed ones (riichi winners only)."""
        return self.ura_indicator_tiles[:self._dora_revealed]

    def dora_kinds(self) -> List[int]:
        """34 indices of effective dora, one entry per indicator."""
        return [next_tile_index(t.index34) for t in self.dora_indicators]

    def ura_dora_kinds(self) -> List[int]:
        return [next_tile_index(t.index34) for t in self.ura_indicators]

    @property
    def total_tiles(self) -> int:
        """Size of the set this wall was built from (108 for a full wall)."""
        return len(self.all_tiles)

    def check_conservation(self):
        """Live, dead and handed-out tiles must add up to the whole set."""
        accounted = self.remaining + self.dead_wall_size + self.tiles_in_play
        if accounted != self.total_tiles:
            raise InvariantViolation(
                f"wall accounts for {accounted} of {self.total_tiles} tiles")
