"""Tile definition with dual encoding (instance id / 34 kinds) and red five support."""

from enum import IntEnum
from typing import Dict, Iterable, List


class TileSuit(IntEnum):
    MAN = 0    # 万子, only 1 and 9 exist in three-player sets
    PIN = 1    # 筒子
    SOU = 2    # 索子
    HONOR = 3  # 字牌: 東南西北白發中


# Kind indices (34 encoding) present in a three-player set: 1m, 9m, 1-9p, 1-9s, honors
SANMA_KINDS = [0, 8] + list(range(9, 34))

# Yaochu (terminal + honor) kind indices
YAOCHU_INDICES = [0, 8, 9, 17, 18, 26, 27, 28, 29, 30, 31, 32, 33]

WIND_INDICES = (27, 28, 29, 30)
DRAGON_INDICES = (31, 32, 33)

# Display names for 34 encoding
TILE_NAMES_34 = [
    "1m", "2m", "3m", "4m", "5m", "6m", "7m", "8m", "9m",
    "1p", "2p", "3p", "4p", "5p", "6p", "7p", "8p", "9p",
    "1s", "2s", "3s", "4s", "5s", "6s", "7s", "8s", "9s",
    "東", "南", "西", "北", "白", "發", "中",
]

_SUIT_CHARS = {'m': 0, 'p': 9, 's': 18, 'z': 27}
_HONOR_CHARS = {name: 27 + i for i, name in enumerate(TILE_NAMES_34[27:])}


class Tile:
    """Immutable tile instance.

    The id is unique per physical tile (kind * 4 + copy), so ownership moves
    between wall, hand, discards and melds can be traced. Equality and hashing
    use the id; use is_same_kind() or matches() to compare by value.
    """
    __slots__ = ('_id', '_index34', '_suit', '_number', '_is_red')

    def __init__(self, tile_id: int, is_red: bool = False):
        if not (0 <= tile_id < 136):
            raise ValueError(f"tile_id must be 0..135, got {tile_id}")
        index34 = tile_id // 4
        if 1 <= index34 <= 7:
            raise ValueError(f"{TILE_NAMES_34[index34]} is not part of a three-player set")
        self._id = tile_id
        self._index34 = index34
        if index34 < 27:
            self._suit = TileSuit(index34 // 9)
            self._number = index34 % 9 + 1
        else:
            self._suit = TileSuit.HONOR
            self._number = index34 - 27 + 1  # 1=東 .. 4=北, 5=白, 6=發, 7=中
        if is_red and self._suit == TileSuit.HONOR:
            raise ValueError("honor tiles cannot be red")
        self._is_red = is_red

    @property
    def id(self) -> int:
        return self._id

    @property
    def index34(self) -> int:
        return self._index34

    @property
    def suit(self) -> TileSuit:
        return self._suit

    @property
    def number(self) -> int:
        return self._number

    @property
    def is_red(self) -> bool:
        return self._is_red

    @property
    def is_honor(self) -> bool:
        return self._suit == TileSuit.HONOR

    @property
    def is_terminal(self) -> bool:
        return not self.is_honor and self._number in (1, 9)

    @property
    def is_yaochu(self) -> bool:
        return self.is_honor or self.is_terminal

    @property
    def name(self) -> str:
        if self._is_red:
            return f"0{'mps'[self._suit]}"
        return TILE_NAMES_34[self._index34]

    def is_same_kind(self, other: 'Tile') -> bool:
        """Kind equality: ignores instance id and redness."""
        return self._index34 == other._index34

    def matches(self, other: 'Tile') -> bool:
        """Value equality: same kind and same redness."""
        return self._index34 == other._index34 and self._is_red == other._is_red

    def __repr__(self):
        return f"Tile({self.name}#{self._id})"

    def __eq__(self, other):
        if isinstance(other, Tile):
            return self._id == other._id
        return NotImplemented

    def __hash__(self):
        return self._id

    def __lt__(self, other):
        if isinstance(other, Tile):
            return ((self._index34, self._is_red, self._id)
                    < (other._index34, other._is_red, other._id))
        return NotImplemented


def tile_34_to_name(index34: int) -> str:
    """Get tile name from 34 encoding."""
    return TILE_NAMES_34[index34]


def tile_34_to_short(index34: int) -> str:
    """Stable ascii name (mpsz notation) for logs."""
    if index34 >= 27:
        return f"{index34 - 26}z"
    return TILE_NAMES_34[index34]


def tiles_to_34_array(tiles: Iterable[Tile]) -> List[int]:
    """Convert tiles to a 34-length count array."""
    arr = [0] * 34
    for t in tiles:
        arr[t.index34] += 1
    return arr


def next_tile_index(index34: int) -> int:
    """Dora kind indicated by an indicator kind.

    Man tiles only have 1 and 9 in a three-player set: 1m -> 9m, 9m -> 1m.
    Pin/sou wrap 9 -> 1. Winds: 東→南→西→北→東. Dragons: 白→發→中→白.
    """
    if index34 < 9:
        if index34 == 0:
            return 8
        if index34 == 8:
            return 0
        raise ValueError(f"{TILE_NAMES_34[index34]} is not part of a three-player set")
    elif index34 < 18:
        return 9 + (index34 - 9 + 1) % 9
    elif index34 < 27:
        return 18 + (index34 - 18 + 1) % 9
    elif index34 < 31:
        return 27 + (index34 - 27 + 1) % 4
    else:
        return 31 + (index34 - 31 + 1) % 3


def make_tiles_from_string(s: str) -> List[Tile]:
    """Parse shorthand like '19m123p0s1z' or '19m123p東南' into fresh tiles.

    '0' is a red five. Honors accept 1z..7z or the kanji names. Every tile
    gets its own copy slot, so a string never yields two equal instances;
    more than four copies of one kind raises ValueError.
    """
    tiles = []
    used: Dict[int, int] = {}

    def take(index34: int, is_red: bool = False):
        copy = used.get(index34, 0)
        if copy >= 4:
            raise ValueError(f"more than four copies of {TILE_NAMES_34[index34]}")
        used[index34] = copy + 1
        tiles.append(Tile(index34 * 4 + copy, is_red))

    numbers: List[int] = []
    for ch in s:
        if ch.isdigit():
            numbers.append(int(ch))
        elif ch in _SUIT_CHARS:
            for n in numbers:
                if n == 0:
                    if ch == 'z':
                        raise ValueError("honor tiles cannot be red")
                    take(_SUIT_CHARS[ch] + 4, is_red=True)
                else:
                    take(_SUIT_CHARS[ch] + n - 1)
            numbers = []
        elif ch in _HONOR_CHARS:
            take(_HONOR_CHARS[ch])
        elif not ch.isspace():
            raise ValueError(f"unexpected character {ch!r} in {s!r}")
    return tiles
