"""Win (和了) detection - standard form and seven pairs.

Returns all possible decompositions for a winning hand. Thirteen orphans
is not played.
"""

from typing import List, Sequence, Tuple

from sanma.core.meld import Meld
from sanma.core.tile import SANMA_KINDS


# A decomposition is (head_34, mentsu_list) where mentsu_list is list of (type, index34)
# type: 'shuntsu' (顺子) or 'koutsu' (刻子)
Mentsu = Tuple[str, int]
Decomposition = Tuple[int, List[Mentsu]]


def groups_needed(melds: Sequence[Meld] = ()) -> int:
    """Groups the closed part must still supply."""
    return 4 - len(melds)


def is_agari(tiles_34: List[int], melds: Sequence[Meld] = ()) -> bool:
    """Check if the closed 34-array plus melds is a winning hand (any form)."""
    return is_standard_agari(tiles_34, melds) or is_seven_pairs(tiles_34, melds)


def is_standard_agari(tiles_34: List[int], melds: Sequence[Meld] = ()) -> bool:
    """Check standard form (4 mentsu + 1 jantai), stopping at the first success."""
    needed = groups_needed(melds)
    if needed < 0 or sum(tiles_34) != 3 * needed + 2:
        return False

    for head in range(34):
        if tiles_34[head] < 2:
            continue
        remaining = list(tiles_34)
        remaining[head] -= 2
        if _extract_mentsu(remaining, 0, needed, []):
            return True
    return False


def decompose_standard(tiles_34: List[int],
                       melds: Sequence[Meld] = ()) -> List[Decomposition]:
    """Find ALL standard decompositions of the closed tiles.

    Melds are already complete groups; the closed part must hold exactly
    (4 - len(melds)) groups plus the head. Fu and wait shape depend on the
    interpretation, so every one is returned for the scorer to compare.
    """
    needed = groups_needed(melds)
    if needed < 0 or sum(tiles_34) != 3 * needed + 2:
        return []

    results = []
    for head in range(34):
        if tiles_34[head] < 2:
            continue
        remaining = list(tiles_34)
        remaining[head] -= 2
        found: List[List[Mentsu]] = []
        _find_all_mentsu(remaining, 0, needed, [], found)
        for mentsu_list in found:
            results.append((head, mentsu_list))

    return results


def _find_all_mentsu(tiles: List[int], start: int, needed: int,
                     current: List[Mentsu], results: List[List[Mentsu]]):
    """Recursively find all possible mentsu decompositions."""
    if needed == 0:
        if all(t == 0 for t in tiles):
            results.append(list(current))
        return

    # Lowest kind still present
    idx = start
    while idx < 34 and tiles[idx] == 0:
        idx += 1

    if idx >= 34:
        return

    # Try koutsu (triplet) first
    if tiles[idx] >= 3:
        tiles[idx] -= 3
        current.append(('koutsu', idx))
        _find_all_mentsu(tiles, idx, needed - 1, current, results)
        current.pop()
        tiles[idx] += 3

    # Then shuntsu - number tiles only, and never across a suit edge
    if _can_start_run(idx) and tiles[idx + 1] >= 1 and tiles[idx + 2] >= 1:
        tiles[idx] -= 1
        tiles[idx + 1] -= 1
        tiles[idx + 2] -= 1
        current.append(('shuntsu', idx))
        _find_all_mentsu(tiles, idx, needed - 1, current, results)
        current.pop()
        tiles[idx] += 1
        tiles[idx + 1] += 1
        tiles[idx + 2] += 1


def _extract_mentsu(tiles: List[int], start: int, needed: int,
                    result: List[Mentsu]) -> bool:
    """Extract exactly 'needed' mentsu from tiles (finds one solution)."""
    if needed == 0:
        return all(t == 0 for t in tiles)

    idx = start
    while idx < 34 and tiles[idx] == 0:
        idx += 1

    if idx >= 34:
        return False

    if tiles[idx] >= 3:
        tiles[idx] -= 3
        result.append(('koutsu', idx))
        if _extract_mentsu(tiles, idx, needed - 1, result):
            return True
        result.pop()
        tiles[idx] += 3

    if _can_start_run(idx) and tiles[idx + 1] >= 1 and tiles[idx + 2] >= 1:
        tiles[idx] -= 1
        tiles[idx + 1] -= 1
        tiles[idx + 2] -= 1
        result.append(('shuntsu', idx))
        if _extract_mentsu(tiles, idx, needed - 1, result):
            return True
        result.pop()
        tiles[idx] += 1
        tiles[idx + 1] += 1
        tiles[idx + 2] += 1

    return False


def _can_start_run(idx: int) -> bool:
    return idx < 27 and idx % 9 <= 6


def is_seven_pairs(tiles_34: List[int], melds: Sequence[Meld] = ()) -> bool:
    """Seven pairs (七対子): 7 distinct kinds, exactly two each, fully concealed."""
    if melds:
        return False
    if sum(tiles_34) != 14:
        return False
    return sum(1 for c in tiles_34 if c == 2) == 7


def get_waiting_tiles(tiles_34: List[int], melds: Sequence[Meld] = ()) -> List[int]:
    """Find every kind (34 index) that would complete this hand.

    Only the 27 kinds of a three-player set are tried. A kind whose four
    copies are all in the hand (closed or melded) cannot arrive and is not
    a wait, even when a fifth copy would complete the shape. A hand whose
    only completing kinds are all held four times therefore has no waits
    and is not tenpai (karaten).
    """
    needed = groups_needed(melds)
    if needed < 0 or sum(tiles_34) != 3 * needed + 1:
        return []

    held = list(tiles_34)
    for meld in melds:
        held[meld.tile_index34] += len(meld.tiles)

    waits = []
    for i in SANMA_KINDS:
        if held[i] >= 4:
            continue
        test = list(tiles_34)
        test[i] += 1
        if is_agari(test, melds):
            waits.append(i)
    return waits
