"""Shanten (向聴数) calculation.

Shanten = minimum number of tile exchanges needed to reach tenpai.
-1 means already a complete hand (agari).
0 means tenpai (one tile away).
"""

from typing import List, Sequence

from sanma.core.meld import Meld

NOT_APPLICABLE = 99


def shanten(tiles_34: List[int], melds: Sequence[Meld] = ()) -> int:
    """Minimum shanten over standard form and seven pairs."""
    return min(
        shanten_standard(tiles_34, melds),
        shanten_chiitoi(tiles_34, melds),
    )


def shanten_standard(tiles_34: List[int], melds: Sequence[Meld] = ()) -> int:
    """Shanten for standard form (4 mentsu + 1 jantai).

    With N melds declared the closed part needs (4 - N) mentsu:
        with a head:    (needed - mentsu) * 2 - 1 - partial
        without a head: (needed - mentsu) * 2 - partial
    where partial counts pairs and proto-runs (adjacent or one-gap).
    """
    mentsu_needed = 4 - len(melds)
    total = sum(tiles_34)
    if mentsu_needed < 0 or total > 3 * mentsu_needed + 2:
        return NOT_APPLICABLE

    tiles = list(tiles_34)
    best = mentsu_needed * 2  # Worst case

    # Try each kind as the head
    for head in range(34):
        if tiles[head] >= 2:
            tiles[head] -= 2
            mentsu, partial = _count_mentsu_and_partial(tiles, mentsu_needed)
            best = min(best, (mentsu_needed - mentsu) * 2 - 1 - partial)
            tiles[head] += 2

    # Also try without designating a head yet
    mentsu, partial = _count_mentsu_and_partial(tiles, mentsu_needed)
    best = min(best, (mentsu_needed - mentsu) * 2 - partial)

    return max(best, -1)


def _count_mentsu_and_partial(tiles_34: List[int], max_mentsu: int) -> tuple:
    """Count mentsu and partial groups using backtracking.

    Returns (mentsu_count, partial_count) that minimizes shanten.
    """
    best = [0, 0]  # [mentsu, partial]
    tiles = list(tiles_34)
    _backtrack(tiles, 0, 0, 0, max_mentsu, best)
    return best[0], best[1]


def _backtrack(tiles: List[int], idx: int, mentsu: int, partial: int,
               max_mentsu: int, best: List[int]):
    """Backtrack to find optimal mentsu + partial decomposition."""
    if idx >= 34:
        # Maximize mentsu*2 + partial
        if mentsu * 2 + partial > best[0] * 2 + best[1]:
            best[0] = mentsu
            best[1] = partial
        return

    if tiles[idx] == 0:
        _backtrack(tiles, idx + 1, mentsu, partial, max_mentsu, best)
        return

    # Groups (complete or partial) beyond the number needed do not help
    can_add_group = mentsu + partial < max_mentsu
    is_number = idx < 27

    # Koutsu (triplet)
    if tiles[idx] >= 3 and can_add_group:
        tiles[idx] -= 3
        _backtrack(tiles, idx, mentsu + 1, partial, max_mentsu, best)
        tiles[idx] += 3

    # Shuntsu (sequence)
    if is_number and idx % 9 <= 6 and can_add_group:
        if tiles[idx + 1] >= 1 and tiles[idx + 2] >= 1:
            tiles[idx] -= 1
            tiles[idx + 1] -= 1
            tiles[idx + 2] -= 1
            _backtrack(tiles, idx, mentsu + 1, partial, max_mentsu, best)
            tiles[idx] += 1
            tiles[idx + 1] += 1
            tiles[idx + 2] += 1

    # Pair
    if tiles[idx] >= 2 and can_add_group:
        tiles[idx] -= 2
        _backtrack(tiles, idx, mentsu, partial + 1, max_mentsu, best)
        tiles[idx] += 2

    # Adjacent (e.g. 12, 23)
    if is_number and idx % 9 <= 7 and can_add_group:
        if tiles[idx + 1] >= 1:
            tiles[idx] -= 1
            tiles[idx + 1] -= 1
            _backtrack(tiles, idx, mentsu, partial + 1, max_mentsu, best)
            tiles[idx] += 1
            tiles[idx + 1] += 1

    # Gap (e.g. 13, 24)
    if is_number and idx % 9 <= 6 and can_add_group:
        if tiles[idx + 2] >= 1:
            tiles[idx] -= 1
            tiles[idx + 2] -= 1
            _backtrack(tiles, idx, mentsu, partial + 1, max_mentsu, best)
            tiles[idx] += 1
            tiles[idx + 2] += 1

    # Leave this kind isolated
    _backtrack(tiles, idx + 1, mentsu, partial, max_mentsu, best)


def shanten_chiitoi(tiles_34: List[int], melds: Sequence[Meld] = ()) -> int:
    """Shanten for seven pairs (七対子).

    6 - pairs, plus one per missing distinct kind. Concealed hands of
    13 or 14 tiles only.
    """
    if melds:
        return NOT_APPLICABLE
    total = sum(tiles_34)
    if total not in (13, 14):
        return NOT_APPLICABLE

    pairs = sum(1 for c in tiles_34 if c >= 2)
    kinds = sum(1 for c in tiles_34 if c >= 1)

    s = 6 - pairs
    if kinds < 7:
        s += 7 - kinds
    return s
