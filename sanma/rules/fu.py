"""Fu (符) calculation for scoring."""

from types import MappingProxyType
from typing import List, Sequence, Tuple

from sanma.core.meld import Meld
from sanma.core.tile import YAOCHU_INDICES, DRAGON_INDICES

BASE_FU = 20
CHIITOI_FU = 25
FLAT_TSUMO_FU = 20
MIN_FU = 30

# (terminal/honor, open, quad) -> fu
FU_GROUP_TABLE = MappingProxyType({
    (False, True, False): 2,
    (True, True, False): 4,
    (False, False, False): 4,
    (True, False, False): 8,
    (False, True, True): 8,
    (True, True, True): 16,
    (False, False, True): 16,
    (True, False, True): 32,
})

HEAD_SLOT = -1


def group_fu(index34: int, is_open: bool, is_quad: bool) -> int:
    return FU_GROUP_TABLE[(index34 in YAOCHU_INDICES, is_open, is_quad)]


def round_fu(raw: int) -> int:
    """Round up to the next multiple of 10, with a floor of 30."""
    return max(MIN_FU, ((raw + 9) // 10) * 10)


def calculate_fu(
    head_34: int,
    mentsu_list: List[Tuple[str, int]],
    melds: Sequence[Meld],
    win_tile_34: int,
    win_slot: int,
    is_tsumo: bool,
    is_menzen: bool,
    seat_wind_34: int,
    round_wind_34: int,
    is_chiitoi: bool = False,
) -> int:
    """Calculate fu (符) for one interpretation of a winning hand.

    Args:
        head_34: 34-index of the pair (jantai)
        mentsu_list: (type, index34) groups formed from closed tiles
        melds: Declared melds
        win_tile_34: 34-index of the winning tile
        win_slot: HEAD_SLOT, or the index in mentsu_list the winning tile completed
        is_tsumo: Whether win is by self-draw
        is_menzen: Whether hand is fully concealed
        seat_wind_34: 34-index of seat wind tile
        round_wind_34: 34-index of prevailing wind tile
        is_chiitoi: Whether this is the seven pairs reading

    Returns:
        Fu value: 25 for seven pairs, 20 for a flat concealed self-draw,
        otherwise rounded up to a multiple of 10 with a floor of 30.
    """
    if is_chiitoi:
        return CHIITOI_FU

    fu = BASE_FU

    # Closed groups; a triplet completed by a claimed tile counts as open
    for i, (m_type, m_idx) in enumerate(mentsu_list):
        if m_type != 'koutsu':
            continue
        claimed = not is_tsumo and i == win_slot
        fu += group_fu(m_idx, is_open=claimed, is_quad=False)

    # Declared melds
    for meld in melds:
        fu += group_fu(meld.tile_index34, is_open=meld.is_open, is_quad=meld.is_kan)

    fu += head_fu(head_34, seat_wind_34, round_wind_34)
    fu += wait_fu(mentsu_list, win_tile_34, win_slot)

    if is_tsumo:
        if is_menzen and fu == BASE_FU:
            # Flat concealed self-draw: no tsumo bonus
            return FLAT_TSUMO_FU
        fu += 2
    elif is_menzen:
        fu += 10  # Concealed ron bonus

    return round_fu(fu)


def head_fu(head_34: int, seat_wind_34: int, round_wind_34: int) -> int:
    """2 per valued role of the pair; a double wind counts twice."""
    fu = 0
    if head_34 == seat_wind_34:
        fu += 2
    if head_34 == round_wind_34:
        fu += 2
    if head_34 in DRAGON_INDICES:
        fu += 2
    return fu


def wait_fu(mentsu_list: List[Tuple[str, int]], win_tile_34: int,
            win_slot: int) -> int:
    """Determine wait type and return fu.

    Tanki (単騎, pair wait): 2 fu
    Kanchan (嵌張, middle wait): 2 fu
    Penchan (辺張, edge wait): 2 fu
    Ryanmen (両面) and shanpon (双碰): 0 fu
    """
    if win_slot == HEAD_SLOT:
        return 2

    m_type, m_idx = mentsu_list[win_slot]
    if m_type != 'shuntsu':
        return 0
    if win_tile_34 == m_idx + 1:
        return 2
    # 12 waiting on 3, or 89 waiting on 7
    if m_idx % 9 == 0 and win_tile_34 == m_idx + 2:
        return 2
    if m_idx % 9 == 6 and win_tile_34 == m_idx:
        return 2
    return 0
