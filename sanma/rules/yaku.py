"""Yaku (役) detection for three-player mahjong.

Each yaku function takes a HandContext and returns (yaku_name, han_value) or None.
The checklist runs in a fixed order; every condition is independent and han
values are summed. Dora is appended afterwards and never counts as a yaku.
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Optional

from sanma.core.meld import Meld, MeldType
from sanma.core.tile import YAOCHU_INDICES, WIND_INDICES, DRAGON_INDICES

HEAD_SLOT = -1

DORA_NAMES = ("ドラ", "裏ドラ", "赤ドラ")


@dataclass
class HandContext:
    """All information needed to judge yaku for one interpretation of a hand."""
    # Decomposition
    head_34: int = -1
    mentsu: List[Tuple[str, int]] = field(default_factory=list)
    melds: List[Meld] = field(default_factory=list)
    all_tiles_34: List[int] = field(default_factory=lambda: [0] * 34)
    # Win info
    win_tile_34: int = -1
    win_slot: int = HEAD_SLOT  # HEAD_SLOT, or index into mentsu completed by the win tile
    is_tsumo: bool = False
    is_menzen: bool = True
    is_riichi: bool = False
    is_double_riichi: bool = False
    is_ippatsu: bool = False
    # Positional
    seat_wind_34: int = 27
    round_wind_34: int = 27
    # Special conditions
    is_haitei: bool = False   # Last tile from wall
    is_houtei: bool = False   # Last discard
    is_rinshan: bool = False  # Won on a replacement tile
    is_tenhou: bool = False   # Dealer, first draw
    is_chiihou: bool = False  # Non-dealer, first draw, no calls yet
    # Form type
    is_chiitoi: bool = False
    # Dora
    dora_count: int = 0
    uradora_count: int = 0
    red_dora_count: int = 0

    @property
    def all_mentsu(self) -> List[Tuple[str, int]]:
        """All mentsu including those from melds (every meld is a triplet or quad)."""
        return list(self.mentsu) + [('koutsu', m.tile_index34) for m in self.melds]

    @property
    def win_group(self) -> Optional[Tuple[str, int]]:
        if self.win_slot == HEAD_SLOT or self.is_chiitoi:
            return None
        return self.mentsu[self.win_slot]

    @property
    def wait_type(self) -> str:
        """'tanki', 'shanpon', 'kanchan', 'penchan' or 'ryanmen'."""
        group = self.win_group
        if group is None:
            return 'tanki'
        m_type, m_idx = group
        if m_type == 'koutsu':
            return 'shanpon'
        if self.win_tile_34 == m_idx + 1:
            return 'kanchan'
        if m_idx % 9 == 0 and self.win_tile_34 == m_idx + 2:
            return 'penchan'
        if m_idx % 9 == 6 and self.win_tile_34 == m_idx:
            return 'penchan'
        return 'ryanmen'

    @property
    def concealed_koutsu_count(self) -> int:
        """Concealed triplets, with a triplet completed by a claimed tile counted as open."""
        count = sum(1 for m_type, _ in self.mentsu if m_type == 'koutsu')
        group = self.win_group
        if not self.is_tsumo and group is not None and group[0] == 'koutsu':
            count -= 1
        count += sum(1 for m in self.melds if m.meld_type == MeldType.ANKAN)
        return count


YakuResult = Tuple[str, int]  # (name, han)


def detect_all_yaku(ctx: HandContext) -> List[YakuResult]:
    """Detect all applicable yaku for the given hand context."""
    results = []

    # Yakuman replace the regular list
    yakuman = _check_yakuman(ctx)
    if yakuman:
        return yakuman

    checkers = [
        check_riichi, check_double_riichi, check_ippatsu,
        check_tsumo, check_tanyao, check_pinfu,
        check_iipeikou, check_ryanpeikou,
        check_yakuhai_seat_wind, check_yakuhai_round_wind,
        check_yakuhai_haku, check_yakuhai_hatsu, check_yakuhai_chun,
        check_haitei, check_houtei, check_rinshan,
        check_chanta, check_junchan, check_ittsu,
        check_sanshoku_doukou,
        check_toitoi, check_sanankou, check_sankantsu,
        check_honroutou, check_shousangen,
        check_chiitoi, check_honitsu, check_chinitsu,
    ]

    for checker in checkers:
        result = checker(ctx)
        if result:
            results.append(result)

    if not results:
        # No yaku: dora alone never makes a hand
        return results

    if ctx.dora_count > 0:
        results.append(("ドラ", ctx.dora_count))
    if ctx.uradora_count > 0:
        results.append(("裏ドラ", ctx.uradora_count))
    if ctx.red_dora_count > 0:
        results.append(("赤ドラ", ctx.red_dora_count))

    return results


def _check_yakuman(ctx: HandContext) -> List[YakuResult]:
    """Check for yakuman hands."""
    results = []

    if ctx.is_tenhou:
        results.append(("天和", 13))
    if ctx.is_chiihou:
        results.append(("地和", 13))

    for checker in (check_suuankou, check_daisangen, check_shousuushii,
                    check_daisuushii, check_tsuuiisou, check_chinroutou,
                    check_ryuuiisou, check_chuuren, check_suukantsu):
        r = checker(ctx)
        if r:
            results.append(r)

    return results


# === 1翻 yaku ===

def check_riichi(ctx: HandContext) -> Optional[YakuResult]:
    if ctx.is_riichi and not ctx.is_double_riichi:
        return ("立直", 1)
    return None


def check_double_riichi(ctx: HandContext) -> Optional[YakuResult]:
    if ctx.is_double_riichi:
        return ("両立直", 2)
    return None


def check_ippatsu(ctx: HandContext) -> Optional[YakuResult]:
    if ctx.is_ippatsu and (ctx.is_riichi or ctx.is_double_riichi):
        return ("一発", 1)
    return None


def check_tsumo(ctx: HandContext) -> Optional[YakuResult]:
    if ctx.is_tsumo and ctx.is_menzen:
        return ("門前清自摸和", 1)
    return None


def check_tanyao(ctx: HandContext) -> Optional[YakuResult]:
    """All simples (断幺九) - no terminals or honors."""
    if any(ctx.all_tiles_34[i] > 0 for i in YAOCHU_INDICES):
        return None
    return ("断幺九", 1)


def _is_valued_head(ctx: HandContext) -> bool:
    head = ctx.head_34
    return (head in DRAGON_INDICES or head == ctx.seat_wind_34
            or head == ctx.round_wind_34)


def check_pinfu(ctx: HandContext) -> Optional[YakuResult]:
    """Pinfu - all sequences, non-valued head, two-sided wait, concealed."""
    if not ctx.is_menzen or ctx.is_chiitoi or ctx.melds:
        return None
    if any(m_type != 'shuntsu' for m_type, _ in ctx.mentsu):
        return None
    if _is_valued_head(ctx):
        return None
    if ctx.wait_type != 'ryanmen':
        return None
    return ("平和", 1)


def _identical_run_pairs(ctx: HandContext) -> int:
    seen = {}
    for m_type, m_idx in ctx.mentsu:
        if m_type == 'shuntsu':
            seen[m_idx] = seen.get(m_idx, 0) + 1
    return sum(v // 2 for v in seen.values())


def check_iipeikou(ctx: HandContext) -> Optional[YakuResult]:
    """One set of identical sequences (一杯口). Concealed only."""
    if not ctx.is_menzen or ctx.is_chiitoi:
        return None
    if _identical_run_pairs(ctx) == 1:
        return ("一杯口", 1)
    return None


def check_ryanpeikou(ctx: HandContext) -> Optional[YakuResult]:
    """Two sets of identical sequences (二杯口). Supersedes iipeikou."""
    if not ctx.is_menzen or ctx.is_chiitoi:
        return None
    if _identical_run_pairs(ctx) >= 2:
        return ("二杯口", 3)
    return None


def _has_triplet_of(ctx: HandContext, index34: int) -> bool:
    return any(m_type == 'koutsu' and m_idx == index34
               for m_type, m_idx in ctx.all_mentsu)


_WIND_NAMES = {27: "東", 28: "南", 29: "西", 30: "北"}


def check_yakuhai_seat_wind(ctx: HandContext) -> Optional[YakuResult]:
    if _has_triplet_of(ctx, ctx.seat_wind_34):
        return (f"自風 {_WIND_NAMES[ctx.seat_wind_34]}", 1)
    return None


def check_yakuhai_round_wind(ctx: HandContext) -> Optional[YakuResult]:
    if _has_triplet_of(ctx, ctx.round_wind_34):
        return (f"場風 {_WIND_NAMES[ctx.round_wind_34]}", 1)
    return None


def check_yakuhai_haku(ctx: HandContext) -> Optional[YakuResult]:
    if _has_triplet_of(ctx, 31):
        return ("役牌 白", 1)
    return None


def check_yakuhai_hatsu(ctx: HandContext) -> Optional[YakuResult]:
    if _has_triplet_of(ctx, 32):
        return ("役牌 發", 1)
    return None


def check_yakuhai_chun(ctx: HandContext) -> Optional[YakuResult]:
    if _has_triplet_of(ctx, 33):
        return ("役牌 中", 1)
    return None


def check_haitei(ctx: HandContext) -> Optional[YakuResult]:
    if ctx.is_haitei and ctx.is_tsumo and not ctx.is_rinshan:
        return ("海底摸月", 1)
    return None


def check_houtei(ctx: HandContext) -> Optional[YakuResult]:
    if ctx.is_houtei and not ctx.is_tsumo:
        return ("河底撈魚", 1)
    return None


def check_rinshan(ctx: HandContext) -> Optional[YakuResult]:
    if ctx.is_rinshan and ctx.is_tsumo:
        return ("嶺上開花", 1)
    return None


# === 2翻+ yaku ===

def _outside_groups(ctx: HandContext) -> Optional[Tuple[bool, bool]]:
    """(has_honor, has_run) if every group and the head hold a terminal or honor."""
    if ctx.is_chiitoi:
        return None
    has_honor = ctx.head_34 >= 27
    has_run = False
    if ctx.head_34 not in YAOCHU_INDICES:
        return None
    for m_type, m_idx in ctx.all_mentsu:
        if m_type == 'koutsu':
            if m_idx not in YAOCHU_INDICES:
                return None
            if m_idx >= 27:
                has_honor = True
        else:
            has_run = True
            if m_idx % 9 not in (0, 6):
                return None
    return has_honor, has_run


def check_chanta(ctx: HandContext) -> Optional[YakuResult]:
    """Mixed outside hand (混全帯幺九). Every group has a terminal or honor."""
    outside = _outside_groups(ctx)
    if outside is None:
        return None
    has_honor, has_run = outside
    # Without a run it is honroutou; without an honor it is junchan
    if not has_honor or not has_run:
        return None
    return ("混全帯幺九", 2 if ctx.is_menzen else 1)


def check_junchan(ctx: HandContext) -> Optional[YakuResult]:
    """Pure outside hand (純全帯幺九). Every group has a terminal, no honors."""
    outside = _outside_groups(ctx)
    if outside is None:
        return None
    has_honor, has_run = outside
    if has_honor or not has_run:
        return None
    return ("純全帯幺九", 3 if ctx.is_menzen else 2)


def check_ittsu(ctx: HandContext) -> Optional[YakuResult]:
    """Straight (一気通貫). 123+456+789 of one suit (pin or sou here)."""
    runs = {m_idx for m_type, m_idx in ctx.all_mentsu if m_type == 'shuntsu'}
    for suit_start in (9, 18):
        if {suit_start, suit_start + 3, suit_start + 6} <= runs:
            return ("一気通貫", 2 if ctx.is_menzen else 1)
    return None


def check_sanshoku_doukou(ctx: HandContext) -> Optional[YakuResult]:
    """Three-colored triplets (三色同刻). Only 111 or 999 exist in all three suits."""
    triplets = {m_idx for m_type, m_idx in ctx.all_mentsu if m_type == 'koutsu'}
    for base in (0, 8):
        if {base, base + 9, base + 18} <= triplets:
            return ("三色同刻", 2)
    return None


def check_toitoi(ctx: HandContext) -> Optional[YakuResult]:
    """All triplets (対対和)."""
    if ctx.is_chiitoi:
        return None
    all_m = ctx.all_mentsu
    if len(all_m) == 4 and all(m_type == 'koutsu' for m_type, _ in all_m):
        return ("対対和", 2)
    return None


def check_sanankou(ctx: HandContext) -> Optional[YakuResult]:
    """Three concealed triplets (三暗刻)."""
    if ctx.is_chiitoi:
        return None
    if ctx.concealed_koutsu_count == 3:
        return ("三暗刻", 2)
    return None


def check_sankantsu(ctx: HandContext) -> Optional[YakuResult]:
    """Three quads (三槓子)."""
    if sum(1 for m in ctx.melds if m.is_kan) == 3:
        return ("三槓子", 2)
    return None


def check_honroutou(ctx: HandContext) -> Optional[YakuResult]:
    """All terminals and honors (混老頭)."""
    if any(ctx.all_tiles_34[i] > 0 for i in range(34) if i not in YAOCHU_INDICES):
        return None
    has_terminal = any(ctx.all_tiles_34[i] > 0 for i in YAOCHU_INDICES if i < 27)
    has_honor = any(ctx.all_tiles_34[i] > 0 for i in range(27, 34))
    if has_terminal and has_honor:
        return ("混老頭", 2)
    return None


def check_shousangen(ctx: HandContext) -> Optional[YakuResult]:
    """Little three dragons (小三元). 2 dragon triplets + dragon pair."""
    dragon_koutsu = sum(1 for m_type, m_idx in ctx.all_mentsu
                        if m_type == 'koutsu' and m_idx in DRAGON_INDICES)
    if dragon_koutsu == 2 and ctx.head_34 in DRAGON_INDICES:
        return ("小三元", 2)
    return None


def check_chiitoi(ctx: HandContext) -> Optional[YakuResult]:
    """Seven pairs (七対子)."""
    if ctx.is_chiitoi:
        return ("七対子", 2)
    return None


def _suits_present(ctx: HandContext) -> Tuple[set, bool]:
    suits = set()
    has_honor = False
    for i in range(34):
        if ctx.all_tiles_34[i] > 0:
            if i < 27:
                suits.add(i // 9)
            else:
                has_honor = True
    return suits, has_honor


def check_honitsu(ctx: HandContext) -> Optional[YakuResult]:
    """Half flush (混一色). One suit + honors."""
    suits, has_honor = _suits_present(ctx)
    if len(suits) == 1 and has_honor:
        return ("混一色", 3 if ctx.is_menzen else 2)
    return None


def check_chinitsu(ctx: HandContext) -> Optional[YakuResult]:
    """Full flush (清一色). One suit only, no honors."""
    suits, has_honor = _suits_present(ctx)
    if len(suits) == 1 and not has_honor:
        return ("清一色", 6 if ctx.is_menzen else 5)
    return None


# === Yakuman ===

def check_suuankou(ctx: HandContext) -> Optional[YakuResult]:
    """Four concealed triplets (四暗刻)."""
    if ctx.is_chiitoi:
        return None
    if ctx.concealed_koutsu_count == 4:
        return ("四暗刻", 13)
    return None


def check_daisangen(ctx: HandContext) -> Optional[YakuResult]:
    """Big three dragons (大三元)."""
    dragon_koutsu = sum(1 for m_type, m_idx in ctx.all_mentsu
                        if m_type == 'koutsu' and m_idx in DRAGON_INDICES)
    if dragon_koutsu == 3:
        return ("大三元", 13)
    return None


def check_shousuushii(ctx: HandContext) -> Optional[YakuResult]:
    """Little four winds (小四喜)."""
    wind_koutsu = sum(1 for m_type, m_idx in ctx.all_mentsu
                      if m_type == 'koutsu' and m_idx in WIND_INDICES)
    if wind_koutsu == 3 and ctx.head_34 in WIND_INDICES:
        return ("小四喜", 13)
    return None


def check_daisuushii(ctx: HandContext) -> Optional[YakuResult]:
    """Big four winds (大四喜)."""
    wind_koutsu = sum(1 for m_type, m_idx in ctx.all_mentsu
                      if m_type == 'koutsu' and m_idx in WIND_INDICES)
    if wind_koutsu == 4:
        return ("大四喜", 13)
    return None


def check_tsuuiisou(ctx: HandContext) -> Optional[YakuResult]:
    """All honors (字一色)."""
    if any(ctx.all_tiles_34[i] > 0 for i in range(27)):
        return None
    return ("字一色", 13)


def check_chinroutou(ctx: HandContext) -> Optional[YakuResult]:
    """All terminals (清老頭)."""
    terminal_indices = {0, 8, 9, 17, 18, 26}
    if any(ctx.all_tiles_34[i] > 0 and i not in terminal_indices for i in range(34)):
        return None
    return ("清老頭", 13)


def check_ryuuiisou(ctx: HandContext) -> Optional[YakuResult]:
    """All green (緑一色). Only 2s,3s,4s,6s,8s + hatsu."""
    green_indices = {19, 20, 21, 23, 25, 32}
    if any(ctx.all_tiles_34[i] > 0 and i not in green_indices for i in range(34)):
        return None
    return ("緑一色", 13)


def check_chuuren(ctx: HandContext) -> Optional[YakuResult]:
    """Nine gates (九蓮宝燈). Concealed, one suit: 1112345678999 + any."""
    if not ctx.is_menzen or ctx.melds:
        return None
    suits, has_honor = _suits_present(ctx)
    if has_honor or len(suits) != 1:
        return None
    suit_start = suits.pop() * 9
    required = [3, 1, 1, 1, 1, 1, 1, 1, 3]
    for j in range(9):
        if ctx.all_tiles_34[suit_start + j] < required[j]:
            return None
    return ("九蓮宝燈", 13)


def check_suukantsu(ctx: HandContext) -> Optional[YakuResult]:
    """Four quads (四槓子)."""
    if sum(1 for m in ctx.melds if m.is_kan) == 4:
        return ("四槓子", 13)
    return None


def total_han(yaku_list: List[YakuResult]) -> int:
    """Sum total han from yaku list."""
    return sum(han for _, han in yaku_list)


def has_yaku(yaku_list: List[YakuResult]) -> bool:
    """Check if there's at least one real yaku (not just dora)."""
    return any(name not in DORA_NAMES for name, _ in yaku_list)
