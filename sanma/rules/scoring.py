"""Score calculation - pick the best interpretation and split payments."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from sanma.core.hand import Hand
from sanma.core.tile import Tile, tiles_to_34_array
from sanma.rules.agari import decompose_standard, is_seven_pairs
from sanma.rules.fu import calculate_fu, HEAD_SLOT
from sanma.rules.score_table import PointEntry, lookup, round_up_100
from sanma.rules.yaku import HandContext, YakuResult, detect_all_yaku, has_yaku, total_han


@dataclass
class WinContext:
    """Everything about a win that is not in the tiles themselves."""
    is_tsumo: bool
    winner_seat: int
    dealer_seat: int
    seat_wind_34: int
    round_wind_34: int
    loser_seat: Optional[int] = None
    is_riichi: bool = False
    is_double_riichi: bool = False
    is_ippatsu: bool = False
    is_haitei: bool = False
    is_houtei: bool = False
    is_rinshan: bool = False
    is_tenhou: bool = False
    is_chiihou: bool = False
    honba: int = 0
    honba_unit: int = 100
    payment_rule: str = "tsumo_loss"
    num_players: int = 3

    @property
    def is_dealer(self) -> bool:
        return self.winner_seat == self.dealer_seat


@dataclass
class ScoreResult:
    """Result of score calculation."""
    yaku: List[YakuResult]
    han: int
    fu: int
    base_points: int
    limit: Optional[str]
    payments: Dict[int, int] = field(default_factory=dict)  # payer seat -> amount
    is_dealer: bool = False
    is_tsumo: bool = False
    honba: int = 0

    @property
    def total_points(self) -> int:
        return sum(self.payments.values())

    @property
    def is_yakuman(self) -> bool:
        return self.han >= 13

    @property
    def rank_name(self) -> str:
        if self.limit:
            return self.limit
        return f"{self.han}翻{self.fu}符"


def calculate_score(
    hand: Hand,
    win_tile: Tile,
    ctx: WinContext,
    dora_kinds: Sequence[int],
    ura_kinds: Sequence[int] = (),
) -> Optional[ScoreResult]:
    """Score a winning hand. Returns None if no interpretation has a yaku.

    The hand may hold the winning tile already (self-draw) or not yet (ron).
    Every standard decomposition is tried with the winning tile in each
    group it could have completed, plus the seven pairs reading; the
    highest payout wins.
    """
    if win_tile not in hand.closed_tiles:
        hand = hand.clone()
        hand.closed_tiles.append(win_tile)
        hand.closed_tiles.sort()

    all_tiles = hand.all_tiles
    all_tiles_34 = tiles_to_34_array(all_tiles)

    dora_count = sum(all_tiles_34[d] for d in dora_kinds)
    red_dora_count = sum(1 for t in all_tiles if t.is_red)
    uradora_count = 0
    if ctx.is_riichi or ctx.is_double_riichi:
        uradora_count = sum(all_tiles_34[d] for d in ura_kinds)

    closed_34 = hand.to_34_array()
    win_34 = win_tile.index34

    def make_context(head, mentsu, slot, is_chiitoi=False) -> HandContext:
        return HandContext(
            head_34=head,
            mentsu=mentsu,
            melds=list(hand.melds),
            all_tiles_34=all_tiles_34,
            win_tile_34=win_34,
            win_slot=slot,
            is_tsumo=ctx.is_tsumo,
            is_menzen=hand.is_menzen,
            is_riichi=ctx.is_riichi,
            is_double_riichi=ctx.is_double_riichi,
            is_ippatsu=ctx.is_ippatsu,
            seat_wind_34=ctx.seat_wind_34,
            round_wind_34=ctx.round_wind_34,
            is_haitei=ctx.is_haitei,
            is_houtei=ctx.is_houtei,
            is_rinshan=ctx.is_rinshan,
            is_tenhou=ctx.is_tenhou,
            is_chiihou=ctx.is_chiihou,
            is_chiitoi=is_chiitoi,
            dora_count=dora_count,
            uradora_count=uradora_count,
            red_dora_count=red_dora_count,
        )

    candidates = []
    for head, mentsu_list in decompose_standard(closed_34, hand.melds):
        for slot in _win_slots(head, mentsu_list, win_34):
            candidates.append(make_context(head, mentsu_list, slot))
    if is_seven_pairs(closed_34, hand.melds):
        candidates.append(make_context(-1, [], HEAD_SLOT, is_chiitoi=True))

    best_result = None
    best_key = None
    for hand_ctx in candidates:
        result = _evaluate_context(hand_ctx, ctx)
        if result is None:
            continue
        key = (result.total_points, result.han, result.fu)
        if best_key is None or key > best_key:
            best_result, best_key = result, key

    return best_result


def _win_slots(head: int, mentsu_list, win_34: int) -> List[int]:
    """Every group the winning tile could have completed (duplicates collapsed)."""
    slots = []
    seen = set()
    if head == win_34:
        slots.append(HEAD_SLOT)
    for i, (m_type, m_idx) in enumerate(mentsu_list):
        if (m_type, m_idx) in seen:
            continue
        if m_type == 'koutsu' and m_idx == win_34:
            slots.append(i)
            seen.add((m_type, m_idx))
        elif m_type == 'shuntsu' and m_idx <= win_34 <= m_idx + 2:
            slots.append(i)
            seen.add((m_type, m_idx))
    return slots


def _evaluate_context(hand_ctx: HandContext, ctx: WinContext) -> Optional[ScoreResult]:
    """Yaku, fu, table lookup and payments for one interpretation."""
    yaku_list = detect_all_yaku(hand_ctx)
    if not has_yaku(yaku_list):
        return None

    han_val = total_han(yaku_list)
    fu_val = calculate_fu(
        hand_ctx.head_34, hand_ctx.mentsu, hand_ctx.melds,
        hand_ctx.win_tile_34, hand_ctx.win_slot,
        hand_ctx.is_tsumo, hand_ctx.is_menzen,
        hand_ctx.seat_wind_34, hand_ctx.round_wind_34,
        is_chiitoi=hand_ctx.is_chiitoi,
    )
    entry = lookup(fu_val, han_val, ctx.is_dealer, ctx.is_tsumo)

    return ScoreResult(
        yaku=yaku_list,
        han=han_val,
        fu=fu_val,
        base_points=entry.base_points,
        limit=entry.limit,
        payments=split_payments(entry, ctx),
        is_dealer=ctx.is_dealer,
        is_tsumo=ctx.is_tsumo,
        honba=ctx.honba,
    )


def split_payments(entry: PointEntry, ctx: WinContext) -> Dict[int, int]:
    """Who pays what, including the repeat-counter bonus.

    Ron: the discarder pays the table value plus honba_unit * honba for each
    other seat. Self-draw at a three-seat table: only the two other seats pay.
    Under 'tsumo_loss' the absent fourth seat's share is simply not collected;
    under 'north_bisection' each payer adds half of it, rounded up to 100.
    """
    others = [(ctx.winner_seat + k) % ctx.num_players for k in range(1, ctx.num_players)]

    if not ctx.is_tsumo:
        if ctx.loser_seat is None or ctx.loser_seat == ctx.winner_seat:
            raise ValueError("a ron needs a discarder other than the winner")
        bonus = ctx.honba_unit * ctx.honba * (ctx.num_players - 1)
        return {ctx.loser_seat: entry.ron + bonus}

    bonus = ctx.honba_unit * ctx.honba
    # Absent seat would have been a non-dealer
    absent_share = 4 - ctx.num_players
    extra = 0
    if ctx.payment_rule == "north_bisection" and absent_share > 0:
        extra = round_up_100((entry.tsumo_non_dealer * absent_share + 1) // 2)

    payments = {}
    for seat in others:
        if ctx.is_dealer or seat != ctx.dealer_seat:
            amount = entry.tsumo_non_dealer
        else:
            amount = entry.tsumo_dealer
        payments[seat] = amount + extra + bonus
    return payments
