"""Point table: (fu, han) -> payments, plus limit hands.

Built once at import and exposed read-only. Cells that cannot occur in
play have no entry, and looking one up raises ScoringAmbiguity instead of
returning zero.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from sanma.engine.errors import ScoringAmbiguity

FU_STEPS = (20, 25) + tuple(range(30, 180, 10))
MANGAN_BASE = 2000

# (minimum han, name, base points), highest first
LIMIT_BRACKETS = (
    (13, "役満", 8000),
    (11, "三倍満", 6000),
    (8, "倍満", 4000),
    (6, "跳満", 3000),
    (5, "満貫", 2000),
)


@dataclass(frozen=True)
class PointEntry:
    """Payments for one table cell.

    ron: total paid by the discarder
    tsumo_non_dealer: paid by each non-dealer on a self-draw
    tsumo_dealer: paid by the dealer on a non-dealer's self-draw (None for a dealer winner)
    """
    base_points: int
    ron: Optional[int]
    tsumo_non_dealer: Optional[int]
    tsumo_dealer: Optional[int]
    limit: Optional[str] = None


def round_up_100(points: int) -> int:
    return ((points + 99) // 100) * 100


def base_points(fu: int, han: int) -> int:
    """fu * 2^(2+han), capped at mangan."""
    return min(fu * (2 ** (2 + han)), MANGAN_BASE)


def _is_possible(fu: int, han: int, is_tsumo: bool) -> bool:
    if han == 1 and fu in (20, 25):
        # 20 fu needs pinfu + menzen tsumo; 25 fu needs seven pairs (2 han)
        return False
    if fu == 20 and not is_tsumo:
        return False
    if fu == 25 and han == 2 and is_tsumo:
        # Seven pairs self-draw is at least 3 han
        return False
    return True


def _make_entry(base: int, is_dealer: bool, ron_ok: bool, tsumo_ok: bool,
                limit: Optional[str] = None) -> PointEntry:
    if is_dealer:
        return PointEntry(
            base_points=base,
            ron=round_up_100(base * 6) if ron_ok else None,
            tsumo_non_dealer=round_up_100(base * 2) if tsumo_ok else None,
            tsumo_dealer=None,
            limit=limit,
        )
    return PointEntry(
        base_points=base,
        ron=round_up_100(base * 4) if ron_ok else None,
        tsumo_non_dealer=round_up_100(base) if tsumo_ok else None,
        tsumo_dealer=round_up_100(base * 2) if tsumo_ok else None,
        limit=limit,
    )


def _build_table(is_dealer: bool):
    table = {}
    for han in range(1, 5):
        for fu in FU_STEPS:
            ron_ok = _is_possible(fu, han, is_tsumo=False)
            tsumo_ok = _is_possible(fu, han, is_tsumo=True)
            if not ron_ok and not tsumo_ok:
                continue
            base = base_points(fu, han)
            limit = "満貫" if base >= MANGAN_BASE else None
            table[(fu, han)] = _make_entry(base, is_dealer, ron_ok, tsumo_ok, limit)
    return MappingProxyType(table)


def _build_limits(is_dealer: bool):
    return MappingProxyType({
        name: _make_entry(base, is_dealer, True, True, name)
        for _, name, base in LIMIT_BRACKETS
    })


NON_DEALER_TABLE = _build_table(is_dealer=False)
DEALER_TABLE = _build_table(is_dealer=True)
NON_DEALER_LIMITS = _build_limits(is_dealer=False)
DEALER_LIMITS = _build_limits(is_dealer=True)


def limit_name(han: int) -> Optional[str]:
    """Limit bracket for han >= 5, else None."""
    for min_han, name, _ in LIMIT_BRACKETS:
        if han >= min_han:
            return name
    return None


def lookup(fu: int, han: int, is_dealer: bool, is_tsumo: bool) -> PointEntry:
    """Payments for a winning hand.

    han >= 5 uses the limit brackets regardless of fu. Raises
    ScoringAmbiguity for han < 1 or a cell without the needed payment.
    """
    if han < 1:
        raise ScoringAmbiguity(fu, han, "a win needs at least one han")

    name = limit_name(han)
    if name is not None:
        limits = DEALER_LIMITS if is_dealer else NON_DEALER_LIMITS
        return limits[name]

    table = DEALER_TABLE if is_dealer else NON_DEALER_TABLE
    entry = table.get((fu, han))
    if entry is None:
        raise ScoringAmbiguity(fu, han)
    needed = entry.tsumo_non_dealer if is_tsumo else entry.ron
    if needed is None:
        method = "self-draw" if is_tsumo else "ron"
        raise ScoringAmbiguity(fu, han, f"{method} not possible")
    return entry
