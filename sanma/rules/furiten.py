"""Furiten (振聴) detection.

A seat is furiten when any kind it waits on is in its own discard pile or
is a kind it declined to win on. In this ruleset the state is latched:
once a seat is furiten it stays furiten until the round ends, whatever it
discards later.
"""

from typing import List

from sanma.core.hand import Hand
from sanma.rules.agari import get_waiting_tiles


def furiten_waits(hand: Hand) -> List[int]:
    """Waits of the 13-tile form of the hand.

    A 14-tile hand (mid-turn, or already complete) is reduced by its drawn
    tile first.
    """
    closed_34 = hand.to_34_array()
    if hand.effective_size == 14:
        if hand.draw_tile is None:
            return []
        closed_34[hand.draw_tile.index34] -= 1
    return get_waiting_tiles(closed_34, hand.melds)


def is_discard_furiten(hand: Hand) -> bool:
    """A waiting kind appears in the seat's own discard pile."""
    waits = furiten_waits(hand)
    discarded = {t.index34 for t in hand.discard_pool}
    return any(w in discarded for w in waits)


def is_declined_furiten(hand: Hand) -> bool:
    """A waiting kind was passed over when it could have been claimed."""
    waits = furiten_waits(hand)
    return any(w in hand.declined_kinds for w in waits)


def is_furiten(hand: Hand) -> bool:
    """Current furiten status (pure; does not latch)."""
    return hand.is_furiten or is_discard_furiten(hand) or is_declined_furiten(hand)


def update_furiten(hand: Hand) -> bool:
    """Latch the furiten flag if the hand is furiten now. Returns the flag.

    Called by GameState at commit points only.
    """
    if not hand.is_furiten and is_furiten(hand):
        hand.is_furiten = True
    return hand.is_furiten
