"""Tests for hand.py and meld.py"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from sanma.core.tile import Tile, make_tiles_from_string
from sanma.core.hand import Hand
from sanma.core.meld import Meld, MeldType


class TestHand:
    def test_draw_and_discard(self):
        hand = Hand()
        t1 = Tile(0)   # 1m
        t2 = Tile(36)  # 1p

        hand.draw(t1)
        assert len(hand.closed_tiles) == 1
        assert hand.draw_tile == t1

        hand.draw(t2)
        assert len(hand.closed_tiles) == 2

        hand.discard(t1)
        assert len(hand.closed_tiles) == 1
        assert hand.discard_pool == [t1]
        assert hand.discard_called == [False]
        assert hand.draw_tile is None

    def test_kept_sorted(self):
        hand = Hand()
        hand.deal(Tile(72))  # 1s
        hand.deal(Tile(0))   # 1m
        hand.deal(Tile(36))  # 1p
        assert [t.index34 for t in hand.closed_tiles] == [0, 9, 18]
        assert hand.draw_tile is None

    def test_menzen(self):
        hand = Hand()
        assert hand.is_menzen
        meld = Meld(MeldType.PON, (Tile(0), Tile(1), Tile(2)), Tile(2), 1)
        hand.add_meld(meld)
        assert not hand.is_menzen

    def test_menzen_with_ankan(self):
        hand = Hand()
        hand.add_meld(Meld(MeldType.ANKAN, (Tile(0), Tile(1), Tile(2), Tile(3))))
        assert hand.is_menzen

    def test_effective_size(self):
        hand = Hand()
        for t in make_tiles_from_string("1234567899p"):
            hand.deal(t)
        hand.add_meld(Meld(MeldType.ANKAN, (Tile(108), Tile(109), Tile(110), Tile(111))))
        assert hand.effective_size == 13

    def test_find_and_kind(self):
        hand = Hand()
        for t in make_tiles_from_string("115p"):
            hand.deal(t)
        assert hand.find_tile(36) is not None
        assert hand.find_tile(40) is None
        assert len(hand.tiles_of_kind(9)) == 2

    def test_clone(self):
        hand = Hand()
        hand.draw(Tile(0))
        hand.draw(Tile(36))
        hand.is_riichi = True
        hand.declined_kinds.add(9)

        clone = hand.clone()
        assert len(clone.closed_tiles) == 2
        assert clone.is_riichi
        hand.closed_tiles.pop()
        hand.declined_kinds.add(10)
        assert len(clone.closed_tiles) == 2
        assert clone.declined_kinds == {9}


class TestMeld:
    def test_pon_needs_three(self):
        with pytest.raises(ValueError):
            Meld(MeldType.PON, (Tile(0), Tile(1)))

    def test_quad_needs_four(self):
        with pytest.raises(ValueError):
            Meld(MeldType.DAIMINKAN, (Tile(0), Tile(1), Tile(2)))

    def test_one_kind_only(self):
        with pytest.raises(ValueError):
            Meld(MeldType.PON, (Tile(0), Tile(1), Tile(36)))

    def test_properties(self):
        red_pon = Meld(MeldType.PON, (Tile(52, is_red=True), Tile(53), Tile(54)), Tile(54), 2)
        assert red_pon.is_open
        assert not red_pon.is_kan
        assert red_pon.tile_index34 == 13

        ankan = Meld(MeldType.ANKAN, (Tile(0), Tile(1), Tile(2), Tile(3)))
        assert not ankan.is_open
        assert ankan.is_kan
