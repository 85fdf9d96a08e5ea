"""Tests for yaku.py - role detection"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sanma.core.meld import Meld, MeldType
from sanma.core.tile import tiles_to_34_array, make_tiles_from_string
from sanma.rules.yaku import (
    HandContext, detect_all_yaku, total_han, has_yaku,
    check_riichi, check_double_riichi, check_ippatsu,
    check_tanyao, check_pinfu, check_iipeikou, check_ryanpeikou,
    check_yakuhai_seat_wind, check_yakuhai_round_wind, check_yakuhai_haku,
    check_haitei, check_houtei, check_rinshan,
    check_chanta, check_junchan, check_ittsu, check_sanshoku_doukou,
    check_toitoi, check_sanankou, check_sankantsu, check_shousangen,
    check_honroutou, check_chiitoi, check_honitsu, check_chinitsu,
    check_tsuuiisou, check_ryuuiisou, check_chuuren,
)


def make_34_array(tiles_str):
    return tiles_to_34_array(make_tiles_from_string(tiles_str))


def make_context(**kwargs) -> HandContext:
    """Helper to build HandContext with defaults."""
    ctx = HandContext()
    for k, v in kwargs.items():
        setattr(ctx, k, v)
    return ctx


def pon_of(tiles_str):
    tiles = tuple(make_tiles_from_string(tiles_str))
    return Meld(MeldType.PON, tiles, tiles[-1], 1)


def kan_of(tiles_str, meld_type=MeldType.ANKAN):
    return Meld(meld_type, tuple(make_tiles_from_string(tiles_str)))


RUNS = [('shuntsu', 10), ('shuntsu', 13), ('shuntsu', 20), ('shuntsu', 23)]


class TestRiichi:
    def test_riichi(self):
        assert check_riichi(make_context(is_riichi=True)) == ("立直", 1)

    def test_double_replaces_single(self):
        ctx = make_context(is_riichi=True, is_double_riichi=True)
        assert check_riichi(ctx) is None
        assert check_double_riichi(ctx) == ("両立直", 2)

    def test_ippatsu_needs_riichi(self):
        assert check_ippatsu(make_context(is_ippatsu=True)) is None
        assert check_ippatsu(make_context(is_ippatsu=True, is_riichi=True)) == ("一発", 1)


class TestTanyao:
    def test_valid(self):
        ctx = make_context(all_tiles_34=make_34_array("234p567p345s678s55s"))
        assert check_tanyao(ctx) == ("断幺九", 1)

    def test_invalid_with_terminal(self):
        ctx = make_context(all_tiles_34=make_34_array("123p567p345s678s55s"))
        assert check_tanyao(ctx) is None

    def test_open_allowed(self):
        ctx = make_context(all_tiles_34=make_34_array("234p555p345s678s55s"),
                           melds=[pon_of("555p")], is_menzen=False)
        assert check_tanyao(ctx) is not None


class TestPinfu:
    def test_valid(self):
        ctx = make_context(head_34=28, mentsu=list(RUNS), win_tile_34=10, win_slot=0,
                           seat_wind_34=29, round_wind_34=27)
        assert check_pinfu(ctx) == ("平和", 1)

    def test_valued_head(self):
        ctx = make_context(head_34=27, mentsu=list(RUNS), win_tile_34=10, win_slot=0,
                           seat_wind_34=29, round_wind_34=27)
        assert check_pinfu(ctx) is None

    def test_kanchan(self):
        ctx = make_context(head_34=28, mentsu=list(RUNS), win_tile_34=11, win_slot=0,
                           seat_wind_34=29, round_wind_34=27)
        assert ctx.wait_type == 'kanchan'
        assert check_pinfu(ctx) is None

    def test_penchan(self):
        # 12p waiting on 3p
        ctx = make_context(head_34=28, mentsu=[('shuntsu', 9)] + RUNS[1:],
                           win_tile_34=11, win_slot=0)
        assert ctx.wait_type == 'penchan'
        assert check_pinfu(ctx) is None

    def test_open(self):
        ctx = make_context(head_34=28, mentsu=list(RUNS), win_tile_34=10, win_slot=0,
                           is_menzen=False)
        assert check_pinfu(ctx) is None


class TestPeikou:
    def test_iipeikou(self):
        ctx = make_context(mentsu=[('shuntsu', 10), ('shuntsu', 10), ('shuntsu', 19), ('shuntsu', 22)])
        assert check_iipeikou(ctx) == ("一杯口", 1)
        assert check_ryanpeikou(ctx) is None

    def test_ryanpeikou_supersedes(self):
        ctx = make_context(mentsu=[('shuntsu', 10), ('shuntsu', 10), ('shuntsu', 19), ('shuntsu', 19)])
        assert check_iipeikou(ctx) is None
        assert check_ryanpeikou(ctx) == ("二杯口", 3)

    def test_open_iipeikou(self):
        ctx = make_context(mentsu=[('shuntsu', 10), ('shuntsu', 10), ('shuntsu', 19)],
                           melds=[pon_of("白白白")], is_menzen=False)
        assert check_iipeikou(ctx) is None


class TestYakuhai:
    def test_dragon(self):
        ctx = make_context(mentsu=[('koutsu', 31)])
        assert check_yakuhai_haku(ctx) == ("役牌 白", 1)

    def test_dragon_from_meld(self):
        ctx = make_context(melds=[pon_of("白白白")])
        assert check_yakuhai_haku(ctx) is not None

    def test_seat_wind(self):
        ctx = make_context(mentsu=[('koutsu', 28)], seat_wind_34=28, round_wind_34=27)
        assert check_yakuhai_seat_wind(ctx) == ("自風 南", 1)
        assert check_yakuhai_round_wind(ctx) is None

    def test_double_wind(self):
        arr = make_34_array("東東東234p567p345s55s")
        ctx = make_context(head_34=22, mentsu=[('koutsu', 27), ('shuntsu', 10), ('shuntsu', 13),
                                               ('shuntsu', 20)],
                           all_tiles_34=arr, seat_wind_34=27, round_wind_34=27,
                           win_tile_34=10, win_slot=1)
        names = [name for name, _ in detect_all_yaku(ctx)]
        assert "自風 東" in names
        assert "場風 東" in names

    def test_north_is_not_valued_here(self):
        ctx = make_context(mentsu=[('koutsu', 30)], seat_wind_34=29, round_wind_34=28)
        assert check_yakuhai_seat_wind(ctx) is None
        assert check_yakuhai_round_wind(ctx) is None


class TestLastTile:
    def test_haitei(self):
        assert check_haitei(make_context(is_haitei=True, is_tsumo=True)) == ("海底摸月", 1)

    def test_haitei_not_on_replacement(self):
        ctx = make_context(is_haitei=True, is_tsumo=True, is_rinshan=True)
        assert check_haitei(ctx) is None
        assert check_rinshan(ctx) == ("嶺上開花", 1)

    def test_houtei(self):
        assert check_houtei(make_context(is_houtei=True)) == ("河底撈魚", 1)
        assert check_houtei(make_context(is_houtei=True, is_tsumo=True)) is None


class TestOutsideHands:
    def test_chanta(self):
        ctx = make_context(head_34=27, mentsu=[('shuntsu', 9), ('koutsu', 8), ('shuntsu', 24),
                                               ('koutsu', 17)])
        assert check_chanta(ctx) == ("混全帯幺九", 2)
        assert check_junchan(ctx) is None

    def test_chanta_open(self):
        ctx = make_context(head_34=27, mentsu=[('shuntsu', 9), ('shuntsu', 24), ('koutsu', 17)],
                           melds=[pon_of("999m")], is_menzen=False)
        assert check_chanta(ctx) == ("混全帯幺九", 1)

    def test_junchan(self):
        ctx = make_context(head_34=0, mentsu=[('shuntsu', 9), ('shuntsu', 15), ('shuntsu', 18),
                                              ('koutsu', 8)])
        assert check_junchan(ctx) == ("純全帯幺九", 3)
        assert check_chanta(ctx) is None

    def test_middle_run_breaks(self):
        ctx = make_context(head_34=0, mentsu=[('shuntsu', 10), ('shuntsu', 15), ('shuntsu', 18),
                                              ('koutsu', 8)])
        assert check_junchan(ctx) is None

    def test_honroutou(self):
        ctx = make_context(all_tiles_34=make_34_array("111p999s999m東東東白白"))
        assert check_honroutou(ctx) == ("混老頭", 2)


class TestStraightAndTriplets:
    def test_ittsu(self):
        ctx = make_context(mentsu=[('shuntsu', 18), ('shuntsu', 21), ('shuntsu', 24), ('koutsu', 31)])
        assert check_ittsu(ctx) == ("一気通貫", 2)

    def test_ittsu_open(self):
        ctx = make_context(mentsu=[('shuntsu', 9), ('shuntsu', 12), ('shuntsu', 15)],
                           melds=[pon_of("白白白")], is_menzen=False)
        assert check_ittsu(ctx) == ("一気通貫", 1)

    def test_sanshoku_doukou(self):
        ctx = make_context(mentsu=[('koutsu', 8), ('koutsu', 17), ('koutsu', 26), ('shuntsu', 10)])
        assert check_sanshoku_doukou(ctx) == ("三色同刻", 2)

    def test_toitoi(self):
        ctx = make_context(mentsu=[('koutsu', 9)],
                           melds=[pon_of("白白白"), pon_of("555s"), pon_of("999m")],
                           is_menzen=False)
        assert check_toitoi(ctx) == ("対対和", 2)

    def test_sanankou_tsumo(self):
        ctx = make_context(mentsu=[('koutsu', 9), ('koutsu', 12), ('koutsu', 27), ('shuntsu', 20)],
                           is_tsumo=True, win_tile_34=9, win_slot=0)
        assert check_sanankou(ctx) == ("三暗刻", 2)

    def test_ron_on_triplet_is_not_concealed(self):
        ctx = make_context(mentsu=[('koutsu', 9), ('koutsu', 12), ('koutsu', 27), ('shuntsu', 20)],
                           is_tsumo=False, win_tile_34=9, win_slot=0)
        assert ctx.concealed_koutsu_count == 2
        assert check_sanankou(ctx) is None

    def test_ankan_counts_concealed(self):
        ctx = make_context(mentsu=[('koutsu', 9), ('koutsu', 12), ('shuntsu', 20)],
                           melds=[kan_of("東東東東")], is_tsumo=True, win_tile_34=20, win_slot=2)
        assert check_sanankou(ctx) is not None

    def test_sankantsu(self):
        ctx = make_context(melds=[kan_of("東東東東"), kan_of("1111p", MeldType.DAIMINKAN),
                                  kan_of("9999s")])
        assert check_sankantsu(ctx) == ("三槓子", 2)

    def test_shousangen(self):
        ctx = make_context(head_34=33, mentsu=[('koutsu', 31), ('koutsu', 32)])
        assert check_shousangen(ctx) == ("小三元", 2)


class TestFlushAndPairs:
    def test_chiitoi(self):
        assert check_chiitoi(make_context(is_chiitoi=True)) == ("七対子", 2)

    def test_honitsu(self):
        ctx = make_context(all_tiles_34=make_34_array("123456789p東東東南南"))
        assert check_honitsu(ctx) == ("混一色", 3)
        assert check_chinitsu(ctx) is None

    def test_chinitsu_open(self):
        ctx = make_context(all_tiles_34=make_34_array("12345678999p555p"), is_menzen=False)
        assert check_chinitsu(ctx) == ("清一色", 5)
        assert check_honitsu(ctx) is None


class TestYakuman:
    def test_daisangen_replaces_regular(self):
        ctx = make_context(head_34=26, mentsu=[('koutsu', 31), ('koutsu', 32), ('koutsu', 33),
                                               ('shuntsu', 9)],
                           all_tiles_34=make_34_array("白白白發發發中中中123p99s"),
                           is_riichi=True, dora_count=3, win_tile_34=9, win_slot=3)
        assert detect_all_yaku(ctx) == [("大三元", 13)]

    def test_tsuuiisou(self):
        ctx = make_context(all_tiles_34=make_34_array("東東東南南南西西西白白白發發"))
        assert check_tsuuiisou(ctx) == ("字一色", 13)

    def test_ryuuiisou(self):
        ctx = make_context(all_tiles_34=make_34_array("234s234s666s88s發發發"))
        assert check_ryuuiisou(ctx) == ("緑一色", 13)

    def test_chuuren(self):
        ctx = make_context(all_tiles_34=make_34_array("11123456789999p"))
        assert check_chuuren(ctx) == ("九蓮宝燈", 13)

    def test_chuuren_open(self):
        ctx = make_context(all_tiles_34=make_34_array("11123456789999p"),
                           is_menzen=False, melds=[pon_of("111p")])
        assert check_chuuren(ctx) is None

    def test_tenhou(self):
        ctx = make_context(is_tenhou=True, is_tsumo=True,
                           all_tiles_34=make_34_array("234p567p345s678s55s"))
        assert ("天和", 13) in detect_all_yaku(ctx)


class TestDetectAll:
    def _pinfu_context(self, **kwargs):
        return make_context(
            head_34=28, mentsu=[('shuntsu', 10), ('shuntsu', 13), ('shuntsu', 20), ('shuntsu', 23)],
            all_tiles_34=make_34_array("234p567p345s678s南南"),
            win_tile_34=10, win_slot=0, seat_wind_34=29, round_wind_34=27, **kwargs)

    def test_riichi_pinfu_dora(self):
        ctx = self._pinfu_context(is_riichi=True, dora_count=2)
        yaku = detect_all_yaku(ctx)
        assert yaku == [("立直", 1), ("平和", 1), ("ドラ", 2)]
        assert total_han(yaku) == 4
        assert has_yaku(yaku)

    def test_dora_alone_is_not_a_hand(self):
        ctx = make_context(
            head_34=28, mentsu=[('shuntsu', 10), ('shuntsu', 20)],
            melds=[pon_of("555p"), pon_of("999m")], is_menzen=False,
            all_tiles_34=make_34_array("234p555p345s999m南南"),
            win_tile_34=20, win_slot=1, seat_wind_34=29, round_wind_34=27,
            dora_count=3, red_dora_count=1)
        assert detect_all_yaku(ctx) == []

    def test_has_yaku_ignores_dora(self):
        assert not has_yaku([("ドラ", 3), ("赤ドラ", 1)])
        assert has_yaku([("ドラ", 3), ("立直", 1)])

    def test_ura_and_red_listed(self):
        ctx = self._pinfu_context(is_riichi=True, uradora_count=1, red_dora_count=1)
        names = [name for name, _ in detect_all_yaku(ctx)]
        assert names[-2:] == ["裏ドラ", "赤ドラ"]
