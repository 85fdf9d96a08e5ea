"""Tests for wall.py"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import random
from collections import Counter

import pytest

from sanma.config import GameConfig
from sanma.core.tile import SANMA_KINDS, make_tiles_from_string
from sanma.core.wall import Wall, DEAD_WALL_SIZE
from sanma.engine.errors import InvariantViolation


def make_wall(seed=1, **config_kwargs):
    return Wall(GameConfig(**config_kwargs), random.Random(seed)).prepare()


class TestWallBuild:
    def test_tile_multiset(self):
        wall = Wall(GameConfig())
        tiles = wall.build()
        assert len(tiles) == 108
        counts = Counter(t.index34 for t in tiles)
        assert set(counts) == set(SANMA_KINDS)
        assert all(c == 4 for c in counts.values())
        assert len({t.id for t in tiles}) == 108

    def test_default_red_fives(self):
        tiles = Wall(GameConfig()).build()
        reds = [t for t in tiles if t.is_red]
        assert sorted(t.index34 for t in reds) == [13, 22]

    def test_custom_red_counts(self):
        tiles = Wall(GameConfig(red_fives={"5p": 2, "5s": 2})).build()
        reds = Counter(t.index34 for t in tiles if t.is_red)
        assert reds[13] == 2
        assert reds[22] == 2

    def test_red_count_never_exceeds_kind(self):
        tiles = Wall(GameConfig(red_fives={"1m": 4})).build()
        assert sum(1 for t in tiles if t.is_red and t.index34 == 0) == 4

    def test_shuffle_is_permutation(self):
        wall = Wall(GameConfig(), random.Random(7))
        before = sorted(t.id for t in wall.build())
        wall.shuffle()
        assert sorted(t.id for t in wall.live_wall) == before

    def test_seeded_shuffle_reproducible(self):
        a = make_wall(seed=42)
        b = make_wall(seed=42)
        assert [t.id for t in a.live_wall] == [t.id for t in b.live_wall]

    def test_shuffles_differ(self):
        orders = {tuple(t.id for t in make_wall(seed=s).live_wall) for s in range(5)}
        assert len(orders) == 5
        unseeded = [Wall(GameConfig()).prepare() for _ in range(2)]
        assert [t.id for t in unseeded[0].live_wall] != [t.id for t in unseeded[1].live_wall]


class TestDeadWall:
    def test_split(self):
        wall = make_wall()
        assert wall.remaining == 108 - DEAD_WALL_SIZE
        assert wall.dead_wall_size == DEAD_WALL_SIZE
        assert len(wall.replacement_tiles) == 4
        assert len(wall.indicator_tiles) == 5
        assert len(wall.ura_indicator_tiles) == 5

    def test_one_indicator_revealed(self):
        wall = make_wall()
        assert len(wall.dora_indicators) == 1
        assert len(wall.dora_kinds()) == 1
        assert len(wall.ura_dora_kinds()) == 1

    def test_reveal_cap(self):
        wall = make_wall()
        for _ in range(4):
            assert wall.reveal_next_dora() is not None
        assert len(wall.dora_indicators) == 5
        assert wall.reveal_next_dora() is None
        assert len(wall.dora_indicators) == 5

    def test_set_twice_rejected(self):
        wall = make_wall()
        with pytest.raises(InvariantViolation):
            wall.set_dead_wall()

    def test_from_tiles_needs_full_dead_wall(self):
        tiles = make_tiles_from_string("123456789p")
        with pytest.raises(ValueError):
            Wall.from_tiles(tiles, tiles[:5])


class TestDrawing:
    def test_draw_until_empty(self):
        wall = make_wall()
        count = 0
        while not wall.is_empty:
            wall.draw()
            count += 1
        assert count == 94
        with pytest.raises(InvariantViolation):
            wall.draw()

    def test_replacement_keeps_dead_wall_size(self):
        wall = make_wall()
        live_before = wall.remaining
        wall.draw_replacement()
        assert wall.remaining == live_before - 1
        assert wall.dead_wall_size == DEAD_WALL_SIZE

    def test_replacement_limit(self):
        wall = make_wall()
        for _ in range(4):
            wall.draw_replacement()
        assert wall.replacements_left == 0
        with pytest.raises(InvariantViolation):
            wall.draw_replacement()

    def test_replacement_does_not_reveal(self):
        wall = make_wall()
        wall.draw_replacement()
        assert len(wall.dora_indicators) == 1

    def test_conservation(self):
        wall = make_wall()
        drawn = [wall.draw() for _ in range(10)]
        drawn.append(wall.draw_replacement())
        held = (drawn + wall.live_wall + wall.replacement_tiles
                + wall.indicator_tiles + wall.ura_indicator_tiles)
        assert len(held) == 108
        assert len({t.id for t in held}) == 108
        assert wall.tiles_in_play == 11
        assert wall.total_tiles == 108
        wall.check_conservation()

    def test_lost_tile_breaks_conservation(self):
        wall = make_wall()
        wall.draw()
        wall.check_conservation()
        wall.live_wall.pop()
        with pytest.raises(InvariantViolation):
            wall.check_conservation()
