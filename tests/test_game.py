"""Tests for game.py - phase machine and command API"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from sanma.config import GameConfig
from sanma.core.hand import Hand
from sanma.core.player_state import Wind
from sanma.core.tile import Tile, make_tiles_from_string
from sanma.engine.action import ClaimKind
from sanma.engine.errors import IllegalAction, InvariantViolation, ScoringAmbiguity
from sanma.engine.event import EventBus, EventType
from sanma.engine.game import GamePhase, GameState
from sanma.player.cpu import GreedyPolicy

FILLER = "19p19s東西北發中9m9s1p5p"
HAKU = 127  # fourth 白; make_tiles_from_string hands out copies from the first
ITTSU_ON_HAKU = "123456789p111s白"      # tanki on 白
SHANPON_HAKU = "白白234s678s999p南南"     # 白 or 南
PON_HAKU = "白白234s678s999p南5p"


def new_game(**kwargs):
    bus = EventBus()
    events = []
    for event_type in EventType:
        bus.subscribe(event_type, events.append)
    game = GameState(event_bus=bus, seed=5, **kwargs)
    game.start_match()
    return game, events


def rig(game, seat, tiles_str, draw_id=None):
    """Replace a seat's hand; the acting seat gets draw_id as its drawn tile."""
    hand = Hand()
    for t in make_tiles_from_string(tiles_str):
        hand.deal(t)
    if draw_id is not None:
        hand.draw(Tile(draw_id))
    game.players[seat].hand = hand
    if seat == game.round.acting_seat:
        game.legal = game.round.get_draw_actions(seat)


def types_of(events):
    return [e.event_type for e in events]


class TestSetup:
    def test_names_must_match_seats(self):
        with pytest.raises(ValueError):
            GameState(player_names=["A", "B"])

    def test_start(self):
        game, events = new_game()
        assert game.phase == GamePhase.DISCARD
        assert game.awaiting_seats == [0]
        assert game.round_label == "東1局"
        assert types_of(events)[:3] == [EventType.GAME_START, EventType.ROUND_START, EventType.DEAL]

    def test_fifty_five_drawable_after_deal(self):
        bus = EventBus()
        seen = []
        bus.subscribe(EventType.DEAL, lambda e: seen.append(e.data["wall"].remaining))
        GameState(event_bus=bus, seed=1).start_match()
        assert seen == [55]

    def test_dealer_holds_fourteen(self):
        game, _ = new_game()
        assert game.players[0].hand.effective_size == 14
        assert game.players[1].hand.effective_size == 13
        assert game.round.wall.remaining == 54

    def test_start_twice_rejected(self):
        game, events = new_game()
        with pytest.raises(IllegalAction):
            game.start_match()
        assert events[-1].event_type == EventType.ACTION_REJECTED


class TestRejections:
    def test_wrong_seat(self):
        game, events = new_game()
        tile_id = game.players[1].hand.closed_tiles[0].id
        with pytest.raises(IllegalAction) as exc:
            game.discard(1, tile_id)
        assert "not this seat's turn" in str(exc.value)
        assert events[-1].event_type == EventType.ACTION_REJECTED
        assert events[-1].data["player"] == 1
        assert len(game.players[1].hand.closed_tiles) == 13

    def test_tile_not_in_hand(self):
        game, _ = new_game()
        missing = next(i for i in range(136) if i // 4 not in range(1, 8)
                       and game.players[0].hand.find_tile(i) is None)
        with pytest.raises(IllegalAction):
            game.discard(0, missing)
        assert game.players[0].hand.effective_size == 14

    def test_discard_during_call_phase(self):
        game, _ = new_game()
        rig(game, 0, FILLER, draw_id=HAKU)
        rig(game, 1, ITTSU_ON_HAKU)
        rig(game, 2, FILLER)
        game.discard(0, HAKU)
        assert game.phase == GamePhase.CALL_PHASE
        hand = game.players[1].hand
        before = list(hand.closed_tiles)
        with pytest.raises(IllegalAction):
            game.discard(1, hand.closed_tiles[0].id)
        assert hand.closed_tiles == before
        assert hand.discard_pool == []
        assert game.phase == GamePhase.CALL_PHASE
        assert game.awaiting_seats == [1]

    def test_claims_outside_call_phase(self):
        game, _ = new_game()
        with pytest.raises(IllegalAction):
            game.claim(1, ClaimKind.RON)
        with pytest.raises(IllegalAction):
            game.skip_claim(1)

    def test_unknown_claim(self):
        game, _ = new_game()
        with pytest.raises(IllegalAction):
            game.claim(0, "chi")

    def test_tsumo_without_win(self):
        game, _ = new_game()
        rig(game, 0, FILLER, draw_id=HAKU)
        with pytest.raises(IllegalAction):
            game.claim(0, "tsumo")

    def test_engine_busy(self):
        bus = EventBus()
        game = GameState(event_bus=bus, seed=2)
        reasons = []

        def meddle(event):
            try:
                game.discard(0, 0)
            except IllegalAction as e:
                reasons.append(e.reason)

        bus.subscribe(EventType.DRAW, meddle)
        game.start_match()
        assert reasons == ["engine busy"]
        assert game.players[0].hand.discard_pool == []

    def test_snapshot_seat_range(self):
        game, _ = new_game()
        with pytest.raises(ValueError):
            game.snapshot(3)


class TestSnapshot:
    def test_hides_other_hands(self):
        game, _ = new_game()
        snap = game.snapshot(1)
        assert snap.me.hand is not None
        assert all(o.hand is None and o.draw_tile is None for o in snap.opponents)
        assert snap.seats[0].hand_count == 14
        # Legal actions belong to the acting seat only
        assert snap.legal is None
        assert game.snapshot(0).legal is game.legal


class TestCalls:
    def test_multi_ron(self):
        game, events = new_game()
        rig(game, 0, FILLER, draw_id=HAKU)
        rig(game, 1, ITTSU_ON_HAKU)
        rig(game, 2, SHANPON_HAKU)
        game.discard(0, HAKU)
        assert game.phase == GamePhase.CALL_PHASE
        assert sorted(game.awaiting_seats) == [1, 2]

        game.claim(1, "ron")
        # Nothing is committed until every seat has answered
        assert game.phase == GamePhase.CALL_PHASE
        assert game.awaiting_seats == [2]

        game.claim(2, ClaimKind.RON)
        result = game.last_result
        assert result.winners == [1, 2]
        assert result.loser == 0
        changes = result.score_changes
        assert changes[0] == -(changes[1] + changes[2])
        assert sum(game.scores) == 105000
        assert game.cycle.dealer_seat == 1
        assert game.round_label == "東2局"
        assert types_of(events).count(EventType.RON) == 2

    def test_ron_beats_pon(self):
        game, events = new_game()
        rig(game, 0, FILLER, draw_id=HAKU)
        rig(game, 1, ITTSU_ON_HAKU)
        rig(game, 2, PON_HAKU)
        game.discard(0, HAKU)
        game.claim(2, "pon")
        game.claim(1, "ron")
        assert game.last_result.winners == [1]
        assert EventType.PON not in types_of(events)

    def test_pon_takes_the_turn(self):
        game, events = new_game()
        rig(game, 0, FILLER, draw_id=HAKU)
        rig(game, 1, FILLER)
        rig(game, 2, PON_HAKU)
        game.discard(0, HAKU)
        assert game.awaiting_seats == [2]

        with pytest.raises(IllegalAction):
            game.claim(2, "pon", (999,))
        game.claim(2, "pon")
        assert game.phase == GamePhase.DISCARD
        assert game.awaiting_seats == [2]
        assert len(game.players[2].hand.melds) == 1
        assert game.players[0].hand.discard_called == [True]
        assert game.legal.can_tsumo is False

        five = game.players[2].hand.tiles_of_kind(13)[0]
        game.discard(2, five.id)
        # Play continues from the seat after the caller
        assert game.round.acting_seat == 0

    def test_declined_ron_latches_furiten(self):
        game, _ = new_game()
        rig(game, 0, FILLER, draw_id=HAKU)
        rig(game, 1, ITTSU_ON_HAKU)
        rig(game, 2, FILLER)
        game.discard(0, HAKU)
        game.skip_claim(1)
        hand = game.players[1].hand
        assert 31 in hand.declined_kinds
        assert hand.is_furiten
        assert game.awaiting_seats == [1]
        assert hand.effective_size == 14


class TestRiichi:
    def test_declare_and_discard(self):
        game, events = new_game()
        rig(game, 0, "123456789p111s南", draw_id=HAKU)
        rig(game, 1, FILLER)
        rig(game, 2, FILLER)

        game.declare_riichi(0)
        allowed = {t.index34 for t in game.legal.can_discard}
        assert allowed == {28, 31}
        with pytest.raises(IllegalAction):
            game.declare_riichi(0)
        with pytest.raises(IllegalAction):
            game.discard(0, game.players[0].hand.tiles_of_kind(9)[0].id)
        assert game.players[0].score == 35000

        game.discard(0, HAKU)
        assert game.players[0].hand.is_riichi
        assert game.players[0].score == 34000
        assert game.cycle.riichi_sticks == 1
        assert EventType.RIICHI_ACCEPTED in types_of(events)
        assert game.awaiting_seats == [1]

    def test_riichi_discard_ronned_still_banks(self):
        game, _ = new_game()
        rig(game, 0, "123456789p111s南", draw_id=HAKU)
        rig(game, 1, ITTSU_ON_HAKU)
        rig(game, 2, FILLER)

        game.declare_riichi(0)
        game.discard(0, HAKU)
        game.claim(1, "ron")

        result = game.last_result
        payment = result.score_results[0][1].payments[0]
        assert result.riichi_sticks_collected == 1
        assert result.score_changes[1] == payment + 1000
        assert game.players[0].score == 35000 - 1000 - payment
        assert game.cycle.riichi_sticks == 0
        assert sum(game.scores) == 105000

    def test_no_riichi_without_tenpai(self):
        game, _ = new_game()
        rig(game, 0, FILLER, draw_id=HAKU)
        with pytest.raises(IllegalAction):
            game.declare_riichi(0)


class TestAbort:
    def test_abandon_restores(self):
        game, events = new_game()
        rig(game, 0, "123456789p111s南", draw_id=HAKU)
        rig(game, 1, FILLER)
        rig(game, 2, FILLER)
        game.declare_riichi(0)
        game.discard(0, HAKU)
        assert game.cycle.riichi_sticks == 1

        game.abandon_round()
        assert game.phase == GamePhase.LOBBY
        assert game.scores == [35000, 35000, 35000]
        assert game.cycle.riichi_sticks == 0
        assert game.round is None
        assert events[-1].event_type == EventType.ROUND_ABORTED

        game.start_match()
        assert game.round_label == "東1局"
        assert game.phase == GamePhase.DISCARD

    def test_abandon_needs_round(self):
        game = GameState()
        with pytest.raises(IllegalAction):
            game.abandon_round()

    def test_invariant_violation_aborts(self):
        game, events = new_game()
        game.players[2].score = 12345
        game.players[1].hand.closed_tiles.pop()
        drawn = game.players[0].hand.draw_tile
        with pytest.raises(InvariantViolation):
            game.discard(0, drawn.id)
        assert game.phase == GamePhase.LOBBY
        assert game.players[2].score == 35000
        assert events[-1].event_type == EventType.ROUND_ABORTED

    def test_missing_table_entry_aborts(self, monkeypatch):
        game, events = new_game()
        rig(game, 0, ITTSU_ON_HAKU, draw_id=HAKU)
        game.players[1].score = 20000

        def no_entry(seat):
            raise ScoringAmbiguity(20, 1)

        monkeypatch.setattr(game.round, "tsumo_score", no_entry)
        with pytest.raises(ScoringAmbiguity):
            game.claim(0, "tsumo")
        assert game.phase == GamePhase.LOBBY
        assert game.scores == [35000, 35000, 35000]
        assert game.round is None
        assert events[-1].event_type == EventType.ROUND_ABORTED


class TestFullMatch:
    def _cpu_game(self, length, seed):
        bus = EventBus()
        policies = [GreedyPolicy(f"CPU {i}") for i in range(3)]
        game = GameState(GameConfig(length=length), ["A", "B", "C"], policies, bus, seed=seed)
        return game, bus

    def test_east_match_completes(self):
        game, bus = self._cpu_game("east", 11)
        totals = []
        bus.subscribe(EventType.ROUND_END, lambda e: totals.append(
            sum(e.data["scores"]) + game.cycle.riichi_sticks * 1000))
        ends = []
        bus.subscribe(EventType.GAME_END, ends.append)

        game.start_match()
        assert game.is_finished
        assert game.awaiting_seats == []
        assert len(ends) == 1
        assert len(game.round_results) == game.cycle.rounds_played
        assert all(t == 105000 for t in totals)
        # Leftover sticks are paid out and uma is zero-sum
        assert game.cycle.riichi_sticks == 0
        assert sum(game.scores) == 105000
        assert sum(game.final_scores) == 105000

    def test_south_match_completes(self):
        game, _ = self._cpu_game("south", 3)
        game.start_match()
        assert game.is_finished
        # Either both winds were played or someone went below zero
        assert game.cycle.round_wind == Wind.SOUTH or min(game.scores) < 0


class TestFinalSettlement:
    def _settle(self, scores, sticks=0, **config_kwargs):
        game = GameState(GameConfig(**config_kwargs))
        for p, score in zip(game.players, scores):
            p.score = score
        game.cycle.riichi_sticks = sticks
        ends = []
        game.event_bus.subscribe(EventType.GAME_END, ends.append)
        game._finalize()
        return game, ends[0]

    def test_uma_first_and_last(self):
        game, event = self._settle([40000, 30000, 35000])
        assert event.data["ranking"] == [0, 2, 1]
        assert game.final_scores == [50000, 20000, 35000]
        # Uma only shows in the final standings
        assert game.scores == [40000, 30000, 35000]
        assert event.data["players"][0] == ("Player 1", 50000)

    def test_leftover_sticks_to_top(self):
        game, event = self._settle([40000, 30000, 33000], sticks=2)
        assert game.players[0].score == 42000
        assert game.cycle.riichi_sticks == 0
        assert event.data["leftover_sticks"] == 2000
        assert game.final_scores == [52000, 20000, 33000]
        assert sum(game.final_scores) == 105000

    def test_no_uma(self):
        game, _ = self._settle([40000, 30000, 35000], uma=(0, 0))
        assert game.final_scores == [40000, 30000, 35000]

    def test_ties_rank_lower_seat_first(self):
        game, event = self._settle([35000, 35000, 35000])
        assert event.data["ranking"] == [0, 1, 2]
        assert game.final_scores == [45000, 35000, 25000]
