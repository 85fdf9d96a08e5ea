"""Match management - the GameState phase machine and its command API.

GameState rests only in DISCARD or CALL_PHASE (waiting on a seat without a
policy), LOBBY and GAME_OVER. Every command is checked against the current
phase and hand before anything changes; a rejected command raises
IllegalAction and emits ACTION_REJECTED.
"""

import random
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sanma.config import GameConfig, UMA_UNIT
from sanma.core.meld import Meld
from sanma.core.player_state import PlayerState
from sanma.core.tile import Tile
from sanma.core.wall import Wall
from sanma.engine.action import (
    Action, ActionType, ClaimKind, LegalActions, CLAIM_ACTIONS, ACTION_PRIORITY,
)
from sanma.engine.errors import IllegalAction, InvariantViolation, ScoringAmbiguity
from sanma.engine.event import EventBus, EventType, GameEvent
from sanma.engine.round import RoundResult, RoundState
from sanma.engine.round_cycle import RoundCycle
from sanma.engine.snapshot import TableSnapshot, build_snapshot
from sanma.rules.furiten import update_furiten


class GamePhase(Enum):
    LOBBY = "lobby"
    SETUP = "setup"
    DRAW = "draw"
    DISCARD = "discard"
    CALL_PHASE = "call_phase"
    RESULT = "result"
    GAME_OVER = "game_over"


class GameState:
    """Manages a complete match (東風戦 or 半荘) for three seats.

    Args:
        config: Match rules
        player_names: One name per seat
        policies: One DecisionPolicy per seat, or None for a seat driven
            through the command API
        event_bus: Bus that receives every GameEvent
        seed: Seed for the wall shuffle
    """

    def __init__(self, config: Optional[GameConfig] = None,
                 player_names: Optional[Sequence[str]] = None,
                 policies: Optional[Sequence] = None,
                 event_bus: Optional[EventBus] = None,
                 seed: Optional[int] = None):
        self.config = config or GameConfig()
        self.num_players = self.config.num_players
        self.event_bus = event_bus or EventBus()
        self._rng = random.Random(seed)

        names = list(player_names) if player_names else [
            f"Player {i + 1}" for i in range(self.num_players)
        ]
        if len(names) != self.num_players:
            raise ValueError(f"need {self.num_players} player names, got {len(names)}")
        self.policies = list(policies) if policies else [None] * self.num_players
        if len(self.policies) != self.num_players:
            raise ValueError(f"need {self.num_players} policies, got {len(self.policies)}")

        self.players = [
            PlayerState(i, name, self.config.starting_score)
            for i, name in enumerate(names)
        ]
        self.cycle = RoundCycle(self.config)
        self.phase = GamePhase.LOBBY
        self.round: Optional[RoundState] = None
        self.legal: Optional[LegalActions] = None  # Acting seat's options in DISCARD

        # History
        self.round_results: List[RoundResult] = []
        self.last_result: Optional[RoundResult] = None
        self.final_scores: List[int] = []

        self._pending_result: Optional[RoundResult] = None
        self._round_start_scores: List[int] = []
        self._round_start_sticks = 0
        self._started = False
        self._busy = False

    # --- Properties ---

    @property
    def is_finished(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def scores(self) -> List[int]:
        return [p.score for p in self.players]

    @property
    def round_label(self) -> str:
        """Label like '東1局 1本場'."""
        return self.cycle.label

    @property
    def awaiting_seats(self) -> List[int]:
        """Seats the engine is waiting on (externally controlled ones)."""
        if self.phase == GamePhase.DISCARD and self.round is not None:
            return [self.round.acting_seat]
        if self.phase == GamePhase.CALL_PHASE and self.round is not None:
            return [s for s in self.round.responders if s not in self.round.responses]
        return []

    # --- Commands ---

    def start_match(self):
        """LOBBY -> SETUP, then play until a seat without a policy must act."""
        def apply():
            if self.phase != GamePhase.LOBBY:
                raise self._reject("start_match", None, f"match is in {self.phase.value}")
            if self.cycle.is_finished:
                raise self._reject("start_match", None, "match is over")
            if not self._started:
                self._started = True
                self.event_bus.emit(GameEvent(EventType.GAME_START, {
                    "config": self.config,
                    "players": [(p.name, p.score) for p in self.players],
                }))
            self.phase = GamePhase.SETUP

        self._execute("start_match", None, apply)

    def discard(self, seat: int, tile_id: int):
        self._execute("discard", seat, lambda: self._do_discard(seat, tile_id))

    def declare_riichi(self, seat: int):
        """Declare riichi; the seat's next discard must keep the hand ready."""
        self._execute("riichi", seat, lambda: self._do_riichi(seat))

    def claim(self, seat: int, kind, tile_ids: Sequence[int] = ()):
        """Claim a win or a quad on the own turn, or ron/pon/kan on a discard."""
        self._execute("claim", seat, lambda: self._do_claim(seat, kind, tuple(tile_ids)))

    def skip_claim(self, seat: int):
        self._execute("skip", seat, lambda: self._do_skip(seat))

    def abandon_round(self):
        """Throw away the round in progress and go back to LOBBY."""
        def apply():
            if self.round is None or self.phase in (GamePhase.LOBBY, GamePhase.GAME_OVER):
                raise self._reject("abandon_round", None, "no round in progress")
            self._abort_round("abandoned")

        self._execute("abandon_round", None, apply)

    def snapshot(self, viewer_seat: int) -> TableSnapshot:
        """Frozen view of the committed state for one seat."""
        if not 0 <= viewer_seat < self.num_players:
            raise ValueError(f"no seat {viewer_seat}")

        rs = self.round
        legal = None
        if rs is not None:
            if self.phase == GamePhase.DISCARD:
                legal = self.legal
            elif self.phase == GamePhase.CALL_PHASE and viewer_seat not in rs.responses:
                legal = rs.responders.get(viewer_seat)

        return build_snapshot(
            viewer_seat=viewer_seat,
            players=self.players,
            phase=self.phase.value,
            acting_seat=rs.acting_seat if rs else self.cycle.dealer_seat,
            round_wind=self.cycle.round_wind if rs is None else rs.round_wind,
            round_number=self.cycle.round_number,
            honba=self.cycle.honba if rs is None else rs.honba,
            riichi_sticks=self.cycle.riichi_sticks,
            wall_remaining=rs.wall.remaining if rs else 0,
            dora_indicators=rs.wall.dora_indicators if rs else [],
            legal=legal,
            last_discard=rs.last_discard if rs else None,
            last_discard_seat=rs.last_discard_seat if rs else None,
        )

    # --- Command plumbing ---

    def _execute(self, action: str, seat: Optional[int], apply: Callable[[], None]):
        if self._busy:
            raise self._reject(action, seat, "engine busy")
        self._busy = True
        try:
            apply()
            self._run()
        except (InvariantViolation, ScoringAmbiguity) as e:
            self._abort_round(str(e))
            raise
        finally:
            self._busy = False

    def _reject(self, action: str, seat: Optional[int], reason: str) -> IllegalAction:
        self.event_bus.emit(GameEvent(EventType.ACTION_REJECTED, {
            "action": action,
            "player": seat,
            "reason": reason,
        }))
        return IllegalAction(action, seat, reason)

    def _require_turn(self, action: str, seat: int) -> PlayerState:
        if self.phase != GamePhase.DISCARD:
            raise self._reject(action, seat, f"not allowed in {self.phase.value}")
        if seat != self.round.acting_seat:
            raise self._reject(action, seat, "not this seat's turn")
        return self.players[seat]

    def _require_response(self, action: str, seat: int) -> LegalActions:
        if self.phase != GamePhase.CALL_PHASE:
            raise self._reject(action, seat, f"not allowed in {self.phase.value}")
        if seat not in self.round.responders:
            raise self._reject(action, seat, "nothing to respond with")
        if seat in self.round.responses:
            raise self._reject(action, seat, "already responded")
        return self.round.responders[seat]

    # --- Turn actions ---

    def _check_discard(self, seat: int, tile_id: int,
                       allowed: List[Tile], action: str = "discard") -> Tile:
        tile = self.players[seat].hand.find_tile(tile_id)
        if tile is None:
            raise self._reject(action, seat, f"tile {tile_id} not in hand")
        if tile not in allowed:
            raise self._reject(action, seat, f"{tile.name} may not be discarded")
        return tile

    def _do_discard(self, seat: int, tile_id: int):
        self._require_turn("discard", seat)
        tile = self._check_discard(seat, tile_id, self.legal.can_discard)

        rs = self.round
        rs.process_discard(seat, tile)
        self.legal = None
        rs.check_hand_sizes(None)

        responders = {}
        for offset in range(1, self.num_players):
            other = (seat + offset) % self.num_players
            la = rs.get_response_actions(other, tile, seat)
            if la.has_action:
                responders[other] = la
        rs.responders = responders
        rs.responses = {}

        if responders:
            self.phase = GamePhase.CALL_PHASE
        else:
            rs.acting_seat = rs.next_seat(seat)
            self.phase = GamePhase.DRAW
        self._emit_snapshots()

    def _check_riichi(self, seat: int):
        self._require_turn("riichi", seat)
        if self.round.pending_riichi is not None:
            raise self._reject("riichi", seat, "riichi already declared")
        if not self.legal.can_riichi:
            raise self._reject("riichi", seat, "hand cannot declare riichi")

    def _do_riichi(self, seat: int):
        self._check_riichi(seat)
        self.round.declare_riichi(seat)
        self.legal = self.round.get_riichi_discard_actions(seat)
        self._emit_snapshots()

    def _do_tsumo(self, seat: int):
        self._require_turn("tsumo", seat)
        if not self.legal.can_tsumo:
            raise self._reject("tsumo", seat, "hand is not a scoring win")
        result = self.round.tsumo_score(seat)
        if result is None:
            raise InvariantViolation(f"seat {seat} offered tsumo without a score")
        self._pending_result = self.round.finish_tsumo(seat, result)
        self.phase = GamePhase.RESULT

    def _do_self_kan(self, seat: int, tile_ids: Tuple[int, ...]):
        self._require_turn("kan", seat)
        if not tile_ids:
            raise self._reject("kan", seat, "name a tile of the kind to quad")
        hand = self.players[seat].hand
        tile = hand.find_tile(tile_ids[0])
        if tile is None:
            raise self._reject("kan", seat, f"tile {tile_ids[0]} not in hand")

        rs = self.round
        concealed = [g for g in self.legal.can_ankan if g[0].index34 == tile.index34]
        added = [t for t in self.legal.can_shouminkan if t.index34 == tile.index34]
        if concealed:
            rs.process_ankan(seat, concealed[0])
        elif added:
            rs.process_shouminkan(seat, added[0])
        else:
            raise self._reject("kan", seat, f"no quad of {tile.name} available")

        self.legal = rs.get_draw_actions(seat)
        rs.check_hand_sizes(seat)
        self._emit_snapshots()

    # --- Responses ---

    def _do_claim(self, seat: int, kind, tile_ids: Tuple[int, ...]):
        try:
            kind = ClaimKind(kind)
        except ValueError:
            raise self._reject("claim", seat, f"unknown claim kind {kind!r}")

        if kind == ClaimKind.TSUMO:
            self._do_tsumo(seat)
            return
        if kind == ClaimKind.KAN and self.phase == GamePhase.DISCARD:
            self._do_self_kan(seat, tile_ids)
            return

        name = kind.value
        legal = self._require_response(name, seat)
        action_type = CLAIM_ACTIONS[kind]

        if kind == ClaimKind.RON:
            if not legal.can_ron:
                raise self._reject(name, seat, "discard does not win for this seat")
            self.round.responses[seat] = (action_type, None)
            return

        options = legal.can_pon if kind == ClaimKind.PON else legal.can_daiminkan
        if not options:
            raise self._reject(name, seat, f"cannot {name} this discard")
        meld = self._choose_meld(seat, name, options[0], tile_ids)
        self.round.responses[seat] = (action_type, meld)

    def _choose_meld(self, seat: int, name: str, offered: Meld,
                     tile_ids: Tuple[int, ...]) -> Meld:
        """Use the hand tiles named by tile_ids, or the offered meld when none are named."""
        if not tile_ids:
            return offered
        needed = len(offered.tiles) - 1
        if len(tile_ids) != needed or len(set(tile_ids)) != needed:
            raise self._reject(name, seat, f"{name} needs {needed} distinct hand tiles")
        hand = self.players[seat].hand
        chosen = []
        for tid in tile_ids:
            tile = hand.find_tile(tid)
            if tile is None or tile.index34 != offered.tile_index34:
                raise self._reject(name, seat, f"tile {tid} cannot form this {name}")
            chosen.append(tile)
        return Meld(offered.meld_type, tuple(chosen) + (offered.called_tile,),
                    offered.called_tile, offered.from_seat)

    def _do_skip(self, seat: int):
        self._require_response("skip", seat)
        self.round.responses[seat] = (ActionType.SKIP, None)

    def _resolve_calls(self):
        """Commit the collected responses: ron first (all of them), then quad over pon."""
        rs = self.round
        tile = rs.last_discard
        discarder = rs.last_discard_seat

        def distance(s: int) -> int:
            return (s - discarder) % self.num_players

        ron_seats = sorted(
            (s for s, (t, _) in rs.responses.items() if t == ActionType.RON),
            key=distance,
        )

        for s, la in rs.responders.items():
            if la.can_ron and s not in ron_seats:
                self.players[s].hand.declined_kinds.add(tile.index34)
        for p in self.players:
            update_furiten(p.hand)

        if ron_seats:
            winners = []
            for s in ron_seats:
                result = rs.ron_score(s, tile, discarder)
                if result is None:
                    raise InvariantViolation(f"seat {s} offered ron without a score")
                winners.append((s, result))
            self._pending_result = rs.finish_ron(winners, discarder)
            self.phase = GamePhase.RESULT
            self._clear_responses()
            return

        claims = sorted(
            ((ACTION_PRIORITY[t], distance(s), s, t, meld)
             for s, (t, meld) in rs.responses.items() if t != ActionType.SKIP),
            key=lambda c: c[:3],
        )
        self._clear_responses()

        if not claims:
            rs.acting_seat = rs.next_seat(discarder)
            self.phase = GamePhase.DRAW
            return

        _, _, seat, action_type, meld = claims[0]
        if action_type == ActionType.PON:
            rs.process_pon(seat, meld)
            self.legal = rs.get_after_call_actions(seat)
        else:
            rs.process_daiminkan(seat, meld)
            self.legal = rs.get_draw_actions(seat)
        rs.check_hand_sizes(seat)
        self.phase = GamePhase.DISCARD
        self._emit_snapshots()

    def _clear_responses(self):
        self.round.responders = {}
        self.round.responses = {}

    # --- Policy dispatch ---

    def _apply_turn_action(self, action: Action):
        seat = action.seat
        t = action.action_type
        if t == ActionType.DISCARD:
            self._do_discard(seat, action.tile_id)
        elif t == ActionType.RIICHI:
            self._check_riichi(seat)
            self._check_discard(seat, action.tile_id,
                                self.round.get_riichi_discard_actions(seat).can_discard,
                                action="riichi")
            self._do_riichi(seat)
            self._do_discard(seat, action.tile_id)
        elif t == ActionType.TSUMO:
            self._do_tsumo(seat)
        elif t == ActionType.KAN:
            ids = (action.tile_id,) if action.tile_id is not None else action.tile_ids
            self._do_self_kan(seat, tuple(ids))
        else:
            raise self._reject(t.value, seat, "not a turn action")

    def _apply_claim_action(self, action: Action):
        seat = action.seat
        t = action.action_type
        if t == ActionType.SKIP:
            self._do_skip(seat)
        elif t in (ActionType.RON, ActionType.PON, ActionType.KAN):
            self._do_claim(seat, ClaimKind(t.value), action.tile_ids)
        else:
            raise self._reject(t.value, seat, "not a response to a discard")

    # --- Main loop ---

    def _run(self):
        """Advance through automatic transitions until a seat without a policy must act."""
        while True:
            if self.phase == GamePhase.SETUP:
                self._setup_round()

            elif self.phase == GamePhase.DRAW:
                self._draw_turn()

            elif self.phase == GamePhase.DISCARD:
                seat = self.round.acting_seat
                policy = self.policies[seat]
                if policy is None:
                    return
                action = policy.choose_turn_action(self.snapshot(seat), self.legal)
                self._apply_turn_action(action)

            elif self.phase == GamePhase.CALL_PHASE:
                rs = self.round
                waiting_external = False
                discarder = rs.last_discard_seat
                pending = sorted(
                    (s for s in rs.responders if s not in rs.responses),
                    key=lambda s: (s - discarder) % self.num_players,
                )
                for s in pending:
                    policy = self.policies[s]
                    if policy is None:
                        waiting_external = True
                        continue
                    action = policy.choose_claim(self.snapshot(s), rs.responders[s])
                    self._apply_claim_action(action)
                if waiting_external:
                    return
                self._resolve_calls()

            elif self.phase == GamePhase.RESULT:
                self._finish_round()

            else:
                return

    def _setup_round(self):
        dealer = self.cycle.dealer_seat
        for p in self.players:
            p.reset_for_round(self.cycle.seat_wind(p.seat), p.seat == dealer)

        self._round_start_scores = self.scores
        self._round_start_sticks = self.cycle.riichi_sticks

        wall = Wall(self.config, self._rng).prepare()
        self.round = RoundState(self.players, wall, self.cycle, self.config, self.event_bus)
        self.legal = None
        self._pending_result = None

        self.event_bus.emit(GameEvent(EventType.ROUND_START, {
            "round_label": self.cycle.label,
            "round_wind": self.cycle.round_wind,
            "round_number": self.cycle.round_number,
            "dealer": dealer,
            "honba": self.cycle.honba,
            "riichi_sticks": self.cycle.riichi_sticks,
            "dora_indicators": list(wall.dora_indicators),
            "scores": self.scores,
        }))

        self.round.deal_tiles()
        self.round.check_hand_sizes(None)
        self.round.acting_seat = dealer
        self.phase = GamePhase.DRAW
        self._emit_snapshots()

    def _draw_turn(self):
        rs = self.round
        if rs.wall.is_empty:
            self._pending_result = rs.exhaustive_draw()
            self.phase = GamePhase.RESULT
            return

        seat = rs.acting_seat
        rs.draw_for(seat)
        self.legal = rs.get_draw_actions(seat)
        rs.check_hand_sizes(seat)
        self.phase = GamePhase.DISCARD
        self._emit_snapshots()

    def _finish_round(self):
        result = self._pending_result
        self._pending_result = None

        for i, change in enumerate(result.score_changes):
            self.players[i].score += change
        if result.riichi_sticks_winner is not None:
            self.cycle.riichi_sticks = 0
        # Unclaimed riichi sticks stay on the table

        self.round_results.append(result)
        self.last_result = result
        self.legal = None

        self.event_bus.emit(GameEvent(EventType.ROUND_END, {
            "round_label": self.cycle.label,
            "result": result,
            "players": self.players,
            "scores": self.scores,
        }))

        if self.cycle.conclude_round(result.dealer_continues, self.scores):
            self.phase = GamePhase.SETUP
        else:
            self.phase = GamePhase.GAME_OVER
            self._finalize()
        self._emit_snapshots()

    def _finalize(self):
        """Settle the match and record final scores and rankings.

        Sticks still on the table go to the top seat. Uma is then added for
        first and last place; final_scores carries it, player scores do not.
        Ties rank the lower seat first.
        """
        ranking = sorted(range(self.num_players), key=lambda s: (-self.players[s].score, s))
        leftover = self.cycle.riichi_sticks * self.config.riichi_deposit
        self.players[ranking[0]].score += leftover
        self.cycle.riichi_sticks = 0

        final = self.scores
        first_uma, last_uma = self.config.uma
        final[ranking[0]] += first_uma * UMA_UNIT
        final[ranking[-1]] += last_uma * UMA_UNIT
        self.final_scores = final

        self.event_bus.emit(GameEvent(EventType.GAME_END, {
            "scores": self.final_scores,
            "raw_scores": self.scores,
            "leftover_sticks": leftover,
            "players": [(p.name, final[p.seat]) for p in self.players],
            "ranking": ranking,
        }))

    def _abort_round(self, reason: str):
        """Discard everything the current round changed and go back to LOBBY."""
        if self._round_start_scores:
            for p, score in zip(self.players, self._round_start_scores):
                p.score = score
            self.cycle.riichi_sticks = self._round_start_sticks
        self.round = None
        self.legal = None
        self._pending_result = None
        self.phase = GamePhase.LOBBY
        self.event_bus.emit(GameEvent(EventType.ROUND_ABORTED, {
            "round_label": self.cycle.label,
            "reason": reason,
        }))

    def _emit_snapshots(self):
        if not self.event_bus.has_listeners(EventType.SNAPSHOT):
            return
        snapshots: Dict[int, TableSnapshot] = {
            s: self.snapshot(s) for s in range(self.num_players)
        }
        self.event_bus.emit(GameEvent(EventType.SNAPSHOT, {
            "phase": self.phase,
            "snapshots": snapshots,
        }))
