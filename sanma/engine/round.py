"""Single round (局) mechanics: deal, draws, calls, wins and the exhaustive draw.

RoundState owns the per-round data and performs mutations. It does not
decide whose turn it is or validate commands; GameState does both and
only calls into RoundState after a command has been checked.
"""

from typing import Dict, List, Optional, Tuple

from sanma.config import GameConfig
from sanma.core.meld import Meld, MeldType
from sanma.core.player_state import PlayerState, Wind
from sanma.core.tile import Tile
from sanma.core.wall import Wall
from sanma.engine.action import LegalActions
from sanma.engine.errors import InvariantViolation
from sanma.engine.event import EventBus, EventType, GameEvent
from sanma.engine.round_cycle import RoundCycle
from sanma.rules.agari import is_agari, get_waiting_tiles
from sanma.rules.furiten import furiten_waits, is_furiten, update_furiten
from sanma.rules.scoring import ScoreResult, WinContext, calculate_score


class RoundResult:
    """Result of a completed round."""

    def __init__(self, num_players: int = 3):
        self.winners: List[int] = []  # Seat indices of winners
        self.loser: Optional[int] = None  # Seat index of the discarder on a ron
        self.score_results: List[Tuple[int, ScoreResult]] = []  # (seat, result) pairs
        self.score_changes: List[int] = [0] * num_players
        self.is_draw: bool = False
        self.tenpai_players: List[int] = []  # For exhaustive draw
        self.dealer_continues: bool = False
        self.riichi_sticks_winner: Optional[int] = None
        self.riichi_sticks_collected: int = 0


class RoundState:
    """State for a single round of play."""

    def __init__(
        self,
        players: List[PlayerState],
        wall: Wall,
        cycle: RoundCycle,
        config: GameConfig,
        event_bus: EventBus,
    ):
        self.players = players
        self.wall = wall
        self.cycle = cycle
        self.config = config
        self.event_bus = event_bus
        self.num_players = len(players)

        self.round_wind: Wind = cycle.round_wind
        self.dealer_seat = cycle.dealer_seat
        self.honba = cycle.honba

        self.acting_seat = self.dealer_seat
        self.first_draw = [True] * self.num_players
        self.any_call_made = False
        self.last_discard: Optional[Tile] = None
        self.last_discard_seat: Optional[int] = None
        self.pending_riichi: Optional[int] = None
        self.is_rinshan = False
        self.is_haitei = False

        # Call phase bookkeeping
        self.responders: Dict[int, LegalActions] = {}
        self.responses: Dict[int, object] = {}

    # --- Setup ---

    def deal_tiles(self):
        """Deal 13 tiles per seat, one tile per seat per pass, dealer first."""
        for _ in range(13):
            for k in range(self.num_players):
                seat = (self.dealer_seat + k) % self.num_players
                self.players[seat].hand.deal(self.wall.draw())

        self.event_bus.emit(GameEvent(EventType.DEAL, {
            "players": self.players,
            "wall": self.wall,
            "round_wind": self.round_wind,
            "dealer": self.dealer_seat,
        }))

    # --- Draws ---

    def draw_for(self, seat: int) -> Tile:
        """Draw from the live wall for a seat."""
        tile = self.wall.draw()
        self.players[seat].hand.draw(tile)
        self.acting_seat = seat
        self.is_haitei = self.wall.is_empty
        self.is_rinshan = False
        self.event_bus.emit(GameEvent(EventType.DRAW, {
            "player": seat,
            "tile": tile,
        }))
        return tile

    def draw_replacement_for(self, seat: int) -> Tile:
        """Draw a replacement tile after a quad."""
        tile = self.wall.draw_replacement()
        self.players[seat].hand.draw(tile)
        self.is_rinshan = True
        self.is_haitei = False
        self.event_bus.emit(GameEvent(EventType.DRAW, {
            "player": seat,
            "tile": tile,
            "is_rinshan": True,
        }))
        return tile

    @property
    def can_quad(self) -> bool:
        """A replacement tile is available and the live wall is not exhausted."""
        return self.wall.replacements_left > 0 and not self.wall.is_empty

    # --- Legal actions ---

    def get_draw_actions(self, seat: int) -> LegalActions:
        """Actions after drawing (or after a replacement draw)."""
        player = self.players[seat]
        hand = player.hand
        closed_34 = hand.to_34_array()
        actions = LegalActions(seat=seat)

        if is_agari(closed_34, hand.melds) and self.tsumo_score(seat) is not None:
            actions.can_tsumo = True

        if (hand.is_menzen and not hand.is_riichi and
                player.score >= self.config.riichi_deposit and
                self.wall.remaining >= self.num_players):
            actions.riichi_candidates = self.riichi_candidates(seat)

        if self.can_quad:
            for i in range(34):
                if closed_34[i] != 4:
                    continue
                tiles = hand.tiles_of_kind(i)
                if hand.is_riichi and not self._riichi_kan_keeps_waits(seat, i):
                    continue
                actions.can_ankan.append(tiles)

            if not hand.is_riichi:
                for meld in hand.melds:
                    if meld.meld_type == MeldType.PON:
                        matching = hand.tiles_of_kind(meld.tile_index34)
                        if matching:
                            actions.can_shouminkan.append(matching[0])

        if hand.is_riichi and hand.draw_tile is not None:
            # Riichi locks the hand: discard what was drawn
            actions.can_discard = [hand.draw_tile]
        else:
            actions.can_discard = list(hand.closed_tiles)

        return actions

    def get_after_call_actions(self, seat: int) -> LegalActions:
        """After a pon the claimer discards without drawing."""
        hand = self.players[seat].hand
        return LegalActions(seat=seat, can_discard=list(hand.closed_tiles))

    def get_riichi_discard_actions(self, seat: int) -> LegalActions:
        """After declare_riichi: only discards that keep the hand ready."""
        candidates = self.riichi_candidates(seat)
        hand = self.players[seat].hand
        allowed = {t.index34 for t in candidates}
        return LegalActions(
            seat=seat,
            can_discard=[t for t in hand.closed_tiles if t.index34 in allowed],
        )

    def riichi_candidates(self, seat: int) -> List[Tile]:
        """One tile per kind whose discard leaves the hand tenpai."""
        hand = self.players[seat].hand
        candidates = []
        seen = set()
        closed_34 = hand.to_34_array()
        for tile in hand.closed_tiles:
            if tile.index34 in seen:
                continue
            seen.add(tile.index34)
            closed_34[tile.index34] -= 1
            if get_waiting_tiles(closed_34, hand.melds):
                candidates.append(tile)
            closed_34[tile.index34] += 1
        return candidates

    def _riichi_kan_keeps_waits(self, seat: int, index34: int) -> bool:
        """A riichi seat may only quad the drawn kind, and only if its waits stay the same."""
        hand = self.players[seat].hand
        if hand.draw_tile is None or hand.draw_tile.index34 != index34:
            return False
        before = furiten_waits(hand)
        test_34 = hand.to_34_array()
        test_34[index34] -= 4
        tiles = tuple(hand.tiles_of_kind(index34))
        melds = list(hand.melds) + [Meld(MeldType.ANKAN, tiles)]
        after = get_waiting_tiles(test_34, melds)
        return bool(before) and before == after

    def get_response_actions(self, seat: int, discard_tile: Tile,
                             discard_seat: int) -> LegalActions:
        """Actions in response to another seat's discard."""
        hand = self.players[seat].hand
        closed_34 = hand.to_34_array()
        actions = LegalActions(seat=seat)
        tile_34 = discard_tile.index34

        test_34 = list(closed_34)
        test_34[tile_34] += 1
        if (is_agari(test_34, hand.melds) and not is_furiten(hand)
                and self.ron_score(seat, discard_tile, discard_seat) is not None):
            actions.can_ron = True

        if hand.is_riichi or self.wall.is_empty:
            # Riichi seats only win; the last discard cannot be called
            return actions

        if closed_34[tile_34] >= 2:
            pon_tiles = hand.tiles_of_kind(tile_34)[:2]
            actions.can_pon.append(Meld(
                meld_type=MeldType.PON,
                tiles=tuple(pon_tiles) + (discard_tile,),
                called_tile=discard_tile,
                from_seat=discard_seat,
            ))

        if closed_34[tile_34] >= 3 and self.can_quad:
            kan_tiles = hand.tiles_of_kind(tile_34)[:3]
            actions.can_daiminkan.append(Meld(
                meld_type=MeldType.DAIMINKAN,
                tiles=tuple(kan_tiles) + (discard_tile,),
                called_tile=discard_tile,
                from_seat=discard_seat,
            ))

        return actions

    # --- Scoring ---

    def _win_context(self, seat: int, is_tsumo: bool,
                     loser: Optional[int] = None) -> WinContext:
        player = self.players[seat]
        hand = player.hand
        first_go_around = self.first_draw[seat] and not self.any_call_made
        return WinContext(
            is_tsumo=is_tsumo,
            winner_seat=seat,
            dealer_seat=self.dealer_seat,
            seat_wind_34=player.seat_wind.index34,
            round_wind_34=self.round_wind.index34,
            loser_seat=loser,
            is_riichi=hand.is_riichi,
            is_double_riichi=hand.is_double_riichi,
            is_ippatsu=hand.is_ippatsu,
            is_haitei=is_tsumo and self.is_haitei,
            is_houtei=not is_tsumo and self.wall.is_empty,
            is_rinshan=is_tsumo and self.is_rinshan,
            is_tenhou=is_tsumo and first_go_around and player.is_dealer,
            is_chiihou=is_tsumo and first_go_around and not player.is_dealer,
            honba=self.honba,
            honba_unit=self.config.honba_unit,
            payment_rule=self.config.payment_rule,
            num_players=self.num_players,
        )

    def _ura_kinds(self, seat: int) -> List[int]:
        if self.config.ura_dora and self.players[seat].hand.is_riichi:
            return self.wall.ura_dora_kinds()
        return []

    def tsumo_score(self, seat: int) -> Optional[ScoreResult]:
        hand = self.players[seat].hand
        if hand.draw_tile is None:
            return None
        return calculate_score(
            hand, hand.draw_tile, self._win_context(seat, is_tsumo=True),
            self.wall.dora_kinds(), self._ura_kinds(seat),
        )

    def ron_score(self, seat: int, tile: Tile, from_seat: int) -> Optional[ScoreResult]:
        return calculate_score(
            self.players[seat].hand, tile,
            self._win_context(seat, is_tsumo=False, loser=from_seat),
            self.wall.dora_kinds(), self._ura_kinds(seat),
        )

    # --- Mutations ---

    def declare_riichi(self, seat: int):
        self.pending_riichi = seat
        self.event_bus.emit(GameEvent(EventType.RIICHI_DECLARE, {
            "player": seat,
        }))

    def process_discard(self, seat: int, tile: Tile):
        """Move a tile to the discard pile; banks the deposit on a riichi discard."""
        player = self.players[seat]
        hand = player.hand
        is_tsumogiri = tile == hand.draw_tile
        was_riichi = hand.is_riichi

        hand.discard(tile)

        if self.pending_riichi == seat:
            hand.is_riichi = True
            hand.is_double_riichi = self.first_draw[seat] and not self.any_call_made
            hand.is_ippatsu = True
            hand.riichi_discard_index = len(hand.discard_pool) - 1
            player.score -= self.config.riichi_deposit
            self.cycle.riichi_sticks += 1
            self.pending_riichi = None
            self.event_bus.emit(GameEvent(EventType.RIICHI_ACCEPTED, {
                "player": seat,
                "is_double": hand.is_double_riichi,
                "riichi_sticks": self.cycle.riichi_sticks,
            }))
        elif was_riichi:
            # One-shot window closes on the riichi seat's next discard
            hand.is_ippatsu = False

        self.first_draw[seat] = False
        self.last_discard = tile
        self.last_discard_seat = seat
        self.is_rinshan = False

        self.event_bus.emit(GameEvent(EventType.DISCARD, {
            "player": seat,
            "tile": tile,
            "is_tsumogiri": is_tsumogiri,
        }))
        update_furiten(hand)

    def _mark_call(self, claims_discard: bool):
        """Any call interrupts the first go-around and every one-shot window."""
        self.any_call_made = True
        for p in self.players:
            p.hand.is_ippatsu = False
        if claims_discard and self.last_discard_seat is not None:
            # The claimed tile stays in the pile, marked as called
            self.players[self.last_discard_seat].hand.discard_called[-1] = True

    def process_pon(self, seat: int, meld: Meld):
        hand = self.players[seat].hand
        hand.remove_tiles(t for t in meld.tiles if t != meld.called_tile)
        hand.add_meld(meld)
        hand.draw_tile = None
        self._mark_call(claims_discard=True)
        self.acting_seat = seat
        self.event_bus.emit(GameEvent(EventType.PON, {
            "player": seat,
            "meld": meld,
        }))

    def process_daiminkan(self, seat: int, meld: Meld):
        hand = self.players[seat].hand
        hand.remove_tiles(t for t in meld.tiles if t != meld.called_tile)
        hand.add_meld(meld)
        hand.draw_tile = None
        self._mark_call(claims_discard=True)
        self.acting_seat = seat
        self._after_kan(seat, meld)

    def process_ankan(self, seat: int, tiles: List[Tile]):
        hand = self.players[seat].hand
        hand.remove_tiles(tiles)
        meld = Meld(MeldType.ANKAN, tuple(tiles))
        hand.add_meld(meld)
        self._mark_call(claims_discard=False)
        self._after_kan(seat, meld)

    def process_shouminkan(self, seat: int, tile: Tile):
        hand = self.players[seat].hand
        for i, meld in enumerate(hand.melds):
            if meld.meld_type == MeldType.PON and meld.tile_index34 == tile.index34:
                break
        else:
            raise InvariantViolation(f"no pon of {tile.name} to extend")
        hand.closed_tiles.remove(tile)
        new_meld = Meld(MeldType.SHOUMINKAN, meld.tiles + (tile,),
                        meld.called_tile, meld.from_seat)
        hand.melds[i] = new_meld
        self._mark_call(claims_discard=False)
        self._after_kan(seat, new_meld)

    def _after_kan(self, seat: int, meld: Meld):
        new_dora = None
        if self.config.kan_dora:
            new_dora = self.wall.reveal_next_dora()
        self.event_bus.emit(GameEvent(EventType.KAN, {
            "player": seat,
            "meld": meld,
            "new_dora": new_dora,
        }))
        if new_dora is not None:
            self.event_bus.emit(GameEvent(EventType.DORA_REVEAL, {
                "indicator": new_dora,
            }))
        self.draw_replacement_for(seat)

    # --- Round end ---

    def finish_tsumo(self, seat: int, result: ScoreResult) -> RoundResult:
        """Settle a self-draw win."""
        round_result = RoundResult(self.num_players)
        round_result.winners = [seat]
        round_result.score_results = [(seat, result)]

        for payer, amount in result.payments.items():
            round_result.score_changes[payer] -= amount
            round_result.score_changes[seat] += amount

        self._award_sticks(round_result, seat)
        round_result.dealer_continues = self.players[seat].is_dealer

        self.event_bus.emit(GameEvent(EventType.TSUMO, {
            "player": seat,
            "score_result": result,
        }))
        return round_result

    def finish_ron(self, winners: List[Tuple[int, ScoreResult]],
                   loser: int) -> RoundResult:
        """Settle one or more ron wins on the same discard.

        Every winner is paid in full by the discarder; the deposits go to
        the first winner in turn order from the discarder.
        """
        round_result = RoundResult(self.num_players)
        round_result.loser = loser

        for winner, result in winners:
            round_result.winners.append(winner)
            round_result.score_results.append((winner, result))
            for payer, amount in result.payments.items():
                round_result.score_changes[payer] -= amount
                round_result.score_changes[winner] += amount
            self.event_bus.emit(GameEvent(EventType.RON, {
                "player": winner,
                "from_player": loser,
                "score_result": result,
            }))

        closest = self.closest_seat(loser, [w for w, _ in winners])
        self._award_sticks(round_result, closest)
        round_result.dealer_continues = any(
            self.players[w].is_dealer for w, _ in winners
        )
        return round_result

    def _award_sticks(self, round_result: RoundResult, seat: int):
        sticks = self.cycle.riichi_sticks
        round_result.score_changes[seat] += sticks * self.config.riichi_deposit
        round_result.riichi_sticks_winner = seat
        round_result.riichi_sticks_collected = sticks

    def exhaustive_draw(self) -> RoundResult:
        """Handle exhaustive draw (荒牌流局) with no-ready penalties."""
        round_result = RoundResult(self.num_players)
        round_result.is_draw = True

        tenpai = [i for i in range(self.num_players)
                  if furiten_waits(self.players[i].hand)]
        noten = [i for i in range(self.num_players) if i not in tenpai]
        round_result.tenpai_players = tenpai

        if tenpai and noten:
            total = self.config.noten_penalty_total
            for i in noten:
                round_result.score_changes[i] -= total // len(noten)
            for i in tenpai:
                round_result.score_changes[i] += total // len(tenpai)

        round_result.dealer_continues = self.dealer_seat in tenpai

        self.event_bus.emit(GameEvent(EventType.EXHAUSTIVE_DRAW, {
            "tenpai_players": tenpai,
        }))
        return round_result

    # --- Helpers ---

    def check_hand_sizes(self, acting_seat: Optional[int]):
        """Acting seat holds 14 (melds counted as 3), everyone else 13.

        Also checks that the wall still accounts for every tile.
        """
        self.wall.check_conservation()
        for p in self.players:
            expected = 14 if p.seat == acting_seat else 13
            size = p.hand.effective_size
            if size != expected:
                raise InvariantViolation(
                    f"seat {p.seat} holds {size} tiles, expected {expected}")

    def next_seat(self, seat: int) -> int:
        return (seat + 1) % self.num_players

    def closest_seat(self, from_seat: int, candidates: List[int]) -> int:
        """First candidate in turn order after from_seat."""
        for offset in range(1, self.num_players):
            check = (from_seat + offset) % self.num_players
            if check in candidates:
                return check
        return candidates[0]
