"""Greedy CPU policy - optimizes for shanten reduction with basic defense."""

from typing import List, Optional, Sequence

from sanma.core.meld import Meld, MeldType
from sanma.core.tile import Tile, tiles_to_34_array
from sanma.engine.action import Action, ActionType, LegalActions
from sanma.engine.snapshot import TableSnapshot
from sanma.player.policy import DecisionPolicy
from sanma.rules.agari import get_waiting_tiles
from sanma.rules.shanten import shanten


class GreedyPolicy(DecisionPolicy):
    """Policy that greedily minimizes shanten with basic defensive play.

    Strategy:
    - Offense: Choose discards that minimize shanten number
    - Calling: Accept pon if it reduces shanten (but protect menzen potential)
    - Riichi: Declare whenever it is on offer
    - Defense: When an opponent is in riichi and own shanten >= 2, play safe tiles
    """

    def choose_turn_action(self, snapshot: TableSnapshot,
                           legal: LegalActions) -> Action:
        seat = legal.seat

        # Always tsumo if possible
        if legal.can_tsumo:
            return Action(ActionType.TSUMO, seat)

        if legal.can_riichi:
            tile = self.choose_riichi_discard(snapshot, legal.riichi_candidates)
            return Action(ActionType.RIICHI, seat, tile_id=tile.id)

        # Concealed quad only when it leaves the shanten untouched
        for kan_tiles in legal.can_ankan:
            if self._kan_keeps_shanten(snapshot, kan_tiles[0].index34):
                return Action(ActionType.KAN, seat, tile_id=kan_tiles[0].id)

        if legal.can_shouminkan and not self._should_defend(snapshot):
            return Action(ActionType.KAN, seat, tile_id=legal.can_shouminkan[0].id)

        tile = self.choose_discard(snapshot, legal.can_discard)
        return Action(ActionType.DISCARD, seat, tile_id=tile.id)

    def choose_claim(self, snapshot: TableSnapshot,
                     legal: LegalActions) -> Action:
        seat = legal.seat

        # Always ron if possible
        if legal.can_ron:
            return Action(ActionType.RON, seat)

        if legal.can_pon and self._should_call_pon(snapshot, legal.can_pon[0]):
            meld = legal.can_pon[0]
            own = tuple(t.id for t in meld.tiles if t != meld.called_tile)
            return Action(ActionType.PON, seat, tile_ids=own)

        return Action(ActionType.SKIP, seat)

    def choose_discard(self, snapshot: TableSnapshot,
                       available: List[Tile]) -> Tile:
        """Choose the best tile to discard."""
        if self._should_defend(snapshot):
            safe = self._find_safe_tile(snapshot, available)
            if safe:
                return safe

        return self._best_discard_for_shanten(snapshot, available)

    def choose_riichi_discard(self, snapshot: TableSnapshot,
                              candidates: List[Tile]) -> Tile:
        """Choose the riichi discard with the most live waiting tiles."""
        me = snapshot.me
        best_tile = candidates[0]
        best_count = -1

        for tile in candidates:
            test_34 = tiles_to_34_array(me.hand)
            test_34[tile.index34] -= 1
            waits = get_waiting_tiles(test_34, me.melds)
            # Rough count of copies not in own hand
            count = sum(4 - test_34[w] for w in waits)
            if count > best_count:
                best_count = count
                best_tile = tile

        return best_tile

    def _best_discard_for_shanten(self, snapshot: TableSnapshot,
                                  available: List[Tile]) -> Tile:
        me = snapshot.me
        current_34 = tiles_to_34_array(me.hand)
        best_tile = available[0]
        best_key = (99, 99)

        seen = set()
        for tile in available:
            if tile.index34 in seen:
                continue
            seen.add(tile.index34)

            test_34 = list(current_34)
            test_34[tile.index34] -= 1
            key = (shanten(test_34, me.melds), self._tile_discard_priority(tile))
            if key < best_key:
                best_key = key
                best_tile = tile

        return best_tile

    def _tile_discard_priority(self, tile: Tile) -> int:
        """Lower = more willing to discard."""
        if tile.is_honor:
            return 0
        if tile.is_terminal:
            return 1
        if tile.is_red:
            return 3  # Keep the bonus
        return 2

    def _current_shanten(self, snapshot: TableSnapshot) -> int:
        me = snapshot.me
        return shanten(tiles_to_34_array(me.hand), me.melds)

    def _should_defend(self, snapshot: TableSnapshot) -> bool:
        """Defend if an opponent declared riichi and we're far from ready."""
        if not any(opp.is_riichi for opp in snapshot.opponents):
            return False
        return self._current_shanten(snapshot) >= 2

    def _find_safe_tile(self, snapshot: TableSnapshot,
                        available: Sequence[Tile]) -> Optional[Tile]:
        riichi_seats = [opp for opp in snapshot.opponents if opp.is_riichi]
        if not riichi_seats:
            return None

        # 現物: tiles already in a riichi seat's pile
        safe_indices = set()
        for opp in riichi_seats:
            for t in opp.discards:
                safe_indices.add(t.index34)

        for tile in available:
            if tile.index34 in safe_indices:
                return tile

        visible_34 = [0] * 34
        for view in snapshot.seats:
            for t in view.discards:
                visible_34[t.index34] += 1
            for m in view.melds:
                for t in m.tiles:
                    visible_34[t.index34] += 1

        return min(available, key=lambda t: self._danger_score(t, visible_34))

    def _danger_score(self, tile: Tile, visible_34: List[int]) -> int:
        """Lower = safer."""
        if visible_34[tile.index34] >= 3:
            return 0
        if tile.is_honor:
            if visible_34[tile.index34] >= 2:
                return 1
            return 5
        if tile.is_terminal:
            return 3
        return 7

    def _kan_keeps_shanten(self, snapshot: TableSnapshot, index34: int) -> bool:
        me = snapshot.me
        current = tiles_to_34_array(me.hand)
        before = shanten(current, me.melds)
        quad = Meld(MeldType.ANKAN, tuple(t for t in me.hand if t.index34 == index34))
        test_34 = list(current)
        test_34[index34] -= 4
        after = shanten(test_34, list(me.melds) + [quad])
        return after <= before

    def _should_call_pon(self, snapshot: TableSnapshot, meld: Meld) -> bool:
        """Call only when it strictly lowers the shanten after the forced discard."""
        if self._should_defend(snapshot):
            return False

        me = snapshot.me
        current_34 = tiles_to_34_array(me.hand)
        current_s = shanten(current_34, me.melds)

        test_34 = list(current_34)
        test_34[meld.tile_index34] -= 2
        melds = list(me.melds) + [meld]

        new_s = 99
        for i in range(34):
            if test_34[i] > 0:
                test_34[i] -= 1
                new_s = min(new_s, shanten(test_34, melds))
                test_34[i] += 1

        return new_s < current_s
