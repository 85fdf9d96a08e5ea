"""Game logger - records complete match data for replay and debugging."""

import json
import os
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from sanma.core.tile import Tile, tile_34_to_short
from sanma.engine.event import EventBus, EventType, GameEvent

LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(
    os.path.abspath(__file__)))), "logs")


def _tile_str(tile: Tile) -> str:
    """mpsz name, honors as 1z-7z, red fives as 0p/0s."""
    if tile.is_red:
        return tile.name
    return tile_34_to_short(tile.index34)


def _tiles_str(tiles) -> List[str]:
    return [_tile_str(t) for t in tiles]


class GameLogger:
    """Records every round (wall, initial hands, actions, result) to one JSON file per match."""

    def __init__(self, player_names: List[str], config_info: dict,
                 log_dir: Optional[str] = None):
        self.session_id = uuid.uuid4().hex[:12]
        self.timestamp = datetime.now().isoformat()
        self.player_names = list(player_names)
        self.config_info = config_info
        self.log_dir = log_dir or LOG_DIR

        self.rounds: List[dict] = []
        self.final_scores: Optional[Dict[str, int]] = None
        self._current_round: Optional[dict] = None

    def subscribe_events(self, event_bus: EventBus):
        """Subscribe to engine events for automatic logging."""
        event_bus.subscribe(EventType.ROUND_START, self._on_round_start)
        event_bus.subscribe(EventType.DEAL, self._on_deal)
        event_bus.subscribe(EventType.DRAW, self._on_draw)
        event_bus.subscribe(EventType.DISCARD, self._on_discard)
        event_bus.subscribe(EventType.PON, self._on_pon)
        event_bus.subscribe(EventType.KAN, self._on_kan)
        event_bus.subscribe(EventType.RIICHI_ACCEPTED, self._on_riichi)
        event_bus.subscribe(EventType.TSUMO, self._on_tsumo)
        event_bus.subscribe(EventType.RON, self._on_ron)
        event_bus.subscribe(EventType.ROUND_END, self._on_round_end)
        event_bus.subscribe(EventType.ROUND_ABORTED, self._on_round_aborted)
        event_bus.subscribe(EventType.GAME_END, self._on_game_end)

    def save(self, final_scores: Optional[Dict[str, int]] = None) -> str:
        """Write the match log to a JSON file and return its path."""
        if final_scores is not None:
            self.final_scores = final_scores

        log_data = {
            "session_id": self.session_id,
            "timestamp": self.timestamp,
            "config": self.config_info,
            "players": self.player_names,
            "final_scores": self.final_scores,
            "rounds": self.rounds,
        }

        os.makedirs(self.log_dir, exist_ok=True)
        filepath = os.path.join(self.log_dir, f"game_{self.session_id}.json")
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(log_data, f, ensure_ascii=False, indent=2)

        return filepath

    # --- Event handlers ---

    def _on_round_start(self, event: GameEvent):
        d = event.data
        round_data = {
            "round_id": uuid.uuid4().hex[:8],
            "label": d["round_label"],
            "dealer": d["dealer"],
            "honba": d["honba"],
            "riichi_sticks": d["riichi_sticks"],
            "wall": None,
            "dora_indicators": _tiles_str(d["dora_indicators"]),
            "initial_hands": {},
            "actions": [],
            "result": None,
        }
        self._current_round = round_data
        self.rounds.append(round_data)

    def _on_deal(self, event: GameEvent):
        """Called after the initial deal: records the wall and starting hands."""
        if self._current_round is None:
            return
        players = event.data["players"]
        wall = event.data["wall"]

        self._current_round["wall"] = {
            "tile_ids": [t.id for t in wall.all_tiles],
            "tile_names": _tiles_str(wall.all_tiles),
        }
        for i, p in enumerate(players):
            self._current_round["initial_hands"][self.player_names[i]] = {
                "seat": i,
                "wind": p.seat_wind.kanji,
                "is_dealer": p.is_dealer,
                "tiles": _tiles_str(sorted(p.hand.closed_tiles)),
            }

    def _log_action(self, action_type: str, player: int, **kwargs):
        if self._current_round is None:
            return

        entry = {
            "action": action_type,
            "player": self.player_names[player] if 0 <= player < len(self.player_names) else "?",
            "seat": player,
        }
        for key, val in kwargs.items():
            if isinstance(val, Tile):
                entry[key] = _tile_str(val)
            elif isinstance(val, (list, tuple)) and val and isinstance(val[0], Tile):
                entry[key] = _tiles_str(val)
            else:
                entry[key] = val

        self._current_round["actions"].append(entry)

    def _on_draw(self, event: GameEvent):
        d = event.data
        extra = {}
        if d.get("is_rinshan"):
            extra["is_rinshan"] = True
        self._log_action("draw", d["player"], tile=d["tile"], **extra)

    def _on_discard(self, event: GameEvent):
        d = event.data
        self._log_action("discard", d["player"],
                         tile=d["tile"], tsumogiri=d.get("is_tsumogiri", False))

    def _on_pon(self, event: GameEvent):
        d = event.data
        meld = d["meld"]
        self._log_action("pon", d["player"],
                         tiles=list(meld.tiles),
                         from_player=self.player_names[meld.from_seat])

    def _on_kan(self, event: GameEvent):
        d = event.data
        meld = d["meld"]
        self._log_action(meld.meld_type.value, d["player"],
                         tiles=list(meld.tiles),
                         new_dora=d.get("new_dora"))

    def _on_riichi(self, event: GameEvent):
        d = event.data
        self._log_action("riichi", d["player"], is_double=d.get("is_double", False))

    def _on_tsumo(self, event: GameEvent):
        self._log_action("tsumo", event.data["player"])

    def _on_ron(self, event: GameEvent):
        d = event.data
        self._log_action("ron", d["player"],
                         from_player=self.player_names[d["from_player"]])

    def _on_round_end(self, event: GameEvent):
        """Log the round result."""
        if self._current_round is None:
            return
        result = event.data["result"]

        result_data = {
            "is_draw": result.is_draw,
            "tenpai": [self.player_names[i] for i in result.tenpai_players],
            "winners": [self.player_names[w] for w in result.winners],
            "loser": self.player_names[result.loser] if result.loser is not None else None,
            "score_changes": {
                self.player_names[i]: change
                for i, change in enumerate(result.score_changes)
            },
            "riichi_sticks_collected": result.riichi_sticks_collected,
        }

        if result.score_results:
            result_data["yaku"] = {}
            for winner, score_result in result.score_results:
                result_data["yaku"][self.player_names[winner]] = {
                    "han": score_result.han,
                    "fu": score_result.fu,
                    "limit": score_result.limit,
                    "total_points": score_result.total_points,
                    "yaku_list": [
                        {"name": name, "han": han}
                        for name, han in score_result.yaku
                    ],
                }

        self._current_round["result"] = result_data
        self._current_round = None

    def _on_round_aborted(self, event: GameEvent):
        if self._current_round is None:
            return
        self._current_round["result"] = {"aborted": event.data["reason"]}
        self._current_round = None

    def _on_game_end(self, event: GameEvent):
        self.final_scores = {name: score for name, score in event.data["players"]}
