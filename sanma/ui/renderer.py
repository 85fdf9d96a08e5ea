"""Rich rendering engine - ties together all UI components."""

from typing import Optional

from rich.console import Console

from sanma.engine.event import EventBus, EventType, GameEvent
from sanma.ui.board_layout import (
    render_draw_screen, render_game_end, render_score_changes, render_scores,
    render_win_screen,
)


class Renderer:
    """Subscribes to game events and prints what happens at the table.

    With a human seat the board itself is drawn by the input loop; in
    spectator mode (human_seat None) every discard and call is narrated.
    """

    def __init__(self, console: Console, event_bus: EventBus,
                 human_seat: Optional[int] = 0):
        self.console = console
        self.event_bus = event_bus
        self.human_seat = human_seat
        self.names = []
        self._subscribe_events()

    def _subscribe_events(self):
        self.event_bus.subscribe(EventType.GAME_START, self._on_game_start)
        self.event_bus.subscribe(EventType.ROUND_START, self._on_round_start)
        self.event_bus.subscribe(EventType.RIICHI_ACCEPTED, self._on_riichi)
        self.event_bus.subscribe(EventType.PON, self._on_call)
        self.event_bus.subscribe(EventType.KAN, self._on_call)
        self.event_bus.subscribe(EventType.ROUND_END, self._on_round_end)
        self.event_bus.subscribe(EventType.ROUND_ABORTED, self._on_round_aborted)
        self.event_bus.subscribe(EventType.GAME_END, self._on_game_end)
        if self.human_seat is None:
            self.event_bus.subscribe(EventType.DISCARD, self._on_discard)

    def _name(self, seat: int) -> str:
        return self.names[seat] if 0 <= seat < len(self.names) else f"玩家{seat}"

    def _on_game_start(self, event: GameEvent):
        players = event.data["players"]
        self.names = [name for name, _ in players]
        self.console.print("\n  [bold]对局开始[/bold]")
        render_scores(self.console, players)

    def _on_round_start(self, event: GameEvent):
        self.console.print(f"\n  [bold cyan]{'=' * 50}[/bold cyan]")
        self.console.print(f"  [bold]{event.data['round_label']}[/bold]  "
                           f"庄家: {self._name(event.data['dealer'])}")

    def _on_discard(self, event: GameEvent):
        d = event.data
        mark = " (摸切)" if d.get("is_tsumogiri") else ""
        self.console.print(f"  {self._name(d['player'])} 打 {d['tile'].name}{mark}", style="dim")

    def _on_riichi(self, event: GameEvent):
        player = event.data["player"]
        label = "两立直" if event.data.get("is_double") else "立直"
        self.console.print(f"  [bold yellow]{self._name(player)} {label}![/bold yellow]")

    def _on_call(self, event: GameEvent):
        d = event.data
        meld = d["meld"]
        label = "碰" if event.event_type == EventType.PON else "杠"
        tiles = " ".join(t.name for t in meld.tiles)
        self.console.print(f"  [bold]{self._name(d['player'])} {label}[/bold] {tiles}")

    def _on_round_end(self, event: GameEvent):
        result = event.data["result"]
        if result.is_draw:
            render_draw_screen(self.console, [
                (self._name(i), i in result.tenpai_players)
                for i in range(len(result.score_changes))
            ])
        else:
            for winner, score_result in result.score_results:
                loser = self._name(result.loser) if result.loser is not None else ""
                render_win_screen(self.console, self._name(winner), score_result, loser)

        render_score_changes(self.console, self.names, result.score_changes)
        render_scores(self.console, [(p.name, p.score) for p in event.data["players"]])
        if self.human_seat is not None:
            self.pause()

    def _on_round_aborted(self, event: GameEvent):
        self.console.print(f"  [red]{event.data['round_label']} 中止: {event.data['reason']}[/red]")

    def _on_game_end(self, event: GameEvent):
        render_game_end(self.console, event.data["players"], event.data.get("ranking"))

    def pause(self, message: str = "按回车继续..."):
        """Pause and wait for user input."""
        self.console.input(f"\n  {message}")
