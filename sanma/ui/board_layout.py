"""Board layout rendering using Rich."""

from typing import List, Optional, Sequence, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sanma.core.tile import Tile, tiles_to_34_array, tile_34_to_name
from sanma.engine.action import LegalActions
from sanma.engine.snapshot import SeatView, TableSnapshot
from sanma.rules.agari import get_waiting_tiles
from sanma.rules.scoring import ScoreResult
from sanma.ui.tile_display import (
    tile_to_rich_text, tiles_to_rich_text, format_discard_pool, display_width,
)

COL_WIDTH = 5  # Display columns per tile slot in the hand row


def render_board(console: Console, snapshot: TableSnapshot, clear: bool = True):
    """Render the table as seen by snapshot.viewer_seat."""
    if clear:
        console.clear()

    header = Text()
    header.append(f"  {snapshot.round_label}  场风:{snapshot.round_wind.kanji}  宝牌指示: ")
    header.append_text(tiles_to_rich_text(snapshot.dora_indicators))
    header.append(f"\n  余牌 {snapshot.wall_remaining}  供托 {snapshot.riichi_sticks}")
    console.print(Panel(header, title="[bold]三人麻将[/bold]", border_style="cyan"))

    # Seats in wind order (東 -> 南 -> 西)
    for view in sorted(snapshot.seats, key=lambda v: v.seat_wind.value):
        _render_seat_row(console, view, view.seat == snapshot.viewer_seat)

    console.print("─" * 60, style="dim")

    if snapshot.me.hand is not None:
        _render_own_hand(console, snapshot.me)


def _render_seat_row(console: Console, view: SeatView, is_self: bool):
    dealer_mark = " (庄)" if view.is_dealer else ""
    riichi_mark = " [bold red]【立直】[/bold red]" if view.is_riichi else ""
    name = f"[bold cyan]{view.name}[/bold cyan]" if is_self else view.name

    console.print(f"  {name} ({view.seat_wind.kanji}{dealer_mark}) {view.score}点{riichi_mark}")

    if view.melds:
        meld_text = Text("  副露: ")
        for i, meld in enumerate(view.melds):
            if i > 0:
                meld_text.append(" | ")
            meld_text.append_text(tiles_to_rich_text(meld.tiles))
        console.print(meld_text)

    if view.discards:
        discard_text = Text("  弃牌: ")
        discard_text.append_text(format_discard_pool(
            view.discards, view.discard_called, view.riichi_discard_index,
        ))
        console.print(discard_text)
    else:
        console.print("  弃牌: ", style="dim")

    console.print()


def display_order(view: SeatView) -> List[Tile]:
    """Own closed tiles sorted, with the drawn tile moved to the end."""
    tiles = [t for t in view.hand if t != view.draw_tile]
    tiles.sort()
    if view.draw_tile is not None and view.draw_tile in view.hand:
        tiles.append(view.draw_tile)
    return tiles


def wait_names(view: SeatView) -> List[str]:
    """Kinds a waiting (13-tile) own hand can win on."""
    if view.hand is None or len(view.hand) + 3 * len(view.melds) != 13:
        return []
    waits = get_waiting_tiles(tiles_to_34_array(view.hand), view.melds)
    return [tile_34_to_name(i) for i in waits]


def _render_own_hand(console: Console, view: SeatView):
    tiles = display_order(view)
    has_draw = view.draw_tile is not None and view.draw_tile in view.hand

    title = "  [bold]手牌[/bold]"
    if view.is_furiten:
        title += "  [red](振听)[/red]"
    waits = wait_names(view)
    if waits:
        title += f"  [dim]听: {' '.join(waits)}[/dim]"
    console.print(title)

    num_text = Text("  ")
    tile_text = Text("  ")
    for i, tile in enumerate(tiles):
        is_draw = has_draw and i == len(tiles) - 1
        if is_draw:
            num_text.append("  ")
            tile_text.append(" ")
        cell = display_width(f"[{tile.name}]") + 1
        label = str(i + 1)
        pad_left = (cell - len(label)) // 2
        num_text.append(" " * pad_left + label + " " * (cell - len(label) - pad_left),
                        style="dim cyan" if is_draw else "dim")
        tile_text.append_text(tile_to_rich_text(tile, highlight=is_draw))
        tile_text.append(" " * max(1, COL_WIDTH - display_width(f"[{tile.name}]")))

    console.print(num_text)
    console.print(tile_text)
    console.print()


def render_action_prompt(console: Console, legal: LegalActions):
    """List the special actions on offer."""
    actions = []
    if legal.can_tsumo:
        actions.append("[t]自摸")
    if legal.can_ron:
        actions.append("[h]荣和")
    if legal.can_riichi:
        actions.append("[r]立直")
    if legal.can_pon:
        actions.append("[p]碰")
    if legal.can_ankan or legal.can_shouminkan or legal.can_daiminkan:
        actions.append("[k]杠")
    if actions:
        console.print(f"  可选操作: {' '.join(actions)}")


def render_win_screen(console: Console, player_name: str,
                      score_result: ScoreResult, loser_name: str = ""):
    """Render winning screen with yaku and score details."""
    console.print()
    if score_result.is_tsumo:
        message = f"{player_name} 自摸和了!"
    else:
        message = f"{player_name} 荣和 {loser_name}!"
    console.print(Panel(f"[bold green]{message}[/bold green]", border_style="green"))

    table = Table(title="役种", show_header=True, border_style="cyan")
    table.add_column("役名", style="bold")
    table.add_column("翻数", justify="right")
    for yaku_name, han in score_result.yaku:
        table.add_row(yaku_name, f"{han}翻")
    console.print(table)

    if score_result.is_yakuman:
        console.print(f"  [bold red]役満! {score_result.total_points}点[/bold red]")
    else:
        console.print(f"  {score_result.rank_name} {score_result.total_points}点")
    console.print()


def render_draw_screen(console: Console, tenpai_info: Sequence[Tuple[str, bool]]):
    """Render the exhaustive draw with each seat's ready status."""
    console.print()
    console.print(Panel("[bold yellow]荒牌流局[/bold yellow]", border_style="yellow"))
    for name, is_tenpai in tenpai_info:
        status = "听牌" if is_tenpai else "未听"
        console.print(f"  {name}: {status}")
    console.print()


def render_score_changes(console: Console, names: Sequence[str], changes: Sequence[int]):
    console.print("  点数变动:")
    for name, change in zip(names, changes):
        if change != 0:
            sign = "+" if change > 0 else ""
            style = "green" if change > 0 else "red"
            console.print(f"    {name}: [{style}]{sign}{change}[/{style}]")


def render_scores(console: Console, players: Sequence[Tuple[str, int]]):
    """Render current scores."""
    table = Table(title="得分", border_style="cyan")
    table.add_column("玩家", style="bold")
    table.add_column("得分", justify="right")
    for name, score in players:
        style = "green" if score > 0 else "red" if score < 0 else ""
        table.add_row(name, f"{score}点", style=style)
    console.print(table)


def render_game_end(console: Console, players: Sequence[Tuple[str, int]],
                    ranking: Optional[Sequence[int]] = None):
    """Render final standings."""
    console.print()
    console.print(Panel("[bold]对局结束[/bold]", border_style="gold1"))

    order = list(ranking) if ranking is not None else sorted(
        range(len(players)), key=lambda i: -players[i][1])

    table = Table(title="最终得分", border_style="gold1")
    table.add_column("排名", justify="center")
    table.add_column("玩家", style="bold")
    table.add_column("得分", justify="right")
    for rank, seat in enumerate(order):
        name, score = players[seat]
        table.add_row(str(rank + 1), name, f"{score}点",
                      style="bold green" if rank == 0 else "")
    console.print(table)
    console.print(f"\n  {players[order[0]][0]} 获胜!")
    console.print()
