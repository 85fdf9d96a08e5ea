"""Keyboard input for the externally controlled seat."""

from typing import List

from rich.console import Console
from rich.prompt import Prompt

from sanma.core.tile import Tile
from sanma.engine.action import Action, ActionType, LegalActions
from sanma.engine.snapshot import TableSnapshot
from sanma.ui.board_layout import display_order, render_action_prompt


def prompt_turn_action(console: Console, snapshot: TableSnapshot,
                       legal: LegalActions) -> Action:
    """Ask for a turn action: a tile number to discard, or t/r/k."""
    seat = legal.seat
    tiles = display_order(snapshot.me)
    allowed = {t.id for t in legal.can_discard}

    # Riichi locks the hand; only confirm the forced discard
    if snapshot.me.is_riichi and len(legal.can_discard) == 1 and not legal.has_action:
        tile = legal.can_discard[0]
        console.input(f"  立直中, 摸切 [bold]{tile.name}[/bold] (回车)")
        return Action(ActionType.DISCARD, seat, tile_id=tile.id)

    render_action_prompt(console, legal)
    while True:
        choice = Prompt.ask(f"  出牌 1-{len(tiles)}", console=console).strip().lower()

        if choice == "t" and legal.can_tsumo:
            return Action(ActionType.TSUMO, seat)

        if choice == "r" and legal.can_riichi:
            tile = _pick_tile(console, legal.riichi_candidates, "立直宣言牌")
            return Action(ActionType.RIICHI, seat, tile_id=tile.id)

        if choice == "k" and (legal.can_ankan or legal.can_shouminkan):
            options = [group[0] for group in legal.can_ankan] + list(legal.can_shouminkan)
            tile = options[0] if len(options) == 1 else _pick_tile(console, options, "杠")
            return Action(ActionType.KAN, seat, tile_id=tile.id)

        if choice.isdigit():
            idx = int(choice) - 1
            if 0 <= idx < len(tiles):
                if tiles[idx].id in allowed:
                    return Action(ActionType.DISCARD, seat, tile_id=tiles[idx].id)
                console.print("  [red]这张牌不能打出[/red]")
                continue

        console.print("  [red]输入无效, 请重试[/red]")


def prompt_claim(console: Console, snapshot: TableSnapshot,
                 legal: LegalActions) -> Action:
    """Ask whether to call the last discard."""
    seat = legal.seat
    discard = snapshot.last_discard
    name = discard.name if discard is not None else "?"
    console.print(f"  上家打出 [bold]{name}[/bold]")
    render_action_prompt(console, legal)

    choices = ["s"]
    if legal.can_ron:
        choices.append("h")
    if legal.can_pon:
        choices.append("p")
    if legal.can_daiminkan:
        choices.append("k")

    choice = Prompt.ask("  [s]跳过", choices=choices, default="s", console=console)
    if choice == "h":
        return Action(ActionType.RON, seat)
    if choice == "p":
        return Action(ActionType.PON, seat)
    if choice == "k":
        return Action(ActionType.KAN, seat)
    return Action(ActionType.SKIP, seat)


def _pick_tile(console: Console, options: List[Tile], title: str) -> Tile:
    console.print(f"  选择{title}:")
    for i, tile in enumerate(options):
        console.print(f"    {i + 1}. {tile.name}")
    choices = [str(i + 1) for i in range(len(options))]
    idx = int(Prompt.ask("  >", choices=choices, console=console)) - 1
    return options[idx]
