#!/usr/bin/env python3
"""Three-player Riichi Mahjong (三人麻将) - Terminal CLI Game"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from sanma.config import GameConfig
from sanma.engine.action import Action, ActionType, ClaimKind
from sanma.engine.errors import IllegalAction
from sanma.engine.event import EventBus
from sanma.engine.game import GamePhase, GameState
from sanma.engine.game_logger import GameLogger
from sanma.player.cpu import GreedyPolicy
from sanma.ui.board_layout import render_board
from sanma.ui.input_handler import prompt_claim, prompt_turn_action
from sanma.ui.renderer import Renderer

console = Console()

CPU_NAMES = ["CPU 甲", "CPU 乙", "CPU 丙"]


def show_menu() -> str:
    """Show mode selection menu and return the choice."""
    console.print()
    console.print(Panel(
        "[bold cyan]三人麻将[/bold cyan]\n"
        "[dim]Three-player Riichi Mahjong[/dim]",
        border_style="cyan",
        padding=(1, 4),
    ))
    console.print()
    console.print("  选择模式:")
    console.print("    1. 半庄战")
    console.print("    2. 东风战")
    console.print("    3. 观战 (三家电脑)")
    console.print("    0. 退出")
    console.print()
    return Prompt.ask("  >", choices=["0", "1", "2", "3"], default="1", console=console)


def apply_action(game: GameState, action: Action):
    """Send a decision from the keyboard through the command API."""
    seat = action.seat
    t = action.action_type
    if t == ActionType.DISCARD:
        game.discard(seat, action.tile_id)
    elif t == ActionType.RIICHI:
        game.declare_riichi(seat)
        game.discard(seat, action.tile_id)
    elif t == ActionType.TSUMO:
        game.claim(seat, ClaimKind.TSUMO)
    elif t == ActionType.KAN and action.tile_id is not None:
        game.claim(seat, ClaimKind.KAN, (action.tile_id,))
    elif t in (ActionType.RON, ActionType.PON, ActionType.KAN):
        game.claim(seat, ClaimKind(t.value), action.tile_ids)
    else:
        game.skip_claim(seat)


def play_game(choice: str):
    """Play a complete match."""
    is_spectator = choice == "3"
    config = GameConfig(length="east" if choice == "2" else "south")

    event_bus = EventBus()
    human_seat: Optional[int] = None if is_spectator else 0
    Renderer(console, event_bus, human_seat=human_seat)

    if is_spectator:
        names = list(CPU_NAMES)
        policies = [GreedyPolicy(name) for name in names]
    else:
        names = ["你"] + CPU_NAMES[:2]
        policies = [None] + [GreedyPolicy(name) for name in names[1:]]

    logger = GameLogger(names, config.to_dict())
    logger.subscribe_events(event_bus)
    console.print(f"  [dim]对局编号: {logger.session_id}[/dim]")

    game = GameState(config, names, policies, event_bus)
    game.start_match()

    while not game.is_finished:
        seats = game.awaiting_seats
        if not seats:
            if game.phase == GamePhase.LOBBY:
                game.start_match()
                continue
            break
        seat = seats[0]
        snapshot = game.snapshot(seat)
        render_board(console, snapshot, clear=False)

        if game.phase == GamePhase.DISCARD:
            action = prompt_turn_action(console, snapshot, snapshot.legal)
        else:
            action = prompt_claim(console, snapshot, snapshot.legal)

        try:
            apply_action(game, action)
        except IllegalAction as e:
            console.print(f"  [red]{e}[/red]")

    log_path = logger.save()
    console.print(f"  [dim]牌谱已保存: {log_path}[/dim]")


def main():
    """Main entry point."""
    try:
        while True:
            choice = show_menu()
            if choice == "0":
                console.print("\n  再见!\n")
                break
            play_game(choice)
            console.print()
    except (KeyboardInterrupt, EOFError):
        console.print("\n\n  [dim]已退出[/dim]\n")


if __name__ == "__main__":
    main()
