"""Tile display formatting with colors for terminal output."""

from typing import Optional, Sequence

from rich.text import Text

from sanma.core.tile import Tile, TileSuit


# Color schemes
SUIT_COLORS = {
    TileSuit.MAN: "red",
    TileSuit.PIN: "blue",
    TileSuit.SOU: "green",
    TileSuit.HONOR: "yellow",
}


def display_width(name: str) -> int:
    """Display width of a tile label, counting fullwidth characters as two."""
    w = 0
    for ch in name:
        if '\u4e00' <= ch <= '\u9fff' or '\u3000' <= ch <= '\u30ff' or '\uff00' <= ch <= '\uffef':
            w += 2
        else:
            w += 1
    return w


def tile_to_rich_text(tile: Tile, highlight: bool = False) -> Text:
    """Convert a tile to a Rich Text object with appropriate colors."""
    if tile.is_red:
        style = "bold red on white"
    else:
        style = f"bold {SUIT_COLORS[tile.suit]}"
        if highlight:
            style += " on white"
    return Text(f"[{tile.name}]", style=style)


def tiles_to_rich_text(tiles: Sequence[Tile], separator: str = " ") -> Text:
    """Convert a list of tiles to Rich Text."""
    result = Text()
    for i, tile in enumerate(tiles):
        if i > 0:
            result.append(separator)
        result.append_text(tile_to_rich_text(tile))
    return result


def format_discard_pool(tiles: Sequence[Tile], called: Optional[Sequence[bool]] = None,
                        riichi_index: int = -1) -> Text:
    """Format a discard pool with called tiles dimmed and the riichi tile bracketed."""
    result = Text()
    for i, tile in enumerate(tiles):
        if i > 0:
            result.append(" ")
        t = tile_to_rich_text(tile)
        if called and i < len(called) and called[i]:
            t.stylize("dim")
        if i == riichi_index:
            # Sideways riichi tile
            t = Text("(", style="bold") + t + Text(")", style="bold")
        result.append_text(t)
    return result
