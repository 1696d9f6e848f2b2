"""Console rendering of a middleware chain."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from middlengine.engine import Engine

_LAYER_STYLE = "cyan"
_HANDLER_STYLE = "bold bright_green"


def render_chain(engine: Engine, title: Optional[str] = None) -> Tree:
    """Build a rich tree showing the chain outermost first.

    Each layer is nested under the one wrapping it; the base handler is the
    innermost leaf.
    """
    *layers, base = engine.describe()
    label = Text(title or "request", style="bold")
    label.append(f"  [{engine.state.value}]", style="dim")
    root = Tree(label)
    node = root
    for idx, name in enumerate(layers):
        node = node.add(Text.assemble((f"{idx}. ", "dim"), (name, _LAYER_STYLE)))
    node.add(Text.assemble(("handler ", "dim"), (base, _HANDLER_STYLE)))
    return root


def print_chain(engine: Engine, console: Optional[Console] = None, title: Optional[str] = None) -> None:
    """Print :func:`render_chain` for *engine* to *console* (stdout by default)."""
    (console or Console()).print(render_chain(engine, title=title))
