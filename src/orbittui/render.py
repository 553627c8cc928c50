"""Pure helpers that turn view state into display text."""

from typing import Optional, Tuple

from .models.view import ProfileSelect, Projects, Schema, Services, Targets, View


NO_SCHEMA = "No schema available"


def breadcrumb(view: View) -> str:
    """Header title derived from the view's identifying fields."""
    if isinstance(view, ProfileSelect):
        return "Welcome to Orbit TUI - Profile Select"
    if isinstance(view, Projects):
        return "Projects"
    if isinstance(view, Targets):
        return f"{view.project} > Targets"
    if isinstance(view, Services):
        return f"{view.project} > {view.target} > Services"
    if isinstance(view, Schema):
        return f"{view.project} > {view.target} > {view.service} > Schema"
    raise TypeError(f"Unknown view: {view!r}")


def footer_hints(view: View, can_go_back: bool) -> str:
    if isinstance(view, Schema):
        return " k/j: scroll │ Tab: toggle supergraph │ Esc: back │ q: quit "
    if can_go_back:
        return " k/j: navigate │ Enter: select │ Esc: back │ q: quit "
    return " k/j: navigate │ Enter: select │ q: quit "


def schema_title(showing_supergraph: bool) -> str:
    if showing_supergraph:
        return "Supergraph Schema - Press TAB to Switch"
    return "Subgraph Schema - Press TAB to Switch"


def visible_schema(text: Optional[str], offset: int, height: int) -> Tuple[str, int]:
    """Slice of `text` visible at `offset`, and the offset actually used.

    The offset is clamped so the last page stays on screen; the state's own
    offset is never modified here.
    """
    lines = (text if text is not None else NO_SCHEMA).splitlines() or [""]
    height = max(height, 1)
    start = min(max(offset, 0), max(len(lines) - height, 0))
    return "\n".join(lines[start:start + height]), start
