"""Resolve the selectable labels for a view."""

from typing import List

from .models.session_state import SessionState
from .models.view import ProfileSelect, Projects, Schema, Services, Targets, View


SCHEMA_MENU = ["View SDL", "View Supergraph"]

PLACEHOLDERS = {
    ProfileSelect: "(No profiles found)",
    Projects: "(No projects found)",
    Targets: "(No targets found)",
    Services: "(No services found)",
}


def get_dataset_for_view(view: View, state: SessionState) -> List[str]:
    """Raw identifiers backing a view, without any placeholder row."""
    if isinstance(view, ProfileSelect):
        return state.profiles
    if isinstance(view, Projects):
        return state.projects
    if isinstance(view, Targets):
        return state.targets
    if isinstance(view, Services):
        return state.services
    if isinstance(view, Schema):
        return SCHEMA_MENU
    raise TypeError(f"Unknown view: {view!r}")


def get_items_for_view(view: View, state: SessionState) -> List[str]:
    """Labels to display for a view; empty levels show a single placeholder."""
    items = get_dataset_for_view(view, state)
    if not items and not isinstance(view, Schema):
        return [PLACEHOLDERS[type(view)]]
    return list(items)
