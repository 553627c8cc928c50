"""Map Textual key names to abstract actions."""

from typing import Dict, Optional

from .action import Action


KEY_ACTIONS: Dict[str, Action] = {
    "q": Action.QUIT,
    "ctrl+c": Action.QUIT,
    # vim layout: k is up, j is down
    "k": Action.NAVIGATE_UP,
    "up": Action.NAVIGATE_UP,
    "j": Action.NAVIGATE_DOWN,
    "down": Action.NAVIGATE_DOWN,
    "enter": Action.SELECT,
    "escape": Action.BACK,
    "tab": Action.TOGGLE_SUPERGRAPH,
}


def handle_key(key: str) -> Optional[Action]:
    """Return the action bound to `key`, or None for unbound keys."""
    return KEY_ACTIONS.get(key)
