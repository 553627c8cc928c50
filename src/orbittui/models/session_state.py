"""Session state shared by the controller and the renderer."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class SessionState:
    """Last-fetched dataset for every level plus transient UI state.

    Each child list only holds the most recent fetch: entering a new parent
    overwrites it, and going back leaves it untouched.
    """

    profiles: List[str] = field(default_factory=list)
    selected_profile: Optional[str] = None
    projects: List[str] = field(default_factory=list)
    targets: List[str] = field(default_factory=list)
    services: List[str] = field(default_factory=list)

    schema_text: Optional[str] = None
    supergraph_text: Optional[str] = None
    subgraph_entries: List[Tuple[str, str]] = field(default_factory=list)
    showing_supergraph: bool = False

    selected_index: int = 0
    scroll_offset: int = 0
    last_error: Optional[str] = None

    def subgraph_sdl(self, service: str) -> Optional[str]:
        """SDL of `service` in the latest fetched version, None on a miss."""
        for name, sdl in self.subgraph_entries:
            if name == service:
                return sdl
        return None
