"""View variants and the navigation stack for the TUI."""

from dataclasses import dataclass, field
from typing import List, Union


@dataclass(frozen=True)
class ProfileSelect:
    """Root view: pick a deployment profile."""


@dataclass(frozen=True)
class Projects:
    """Projects of the selected profile (the profile lives in session state)."""


@dataclass(frozen=True)
class Targets:
    project: str


@dataclass(frozen=True)
class Services:
    project: str
    target: str


@dataclass(frozen=True)
class Schema:
    project: str
    target: str
    service: str


View = Union[ProfileSelect, Projects, Targets, Services, Schema]


@dataclass
class NavigationStack:
    """Current view plus the exact path of views taken to reach it."""

    current: View = field(default_factory=ProfileSelect)
    history: List[View] = field(default_factory=list)

    def push(self, view: View) -> None:
        """Descend into `view`, remembering where we came from."""
        self.history.append(self.current)
        self.current = view

    def pop(self) -> bool:
        """Return to the previous view. False when already at the root."""
        if not self.history:
            return False
        self.current = self.history.pop()
        return True

    def can_go_back(self) -> bool:
        return bool(self.history)
