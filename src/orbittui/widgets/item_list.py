"""List widget whose cursor is driven by the controller."""

from typing import List

from textual.widgets import OptionList


class ItemList(OptionList):
    """Option list that never takes focus; the screen owns all key handling."""

    can_focus = False

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._labels: List[str] = []

    def set_items(self, labels: List[str]) -> None:
        """Replace the options, skipping the rebuild when nothing changed."""
        if labels == self._labels:
            return
        self._labels = list(labels)
        self.clear_options()
        self.add_options(self._labels)

    def sync_cursor(self, index: int) -> None:
        """Move the highlight to `index` (clamped to the option count)."""
        if not self._labels:
            return
        self.highlighted = min(max(index, 0), len(self._labels) - 1)
