"""Single screen that paints the controller's state and forwards keys to it."""

import logging
from typing import Optional

from textual import events
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Header, Static

from ..controller import Controller
from ..keymap import handle_key
from ..models.view import Schema
from ..render import breadcrumb, footer_hints, schema_title, visible_schema
from ..resolver import get_items_for_view
from ..widgets.item_list import ItemList

logger = logging.getLogger(__name__)


class BrowserScreen(Screen):
    """Header breadcrumb, item list or schema pane, and key hints."""

    DEFAULT_CSS = """
    #breadcrumb {
        color: $accent;
        border: round $accent;
        height: 3;
    }

    #error {
        color: $error;
        height: auto;
    }

    #items, #schema {
        height: 1fr;
        border: round $primary;
    }

    #footer-hints {
        color: $text-muted;
        height: 1;
    }
    """

    def __init__(self, controller: Controller, **kwargs):
        super().__init__(**kwargs)
        self.controller = controller
        self.item_list: Optional[ItemList] = None
        self.schema_pane: Optional[Static] = None

    def compose(self):
        """Compose the screen layout."""
        with Vertical():
            yield Header()
            yield Static("", id="breadcrumb", markup=False)
            yield Static("", id="error", markup=False)
            yield ItemList(id="items")
            yield Static("", id="schema", markup=False)
            yield Static("", id="footer-hints", markup=False)

    def on_mount(self) -> None:
        self.item_list = self.query_one("#items", ItemList)
        self.schema_pane = self.query_one("#schema", Static)
        self.refresh_view()

    def on_resize(self, event: events.Resize) -> None:
        self.refresh_view()

    async def on_key(self, event: events.Key) -> None:
        action = handle_key(event.key)
        if action is None:
            return
        event.stop()
        event.prevent_default()

        await self.controller.update(action)
        if not self.controller.running:
            self.app.exit()
            return
        self.refresh_view()

    def refresh_view(self) -> None:
        """Repaint every widget from the current view and session state."""
        if self.item_list is None or self.schema_pane is None:
            return
        nav = self.controller.navigation
        state = self.controller.state

        self.query_one("#breadcrumb", Static).update(breadcrumb(nav.current))
        self.query_one("#footer-hints", Static).update(footer_hints(nav.current, nav.can_go_back()))

        error = self.query_one("#error", Static)
        error.update(state.last_error or "")
        error.display = bool(state.last_error)

        if isinstance(nav.current, Schema):
            self.item_list.display = False
            self.schema_pane.display = True
            self.schema_pane.border_title = schema_title(state.showing_supergraph)
            text, _ = visible_schema(state.schema_text, state.scroll_offset, self.schema_pane.size.height)
            self.schema_pane.update(text)
        else:
            self.schema_pane.display = False
            self.item_list.display = True
            self.item_list.set_items(get_items_for_view(nav.current, state))
            self.item_list.sync_cursor(state.selected_index)
