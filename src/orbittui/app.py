"""Main TUI application."""

import logging
import os
import tempfile
from typing import Optional

from textual.app import App

from .controller import Controller
from .screens.browser_screen import BrowserScreen


logger = logging.getLogger(__name__)


class OrbitApp(App):
    """Terminal browser for schema registry profiles, projects and schemas."""

    TITLE = "orbit TUI"
    SUB_TITLE = "Schema Registry Explorer"

    CSS = """
    Screen {
        layout: vertical;
    }

    Header {
        dock: top;
    }
    """

    def __init__(self, controller: Optional[Controller] = None):
        super().__init__()
        self.controller = controller

    def on_mount(self) -> None:
        """Load profiles and show the browser."""
        if self.controller is None:
            self.controller = Controller.from_config()
        if self.controller.state.last_error:
            self.bell()
        logger.info("TUI app initialized successfully")
        self.push_screen(BrowserScreen(self.controller))


def run_tui() -> None:
    """Entry point for running the TUI."""
    # Terminal is owned by Textual, so log to a file only
    log_file = os.path.join(tempfile.gettempdir(), "orbit_tui_debug.log")
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.FileHandler(log_file, mode='w')
        ]
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logger.info(f"Starting TUI, debug log at: {log_file}")

    app = OrbitApp()
    try:
        app.run()
    finally:
        if app.controller is not None:
            app.controller.close()
