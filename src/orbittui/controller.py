"""Apply actions to the navigation stack and session state."""

import logging
from typing import Callable, Dict, List, Optional, Protocol

from orbitlib.clients import ServicesByTarget, provider_for_profile
from orbitlib.config import Config, ConfigError, load_config
from orbitlib.errors import format_config_error, format_error_message

from .action import Action
from .models.session_state import SessionState
from .models.view import NavigationStack, ProfileSelect, Projects, Schema, Services, Targets
from .resolver import get_dataset_for_view, get_items_for_view

logger = logging.getLogger(__name__)


class DataProvider(Protocol):
    async def list_projects(self) -> List[str]: ...

    async def targets_by_project(self, project: str) -> List[str]: ...

    async def services_by_target(self, project: str, target: str) -> ServicesByTarget: ...


ProviderFactory = Callable[[str], DataProvider]


class Controller:
    """Single owner and writer of the navigation stack and session state."""

    def __init__(
        self,
        provider_factory: ProviderFactory,
        state: Optional[SessionState] = None,
        navigation: Optional[NavigationStack] = None,
    ):
        self.provider_factory = provider_factory
        self.state = state or SessionState()
        self.navigation = navigation or NavigationStack()
        self.running = True
        self._providers: Dict[str, DataProvider] = {}

    @classmethod
    def from_config(cls, loader: Callable[[], Config] = load_config) -> "Controller":
        """Build a controller with profiles loaded from config.

        A config failure is kept as `last_error`; the profile list stays empty.
        """
        config: Optional[Config] = None
        state = SessionState()
        try:
            config = loader()
            state.profiles = config.profile_names()
            logger.info("Loaded %d profiles from %s", len(state.profiles), config.source_path)
        except ConfigError as e:
            logger.error(f"Failed to load configuration: {e}")
            state.last_error = format_config_error(e)

        def factory(profile: str) -> DataProvider:
            return provider_for_profile(config, profile)

        return cls(factory, state=state)

    def provider(self, profile: str) -> DataProvider:
        """Provider for `profile`, built once and reused for the session."""
        if profile not in self._providers:
            self._providers[profile] = self.provider_factory(profile)
        return self._providers[profile]

    def close(self) -> None:
        """Release every provider built during the session."""
        for provider in self._providers.values():
            close = getattr(provider, "close", None)
            if close is not None:
                close()
        self._providers.clear()

    def reset_selection(self) -> None:
        self.state.selected_index = 0

    def selected_item(self) -> str:
        """Identifier under the cursor, or "" for a placeholder or stale index."""
        items = get_dataset_for_view(self.navigation.current, self.state)
        idx = self.state.selected_index
        if 0 <= idx < len(items):
            return items[idx]
        return ""

    async def update(self, action: Action) -> None:
        """Apply one action. Fetch failures end up in `last_error`."""
        current = self.navigation.current

        if action == Action.QUIT:
            self.running = False

        elif action == Action.NAVIGATE_UP:
            if isinstance(current, Schema):
                self.state.scroll_offset = max(self.state.scroll_offset - 1, 0)
            else:
                self.state.selected_index = max(self.state.selected_index - 1, 0)

        elif action == Action.NAVIGATE_DOWN:
            if isinstance(current, Schema):
                self.state.scroll_offset += 1
            else:
                last = max(len(get_items_for_view(current, self.state)) - 1, 0)
                self.state.selected_index = min(self.state.selected_index + 1, last)

        elif action == Action.SELECT:
            await self.handle_select()

        elif action == Action.BACK:
            if self.navigation.pop():
                logger.info(f"Back to {self.navigation.current}")
                self.reset_selection()

        elif action == Action.TOGGLE_SUPERGRAPH:
            self.toggle_supergraph()

    async def handle_select(self) -> None:
        current = self.navigation.current
        item = self.selected_item()
        if not item or isinstance(current, Schema):
            return

        if isinstance(current, ProfileSelect):
            try:
                projects = await self.provider(item).list_projects()
            except Exception as e:
                self._record_error("list projects", e, {"profile": item})
                return
            self.state.selected_profile = item
            self.state.projects = list(projects)
            self._descend(Projects())

        elif isinstance(current, Projects):
            try:
                provider = self.provider(self.state.selected_profile or "")
                targets = await provider.targets_by_project(item)
            except Exception as e:
                self._record_error("list targets", e, {"project": item})
                return
            self.state.targets = list(targets)
            self._descend(Targets(project=item))

        elif isinstance(current, Targets):
            project = current.project
            try:
                provider = self.provider(self.state.selected_profile or "")
                bundle = await provider.services_by_target(project, item)
            except Exception as e:
                self._record_error("list services", e, {"project": project, "target": item})
                return

            latest = bundle.latest_version
            if latest is None:
                self.state.services = []
                self.state.subgraph_entries = []
                self.state.supergraph_text = None
            else:
                self.state.services = list(latest.services)
                self.state.subgraph_entries = list(latest.subgraphs)
                self.state.supergraph_text = latest.supergraph_sdl
            self.state.scroll_offset = 0
            self.state.showing_supergraph = False
            self._descend(Services(project=project, target=item))

        elif isinstance(current, Services):
            self.state.schema_text = self.state.subgraph_sdl(item)
            self.state.scroll_offset = 0
            self.state.showing_supergraph = False
            self.navigation.push(Schema(project=current.project, target=current.target, service=item))
            self.reset_selection()
            logger.info(f"Showing schema for service '{item}'")

    def toggle_supergraph(self) -> None:
        current = self.navigation.current
        if not isinstance(current, Schema):
            return
        self.state.showing_supergraph = not self.state.showing_supergraph
        self.state.scroll_offset = 0
        if self.state.showing_supergraph:
            self.state.schema_text = self.state.supergraph_text
        else:
            self.state.schema_text = self.state.subgraph_sdl(current.service)

    def _descend(self, view) -> None:
        self.state.last_error = None
        self.navigation.push(view)
        self.reset_selection()
        logger.info(f"Entered {view}")

    def _record_error(self, operation: str, error: Exception, context: dict) -> None:
        logger.error(f"Failed to {operation}: {error}", exc_info=True)
        self.state.last_error = format_error_message(operation, error, context)
