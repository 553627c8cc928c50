from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from orbitlib.clients import ClientError, LatestVersion, ServicesByTarget
from orbitlib.config import Config, ConfigError, Profile, load_config
from orbittui.action import Action
from orbittui.controller import Controller
from orbittui.models.session_state import SessionState
from orbittui.models.view import ProfileSelect, Projects, Schema, Services, Targets
from orbittui.resolver import get_items_for_view


class FakeProvider:
    """In-memory provider that records every call it receives."""

    def __init__(
        self,
        projects: Optional[List[str]] = None,
        targets: Optional[Dict[str, List[str]]] = None,
        bundles: Optional[Dict[tuple, ServicesByTarget]] = None,
        fail: Optional[Exception] = None,
    ):
        self.projects = projects or []
        self.targets = targets or {}
        self.bundles = bundles or {}
        self.fail = fail
        self.calls: List[tuple] = []

    async def list_projects(self) -> List[str]:
        self.calls.append(("list_projects",))
        if self.fail:
            raise self.fail
        return self.projects

    async def targets_by_project(self, project: str) -> List[str]:
        self.calls.append(("targets_by_project", project))
        if self.fail:
            raise self.fail
        return self.targets.get(project, [])

    async def services_by_target(self, project: str, target: str) -> ServicesByTarget:
        self.calls.append(("services_by_target", project, target))
        if self.fail:
            raise self.fail
        return self.bundles.get((project, target), ServicesByTarget())


BUNDLE = ServicesByTarget(
    latest_version=LatestVersion(
        services=["payments", "users"],
        subgraphs=[("payments", "type Payment { id: ID! }"), ("users", "type User { id: ID! }")],
        supergraph_sdl="type Query { payments: [Payment] users: [User] }",
    )
)


def make_controller(provider: FakeProvider, profiles=("default",)) -> Controller:
    return Controller(lambda profile: provider, state=SessionState(profiles=list(profiles)))


async def drill_to_services(controller: Controller) -> None:
    for _ in range(3):
        await controller.update(Action.SELECT)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(
        projects=["billing", "search"],
        targets={"billing": ["prod", "dev"]},
        bundles={("billing", "prod"): BUNDLE},
    )


@pytest.mark.asyncio
async def test_select_profile_loads_projects():
    fake = FakeProvider(projects=["proj-a", "proj-b"])
    controller = make_controller(fake)
    controller.state.selected_index = 0

    await controller.update(Action.SELECT)

    assert controller.navigation.current == Projects()
    assert controller.state.projects == ["proj-a", "proj-b"]
    assert controller.state.selected_profile == "default"
    assert controller.state.selected_index == 0
    assert controller.state.last_error is None


@pytest.mark.asyncio
async def test_select_profile_failure_records_error_and_stays():
    fake = FakeProvider(fail=ClientError("Connection to https://registry failed: refused"))
    controller = make_controller(fake)

    await controller.update(Action.SELECT)

    assert controller.navigation.current == ProfileSelect()
    assert not controller.navigation.can_go_back()
    assert controller.state.last_error
    assert "refused" in controller.state.last_error
    assert controller.state.projects == []
    assert controller.state.selected_profile is None


@pytest.mark.asyncio
async def test_missing_config_is_reported_on_select():
    def factory(profile):
        raise ConfigError("No config loaded")

    controller = Controller(factory, state=SessionState(profiles=["default"]))
    await controller.update(Action.SELECT)

    assert controller.navigation.current == ProfileSelect()
    assert "No config loaded" in controller.state.last_error


@pytest.mark.asyncio
async def test_successful_fetch_clears_previous_error(provider):
    controller = make_controller(provider)
    controller.state.last_error = "old failure"

    await controller.update(Action.SELECT)

    assert controller.state.last_error is None


@pytest.mark.asyncio
async def test_full_drill_down_to_schema(provider):
    controller = make_controller(provider)

    await drill_to_services(controller)
    assert controller.navigation.current == Services(project="billing", target="prod")
    assert controller.state.targets == ["prod", "dev"]
    assert controller.state.services == ["payments", "users"]
    assert controller.state.supergraph_text == BUNDLE.latest_version.supergraph_sdl

    await controller.update(Action.NAVIGATE_DOWN)
    await controller.update(Action.SELECT)

    assert controller.navigation.current == Schema(project="billing", target="prod", service="users")
    assert controller.state.schema_text == "type User { id: ID! }"
    assert controller.state.scroll_offset == 0
    assert controller.state.showing_supergraph is False
    assert provider.calls == [
        ("list_projects",),
        ("targets_by_project", "billing"),
        ("services_by_target", "billing", "prod"),
    ]


@pytest.mark.asyncio
async def test_target_fetch_failure_commits_nothing(provider):
    controller = make_controller(provider)
    await controller.update(Action.SELECT)
    await controller.update(Action.SELECT)
    controller.state.services = ["stale"]

    provider.fail = ClientError("GraphQL error: target gone")
    await controller.update(Action.SELECT)

    assert controller.navigation.current == Targets(project="billing")
    assert controller.state.services == ["stale"]
    assert "target gone" in controller.state.last_error


@pytest.mark.asyncio
async def test_selection_stays_in_bounds():
    controller = make_controller(FakeProvider(), profiles=["a", "b", "c"])

    for _ in range(10):
        await controller.update(Action.NAVIGATE_DOWN)
        assert 0 <= controller.state.selected_index <= 2
    assert controller.state.selected_index == 2

    for _ in range(10):
        await controller.update(Action.NAVIGATE_UP)
        assert 0 <= controller.state.selected_index <= 2
    assert controller.state.selected_index == 0


@pytest.mark.asyncio
async def test_selection_on_placeholder_row_stays_at_zero():
    controller = make_controller(FakeProvider(), profiles=())

    await controller.update(Action.NAVIGATE_DOWN)
    await controller.update(Action.NAVIGATE_UP)
    await controller.update(Action.NAVIGATE_DOWN)

    assert controller.state.selected_index == 0


@pytest.mark.asyncio
async def test_select_on_placeholder_profile_does_nothing():
    fake = FakeProvider(projects=["billing"])
    controller = make_controller(fake, profiles=())

    await controller.update(Action.SELECT)

    assert controller.navigation.current == ProfileSelect()
    assert fake.calls == []


@pytest.mark.asyncio
async def test_scrolling_in_schema_view(provider):
    controller = make_controller(provider)
    await drill_to_services(controller)
    await controller.update(Action.SELECT)

    await controller.update(Action.NAVIGATE_UP)
    assert controller.state.scroll_offset == 0

    for _ in range(5):
        await controller.update(Action.NAVIGATE_DOWN)
    assert controller.state.scroll_offset == 5
    assert controller.state.selected_index == 0

    await controller.update(Action.NAVIGATE_UP)
    assert controller.state.scroll_offset == 4


@pytest.mark.asyncio
async def test_toggle_supergraph_and_back(provider):
    controller = make_controller(provider)
    await drill_to_services(controller)
    await controller.update(Action.SELECT)
    await controller.update(Action.NAVIGATE_DOWN)
    await controller.update(Action.NAVIGATE_DOWN)

    await controller.update(Action.TOGGLE_SUPERGRAPH)
    assert controller.state.showing_supergraph is True
    assert controller.state.schema_text == "type Query { payments: [Payment] users: [User] }"
    assert controller.state.scroll_offset == 0

    await controller.update(Action.NAVIGATE_DOWN)
    await controller.update(Action.TOGGLE_SUPERGRAPH)
    assert controller.state.showing_supergraph is False
    assert controller.state.schema_text == "type Payment { id: ID! }"
    assert controller.state.scroll_offset == 0


@pytest.mark.asyncio
async def test_toggle_outside_schema_is_ignored(provider):
    controller = make_controller(provider)
    await drill_to_services(controller)

    await controller.update(Action.TOGGLE_SUPERGRAPH)

    assert controller.state.showing_supergraph is False
    assert controller.state.schema_text is None


@pytest.mark.asyncio
async def test_back_from_schema_keeps_services(provider):
    controller = make_controller(provider)
    await drill_to_services(controller)
    await controller.update(Action.SELECT)
    calls_before = list(provider.calls)

    await controller.update(Action.BACK)

    assert controller.navigation.current == Services(project="billing", target="prod")
    assert controller.state.services == ["payments", "users"]
    assert controller.state.selected_index == 0
    assert provider.calls == calls_before


@pytest.mark.asyncio
async def test_back_at_root_is_noop():
    controller = make_controller(FakeProvider(), profiles=["a", "b"])
    await controller.update(Action.NAVIGATE_DOWN)

    await controller.update(Action.BACK)

    assert controller.navigation.current == ProfileSelect()
    assert controller.state.selected_index == 1


@pytest.mark.asyncio
async def test_reentering_a_parent_overwrites_child_list(provider):
    provider.bundles[("billing", "dev")] = ServicesByTarget(
        latest_version=LatestVersion(services=["inventory"], subgraphs=[("inventory", "type Item")])
    )
    controller = make_controller(provider)
    await drill_to_services(controller)
    assert controller.state.services == ["payments", "users"]

    await controller.update(Action.BACK)
    await controller.update(Action.NAVIGATE_DOWN)
    await controller.update(Action.SELECT)

    assert controller.navigation.current == Services(project="billing", target="dev")
    assert controller.state.services == ["inventory"]
    assert controller.state.supergraph_text is None


@pytest.mark.asyncio
async def test_select_in_schema_view_is_noop(provider):
    controller = make_controller(provider)
    await drill_to_services(controller)
    await controller.update(Action.SELECT)
    view = controller.navigation.current

    await controller.update(Action.SELECT)

    assert controller.navigation.current == view
    assert len(controller.navigation.history) == 4


@pytest.mark.asyncio
async def test_missing_service_sdl_is_a_lookup_miss(provider):
    controller = make_controller(provider)
    await drill_to_services(controller)
    controller.state.services.append("removed")
    controller.state.selected_index = 2

    await controller.update(Action.SELECT)

    assert controller.navigation.current == Schema(project="billing", target="prod", service="removed")
    assert controller.state.schema_text is None
    assert controller.state.last_error is None


@pytest.mark.asyncio
async def test_end_to_end_without_latest_version():
    fake = FakeProvider(projects=["billing"], targets={"billing": ["prod"]})
    controller = make_controller(fake, profiles=["default"])

    await drill_to_services(controller)

    assert controller.navigation.current == Services(project="billing", target="prod")
    assert controller.state.services == []
    assert controller.state.subgraph_entries == []
    assert controller.state.supergraph_text is None
    assert get_items_for_view(controller.navigation.current, controller.state) == ["(No services found)"]

    await controller.update(Action.SELECT)

    assert controller.navigation.current == Services(project="billing", target="prod")
    assert controller.state.schema_text is None


@pytest.mark.asyncio
async def test_quit_and_noop_actions(provider):
    controller = make_controller(provider)

    await controller.update(Action.TICK)
    await controller.update(Action.RENDER)
    assert controller.running
    assert controller.navigation.current == ProfileSelect()

    await controller.update(Action.QUIT)
    assert controller.running is False


def test_from_config_lists_profiles_default_first(tmp_path):
    cfg = Config(
        default_profile="prod",
        profiles={"dev": Profile(name="dev"), "prod": Profile(name="prod")},
        source_path=tmp_path / "config.yaml",
    )
    controller = Controller.from_config(loader=lambda: cfg)

    assert controller.state.profiles == ["prod", "dev"]
    assert controller.state.last_error is None


@pytest.mark.asyncio
async def test_from_config_failure_is_not_fatal():
    def broken_loader():
        raise ConfigError("No config file found. Set ORBIT_CONFIG or create ~/.config/orbit/config.yaml")

    controller = Controller.from_config(loader=broken_loader)

    assert controller.state.profiles == []
    assert "No configuration file found" in controller.state.last_error
    assert controller.running

    await controller.update(Action.SELECT)
    assert controller.navigation.current == ProfileSelect()


@pytest.mark.parametrize(
    "body",
    [
        "version: abc\n",
        "profiles: [a, b]\n",
        "profiles:\n  dev: oops\n",
    ],
)
def test_from_config_malformed_file_is_not_fatal(tmp_path, monkeypatch, body):
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(body)
    monkeypatch.setenv("ORBIT_CONFIG", str(cfg_file))

    controller = Controller.from_config()

    assert controller.state.profiles == []
    assert "Invalid config" in controller.state.last_error
    assert controller.running
    assert controller.navigation.current == ProfileSelect()


def test_from_config_directory_path_is_not_fatal(tmp_path):
    controller = Controller.from_config(loader=lambda: load_config(tmp_path))

    assert controller.state.profiles == []
    assert "Cannot read config" in controller.state.last_error


def test_from_config_directory_in_env_is_not_fatal(tmp_path, monkeypatch):
    monkeypatch.setenv("ORBIT_CONFIG", str(tmp_path))

    controller = Controller.from_config()

    assert controller.state.profiles == []
    assert "ORBIT_CONFIG path not found" in controller.state.last_error


class ClosingProvider(FakeProvider):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.closed = False

    def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_provider_is_reused_per_profile_and_closed():
    built: List[ClosingProvider] = []

    def factory(profile):
        provider = ClosingProvider(projects=["billing"], targets={"billing": ["prod"]})
        built.append(provider)
        return provider

    controller = Controller(factory, state=SessionState(profiles=["default"]))
    await controller.update(Action.SELECT)
    await controller.update(Action.SELECT)
    await controller.update(Action.BACK)
    await controller.update(Action.SELECT)

    assert len(built) == 1
    assert built[0].calls == [
        ("list_projects",),
        ("targets_by_project", "billing"),
        ("targets_by_project", "billing"),
    ]

    controller.close()
    assert built[0].closed
