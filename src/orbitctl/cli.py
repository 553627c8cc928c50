from __future__ import annotations

import json
import logging
from typing import NoReturn, Optional

import click
from tabulate import tabulate

from orbitlib.config import Config, ConfigError, Profile, load_config
import orbitlib.clients as clients
from orbitlib.errors import format_error_message, format_config_error, suggest_troubleshooting_steps


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--json-output",
    "json_output",
    is_flag=True,
    help="Output JSON instead of tables (pretty-printed)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging to stderr (what the CLI is doing)",
)
@click.pass_context
def cli(ctx: click.Context, json_output: bool, verbose: bool) -> None:
    """Orbit schema registry CLI.

    Browse projects, targets, services and schemas using profiles loaded via
    XDG or the ORBIT_CONFIG environment variable. JSON output is always
    pretty-printed.
    """
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_output
    ctx.obj["verbose"] = verbose

    # Configure logging once per process
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _load(log: logging.Logger) -> Config:
    try:
        log.info("Loading config...")
        cfg = load_config()
        log.info("Loaded config from %s", getattr(cfg, "source_path", "<unknown>"))
    except ConfigError as e:
        click.echo(format_config_error(e), err=True)
        raise SystemExit(2)
    return cfg


def _profile(log: logging.Logger, profile_name: Optional[str]) -> Profile:
    cfg = _load(log)
    try:
        return cfg.get_profile(profile_name)
    except ConfigError as e:
        click.echo(str(e), err=True)
        raise SystemExit(2)


def _fail(ctx: click.Context, operation: str, error: Exception, context: dict) -> NoReturn:
    """Surface a helpful error without a stack trace and exit 2."""
    click.echo(format_error_message(operation, error, context), err=True)
    if ctx.obj.get("verbose"):
        suggestions = suggest_troubleshooting_steps(operation, error)
        if suggestions:
            click.echo("\nTroubleshooting suggestions:", err=True)
            for suggestion in suggestions[:3]:  # Show top 3 suggestions
                click.echo(f"  • {suggestion}", err=True)
    raise SystemExit(2)


profile_option = click.option("--profile", "profile_name", help="Profile name; uses default if omitted")


# PROFILES commands


@cli.group()
@click.pass_context
def profiles(ctx: click.Context) -> None:  # noqa: D401
    """Profile-related commands."""
    pass


@profiles.command("list")
@click.pass_context
def profiles_list(ctx: click.Context) -> None:
    """List configured profiles."""
    log = logging.getLogger("orbitctl.profiles")
    cfg = _load(log)

    rows = []
    for name in cfg.profile_names():
        prof = cfg.profiles[name]
        rows.append(
            [
                name,
                prof.endpoint,
                prof.organization or "—",
                "yes" if (cfg.default_profile == name) else "—",
            ]
        )

    if ctx.obj.get("json"):
        out = {
            "profiles": [
                {
                    "name": r[0],
                    "endpoint": r[1],
                    "organization": None if r[2] == "—" else r[2],
                    "default": r[3] == "yes",
                }
                for r in rows
            ]
        }
        click.echo(json.dumps(out, indent=2, sort_keys=True))
    else:
        log.info("Rendering table output for %d profiles", len(rows))
        click.echo(tabulate(rows, headers=["NAME", "ENDPOINT", "ORGANIZATION", "DEFAULT"]))


# PROJECTS commands


@cli.group()
@click.pass_context
def projects(ctx: click.Context) -> None:  # noqa: D401
    """Project-related commands."""
    pass


@projects.command("list")
@profile_option
@click.pass_context
def projects_list(ctx: click.Context, profile_name: Optional[str]) -> None:
    """List projects in the profile's organization."""
    log = logging.getLogger("orbitctl.projects")
    prof = _profile(log, profile_name)

    try:
        log.info("Listing projects for profile '%s'", prof.name)
        with clients.HiveClient(prof) as client:
            items = client.list_projects()
        log.info("Found %d projects", len(items))
    except Exception as e:
        _fail(ctx, "list projects", e, {"profile": prof.name})

    if ctx.obj.get("json"):
        click.echo(json.dumps({"projects": items}, indent=2, sort_keys=True))
        return

    if not items:
        click.echo("No projects found")
        return

    click.echo(tabulate([[p] for p in items], headers=["PROJECT"]))


# TARGETS commands


@cli.group()
@click.pass_context
def targets(ctx: click.Context) -> None:  # noqa: D401
    """Target-related commands."""
    pass


@targets.command("list")
@click.argument("project")
@profile_option
@click.pass_context
def targets_list(ctx: click.Context, project: str, profile_name: Optional[str]) -> None:
    """List targets of a project."""
    log = logging.getLogger("orbitctl.targets")
    prof = _profile(log, profile_name)

    try:
        log.info("Listing targets for project '%s' in profile '%s'", project, prof.name)
        with clients.HiveClient(prof) as client:
            items = client.targets_by_project(project)
        log.info("Found %d targets", len(items))
    except Exception as e:
        _fail(ctx, "list targets", e, {"profile": prof.name, "project": project})

    if ctx.obj.get("json"):
        click.echo(json.dumps({"project": project, "targets": items}, indent=2, sort_keys=True))
        return

    if not items:
        click.echo("No targets found")
        return

    click.echo(tabulate([[t] for t in items], headers=["TARGET"]))


# SERVICES commands


@cli.group()
@click.pass_context
def services(ctx: click.Context) -> None:  # noqa: D401
    """Service-related commands."""
    pass


@services.command("list")
@click.argument("project")
@click.argument("target")
@profile_option
@click.pass_context
def services_list(ctx: click.Context, project: str, target: str, profile_name: Optional[str]) -> None:
    """List services in the latest schema version of a target."""
    log = logging.getLogger("orbitctl.services")
    prof = _profile(log, profile_name)

    try:
        log.info("Listing services for '%s/%s' in profile '%s'", project, target, prof.name)
        with clients.HiveClient(prof) as client:
            bundle = client.services_by_target(project, target)
    except Exception as e:
        _fail(ctx, "list services", e, {"profile": prof.name, "project": project, "target": target})

    latest = bundle.latest_version
    subgraphs = latest.subgraphs if latest else []

    if ctx.obj.get("json"):
        out = {
            "project": project,
            "target": target,
            "has_latest_version": latest is not None,
            "services": [name for name, _ in subgraphs],
        }
        click.echo(json.dumps(out, indent=2, sort_keys=True))
        return

    if not subgraphs:
        click.echo("No services found")
        return

    rows = [[name, len(sdl.splitlines())] for name, sdl in subgraphs]
    log.info("Rendering %d services", len(rows))
    click.echo(tabulate(rows, headers=["SERVICE", "SDL_LINES"]))


# SCHEMA commands


@cli.group()
@click.pass_context
def schema(ctx: click.Context) -> None:  # noqa: D401
    """Schema-related commands."""
    pass


@schema.command("show")
@click.argument("project")
@click.argument("target")
@click.argument("service", required=False)
@click.option("--supergraph", is_flag=True, help="Show the composed supergraph instead of a subgraph")
@profile_option
@click.pass_context
def schema_show(
    ctx: click.Context,
    project: str,
    target: str,
    service: Optional[str],
    supergraph: bool,
    profile_name: Optional[str],
) -> None:
    """Print a subgraph SDL or the composed supergraph."""
    log = logging.getLogger("orbitctl.schema")
    if not supergraph and not service:
        click.echo("Specify a SERVICE or pass --supergraph", err=True)
        raise SystemExit(2)

    prof = _profile(log, profile_name)

    try:
        log.info("Fetching latest schema version for '%s/%s'", project, target)
        with clients.HiveClient(prof) as client:
            bundle = client.services_by_target(project, target)
    except Exception as e:
        _fail(ctx, "fetch schema", e, {"profile": prof.name, "project": project, "target": target})

    latest = bundle.latest_version
    if latest is None:
        click.echo("No schema version found", err=True)
        raise SystemExit(2)

    if supergraph:
        text = latest.supergraph_sdl
    else:
        text = dict(latest.subgraphs).get(service)

    if text is None:
        what = "supergraph" if supergraph else f"service '{service}'"
        click.echo(f"No schema available for {what}", err=True)
        raise SystemExit(2)

    if ctx.obj.get("json"):
        out = {"project": project, "target": target, "service": service, "sdl": text}
        click.echo(json.dumps(out, indent=2, sort_keys=True))
        return

    click.echo(text)


# CONFIG commands


@cli.group("config")
@click.pass_context
def config_group(ctx: click.Context) -> None:  # noqa: D401
    """Configuration commands."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the resolved configuration as JSON (tokens masked)."""
    log = logging.getLogger("orbitctl.config")
    cfg = _load(log)
    click.echo(cfg.to_json())


@cli.command()
@click.pass_context
def tui(ctx: click.Context) -> None:
    """Launch interactive TUI for schema registry exploration."""
    try:
        from orbittui.app import run_tui
        run_tui()
    except ImportError as e:
        click.echo(f"TUI dependencies not available: {e}", err=True)
        raise SystemExit(1)
    except Exception as e:
        error_msg = format_error_message("launch TUI", e, {})
        click.echo(error_msg, err=True)
        raise SystemExit(1)


def main() -> None:  # entry point
    cli(standalone_mode=True)


if __name__ == "__main__":  # pragma: no cover
    main()
