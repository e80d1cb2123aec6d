"""
buildbox — CLI entrypoint.

Usage:
    python -m buildbox.main --help
    buildbox resolve services/api
    buildbox build services/api -- --tag api:latest
    buildbox build services/api --check origin/main
    buildbox clean
    buildbox config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from buildbox import __version__
from buildbox.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="buildbox")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to buildbox.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """buildbox — assemble reproducible container build sandboxes."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("BUILDBOX_LOG_LEVEL", "WARNING")

    setup_logging(level=level, log_file=os.environ.get("BUILDBOX_LOG_FILE"))


def _print_closure(closure_dict: dict) -> None:
    requirements = closure_dict["requirements"]
    libraries = closure_dict["libraries"]
    paths = closure_dict["paths"]

    click.secho(f"   Requirements: {len(requirements)}", fg="white", bold=True)
    for name in requirements:
        click.echo(f"     • {name}")
    click.secho(f"   Libraries: {len(libraries)}", fg="white", bold=True)
    for lib in libraries:
        click.echo(f"     • {lib}")
    click.secho(f"   Paths: {len(paths)}", fg="white", bold=True)
    for path in paths:
        click.echo(f"     • {path}")


@cli.command()
@click.argument("service_path", type=click.Path(path_type=Path))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def resolve(ctx: click.Context, service_path: Path, as_json: bool) -> None:
    """Show everything SERVICE_PATH depends on, transitively."""
    from buildbox.core.use_cases.build import resolve_service

    result = resolve_service(service_path, config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    data = result.to_dict()["closure"]
    if not ctx.obj.get("quiet"):
        click.secho(f"\n🔗 {data['service_path']}", fg="cyan", bold=True)
    _print_closure(data)
    click.echo()


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("service_path", type=click.Path(path_type=Path))
@click.argument("docker_args", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--check",
    "check_ref",
    default=None,
    metavar="REF",
    help="Skip the build if no service files changed since this git ref.",
)
@click.option("--no-docker", is_flag=True, help="Assemble the sandbox but don't run docker build.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def build(
    ctx: click.Context,
    service_path: Path,
    docker_args: tuple[str, ...],
    check_ref: str | None,
    no_docker: bool,
    as_json: bool,
) -> None:
    """Assemble a build sandbox for SERVICE_PATH and run docker build.

    Anything after ``--`` is passed through to docker build.

    Examples:

        buildbox build services/api -- --tag api:latest

        buildbox build services/api --check origin/main --no-docker
    """
    from buildbox.core.use_cases.build import build_service

    result = build_service(
        service_path,
        config_path=ctx.obj.get("config_path"),
        check_ref=check_ref,
        docker_args=docker_args,
        run_docker=not no_docker,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if result.skipped:
        click.secho(f"⊘ No service files changed since {check_ref}, skipping build", fg="yellow")
        return

    sandbox = result.sandbox
    assert sandbox is not None

    click.secho(f"📦 Sandbox: {sandbox.root}", fg="green", bold=True)
    click.echo(f"   Service: {sandbox.service_path.as_posix()}")
    if ctx.obj.get("verbose") and result.closure:
        _print_closure(result.closure.to_dict())
    if result.image_built:
        click.secho("✅ Image built", fg="green", bold=True)


@cli.command()
@click.pass_context
def clean(ctx: click.Context) -> None:
    """Empty the build cache."""
    from buildbox.core.config.loader import find_config_file, load_config, project_root
    from buildbox.core.errors import BuildboxError
    from buildbox.core.services.sandbox import clean_cache

    config_path = ctx.obj.get("config_path") or find_config_file()
    try:
        config = load_config(config_path)
        cache_root = project_root(config_path) / config.project.cache_path
        removed = clean_cache(cache_root)
    except (BuildboxError, OSError) as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if removed:
        click.secho(f"🧹 Removed {cache_root}", fg="green")
    else:
        click.echo(f"Nothing to clean at {cache_root}")


@cli.group()
def config() -> None:
    """Project configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate buildbox.yml configuration."""
    from buildbox.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Services:  {result.config.project.services_path}")
        click.echo(f"   Libraries: {result.config.project.libraries_path}")
        click.echo(f"   Locked requirements: {len(result.config.requirement_lock)}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)


if __name__ == "__main__":
    cli()
