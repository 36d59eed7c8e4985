"""CLI entry point for protobuild.

Invoked as::

    protobuild [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m protobuild.cli.main

Commands
--------
build       Resolve protoc, extract the dependency closure, generate bindings
deps        Print the dependency closure of the root schema files
which       Print the vendored protoc path for this host
platforms   List the supported platforms and their protoc builds
version     Show version information
"""
from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from protobuild.config import BuildConfig
from protobuild.errors import BuildError
from protobuild.generators import available_generators

console = Console()
err_console = Console(stderr=True)


def _fail(exc: BuildError) -> NoReturn:
    """Print a one-line diagnostic naming the failed stage and exit 1."""
    err_console.print(
        f"[red]Error[/red] {escape(f'[{exc.stage}]')}: {escape(str(exc))}",
        soft_wrap=True,
    )
    sys.exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_config(config_path: str | None, **overrides: Any) -> BuildConfig:
    """Load the build configuration, exiting on error."""
    try:
        config = BuildConfig.load(config_path) if config_path else BuildConfig.from_env()
        return config.with_overrides(**overrides)
    except BuildError as exc:
        _fail(exc)


def _config_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by every command that reads a build config."""
    options = [
        click.option(
            "--config",
            "config_path",
            type=click.Path(exists=False, dir_okay=False),
            default=None,
            help="YAML build configuration file.",
        ),
        click.option(
            "--root",
            "roots",
            multiple=True,
            help="Root schema file (repeatable). Overrides the config roots.",
        ),
        click.option("--project-root", default=None, help="Include root and protoc working directory."),
        click.option("--out-dir", default=None, help="Build scratch directory (default: $OUT_DIR or build)."),
        click.option("--vendored-root", default=None, help="Directory holding the vendored protoc builds."),
        click.option(
            "--timeout",
            type=float,
            default=None,
            help="Seconds to wait for protoc (default: wait indefinitely).",
        ),
        click.option(
            "--lenient-manifest",
            is_flag=True,
            default=False,
            help="Accept dependency manifests without the expected target label.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _overrides(
    roots: tuple[str, ...],
    project_root: str | None,
    out_dir: str | None,
    vendored_root: str | None,
    timeout: float | None,
    lenient_manifest: bool,
) -> dict[str, Any]:
    return {
        "roots": roots or None,
        "project_root": project_root,
        "out_dir": out_dir,
        "vendored_root": vendored_root,
        "timeout": timeout,
        "strict_manifest": False if lenient_manifest else None,
    }


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="protobuild")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Build-time protobuf code generation with a vendored protoc."""
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from protobuild import __version__
    from protobuild.platforms import PlatformKey

    table = Table(show_header=False, box=None)
    table.add_row("[bold]protobuild[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", str(PlatformKey.current()))
    console.print(table)


# ---------------------------------------------------------------------------
# platforms command
# ---------------------------------------------------------------------------


@cli.command(name="platforms")
def platforms_command() -> None:
    """List the supported platforms and their vendored protoc builds."""
    from protobuild.platforms import supported_platforms

    table = Table(title="Vendored protoc builds")
    table.add_column("OS", style="bold")
    table.add_column("Arch")
    table.add_column("Binary")
    for key, binary in supported_platforms():
        arch = "any" if key.arch == "*" else key.arch
        table.add_row(key.os, arch, binary.value)
    console.print(table)


# ---------------------------------------------------------------------------
# which command
# ---------------------------------------------------------------------------


@cli.command(name="which")
@click.option("--config", "config_path", type=click.Path(exists=False, dir_okay=False), default=None)
@click.option("--vendored-root", default=None, help="Directory holding the vendored protoc builds.")
def which_command(config_path: str | None, vendored_root: str | None) -> None:
    """Print the vendored protoc path for this host."""
    from protobuild.pipeline import locate_protoc

    config = _load_config(config_path, vendored_root=vendored_root)
    try:
        protoc = locate_protoc(config)
    except BuildError as exc:
        _fail(exc)
    click.echo(protoc)


# ---------------------------------------------------------------------------
# deps command
# ---------------------------------------------------------------------------


@cli.command(name="deps")
@_config_options
def deps_command(config_path: str | None, **options: Any) -> None:
    """Print the dependency closure of the root schema files, one per line."""
    from protobuild.pipeline import resolve_dependencies

    config = _load_config(config_path, **_overrides(**options))
    try:
        files = resolve_dependencies(config)
    except BuildError as exc:
        _fail(exc)
    for path in files:
        click.echo(path)


# ---------------------------------------------------------------------------
# build command
# ---------------------------------------------------------------------------


@cli.command(name="build")
@_config_options
@click.option(
    "--target",
    "-t",
    type=click.Choice(available_generators(), case_sensitive=False),
    default=None,
    help="Code generator to run (default: python).",
)
def build_command(config_path: str | None, target: str | None, **options: Any) -> None:
    """Resolve protoc, extract the dependency closure and generate bindings.

    Examples:

    \b
        protobuild build --root protos/perfetto/trace/trace.proto
        protobuild build --config protobuild.yaml --out-dir build/ --timeout 120
    """
    from protobuild.pipeline import run_build

    config = _load_config(config_path, target=target, **_overrides(**options))
    try:
        result = run_build(config)
    except BuildError as exc:
        _fail(exc)

    console.print(
        f"[bold]Resolved[/bold] {len(result.files)} schema file(s) "
        f"from {len(config.roots)} root(s)"
    )
    console.print(
        f"[bold]{escape(result.generated.summary())}[/bold] "
        f"[dim]→ {escape(str(result.output_dir))}[/dim]"
    )


if __name__ == "__main__":
    cli()
