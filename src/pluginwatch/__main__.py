"""CLI entry point: run the monitor, scan once, list and validate plugins."""

from __future__ import annotations

import sys
import time
import xml.etree.ElementTree as ET
import zipfile
from pathlib import Path

import click
from rich.console import Console

from .core.config import load_config
from .core.logging import setup_logging
from .core.utils import human_size, is_archive_name, is_valid_plugin_name
from .plugins import (
    ExplodedPlugin,
    PluginArchive,
    PluginRegistry,
    SyncReport,
    exploded_descriptors,
    read_archive_descriptor,
    resolve_load_order,
)

console = Console()

VERSION = "0.1.0"


def _common_options(func):
    options = [
        click.option(
            "--home",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            help="Home directory holding settings.json (default: cwd or $PLUGINWATCH_HOME)",
        ),
        click.option(
            "--plugins-dir",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            help="Plugins directory (default: <home>/plugins)",
        ),
        click.option("--verbose", "-v", is_flag=True, help="Verbose output"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _print_report(report: SyncReport) -> None:
    for name in report.extracted:
        console.print(f"  [green]extracted[/green]  [bold]{name}[/bold]")
    for name in report.unloaded:
        console.print(f"  [yellow]unloaded[/yellow]   [bold]{name}[/bold]")
    for name in report.failed:
        console.print(f"  [red]failed[/red]     [bold]{name}[/bold]")
    for name in report.unchanged:
        console.print(f"  [dim]unchanged  {name}[/dim]")
    if report.load_order:
        console.print(f"load order: {', '.join(report.load_order)}", style="dim")
    if not (report.changed or report.unchanged or report.failed):
        console.print("no plugin archives found", style="dim")


# ── CLI entry point ─────────────────────────────────────────────────


@click.group()
@click.version_option(VERSION, prog_name="pluginwatch")
def cli():
    """pluginwatch: hot-deploy plugin archives."""


@cli.command()
@_common_options
@click.option(
    "--dev/--no-dev",
    "development_mode",
    default=None,
    help="Development mode: check every 5s instead of 20s",
)
def run(home: Path | None, plugins_dir: Path | None, verbose: bool, development_mode: bool | None):
    """Watch the plugins directory until interrupted."""
    setup_logging(verbose)
    config = load_config(
        home=home, plugins_dir=plugins_dir, development_mode=development_mode, verbose=verbose
    )
    registry = PluginRegistry.from_config(config)
    registry.start()
    try:
        while registry.monitor.is_running:
            time.sleep(0.5)
    except KeyboardInterrupt:
        console.print("\nstopping", style="dim")
    finally:
        registry.stop()


@cli.command()
@_common_options
def scan(home: Path | None, plugins_dir: Path | None, verbose: bool):
    """Run a single synchronization cycle and report what changed."""
    setup_logging(verbose)
    config = load_config(home=home, plugins_dir=plugins_dir, verbose=verbose)
    registry = PluginRegistry.from_config(config)
    report = registry.monitor.run_cycle()
    if report is None or report.aborted:
        console.print(f"error: unable to process {config.plugins_directory}", style="bold")
        sys.exit(1)
    _print_report(report)


@cli.command("list")
@_common_options
def list_plugins(home: Path | None, plugins_dir: Path | None, verbose: bool):
    """List archives, their exploded state, and the resolved load order."""
    setup_logging(verbose)
    config = load_config(home=home, plugins_dir=plugins_dir, verbose=verbose)
    directory = config.plugins_directory
    if not directory.is_dir():
        console.print(f"error: plugins directory not found: {directory}", style="bold")
        sys.exit(1)

    archives = sorted(
        (
            PluginArchive.from_path(p)
            for p in directory.iterdir()
            if is_archive_name(p.name) and p.is_file()
        ),
        key=lambda a: a.name,
    )
    if not archives:
        console.print("no plugin archives found", style="dim")
    for archive in archives:
        target = archive.exploded_path
        if not is_valid_plugin_name(archive.name):
            status = "[red]invalid name[/red]"
        elif not target.exists():
            status = "[dim]not exploded[/dim]"
        elif ExplodedPlugin.from_path(target).is_stale(archive):
            status = "[yellow]stale[/yellow]"
        else:
            status = "[green]up to date[/green]"
        size = human_size(archive.path.stat().st_size)
        console.print(
            f"  [bold]{archive.name:<24}[/bold] {size:>8}  {status}  [dim]{archive.path.name}[/dim]"
        )

    descriptors = exploded_descriptors(directory)
    if descriptors:
        console.print(f"load order: {', '.join(resolve_load_order(descriptors))}", style="dim")


@cli.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate(archive: Path):
    """Check whether ARCHIVE is a plugin package."""
    try:
        descriptor = read_archive_descriptor(archive)
    except (zipfile.BadZipFile, OSError) as e:
        console.print(f"invalid archive: {e}", style="bold")
        sys.exit(1)
    except ET.ParseError as e:
        console.print(f"invalid plugin.xml: {e}", style="bold")
        sys.exit(1)
    if descriptor is None:
        console.print(f"{archive.name}: not a plugin package (no plugin.xml)", style="bold")
        sys.exit(1)
    console.print(f"[bold]{descriptor.name}[/bold]  {descriptor.version}")
    if descriptor.description:
        console.print(f"  {descriptor.description}", style="dim")
    if descriptor.author:
        console.print(f"  author: {descriptor.author}", style="dim")
    if descriptor.dependencies:
        console.print(f"  depends on: {', '.join(descriptor.dependencies)}", style="dim")


def main():
    cli()


if __name__ == "__main__":
    main()
