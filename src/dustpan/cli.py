"""CLI interface for Dustpan."""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Callable

import click
from click.core import ParameterSource

from dustpan.core.commit import default_holding_dir
from dustpan.core.scanner import find_associated_files
from dustpan.core.session import ScanSession
from dustpan.core.tree import SelectionStatus, count_recursive, selection_status, walk
from dustpan.models.config import ScanConfiguration
from dustpan.settings import Settings, load_configuration, save_configuration
from dustpan.utils import format_elapsed, normalize_dir, plural

log = logging.getLogger(__name__)

_MARKS = {
    SelectionStatus.ALL: "✅",
    SelectionStatus.PARTIAL: "⚠️",
    SelectionStatus.NONE: "⬜",
}


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _validate_dirs(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> tuple[str, ...]:
    for path in value:
        if not path.strip():
            raise click.BadParameter("directory must not be empty")
    return value


def _scan_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options that override the stored configuration for one run."""
    options = [
        click.option("--days", "-d", type=click.IntRange(min=1), default=None,
                     help="Only report files not accessed for this many days"),
        click.option("--downloads/--no-downloads", default=None, help="Include the Downloads directory"),
        click.option("--documents/--no-documents", default=None, help="Include the Documents directory"),
        click.option("--desktop/--no-desktop", default=None, help="Include the Desktop directory"),
        click.option("--dir", "extra_dirs", multiple=True, callback=_validate_dirs,
                     help="Additional directory to scan (repeatable)"),
        click.option("--smart-filter/--no-smart-filter", default=None,
                     help="Skip binaries, caches and build artifacts"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _apply_overrides(
    config: ScanConfiguration,
    days: int | None,
    downloads: bool | None,
    documents: bool | None,
    desktop: bool | None,
    extra_dirs: tuple[str, ...],
    smart_filter: bool | None,
) -> ScanConfiguration:
    ctx = click.get_current_context()
    changes: dict[str, Any] = {}
    for param, field, value in (
        ("days", "threshold_days", days),
        ("downloads", "downloads", downloads),
        ("documents", "documents", documents),
        ("desktop", "desktop", desktop),
        ("smart_filter", "smart_filter", smart_filter),
    ):
        # Only flags given on the command line override the stored value.
        if value is not None and ctx.get_parameter_source(param) is not ParameterSource.DEFAULT:
            changes[field] = value
    config = dataclasses.replace(config, **changes)
    for path in extra_dirs:
        config = config.with_custom_directory(path)
    return config


def _config_to_dict(config: ScanConfiguration) -> dict[str, Any]:
    return {
        "threshold_days": config.threshold_days,
        "downloads": config.downloads,
        "documents": config.documents,
        "desktop": config.desktop,
        "custom_directories": list(config.custom_directories),
        "smart_filter": config.smart_filter,
        "directories": config.directories(),
    }


def _run_scan(config: ScanConfiguration, as_json: bool) -> ScanSession:
    session = ScanSession()
    if not as_json:
        dirs = config.directories()
        click.echo(
            f"\n{click.style('🔍', bold=True)} Scanning {plural(len(dirs), 'directory', 'directories')} "
            f"for files untouched in {plural(config.threshold_days, 'day')}...\n"
        )
    started = time.monotonic()
    session.scan(config)
    if not as_json:
        elapsed = format_elapsed(time.monotonic() - started)
        click.echo(f"{session.status_message} ({elapsed})\n")
    return session


def _render_tree(session: ScanSession) -> None:
    tree = session.tree
    candidates = session.candidates
    for node, depth in walk(tree, candidates):
        total, selected = count_recursive(tree, candidates, node)
        mark = _MARKS[selection_status(total, selected)]
        indent = "  " * depth
        name = str(node) if depth == 0 else node.name
        click.echo(f"{indent}{mark} {click.style(name, fg='blue', bold=True)} ({selected}/{total})")
        for idx in tree.direct_files(node):
            candidate = candidates[idx]
            tick = click.style("✗", fg="red") if candidate.should_delete else click.style("·", fg="bright_black")
            age = click.style(f"({candidate.days_since_access} days)", fg="bright_black")
            click.echo(f"{indent}    {tick} {candidate.file_name} {age}")


def _tree_to_json(session: ScanSession) -> list[dict[str, Any]]:
    tree = session.tree
    candidates = session.candidates
    nodes = []
    for node, depth in walk(tree, candidates):
        total, selected = count_recursive(tree, candidates, node)
        nodes.append(
            {
                "path": str(node),
                "depth": depth,
                "total": total,
                "selected": selected,
                "status": selection_status(total, selected).value,
            }
        )
    return nodes


def _candidates_to_json(session: ScanSession) -> list[dict[str, Any]]:
    return [dataclasses.asdict(c) for c in session.candidates]


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """Dustpan — sweep away files you have not opened in a while."""
    _setup_logging(verbose)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@_scan_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(
    days: int | None,
    downloads: bool | None,
    documents: bool | None,
    desktop: bool | None,
    extra_dirs: tuple[str, ...],
    smart_filter: bool | None,
    as_json: bool,
) -> None:
    """Scan for stale files (preview only, never moves anything)."""
    config = _apply_overrides(load_configuration(), days, downloads, documents, desktop, extra_dirs, smart_filter)
    session = _run_scan(config, as_json)

    if as_json:
        data = {
            "configuration": _config_to_dict(config),
            "candidates": _candidates_to_json(session),
            "tree": _tree_to_json(session),
        }
        click.echo(json.dumps(data, indent=2))
        return

    if not session.candidates:
        click.echo("No stale files found.")
        return

    _render_tree(session)
    total, _ = session.counts()
    click.echo(f"\nTotal: {click.style(plural(total, 'stale file'), fg='green', bold=True)}\n")


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@_scan_options
@click.option("--exclude", "-x", "excludes", multiple=True, help="Keep this file or directory (repeatable)")
@click.option("--permanent", is_flag=True, help="Delete permanently instead of moving to the holding directory")
@click.option("--holding-dir", type=click.Path(path_type=Path), default=None,
              help="Where moved files go (default: ~/.local/share/dustpan/holding)")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be processed without doing it")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def clean(
    days: int | None,
    downloads: bool | None,
    documents: bool | None,
    desktop: bool | None,
    extra_dirs: tuple[str, ...],
    smart_filter: bool | None,
    excludes: tuple[str, ...],
    permanent: bool,
    holding_dir: Path | None,
    yes: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Scan, then move (or delete) the selected stale files."""
    config = _apply_overrides(load_configuration(), days, downloads, documents, desktop, extra_dirs, smart_filter)
    session = _run_scan(config, as_json)

    for path in excludes:
        if not session.exclude(normalize_dir(path)):
            log.warning("Nothing to exclude at %s", path)

    selected = session.selected()
    if not selected:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "result": None}))
        else:
            click.echo("Nothing to clean.")
        return

    if not as_json:
        _render_tree(session)
        click.echo(f"\nSelected: {click.style(plural(len(selected), 'file'), fg='green', bold=True)}\n")

    if dry_run:
        plan = [
            {"path": c.file_path, "associated": find_associated_files(c.file_path) if c.is_executable else []}
            for c in selected
        ]
        if as_json:
            click.echo(json.dumps({"status": "dry_run", "files": plan}, indent=2))
            return
        for item in plan:
            click.echo(f"  {item['path']}")
            for extra in item["associated"]:
                click.echo(f"    + {extra}")
        click.echo("\n(dry run — no files were touched)")
        return

    if not yes and not as_json:
        if permanent:
            question = f"Permanently delete {plural(len(selected), 'file')}? This cannot be undone."
        else:
            question = f"Move {plural(len(selected), 'file')} to {holding_dir or default_holding_dir()}?"
        if not click.confirm(question, default=False):
            click.echo("Aborted.")
            return

    result = session.commit(permanent=permanent, holding_dir=holding_dir)

    if as_json:
        data = {
            "status": "cleaned" if result.ok else "error",
            "result": {
                "moved": result.moved,
                "associated": result.associated,
                "failed": result.failed,
                "permanent": result.permanent,
                "destination": str(result.destination) if result.destination else None,
                "error": result.error,
            },
        }
        click.echo(json.dumps(data, indent=2))
    elif not result.ok:
        click.echo(f"  {click.style('✗', fg='red')} {result.summary}", err=True)
    elif result.failed:
        click.echo(f"  {click.style('!', fg='yellow')} {result.summary}")
    else:
        click.echo(f"  {click.style('✓', fg='green')} {result.summary}")

    if not result.ok:
        sys.exit(1)


# ── associated ───────────────────────────────────────────────────────────

@main.command()
@click.argument("exe_path", type=click.Path(dir_okay=False))
def associated(exe_path: str) -> None:
    """List the support files that would go with an executable."""
    if not exe_path.lower().endswith(".exe"):
        click.echo(f"'{exe_path}' is not a Windows executable.", err=True)
        sys.exit(1)

    files = find_associated_files(normalize_dir(exe_path))
    if not files:
        click.echo("No associated files.")
        return
    for path in files:
        click.echo(path)


# ── config ───────────────────────────────────────────────────────────────

@main.group("config")
def config_group() -> None:
    """Show or change the stored scan configuration."""


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def config_show(as_json: bool) -> None:
    """Show the stored configuration."""
    data = _config_to_dict(load_configuration())

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    def _on_off(flag: bool) -> str:
        return click.style("on", fg="green") if flag else click.style("off", fg="bright_black")

    click.echo(f"\n  {click.style('Threshold:', bold=True)}    {plural(data['threshold_days'], 'day')}")
    click.echo(f"  {click.style('Downloads:', bold=True)}    {_on_off(data['downloads'])}")
    click.echo(f"  {click.style('Documents:', bold=True)}    {_on_off(data['documents'])}")
    click.echo(f"  {click.style('Desktop:', bold=True)}      {_on_off(data['desktop'])}")
    click.echo(f"  {click.style('Smart filter:', bold=True)} {_on_off(data['smart_filter'])}")
    click.echo(f"  {click.style('Directories:', bold=True)}")
    for path in data["directories"]:
        click.echo(f"    {path}")
    click.echo()


@config_group.command("set")
@_scan_options
def config_set(
    days: int | None,
    downloads: bool | None,
    documents: bool | None,
    desktop: bool | None,
    extra_dirs: tuple[str, ...],
    smart_filter: bool | None,
) -> None:
    """Store new defaults for scan and clean."""
    settings = Settings()
    updated = _apply_overrides(
        load_configuration(settings), days, downloads, documents, desktop, extra_dirs, smart_filter
    )
    save_configuration(updated, settings)
    click.echo(f"Saved to {settings.path}")


@config_group.command("add-dir")
@click.argument("path")
def config_add_dir(path: str) -> None:
    """Add a custom directory to scan."""
    settings = Settings()
    try:
        updated = load_configuration(settings).with_custom_directory(path)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="PATH") from exc
    save_configuration(updated, settings)
    click.echo(f"Added {normalize_dir(path)}")


@config_group.command("remove-dir")
@click.argument("path")
def config_remove_dir(path: str) -> None:
    """Remove a custom directory."""
    settings = Settings()
    current = load_configuration(settings)
    updated = current.without_custom_directory(path)
    if updated.custom_directories == current.custom_directories:
        click.echo(f"'{path}' is not a custom directory.", err=True)
        sys.exit(1)
    save_configuration(updated, settings)
    click.echo(f"Removed {normalize_dir(path)}")
