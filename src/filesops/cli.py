"""CLI interface for filesops."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any, NoReturn

import click

from filesops.core import file_type, inspector, permissions, search, size
from filesops.errors import FilesOpsError, InvalidFormatError
from filesops.models.file_entry import FileEntry
from filesops.models.permissions import PermissionInfo
from filesops.models.search import SearchOptions
from filesops.models.size import SizedPath
from filesops.settings import Settings
from filesops.utils import format_bytes, format_relative_time


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _fail(error: Exception) -> NoReturn:
    click.echo(click.style(f"Error: {error}", fg="red"), err=True)
    sys.exit(1)


def _human(size_bytes: float) -> str:
    return format_bytes(size_bytes, Settings.instance().get("display.decimals", 2))


def _default(key: str) -> Callable[[], Any]:
    """Option default read from the settings file when the command runs."""
    return lambda: Settings.instance().get(key)


def _size_option(ctx: click.Context, param: click.Parameter, value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return size.parse_size(value)
    except InvalidFormatError as e:
        raise click.BadParameter(str(e)) from e


def _entry_dict(entry: FileEntry) -> dict[str, Any]:
    return {
        "path": str(entry.path),
        "name": entry.name,
        "extension": entry.extension,
        "size": entry.size,
        "is_directory": entry.is_directory,
        "is_file": entry.is_file,
        "created_at": entry.created_at.isoformat(),
        "modified_at": entry.modified_at.isoformat(),
        "accessed_at": entry.accessed_at.isoformat(),
    }


def _perms_dict(info: PermissionInfo) -> dict[str, Any]:
    return {
        "octal": info.octal,
        "symbolic": permissions.format_permissions(info),
        "readable": info.readable,
        "writable": info.writable,
        "executable": info.executable,
    }


def _sized_dict(item: SizedPath) -> dict[str, Any]:
    return {"path": str(item.path), "size": item.size.bytes, "is_directory": item.is_directory}


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """filesops: search files and inspect their type, size and permissions."""
    _setup_logging(verbose)


# ── search ───────────────────────────────────────────────────────────────

@main.command("search")
@click.argument("root", type=click.Path(path_type=Path))
@click.option("--pattern", "-p", default=None, help="Glob matched against entry names (* and ?)")
@click.option("--ext", "-e", "extensions", multiple=True, help="File extension, repeatable")
@click.option(
    "--max-depth",
    type=click.IntRange(min=0),
    default=_default("search.max_depth"),
    help="Levels to descend below ROOT",
)
@click.option("--hidden/--no-hidden", default=_default("search.include_hidden"), help="Include dot-files")
@click.option(
    "--case-sensitive/--ignore-case",
    default=_default("search.case_sensitive"),
    help="Case-sensitive pattern matching",
)
@click.option(
    "--follow-symlinks/--no-follow-symlinks",
    default=_default("search.follow_symlinks"),
    help="Follow symbolic links",
)
@click.option("--min-size", callback=_size_option, help="Minimum file size, e.g. 10KB")
@click.option("--max-size", callback=_size_option, help="Maximum file size, e.g. 1.5MB")
@click.option("--since", type=click.DateTime(), default=None, help="Modified at or after this time")
@click.option("--before", type=click.DateTime(), default=None, help="Modified at or before this time")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def search_cmd(
    root: Path,
    pattern: str | None,
    extensions: tuple[str, ...],
    max_depth: int | None,
    hidden: bool,
    case_sensitive: bool,
    follow_symlinks: bool,
    min_size: int | None,
    max_size: int | None,
    since: datetime | None,
    before: datetime | None,
    as_json: bool,
) -> None:
    """Search ROOT recursively for matching files and directories."""
    options = SearchOptions(
        pattern=pattern,
        extensions=frozenset(extensions),
        max_depth=max_depth,
        include_hidden=hidden,
        case_sensitive=case_sensitive,
        follow_symlinks=follow_symlinks,
        min_size=min_size,
        max_size=max_size,
        modified_since=since,
        modified_before=before,
    )
    try:
        result = search.search(root, options)
    except FilesOpsError as e:
        _fail(e)

    if as_json:
        data = {
            "total_files": result.total_files,
            "total_directories": result.total_directories,
            "total_size": result.total_size,
            "files": [_entry_dict(f) for f in result.files],
            "directories": [_entry_dict(d) for d in result.directories],
        }
        click.echo(json.dumps(data, indent=2))
        return

    for d in result.directories:
        click.echo(f"  {click.style(str(d.path) + '/', fg='blue', bold=True)}")
    for f in result.files:
        click.echo(f"  {str(f.path):60s} {_human(f.size):>10s}")
    click.echo(
        f"\n{result.total_files:,} files, {result.total_directories:,} directories, "
        f"{click.style(_human(result.total_size), fg='green', bold=True)}"
    )


# ── type ─────────────────────────────────────────────────────────────────

@main.command("type")
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--no-content", is_flag=True, help="Classify by extension only")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def type_cmd(paths: tuple[Path, ...], no_content: bool, as_json: bool) -> None:
    """Classify files by extension and magic number."""
    rows = []
    for path in paths:
        if no_content:
            info, source = file_type.detect_from_path(path), "extension"
        else:
            detection = file_type.detect(path)
            info, source = detection.info, detection.source.value
        rows.append((path, info, source))

    if as_json:
        data = [{"path": str(p), "source": s, **info.to_dict()} for p, info, s in rows]
        click.echo(json.dumps(data, indent=2))
        return

    for path, info, source in rows:
        tag = click.style(" [signature]", fg="yellow") if source == "signature" else ""
        click.echo(f"  {str(path):40s} {info.category.value:14s} {info.mime_type}{tag}")


# ── size ─────────────────────────────────────────────────────────────────

@main.command("size")
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--hidden", is_flag=True, help="Include dot-files")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def size_cmd(path: Path, hidden: bool, as_json: bool) -> None:
    """Show the size of a file or directory tree."""
    status = permissions.exists(path)
    if status.is_directory:
        stats = size.get_directory_stats(path, include_hidden=hidden)
        if as_json:
            data = {
                "path": str(path),
                "total_size": stats.total_size.bytes,
                "file_count": stats.file_count,
                "directory_count": stats.directory_count,
                "average_file_size": stats.average_file_size.bytes,
            }
            click.echo(json.dumps(data, indent=2))
            return
        click.echo(f"  Total size:   {click.style(_human(stats.total_size.bytes), fg='green', bold=True)}")
        click.echo(f"  Files:        {stats.file_count:,}")
        click.echo(f"  Directories:  {stats.directory_count:,}")
        click.echo(f"  Average file: {_human(stats.average_file_size.bytes)}")
        return

    try:
        info = size.get_file_size(path)
    except FilesOpsError as e:
        _fail(e)
    if as_json:
        click.echo(json.dumps({"path": str(path), "total_size": info.bytes}, indent=2))
        return
    click.echo(f"  {path}: {click.style(_human(info.bytes), fg='green', bold=True)}")


# ── perms ────────────────────────────────────────────────────────────────

@main.command("perms")
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def perms_cmd(path: Path, as_json: bool) -> None:
    """Show permission bits and effective access of PATH."""
    try:
        details = permissions.get_detailed_info(path)
    except FilesOpsError as e:
        _fail(e)

    perms = details.permissions
    if as_json:
        data = {
            "path": str(path),
            **_perms_dict(perms),
            "owner": permissions.is_owner(path),
            "is_symbolic_link": details.is_symbolic_link,
            "modified_at": details.modified_at.isoformat(),
        }
        click.echo(json.dumps(data, indent=2))
        return

    def _yes_no(flag: bool) -> str:
        return click.style("yes", fg="green") if flag else click.style("no", fg="red")

    click.echo(f"  {path}  {permissions.format_permissions(perms)} ({perms.octal})")
    click.echo(f"  Readable:   {_yes_no(perms.readable)}")
    click.echo(f"  Writable:   {_yes_no(perms.writable)}")
    click.echo(f"  Executable: {_yes_no(perms.executable)}")
    click.echo(f"  Modified:   {format_relative_time(details.modified_at)}")


@main.command("perms-convert")
@click.argument("value")
def perms_convert(value: str) -> None:
    """Convert between octal (755) and symbolic (rwxr-xr-x) permissions."""
    try:
        if value.isdigit():
            click.echo(permissions.octal_to_symbolic(value))
        else:
            click.echo(permissions.symbolic_to_octal(value))
    except InvalidFormatError as e:
        _fail(e)


# ── usage ────────────────────────────────────────────────────────────────

@main.command("usage")
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--hidden", is_flag=True, help="Include dot-files")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def usage_cmd(path: Path, hidden: bool, as_json: bool) -> None:
    """Summarize disk usage of a directory and list its largest files."""
    usage = inspector.get_disk_usage(path, include_hidden=hidden)
    stats = usage.stats

    if as_json:
        data = {
            "path": str(path),
            "total_size": stats.total_size.bytes,
            "file_count": stats.file_count,
            "directory_count": stats.directory_count,
            "largest_files": [_sized_dict(f) for f in usage.largest_files],
        }
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"\n{click.style('📊', bold=True)} Disk usage of {path}\n")
    click.echo(f"  Total size:  {click.style(_human(stats.total_size.bytes), fg='green', bold=True)}")
    click.echo(f"  Files:       {stats.file_count:,}")
    click.echo(f"  Directories: {stats.directory_count:,}")
    if usage.largest_files:
        click.echo("\n  Largest files:")
        for item in usage.largest_files:
            click.echo(f"    {_human(item.size.bytes):>10s}  {item.path}")
    click.echo()


# ── duplicates ───────────────────────────────────────────────────────────

@main.command("duplicates")
@click.argument("root", type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def duplicates_cmd(root: Path, as_json: bool) -> None:
    """List groups of files under ROOT that share the same size."""
    try:
        groups = inspector.find_duplicates_by_size(root)
    except FilesOpsError as e:
        _fail(e)

    if as_json:
        data = [{"size": g.size, "files": [str(f.path) for f in g.files]} for g in groups]
        click.echo(json.dumps(data, indent=2))
        return

    if not groups:
        click.echo("No files share a size.")
        return
    for group in groups:
        click.echo(f"  {click.style(_human(group.size), fg='cyan', bold=True)} ({len(group.files)} files)")
        for f in group.files:
            click.echo(f"    {f.path}")


# ── info ─────────────────────────────────────────────────────────────────

@main.command("info")
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def info_cmd(paths: tuple[Path, ...], as_json: bool) -> None:
    """Show type, size and permissions for each of PATHS."""
    batch = inspector.batch_file_info(paths)

    if as_json:
        data = {
            "successful": [
                {
                    "path": str(r.path),
                    "type": r.type.to_dict(),
                    "size": r.size.bytes,
                    "permissions": _perms_dict(r.permissions),
                }
                for r in batch.successful
            ],
            "failed": [{"path": str(f.path), "error": f.error} for f in batch.failed],
        }
        click.echo(json.dumps(data, indent=2))
    else:
        for report in batch.successful:
            click.echo(
                f"  {click.style('✓', fg='green')} {report.name:30s} {report.type.description:28s} "
                f"{_human(report.size.bytes):>10s}  {permissions.format_permissions(report.permissions)}"
            )
        for failure in batch.failed:
            click.echo(f"  {click.style('✗', fg='red')} {str(failure.path):30s} — {failure.error}")

    if batch.failed:
        sys.exit(1)
