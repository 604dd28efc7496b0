"""CLI entry point for dsymfinder."""

import json
import time
from dataclasses import replace
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from dsymfinder.core.exceptions import DsymFinderError
from dsymfinder.core.indexer import ArchiveIndexer
from dsymfinder.core.locator import DwarfLocator
from dsymfinder.core.settings import Settings, configure_logging, load_settings

app = typer.Typer(
    name="dsymfinder",
    help="Locate DWARF debug symbols in Xcode build archives.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

EXIT_NOT_FOUND = 1
EXIT_ERROR = 2

ArchivesOption = Annotated[
    Path | None,
    typer.Option("--archives", "-a", help="Archive root (defaults to settings)"),
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


def get_settings(ctx: typer.Context) -> Settings:
    """Settings loaded by the top-level callback."""
    settings = ctx.obj
    if settings is None:
        settings = load_settings()
    return settings


def get_locator(ctx: typer.Context, archives: Path | None) -> DwarfLocator:
    """Create a locator for the given archive root or the configured one."""
    settings = get_settings(ctx)
    if archives is not None:
        settings = replace(settings, archives_path=archives)
    return DwarfLocator.from_settings(settings)


def fail(message: str) -> NoReturn:
    """Report an error and exit with the error status."""
    err_console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(EXIT_ERROR)


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="TOML config file")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    ] = None,
    log_file: Annotated[Path | None, typer.Option("--log-file", help="Write logs here")] = None,
) -> None:
    """Locate DWARF debug symbols in Xcode build archives."""
    try:
        settings = load_settings(config)
        configure_logging(log_level or settings.log_level, log_file or settings.log_file)
    except DsymFinderError as e:
        fail(str(e))
    ctx.obj = settings


@app.command()
def lookup(
    ctx: typer.Context,
    identity: Annotated[str, typer.Argument(help="Binary name or bundle identifier")],
    version: Annotated[str, typer.Argument(help="Short version string, e.g. 1.2")],
    build: Annotated[str, typer.Argument(help="Build number (optional)")] = "",
    archives: ArchivesOption = None,
    output_json: JsonOption = False,
) -> None:
    """Print the DWARF path for an app or framework version."""
    locator = get_locator(ctx, archives)

    try:
        result = locator.lookup(identity, version, build)
    except DsymFinderError as e:
        fail(str(e))

    if output_json:
        print(
            json.dumps(
                {
                    "identity": identity,
                    "version": version,
                    "build": build,
                    "path": str(result) if result is not None else None,
                }
            )
        )
    elif result is not None:
        print(result)
    else:
        build_label = f" ({build})" if build else ""
        err_console.print(f"No dSYM for '[cyan]{identity}[/cyan]' {version}{build_label}")

    if result is None:
        raise typer.Exit(EXIT_NOT_FOUND)


@app.command()
def scan(
    ctx: typer.Context,
    archives: ArchivesOption = None,
    output_json: JsonOption = False,
) -> None:
    """Scan an archive root and show what was found."""
    settings = get_settings(ctx)
    root = (archives or settings.archives_path).expanduser().absolute()
    indexer = ArchiveIndexer()

    deadline = None
    if settings.scan_timeout is not None:
        deadline = time.monotonic() + settings.scan_timeout

    try:
        if output_json:
            indexer.scan(root, deadline=deadline)
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                task = progress.add_task(f"Scanning [cyan]{root.name}[/]", total=None)

                def on_progress(build_folder: Path, count: int) -> None:
                    progress.update(
                        task, description=f"[cyan]{build_folder.parent.name}/{build_folder.name}[/]"
                    )

                indexer.scan(root, deadline=deadline, on_progress=on_progress)
    except DsymFinderError as e:
        fail(str(e))

    stats = indexer.stats
    if output_json:
        print(json.dumps({"root": str(root), **stats.to_dict()}))
        return

    console.print("[green]Done![/green]")
    console.print(f"  Archives: {stats.archives}")
    console.print(f"  Symbol bundles: {stats.bundles}")
    console.print(f"  Lookup keys: {stats.keys}")
    if stats.skipped:
        console.print(f"  [dim]Skipped build folders: {stats.skipped}[/]")
    if stats.collisions:
        console.print(f"  [yellow]Overwritten keys: {stats.collisions}[/]")
    if stats.errors:
        console.print(f"  [red]Errors: {len(stats.errors)}[/red]")
        for error in stats.errors:
            console.print(f"    {error}")


@app.command("list")
def list_entries(
    ctx: typer.Context,
    archives: ArchivesOption = None,
    identity: Annotated[
        str | None, typer.Option("--identity", "-i", help="Only show this identity")
    ] = None,
    output_json: JsonOption = False,
) -> None:
    """List every indexed identity, version and build."""
    locator = get_locator(ctx, archives)

    try:
        entries = sorted(locator.entries())
    except DsymFinderError as e:
        fail(str(e))

    if identity is not None:
        entries = [entry for entry in entries if entry[0] == identity]

    if output_json:
        print(
            json.dumps(
                [
                    {"identity": i, "version": v, "build": b or None, "path": str(p)}
                    for i, v, b, p in entries
                ]
            )
        )
        return

    if not entries:
        console.print("No dSYMs indexed")
        return

    table = Table("Identity", "Version", "Build", "DWARF path")
    for entry_identity, version, build, path in entries:
        table.add_row(entry_identity, version, build or "[dim]any[/]", str(path))
    console.print(table)


if __name__ == "__main__":
    app()
