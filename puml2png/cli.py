"""CLI entry point for puml2png."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from puml2png import __version__
from puml2png.config import DEFAULT_CONFIG_TEMPLATE, PROJECT_CONFIG, Puml2PngConfig, load_config
from puml2png.converter import DiagramConverter
from puml2png.doctor import run_checks
from puml2png.logs import configure_logging
from puml2png.transport import PlantUMLClient
from puml2png.validator import InvalidSourceError, resolve_watch_directory, validate_source_path
from puml2png.watch import DirectoryWatcher, RecencyCheck

app = typer.Typer(
    name="puml2png",
    help="Convert PlantUML (.puml) files to images via a PlantUML server.",
    no_args_is_help=True,
)

config_app = typer.Typer(help="Manage puml2png configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: Puml2PngConfig | None = None


def _get_config() -> Puml2PngConfig:
    if _config is None:
        return load_config()
    return _config


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"puml2png {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to puml2png.yaml")
    ] = None,
    server_url: Annotated[
        str | None, typer.Option("--server-url", help="PlantUML server base URL")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    if server_url:
        _config.server.url = server_url
    level = "debug" if verbose else _config.logging.level
    configure_logging(level, _config.logging.format)


def _make_client(cfg: Puml2PngConfig) -> PlantUMLClient:
    try:
        return PlantUMLClient(
            server_url=cfg.server.url,
            output_format=cfg.server.output_format,
            timeout=cfg.server.timeout,
        )
    except ValueError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


def _print_banner(cfg: Puml2PngConfig, directory: Path) -> None:
    rprint(Panel.fit(
        f"[bold green]puml2png[/bold green] {__version__}\n"
        f"[dim]Server:[/dim] {cfg.server.url}\n"
        f"[dim]Watching:[/dim] {directory}\n"
        f"[dim]Interval:[/dim] {cfg.watch.interval:g}s  "
        f"[dim]Format:[/dim] {cfg.server.output_format}",
        title="PlantUML to image",
    ))


@app.command()
def convert(
    file: Annotated[str, typer.Argument(help="PlantUML file to convert (.puml)")],
) -> None:
    """Convert a single PlantUML file; the image is written beside it."""
    cfg = _get_config()
    try:
        path = validate_source_path(file, cfg.watch.source_extension)
    except InvalidSourceError as e:
        rprint(f"[red]Invalid PlantUML file:[/red] {e}")
        raise typer.Exit(code=1)

    with _make_client(cfg) as client:
        converter = DiagramConverter(client, output_format=cfg.server.output_format)
        result = converter.convert(path)

    if result is None:
        rprint(f"[red]Failed to convert {path}[/red]")
        raise typer.Exit(code=1)
    rprint(f"[green]Converted[/green] {result.source_path} -> {result.artifact_path}")


@app.command()
def watch(
    directory: Annotated[
        str | None,
        typer.Argument(help="Directory to watch (default: current directory)"),
    ] = None,
    interval: Annotated[
        float | None, typer.Option("--interval", "-i", help="Seconds between scans", min=0.1)
    ] = None,
    events: Annotated[
        bool, typer.Option("--events", help="Wake early on file system events")
    ] = False,
) -> None:
    """Watch a directory and convert .puml files as they change."""
    cfg = _get_config()
    try:
        root = resolve_watch_directory(directory, default=Path.cwd())
    except InvalidSourceError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if interval is not None:
        cfg.watch.interval = interval
    if events:
        cfg.watch.use_fs_events = True

    _print_banner(cfg, root.resolve())
    with _make_client(cfg) as client:
        watcher = DirectoryWatcher(
            DiagramConverter(client, output_format=cfg.server.output_format),
            interval=cfg.watch.interval,
            is_recent=RecencyCheck(window=cfg.watch.recency_window),
            extension=cfg.watch.source_extension,
            use_fs_events=cfg.watch.use_fs_events,
        )
        status = watcher.run(root)

    if not status.ok:
        raise typer.Exit(code=status.exit_code)


@app.command()
def doctor() -> None:
    """Check Graphviz availability and PlantUML server reachability."""
    cfg = _get_config()
    with _make_client(cfg) as client:
        report = run_checks(client)

    table = Table(title="puml2png doctor")
    table.add_column("Check", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Detail", style="dim")
    table.add_row(
        "Graphviz (dot)",
        "[green]ok[/green]" if report.graphviz else "[yellow]missing[/yellow]",
        report.graphviz_version or "only needed for a local PlantUML server",
    )
    table.add_row(
        "PlantUML server",
        "[green]ok[/green]" if report.server_reachable else "[red]unreachable[/red]",
        report.server_url,
    )
    rprint(table)

    if not report.ok:
        raise typer.Exit(code=1)


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    cfg = _get_config()
    text = yaml.safe_dump(cfg.model_dump(), sort_keys=False)
    rprint(Syntax(text, "yaml"))


@config_app.command("init")
def config_init(
    force: Annotated[bool, typer.Option("--force", help="Overwrite existing config")] = False,
) -> None:
    """Write a default puml2png.yaml in the current directory."""
    target = Path(PROJECT_CONFIG)
    if target.exists() and not force:
        rprint(f"[yellow]{target} already exists. Use --force to overwrite.[/yellow]")
        raise typer.Exit(code=1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created {target}[/green]")
