"""CLI commands for carryall.

``serve`` runs the dispatcher endpoint, ``call`` performs one bridge call against a running
dispatcher, ``callables`` lists what the trust policy exposes.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from carryall import __logo__, __version__
from carryall.cli.shared.logging_utils import ensure_rotating_log_file
from carryall.cli.shared.parsing import parse_getter, parse_value
from carryall.config.access import get_config
from carryall.config.loader import load_config
from carryall.config.schema import Config
from carryall.server.registry import SCOPE_SEPARATOR
from carryall.utils.exceptions import CarryallError

app = typer.Typer(
    name="carryall",
    help=f"{__logo__} carryall - call server-side Python callables over HTTP",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} carryall v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """carryall - Python callable bridge."""
    pass


def _load_config(config_path: Path | None) -> Config:
    try:
        return load_config(config_path) if config_path else get_config()
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc


def _build_dispatcher(config: Config):
    from carryall.server.app import build_dispatcher

    try:
        return build_dispatcher(config.server)
    except (ImportError, AttributeError, ValueError) as exc:
        console.print(f"[red]Cannot load configured callables: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc


@app.command()
def version():
    """Show the carryall version."""
    console.print(f"{__logo__} carryall v{__version__}")


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind host (default from config)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default from config)"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to config.json"),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
):
    """Start the dispatcher endpoint."""
    import uvicorn

    from carryall.server.app import create_app

    config = _load_config(config_path)
    host = host or config.server.host
    port = port or config.server.port
    level = "DEBUG" if verbose else config.server.log_level.upper()
    log_path = ensure_rotating_log_file("serve", level=level)

    bridge = create_app(_build_dispatcher(config), config=config)
    console.print(f"{__logo__} Starting carryall on http://{host}:{port}{config.server.path}")
    console.print(f"[dim]Logs: {log_path}[/dim]")
    uvicorn.run(bridge, host=host, port=port, log_level=level.lower())


@app.command()
def call(
    callable_name: str = typer.Argument(..., metavar="CALLABLE", help="Callable name, e.g. time or Type::method"),
    params: list[str] | None = typer.Argument(None, help="Positional params, parsed as JSON when possible"),
    fields: list[str] | None = typer.Option(None, "--field", "-f", help="Attribute to project (repeatable)"),
    getters: list[str] | None = typer.Option(None, "--getter", "-g", help="Getter as name or name=key (repeatable)"),
    dispatcher: str | None = typer.Option(None, "--dispatcher", "-d", help="Dispatcher URL"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to config.json"),
):
    """Call a remote callable and print its result as JSON."""
    from carryall.client.builder import CallBuilder

    config = _load_config(config_path)
    builder = CallBuilder(dispatcher, config=config.client)
    try:
        for key in fields or []:
            builder.add_field(key)
        for raw in getters or []:
            name, key = parse_getter(raw)
            builder.add_getter(name, key=key)
        result = builder.call(callable_name, [parse_value(value) for value in params or []])
    except CarryallError as exc:
        console.print(f"[red]Error:[/red] {escape(exc.message)}")
        raise typer.Exit(1) from exc

    if result is None:
        console.print("[dim]Dispatcher returned code; executed locally.[/dim]")
        return
    console.print_json(data=result)


@app.command()
def callables(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to config.json"),
):
    """List callables the dispatcher would expose."""
    config = _load_config(config_path)
    registry = _build_dispatcher(config).registry

    table = Table(title="Exposed Callables")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Kind")
    table.add_column("Target")
    for descriptor in registry.exposed_descriptors:
        kind = "method" if SCOPE_SEPARATOR in descriptor.name else "function"
        target = descriptor.target
        label = f"{getattr(target, '__module__', '')}.{getattr(target, '__qualname__', '')}" if target else "-"
        table.add_row(descriptor.name, kind, label)
    console.print(table)


if __name__ == "__main__":
    app()
