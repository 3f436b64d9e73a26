"""Main Click CLI entry point for the memory-bank command.

Entry point registered in pyproject.toml::

    [project.scripts]
    memory-bank = "memory_bank_mcp.cli.main:cli"

Usage examples::

    memory-bank serve
    memory-bank serve --log
    memory-bank status --json-output
    memory-bank init
    memory-bank list
    memory-bank read activeContext.md progress.md
    memory-bank append decisionLog.md "Use FastMCP" --section "## Decision"
"""

from __future__ import annotations

import json
import os
import sys
from typing import Optional

import click

from memory_bank_mcp import __version__
from memory_bank_mcp.config import DEFAULT_LOG_FILE, MemoryBankConfig
from memory_bank_mcp.errors import MemoryBankError
from memory_bank_mcp.services.appender import AppendService
from memory_bank_mcp.services.listing import ListingService
from memory_bank_mcp.services.reader import ReadService
from memory_bank_mcp.storage.store import DocumentStore


@click.group()
@click.version_option(version=__version__, prog_name="memory-bank-mcp")
@click.option(
    "--project-root",
    type=click.Path(file_okay=False),
    default=None,
    help="Project directory. Defaults to VSCODE_CWD or the current directory.",
)
@click.option(
    "--storage-path",
    type=click.Path(exists=False),
    default=None,
    envvar="MEMORY_BANK_STORAGE_PATH",
    help="Path to the memory-bank directory. Derived from the project root if not set.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    project_root: Optional[str],
    storage_path: Optional[str],
) -> None:
    """Memory Bank -- persistent markdown project context for MCP agents."""
    ctx.ensure_object(dict)
    ctx.obj["project_root"] = project_root
    ctx.obj["storage_path"] = storage_path


@cli.command()
@click.option(
    "--log",
    "log_to_file",
    is_flag=True,
    default=False,
    help=f"Also write logs to {DEFAULT_LOG_FILE} in the current directory.",
)
@click.pass_context
def serve(ctx: click.Context, log_to_file: bool) -> None:
    """Run the memory bank MCP server on stdio."""
    from memory_bank_mcp.mcp.server import create_server

    config = _load_config(ctx)
    if log_to_file:
        config.log_file = os.path.abspath(DEFAULT_LOG_FILE)

    server = create_server(config=config)
    server.run(transport="stdio")


@cli.command()
@click.option(
    "--json-output",
    "output_json",
    is_flag=True,
    default=False,
    help="Output status as JSON instead of human-readable text.",
)
@click.pass_context
def status(ctx: click.Context, output_json: bool) -> None:
    """Show whether the memory bank exists and which documents it holds.

    Does not create the memory bank.
    """
    config = _load_config(ctx)
    store = _make_store(config)

    data = {
        "version": __version__,
        "path": str(store.storage_root),
        "exists": store.exists(),
        "files": [],
    }
    if data["exists"]:
        try:
            data["files"] = store.list_names()
        except MemoryBankError as exc:
            _fail(str(exc))

    if output_json:
        click.echo(json.dumps(data, indent=2))
        return

    click.secho("Memory Bank -- Status", fg="cyan", bold=True)
    click.secho("=" * 30, fg="cyan")
    click.echo(f"Path:   {data['path']}")
    click.echo(f"Exists: {'Yes' if data['exists'] else 'No'}")
    if data["files"]:
        click.echo("Files:")
        for name in data["files"]:
            click.echo(f"  {name}")


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create the memory bank and its standard documents if missing."""
    store = _make_store(_load_config(ctx))
    try:
        created = store.ensure_initialized()
    except MemoryBankError as exc:
        _fail(str(exc))

    if not created:
        click.echo(f"Memory bank already exists at {store.storage_root}")
        return
    click.secho(f"Created memory bank at {store.storage_root}", fg="green")
    for name in created:
        click.echo(f"  {name}")


@cli.command(name="list")
@click.pass_context
def list_documents(ctx: click.Context) -> None:
    """List the documents in the memory bank."""
    store = _make_store(_load_config(ctx))
    try:
        names = ListingService(store).list_documents()
    except MemoryBankError as exc:
        _fail(str(exc))
    for name in names:
        click.echo(name)


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def read(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Print the contents of one or more documents."""
    store = _make_store(_load_config(ctx))
    try:
        files = ReadService(store).read_documents(list(names))
    except MemoryBankError as exc:
        _fail(str(exc))

    for name, content in files.items():
        click.secho(f"==> {name} <==", fg="cyan", bold=True)
        if content is None:
            click.secho("(not found)", fg="yellow")
        else:
            click.echo(content)


@cli.command()
@click.argument("file_name")
@click.argument("entry")
@click.option(
    "--section",
    "section_header",
    default=None,
    help="Exact markdown header to append under, e.g. '## Decision'.",
)
@click.pass_context
def append(
    ctx: click.Context,
    file_name: str,
    entry: str,
    section_header: Optional[str],
) -> None:
    """Append a timestamped ENTRY to FILE_NAME."""
    store = _make_store(_load_config(ctx))
    result = AppendService(store).append(file_name, entry, section_header)
    if not result.ok:
        _fail(result.message)
    click.secho(result.message, fg="green")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_config(ctx: click.Context) -> MemoryBankConfig:
    """Build the configuration from the group options, file, and environment."""
    try:
        config = MemoryBankConfig.load(project_root=ctx.obj.get("project_root"))
        storage_path = ctx.obj.get("storage_path")
        if storage_path:
            config = MemoryBankConfig(
                project_root=config.project_root,
                storage_path=storage_path,
                document_extension=config.document_extension,
                log_level=config.log_level,
                log_file=config.log_file,
            )
    except ValueError as exc:
        _fail(f"Failed to load configuration: {exc}")
    return config


def _make_store(config: MemoryBankConfig) -> DocumentStore:
    return DocumentStore(
        storage_path=config.storage_path,
        extension=config.document_extension,
    )


def _fail(message: str) -> None:
    click.secho("ERROR: " + message, fg="red", err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
