"""
adapters.cli.main - CLI adapter for the business action assistant.

Mirrors src/adapters/rest/ but for terminal use. Uses the same
ServiceFactory and AgentExecutor as the REST API so tool sets, draft
gating and retrieval scoping are identical.

Commands
--------
  chat       Interactive chat session         (loads the document index)
  ask        One-shot question                (loads the document index)
  tools      List the tools an agent variant exposes
  index      Build/rebuild the document index, or add a private document

Usage
-----
  python run_cli.py chat --user alice --doc pricing-2024
  python run_cli.py ask "What does the enterprise plan include?" --user alice
  python run_cli.py tools --variant customer_service --json
  python run_cli.py index build --rebuild
  python run_cli.py index add contracts/acme.pdf --doc-id acme-contract
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# ── Ensure src/ is on the path when run as a script ──
_SRC = Path(__file__).resolve().parent.parent.parent
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import typer
from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from domain.exceptions import ConfigurationError
from factory import ServiceFactory
from infrastructure.config import Settings
from infrastructure.rag.document_index import build_document_index, get_data_source

__version__ = "0.1.0"

console = Console()
app = typer.Typer(
    help="Business Action Assistant CLI",
    add_completion=False,
    no_args_is_help=True,
)
index_app = typer.Typer(help="Manage the document index.", no_args_is_help=True)
app.add_typer(index_app, name="index")

_USER_OPTION = typer.Option(
    ..., "--user", "-u",
    envvar="ASSISTANT_USER_ID",
    help="User id the agent acts for (signs every integration call).",
)
_DOC_OPTION = typer.Option(
    None, "--doc", "-d",
    help="Document id the agent may read (repeatable). Omit for public documents only.",
)
_VARIANT_OPTION = typer.Option(
    None, "--variant",
    help="Agent variant: default or customer_service (AGENT_VARIANT when omitted).",
)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

async def _make_factory() -> ServiceFactory:
    """Create a ServiceFactory with the document index loaded."""
    factory = ServiceFactory(Settings.from_env())
    with console.status(
        "[bold cyan]Loading document index (first run may take a minute)…",
        spinner="dots",
    ):
        await factory.initialize()
    console.print("  [green]Index ready.[/green]")
    return factory


def _fail(message: str) -> None:
    console.print(f"[bold red]{message}[/bold red]")
    raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"business-assistant v{__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Commands: Agent
# ---------------------------------------------------------------------------

@app.command()
def ask(
    query: str = typer.Argument(..., help="Your question or request."),
    user: str = _USER_OPTION,
    doc: Optional[List[str]] = _DOC_OPTION,
    variant: Optional[str] = _VARIANT_OPTION,
) -> None:
    """Ask the agent a one-shot question."""

    async def _run() -> None:
        factory = await _make_factory()
        try:
            agent = factory.create_agent(user, document_ids=doc, variant=variant)
        except ConfigurationError as e:
            _fail(str(e))

        with console.status("[bold cyan]Thinking…", spinner="dots"):
            response = await agent.run(query)

        console.print(Panel(Markdown(response), title="Assistant", border_style="green"))

    asyncio.run(_run())


@app.command()
def chat(
    user: str = _USER_OPTION,
    doc: Optional[List[str]] = _DOC_OPTION,
    variant: Optional[str] = _VARIANT_OPTION,
) -> None:
    """Start an interactive chat session."""

    async def _run() -> None:
        factory = await _make_factory()
        try:
            agent = factory.create_agent(user, document_ids=doc, variant=variant)
        except ConfigurationError as e:
            _fail(str(e))

        scope = ", ".join(doc) if doc else "public documents"
        console.print(Panel(
            f"[bold]Business Assistant Chat[/bold]\n"
            f"Acting for [bold]{agent.ctx.user_id}[/bold] · "
            f"{len(agent.tools.names())} tools · scope: {scope}\n"
            "Type your request, or [bold]exit[/bold] / [bold]quit[/bold] to stop.",
            border_style="cyan",
        ))

        while True:
            try:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
            except (KeyboardInterrupt, EOFError):
                console.print("\n[dim]Goodbye![/dim]")
                break

            if user_input.strip().lower() in ("exit", "quit", "q", "bye"):
                console.print("[dim]Goodbye![/dim]")
                break

            if not user_input.strip():
                continue

            with console.status("[bold cyan]Thinking…", spinner="dots"):
                response = await agent.run(user_input)

            console.print()
            console.print(Panel(Markdown(response), title="Assistant", border_style="green"))

    asyncio.run(_run())


@app.command()
def tools(
    variant: Optional[str] = _VARIANT_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the full function schemas."),
) -> None:
    """List the tools an agent variant exposes to the model."""
    config = Settings.from_env()
    # Schemas do not depend on index contents; skip loading embeddings.
    factory = ServiceFactory(config, index=build_document_index(config))
    try:
        registry = factory.build_registry(variant or config.agent_variant)
    except ConfigurationError as e:
        _fail(str(e))

    if as_json:
        console.print_json(json.dumps(registry.to_function_schemas()))
        return

    t = Table(box=box.SIMPLE, padding=(0, 2))
    t.add_column("Tool", style="bold")
    t.add_column("Parameters")
    t.add_column("Description")
    for spec in registry.specs():
        params = ", ".join(
            f"{p.name}*" if p.required else p.name for p in spec.parameters
        )
        t.add_row(spec.name, params or "[dim]—[/dim]", spec.description)
    console.print(t)
    console.print("[dim]* required[/dim]")


# ---------------------------------------------------------------------------
# Commands: Index (admin / first-time setup)
# ---------------------------------------------------------------------------

@index_app.command("build")
def index_build(
    rebuild: bool = typer.Option(
        False, "--rebuild", "-r",
        help="Force rebuild the vectorstore from scratch.",
    ),
) -> None:
    """Build the document index from DATA_DIR (or rebuild it)."""
    config = Settings.from_env()
    with console.status(
        "[bold cyan]Indexing documents, this may take several minutes…",
        spinner="dots",
    ):
        index = get_data_source(config, force_rebuild=rebuild)

    stats = index.get_stats()
    console.print(Panel(
        f"[bold green]Index ready![/bold green]\n"
        f"Documents: {config.data_dir}\n"
        f"Vectors:   {stats.get('vector_count', 0)}",
        border_style="green",
    ))


@index_app.command("add")
def index_add(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to index."),
    doc_id: Optional[str] = typer.Option(None, "--doc-id", help="Id agents use to scope to this document."),
    public: bool = typer.Option(False, "--public", help="Visible to agents with no document scope."),
) -> None:
    """Add one document to the index (private unless --public)."""
    config = Settings.from_env()
    with console.status("[bold cyan]Indexing…", spinner="dots"):
        index = get_data_source(config)
        added = index.add_document(str(path), doc_id=doc_id, private=not public)

    if added:
        console.print(f"[green]Indexed {added} chunks from {path.name}.[/green]")
    else:
        console.print(f"[yellow]Nothing added from {path.name} (already indexed or empty).[/yellow]")


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------

@app.callback()
def _callback(
    version: bool = typer.Option(
        False, "--version", "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log at DEBUG level."),
) -> None:
    """Business Action Assistant CLI"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(
            logging, Settings.from_env().log_level.upper(), logging.INFO,
        ),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
