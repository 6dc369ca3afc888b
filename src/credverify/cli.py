"""CLI entry point for the credential verification client.

Provides commands:
  - upload: Submit a credential file and display the backend's analysis
  - formats: List the credential formats the backend can detect
  - health: Check whether the verification backend is up
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from credverify.config import load_client_config
from credverify.formatter import (
    display_error,
    display_file_info,
    display_format_catalog,
    display_health,
    display_selected_file,
)
from credverify.models import AppState, SelectedFile, WorkflowSnapshot, WorkflowState
from credverify.upload.client import CredentialServiceClient
from credverify.upload.exceptions import CredentialUploadError, SizeLimitExceededError
from credverify.upload.progress import UploadProgressDisplay
from credverify.upload.schemas import FormatCatalog, HealthStatus
from credverify.upload.workflow import UploadWorkflow, is_accepted_extension

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Credential verification client - upload credentials and inspect their analysis",
    rich_markup_mode="rich",
)
console = Console()


def setup_logging(verbose: bool) -> None:
    """Route ``credverify`` log records through Rich."""
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger("credverify")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def app_callback(
    ctx: typer.Context,
    server: Annotated[
        str | None,
        typer.Option("--server", "-s", help="Verification backend base URL"),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to client_config.json"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Initialize shared state for all commands."""
    setup_logging(verbose)
    try:
        config = load_client_config(config_path, base_url=server)
    except (OSError, ValueError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(code=1)
    ctx.obj = AppState(config=config, verbose=verbose)


def get_state(ctx: typer.Context) -> AppState:
    """Type-safe accessor for AppState from Typer context."""
    if ctx.obj is None:
        console.print("[red]Application state not initialized.[/red]")
        raise typer.Exit(code=1)
    return ctx.obj


@app.command()
def upload(
    ctx: typer.Context,
    file: Annotated[
        Path,
        typer.Argument(
            exists=True, dir_okay=False, readable=True, help="Credential file to submit"
        ),
    ],
    description: Annotated[
        str | None,
        typer.Option("--description", "-m", help="Description sent with the file"),
    ] = None,
    show_formats: Annotated[
        bool,
        typer.Option("--show-formats", help="Also list the backend's supported formats"),
    ] = False,
) -> None:
    """Upload a credential file and display the backend's analysis."""
    state = get_state(ctx)
    config = state.config

    selected = SelectedFile.from_path(file)
    if not is_accepted_extension(selected, config.accepted_extensions):
        console.print(
            f"[yellow]Warning:[/yellow] {selected.extension or 'no extension'} is not one of "
            f"{', '.join(config.accepted_extensions)}; uploading anyway."
        )

    async def _run_upload() -> tuple[WorkflowSnapshot, FormatCatalog | None]:
        async with CredentialServiceClient(config) as client:
            workflow = UploadWorkflow(client, config)
            workflow.select_file(selected)
            display_selected_file(selected, console)

            catalog_task = asyncio.create_task(workflow.load_catalog())
            with UploadProgressDisplay(console) as display:
                unsubscribe = workflow.subscribe(display.update)
                try:
                    snapshot = await workflow.submit(description)
                finally:
                    unsubscribe()
            catalog = await catalog_task
            return snapshot, catalog

    try:
        snapshot, catalog = asyncio.run(_run_upload())
    except SizeLimitExceededError as e:
        display_error(str(e), console)
        raise typer.Exit(code=1)

    if snapshot.state is WorkflowState.COMPLETED and snapshot.result is not None:
        display_file_info(snapshot.result, console)
    else:
        display_error(snapshot.error or "Upload did not complete", console)

    if show_formats:
        if catalog is not None:
            console.print()
            display_format_catalog(catalog, console)
        else:
            console.print("[dim]Supported formats unavailable.[/dim]")

    if snapshot.state is not WorkflowState.COMPLETED:
        raise typer.Exit(code=1)


@app.command()
def formats(ctx: typer.Context) -> None:
    """List the credential formats the backend can detect."""
    state = get_state(ctx)

    async def _fetch() -> FormatCatalog | None:
        async with CredentialServiceClient(state.config) as client:
            return await UploadWorkflow(client, state.config).load_catalog()

    catalog = asyncio.run(_fetch())
    if catalog is None:
        display_error("Could not load supported formats from the backend", console)
        raise typer.Exit(code=1)
    display_format_catalog(catalog, console)


@app.command()
def health(ctx: typer.Context) -> None:
    """Check whether the verification backend is up."""
    state = get_state(ctx)

    async def _probe() -> HealthStatus:
        async with CredentialServiceClient(state.config) as client:
            return await client.check_health()

    try:
        status = asyncio.run(_probe())
    except CredentialUploadError as e:
        logger.debug("Health check failed", exc_info=True)
        display_health(None, error=str(e), console=console)
        raise typer.Exit(code=1)

    display_health(status, console=console)
    if not status.is_up:
        raise typer.Exit(code=1)
