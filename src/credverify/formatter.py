"""Rich display formatting for analysis results, format catalogs and health.

Colours follow the interpreter tiers: green/yellow/red confidence badges,
and check/cross/warning markers for validity status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from credverify.interpret import (
    ConfidenceSeverity,
    StatusSeverity,
    confidence_severity,
    format_confidence,
    format_file_size,
    health_label,
    status_severity,
)

if TYPE_CHECKING:
    from credverify.models import SelectedFile
    from credverify.upload.schemas import FileInfoResult, FormatCatalog, HealthStatus


CONFIDENCE_STYLES: dict[ConfidenceSeverity, str] = {
    ConfidenceSeverity.HIGH: "bold green",
    ConfidenceSeverity.MEDIUM: "bold yellow",
    ConfidenceSeverity.LOW: "bold red",
}

STATUS_MARKERS: dict[StatusSeverity, tuple[str, str]] = {
    StatusSeverity.POSITIVE: ("✔", "green"),
    StatusSeverity.NEGATIVE: ("✘", "red"),
    StatusSeverity.NEUTRAL: ("!", "yellow"),
}


def format_badge(detected_format: str, confidence: float) -> Text:
    """Detected-format badge coloured by confidence tier."""
    style = CONFIDENCE_STYLES[confidence_severity(confidence)]
    return Text(f" {detected_format} ", style=f"{style} reverse")


def status_text(status: str) -> Text:
    """Status string prefixed with its severity marker."""
    marker, colour = STATUS_MARKERS[status_severity(status)]
    text = Text(f"{marker} ", style=colour)
    text.append(status, style="bold")
    return text


def display_selected_file(file: SelectedFile, console: Console | None = None) -> None:
    """One-line summary of the file about to be submitted."""
    con = console or Console()
    con.print(
        f"[cyan]{escape(file.name)}[/cyan] [dim]({format_file_size(file.size)}, "
        f"{file.content_type})[/dim]"
    )


def display_file_info(result: FileInfoResult, console: Console | None = None) -> None:
    """Display the backend's analysis of an uploaded credential.

    Renders three sections: file information, format detection, and
    structure analysis, followed by any validation messages.

    Args:
        result: Decoded analysis result.
        console: Optional Console for testing (defaults to a new one).
    """
    con = console or Console()

    info = Table.grid(padding=(0, 2))
    info.add_column(style="dim")
    info.add_column()
    info.add_row("File Name:", escape(result.file_name))
    info.add_row("File ID:", escape(result.file_id))
    info.add_row("File Size:", format_file_size(result.file_size))
    info.add_row("Content Type:", escape(result.content_type or "-"))
    info.add_row("Processed:", result.processed_at.strftime("%Y-%m-%d %H:%M:%S"))

    detection = Table.grid(padding=(0, 2))
    detection.add_column(style="dim")
    detection.add_column()
    detection.add_row(
        "Detected Format:",
        format_badge(result.detected_format, result.format_confidence),
    )
    detection.add_row("Confidence:", format_confidence(result.format_confidence))
    detection.add_row("Status:", status_text(result.status))

    structure = result.structure
    structure_table = Table(show_header=True, header_style="bold", expand=False)
    structure_table.add_column("Root Type")
    structure_table.add_column("Total Fields", justify="right")
    structure_table.add_column("Encoding")
    structure_table.add_column("Valid")
    structure_table.add_row(
        escape(structure.root_type),
        str(structure.total_fields),
        escape(structure.encoding or "-"),
        "[green]Yes[/green]" if structure.is_valid else "[red]No[/red]",
    )

    con.print()
    con.print(Panel(info, title="File Information", border_style="cyan"))
    con.print(Panel(detection, title="Format Detection", border_style="cyan"))
    con.print(Panel(structure_table, title="Structure Analysis", border_style="cyan"))

    if structure.top_level_keys:
        keys = Text("Top Level Keys: ", style="dim")
        for i, key in enumerate(structure.top_level_keys):
            if i:
                keys.append(" ")
            keys.append(f"[{key}]", style="blue")
        con.print(keys)

    if result.validation_messages:
        con.print()
        con.print("[bold]Validation Messages[/bold]")
        for message in result.validation_messages:
            con.print(f"  [blue]i[/blue] {escape(message)}")


def display_format_catalog(catalog: FormatCatalog, console: Console | None = None) -> None:
    """Table of supported formats plus the backend's upload constraints."""
    con = console or Console()

    table = Table(title="Supported Formats")
    table.add_column("Format", style="cyan", no_wrap=True)
    table.add_column("Description")
    for name, description in sorted(catalog.supported.items()):
        table.add_row(escape(name), escape(description))

    con.print(table)
    con.print(f"Maximum file size: {catalog.max_file_size or 'unknown'}")
    if catalog.accepted_content_types:
        con.print(
            "Accepted content types: " + ", ".join(catalog.accepted_content_types)
        )


def display_health(
    health: HealthStatus | None,
    error: str | None = None,
    console: Console | None = None,
) -> None:
    """System status panel for the backend."""
    con = console or Console()
    label = health_label(health.status if health else None, error)
    colour = "green" if label == "Backend Online" else "red"

    lines = [f"[{colour}]{label}[/{colour}]"]
    if health is not None:
        lines.append(f"Application: {escape(health.application or '-')}")
        lines.append(f"Version: {escape(health.version or '-')}")
    if error:
        lines.append(f"[red]Error: {escape(error)}[/red]")
    con.print(Panel("\n".join(lines), title="System Status"))


def display_error(message: str, console: Console | None = None) -> None:
    con = console or Console()
    con.print(f"[red]✘ {escape(message)}[/red]")
