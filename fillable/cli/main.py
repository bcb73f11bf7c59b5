"""Fillable CLI entry point."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fillable.config import DEFAULT_PREVIEW_ZOOM, FILLABLE_SUFFIX, LOG_FORMAT
from fillable.model.field import FieldSchemaError, parse_fields
from fillable.model.template import load_template
from fillable.pdf.export import SourceDocumentNotFoundError, export_fillable, write_download
from fillable.pdf.importer import PdfImportError, import_pdf_widgets
from fillable.pdf.loader import DocumentOpenError
from fillable.pdf.renderer import PdfRenderError, render_page_png
from fillable.pdf.writer import DocumentWriteError, synthesize_fillable_pdf

app = typer.Typer(
    name="fillable",
    help="Add interactive form fields to static PDFs",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """Fillable PDF tools."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


@app.command()
def synthesize(
    source: Path = typer.Argument(..., help="Static source PDF"),
    fields_path: Path = typer.Argument(..., help="JSON field schema"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output PDF path"),
):
    """Place form widgets described by a field schema onto a PDF."""
    try:
        fields = parse_fields(json.loads(fields_path.read_text(encoding="utf-8")))
        document_bytes = source.read_bytes()
    except (OSError, json.JSONDecodeError, FieldSchemaError) as exc:
        _fail(str(exc))

    target = output or source.with_name(f"{source.stem}{FILLABLE_SUFFIX}.pdf")
    try:
        target.write_bytes(synthesize_fillable_pdf(document_bytes, fields))
    except (DocumentOpenError, DocumentWriteError, OSError) as exc:
        _fail(str(exc))

    console.print(f"[green]Saved:[/green] {target}")


@app.command()
def export(
    template_path: Path = typer.Argument(..., help="JSON template with documents and fields"),
    directory: Path = typer.Option(Path("."), "--output-dir", "-o", help="Directory for the download"),
):
    """Build the fillable download for a template."""
    try:
        template = load_template(template_path)
        download = export_fillable(template)
        target = write_download(download, directory)
    except (
        FieldSchemaError,
        SourceDocumentNotFoundError,
        DocumentOpenError,
        DocumentWriteError,
        OSError,
    ) as exc:
        _fail(str(exc))

    console.print(f"[green]Saved:[/green] {target} ({download.content_type})")


@app.command()
def inspect(pdf: Path = typer.Argument(..., help="PDF to inspect")):
    """List the form widgets of a PDF."""
    try:
        widgets = import_pdf_widgets(pdf.read_bytes())
    except (PdfImportError, OSError) as exc:
        _fail(str(exc))

    if not widgets:
        console.print("[yellow]No form widgets found[/yellow]")
        return

    table = Table(title=f"Widgets in {pdf.name}")
    table.add_column("Page", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("Option")
    table.add_column("Rect")
    for widget in widgets:
        rect = ", ".join(f"{value:.1f}" for value in widget.rect.as_tuple())
        table.add_row(str(widget.page_index), widget.name, widget.kind.value, widget.option or "", rect)
    console.print(table)


@app.command()
def preview(
    pdf: Path = typer.Argument(..., help="PDF to render"),
    output: Path = typer.Option(..., "--output", "-o", help="PNG output path"),
    page: int = typer.Option(0, "--page", "-p", help="Zero-based page index"),
    zoom: float = typer.Option(DEFAULT_PREVIEW_ZOOM, "--zoom", help="Render scale"),
):
    """Render one page, widgets included, to PNG."""
    try:
        output.write_bytes(render_page_png(pdf.read_bytes(), page, zoom=zoom))
    except (PdfRenderError, OSError) as exc:
        _fail(str(exc))

    console.print(f"[green]Saved:[/green] {output}")


def _fail(message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
