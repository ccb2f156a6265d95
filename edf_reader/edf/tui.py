from __future__ import annotations

import importlib.util
from pathlib import Path

from .types import EdfDocument


def rich_available() -> bool:
    return importlib.util.find_spec("rich") is not None


def _fmt(value: float) -> str:
    return f"{value:g}"


def render_document(document: EdfDocument, *, source: Path | None = None, show_annotations: bool = False, console=None) -> None:
    """Print a decoded document as rich panels and tables."""

    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table

    console = console or Console()
    header = document.file_header
    title = source.name if source else "EDF"

    info = Table.grid(padding=(0, 2))
    info.add_column(style="bold blue")
    info.add_column()
    info.add_row("Patient", header.patient_id or "-")
    info.add_row("Recording", header.record_id or "-")
    info.add_row("Start", header.start_datetime_formatted or f"{header.start_date} {header.start_time}")
    info.add_row("Records", f"{header.number_of_blocks_in_record} x {_fmt(header.duration_of_data_record)} s")
    info.add_row("Record size", f"{document.bytes_in_data_record} bytes")
    console.print(Panel(info, title=title, border_style="blue"))

    table = Table(title="Signals", show_header=True, header_style="bold blue")
    table.add_column("#", style="dim", width=3, justify="right")
    table.add_column("Label", style="yellow")
    table.add_column("Dim")
    table.add_column("Rate (Hz)", justify="right")
    table.add_column("Samples/record", justify="right")
    table.add_column("Decoded", justify="right")
    for idx, signal in enumerate(document.signals, start=1):
        table.add_row(
            str(idx),
            signal.header.label,
            signal.header.physical_dimension,
            _fmt(signal.layout.sample_rate),
            str(signal.header.number_of_samples),
            f"{len(signal.data)} {'annotations' if signal.is_annotation else 'samples'}",
        )
    console.print(table)

    if show_annotations and document.annotations:
        notes = Table(title="Annotations", show_header=True, header_style="bold green")
        notes.add_column("Onset")
        notes.add_column("Duration")
        notes.add_column("Text")
        for annotation in document.annotations:
            notes.add_row(annotation.start, annotation.duration.replace("\x00", ""), annotation.value)
        console.print(notes)
