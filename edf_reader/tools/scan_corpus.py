"""Scan a corpus of EDF files and report signal/annotation coverage."""

from __future__ import annotations

import argparse
import csv
import json
import logging
import math
import sys
from collections.abc import Iterable, Iterator
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from edf_reader.edf.errors import EdfFormatError
from edf_reader.edf.reader import read_edf
from edf_reader.edf.types import EdfDocument

logger = logging.getLogger(__name__)

DATACLASS_KWARGS = {"slots": True} if sys.version_info >= (3, 10) else {}


@dataclass(frozen=True, **DATACLASS_KWARGS)
class ScanRow:
    file: str
    signals: int = 0
    records: int | float | None = 0
    record_duration: int | float | None = 0
    annotation_channels: int = 0
    annotations: int = 0
    error: str = ""

    @classmethod
    def from_document(cls, path: Path, document: EdfDocument) -> ScanRow:
        header = document.file_header
        return cls(
            file=str(path),
            signals=len(document.signals),
            records=_json_number(header.number_of_blocks_in_record),
            record_duration=_json_number(header.duration_of_data_record),
            annotation_channels=sum(1 for signal in document.signals if signal.is_annotation),
            annotations=len(document.annotations),
        )


def _json_number(value: int | float) -> int | float | None:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def iter_rows(root: Path, pattern: str) -> Iterator[ScanRow]:
    """Decode every file under ``root`` matching ``pattern``, in path order."""

    for path in sorted(root.glob(pattern)):
        if not path.is_file():
            continue
        try:
            document = read_edf(path)
        except (OSError, EOFError, EdfFormatError) as exc:
            logger.warning("Skipping %s: %s", path, exc)
            yield ScanRow(file=str(path), error=str(exc))
            continue
        yield ScanRow.from_document(path, document)


def write_report(rows: Iterable[ScanRow], output: Path, fmt: str) -> None:
    records = [asdict(row) for row in rows]
    if fmt == "json":
        output.write_text(json.dumps({"files": records}, indent=2, allow_nan=False))
        return
    with output.open("w", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=[field.name for field in fields(ScanRow)])
        writer.writeheader()
        writer.writerows(records)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Scan EDF files for signal and annotation coverage.")
    parser.add_argument("--root", type=Path, default=Path("."), help="Root folder to scan")
    parser.add_argument("--pattern", default="**/*.edf", help="Glob pattern to match files")
    parser.add_argument("--csv", type=Path, default=None, help="Write CSV output to this file")
    parser.add_argument("--json", type=Path, default=None, help="Write JSON output to this file")
    parser.add_argument("--verbose", action="store_true", help="Log files that fail to decode")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.ERROR,
        format="%(levelname)s: %(message)s",
    )

    rows = list(iter_rows(args.root, args.pattern))
    failed = [row for row in rows if row.error]
    print("files,errors,annotations")
    print(f"{len(rows)},{len(failed)},{sum(row.annotations for row in rows)}")

    for output, fmt in ((args.csv, "csv"), (args.json, "json")):
        if output is not None:
            write_report(rows, output, fmt)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
