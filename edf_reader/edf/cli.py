from __future__ import annotations

import argparse
import json
import logging
import math
from pathlib import Path

from .errors import EdfFormatError
from .reader import read_edf
from .tui import render_document, rich_available
from .types import EdfDocument

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edf-reader",
        description="Decode EDF/EDF+ recordings and report headers, signals and annotations.",
    )
    parser.add_argument("edf_paths", nargs="+", type=Path, help="EDF file(s) to decode")
    parser.add_argument(
        "--json-sidecar",
        action="store_true",
        help="Write a JSON sidecar with header fields, signal metadata and annotations",
    )
    parser.add_argument(
        "--out",
        dest="output_dir",
        type=Path,
        help="Directory for JSON sidecars (default: next to each input)",
    )
    parser.add_argument("--annotations", action="store_true", help="Print decoded annotations")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject numeric header fields that do not parse instead of reading them as NaN",
    )
    parser.add_argument(
        "--ui",
        action="store_true",
        help="Render the summary with rich tables (requires 'rich')",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def _finite(value: object) -> object:
    """JSON has no NaN or Infinity; lenient fields and zero-duration rates become null."""

    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _document_payload(source_path: Path, document: EdfDocument) -> dict[str, object]:
    header = document.file_header
    signals = []
    for signal in document.signals:
        signals.append(
            {
                "label": signal.header.label,
                "transducer": signal.header.transducer,
                "physical_dimension": signal.header.physical_dimension,
                "physical_min": _finite(signal.header.physical_min),
                "physical_max": _finite(signal.header.physical_max),
                "digital_min": _finite(signal.header.digital_min),
                "digital_max": _finite(signal.header.digital_max),
                "prefiltering": signal.header.prefiltering,
                "number_of_samples": _finite(signal.header.number_of_samples),
                "sample_rate_hz": _finite(signal.layout.sample_rate),
                "sample_duration_seconds": _finite(signal.layout.sample_duration),
                "bytes_in_data_record": signal.layout.bytes_in_data_record,
                "decoded_count": len(signal.data),
            }
        )
    annotations = [
        {"start": item.start, "duration": item.duration, "value": item.value}
        for item in document.annotations
    ]
    return {
        "edf_file": source_path.name,
        "version": _finite(header.version),
        "patient_id": header.patient_id,
        "record_id": header.record_id,
        "start_time": header.start_datetime_formatted,
        "number_of_bytes_in_header": _finite(header.number_of_bytes_in_header),
        "reserved": header.reserved,
        "number_of_blocks_in_record": _finite(header.number_of_blocks_in_record),
        "duration_of_data_record": _finite(header.duration_of_data_record),
        "num_samples_in_data_record": document.num_samples_in_data_record,
        "bytes_in_data_record": document.bytes_in_data_record,
        "signals": signals,
        "annotations": annotations,
    }


def _write_json_sidecar(source_path: Path, document: EdfDocument, output_dir: Path | None) -> Path:
    target_dir = output_dir if output_dir else source_path.parent
    target_dir.mkdir(parents=True, exist_ok=True)
    sidecar_path = target_dir / f"{source_path.stem}.json"
    sidecar_path.write_text(json.dumps(_document_payload(source_path, document), indent=2, allow_nan=False))
    return sidecar_path


def _print_summary(source_path: Path, document: EdfDocument, show_annotations: bool) -> None:
    header = document.file_header
    print(f"{source_path.name}: {len(document.signals)} signals, {header.number_of_blocks_in_record} records")
    for signal in document.signals:
        kind = "annotations" if signal.is_annotation else "samples"
        print(f"  {signal.header.label:<16} {signal.layout.sample_rate:g} Hz  {len(signal.data)} {kind}")
    if show_annotations:
        for annotation in document.annotations:
            duration = annotation.duration.replace("\x00", "")
            print(f"  {annotation.start}\t{duration}\t{annotation.value}")


def inspect_file(
    source_path: Path,
    *,
    strict: bool = False,
    json_sidecar: bool = False,
    output_dir: Path | None = None,
    show_annotations: bool = False,
    ui: bool = False,
) -> EdfDocument:
    document = read_edf(source_path, strict=strict)
    if ui:
        render_document(document, source=source_path, show_annotations=show_annotations)
    else:
        _print_summary(source_path, document, show_annotations)
    if json_sidecar:
        sidecar = _write_json_sidecar(source_path, document, output_dir)
        logger.info("Wrote %s", sidecar)
    logger.info(
        "Decoded %s (%d signals, %d annotations)",
        source_path.name,
        len(document.signals),
        len(document.annotations),
    )
    return document


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.ui and not rich_available():
        print(
            "UI mode requires 'rich'.\n\n"
            "Install it with: pip install 'edf-reader[tui]'\n"
        )
        return 1

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    success = 0
    for raw_path in args.edf_paths:
        source_path = raw_path.expanduser()
        try:
            inspect_file(
                source_path,
                strict=args.strict,
                json_sidecar=args.json_sidecar,
                output_dir=args.output_dir,
                show_annotations=args.annotations,
                ui=args.ui,
            )
            success += 1
        except (OSError, EOFError, EdfFormatError) as exc:
            logger.error("Failed to decode %s: %s", source_path, exc)
    if success == 0:
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
