from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import numpy as np
import pytest

ANNOTATIONS = "EDF Annotations"


def _pad(text: str, length: int) -> bytes:
    data = text.encode("ascii", "ignore")[:length]
    return data.ljust(length, b" ")


def _infer_records(signals: Sequence[tuple[str, int, object]]) -> int:
    for _, spr, payload in signals:
        if isinstance(payload, np.ndarray):
            return len(payload) // spr if spr else 0
        return len(payload)
    return 0


def build_edf_bytes(
    signals: Sequence[tuple[str, int, object]],
    *,
    record_duration: str = "1",
    overrides: dict[str, str] | None = None,
    signal_overrides: dict[str, Sequence[str]] | None = None,
    trailing: bytes = b"",
) -> bytes:
    """Assemble an EDF file from ``(label, samples_per_record, payload)`` triples.

    ``payload`` is an int array holding every record's samples back to back, or
    for the annotation channel a list with the raw TAL bytes of each record.
    """

    records = _infer_records(signals)
    fields = {
        "version": "0",
        "patient_id": "X X X X",
        "record_id": "Startdate 15-MAR-2024 X X X",
        "start_date": "15.03.24",
        "start_time": "10.30.00",
        "number_of_bytes_in_header": str(256 * (1 + len(signals))),
        "reserved": "EDF+C",
        "number_of_blocks_in_record": str(records),
        "duration_of_data_record": record_duration,
        "number_of_signals": str(len(signals)),
    }
    fields.update(overrides or {})
    widths = [8, 80, 80, 8, 8, 8, 44, 8, 8, 4]
    header = bytearray()
    for text, width in zip(fields.values(), widths):
        header.extend(_pad(text, width))

    labels = [label for label, _, _ in signals]
    columns = {
        "label": (labels, 16),
        "transducer": (["AgAgCl electrode" if l != ANNOTATIONS else "" for l in labels], 80),
        "physical_dimension": (["uV" if l != ANNOTATIONS else "" for l in labels], 8),
        "physical_min": (["-3276.8" if l != ANNOTATIONS else "-1" for l in labels], 8),
        "physical_max": (["3276.7" if l != ANNOTATIONS else "1" for l in labels], 8),
        "digital_min": (["-32768" for _ in labels], 8),
        "digital_max": (["32767" for _ in labels], 8),
        "prefiltering": (["HP:0.1Hz LP:75Hz" if l != ANNOTATIONS else "" for l in labels], 80),
        "number_of_samples": ([str(spr) for _, spr, _ in signals], 8),
        "reserved": (["" for _ in labels], 32),
    }
    for name, values in (signal_overrides or {}).items():
        columns[name] = (list(values), columns[name][1])
    for values, width in columns.values():
        for value in values:
            header.extend(_pad(value, width))

    body = bytearray()
    for record in range(records):
        for _, spr, payload in signals:
            if isinstance(payload, np.ndarray):
                chunk = payload[record * spr : (record + 1) * spr].astype("<i2")
                body.extend(chunk.tobytes())
            else:
                raw = bytes(payload[record])[: spr * 2]
                body.extend(raw.ljust(spr * 2, b"\x00"))
    return bytes(header) + bytes(body) + trailing


@pytest.fixture
def edf_bytes():
    return build_edf_bytes


@pytest.fixture
def write_edf(tmp_path: Path):
    def _write(signals, name: str = "recording.edf", **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(build_edf_bytes(signals, **kwargs))
        return path

    return _write
