"""Decoding of the EDF file header and the column-major signal header block."""

from __future__ import annotations

import enum
import logging
import math
import re
from collections.abc import Sequence
from typing import BinaryIO, NamedTuple

from .errors import EdfFormatError
from .types import FileHeader, Number, SignalHeader

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Field tables
# ---------------------------------------------------------------------------

NUMBER_OF_PER_HEADER_BYTES = 256

_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


class FieldKind(enum.Enum):
    TEXT = "text"
    NUMERIC = "numeric"


class FieldSpec(NamedTuple):
    name: str
    width: int
    kind: FieldKind


FILE_HEADER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("version", 8, FieldKind.NUMERIC),
    FieldSpec("patient_id", 80, FieldKind.TEXT),
    FieldSpec("record_id", 80, FieldKind.TEXT),
    FieldSpec("start_date", 8, FieldKind.TEXT),
    FieldSpec("start_time", 8, FieldKind.TEXT),
    FieldSpec("number_of_bytes_in_header", 8, FieldKind.NUMERIC),
    FieldSpec("reserved", 44, FieldKind.TEXT),
    FieldSpec("number_of_blocks_in_record", 8, FieldKind.NUMERIC),
    FieldSpec("duration_of_data_record", 8, FieldKind.NUMERIC),
    FieldSpec("number_of_signals", 4, FieldKind.NUMERIC),
)

SIGNAL_HEADER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("label", 16, FieldKind.TEXT),
    FieldSpec("transducer", 80, FieldKind.TEXT),
    FieldSpec("physical_dimension", 8, FieldKind.TEXT),
    FieldSpec("physical_min", 8, FieldKind.NUMERIC),
    FieldSpec("physical_max", 8, FieldKind.NUMERIC),
    FieldSpec("digital_min", 8, FieldKind.NUMERIC),
    FieldSpec("digital_max", 8, FieldKind.NUMERIC),
    FieldSpec("prefiltering", 80, FieldKind.TEXT),
    FieldSpec("number_of_samples", 8, FieldKind.NUMERIC),
    FieldSpec("reserved", 32, FieldKind.TEXT),
)


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------


def _decode_text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").strip()


def _decode_number(raw: bytes, name: str, strict: bool) -> Number:
    """Parse a numeric header field.

    Non-numeric text becomes ``nan`` rather than an error so that files from
    permissive producers still open; ``strict`` turns that into a rejection.
    An empty field is 0.
    """

    text = _decode_text(raw)
    if not text:
        return 0
    if _INTEGER.fullmatch(text):
        return int(text)
    if _DECIMAL.fullmatch(text):
        return float(text)
    if strict:
        raise EdfFormatError(f"Field {name!r} is not numeric: {text!r}")
    logger.warning("Non-numeric value %r in field %r decoded as nan", text, name)
    return math.nan


def decode_field(raw: bytes, spec: FieldSpec, *, strict: bool = False) -> str | Number:
    if spec.kind is FieldKind.TEXT:
        return _decode_text(raw)
    if spec.kind is FieldKind.NUMERIC:
        return _decode_number(raw, spec.name, strict)
    raise ValueError(f"Unknown field kind: {spec.kind!r}")


def table_width(fields: Sequence[FieldSpec]) -> int:
    return sum(spec.width for spec in fields)


# ---------------------------------------------------------------------------
# Header decoding
# ---------------------------------------------------------------------------


def decode_file_header(raw: bytes, *, strict: bool = False) -> FileHeader:
    """Decode the ten fixed-width fields of the 256-byte file header."""

    if len(raw) < NUMBER_OF_PER_HEADER_BYTES:
        raise EdfFormatError(
            f"File header needs {NUMBER_OF_PER_HEADER_BYTES} bytes, got {len(raw)}"
        )
    values: dict[str, str | Number] = {}
    cursor = 0
    for spec in FILE_HEADER_FIELDS:
        values[spec.name] = decode_field(raw[cursor : cursor + spec.width], spec, strict=strict)
        cursor += spec.width
    return FileHeader(**values)


def validate_signal_count(header: FileHeader) -> int:
    """Return the signal count, rejecting values that would size a bogus read."""

    count = header.number_of_signals
    if isinstance(count, float) and count.is_integer():
        count = int(count)
    if not isinstance(count, int) or count <= 0:
        raise EdfFormatError(f"Number of signals must be a positive integer, got {count!r}")
    expected = NUMBER_OF_PER_HEADER_BYTES * (1 + count)
    if header.number_of_bytes_in_header != expected:
        raise EdfFormatError(
            f"Header declares {header.number_of_bytes_in_header!r} bytes but "
            f"{count} signals require {expected}"
        )
    return count


def decode_signal_headers(
    raw: bytes,
    number_of_signals: int,
    *,
    strict: bool = False,
) -> tuple[SignalHeader, ...]:
    """Decode the signal header block.

    The block is column-major: all labels first, then all transducers, and so
    on, rather than one contiguous 256-byte record per signal.
    """

    expected = NUMBER_OF_PER_HEADER_BYTES * number_of_signals
    if len(raw) < expected:
        raise EdfFormatError(
            f"Signal header block needs {expected} bytes for {number_of_signals} signals, got {len(raw)}"
        )
    columns: list[dict[str, str | Number]] = [{} for _ in range(number_of_signals)]
    cursor = 0
    for spec in SIGNAL_HEADER_FIELDS:
        for values in columns:
            values[spec.name] = decode_field(raw[cursor : cursor + spec.width], spec, strict=strict)
            cursor += spec.width
    return tuple(SignalHeader(**values) for values in columns)


# ---------------------------------------------------------------------------
# Stream helpers
# ---------------------------------------------------------------------------


def read_exact(handle: BinaryIO, offset: int, size: int) -> bytes:
    handle.seek(offset, 0)
    data = handle.read(size)
    if len(data) != size:
        raise EOFError(f"Unexpected end of file while reading {size} bytes at offset {offset}")
    return data
