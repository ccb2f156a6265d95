from __future__ import annotations

from collections.abc import Iterator
from typing import BinaryIO

import numpy as np

from .header import read_exact
from .types import RecordLayout

SAMPLE_DTYPE = np.dtype("<i2")


def record_offset(number_of_bytes_in_header: int, bytes_in_data_record: int, index: int) -> int:
    return number_of_bytes_in_header + index * bytes_in_data_record


def read_record(handle: BinaryIO, layout: RecordLayout, number_of_bytes_in_header: int, index: int) -> bytes:
    """Read data record ``index`` (0-based) into a single owned buffer."""

    offset = record_offset(number_of_bytes_in_header, layout.bytes_in_data_record, index)
    return read_exact(handle, offset, layout.bytes_in_data_record)


def demultiplex(record: bytes, layout: RecordLayout) -> list[memoryview]:
    """Split a record into one read-only view per signal, in declaration order."""

    if len(record) != layout.bytes_in_data_record:
        raise ValueError(
            f"Record holds {len(record)} bytes, layout expects {layout.bytes_in_data_record}"
        )
    view = memoryview(record).toreadonly()
    return [
        view[signal.offset : signal.offset + signal.bytes_in_data_record]
        for signal in layout.signals
    ]


def decode_samples(block: bytes | memoryview, number_of_samples: int) -> np.ndarray:
    """Decode ``number_of_samples`` little-endian int16 values from a signal's sub-range."""

    if number_of_samples == 0:
        return np.empty(0, dtype=SAMPLE_DTYPE)
    return np.frombuffer(block, dtype=SAMPLE_DTYPE, count=number_of_samples)


def iter_data_records(
    handle: BinaryIO,
    layout: RecordLayout,
    number_of_bytes_in_header: int,
    number_of_records: int,
) -> Iterator[list[memoryview]]:
    for index in range(number_of_records):
        yield demultiplex(read_record(handle, layout, number_of_bytes_in_header, index), layout)
