"""Decoding session for a single EDF stream."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

import numpy as np

from .annotations import decode_annotations
from .data import SAMPLE_DTYPE, decode_samples, iter_data_records
from .errors import EdfFormatError, EdfStateError
from .header import (
    NUMBER_OF_PER_HEADER_BYTES,
    decode_file_header,
    decode_signal_headers,
    read_exact,
    validate_signal_count,
)
from .layout import SAMPLE_BYTE_LENGTH, compute_record_layout
from .types import Annotation, EdfDocument, FileHeader, RecordLayout, Signal, SignalHeader

logger = logging.getLogger(__name__)


class _DocumentBuilder:
    """Accumulates per-signal data across records, then freezes it."""

    def __init__(self, file_header: FileHeader, headers: Sequence[SignalHeader], layout: RecordLayout) -> None:
        self._file_header = file_header
        self._headers = tuple(headers)
        self._layout = layout
        self._chunks: list[list[np.ndarray]] = [[] for _ in self._headers]
        self._annotations: list[list[Annotation]] = [[] for _ in self._headers]

    def add_record(self, blocks: Sequence[memoryview]) -> None:
        for idx, (header, block) in enumerate(zip(self._headers, blocks)):
            if header.is_annotation:
                self._annotations[idx].extend(decode_annotations(block))
            else:
                count = len(block) // SAMPLE_BYTE_LENGTH
                self._chunks[idx].append(decode_samples(block, count))

    def build(self) -> EdfDocument:
        signals: list[Signal] = []
        for idx, (header, layout) in enumerate(zip(self._headers, self._layout.signals)):
            if header.is_annotation:
                data = tuple(self._annotations[idx])
            else:
                chunks = self._chunks[idx]
                data = np.concatenate(chunks) if chunks else np.empty(0, dtype=SAMPLE_DTYPE)
                data.flags.writeable = False
            signals.append(Signal(header=header, layout=layout, data=data))
        return EdfDocument(
            file_header=self._file_header,
            signals=tuple(signals),
            num_samples_in_data_record=self._layout.num_samples_in_data_record,
            bytes_in_data_record=self._layout.bytes_in_data_record,
        )


def _record_count(header: FileHeader) -> int:
    count = header.number_of_blocks_in_record
    if isinstance(count, float) and count.is_integer():
        count = int(count)
    if not isinstance(count, int) or count < 0:
        raise EdfFormatError(f"Number of data records must be a non-negative integer, got {count!r}")
    return count


class EdfReader:
    """Step-wise decoder bound to one binary stream.

    The steps must run in order: :meth:`read_file_header`,
    :meth:`read_signal_headers`, then :meth:`read_data_records`. Decoding the
    records a second time requires :meth:`reset` first.
    """

    def __init__(self, handle: BinaryIO, *, strict: bool = False, owns_handle: bool = False) -> None:
        self._handle = handle
        self._strict = strict
        self._owns_handle = owns_handle
        self._file_header: FileHeader | None = None
        self._signal_headers: tuple[SignalHeader, ...] | None = None
        self._layout: RecordLayout | None = None
        self._document: EdfDocument | None = None

    @classmethod
    def from_path(cls, path: str | Path, *, strict: bool = False) -> EdfReader:
        handle = Path(path).open("rb")
        return cls(handle, strict=strict, owns_handle=True)

    def __enter__(self) -> EdfReader:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_handle and not self._handle.closed:
            self._handle.close()

    @property
    def file_header(self) -> FileHeader:
        if self._file_header is None:
            raise EdfStateError("File header has not been read yet")
        return self._file_header

    @property
    def signal_headers(self) -> tuple[SignalHeader, ...]:
        if self._signal_headers is None:
            raise EdfStateError("Signal headers have not been read yet")
        return self._signal_headers

    @property
    def layout(self) -> RecordLayout:
        if self._layout is None:
            raise EdfStateError("Signal headers have not been read yet")
        return self._layout

    @property
    def document(self) -> EdfDocument:
        if self._document is None:
            raise EdfStateError("Data records have not been decoded yet")
        return self._document

    def read_file_header(self) -> FileHeader:
        if self._file_header is None:
            raw = read_exact(self._handle, 0, NUMBER_OF_PER_HEADER_BYTES)
            self._file_header = decode_file_header(raw, strict=self._strict)
            logger.debug(
                "File header: %s signals, %s records of %s s",
                self._file_header.number_of_signals,
                self._file_header.number_of_blocks_in_record,
                self._file_header.duration_of_data_record,
            )
        return self._file_header

    def read_signal_headers(self) -> tuple[SignalHeader, ...]:
        file_header = self.file_header
        if self._signal_headers is None:
            count = validate_signal_count(file_header)
            raw = read_exact(self._handle, NUMBER_OF_PER_HEADER_BYTES, NUMBER_OF_PER_HEADER_BYTES * count)
            headers = decode_signal_headers(raw, count, strict=self._strict)
            self._layout = compute_record_layout(file_header, headers)
            self._signal_headers = headers
            logger.debug(
                "Signal headers: %s, %d bytes per record",
                [header.label for header in headers],
                self._layout.bytes_in_data_record,
            )
        return self._signal_headers

    def read_data_records(self) -> EdfDocument:
        """Decode every data record and return the finished document."""

        headers = self.signal_headers
        layout = self.layout
        if self._document is not None:
            raise EdfStateError("Data records were already decoded; call reset() first")
        if layout.bytes_in_data_record == 0:
            raise EdfFormatError("Data record size is zero; no samples can be read")
        number_of_records = _record_count(self._file_header)
        builder = _DocumentBuilder(self._file_header, headers, layout)
        for blocks in iter_data_records(
            self._handle,
            layout,
            int(self._file_header.number_of_bytes_in_header),
            number_of_records,
        ):
            builder.add_record(blocks)
        self._document = builder.build()
        logger.debug("Decoded %d data records", number_of_records)
        return self._document

    def reset(self) -> None:
        """Drop decoded record data so :meth:`read_data_records` can run again."""

        self._document = None


@contextmanager
def open_edf(path: str | Path, *, strict: bool = False) -> Iterator[EdfReader]:
    """Open ``path`` and yield a session; the file is closed on every exit path."""

    with Path(path).open("rb") as handle:
        yield EdfReader(handle, strict=strict)


def read_edf(path: str | Path, *, strict: bool = False) -> EdfDocument:
    with open_edf(path, strict=strict) as reader:
        reader.read_file_header()
        reader.read_signal_headers()
        return reader.read_data_records()
