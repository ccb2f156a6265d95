from __future__ import annotations

import math
from collections.abc import Sequence

from .errors import EdfFormatError
from .types import FileHeader, Number, RecordLayout, SignalHeader, SignalLayout

SAMPLE_BYTE_LENGTH = 2


def _ratio(numerator: Number, denominator: Number) -> float:
    # IEEE semantics for a zero denominator: annotation-only files may declare
    # a zero record duration.
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def _sample_count(header: SignalHeader) -> int:
    count = header.number_of_samples
    if isinstance(count, float) and count.is_integer():
        count = int(count)
    if not isinstance(count, int) or count < 0:
        raise EdfFormatError(
            f"Signal {header.label!r} declares an invalid number of samples: {header.number_of_samples!r}"
        )
    return count


def compute_signal_layout(file_header: FileHeader, header: SignalHeader, offset: int = 0) -> SignalLayout:
    count = _sample_count(header)
    duration = file_header.duration_of_data_record
    return SignalLayout(
        sample_duration=_ratio(duration, count),
        sample_rate=_ratio(count, duration),
        bytes_in_data_record=count * SAMPLE_BYTE_LENGTH,
        offset=offset,
    )


def compute_record_layout(file_header: FileHeader, headers: Sequence[SignalHeader]) -> RecordLayout:
    """Lay the signals out back to back, in declaration order, inside one data record."""

    signals: list[SignalLayout] = []
    num_samples = 0
    offset = 0
    for header in headers:
        layout = compute_signal_layout(file_header, header, offset)
        signals.append(layout)
        num_samples += layout.bytes_in_data_record // SAMPLE_BYTE_LENGTH
        offset += layout.bytes_in_data_record
    return RecordLayout(
        signals=tuple(signals),
        num_samples_in_data_record=num_samples,
        bytes_in_data_record=offset,
    )
