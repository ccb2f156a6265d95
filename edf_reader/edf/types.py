from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Union

import numpy as np

DATACLASS_KWARGS = {"slots": True} if sys.version_info >= (3, 10) else {}

EDF_ANNOTATIONS_LABEL = "EDF Annotations"

Number = Union[int, float]


def _parse_start_datetime(start_date: str, start_time: str) -> datetime | None:
    """Combine the ``dd.mm.yy`` and ``hh.mm.ss`` header fields.

    Two-digit years use the EDF clipping date: 85-99 are 19xx, 00-84 are 20xx.
    """

    try:
        day, month, year = (int(part) for part in start_date.split("."))
        hour, minute, second = (int(part) for part in start_time.split("."))
    except ValueError:
        return None
    year += 1900 if year >= 85 else 2000
    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError:
        return None


@dataclass(frozen=True, **DATACLASS_KWARGS)
class FileHeader:
    """The fixed 256-byte header at the start of every EDF file."""

    version: Number
    patient_id: str
    record_id: str
    start_date: str
    start_time: str
    number_of_bytes_in_header: Number
    reserved: str
    number_of_blocks_in_record: Number
    duration_of_data_record: Number
    number_of_signals: Number

    @property
    def start_datetime(self) -> datetime | None:
        return _parse_start_datetime(self.start_date, self.start_time)

    @property
    def start_datetime_formatted(self) -> str | None:
        start = self.start_datetime
        return start.strftime("%Y-%m-%d %H:%M:%S") if start else None


@dataclass(frozen=True, **DATACLASS_KWARGS)
class SignalHeader:
    """Per-signal header, assembled from one column of the signal header block."""

    label: str
    transducer: str
    physical_dimension: str
    physical_min: Number
    physical_max: Number
    digital_min: Number
    digital_max: Number
    prefiltering: str
    number_of_samples: Number
    reserved: str

    @property
    def is_annotation(self) -> bool:
        return self.label == EDF_ANNOTATIONS_LABEL


@dataclass(frozen=True, **DATACLASS_KWARGS)
class SignalLayout:
    """Timing and byte placement of one signal inside a data record."""

    sample_duration: float
    sample_rate: float
    bytes_in_data_record: int
    offset: int


@dataclass(frozen=True, **DATACLASS_KWARGS)
class RecordLayout:
    """Byte layout of a whole data record."""

    signals: tuple[SignalLayout, ...]
    num_samples_in_data_record: int
    bytes_in_data_record: int


@dataclass(frozen=True, **DATACLASS_KWARGS)
class Annotation:
    """One entry of a Time-stamped Annotation List.

    ``start`` and ``duration`` keep the literal onset text, e.g. ``"+180"``.
    """

    start: str
    duration: str
    value: str


@dataclass(frozen=True, **DATACLASS_KWARGS)
class Signal:
    header: SignalHeader
    layout: SignalLayout
    data: np.ndarray | tuple[Annotation, ...]

    @property
    def is_annotation(self) -> bool:
        return self.header.is_annotation

    @property
    def samples(self) -> np.ndarray:
        if self.is_annotation:
            raise TypeError(f"Signal {self.header.label!r} carries annotations, not samples")
        return self.data

    @property
    def annotations(self) -> tuple[Annotation, ...]:
        if not self.is_annotation:
            raise TypeError(f"Signal {self.header.label!r} carries samples, not annotations")
        return self.data


@dataclass(frozen=True, **DATACLASS_KWARGS)
class EdfDocument:
    """A fully decoded EDF recording."""

    file_header: FileHeader
    signals: tuple[Signal, ...]
    num_samples_in_data_record: int
    bytes_in_data_record: int

    @property
    def annotations(self) -> tuple[Annotation, ...]:
        collected: list[Annotation] = []
        for signal in self.signals:
            if signal.is_annotation:
                collected.extend(signal.annotations)
        return tuple(collected)

    def signal(self, label: str) -> Signal:
        for candidate in self.signals:
            if candidate.header.label == label:
                return candidate
        raise KeyError(f"No signal labelled {label!r}")
