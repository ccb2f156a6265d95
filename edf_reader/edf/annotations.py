"""Parsing of the ``EDF Annotations`` channel.

Each data record carries its share of the channel as Time-stamped Annotation
Lists (TALs). A TAL ends with ``DC4 NUL``; inside it ``DC4`` separates the
onset from one or more annotation texts, and the onset holds an optional
``NAK``-separated duration, e.g. ``+180 NAK 5 DC4 Event A DC4 Event B DC4 NUL``.
"""

from __future__ import annotations

from .types import Annotation

NUL = 0x00
DC4 = 0x14
NAK = 0x15

TALS_DELIMITER = bytes([DC4, NUL])
ANNOTATIONS_DELIMITER = bytes([DC4])
ONSET_DELIMITER = bytes([NAK])

DEFAULT_DURATION = bytes([NUL]).decode("ascii")


def split_bytes(data: bytes, delimiter: bytes) -> list[bytes]:
    """Split ``data`` on ``delimiter``.

    Unlike :meth:`bytes.split`, a trailing empty remainder is dropped and an
    empty input yields no parts at all.
    """

    if not delimiter:
        raise ValueError("Delimiter must not be empty")
    parts: list[bytes] = []
    start = 0
    while True:
        found = data.find(delimiter, start)
        if found < 0:
            break
        parts.append(data[start:found])
        start = found + len(delimiter)
    if start < len(data):
        parts.append(data[start:])
    return parts


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def decode_tal(tal: bytes) -> list[Annotation]:
    """Decode one TAL chunk into annotations sharing its onset."""

    if DC4 not in tal:
        return []
    onset, *raw_annotations = split_bytes(tal, ANNOTATIONS_DELIMITER)
    onset_parts = split_bytes(onset, ONSET_DELIMITER)
    start = _text(onset_parts[0]) if onset_parts else ""
    duration = _text(onset_parts[1]) if len(onset_parts) > 1 else DEFAULT_DURATION
    return [
        Annotation(start=start, duration=duration, value=_text(raw).strip())
        for raw in raw_annotations
    ]


def decode_annotations(block: bytes | memoryview) -> list[Annotation]:
    """Decode every TAL in an annotation sub-range, in order.

    Chunks without a ``DC4`` byte (padding after the last TAL) are skipped.
    """

    annotations: list[Annotation] = []
    for tal in split_bytes(bytes(block), TALS_DELIMITER):
        annotations.extend(decode_tal(tal))
    return annotations
