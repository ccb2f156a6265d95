"""EDF/EDF+ decoding toolkit."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("edf-reader")
except PackageNotFoundError:  # pragma: no cover - local editable install only
    __version__ = "0.0.0"

__license__ = "GPL-3.0-only"

from .errors import EdfFormatError, EdfStateError
from .reader import EdfReader, open_edf, read_edf
from .types import (
    EDF_ANNOTATIONS_LABEL,
    Annotation,
    EdfDocument,
    FileHeader,
    RecordLayout,
    Signal,
    SignalHeader,
    SignalLayout,
)

__all__ = [
    "__license__",
    "__version__",
    "EDF_ANNOTATIONS_LABEL",
    "Annotation",
    "EdfDocument",
    "EdfFormatError",
    "EdfReader",
    "EdfStateError",
    "FileHeader",
    "RecordLayout",
    "Signal",
    "SignalHeader",
    "SignalLayout",
    "open_edf",
    "read_edf",
]
