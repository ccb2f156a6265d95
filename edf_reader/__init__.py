"""Top-level package for the EDF reader."""

from .edf import __license__, __version__

__all__ = ["__license__", "__version__"]
