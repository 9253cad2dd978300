"""
sanitation distribution import namespace.

This package re-exports the core `byte_salvage` package for convenience, so
callers can write ``from sanitation import ByteEvidence``.
"""

from importlib.metadata import PackageNotFoundError, version

# src/sanitation/__init__.py
from byte_salvage import *  # noqa: F401,F403
from byte_salvage import __all__ as _core_all

try:
    from ._version import __version__  # canonical
except ImportError:  # pragma: no cover - fallback for editable/local non-built environments
    try:
        __version__ = version("sanitation")
    except PackageNotFoundError:
        __version__ = "0+unknown"

__all__ = [*_core_all, "__version__"]
