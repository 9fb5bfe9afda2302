"""linctl - a command-line client for Linear issue tracking."""

from linctl._version import version as __version__

__all__ = ["__version__"]
