"""ugl command-line interface"""

from ._version import __version__

__all__ = ["__version__"]
