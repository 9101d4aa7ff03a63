"""nyaaseek - find torrent releases for the anime you are watching."""

from nyaaseek.__version__ import __version__

__all__ = ["__version__"]
