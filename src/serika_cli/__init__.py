"""serika-cli — interactive terminal client for the Serika video service.

Browse, search, play (optionally as colored ASCII art) and download
videos, delegating all media work to ffmpeg/ffplay.
"""

from serika_cli.version import __version__

__all__: list[str] = ["__version__"]
