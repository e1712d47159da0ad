"""
Showterm - record terminal sessions and share them.

Records a terminal session with `script` or `ttyrec`, normalizes it into a
script/timing pair and uploads it to a showterm server.
"""

__version__ = "0.5.0"
__author__ = "Showterm Contributors"
__license__ = "MIT"

from showterm.config import Config

__all__ = ["Config", "__version__"]
