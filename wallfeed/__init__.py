"""Follow Walltaker links over a websocket and download their wallpapers."""

__version__ = "0.1.3"