"""pairsync - device pairing client."""

__version__ = "0.1.0"
