"""Market series feed: gap-free history of Binance futures metrics over any window."""

__version__ = "0.1.0"
