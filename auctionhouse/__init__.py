"""Auction and bidding service with validated requests, SQLite storage and migrations."""

__version__ = "0.1.0"