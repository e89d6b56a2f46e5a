"""Search Schema Sync: declarative deployment of search schema metadata."""

__version__ = "0.1.0"
