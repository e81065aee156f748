"""GitHub activity aggregation for timezone inference."""

__version__ = "0.1.0"
