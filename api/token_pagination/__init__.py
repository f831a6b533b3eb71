"""Token Pagination API: records with continuation-token pagination."""

__version__ = "1.0.0"
