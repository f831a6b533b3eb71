"""Database access for the Token Pagination API."""
