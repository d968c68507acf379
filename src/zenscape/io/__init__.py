"""File loading, encoding and export."""
