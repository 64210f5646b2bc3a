"""Worker HTTP surface."""
