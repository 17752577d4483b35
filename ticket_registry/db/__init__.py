"""SQL table definitions."""
