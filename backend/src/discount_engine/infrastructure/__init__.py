"""Infrastructure package - Database access."""
