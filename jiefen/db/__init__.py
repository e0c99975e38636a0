"""SQLite persistence for the compiled dictionary cache."""
