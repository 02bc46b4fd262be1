"""Infrastructure adapters: persistence and migrations."""
