"""Infrastructure helpers (settings access, logging)."""
