"""Application middleware (logging)."""
