"""Device services."""
