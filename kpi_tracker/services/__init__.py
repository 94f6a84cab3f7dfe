"""Domain and application services."""
