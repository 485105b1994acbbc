"""Infrastructure adapters (logging sinks)."""
