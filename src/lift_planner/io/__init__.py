"""JSON storage and serialization."""
