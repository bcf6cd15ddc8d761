"""Directory domain layer: aggregates and value objects."""
