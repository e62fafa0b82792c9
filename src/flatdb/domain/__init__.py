"""Domain layer - pure types, rules and errors with no filesystem access."""
