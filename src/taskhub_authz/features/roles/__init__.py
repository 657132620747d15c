"""Role hierarchy evaluation within a scope."""
