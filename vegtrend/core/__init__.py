"""Core utilities: CLI, configuration and logging."""
