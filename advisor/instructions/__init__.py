"""Standing instructions the assistant applies on every turn."""
