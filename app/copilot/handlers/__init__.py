"""Per-intent task handlers."""
