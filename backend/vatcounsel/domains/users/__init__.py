"""Users domain: read-only identity lookup."""
