"""Integration tests against live backends (opt-in)."""
