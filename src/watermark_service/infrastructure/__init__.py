"""Concrete adapters: cache stores, blob sources, metrics."""
