"""Adapters between external formats and the domain core."""
