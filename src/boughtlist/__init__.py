"""Normalize, deduplicate and export orders from a purchases page."""
