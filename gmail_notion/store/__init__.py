"""Mapping persistence."""
