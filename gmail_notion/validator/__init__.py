"""Mapping validation against handlers and the live schema."""
