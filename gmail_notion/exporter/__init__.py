"""Dry-run payload export."""
