"""Attachment processing for files properties."""
