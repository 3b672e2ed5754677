"""Notion REST API client."""
