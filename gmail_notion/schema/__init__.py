"""Notion database schema and email record models."""
