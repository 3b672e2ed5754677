"""
Database Introspection Module

Reads the live structure of Notion databases:
- Property types, ids and required flags
- Select/status/multi-select options
- Relation targets
- Schema caching (2 minute TTL)
"""

from .database_introspector import DatabaseIntrospector
from .schema_analyzer import SchemaAnalyzer

__all__ = [
    "DatabaseIntrospector",
    "SchemaAnalyzer",
]
