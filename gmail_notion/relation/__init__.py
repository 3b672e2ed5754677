"""
Relation resolution

Finds the linked database behind a relation property, caches its field
list, and matches email values against its pages.
"""

from .cache import FieldCache
from .filters import build_filter
from .identify import identify_database_id
from .resolver import PLACEHOLDER_FIELDS, RelatedField, RelationResolver

__all__ = [
    "FieldCache",
    "RelatedField",
    "RelationResolver",
    "PLACEHOLDER_FIELDS",
    "build_filter",
    "identify_database_id",
]
