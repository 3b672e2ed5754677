"""
Property handlers

One PropertyHandler record per Notion property type, each made of three
functions: build_ui, parse_configuration and to_payload.
"""

from .base import PropertyHandler
from .factory import PropertyHandlerFactory
from .text import CHUNK_SIZE, TEXT_TYPES

__all__ = [
    "PropertyHandler",
    "PropertyHandlerFactory",
    "CHUNK_SIZE",
    "TEXT_TYPES",
]
