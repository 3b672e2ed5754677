"""
Payload Builder Module

Turns an email plus a stored mapping set into Notion page properties:
- Handler dispatch by property type
- Per-property fault isolation (one bad mapping never aborts the page)
- Batch building for several emails
"""

from .payload_builder import MappingOrchestrator, MappingResult, build_page_properties

__all__ = [
    "MappingOrchestrator",
    "MappingResult",
    "build_page_properties",
]
