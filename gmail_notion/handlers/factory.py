"""Factory and registry of property handlers, one per writable Notion type."""
import logging
from typing import Dict, List, Optional

from gmail_notion.attachments.service import LINK_ONLY, AttachmentService
from gmail_notion.errors import MappingError
from gmail_notion.handlers.base import PropertyHandler
from gmail_notion.handlers.checkbox import make_checkbox_handler
from gmail_notion.handlers.date import make_date_handler
from gmail_notion.handlers.files import make_files_handler
from gmail_notion.handlers.multi_select import make_multi_select_handler
from gmail_notion.handlers.people import make_people_handler
from gmail_notion.handlers.relation import make_relation_handler
from gmail_notion.handlers.select import make_select_handler
from gmail_notion.handlers.text import TEXT_TYPES, make_text_handler
from gmail_notion.mapper.field_catalog import FieldCatalog
from gmail_notion.schema.models import AUTO_MANAGED_TYPES, WRITABLE_TYPES
from gmail_notion.transformer.registry import TransformerRegistry

logger = logging.getLogger(__name__)


class PropertyHandlerFactory:
    """
    Builds and indexes one handler per writable property type

    Auto-managed types (formula, rollup, created/edited time and actor)
    resolve to None so callers skip them.

    Usage:
    ```python
    factory = PropertyHandlerFactory(resolver=resolver, directory=client)
    handler = factory.get_handler("email")
    fragment = handler.to_payload(mapping, record)
    ```
    """

    def __init__(
        self,
        catalog: Optional[FieldCatalog] = None,
        transformers: Optional[TransformerRegistry] = None,
        resolver=None,
        directory=None,
        attachments=None,
        default_file_handling: str = LINK_ONLY,
    ):
        """
        Initialize PropertyHandlerFactory

        Args:
            catalog: Source field catalog
            transformers: Transformation registry
            resolver: RelationResolver; relation mappings produce nothing without one
            directory: Object with list_members(), used by people configuration
            attachments: AttachmentService for files properties
            default_file_handling: Files mode used when a mapping stores none

        Raises:
            MappingError: If a writable type ends up without a handler
        """
        self.catalog = catalog or FieldCatalog()
        self.transformers = transformers or TransformerRegistry()
        self.resolver = resolver
        if resolver is not None and getattr(resolver, "transformers", None) is None:
            # Relation transformations run inside resolve()
            resolver.transformers = self.transformers
        self.directory = directory
        self.attachments = attachments or AttachmentService()

        self._handlers: Dict[str, PropertyHandler] = {}
        for property_type in TEXT_TYPES:
            self._register(make_text_handler(property_type, self.catalog, self.transformers))
        self._register(make_select_handler("select"))
        self._register(make_select_handler("status"))
        self._register(make_multi_select_handler())
        self._register(make_checkbox_handler())
        self._register(make_date_handler())
        self._register(make_people_handler(self.directory))
        self._register(make_files_handler(self.attachments, default_file_handling))
        self._register(make_relation_handler(self.resolver, self.catalog, self.transformers))

        missing = [t for t in WRITABLE_TYPES if t not in self._handlers]
        if missing:
            raise MappingError(f"No handler registered for property types: {missing}")

        logger.debug(f"Registered {len(self._handlers)} property handlers")

    def _register(self, handler: PropertyHandler) -> None:
        self._handlers[handler.type] = handler

    @staticmethod
    def is_auto_managed(property_type: str) -> bool:
        return property_type in AUTO_MANAGED_TYPES

    def get_handler(self, property_type: str) -> Optional[PropertyHandler]:
        """Handler for a type, or None for auto-managed and unknown types."""
        if self.is_auto_managed(property_type):
            return None
        handler = self._handlers.get(property_type)
        if handler is None:
            logger.debug(f"No handler for property type '{property_type}'")
        return handler

    def has_handler(self, property_type: str) -> bool:
        return self.get_handler(property_type) is not None

    def get_supported_types(self) -> List[str]:
        return list(self._handlers)
