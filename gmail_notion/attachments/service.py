"""
Attachment Service - turns email attachment metadata into external file links

Modes:
- upload: hand each attachment to an uploader callable that returns a public URL
- link_only: use the URL already present in the attachment metadata
- skip: produce nothing
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

UPLOAD = "upload"
LINK_ONLY = "link_only"
SKIP = "skip"
MODES = (UPLOAD, LINK_ONLY, SKIP)

# Gmail's own attachment size limit
MAX_FILE_SIZE = 25 * 1024 * 1024

_UNSAFE = re.compile(r"[^\w\-. ]+")

Uploader = Callable[[Dict[str, Any], str], str]


class AttachmentService:
    """
    Produces [{"name", "url"}] references for attachments

    Usage:
    ```python
    service = AttachmentService(uploader=drive_upload)
    files = service.process(record.get_value("attachments"), record.subject, "upload")
    ```
    """

    def __init__(self, uploader: Optional[Uploader] = None, max_file_size: int = MAX_FILE_SIZE):
        """
        Initialize AttachmentService

        Args:
            uploader: Callable(attachment, filename) -> public URL, used in upload mode
            max_file_size: Attachments larger than this (bytes) are skipped
        """
        self.uploader = uploader
        self.max_file_size = max_file_size

    def process(
        self,
        attachments: List[Dict[str, Any]],
        context: str,
        mode: str,
    ) -> List[Dict[str, str]]:
        """
        Resolve attachments to external links

        Args:
            attachments: Attachment metadata ({name, size, url, contentType})
            context: Text used to name unnamed files (usually the subject)
            mode: One of MODES; "upload_to_drive" is accepted for "upload"

        Returns:
            List of {"name", "url"}; attachments without a URL are left out
        """
        if mode == "upload_to_drive":
            mode = UPLOAD
        if mode == SKIP or not attachments:
            return []
        if mode not in MODES:
            logger.warning(f"Unknown file handling mode '{mode}', using {LINK_ONLY}")
            mode = LINK_ONLY
        if mode == UPLOAD and self.uploader is None:
            logger.warning("No uploader configured, falling back to attachment links")
            mode = LINK_ONLY

        results = []
        for index, attachment in enumerate(attachments):
            name = attachment.get("name") or self.safe_filename(context, index)
            try:
                size = int(attachment.get("size") or 0)
            except (TypeError, ValueError):
                logger.warning(f"Skipping attachment '{name}': invalid size {attachment.get('size')!r}")
                continue

            if size > self.max_file_size:
                logger.warning(f"Skipping attachment '{name}': {size} bytes exceeds limit")
                continue

            if mode == UPLOAD:
                try:
                    url = self.uploader(attachment, name)
                except Exception as e:
                    logger.error(f"Upload failed for attachment '{name}': {e}")
                    continue
            else:
                url = attachment.get("url") or ""

            if not url:
                logger.debug(f"Attachment '{name}' has no URL, skipping")
                continue

            results.append({"name": name, "url": url})

        logger.info(f"Processed {len(results)}/{len(attachments)} attachments ({mode})")
        return results

    @staticmethod
    def safe_filename(context: str, index: int = 0) -> str:
        """Filesystem-safe name derived from the email subject."""
        base = _UNSAFE.sub("_", context or "").strip(" ._")[:50] or "attachment"
        return f"{base}_{index + 1}"
