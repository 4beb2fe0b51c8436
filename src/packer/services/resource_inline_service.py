# src/packer/services/resource_inline_service.py
import logging
import mimetypes
import os
from typing import Dict, Optional

from htmlpack.core.managers.config_manager import config_manager
from packer.model import EmbeddedResource

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Image formats that older interpreters do not ship in their defaults.
MODERN_IMAGE_TYPES: Dict[str, str] = {
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".apng": "image/apng",
    ".ico": "image/x-icon",
    ".jxl": "image/jxl",
}


class ResourceInlineService:
    """
    Turns a resolved file into an EmbeddedResource (content type + raw bytes).
    The content type is a best-effort guess from the extension only; the file
    content is never sniffed.
    """

    def __init__(self, extra_types: Optional[Dict[str, str]] = None):
        # MimeTypes() only carries the interpreter's built-in table, never /etc/mime.types,
        # so the guess does not depend on the host.
        self._table = mimetypes.MimeTypes()
        configured = extra_types if extra_types is not None else config_manager.get_nested("inliner.extra_types", {})
        self._overrides: Dict[str, str] = dict(MODERN_IMAGE_TYPES)
        for ext, content_type in (configured or {}).items():
            key = ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            self._overrides[key] = content_type

    def guess_content_type(self, path: str) -> str:
        ext = os.path.splitext(path)[1].lower()
        if not ext:
            return DEFAULT_CONTENT_TYPE
        return (
            self._overrides.get(ext)
            or self._table.types_map[True].get(ext)
            or self._table.types_map[False].get(ext)
            or DEFAULT_CONTENT_TYPE
        )

    def inline(self, path: str) -> Optional[EmbeddedResource]:
        """
        Reads the whole file and wraps it for embedding.

        Returns:
            Optional[EmbeddedResource]: None when the file cannot be opened or fully read.
        """
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            logger.debug("Could not read %s: %s", path, e)
            return None

        return EmbeddedResource(path=path, content_type=self.guess_content_type(path), data=data)
