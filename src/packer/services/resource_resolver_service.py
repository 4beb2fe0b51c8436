# src/packer/services/resource_resolver_service.py
import logging
import os
from typing import Iterator, Optional

from packer.model import SearchContext

logger = logging.getLogger(__name__)


class ResourceResolverService:
    """
    Maps a reference string from the document to an existing file.
    The reference is treated as an opaque relative path; '..' segments are
    left to ordinary path joining.
    """

    @staticmethod
    def candidates(reference: str, context: SearchContext) -> Iterator[str]:
        """Yields the candidate paths in lookup order: base directory first, then each search path."""
        yield os.path.join(context.base_directory, reference)
        for search_path in context.search_paths:
            yield os.path.join(search_path, reference)

    def resolve(self, reference: str, context: SearchContext) -> Optional[str]:
        """
        Returns the first candidate that exists on the filesystem.

        Args:
            reference (str): The raw attribute value, e.g. 'img/logo.png'.
            context (SearchContext): Base directory and ordered search paths.

        Returns:
            Optional[str]: The absolute path of the resource, or None if no candidate exists.
        """
        for candidate in self.candidates(reference, context):
            # os.path.exists swallows ENAMETOOLONG and embedded NUL bytes,
            # which is what an already inlined data URI produces.
            if os.path.exists(candidate):
                resolved = os.path.abspath(candidate)
                logger.debug("Resolved %s -> %s", reference, resolved)
                return resolved
        return None
