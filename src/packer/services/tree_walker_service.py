# src/packer/services/tree_walker_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import BeautifulSoup, PageElement, Tag

from packer.model import PackWarning, SearchContext
from packer.services.document_service import HTML_NAMESPACE
from packer.services.resource_inline_service import ResourceInlineService
from packer.services.resource_resolver_service import ResourceResolverService

logger = logging.getLogger(__name__)

IMG_TAG = "img"
SRC_ATTR = "src"


@dataclass
class WalkOutcome:
    warnings: List[PackWarning] = field(default_factory=list)
    inlined_count: int = 0


class TreeWalkerService:
    """
    Visits a parsed document in document order and rewrites <img src> references
    into data URIs, mutating attribute values in place.
    Nodes are never inserted, removed or reordered.
    """

    def __init__(
            self,
            resolver: Optional[ResourceResolverService] = None,
            inliner: Optional[ResourceInlineService] = None,
    ):
        self.resolver = resolver or ResourceResolverService()
        self.inliner = inliner or ResourceInlineService()

    def walk(self, root: PageElement, context: SearchContext) -> WalkOutcome:
        """
        Pre-order traversal (node before its children, siblings in order).
        An explicit stack is used so deeply nested documents do not hit the recursion limit.
        """
        outcome = WalkOutcome()
        stack: List[PageElement] = [root]

        while stack:
            node = stack.pop()
            if not isinstance(node, Tag):
                continue  # Text, Comment, Doctype, ProcessingInstruction

            if not isinstance(node, BeautifulSoup):
                if node.namespace != HTML_NAMESPACE:
                    # SVG/MathML islands: skip the whole subtree, keep going elsewhere.
                    warning = PackWarning.foreign_namespace(node.namespace, node.name)
                    logger.warning(warning.message)
                    outcome.warnings.append(warning)
                    continue
                if node.name == IMG_TAG:
                    self._rewrite_img(node, context, outcome)

            # Reverse so the first child is popped first.
            stack.extend(reversed(node.contents))

        return outcome

    def _rewrite_img(self, tag: Tag, context: SearchContext, outcome: WalkOutcome) -> None:
        # Every matching attribute is handled, in attribute order.
        for name in list(tag.attrs):
            if name != SRC_ATTR:
                continue
            reference = tag.attrs[name]
            path = self.resolver.resolve(reference, context)
            if path is None:
                warning = PackWarning.not_found(reference)
                logger.warning(warning.message)
                outcome.warnings.append(warning)
                continue

            resource = self.inliner.inline(path)
            if resource is None:
                warning = PackWarning.unreadable(reference, path)
                logger.warning(warning.message)
                outcome.warnings.append(warning)
                continue

            tag.attrs[name] = resource.data_uri
            outcome.inlined_count += 1
            logger.debug("Inlined %s (%s, %d bytes)", reference, resource.content_type, len(resource.data))
