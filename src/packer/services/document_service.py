# src/packer/services/document_service.py
from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Doctype
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

logger = logging.getLogger(__name__)

HTML_NAMESPACE = "http://www.w3.org/1999/xhtml"

# Written in front of every packed document, whatever the source declared.
DOCTYPE = b"<!DOCTYPE html>\n"

# Void elements without a trailing slash; only &, < and > are escaped so
# non-ASCII text survives verbatim in the UTF-8 output.
PACK_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
)


class DocumentService:
    """
    Thin adapter around BeautifulSoup.
    html5lib is used as tree builder: it repairs markup the way browsers do and
    tags every element with its namespace (HTML, SVG or MathML).
    """

    PARSER = "html5lib"

    def parse(self, data: bytes) -> BeautifulSoup:
        """
        Parses raw UTF-8 bytes into a mutable tree. Any doctype in the source is dropped.
        Parsing never fails: malformed markup is repaired, not rejected.
        """
        # multi_valued_attributes=None keeps e.g. class="a  b" as one verbatim string.
        soup = BeautifulSoup(data, self.PARSER, from_encoding="utf-8", multi_valued_attributes=None)

        doctypes = [node for node in soup.contents if isinstance(node, Doctype)]
        for node in doctypes:
            node.extract()
        if doctypes:
            logger.debug("Dropped %d doctype declaration(s) from source.", len(doctypes))
        return soup

    def serialize(self, soup: BeautifulSoup) -> bytes:
        """Serializes the tree back to UTF-8 bytes. The doctype literal is not included."""
        return soup.decode(formatter=PACK_FORMATTER).encode("utf-8")
