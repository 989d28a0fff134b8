#!/usr/bin/env python3
"""
Document parsing capability.

Collectors take a ``parse_document`` callable rather than importing
BeautifulSoup directly, so a different backend can be swapped in.
"""

import re
from typing import Callable, Optional

from bs4 import BeautifulSoup, Tag

from utils.errors import ParseError

DocumentParser = Callable[[str], BeautifulSoup]


def parse_document(html: str) -> BeautifulSoup:
    """Parse an HTML string into a navigable tree."""
    return BeautifulSoup(html, 'html.parser')


def node_text(node: Optional[Tag]) -> str:
    """Text content of a node with runs of whitespace collapsed."""
    if node is None:
        return ""
    return re.sub(r"\s+", " ", node.get_text(" ")).strip()


def require_one(node: Tag, selector: str, what: str, location: str = "") -> Tag:
    """Return the first match for ``selector`` or raise ParseError."""
    found = node.select_one(selector)
    if found is None:
        raise ParseError(f"missing {what} ({selector})", location)
    return found


def require_attr(node: Tag, attr: str, location: str = "") -> str:
    value = node.get(attr)
    if not value:
        raise ParseError(f"missing attribute '{attr}' on <{node.name}>", location)
    if isinstance(value, list):
        value = " ".join(value)
    return value.strip()


def body_rows(table: Tag):
    """Rows of a table body, skipping header-only rows."""
    tbody = table.find('tbody')
    rows = tbody.find_all('tr', recursive=False) if tbody else table.find_all('tr')
    return [row for row in rows if row.find('td')]
