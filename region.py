#!/usr/bin/env python3
"""
Regional routing values, scraped from the regional-endpoints page.

The first table inside the page's ``.panel-content`` lists one row per
platform: ``service | platform | host``.
"""

import logging
from typing import List, Optional

from bs4 import Tag
from pydantic import BaseModel

from client import SchemaClient
from utils.errors import ParseError
from utils.html_parser import DocumentParser, body_rows, node_text, parse_document, require_one

logger = logging.getLogger(__name__)

REGIONS_PAGE = "regional-endpoints.html"
DEFAULT_PLATFORM = "na1"


class Region(BaseModel):
    """One row of the regional endpoints table."""
    service: str
    platform: str
    host: str

    @property
    def code(self) -> str:
        return self.platform.lower()

    @classmethod
    def from_row(cls, row: Tag) -> "Region":
        cells = row.find_all("td")
        if len(cells) < 3:
            raise ParseError(f"expected 3 cells, found {len(cells)}", "regional endpoints table")
        service, platform, host = (node_text(c) for c in cells[:3])
        if not platform or not host:
            raise ParseError("empty platform or host cell", "regional endpoints table")
        return cls(service=service, platform=platform, host=host)


def default_region(regions: List[Region]) -> Optional[Region]:
    """The region used where a dialect needs a single host."""
    for region in regions:
        if region.code == DEFAULT_PLATFORM:
            return region
    return regions[0] if regions else None


def server_template(regions: List[Region]) -> Optional[str]:
    """
    URL template with the platform replaced by ``{platform}``,
    e.g. ``https://{platform}.api.riotgames.com``.
    """
    region = default_region(regions)
    if region is None:
        return None
    host = region.host.lower()
    if host.startswith(region.code):
        host = "{platform}" + host[len(region.code):]
    return f"https://{host}"


class RegionCollector:
    """Fetches and parses the regional endpoints table."""

    def __init__(self, client: SchemaClient, parse: DocumentParser = parse_document):
        self.client = client
        self.parse = parse

    async def collect(self) -> List[Region]:
        logger.info("🌐 Fetching regional endpoints...")
        document = self.parse(await self.client.fetch(REGIONS_PAGE))
        panel = require_one(document, ".panel-content", "content panel", REGIONS_PAGE)
        table = require_one(panel, "table", "regions table", REGIONS_PAGE)
        regions = [Region.from_row(row) for row in body_rows(table)]
        logger.info(f"📋 Found {len(regions)} regions")
        return regions
