#!/usr/bin/env python3
"""
Endpoint discovery and detail scraping.

Stage 1 reads the ``api-methods/`` index and finds every ``.api_option``
marker (``api-name`` attribute plus an ``.api_desc`` description). Stage 2
fetches each ``api-details/<name>`` JSON envelope concurrently and parses its
embedded HTML. Any single failure fails the whole collection.
"""

import asyncio
import logging
from typing import List, Tuple

from client import SchemaClient
from endpoint import Endpoint, parse_endpoint
from utils.errors import ParseError
from utils.html_parser import DocumentParser, node_text, parse_document, require_attr, require_one

logger = logging.getLogger(__name__)

INDEX_PAGE = "api-methods/"
DETAILS_PAGE = "api-details/{name}"


class EndpointCollector:
    """Collects every documented endpoint from the documentation site."""

    def __init__(self, client: SchemaClient, parse: DocumentParser = parse_document):
        self.client = client
        self.parse = parse

    async def discover(self) -> List[Tuple[str, str]]:
        """Stage 1: (name, description) for every endpoint in the index."""
        logger.info("🔍 Stage 1: Discovering endpoints...")
        document = self.parse(await self.client.fetch(INDEX_PAGE))
        markers = []
        seen = set()
        for element in document.select(".api_option"):
            name = require_attr(element, "api-name", INDEX_PAGE)
            if name in seen:
                raise ParseError(f"duplicate endpoint name {name!r}", INDEX_PAGE)
            seen.add(name)
            desc = node_text(require_one(element, ".api_desc", f"description of {name}", INDEX_PAGE))
            markers.append((name, desc))
        logger.info(f"📋 Discovered {len(markers)} endpoints")
        return markers

    async def fetch_endpoint(self, name: str, description: str) -> Endpoint:
        """Fetch one detail envelope and parse the HTML it carries."""
        path = DETAILS_PAGE.format(name=name)
        envelope = await self.client.fetch_json(path)
        if not isinstance(envelope, dict) or not isinstance(envelope.get("html"), str):
            raise ParseError("detail envelope has no 'html' field", path)
        endpoint = parse_endpoint(self.parse(envelope["html"]), name, description)
        logger.debug(f"  ✅ {name}: {len(endpoint.operations)} operations")
        return endpoint

    async def collect(self) -> List[Endpoint]:
        """
        Stage 2: fetch and parse every endpoint concurrently.

        Waits for all tasks to settle, then raises the first failure if any.
        """
        markers = await self.discover()
        results = await asyncio.gather(
            *(self.fetch_endpoint(name, desc) for name, desc in markers),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(f"❌ {len(failures)} of {len(markers)} endpoints failed")
            raise failures[0]

        endpoints: List[Endpoint] = list(results)
        logger.info(f"✅ Collected {len(endpoints)} endpoints")
        return endpoints
