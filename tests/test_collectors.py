#!/usr/bin/env python3
"""
Test script for endpoint and region collection (Phase 3).
Runs the collectors against a mocked documentation site.
"""

import asyncio
import sys

import pytest

from endpoint_collector import EndpointCollector
from fakes import INDEX_HTML, FakeSite, default_pages, match_detail_html
from region import RegionCollector, default_region, server_template
from utils.errors import FetchError, ParseError


def _collect(site, collector_cls):
    async def go():
        client = site.client()
        try:
            return await collector_cls(client).collect()
        finally:
            await client.close()
    return asyncio.run(go())


def test_collect_single_endpoint():
    """Index lists "match" / "Match APIs"; its detail page parses fully."""
    site = FakeSite()
    endpoints = _collect(site, EndpointCollector)

    assert len(endpoints) == 1
    endpoint = endpoints[0]
    assert endpoint.name == "match"
    assert endpoint.description == "Match APIs"
    assert endpoint.list_missing_dtos() == []
    assert site.calls["/api-details/match"] == 1


def test_collect_many_endpoints_unique_names():
    index = INDEX_HTML.replace(
        "</ul>",
        '<li class="api_option" api-name="match-v5"><span class="api_desc">Match v5</span></li></ul>')
    pages = default_pages()
    pages["/api-methods/"] = index
    pages["/api-details/match-v5"] = {"html": match_detail_html()}

    endpoints = _collect(FakeSite(pages=pages), EndpointCollector)
    names = [e.name for e in endpoints]
    print(f"   📋 Endpoints: {names}")
    assert sorted(names) == ["match", "match-v5"]
    assert len(set(names)) == len(names)
    v5 = next(e for e in endpoints if e.name == "match-v5")
    assert v5.dtos["MatchDto"].full_name == "match-v5.MatchDto"


def test_duplicate_index_entries_are_rejected():
    index = INDEX_HTML.replace(
        "</ul>",
        '<li class="api_option" api-name="match"><span class="api_desc">Again</span></li></ul>')
    pages = default_pages()
    pages["/api-methods/"] = index
    with pytest.raises(ParseError):
        _collect(FakeSite(pages=pages), EndpointCollector)


def test_detail_failure_is_fatal():
    """A detail page failing twice aborts the whole collection."""
    site = FakeSite(fail_times={"/api-details/match": 2})
    with pytest.raises(FetchError):
        _collect(site, EndpointCollector)
    assert site.calls["/api-details/match"] == 2


def test_detail_transient_failure_recovers():
    site = FakeSite(fail_times={"/api-details/match": 1})
    endpoints = _collect(site, EndpointCollector)
    assert [e.name for e in endpoints] == ["match"]


def test_envelope_without_html_is_parse_error():
    pages = default_pages()
    pages["/api-details/match"] = {"content": "<li></li>"}
    with pytest.raises(ParseError):
        _collect(FakeSite(pages=pages), EndpointCollector)


def test_index_marker_without_description_is_parse_error():
    pages = default_pages()
    pages["/api-methods/"] = '<div class="api_option" api-name="match"></div>'
    with pytest.raises(ParseError):
        _collect(FakeSite(pages=pages), EndpointCollector)


def test_collect_regions_from_first_table():
    regions = _collect(FakeSite(), RegionCollector)

    assert [r.code for r in regions] == ["br1", "na1", "kr"]
    assert regions[0].service == "BR"
    assert regions[0].host == "br1.api.riotgames.com"
    assert default_region(regions).code == "na1"
    assert server_template(regions) == "https://{platform}.api.riotgames.com"


def test_regions_page_without_panel_is_parse_error():
    pages = default_pages()
    pages["/regional-endpoints.html"] = "<html><table></table></html>"
    with pytest.raises(ParseError):
        _collect(FakeSite(pages=pages), RegionCollector)


def test_short_region_row_is_parse_error():
    pages = default_pages()
    pages["/regional-endpoints.html"] = (
        '<div class="panel-content"><table><tbody><tr><td>BR</td><td>BR1</td></tr></tbody></table></div>')
    with pytest.raises(ParseError):
        _collect(FakeSite(pages=pages), RegionCollector)


def test_no_regions_means_no_server_template():
    assert default_region([]) is None
    assert server_template([]) is None


def main():
    """Run the tests without pytest's collector."""
    sys.exit(pytest.main([__file__, "-v"]))


if __name__ == "__main__":
    main()
