"""Tests for arXiv id extraction, feed parsing and the gateway."""

import httpx
import pytest

from conftest import ARXIV_FEED
from research_helper.errors import DownloadError, ValidationError
from research_helper.infrastructure.arxiv import ArxivGateway, extract_arxiv_id, parse_feed


@pytest.mark.parametrize(
    "text, expected",
    [
        ("http://arxiv.org/abs/2103.12345v2", "2103.12345"),
        ("arXiv:2103.12345", "2103.12345"),
        ("1706.03762", "1706.03762"),
        ("http://arxiv.org/abs/hep-th/9901001v1", "hep-th/9901001"),
        ("math.GT/0309136", "math.GT/0309136"),
        ("not an id", None),
    ],
)
def test_extract_arxiv_id(text, expected):
    assert extract_arxiv_id(text) == expected


def test_parse_feed():
    [paper] = parse_feed(ARXIV_FEED)

    assert paper.arxiv_id == "1706.03762"
    assert paper.id == "http://arxiv.org/abs/1706.03762v7"
    assert paper.title == "Attention Is All You Need"
    assert paper.authors == ["Ashish Vaswani", "Noam Shazeer"]
    assert paper.summary.startswith("The dominant sequence transduction models")
    assert paper.pdf_url == "http://arxiv.org/pdf/1706.03762v7"
    assert paper.arxiv_url == "http://arxiv.org/abs/1706.03762v7"
    assert paper.published == "2017-06-12T17:57:34Z"
    assert paper.categories == ["cs.CL", "cs.LG"]


def test_parse_feed_skips_error_entries():
    feed = b"""<?xml version="1.0"?>
    <feed xmlns="http://www.w3.org/2005/Atom">
      <entry><id>http://arxiv.org/api/errors#incorrect_id_format</id><title>Error</title></entry>
    </feed>"""
    assert parse_feed(feed) == []


def test_parse_feed_rejects_garbage():
    with pytest.raises(DownloadError):
        parse_feed(b"<html><body>Service Unavailable")


@pytest.mark.asyncio
async def test_search_sends_query_params():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, content=ARXIV_FEED)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        gateway = ArxivGateway(client, "http://arxiv.test/api/query")
        papers = await gateway.search(" transformers ", start=20, max_results=5)

    assert len(papers) == 1
    assert seen == {"search_query": "all:transformers", "start": "20", "max_results": "5"}


@pytest.mark.asyncio
async def test_search_requires_query():
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))) as client:
        with pytest.raises(ValidationError):
            await ArxivGateway(client).search("   ")


@pytest.mark.asyncio
async def test_upstream_failure_is_download_error():
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(503))) as client:
        with pytest.raises(DownloadError, match="HTTP 503"):
            await ArxivGateway(client, "http://arxiv.test/api/query").search("graphs")


@pytest.mark.asyncio
async def test_get_paper_rejects_non_ids():
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))) as client:
        with pytest.raises(ValidationError):
            await ArxivGateway(client).get_paper("hello world")
