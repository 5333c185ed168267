"""arXiv API gateway: free-text search and id lookup over the Atom export API.

arXiv API: https://info.arxiv.org/help/api/
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET

import httpx

from research_helper.config import ARXIV_API_URL
from research_helper.errors import DownloadError, ValidationError
from research_helper.models import ArxivPaper

logger = logging.getLogger(__name__)

NS = {"atom": "http://www.w3.org/2005/Atom", "arxiv": "http://arxiv.org/schemas/atom"}

# New-style ids (YYMM.NNNNN, optional version) and old-style archive/YYMMNNN ids
_NEW_ID = re.compile(r"(\d{4}\.\d{4,5})(?:v\d+)?")
_OLD_ID = re.compile(r"([a-z\-]+(?:\.[A-Z]{2})?/\d{7})(?:v\d+)?", re.IGNORECASE)


def extract_arxiv_id(text: str) -> str | None:
    """Pull a version-less arXiv id out of a URL or plain id.

    Examples:
        "http://arxiv.org/abs/2103.12345v2" -> "2103.12345"
        "arXiv:2103.12345" -> "2103.12345"
        "http://arxiv.org/abs/hep-th/9901001v1" -> "hep-th/9901001"
    """
    match = _NEW_ID.search(text)
    if match:
        return match.group(1)
    match = _OLD_ID.search(text)
    if match:
        return match.group(1)
    return None


def _text(entry: ET.Element, tag: str) -> str:
    el = entry.find(tag, NS)
    if el is None or el.text is None:
        return ""
    return " ".join(el.text.split())


def parse_feed(content: bytes) -> list[ArxivPaper]:
    """Turn an arXiv Atom feed into ArxivPaper records."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise DownloadError(f"Failed to parse arXiv response: {e}") from e

    papers = []
    for entry in root.findall("atom:entry", NS):
        entry_id = _text(entry, "atom:id")
        arxiv_id = extract_arxiv_id(entry_id)
        if not arxiv_id:
            # arXiv reports query errors as an entry without a paper id
            continue

        pdf_url = ""
        abs_url = ""
        for link in entry.findall("atom:link", NS):
            if link.get("title") == "pdf" and not pdf_url:
                pdf_url = link.get("href", "")
            elif link.get("rel") == "alternate" and not abs_url:
                abs_url = link.get("href", "")

        authors = [_text(a, "atom:name") for a in entry.findall("atom:author", NS)]
        categories = [c.get("term") for c in entry.findall("atom:category", NS) if c.get("term")]

        papers.append(
            ArxivPaper(
                id=entry_id,
                arxiv_id=arxiv_id,
                title=_text(entry, "atom:title"),
                authors=[a for a in authors if a],
                summary=_text(entry, "atom:summary"),
                pdf_url=pdf_url,
                arxiv_url=abs_url or entry_id,
                published=_text(entry, "atom:published"),
                categories=categories,
            )
        )
    return papers


class ArxivGateway:
    def __init__(self, client: httpx.AsyncClient, base_url: str = ARXIV_API_URL):
        self.client = client
        self.base_url = base_url

    async def _query(self, params: dict) -> list[ArxivPaper]:
        logger.info(f"Querying arXiv API: {self.base_url} {params}")
        try:
            response = await self.client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"arXiv request failed: {e}")
            raise DownloadError(f"Failed to search arXiv: {e}") from e
        if not response.is_success:
            raise DownloadError(f"Failed to search arXiv: HTTP {response.status_code}")
        return parse_feed(response.content)

    async def search(self, query: str, start: int = 0, max_results: int = 10) -> list[ArxivPaper]:
        if not query or not query.strip():
            raise ValidationError("Search query is required")
        params = {"search_query": f"all:{query.strip()}", "start": start, "max_results": max_results}
        return await self._query(params)

    async def get_paper(self, arxiv_id: str) -> ArxivPaper | None:
        bare = extract_arxiv_id(arxiv_id)
        if not bare:
            raise ValidationError(f"Not an arXiv id: {arxiv_id!r}")
        papers = await self._query({"id_list": bare, "max_results": 1})
        return papers[0] if papers else None
