"""Shared fixtures: a throwaway database, projects directory and fake HTTP upstreams."""

from pathlib import Path

import httpx
import pytest

from research_helper.infrastructure.db import Database
from research_helper.services.projects import CITATIONS_DIR, NOTES_DIR

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"

ARXIV_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" xmlns:arxiv="http://arxiv.org/schemas/atom">
  <title>ArXiv Query</title>
  <entry>
    <id>http://arxiv.org/abs/1706.03762v7</id>
    <published>2017-06-12T17:57:34Z</published>
    <title>Attention Is All
      You Need</title>
    <summary>  The dominant sequence transduction models are based on
      complex recurrent or convolutional neural networks.  </summary>
    <author><name>Ashish Vaswani</name></author>
    <author><name>Noam Shazeer</name></author>
    <link href="http://arxiv.org/abs/1706.03762v7" rel="alternate" type="text/html"/>
    <link title="pdf" href="http://arxiv.org/pdf/1706.03762v7" rel="related" type="application/pdf"/>
    <category term="cs.CL" scheme="http://arxiv.org/schemas/atom"/>
    <category term="cs.LG" scheme="http://arxiv.org/schemas/atom"/>
  </entry>
</feed>
"""

EMPTY_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom"><title>ArXiv Query</title></feed>
"""


def fake_upstream(request: httpx.Request) -> httpx.Response:
    """Serve PDFs under /papers/, a 404 for /missing, and the arXiv feed for /api/query."""
    path = request.url.path
    if path.startswith("/papers/") or path.startswith("/pdf/"):
        return httpx.Response(200, content=PDF_BYTES, headers={"Content-Type": "application/pdf"})
    if path == "/api/query":
        if request.url.params.get("id_list") == "9999.99999":
            return httpx.Response(200, content=EMPTY_FEED)
        return httpx.Response(200, content=ARXIV_FEED)
    return httpx.Response(404, text="Not Found")


@pytest.fixture
def transport():
    return httpx.MockTransport(fake_upstream)


@pytest.fixture
def db(tmp_path):
    database = Database(tmp_path / "test.db")
    yield database
    database.close()


@pytest.fixture
def projects_dir(tmp_path) -> Path:
    return tmp_path / "projects"


def make_project(db: Database, projects_dir: Path, name: str = "Thesis", slug: str = "thesis"):
    """Insert a project row whose directory tree already exists."""
    root = projects_dir / slug
    (root / NOTES_DIR).mkdir(parents=True)
    (root / CITATIONS_DIR).mkdir()
    return db.add_project(name, str(root))


@pytest.fixture
def project(db, projects_dir):
    return make_project(db, projects_dir)
