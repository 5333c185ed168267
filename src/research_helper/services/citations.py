"""Citation store: downloaded PDFs under <project>/citations/ plus bibliographic rows."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from research_helper.errors import DownloadError, NotFoundError, StorageError, ValidationError
from research_helper.infrastructure.arxiv import ArxivGateway
from research_helper.infrastructure.async_utils import run_sync
from research_helper.infrastructure.db import Database
from research_helper.models import Citation
from research_helper.services.common import db_call, project_root, remove_file_best_effort, require_project
from research_helper.services.paths import CollisionPolicy, allocate, sanitize
from research_helper.services.projects import CITATIONS_DIR

logger = logging.getLogger(__name__)

PDF_SUFFIX = ".pdf"
PARTIAL_SUFFIX = ".part"


def _prepare_target(directory: Path, title: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    return allocate(directory, sanitize(title, collapse=True), PDF_SUFFIX, policy=CollisionPolicy.NUMERIC)


class CitationStore:
    def __init__(self, db: Database, client: httpx.AsyncClient, arxiv: ArxivGateway | None = None):
        self.db = db
        self.client = client
        self.arxiv = arxiv

    async def create_citation(self, title: str, url: str, project_id: int) -> Citation:
        """Download ``url`` into the project's citations directory, then record it.

        The body is streamed to ``<target>.part`` and renamed once complete,
        so a failed download leaves neither a row nor a file behind.
        """
        if not title or not title.strip() or not url or not url.strip():
            raise ValidationError("Title, URL, and project_id are required")
        project = await require_project(self.db, project_id)
        citations_dir = project_root(project) / CITATIONS_DIR

        try:
            target = await run_sync(_prepare_target, citations_dir, title)
        except OSError as e:
            logger.error(f"Failed to prepare citations directory {citations_dir}: {e}")
            raise StorageError(f"Failed to create citations directory: {e}") from e

        await self._download(url, target)

        # No rollback: if the insert fails the PDF stays on disk.
        return await db_call(self.db.add_citation, title, url, str(target), project_id)

    async def _download(self, url: str, target: Path) -> None:
        partial = target.with_name(target.name + PARTIAL_SUFFIX)
        logger.info(f"Downloading PDF from {url}")
        try:
            async with self.client.stream("GET", url) as response:
                if not response.is_success:
                    raise DownloadError(f"Failed to download {url}: HTTP {response.status_code}")
                fh = await run_sync(partial.open, "wb")
                try:
                    async for chunk in response.aiter_bytes():
                        await run_sync(fh.write, chunk)
                finally:
                    await run_sync(fh.close)
            await run_sync(partial.replace, target)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            # Malformed URLs raise InvalidURL or ValueError before any request is sent
            await run_sync(partial.unlink, missing_ok=True)
            logger.error(f"Download of {url} failed: {e}")
            raise DownloadError(f"Failed to download {url}: {e}") from e
        except OSError as e:
            await run_sync(partial.unlink, missing_ok=True)
            logger.error(f"Could not save {url} to {target}: {e}")
            raise StorageError(f"Failed to save PDF: {e}") from e
        except DownloadError:
            await run_sync(partial.unlink, missing_ok=True)
            raise
        logger.info(f"PDF saved to {target}")

    async def get_all_citations(self, project_id: int | None = None) -> list[Citation]:
        return await db_call(self.db.list_citations, project_id)

    async def get_citation(self, citation_id: int) -> Citation:
        citation = await db_call(self.db.get_citation, citation_id)
        if citation is None:
            raise NotFoundError("Citation", citation_id)
        return citation

    async def pdf_path(self, citation_id: int) -> Path:
        """Resolve the PDF behind a citation; a missing file is reported apart from a missing row."""
        citation = await self.get_citation(citation_id)
        path = Path(citation.file_path) if citation.file_path else None
        if path is None or not await run_sync(path.is_file):
            raise NotFoundError("PDF file", citation_id, message=f"PDF file for citation {citation_id} not found")
        return path

    async def update_citation(
        self,
        citation_id: int,
        title: str | None = None,
        url: str | None = None,
        annotations: list | None = None,
    ) -> Citation:
        """Update metadata only; the stored PDF is neither re-fetched nor renamed."""
        if title is not None and not title.strip():
            raise ValidationError("Title cannot be empty")
        citation = await db_call(self.db.update_citation, citation_id, title=title, url=url, annotations=annotations)
        if citation is None:
            raise NotFoundError("Citation", citation_id)
        return citation

    async def delete_citation(self, citation_id: int) -> None:
        citation = await self.get_citation(citation_id)
        await db_call(self.db.delete_citation, citation_id)
        await run_sync(remove_file_best_effort, citation.file_path, "citation PDF")

    async def import_arxiv(self, arxiv_id: str, project_id: int) -> Citation:
        """Look a paper up on arXiv and store it as a citation titled ``<title> [arXiv:<id>]``."""
        if self.arxiv is None:
            raise StorageError("arXiv gateway is not configured")
        await require_project(self.db, project_id)
        paper = await self.arxiv.get_paper(arxiv_id)
        if paper is None:
            raise NotFoundError("arXiv paper", arxiv_id)
        title = f"{paper.title} [arXiv:{paper.arxiv_id}]"
        url = paper.pdf_url or paper.arxiv_url
        return await self.create_citation(title, url, project_id)
