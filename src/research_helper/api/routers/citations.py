"""Citation endpoints, PDF serving and arXiv search/import."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse

from research_helper.api.deps import get_arxiv, get_citations
from research_helper.api.schemas import ArxivImport, ArxivPaperOut, CitationCreate, CitationOut, CitationUpdate
from research_helper.infrastructure.arxiv import ArxivGateway
from research_helper.services.citations import CitationStore

router = APIRouter(prefix="/citations", tags=["citations"])


@router.get("", response_model=list[CitationOut])
async def list_citations(project_id: int | None = None, store: CitationStore = Depends(get_citations)):
    return [c.model_dump() for c in await store.get_all_citations(project_id)]


@router.post("", response_model=CitationOut, status_code=201)
async def create_citation(body: CitationCreate, store: CitationStore = Depends(get_citations)):
    citation = await store.create_citation(body.title, body.url, body.project_id)
    return citation.model_dump()


@router.get("/search/arxiv", response_model=list[ArxivPaperOut])
async def search_arxiv(
    query: str = "",
    start: int = Query(0, ge=0),
    max_results: int = Query(10, ge=1, le=100),
    arxiv: ArxivGateway = Depends(get_arxiv),
):
    return [p.model_dump() for p in await arxiv.search(query, start=start, max_results=max_results)]


@router.post("/arxiv", response_model=CitationOut, status_code=201)
async def import_arxiv(body: ArxivImport, store: CitationStore = Depends(get_citations)):
    citation = await store.import_arxiv(body.arxiv_id, body.project_id)
    return citation.model_dump()


@router.get("/pdf/{citation_id}")
async def serve_pdf(citation_id: int, store: CitationStore = Depends(get_citations)):
    path = await store.pdf_path(citation_id)
    return FileResponse(path, media_type="application/pdf", filename=path.name)


@router.get("/{citation_id}", response_model=CitationOut)
async def get_citation(citation_id: int, store: CitationStore = Depends(get_citations)):
    return (await store.get_citation(citation_id)).model_dump()


@router.put("/{citation_id}", response_model=CitationOut)
async def update_citation(citation_id: int, body: CitationUpdate, store: CitationStore = Depends(get_citations)):
    citation = await store.update_citation(
        citation_id, title=body.title, url=body.url, annotations=body.annotations
    )
    return citation.model_dump()


@router.delete("/{citation_id}", status_code=204)
async def delete_citation(citation_id: int, store: CitationStore = Depends(get_citations)):
    await store.delete_citation(citation_id)
