"""Note endpoints; note content travels inline in every response."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from research_helper.api.deps import get_notes
from research_helper.api.schemas import NoteCreate, NoteOut, NoteUpdate
from research_helper.services.notes import NoteStore

router = APIRouter(prefix="/notes", tags=["notes"])


@router.get("", response_model=list[NoteOut])
async def list_notes(project_id: int | None = None, store: NoteStore = Depends(get_notes)):
    return [n.model_dump() for n in await store.get_all_notes(project_id)]


@router.get("/{note_id}", response_model=NoteOut)
async def get_note(note_id: int, store: NoteStore = Depends(get_notes)):
    return (await store.get_note(note_id)).model_dump()


@router.post("", response_model=NoteOut, status_code=201)
async def create_note(body: NoteCreate, store: NoteStore = Depends(get_notes)):
    note = await store.create_note(body.title, body.content, body.tags, body.project_id)
    return note.model_dump()


@router.put("/{note_id}", response_model=NoteOut)
async def update_note(note_id: int, body: NoteUpdate, store: NoteStore = Depends(get_notes)):
    note = await store.update_note(
        note_id, title=body.title, content=body.content, tags=body.tags, project_id=body.project_id
    )
    return note.model_dump()


@router.delete("/{note_id}", status_code=204)
async def delete_note(note_id: int, store: NoteStore = Depends(get_notes)):
    await store.delete_note(note_id)
