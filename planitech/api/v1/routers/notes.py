from typing import List

from fastapi import APIRouter, Depends, status

from planitech.api.v1.dependencies import get_current_user, get_note_service
from planitech.db.models.users import User
from planitech.features.notes.schemas import NoteCreateIn, NoteOut, NoteUpdateIn
from planitech.features.notes.services import NoteService

router = APIRouter(
    prefix="/task-notes",
    tags=["task-notes"],
    responses={404: {"description": "Not Found"}, 403: {"description": "Forbidden"}},
)

@router.get("/task/{task_id}", summary="Notes d'une tâche", response_model=List[NoteOut])
def task_notes(task_id: int, user: User = Depends(get_current_user), svc: NoteService = Depends(get_note_service)):
    return svc.list_for_task(user, task_id)

@router.post(
    "",
    summary="Ajouter une note",
    status_code=status.HTTP_201_CREATED,
    response_model=NoteOut,
)
def create_note(payload: NoteCreateIn, user: User = Depends(get_current_user), svc: NoteService = Depends(get_note_service)):
    return svc.create(user, payload)

@router.put("/{note_id}", summary="Modifier une note (auteur ou admin)", response_model=NoteOut)
def update_note(
    note_id: int,
    payload: NoteUpdateIn,
    user: User = Depends(get_current_user),
    svc: NoteService = Depends(get_note_service),
):
    return svc.update(user, note_id, payload)

@router.delete(
    "/{note_id}",
    summary="Supprimer une note (auteur ou admin)",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_note(note_id: int, user: User = Depends(get_current_user), svc: NoteService = Depends(get_note_service)):
    svc.delete(user, note_id)
    return None
