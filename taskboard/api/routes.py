"""API routes for todos, comments, notes and their histories."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from taskboard.api.schemas import (
    ChangeRecordListResponse,
    ChangeRecordResponse,
    CommentResponse,
    CommentWrite,
    ErrorResponse,
    LabelCreate,
    LabelResponse,
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    PageMeta,
    RevisionListResponse,
    RevisionResponse,
    TodoCreate,
    TodoListResponse,
    TodoResponse,
    TodoUpdate,
)
from taskboard.config import Settings, get_settings
from taskboard.database import get_db
from taskboard.models.audit import ChangeRecord
from taskboard.models.domain import Comment, utcnow
from taskboard.services.change_recorder import describe
from taskboard.services.comments import CommentService
from taskboard.services.context import ActorContext, Clock
from taskboard.services.notes import NoteService
from taskboard.services.pagination import DEFAULT_PER_PAGE, Page
from taskboard.services.revisions import RevisionStore
from taskboard.services.taxonomy import TaxonomyService
from taskboard.services.todos import TodoService

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Not found for this user"}}

router = APIRouter()


# Dependencies
def get_clock() -> Clock:
    """Overridden in tests to pin the time."""
    return utcnow


def get_actor(
    x_user_id: Optional[str] = Header(None),
    clock: Clock = Depends(get_clock),
) -> ActorContext:
    """The acting user, as established by the upstream auth layer."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id header")
    return ActorContext(actor_id=x_user_id, now=clock)


def get_page(page: int = Query(1), per_page: int = Query(DEFAULT_PER_PAGE)) -> Page:
    return Page.clamp(page, per_page)


def todo_service(db: Session = Depends(get_db), actor: ActorContext = Depends(get_actor)) -> TodoService:
    return TodoService(db, actor)


def note_service(
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
    settings: Settings = Depends(get_settings),
) -> NoteService:
    revisions = RevisionStore(db, max_revisions=settings.max_revisions_per_note, now=actor.now)
    return NoteService(db, actor, revisions)


def comment_service(
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
    settings: Settings = Depends(get_settings),
) -> CommentService:
    return CommentService(db, actor, edit_window=settings.comment_edit_window)


def taxonomy_service(db: Session = Depends(get_db), actor: ActorContext = Depends(get_actor)) -> TaxonomyService:
    return TaxonomyService(db, actor)


def _meta(page: Page, total: int) -> PageMeta:
    return PageMeta(
        total=total,
        current_page=page.page,
        total_pages=page.total_pages(total),
        per_page=page.per_page,
    )


def _history_entry(record: ChangeRecord) -> ChangeRecordResponse:
    return ChangeRecordResponse(
        id=record.id,
        todo_id=record.entity_id,
        actor_id=record.actor_id,
        action=record.action,
        changes=record.field_changes,
        summary=describe(record),
        created_at=record.created_at,
    )


def _comment_entry(comment: Comment, service: CommentService) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        content=comment.content,
        user_id=comment.user_id,
        editable=service.is_editable(comment),
        created_at=comment.created_at,
        updated_at=comment.updated_at,
    )


# Category / Tag endpoints
@router.post("/categories", response_model=LabelResponse, status_code=status.HTTP_201_CREATED)
def create_category(data: LabelCreate, service: TaxonomyService = Depends(taxonomy_service)):
    return service.create_category(data.name, data.color)


@router.get("/categories", response_model=List[LabelResponse])
def list_categories(service: TaxonomyService = Depends(taxonomy_service)):
    return service.list_categories()


@router.post("/tags", response_model=LabelResponse, status_code=status.HTTP_201_CREATED)
def create_tag(data: LabelCreate, service: TaxonomyService = Depends(taxonomy_service)):
    return service.create_tag(data.name, data.color)


@router.get("/tags", response_model=List[LabelResponse])
def list_tags(service: TaxonomyService = Depends(taxonomy_service)):
    return service.list_tags()


# Todo endpoints
@router.post("/todos", response_model=TodoResponse, status_code=status.HTTP_201_CREATED, responses=NOT_FOUND)
def create_todo(data: TodoCreate, service: TodoService = Depends(todo_service)):
    """Create a todo. A 'created' history entry is written with it."""
    return service.create(**data.model_dump())


@router.get("/todos", response_model=TodoListResponse)
def list_todos(page: Page = Depends(get_page), service: TodoService = Depends(todo_service)):
    todos, total = service.list(page)
    return TodoListResponse(
        todos=[TodoResponse.model_validate(todo) for todo in todos],
        meta=_meta(page, total),
    )


@router.get("/todos/{todo_id}", response_model=TodoResponse, responses=NOT_FOUND)
def get_todo(todo_id: int, service: TodoService = Depends(todo_service)):
    return service.get(todo_id)


@router.patch("/todos/{todo_id}", response_model=TodoResponse, responses=NOT_FOUND)
def update_todo(todo_id: int, data: TodoUpdate, service: TodoService = Depends(todo_service)):
    """
    Update a todo.
    Side effect: a history entry is written only if some tracked field actually changed.
    """
    todo, _ = service.update(todo_id, data.model_dump(exclude_unset=True))
    return todo


@router.delete("/todos/{todo_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
def delete_todo(todo_id: int, service: TodoService = Depends(todo_service)):
    service.delete(todo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/todos/{todo_id}/histories", response_model=ChangeRecordListResponse, responses=NOT_FOUND)
def list_todo_histories(
    todo_id: int,
    page: Page = Depends(get_page),
    service: TodoService = Depends(todo_service),
):
    """Change log of a todo, newest first."""
    records, total = service.history(todo_id, page)
    return ChangeRecordListResponse(
        histories=[_history_entry(record) for record in records],
        meta=_meta(page, total),
    )


# Comment endpoints
@router.get("/todos/{todo_id}/comments", response_model=List[CommentResponse], responses=NOT_FOUND)
def list_comments(todo_id: int, service: CommentService = Depends(comment_service)):
    return [_comment_entry(comment, service) for comment in service.list(todo_id)]


@router.post(
    "/todos/{todo_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND,
)
def create_comment(todo_id: int, data: CommentWrite, service: CommentService = Depends(comment_service)):
    return _comment_entry(service.create(todo_id, data.content), service)


@router.patch("/todos/{todo_id}/comments/{comment_id}", response_model=CommentResponse, responses={
    **NOT_FOUND,
    403: {"model": ErrorResponse, "description": "Not the author, or the edit window has expired"},
})
def update_comment(
    todo_id: int,
    comment_id: int,
    data: CommentWrite,
    service: CommentService = Depends(comment_service),
):
    """
    Edit a comment.
    WILL REFUSE once the edit window has passed (code EDIT_TIME_EXPIRED).
    """
    return _comment_entry(service.update(todo_id, comment_id, data.content), service)


@router.delete("/todos/{todo_id}/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT, responses={
    **NOT_FOUND,
    403: {"model": ErrorResponse, "description": "Not the author, or the edit window has expired"},
})
def delete_comment(todo_id: int, comment_id: int, service: CommentService = Depends(comment_service)):
    service.delete(todo_id, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Note endpoints
@router.post("/notes", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def create_note(data: NoteCreate, service: NoteService = Depends(note_service)):
    return service.create(title=data.title, body=data.body, pinned=data.pinned)


@router.get("/notes", response_model=NoteListResponse)
def list_notes(
    page: Page = Depends(get_page),
    q: Optional[str] = Query(None, description="Case-insensitive match on title or plain-text body"),
    archived: Optional[bool] = Query(None),
    trashed: Optional[bool] = Query(None, description="Trashed notes are hidden unless true"),
    pinned: Optional[bool] = Query(None),
    service: NoteService = Depends(note_service),
):
    notes, total = service.list(page, query=q, archived=archived, trashed=trashed, pinned=pinned)
    return NoteListResponse(
        notes=[NoteResponse.model_validate(note) for note in notes],
        meta=_meta(page, total),
    )


@router.get("/notes/{note_id}", response_model=NoteResponse, responses=NOT_FOUND)
def get_note(note_id: int, service: NoteService = Depends(note_service)):
    return service.get(note_id)


@router.patch("/notes/{note_id}", response_model=NoteResponse, responses=NOT_FOUND)
def update_note(note_id: int, data: NoteUpdate, service: NoteService = Depends(note_service)):
    """
    Update a note.
    Side effect: a revision is written when the body changes.
    """
    note, _ = service.update(note_id, data.model_dump(exclude_unset=True))
    return note


@router.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
def delete_note(note_id: int, force: bool = Query(False), service: NoteService = Depends(note_service)):
    """Trash a note, or with ?force=true delete it and its revisions for good."""
    service.delete(note_id, force=force)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/notes/{note_id}/revisions", response_model=RevisionListResponse, responses=NOT_FOUND)
def list_note_revisions(
    note_id: int,
    page: Page = Depends(get_page),
    service: NoteService = Depends(note_service),
):
    revisions, total = service.list_revisions(note_id, page)
    return RevisionListResponse(
        revisions=[RevisionResponse.model_validate(revision) for revision in revisions],
        meta=_meta(page, total),
    )


@router.post(
    "/notes/{note_id}/revisions/{revision_id}/restore",
    response_model=NoteResponse,
    responses=NOT_FOUND,
)
def restore_note_revision(note_id: int, revision_id: int, service: NoteService = Depends(note_service)):
    """
    Restore a note from a revision.
    Side effect: the content being replaced is kept as a new revision.
    """
    return service.restore(note_id, revision_id)
