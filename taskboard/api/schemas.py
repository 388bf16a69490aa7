"""Pydantic schemas for request/response validation."""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskboard.models.enums import HistoryAction, TodoPriority, TodoStatus


class PageMeta(BaseModel):
    total: int
    current_page: int
    total_pages: int
    per_page: int


# Category / Tag schemas
class LabelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=30)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class LabelResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: Optional[str]
    created_at: datetime


# Todo schemas
class TodoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=10000)
    category_id: Optional[int] = None
    priority: Optional[TodoPriority] = None
    status: Optional[TodoStatus] = None
    due_date: Optional[date] = None
    position: Optional[int] = None
    tag_ids: Optional[List[int]] = None


class TodoUpdate(BaseModel):
    """Partial update: only fields present in the request body are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=10000)
    category_id: Optional[int] = None  # 0 or null clears the category
    completed: Optional[bool] = None
    priority: Optional[TodoPriority] = None
    status: Optional[TodoStatus] = None
    due_date: Optional[date] = None
    position: Optional[int] = None
    tag_ids: Optional[List[int]] = None

    @field_validator("title")
    @classmethod
    def title_not_null(cls, value: Optional[str]) -> str:
        # Omit title to leave it unchanged; null would blank a required column
        if value is None:
            raise ValueError("title cannot be null")
        return value


class TodoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str]
    completed: bool
    priority: TodoPriority
    status: TodoStatus
    due_date: Optional[date]
    category_id: Optional[int]
    position: Optional[int]
    tags: List[LabelResponse] = []
    created_at: datetime
    updated_at: datetime


class TodoListResponse(BaseModel):
    todos: List[TodoResponse]
    meta: PageMeta


# History schemas
class ChangeRecordResponse(BaseModel):
    id: int
    todo_id: int
    actor_id: str
    action: HistoryAction
    changes: Dict[str, Any]
    summary: str
    created_at: datetime


class ChangeRecordListResponse(BaseModel):
    histories: List[ChangeRecordResponse]
    meta: PageMeta


# Comment schemas
class CommentWrite(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)


class CommentResponse(BaseModel):
    id: int
    content: str
    user_id: str
    editable: bool
    created_at: datetime
    updated_at: datetime


# Note schemas
class NoteCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=150)
    body: Optional[str] = Field(None, max_length=100000)
    pinned: bool = False


class NoteUpdate(BaseModel):
    """Partial update: only fields present in the request body are applied."""
    title: Optional[str] = Field(None, max_length=150)
    body: Optional[str] = Field(None, max_length=100000)
    pinned: Optional[bool] = None
    archived: Optional[bool] = None
    trashed: Optional[bool] = None


class NoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: Optional[str]
    body: Optional[str]
    pinned: bool
    archived_at: Optional[datetime]
    trashed_at: Optional[datetime]
    last_edited_at: datetime
    created_at: datetime
    updated_at: datetime


class NoteListResponse(BaseModel):
    notes: List[NoteResponse]
    meta: PageMeta


class RevisionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    note_id: int
    actor_id: str
    title: Optional[str]
    body: Optional[str]
    created_at: datetime


class RevisionListResponse(BaseModel):
    revisions: List[RevisionResponse]
    meta: PageMeta


# Error response
class ErrorResponse(BaseModel):
    """Body returned for every handled error."""
    code: str
    message: str
    details: Dict[str, Any] = {}
