from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

CommentStatus = Literal["pending", "approved", "spam"]


class CommentCreate(BaseModel):
    post_id: str
    body: str
    parent_id: Optional[str] = None


class CommentUpdate(BaseModel):
    body: str


class CommentResponse(BaseModel):
    id: str
    post_id: str
    user_id: str
    parent_id: Optional[str] = None
    body: str
    status: CommentStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: Optional[Dict[str, Any]] = None
    post: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class CommentThread(CommentResponse):
    replies: List[CommentResponse] = []
    reply_count: int = 0


class CommentsPage(BaseModel):
    comments: List[CommentThread]
    total: int


class AdminCommentsPage(BaseModel):
    comments: List[CommentResponse]
    total: int
    page: int
    total_pages: int


class CommentStatusUpdate(BaseModel):
    status: CommentStatus


class BulkCommentStatusUpdate(BaseModel):
    ids: List[str] = Field(min_length=1)
    status: CommentStatus


class CommentStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    spam: int = 0
