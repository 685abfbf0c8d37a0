from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

PostStatus = Literal["draft", "scheduled", "published", "archived"]


class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    body: Optional[str] = None
    thumbnail: Optional[str] = None
    category_id: Optional[str] = None
    tags: List[str] = []
    status: PostStatus = "draft"
    published_at: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    featured: bool = False
    pinned: bool = False
    allow_comments: bool = True


class PostUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    body: Optional[str] = None
    thumbnail: Optional[str] = None
    category_id: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[PostStatus] = None
    published_at: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    featured: Optional[bool] = None
    pinned: Optional[bool] = None
    allow_comments: Optional[bool] = None


class PostResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    title: str
    slug: str
    excerpt: Optional[str] = None
    body: Optional[str] = None
    thumbnail: Optional[str] = None
    category_id: Optional[str] = None
    tags: Optional[List[str]] = None
    status: PostStatus
    published_at: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    view_count: int = 0
    featured: bool = False
    pinned: bool = False
    allow_comments: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    category: Optional[Dict[str, Any]] = None
    author: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class PostsPage(BaseModel):
    posts: List[PostResponse]
    total: int
    page: int
    total_pages: int


class BulkPostStatusUpdate(BaseModel):
    ids: List[str] = Field(min_length=1)
    status: PostStatus


class PostStats(BaseModel):
    total: int = 0
    published: int = 0
    draft: int = 0
    scheduled: int = 0
    total_views: int = 0
