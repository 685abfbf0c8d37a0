from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    slug: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[str] = None
    order_index: int = 0


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    slug: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[str] = None
    order_index: Optional[int] = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    order_index: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryTreeNode(CategoryResponse):
    children: List["CategoryTreeNode"] = []


class CategoryWithCount(CategoryResponse):
    post_count: int = 0
    activity_count: int = 0


class AdminCategoryResponse(CategoryWithCount):
    parent: Optional[Dict[str, Any]] = None


class CategoryActivitiesPage(BaseModel):
    activities: List[Dict[str, Any]]
    total: int
    total_pages: int


class ReorderRequest(BaseModel):
    ids: List[str]
