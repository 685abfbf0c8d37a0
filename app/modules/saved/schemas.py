from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any
from datetime import datetime


class CollectionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Collection name is required")
        return value


class CollectionUpdate(CollectionCreate):
    pass


class CollectionResponse(BaseModel):
    id: str
    name: str
    item_count: int = 0
    created_at: Optional[datetime] = None
    is_virtual: bool = False

    class Config:
        from_attributes = True


class SaveActivityRequest(BaseModel):
    activity_id: str
    collection_id: Optional[str] = None


class MoveRequest(BaseModel):
    collection_id: Optional[str] = None


class SaveResult(BaseModel):
    success: bool
    already_saved: bool = False


class SavedItemResponse(BaseModel):
    id: str
    activity_id: str
    collection_id: Optional[str] = None
    created_at: datetime
    activity: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True
