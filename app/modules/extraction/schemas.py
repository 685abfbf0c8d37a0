from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

InputType = Literal["text", "youtube", "web", "pdf", "excel", "doc", "image"]


class DetectRequest(BaseModel):
    input: str


class DetectedInput(BaseModel):
    type: InputType
    url: Optional[str] = None
    content: Optional[str] = None


class ExtractRequest(BaseModel):
    input: str = Field(min_length=1)
    type: Optional[InputType] = None


class ExtractedContent(BaseModel):
    type: InputType
    content: str
    metadata: Dict[str, Any] = {}


class UploadedFile(BaseModel):
    path: str
    url: str
    size: int
    mime_type: str


class ExtractionCreate(BaseModel):
    input_type: InputType
    extracted_text: str
    source_url: Optional[str] = None
    source_file_name: Optional[str] = None
    source_file_path: Optional[str] = None
    source_file_size: Optional[int] = None
    source_mime_type: Optional[str] = None
    word_count: Optional[int] = None
    metadata: Dict[str, Any] = {}
    summary: Optional[str] = None
    crafted_content: Optional[str] = None
    translated_content: Optional[str] = None
    translated_language: Optional[str] = None


class ExtractionUpdate(BaseModel):
    summary: Optional[str] = None
    crafted_content: Optional[str] = None
    translated_content: Optional[str] = None
    translated_language: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class ExtractionResponse(BaseModel):
    id: str
    user_id: str
    input_type: InputType
    source_url: Optional[str] = None
    source_file_name: Optional[str] = None
    source_file_path: Optional[str] = None
    source_file_size: Optional[int] = None
    source_mime_type: Optional[str] = None
    extracted_text: str
    word_count: int = 0
    metadata: Optional[Dict[str, Any]] = None
    summary: Optional[str] = None
    crafted_content: Optional[str] = None
    translated_content: Optional[str] = None
    translated_language: Optional[str] = None
    last_accessed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExtractionHistory(BaseModel):
    items: List[ExtractionResponse]
    total: int
