from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from app.config import settings
from app.database.supabase_client import get_service_supabase
from app.modules.extraction.detector import detect_input_type
from app.modules.extraction.schemas import (
    DetectRequest, DetectedInput, ExtractRequest, ExtractedContent, UploadedFile,
    ExtractionCreate, ExtractionUpdate, ExtractionResponse, ExtractionHistory, InputType
)
from app.modules.extraction.service import ExtractionService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import Optional, Dict

router = APIRouter(prefix="/extraction", tags=["extraction"])


def get_extraction_service(supabase: Client = Depends(get_service_supabase)) -> ExtractionService:
    return ExtractionService(supabase)


async def read_upload(file: UploadFile) -> bytes:
    """Upload bytes, refusing anything over the size limit without buffering all of it"""
    max_bytes = settings.max_extraction_file_mb * 1024 * 1024
    too_large = HTTPException(
        status_code=400,
        detail=f"File exceeds {settings.max_extraction_file_mb}MB limit"
    )
    if file.size is not None and file.size > max_bytes:
        raise too_large
    data = await file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise too_large
    return data


@router.post("/detect", response_model=DetectedInput)
async def detect_input(request: DetectRequest):
    """Classify pasted input as youtube, web, a file type or text"""
    return detect_input_type(request.input)


@router.post("/extract", response_model=ExtractedContent)
async def extract_content(
    request: ExtractRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: ExtractionService = Depends(get_extraction_service)
):
    """Extract text from plain text, a web page or a YouTube video"""
    return service.extract_content(request, user_data["id"])


@router.post("/file", response_model=ExtractedContent)
async def extract_file(
    file: UploadFile = File(...),
    user_data: Dict = Depends(get_current_user_id),
    service: ExtractionService = Depends(get_extraction_service)
):
    """Extract text from an uploaded PDF, spreadsheet, document or image"""
    data = await read_upload(file)
    return service.extract_file(data, file.filename or "upload", file.content_type, user_data["id"])


@router.post("/upload", response_model=UploadedFile, status_code=201)
async def upload_extracted_file(
    file: UploadFile = File(...),
    user_data: Dict = Depends(get_current_user_id),
    service: ExtractionService = Depends(get_extraction_service)
):
    data = await read_upload(file)
    return service.upload_extracted_file(data, file.filename or "upload", file.content_type, user_data["id"])


@router.get("/history", response_model=ExtractionHistory)
async def get_extraction_history(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    input_type: Optional[InputType] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: ExtractionService = Depends(get_extraction_service)
):
    return service.get_extraction_history(user_data["id"], limit, offset, input_type)


@router.post("/history", response_model=ExtractionResponse, status_code=201)
async def save_extraction(
    extraction: ExtractionCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: ExtractionService = Depends(get_extraction_service)
):
    return service.save_extraction(extraction, user_data["id"])


@router.delete("/history")
async def clear_extraction_history(
    user_data: Dict = Depends(get_current_user_id),
    service: ExtractionService = Depends(get_extraction_service)
):
    """Delete all of your extractions and their stored files"""
    return {"deleted": service.clear_extraction_history(user_data["id"])}


@router.get("/history/{extraction_id}", response_model=ExtractionResponse)
async def get_extraction(
    extraction_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ExtractionService = Depends(get_extraction_service)
):
    return service.get_extraction(extraction_id, user_data["id"])


@router.put("/history/{extraction_id}", response_model=ExtractionResponse)
async def update_extraction(
    extraction_id: str,
    update: ExtractionUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: ExtractionService = Depends(get_extraction_service)
):
    """Store a summary, crafted content or translation for an extraction"""
    return service.update_extraction(extraction_id, update, user_data["id"])


@router.delete("/history/{extraction_id}", status_code=204)
async def delete_extraction(
    extraction_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ExtractionService = Depends(get_extraction_service)
):
    service.delete_extraction(extraction_id, user_data["id"])
    return None
