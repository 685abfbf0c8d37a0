from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.storage.schemas import ImageUploadRequest, ImageUploadResponse, ImageDeleteRequest
from app.modules.storage.service import StorageService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/storage", tags=["storage"])


def get_storage_service(supabase: Client = Depends(get_service_supabase)) -> StorageService:
    return StorageService(supabase)


@router.post("/images", response_model=ImageUploadResponse, status_code=201)
async def upload_image(
    upload: ImageUploadRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: StorageService = Depends(get_storage_service)
):
    """Upload a base64 data URL image to the thumbnails bucket"""
    return service.upload_image(upload.data_url, upload.file_name, user_data["id"])


@router.post("/images/delete")
async def delete_image(
    request: ImageDeleteRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: StorageService = Depends(get_storage_service)
):
    """Delete one of your own images"""
    service.delete_image(request.path, user_data["id"])
    return {"success": True}
