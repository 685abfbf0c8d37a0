from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.saved.schemas import (
    CollectionCreate, CollectionUpdate, CollectionResponse,
    SaveActivityRequest, MoveRequest, SaveResult, SavedItemResponse
)
from app.modules.saved.service import SavedService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/saved", tags=["saved"])


def get_saved_service(supabase: Client = Depends(get_service_supabase)) -> SavedService:
    return SavedService(supabase)


@router.get("/collections", response_model=List[CollectionResponse])
async def get_collections(
    user_data: Dict = Depends(get_current_user_id),
    service: SavedService = Depends(get_saved_service)
):
    """Your collections, with the virtual "all" collection first"""
    return service.get_collections(user_data["id"])


@router.post("/collections", response_model=CollectionResponse, status_code=201)
async def create_collection(
    collection: CollectionCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: SavedService = Depends(get_saved_service)
):
    return service.create_collection(collection.name, user_data["id"])


@router.put("/collections/{collection_id}", response_model=CollectionResponse)
async def update_collection(
    collection_id: str,
    collection: CollectionUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: SavedService = Depends(get_saved_service)
):
    return service.update_collection(collection_id, collection.name, user_data["id"])


@router.delete("/collections/{collection_id}", status_code=204)
async def delete_collection(
    collection_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: SavedService = Depends(get_saved_service)
):
    service.delete_collection(collection_id, user_data["id"])
    return None


@router.get("/items", response_model=List[SavedItemResponse])
async def get_saved_items(
    collection_id: Optional[str] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: SavedService = Depends(get_saved_service)
):
    return service.get_saved_items(user_data["id"], collection_id)


@router.post("/items", response_model=SaveResult, status_code=201)
async def save_activity(
    request: SaveActivityRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: SavedService = Depends(get_saved_service)
):
    """Save an activity (moves it if already saved in another collection)"""
    return service.save_activity(request.activity_id, request.collection_id, user_data["id"])


@router.get("/items/{activity_id}")
async def is_activity_saved(
    activity_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: SavedService = Depends(get_saved_service)
):
    return service.is_activity_saved(activity_id, user_data["id"])


@router.put("/items/{activity_id}/collection")
async def move_to_collection(
    activity_id: str,
    request: MoveRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: SavedService = Depends(get_saved_service)
):
    service.move_to_collection(activity_id, request.collection_id, user_data["id"])
    return {"success": True}


@router.delete("/items/{activity_id}", status_code=204)
async def unsave_activity(
    activity_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: SavedService = Depends(get_saved_service)
):
    service.unsave_activity(activity_id, user_data["id"])
    return None
