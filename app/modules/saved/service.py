import logging
from collections import Counter
from supabase import Client
from app.modules.saved.models import ALL_COLLECTION_ID, ALL_COLLECTION_NAME, UNIQUE_VIOLATION
from app.modules.saved.schemas import CollectionResponse, SaveResult, SavedItemResponse
from typing import List, Optional, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def _real_collection_id(collection_id: Optional[str]) -> Optional[str]:
    """The virtual "all" collection maps to no collection"""
    if not collection_id or collection_id == ALL_COLLECTION_ID:
        return None
    return collection_id


class SavedService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _check_collection(self, collection_id: str, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("collections")\
            .select("*")\
            .eq("id", collection_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Collection not found")
        return result.data[0]

    def get_collections(self, user_id: str) -> List[CollectionResponse]:
        """The virtual "all" collection first, then the user's collections with item counts"""
        try:
            collections = self.supabase.table("collections")\
                .select("id, name, created_at")\
                .eq("user_id", user_id)\
                .order("created_at")\
                .execute()
            items = self.supabase.table("saved_items")\
                .select("collection_id")\
                .eq("user_id", user_id)\
                .execute()
            item_rows = items.data or []
            counts = Counter(row.get("collection_id") for row in item_rows)

            result = [CollectionResponse(
                id=ALL_COLLECTION_ID,
                name=ALL_COLLECTION_NAME,
                item_count=len(item_rows),
                is_virtual=True,
            )]
            for collection in collections.data or []:
                result.append(CollectionResponse(
                    **collection,
                    item_count=counts.get(collection["id"], 0),
                ))
            return result
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to get collections: {str(e)}")

    def create_collection(self, name: str, user_id: str) -> CollectionResponse:
        try:
            result = self.supabase.table("collections")\
                .insert({"user_id": user_id, "name": name})\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create collection")
            return CollectionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to create collection: {str(e)}")

    def update_collection(self, collection_id: str, name: str, user_id: str) -> CollectionResponse:
        if collection_id == ALL_COLLECTION_ID:
            raise HTTPException(status_code=400, detail="Cannot rename the All collection")
        try:
            result = self.supabase.table("collections")\
                .update({"name": name})\
                .eq("id", collection_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Collection not found")
            return CollectionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update collection: {str(e)}")

    def delete_collection(self, collection_id: str, user_id: str) -> bool:
        """Delete a collection; its saved items stay saved without a collection"""
        if collection_id == ALL_COLLECTION_ID:
            raise HTTPException(status_code=400, detail="Cannot delete the All collection")
        try:
            self._check_collection(collection_id, user_id)
            self.supabase.table("saved_items")\
                .update({"collection_id": None})\
                .eq("collection_id", collection_id)\
                .eq("user_id", user_id)\
                .execute()
            self.supabase.table("collections")\
                .delete()\
                .eq("id", collection_id)\
                .eq("user_id", user_id)\
                .execute()
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete collection: {str(e)}")

    def save_activity(self, activity_id: str, collection_id: Optional[str], user_id: str) -> SaveResult:
        """Save an activity into a collection, moving it if it was already saved elsewhere"""
        collection_id = _real_collection_id(collection_id)
        try:
            if collection_id:
                self._check_collection(collection_id, user_id)

            self.supabase.table("saved_items")\
                .delete()\
                .eq("user_id", user_id)\
                .eq("activity_id", activity_id)\
                .execute()
            self.supabase.table("saved_items").insert({
                "user_id": user_id,
                "activity_id": activity_id,
                "collection_id": collection_id,
            }).execute()
            return SaveResult(success=True)
        except HTTPException:
            raise
        except Exception as e:
            # Concurrent save of the same activity hits the (user_id, activity_id) unique constraint
            if getattr(e, "code", None) == UNIQUE_VIOLATION:
                return SaveResult(success=True, already_saved=True)
            raise HTTPException(status_code=500, detail=f"Failed to save activity: {str(e)}")

    def unsave_activity(self, activity_id: str, user_id: str) -> bool:
        try:
            self.supabase.table("saved_items")\
                .delete()\
                .eq("user_id", user_id)\
                .eq("activity_id", activity_id)\
                .execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to unsave activity: {str(e)}")

    def is_activity_saved(self, activity_id: str, user_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("saved_items")\
                .select("collection_id")\
                .eq("user_id", user_id)\
                .eq("activity_id", activity_id)\
                .limit(1)\
                .execute()
            if not result.data:
                return {"saved": False, "collection_id": None}
            return {"saved": True, "collection_id": result.data[0].get("collection_id")}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def move_to_collection(self, activity_id: str, collection_id: Optional[str], user_id: str) -> bool:
        collection_id = _real_collection_id(collection_id)
        try:
            if collection_id:
                self._check_collection(collection_id, user_id)
            result = self.supabase.table("saved_items")\
                .update({"collection_id": collection_id})\
                .eq("user_id", user_id)\
                .eq("activity_id", activity_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Saved item not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to move saved item: {str(e)}")

    def get_saved_items(self, user_id: str, collection_id: Optional[str] = None) -> List[SavedItemResponse]:
        """Saved items with their activity, newest first; "all" or no collection_id means everything"""
        try:
            query = self.supabase.table("saved_items")\
                .select(
                    "id, activity_id, collection_id, created_at, "
                    "activities(id, title, description, thumbnail, type, play_count, status, user_id)"
                )\
                .eq("user_id", user_id)
            real_id = _real_collection_id(collection_id)
            if real_id:
                query = query.eq("collection_id", real_id)
            result = query.order("created_at", desc=True).execute()
            return [
                SavedItemResponse(
                    id=row["id"],
                    activity_id=row["activity_id"],
                    collection_id=row.get("collection_id"),
                    created_at=row["created_at"],
                    activity=row.get("activities"),
                )
                for row in (result.data or [])
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to get saved items: {str(e)}")
