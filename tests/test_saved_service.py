"""
Tests for saved activities and collections.
"""

import pytest
from fastapi import HTTPException

from app.modules.saved.service import SavedService


class UniqueViolation(Exception):
    code = "23505"


class TestCollections:
    def test_all_collection_comes_first(self, supabase):
        supabase.queue("collections", [
            {"id": "c1", "name": "Math", "created_at": "2024-01-01T00:00:00Z"},
            {"id": "c2", "name": "Empty", "created_at": "2024-01-02T00:00:00Z"},
        ])
        supabase.queue("saved_items", [
            {"collection_id": "c1"}, {"collection_id": "c1"}, {"collection_id": None},
        ])
        collections = SavedService(supabase).get_collections("user-1")

        assert [(c.id, c.item_count) for c in collections] == [("all", 3), ("c1", 2), ("c2", 0)]
        assert collections[0].is_virtual

    @pytest.mark.parametrize("method", ["update_collection", "delete_collection"])
    def test_all_collection_is_read_only(self, supabase, method):
        service = SavedService(supabase)
        args = ("all", "New name", "user-1") if method == "update_collection" else ("all", "user-1")

        with pytest.raises(HTTPException) as exc:
            getattr(service, method)(*args)
        assert exc.value.status_code == 400

    def test_delete_keeps_items_saved(self, supabase):
        supabase.queue("collections", [{"id": "c1", "user_id": "user-1", "name": "Math"}])
        SavedService(supabase).delete_collection("c1", "user-1")

        update = supabase.queries("saved_items")[0]
        assert ("update", ({"collection_id": None},), {}) in update
        assert "delete" in supabase.methods(supabase.queries("collections")[1])

    def test_delete_other_users_collection(self, supabase):
        with pytest.raises(HTTPException) as exc:
            SavedService(supabase).delete_collection("c9", "user-1")
        assert exc.value.status_code == 404


class TestSaveActivity:
    def test_save_replaces_existing_entry(self, supabase):
        result = SavedService(supabase).save_activity("a1", "all", "user-1")

        assert result.success and not result.already_saved
        delete, insert = supabase.queries("saved_items")
        assert "delete" in supabase.methods(delete)
        assert supabase.args_of(insert, "insert")[0][0] == {
            "user_id": "user-1", "activity_id": "a1", "collection_id": None,
        }

    def test_concurrent_save_reports_already_saved(self, supabase):
        supabase.queue("saved_items", [])
        supabase.fail("saved_items", UniqueViolation("duplicate key"))

        result = SavedService(supabase).save_activity("a1", None, "user-1")
        assert result.already_saved

    def test_save_into_unknown_collection(self, supabase):
        with pytest.raises(HTTPException) as exc:
            SavedService(supabase).save_activity("a1", "c404", "user-1")
        assert exc.value.status_code == 404

    def test_is_activity_saved(self, supabase):
        supabase.queue("saved_items", [{"collection_id": "c1"}])
        service = SavedService(supabase)

        assert service.is_activity_saved("a1", "user-1") == {"saved": True, "collection_id": "c1"}
        assert service.is_activity_saved("a2", "user-1") == {"saved": False, "collection_id": None}

    def test_move_missing_item(self, supabase):
        with pytest.raises(HTTPException) as exc:
            SavedService(supabase).move_to_collection("a1", None, "user-1")
        assert exc.value.status_code == 404

    def test_items_filtered_by_real_collection_only(self, supabase):
        service = SavedService(supabase)
        service.get_saved_items("user-1", "all")
        service.get_saved_items("user-1", "c1")

        everything, filtered = supabase.queries("saved_items")
        assert supabase.args_of(everything, "eq") == [("user_id", "user-1")]
        assert ("collection_id", "c1") in supabase.args_of(filtered, "eq")
