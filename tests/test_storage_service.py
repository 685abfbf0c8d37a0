"""
Tests for image uploads and thumbnail cleanup in the thumbnails bucket.
"""

import base64

import pytest
from fastapi import HTTPException

from app.modules.storage.service import (
    StorageService,
    is_in_user_folder,
    parse_data_url,
    safe_file_stem,
    storage_path_from_public_url,
)

PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake image").decode()
PUBLIC_BASE = "https://project.supabase.co/storage/v1/object/public/thumbnails/"


class TestHelpers:
    def test_parse_data_url(self):
        mime, data = parse_data_url(PNG_DATA_URL)
        assert mime == "image/png"
        assert data == b"\x89PNG fake image"

    @pytest.mark.parametrize("value", ["not a data url", "data:image/png;base64,@@@"])
    def test_parse_data_url_rejects(self, value):
        with pytest.raises(HTTPException) as exc:
            parse_data_url(value)
        assert exc.value.status_code == 400

    def test_safe_file_stem(self):
        assert safe_file_stem("My Photo (1).png") == "My_Photo_1"
        assert safe_file_stem("???.jpg") == "file"
        assert len(safe_file_stem("a" * 80 + ".png")) == 50

    def test_storage_path_from_public_url(self):
        assert storage_path_from_public_url(PUBLIC_BASE + "user-1/123_a.png?t=1", "thumbnails") == "user-1/123_a.png"
        assert storage_path_from_public_url("https://cdn.example.com/a.png", "thumbnails") is None
        assert storage_path_from_public_url(None, "thumbnails") is None


class TestStorageService:
    def test_upload_goes_to_user_folder(self, supabase):
        response = StorageService(supabase).upload_image(PNG_DATA_URL, "cover.png", "user-1")

        bucket, path, data, options = supabase.storage.uploads[0]
        assert bucket == "thumbnails"
        assert path.startswith("user-1/")
        assert path.endswith("_cover.png")
        assert options == {"content-type": "image/png"}
        assert response.url == f"https://storage.test/thumbnails/{path}"

    def test_non_image_rejected(self, supabase):
        data_url = "data:application/pdf;base64," + base64.b64encode(b"%PDF").decode()
        with pytest.raises(HTTPException) as exc:
            StorageService(supabase).upload_image(data_url, "doc.pdf", "user-1")
        assert exc.value.status_code == 400
        assert supabase.storage.uploads == []

    def test_cannot_delete_outside_own_folder(self, supabase):
        with pytest.raises(HTTPException) as exc:
            StorageService(supabase).delete_image("user-2/1_a.png", "user-1")
        assert exc.value.status_code == 403

    @pytest.mark.parametrize("path", [
        "user-1/../user-2/1_a.png",
        "user-1/./../user-2/1_a.png",
        "user-1/..",
        "user-1",
    ])
    def test_relative_segments_cannot_escape_own_folder(self, supabase, path):
        with pytest.raises(HTTPException) as exc:
            StorageService(supabase).delete_image(path, "user-1")
        assert exc.value.status_code == 403
        assert supabase.storage.removed == []

    def test_user_folder_check(self):
        assert is_in_user_folder("user-1/1_a.png", "user-1")
        assert not is_in_user_folder("user-10/1_a.png", "user-1")
        assert not is_in_user_folder("user-1/../x.png", "user-1")

    def test_remove_activity_thumbnail_only_for_owner(self, supabase):
        service = StorageService(supabase)

        assert service.remove_activity_thumbnail(PUBLIC_BASE + "user-1/1_a.png", "user-1")
        assert not service.remove_activity_thumbnail(PUBLIC_BASE + "user-2/1_a.png", "user-1")
        assert not service.remove_activity_thumbnail("https://cdn.example.com/a.png", "user-1")
        assert supabase.storage.removed == [("thumbnails", ["user-1/1_a.png"])]
