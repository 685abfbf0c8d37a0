import base64
import binascii
import logging
import re
import time
from supabase import Client
from app.config import settings
from app.modules.storage.models import PUBLIC_URL_MARKER, IMAGE_EXTENSIONS
from app.modules.storage.schemas import ImageUploadResponse
from typing import Optional, Tuple
from fastapi import HTTPException

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:(.+?);base64,(.+)$", re.DOTALL)


def parse_data_url(data_url: str) -> Tuple[str, bytes]:
    """Split a base64 data URL into (mime_type, raw bytes); 400 on anything malformed."""
    match = DATA_URL_PATTERN.match(data_url.strip())
    if not match:
        raise HTTPException(status_code=400, detail="Invalid data URL")
    mime_type, payload = match.group(1).lower(), match.group(2)
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Invalid base64 payload")


def safe_file_stem(file_name: str) -> str:
    stem = file_name.rsplit(".", 1)[0] if "." in file_name else file_name
    stem = re.sub(r"[^A-Za-z0-9_-]+", "_", stem).strip("_")
    return stem[:50] or "file"


def storage_path_from_public_url(url: Optional[str], bucket: str) -> Optional[str]:
    """Object path inside bucket for a public URL, or None if the URL is not one of ours."""
    if not url:
        return None
    marker = f"{PUBLIC_URL_MARKER}{bucket}/"
    if marker not in url:
        return None
    path = url.split(marker, 1)[1].split("?", 1)[0]
    return path or None


def is_in_user_folder(path: str, user_id: str) -> bool:
    """True for paths under {user_id}/ without relative segments."""
    segments = path.split("/")
    return segments[0] == user_id and len(segments) > 1 and not {"..", "."} & set(segments)


class StorageService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.bucket = settings.thumbnails_bucket

    def upload_image(self, data_url: str, file_name: str, user_id: str) -> ImageUploadResponse:
        """Upload a base64 image to the thumbnails bucket under the user's folder"""
        mime_type, content = parse_data_url(data_url)
        if not mime_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="Only image uploads are allowed")
        max_bytes = settings.max_image_upload_mb * 1024 * 1024
        if len(content) > max_bytes:
            raise HTTPException(
                status_code=400,
                detail=f"Image exceeds {settings.max_image_upload_mb}MB limit"
            )

        ext = IMAGE_EXTENSIONS.get(mime_type, mime_type.split("/", 1)[1].split("+", 1)[0])
        path = f"{user_id}/{int(time.time() * 1000)}_{safe_file_stem(file_name)}.{ext}"
        try:
            storage = self.supabase.storage.from_(self.bucket)
            storage.upload(path, content, {"content-type": mime_type})
            url = storage.get_public_url(path)
            logger.info(f"Uploaded image {path} ({len(content)} bytes)")
            return ImageUploadResponse(url=url, path=path)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to upload image: {str(e)}")

    def delete_image(self, path: str, user_id: str) -> bool:
        """Delete an image; only paths inside the caller's folder"""
        if not is_in_user_folder(path, user_id):
            raise HTTPException(status_code=403, detail="Unauthorized to delete this file")
        try:
            self.supabase.storage.from_(self.bucket).remove([path])
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete image: {str(e)}")

    def remove_activity_thumbnail(self, thumbnail_url: Optional[str], owner_id: Optional[str]) -> bool:
        """Best-effort removal of an activity thumbnail stored in the owner's folder"""
        path = storage_path_from_public_url(thumbnail_url, self.bucket)
        if not path or not owner_id or not is_in_user_folder(path, owner_id):
            return False
        try:
            self.supabase.storage.from_(self.bucket).remove([path])
            return True
        except Exception as e:
            logger.warning(f"Failed to remove thumbnail {path}: {e}")
            return False
