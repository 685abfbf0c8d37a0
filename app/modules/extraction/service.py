import logging
import time
from supabase import Client
from app.config import settings
from app.core.utils import count_words, utc_now_iso
from app.modules.extraction import files, web, youtube
from app.modules.extraction.detector import detect_input_type, detect_file_type
from app.modules.extraction.gemini import GeminiService, GeminiResult, log_gemini_usage, require_ai
from app.modules.extraction.models import (
    DEFAULT_HISTORY_LIMIT, NON_RASTER_IMAGE_EXTENSIONS, NON_RASTER_IMAGE_TYPES
)
from app.modules.extraction.schemas import (
    DetectedInput, ExtractRequest, ExtractedContent, UploadedFile,
    ExtractionCreate, ExtractionUpdate, ExtractionResponse, ExtractionHistory
)
from app.modules.storage.service import is_in_user_folder, safe_file_stem
from typing import Optional, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def is_non_raster_image(file_name: str, mime_type: Optional[str]) -> bool:
    return (mime_type or "").lower() in NON_RASTER_IMAGE_TYPES \
        or file_name.lower().endswith(NON_RASTER_IMAGE_EXTENSIONS)


class ExtractionService:
    def __init__(self, supabase: Client, gemini: Optional[GeminiService] = None):
        self.supabase = supabase
        self.gemini = gemini or GeminiService()
        self.bucket = settings.extracted_files_bucket

    # ============================================
    # Extraction
    # ============================================

    def _log_usage(self, result: GeminiResult, user_id: Optional[str], model_suffix: str = "") -> None:
        log_gemini_usage(self.supabase, result, "summarize", user_id, model_suffix)

    def _summarize_video(self, metadata: Dict[str, Any], user_id: Optional[str] = None) -> str:
        result = require_ai(self.gemini, self.supabase).generate_text(youtube.summary_prompt(metadata))
        self._log_usage(result, user_id)
        return result.text

    def extract_content(self, request: ExtractRequest, user_id: Optional[str] = None) -> ExtractedContent:
        """Extract text from typed text, a web page or a YouTube video"""
        if request.type:
            detected = DetectedInput(type=request.type, url=request.input.strip(), content=request.input.strip())
        else:
            detected = detect_input_type(request.input)

        if detected.type == "youtube":
            content, metadata = youtube.fetch_youtube_content(
                detected.url, lambda metadata: self._summarize_video(metadata, user_id)
            )
            return ExtractedContent(type="youtube", content=content, metadata=metadata)
        if detected.type == "web":
            content, metadata = web.fetch_web_content(detected.url)
            return ExtractedContent(type="web", content=content, metadata=metadata)
        if detected.type == "text":
            text = (detected.content or "").strip()
            if not text:
                raise HTTPException(status_code=400, detail="Content is empty")
            return ExtractedContent(type="text", content=text, metadata={"word_count": count_words(text)})
        raise HTTPException(
            status_code=400,
            detail=f"{detected.type.upper()} extraction requires a file upload"
        )

    def _check_size(self, data: bytes) -> None:
        if not data:
            raise HTTPException(status_code=400, detail="File is empty")
        if len(data) > settings.max_extraction_file_mb * 1024 * 1024:
            raise HTTPException(
                status_code=400,
                detail=f"File exceeds {settings.max_extraction_file_mb}MB limit"
            )

    def extract_file(
        self,
        data: bytes,
        file_name: str,
        mime_type: Optional[str] = None,
        user_id: Optional[str] = None
    ) -> ExtractedContent:
        """Extract text from an uploaded PDF, spreadsheet, Word document or image"""
        self._check_size(data)
        input_type = detect_file_type(file_name, mime_type)
        metadata: Dict[str, Any] = {"title": files.file_title(file_name)}

        if input_type == "pdf":
            text, metadata["page_count"] = files.extract_pdf(data)
        elif input_type == "excel":
            text, metadata["page_count"] = files.extract_spreadsheet(data, file_name, mime_type)
        elif input_type == "doc":
            text = files.extract_docx(data)
        else:
            if is_non_raster_image(file_name, mime_type):
                raise HTTPException(
                    status_code=400,
                    detail="SVG images are not supported; upload a PNG, JPEG, GIF or WebP"
                )
            result = require_ai(self.gemini, self.supabase).describe_image(data, mime_type or "image/png")
            self._log_usage(result, user_id, model_suffix="-vision")
            text = result.text
            metadata["image_description"] = True

        text = text.strip()
        if not text:
            raise HTTPException(status_code=422, detail="No text could be extracted from this file")
        metadata["word_count"] = count_words(text)
        logger.info(f"Extracted {metadata['word_count']} words from {input_type} file {file_name}")
        return ExtractedContent(type=input_type, content=text, metadata=metadata)

    def upload_extracted_file(self, data: bytes, file_name: str, mime_type: str, user_id: str) -> UploadedFile:
        """Keep the original upload under the user's folder in the extracted-files bucket"""
        self._check_size(data)
        extension = file_name.rsplit(".", 1)[1].lower() if "." in file_name else ""
        safe_name = safe_file_stem(file_name) + (f".{extension}" if extension else "")
        path = f"{user_id}/{int(time.time() * 1000)}_{safe_name}"
        try:
            storage = self.supabase.storage.from_(self.bucket)
            storage.upload(path, data, {"content-type": mime_type or "application/octet-stream"})
            return UploadedFile(
                path=path,
                url=storage.get_public_url(path),
                size=len(data),
                mime_type=mime_type or "application/octet-stream",
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to upload file: {str(e)}")

    def _remove_file(self, path: Optional[str], user_id: str) -> None:
        if not path or not is_in_user_folder(path, user_id):
            return
        try:
            self.supabase.storage.from_(self.bucket).remove([path])
        except Exception as e:
            logger.warning(f"Failed to remove extracted file {path}: {e}")

    # ============================================
    # History
    # ============================================

    def save_extraction(self, extraction: ExtractionCreate, user_id: str) -> ExtractionResponse:
        try:
            values = extraction.model_dump()
            if values.get("word_count") is None:
                values["word_count"] = count_words(extraction.extracted_text)
            values["user_id"] = user_id
            values["last_accessed_at"] = utc_now_iso()
            result = self.supabase.table("extracted_contents").insert(values).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save extraction")
            return ExtractionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to save extraction: {str(e)}")

    def get_extraction_history(
        self,
        user_id: str,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
        input_type: Optional[str] = None
    ) -> ExtractionHistory:
        """Your extractions, most recently opened first"""
        try:
            query = self.supabase.table("extracted_contents")\
                .select("*", count="exact")\
                .eq("user_id", user_id)
            if input_type:
                query = query.eq("input_type", input_type)
            result = query\
                .order("last_accessed_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            return ExtractionHistory(
                items=[ExtractionResponse(**row) for row in (result.data or [])],
                total=result.count or 0,
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch history: {str(e)}")

    def get_extraction(self, extraction_id: str, user_id: str) -> ExtractionResponse:
        """Fetch one extraction and mark it as just accessed"""
        try:
            now = utc_now_iso()
            result = self.supabase.table("extracted_contents")\
                .update({"last_accessed_at": now})\
                .eq("id", extraction_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Extraction not found")
            return ExtractionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch extraction: {str(e)}")

    def update_extraction(self, extraction_id: str, update: ExtractionUpdate, user_id: str) -> ExtractionResponse:
        try:
            values = update.model_dump(exclude_unset=True)
            values["updated_at"] = utc_now_iso()
            result = self.supabase.table("extracted_contents")\
                .update(values)\
                .eq("id", extraction_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Extraction not found")
            return ExtractionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update extraction: {str(e)}")

    def delete_extraction(self, extraction_id: str, user_id: str) -> bool:
        """Delete an extraction and its stored source file"""
        try:
            result = self.supabase.table("extracted_contents")\
                .delete()\
                .eq("id", extraction_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Extraction not found")
            self._remove_file(result.data[0].get("source_file_path"), user_id)
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete extraction: {str(e)}")

    def clear_extraction_history(self, user_id: str) -> int:
        """Delete every extraction of the user and their stored files; returns the number deleted"""
        try:
            result = self.supabase.table("extracted_contents")\
                .delete()\
                .eq("user_id", user_id)\
                .execute()
            rows = result.data or []
            paths = [row["source_file_path"] for row in rows if row.get("source_file_path")]
            if paths:
                try:
                    self.supabase.storage.from_(self.bucket).remove(paths)
                except Exception as e:
                    logger.warning(f"Failed to remove extracted files for {user_id}: {e}")
            return len(rows)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to clear history: {str(e)}")
