# Supabase table: extracted_contents, storage bucket: extracted-files
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

extracted_contents:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, on delete cascade)
- input_type: text ('text', 'youtube', 'web', 'pdf', 'excel', 'doc', 'image')
- source_url: text (nullable) - youtube/web input
- source_file_name: text (nullable)
- source_file_path: text (nullable) - object path in the extracted-files bucket
- source_file_size: bigint (nullable)
- source_mime_type: text (nullable)
- extracted_text: text (not null)
- word_count: integer (default: 0)
- metadata: jsonb (default: '{}') - title, author, duration, page_count, ...
- summary: text (nullable)
- crafted_content: text (nullable)
- translated_content: text (nullable)
- translated_language: text (nullable)
- last_accessed_at: timestamptz (default: now())
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now())

Storage:
- extracted-files/{user_id}/{epoch_ms}_{safe_name}
"""

import re

INPUT_TYPES = ("text", "youtube", "web", "pdf", "excel", "doc", "image")

YOUTUBE_PATTERNS = [
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/watch\?v=[\w-]+"),
    re.compile(r"(?:https?://)?(?:www\.)?youtu\.be/[\w-]+"),
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/embed/[\w-]+"),
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/shorts/[\w-]+"),
]
WEB_URL_PATTERN = re.compile(r"^https?://\S+$")

FILE_EXTENSION_TYPES = {
    "pdf": "pdf",
    "xlsx": "excel",
    "xls": "excel",
    "csv": "excel",
    "doc": "doc",
    "docx": "doc",
    "ppt": "doc",
    "pptx": "doc",
    "key": "doc",
    "pages": "doc",
    "png": "image",
    "jpg": "image",
    "jpeg": "image",
    "gif": "image",
    "webp": "image",
    "svg": "image",
}

MIME_TYPE_MAP = {
    "application/pdf": "pdf",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "excel",
    "application/vnd.ms-excel": "excel",
    "text/csv": "excel",
    "application/csv": "excel",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "doc",
    "application/vnd.ms-powerpoint": "doc",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "doc",
    "image/png": "image",
    "image/jpeg": "image",
    "image/gif": "image",
    "image/webp": "image",
    "image/svg+xml": "image",
}

CSV_MIME_TYPES = ("text/csv", "application/csv")

# Detected as images but not accepted by the vision model
NON_RASTER_IMAGE_TYPES = ("image/svg+xml",)
NON_RASTER_IMAGE_EXTENSIONS = (".svg",)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

MIN_WEB_CONTENT_LENGTH = 50
MIN_PARAGRAPH_LENGTH = 20
MIN_WEB_PARTS = 3
CAPTION_LANGUAGES = (("th", "th-TH"), ("en", "en-US"))
DEFAULT_HISTORY_LIMIT = 10
