"""
Classify raw user input (URL, data URL, file name or text) and uploaded files.
"""

import os
import re

from fastapi import HTTPException

from app.modules.extraction.models import (
    YOUTUBE_PATTERNS, WEB_URL_PATTERN, FILE_EXTENSION_TYPES, MIME_TYPE_MAP
)
from app.modules.extraction.schemas import DetectedInput

_DATA_URL_MIME = re.compile(r"^data:([^;]+);")
_TRAILING_EXTENSION = re.compile(r"\.(\w+)$")


def _type_from_mime(mime: str):
    mime = mime.lower()
    if "pdf" in mime:
        return "pdf"
    if "spreadsheet" in mime or "excel" in mime or "csv" in mime:
        return "excel"
    if "word" in mime or "document" in mime or "presentation" in mime:
        return "doc"
    if "image" in mime:
        return "image"
    return None


def detect_input_type(value: str) -> DetectedInput:
    """YouTube, then data URL, then file extension, then web URL; anything else is text."""
    trimmed = value.strip()

    for pattern in YOUTUBE_PATTERNS:
        if pattern.search(trimmed):
            return DetectedInput(type="youtube", url=trimmed)

    if trimmed.startswith("data:"):
        match = _DATA_URL_MIME.match(trimmed)
        if match:
            input_type = _type_from_mime(match.group(1))
            if input_type:
                return DetectedInput(type=input_type, content=trimmed)

    match = _TRAILING_EXTENSION.search(trimmed)
    if match:
        input_type = FILE_EXTENSION_TYPES.get(match.group(1).lower())
        if input_type:
            return DetectedInput(type=input_type, content=trimmed)

    if WEB_URL_PATTERN.match(trimmed):
        return DetectedInput(type="web", url=trimmed)

    return DetectedInput(type="text", content=trimmed)


def detect_file_type(file_name: str, mime_type: str = None) -> str:
    """Exact MIME match first, then the file extension."""
    if mime_type and mime_type.lower() in MIME_TYPE_MAP:
        return MIME_TYPE_MAP[mime_type.lower()]
    extension = os.path.splitext(file_name or "")[1].lstrip(".").lower()
    if extension in FILE_EXTENSION_TYPES:
        return FILE_EXTENSION_TYPES[extension]
    raise HTTPException(status_code=400, detail="Unsupported file type")
