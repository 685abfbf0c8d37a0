"""
Small helpers shared by the service modules: slugs, pagination, timestamps.
"""

import math
import re
import time
from datetime import datetime, timezone
from typing import Dict, List, Tuple

CATEGORY_SLUG_MAX_LENGTH = 50
POST_SLUG_MAX_LENGTH = 100


def generate_slug(text: str, max_length: int = CATEGORY_SLUG_MAX_LENGTH) -> str:
    """Lowercase, drop punctuation, hyphenate whitespace and truncate.

    The Thai block is kept whole, including its combining vowel and tone marks.
    """
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s\u0e00-\u0e7f-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug[:max_length].rstrip("-")


def timestamped_slug(slug: str) -> str:
    return f"{slug}-{int(time.time() * 1000)}"


def page_range(page: int, page_size: int) -> Tuple[int, int]:
    """Inclusive (start, end) row range for a 1-based page."""
    page = max(page, 1)
    page_size = max(page_size, 1)
    start = (page - 1) * page_size
    return start, start + page_size - 1


def total_pages(total: int, page_size: int) -> int:
    if page_size <= 0:
        return 0
    return math.ceil(total / page_size)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def parse_timestamp(value) -> datetime:
    """Parse a Supabase timestamptz string (or pass through a datetime) as an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def count_words(text: str) -> int:
    return len(text.split()) if text else 0


def index_by(rows: List[Dict], key: str = "id") -> Dict[str, Dict]:
    return {row[key]: row for row in rows if row.get(key) is not None}


def ilike_filter(columns: List[str], term: str) -> str:
    """PostgREST or-filter matching term in any of the columns (case-insensitive)."""
    cleaned = re.sub(r"[,()%*]", " ", term).strip()
    return ",".join(f"{column}.ilike.%{cleaned}%" for column in columns)
