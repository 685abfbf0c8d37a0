"""HTTP fetching and readable-text extraction for web pages."""

import re
from typing import Dict, Optional, Tuple

import requests
from bs4 import BeautifulSoup
from fastapi import HTTPException

from app.config import settings
from app.modules.extraction.models import (
    BROWSER_USER_AGENT, MIN_WEB_CONTENT_LENGTH, MIN_PARAGRAPH_LENGTH, MIN_WEB_PARTS
)

_WHITESPACE = re.compile(r"\s+")
_HEADING = re.compile(r"^h[1-6]$")
STRIPPED_TAGS = ["script", "style", "nav", "header", "footer", "aside"]


def fetch_page(url: str, accept_language: Optional[str] = None) -> str:
    """Fetch HTML content from a URL.

    Args:
        url: The URL to fetch.
        accept_language: Optional Accept-Language header value.

    Returns:
        The HTML content as a string.

    Raises:
        requests.RequestException: If the request fails.
    """
    headers = {
        "User-Agent": BROWSER_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }
    if accept_language:
        headers["Accept-Language"] = accept_language
    response = requests.get(url, headers=headers, timeout=settings.http_timeout_seconds)
    response.raise_for_status()
    return response.text


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _clean(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def extract_readable_text(html: str) -> Tuple[str, Dict[str, Optional[str]]]:
    """Headings, then paragraphs longer than MIN_PARAGRAPH_LENGTH, then list items when
    too little was found. Reads article, else main, else body."""
    soup = parse_html(html)
    title = _clean(soup.title.get_text()) if soup.title else None
    author_meta = soup.find("meta", attrs={"name": "author"})
    author = _clean(author_meta.get("content", "")) if author_meta else None

    root = soup.find("article") or soup.find("main") or soup.body or soup
    for tag in root.find_all(STRIPPED_TAGS):
        tag.decompose()

    parts = []
    for heading in root.find_all(_HEADING):
        text = _clean(heading.get_text(" "))
        if text:
            parts.append(text)
    for paragraph in root.find_all("p"):
        text = _clean(paragraph.get_text(" "))
        if len(text) > MIN_PARAGRAPH_LENGTH:
            parts.append(text)
    if len(parts) < MIN_WEB_PARTS:
        for item in root.find_all("li"):
            text = _clean(item.get_text(" "))
            if text:
                parts.append(text)

    return "\n\n".join(parts), {"title": title or None, "author": author or None}


def fetch_web_content(url: str) -> Tuple[str, Dict[str, Optional[str]]]:
    try:
        html = fetch_page(url)
    except requests.RequestException as e:
        raise HTTPException(status_code=422, detail=f"Failed to fetch URL: {str(e)}")

    content, metadata = extract_readable_text(html)
    if len(content) < MIN_WEB_CONTENT_LENGTH:
        raise HTTPException(
            status_code=422,
            detail="Could not extract meaningful content from this page. Try copying the text manually."
        )
    return content, metadata
