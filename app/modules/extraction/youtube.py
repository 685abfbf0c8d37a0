"""YouTube watch-page metadata and caption transcripts."""

import html as html_lib
import json
import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

import requests
from fastapi import HTTPException

from app.modules.extraction.models import CAPTION_LANGUAGES
from app.modules.extraction.web import fetch_page, parse_html

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
ACCEPT_LANGUAGE = "en-US,en;q=0.9,th;q=0.8"

_VIDEO_ID_PATTERNS = [
    re.compile(r"[?&]v=([^&]+)"),
    re.compile(r"youtu\.be/([^?&]+)"),
    re.compile(r"embed/([^?&]+)"),
    re.compile(r"shorts/([^?&]+)"),
]
_CHANNEL = re.compile(r'"ownerChannelName":"((?:[^"\\]|\\.)*)"')
_LENGTH_SECONDS = re.compile(r'"lengthSeconds":"(\d+)"')
_PLAYER_RESPONSE = re.compile(r"ytInitialPlayerResponse\s*=\s*")


def extract_video_id(url: str) -> Optional[str]:
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def format_duration(seconds: int) -> str:
    """h:mm:ss, or m:ss under an hour"""
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def parse_video_metadata(page: str) -> Dict[str, Optional[str]]:
    soup = parse_html(page)
    title = None
    if soup.title:
        title = soup.title.get_text().replace(" - YouTube", "").strip() or None
    description_meta = soup.find("meta", attrs={"name": "description"})
    description = description_meta.get("content", "").strip() if description_meta else None

    channel = None
    match = _CHANNEL.search(page)
    if match:
        channel = html_lib.unescape(json.loads(f'"{match.group(1)}"'))
    duration = None
    match = _LENGTH_SECONDS.search(page)
    if match:
        duration = format_duration(int(match.group(1)))

    return {
        "title": title,
        "description": description or None,
        "channel": channel,
        "duration": duration,
    }


def parse_caption_tracks(page: str) -> List[Dict]:
    """captionTracks from the embedded ytInitialPlayerResponse JSON, or [] when absent"""
    match = _PLAYER_RESPONSE.search(page)
    if not match:
        return []
    try:
        player_response, _ = json.JSONDecoder().raw_decode(page, match.end())
    except ValueError:
        return []
    return (
        player_response.get("captions", {})
        .get("playerCaptionsTracklistRenderer", {})
        .get("captionTracks", [])
    ) or []


def select_caption_track(tracks: List[Dict]) -> Optional[Dict]:
    """Thai first, then English, then whatever is first"""
    for codes in CAPTION_LANGUAGES:
        for track in tracks:
            if track.get("languageCode") in codes:
                return track
    return tracks[0] if tracks else None


def parse_transcript(xml: str) -> str:
    soup = parse_html(xml)
    parts = []
    for node in soup.find_all("text"):
        text = html_lib.unescape(node.get_text()).replace("\n", " ").strip()
        if text:
            parts.append(text)
    return " ".join(parts)


def summary_prompt(metadata: Dict[str, Optional[str]]) -> str:
    return (
        "Based on this YouTube video information, create a comprehensive summary of what "
        "the video is likely about. Write in the same language as the title.\n\n"
        f"Video Title: {metadata.get('title') or 'Unknown'}\n"
        f"Channel: {metadata.get('channel') or 'Unknown'}\n"
        f"Duration: {metadata.get('duration') or 'Unknown'}\n"
        f"Description: {metadata.get('description') or 'No description available'}\n\n"
        "Please provide:\n"
        "1. A detailed summary of the video topic (2-3 paragraphs)\n"
        "2. Key points that are likely covered in the video\n"
        "3. What viewers will learn from this video\n\n"
        "Write naturally as if summarizing the actual video content. Be informative and educational."
    )


def _fetch_transcript(page: str) -> str:
    track = select_caption_track(parse_caption_tracks(page))
    if not track or not track.get("baseUrl"):
        return ""
    try:
        return parse_transcript(fetch_page(track["baseUrl"]))
    except requests.RequestException as e:
        logger.warning(f"Failed to fetch YouTube transcript: {e}")
        return ""


def fetch_youtube_content(
    url: str,
    summarize: Callable[[Dict[str, Optional[str]]], str]
) -> Tuple[str, Dict[str, Optional[str]]]:
    """Transcript text, or summarize(metadata) when the video has no usable captions"""
    video_id = extract_video_id(url)
    if not video_id:
        raise HTTPException(status_code=400, detail="Invalid YouTube URL")

    try:
        page = fetch_page(WATCH_URL.format(video_id=video_id), accept_language=ACCEPT_LANGUAGE)
    except requests.RequestException as e:
        raise HTTPException(status_code=422, detail=f"Failed to fetch YouTube page: {str(e)}")

    metadata = parse_video_metadata(page)
    result_metadata = {"title": metadata["title"], "duration": metadata["duration"], "channel": metadata["channel"]}

    transcript = _fetch_transcript(page)
    if transcript:
        return transcript, result_metadata

    logger.info(f"No transcript for YouTube video {video_id}, summarizing metadata")
    return summarize(metadata), {**result_metadata, "generated_from_metadata": True}
