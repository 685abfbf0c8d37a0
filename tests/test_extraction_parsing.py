"""
Tests for input detection and the pure parsing steps of content extraction.
"""

import io
import json

import pytest
from docx import Document
from fastapi import HTTPException
from openpyxl import Workbook

from app.modules.extraction import files
from app.modules.extraction.detector import detect_file_type, detect_input_type
from app.modules.extraction.web import extract_readable_text
from app.modules.extraction.youtube import (
    extract_video_id,
    format_duration,
    parse_caption_tracks,
    parse_transcript,
    parse_video_metadata,
    select_caption_track,
)


# =============================================================================
# Detection
# =============================================================================

class TestDetectInputType:
    @pytest.mark.parametrize("value", [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "youtu.be/dQw4w9WgXcQ",
        "https://youtube.com/shorts/abc_123",
        "https://www.youtube.com/embed/abc-123",
    ])
    def test_youtube(self, value):
        detected = detect_input_type(value)
        assert detected.type == "youtube"
        assert detected.url == value

    def test_web_url(self):
        detected = detect_input_type("  https://example.com/article  ")
        assert detected.type == "web"
        assert detected.url == "https://example.com/article"

    def test_data_url_uses_mime(self):
        assert detect_input_type("data:application/pdf;base64,JVBERi0=").type == "pdf"
        assert detect_input_type("data:image/png;base64,iVBOR=").type == "image"

    def test_file_extension_wins_over_web(self):
        assert detect_input_type("https://example.com/report.pdf").type == "pdf"
        assert detect_input_type("grades.xlsx").type == "excel"

    def test_plain_text(self):
        detected = detect_input_type("Photosynthesis turns light into energy.")
        assert detected.type == "text"
        assert detected.content == "Photosynthesis turns light into energy."


class TestDetectFileType:
    def test_mime_first(self):
        assert detect_file_type("upload.bin", "application/pdf") == "pdf"

    def test_falls_back_to_extension(self):
        assert detect_file_type("notes.DOCX", "application/octet-stream") == "doc"
        assert detect_file_type("data.csv") == "excel"

    def test_unsupported(self):
        with pytest.raises(HTTPException) as exc:
            detect_file_type("archive.zip", "application/zip")
        assert exc.value.status_code == 400


# =============================================================================
# Web pages
# =============================================================================

ARTICLE_HTML = """
<html>
  <head>
    <title>  Learning   Python </title>
    <meta name="author" content="Jane Doe">
  </head>
  <body>
    <nav><p>Navigation links that should never appear in the output</p></nav>
    <article>
      <h1>Why Python</h1>
      <p>Python is a readable language used in many fields.</p>
      <p>Short one.</p>
      <script>var tracking = "ignore me entirely please";</script>
      <p>It has a large standard library and a friendly community.</p>
    </article>
  </body>
</html>
"""


class TestExtractReadableText:
    def test_article_content_and_metadata(self):
        content, metadata = extract_readable_text(ARTICLE_HTML)

        assert metadata == {"title": "Learning Python", "author": "Jane Doe"}
        assert content.split("\n\n") == [
            "Why Python",
            "Python is a readable language used in many fields.",
            "It has a large standard library and a friendly community.",
        ]

    def test_list_items_used_when_few_parts(self):
        html = "<body><main><h2>Steps</h2><ul><li>Mix flour</li><li>Bake</li></ul></main></body>"
        content, _ = extract_readable_text(html)

        assert content.split("\n\n") == ["Steps", "Mix flour", "Bake"]

    def test_stripped_tags_never_leak(self):
        html = "<body><footer><p>Copyright notice text for the whole site</p></footer></body>"
        content, metadata = extract_readable_text(html)

        assert content == ""
        assert metadata["title"] is None


# =============================================================================
# YouTube
# =============================================================================

def watch_page(player_response, title="Intro to Fractions - YouTube"):
    return (
        f"<html><head><title>{title}</title>"
        '<meta name="description" content="Learn fractions fast"></head><body>'
        '<script>var x = {"ownerChannelName":"Math \\"Club\\"","lengthSeconds":"3725"};</script>'
        f"<script>var ytInitialPlayerResponse = {json.dumps(player_response)};var other = 1;</script>"
        "</body></html>"
    )


class TestYoutubeHelpers:
    @pytest.mark.parametrize("url, expected", [
        ("https://www.youtube.com/watch?v=abc123&t=10", "abc123"),
        ("https://youtu.be/xyz789?si=share", "xyz789"),
        ("https://www.youtube.com/embed/emb456", "emb456"),
        ("https://youtube.com/shorts/sh0rt", "sh0rt"),
        ("https://example.com/video", None),
    ])
    def test_extract_video_id(self, url, expected):
        assert extract_video_id(url) == expected

    def test_format_duration(self):
        assert format_duration(3725) == "1:02:05"
        assert format_duration(65) == "1:05"
        assert format_duration(0) == "0:00"

    def test_parse_video_metadata(self):
        metadata = parse_video_metadata(watch_page({}))

        assert metadata == {
            "title": "Intro to Fractions",
            "description": "Learn fractions fast",
            "channel": 'Math "Club"',
            "duration": "1:02:05",
        }

    def test_parse_caption_tracks(self):
        tracks = [{"languageCode": "en", "baseUrl": "https://captions.test/en"}]
        page = watch_page({"captions": {"playerCaptionsTracklistRenderer": {"captionTracks": tracks}}})

        assert parse_caption_tracks(page) == tracks

    def test_parse_caption_tracks_without_captions(self):
        assert parse_caption_tracks(watch_page({"videoDetails": {}})) == []
        assert parse_caption_tracks("<html></html>") == []

    def test_select_caption_track_prefers_thai_then_english(self):
        tracks = [{"languageCode": "fr"}, {"languageCode": "en-US"}, {"languageCode": "th"}]
        assert select_caption_track(tracks)["languageCode"] == "th"
        assert select_caption_track(tracks[:2])["languageCode"] == "en-US"
        assert select_caption_track(tracks[:1])["languageCode"] == "fr"
        assert select_caption_track([]) is None

    def test_parse_transcript(self):
        xml = (
            '<?xml version="1.0" encoding="utf-8" ?><transcript>'
            '<text start="0" dur="1">Hello &amp;amp; welcome</text>'
            '<text start="1" dur="1">to the\nclass</text>'
            '<text start="2" dur="1"> </text>'
            "</transcript>"
        )
        assert parse_transcript(xml) == "Hello & welcome to the class"


# =============================================================================
# Documents
# =============================================================================

class TestFileExtraction:
    def test_file_title(self):
        assert files.file_title("reports/Q1 Summary.pdf") == "Q1 Summary"
        assert files.file_title("") == "Untitled"

    def test_csv(self):
        data = "name,score\nAnn,90\n,\nBob,85\n".encode("utf-8-sig")
        text, sheets = files.extract_spreadsheet(data, "scores.csv")

        assert sheets == 1
        assert text == "--- Sheet: scores ---\nname,score\nAnn,90\nBob,85"

    def test_csv_without_extension_uses_mime_type(self):
        text, sheets = files.extract_spreadsheet(b"a,b\n1,2\n", "download", "text/csv")

        assert sheets == 1
        assert text == "--- Sheet: download ---\na,b\n1,2"

    def test_xlsx_skips_empty_sheets(self):
        workbook = Workbook()
        first = workbook.active
        first.title = "Grades"
        first.append(["name", "score"])
        first.append(["Ann", 90])
        workbook.create_sheet("Empty")
        buffer = io.BytesIO()
        workbook.save(buffer)

        text, sheets = files.extract_spreadsheet(buffer.getvalue(), "grades.xlsx")

        assert sheets == 2
        assert text == "--- Sheet: Grades ---\nname,score\nAnn,90"

    def test_legacy_spreadsheet_is_rejected(self):
        with pytest.raises(HTTPException) as exc:
            files.extract_spreadsheet(b"not a workbook", "old.xls")
        assert exc.value.status_code == 422

    def test_docx_paragraphs_and_tables(self):
        document = Document()
        document.add_paragraph("Chapter one")
        document.add_paragraph("   ")
        table = document.add_table(rows=1, cols=2)
        table.rows[0].cells[0].text = "Term"
        table.rows[0].cells[1].text = "Meaning"
        buffer = io.BytesIO()
        document.save(buffer)

        assert files.extract_docx(buffer.getvalue()) == "Chapter one\nTerm | Meaning"

    def test_unreadable_docx(self):
        with pytest.raises(HTTPException) as exc:
            files.extract_docx(b"plain bytes")
        assert exc.value.status_code == 422

    def test_unreadable_pdf(self):
        with pytest.raises(HTTPException) as exc:
            files.extract_pdf(b"not a pdf")
        assert exc.value.status_code == 422
