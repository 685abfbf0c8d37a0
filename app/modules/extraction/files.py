"""
Text extraction for uploaded documents: PDF, spreadsheets and Word files.
"""

import csv
import io
import logging
import os
from typing import Optional, Tuple

import pdfplumber
from docx import Document
from fastapi import HTTPException
from openpyxl import load_workbook

from app.modules.extraction.models import CSV_MIME_TYPES

logger = logging.getLogger(__name__)


def file_title(file_name: str) -> str:
    return os.path.splitext(os.path.basename(file_name or ""))[0] or "Untitled"


def extract_pdf(data: bytes) -> Tuple[str, int]:
    """(text of every page, page count)"""
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            pages = [(page.extract_text() or "").strip() for page in pdf.pages]
            return "\n\n".join(text for text in pages if text), len(pdf.pages)
    except Exception as e:
        logger.warning(f"PDF extraction failed: {e}")
        raise HTTPException(status_code=422, detail="Could not read PDF file")


def _sheet_block(name: str, rows) -> Optional[str]:
    lines = [",".join("" if cell is None else str(cell) for cell in row) for row in rows]
    lines = [line for line in lines if line.strip(",").strip()]
    if not lines:
        return None
    return f"--- Sheet: {name} ---\n" + "\n".join(lines)


def is_csv(file_name: str, mime_type: Optional[str] = None) -> bool:
    return file_name.lower().endswith(".csv") or (mime_type or "").lower() in CSV_MIME_TYPES


def extract_spreadsheet(data: bytes, file_name: str, mime_type: Optional[str] = None) -> Tuple[str, int]:
    """(one block of comma-joined rows per non-empty sheet, sheet count)"""
    if is_csv(file_name, mime_type):
        text = data.decode("utf-8-sig", errors="replace")
        block = _sheet_block(file_title(file_name), csv.reader(io.StringIO(text)))
        return block or "", 1

    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as e:
        logger.warning(f"Spreadsheet extraction failed: {e}")
        raise HTTPException(
            status_code=422,
            detail="Could not read spreadsheet; save it as .xlsx or .csv and try again"
        )
    try:
        blocks = []
        for worksheet in workbook.worksheets:
            block = _sheet_block(worksheet.title, worksheet.iter_rows(values_only=True))
            if block:
                blocks.append(block)
        return "\n\n".join(blocks), len(workbook.worksheets)
    finally:
        workbook.close()


def extract_docx(data: bytes) -> str:
    """Paragraph text, then table rows with cells joined by " | " """
    try:
        document = Document(io.BytesIO(data))
    except Exception as e:
        logger.warning(f"Document extraction failed: {e}")
        raise HTTPException(
            status_code=422,
            detail="Could not read document; only .docx files are supported"
        )
    parts = [p.text.strip() for p in document.paragraphs if p.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            if any(cells):
                parts.append(" | ".join(cells))
    return "\n".join(parts)
