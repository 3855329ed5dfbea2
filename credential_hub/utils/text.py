"""Resume text extraction and regex heuristics."""

from __future__ import annotations

import logging
import re
from io import BytesIO
from typing import Any, Dict, List

from docx import Document
from pypdf import PdfReader

_LOGGER = logging.getLogger(__name__)

MAX_STORED_TEXT_LENGTH = 20_000

PDF_MIME = "application/pdf"
DOC_MIMES = (
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b")
PHONE_PATTERN = re.compile(r"(\+?1[-.\s]?)?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})")
PHONE_LIKE_PATTERN = re.compile(r"\d{3}[-.\s]?\d{3}[-.\s]?\d{4}")
NAME_PATTERN = re.compile(r"^([A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,3})$")
SKILLS_PATTERN = re.compile(r"skills?:?\s*\n?([^\n]+(?:\n[^\n]+)*)", re.IGNORECASE)
MAX_SKILLS = 10


class UnsupportedFileType(ValueError):
    """Raised for uploads that are not PDF, Word or image files."""


def extract_pdf_text(raw_bytes: bytes) -> str:
    """Extract text from a PDF file while guarding against parser errors."""
    try:
        reader = PdfReader(BytesIO(raw_bytes))
    except Exception:
        _LOGGER.warning("Unable to initialize PdfReader for uploaded resume", exc_info=True)
        return ""

    collected: List[str] = []
    for page in reader.pages:
        try:
            page_text = page.extract_text() or ""
        except Exception:
            _LOGGER.warning("Failed to extract text from a PDF page", exc_info=True)
            page_text = ""

        if page_text:
            collected.append(page_text)

    combined = "\n".join(collected).strip()
    return combined[:MAX_STORED_TEXT_LENGTH]


def extract_docx_text(raw_bytes: bytes) -> str:
    """Extract paragraph and table text from a Word document."""
    try:
        document = Document(BytesIO(raw_bytes))
    except Exception:
        _LOGGER.warning("Unable to open uploaded Word document", exc_info=True)
        return ""

    lines = [paragraph.text for paragraph in document.paragraphs if paragraph.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append(" | ".join(cells))

    return "\n".join(lines).strip()[:MAX_STORED_TEXT_LENGTH]


def extract_text_from_resume(raw_bytes: bytes, filename: str, mimetype: str) -> str:
    """Extract text from a resume upload based on its type."""
    lowered = (filename or "").lower()
    mime = (mimetype or "").lower()

    if mime == PDF_MIME or lowered.endswith(".pdf"):
        return extract_pdf_text(raw_bytes)
    if mime in DOC_MIMES or lowered.endswith(".doc") or lowered.endswith(".docx"):
        return extract_docx_text(raw_bytes)
    if mime.startswith("image/"):
        # No OCR backend; images carry no extractable text.
        return ""

    raise UnsupportedFileType("Unsupported file type. Please upload PDF, DOC, DOCX, or image files.")


def _split_name(value: str) -> List[str]:
    return value.split()


def parse_resume_fallback(resume_text: str) -> Dict[str, Any]:
    """Pull contact details, a name and skills out of resume text with regexes."""
    result: Dict[str, Any] = {}
    if not resume_text:
        return result

    email_match = EMAIL_PATTERN.search(resume_text)
    if email_match:
        result["email"] = email_match.group(0)

    phone_match = PHONE_PATTERN.search(resume_text)
    if phone_match:
        result["phone"] = phone_match.group(0).strip()

    lines = [line.strip() for line in resume_text.split("\n") if line.strip()]
    for index, line in enumerate(lines[:5]):
        lowered = line.lower()
        if "@" in line or PHONE_LIKE_PATTERN.search(line) or "resume" in lowered or "curriculum" in lowered:
            continue

        name_match = NAME_PATTERN.match(line)
        if name_match and 3 < len(name_match.group(0)) < 50:
            parts = _split_name(name_match.group(0))
            result["firstName"] = parts[0]
            result["lastName"] = " ".join(parts[1:])
            break

        # The first line is usually the name even when it is not title-cased.
        if index == 0 and "firstName" not in result:
            parts = _split_name(line)
            if len(parts) >= 2 and 1 < len(parts[0]) < 20:
                result["firstName"] = parts[0]
                result["lastName"] = " ".join(parts[1:])

    if "firstName" not in result and "lastName" not in result and result.get("email"):
        local_part = result["email"].split("@")[0]
        parts = [part for part in re.split(r"[._-]", local_part) if part]
        if len(parts) >= 2:
            result["firstName"] = parts[0][:1].upper() + parts[0][1:]
            result["lastName"] = parts[-1][:1].upper() + parts[-1][1:]

    skills_match = SKILLS_PATTERN.search(resume_text)
    if skills_match:
        skills = [
            item.strip()
            for item in re.split(r"[,;•\n]", skills_match.group(1))
            if item.strip() and len(item.strip()) < 50
        ][:MAX_SKILLS]
        if skills:
            result["skills"] = skills

    return result
