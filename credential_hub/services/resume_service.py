"""Turn an uploaded resume into structured profile fields.

Parsing goes through OpenAI when a key is configured. Any failure there
(missing key, API error, unusable output) falls back to regex heuristics, so
a resume upload never fails because of the optional AI step.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

from openai import APIError, OpenAI

from credential_hub.services import openai_service
from credential_hub.utils.text import extract_text_from_resume, parse_resume_fallback
from credential_hub.utils.validation import parse_age

_LOGGER = logging.getLogger(__name__)

MAX_PROMPT_CHARS = 8000
SHORT_TEXT_WARNING_CHARS = 50
KNOWN_GENDERS = {"male", "female", "non-binary"}

RESUME_PARSER_INSTRUCTIONS = """You are a resume parser. Extract structured information from resume text and return ONLY a valid JSON object with this exact structure:
{
  "firstName": "string or null",
  "lastName": "string or null",
  "age": "string or null (calculate from date of birth or experience if available)",
  "gender": "string or null (male, female, non-binary, or null if not found)",
  "email": "string or null",
  "phone": "string or null",
  "address": "string or null",
  "workExperience": [{"company": "string", "position": "string", "duration": "string", "description": "string or null"}],
  "education": [{"institution": "string", "degree": "string", "field": "string", "year": "string or null"}],
  "skills": ["string"],
  "summary": "string or null"
}

IMPORTANT: Return ONLY the JSON object, no markdown formatting, no code blocks, no additional text. Just the raw JSON object."""


class EmptyResumeError(ValueError):
    """Raised when no text could be extracted from an otherwise supported file."""


def _extract_json_object(content: str) -> Dict[str, Any]:
    """Parse the model output, tolerating code fences and surrounding prose."""
    try:
        parsed = json.loads(content)
    except ValueError:
        stripped = re.sub(r"```(?:json)?\n?", "", content).strip()
        match = re.search(r"\{[\s\S]*\}", stripped)
        if not match:
            raise ValueError("No JSON found in AI response")
        parsed = json.loads(match.group(0))

    if not isinstance(parsed, dict):
        raise ValueError("AI response was not a JSON object")
    return parsed


def _without_nulls(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value not in (None, "")}


def parse_resume_with_ai(resume_text: str, client: Optional[OpenAI] = None) -> Dict[str, Any]:
    """Parse ``resume_text`` with OpenAI, falling back to regex heuristics."""
    if client is None and not openai_service.is_configured():
        _LOGGER.warning("OpenAI API key not configured, using fallback resume parsing")
        return parse_resume_fallback(resume_text)

    try:
        client = client or openai_service.get_openai_client()
        completion = openai_service.create_response(
            client,
            f"Parse this resume and extract all information:\n\n{resume_text[:MAX_PROMPT_CHARS]}",
            instructions=RESUME_PARSER_INSTRUCTIONS,
            max_output_tokens=2000,
            temperature=0.2,
        )
        content = openai_service.output_text(completion)
        if not content:
            raise ValueError("No content received from AI")
        parsed = _without_nulls(_extract_json_object(content))
    except APIError:
        _LOGGER.exception("OpenAI API error during resume parsing, falling back to regex parsing")
        return parse_resume_fallback(resume_text)
    except (RuntimeError, ValueError):
        _LOGGER.exception("Unusable AI resume parse, falling back to regex parsing")
        return parse_resume_fallback(resume_text)

    if not any(parsed.get(key) for key in ("firstName", "lastName", "email")):
        _LOGGER.warning("AI resume parse returned no name or email, merging with regex parsing")
        return {**parse_resume_fallback(resume_text), **parsed}

    return parsed


def parse_resume_file(
    raw_bytes: bytes,
    filename: str,
    mimetype: str,
    client: Optional[OpenAI] = None,
) -> Dict[str, Any]:
    """Extract text from an uploaded resume and parse it."""
    resume_text = extract_text_from_resume(raw_bytes, filename, mimetype)
    if not resume_text or not resume_text.strip():
        raise EmptyResumeError(
            "Could not extract text from resume file. The file may be image-based, "
            "corrupted or in an unsupported format."
        )

    if len(resume_text.strip()) < SHORT_TEXT_WARNING_CHARS:
        _LOGGER.warning("Extracted resume text from %s is very short (%d chars)", filename, len(resume_text))

    return parse_resume_with_ai(resume_text, client)


def _string_items(items: Any, keys: List[str]) -> List[Dict[str, str]]:
    if not isinstance(items, list):
        return []
    cleaned = []
    for item in items:
        if not isinstance(item, dict):
            continue
        entry = {key: str(item.get(key) or "").strip() for key in keys}
        if any(entry.values()):
            cleaned.append(entry)
    return cleaned


def resume_to_user_data(parsed: Dict[str, Any]) -> Dict[str, Any]:
    """Map a parsed resume onto the session fields a profile form pre-fills."""
    data: Dict[str, Any] = {}
    for key in ("firstName", "lastName", "email", "phone"):
        value = parsed.get(key)
        if isinstance(value, str) and value.strip():
            data[key] = value.strip()

    age = parse_age(parsed.get("age"))
    if age is not None:
        data["age"] = str(age)

    gender = str(parsed.get("gender") or "").strip().lower()
    if gender in KNOWN_GENDERS:
        data["gender"] = gender

    education = _string_items(parsed.get("education"), ["institution", "degree", "field", "year"])
    if education:
        data["education"] = education

    experience = _string_items(parsed.get("workExperience"), ["company", "position", "duration", "description"])
    if experience:
        data["workExperience"] = experience

    return data
