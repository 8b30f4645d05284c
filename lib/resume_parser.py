# =============================================================================
# lib/resume_parser.py - Best-Effort Resume Field Extraction
# =============================================================================
# Sends resume text to OpenAI and returns a fixed set of fields.
#
# The model is asked for JSON. When it wraps the JSON in prose, the first
# {...} block is extracted instead. Missing fields come back as "" (or []
# for skills) so callers can prefill forms without key checks.
#
# Usage:
#   from lib.resume_parser import ResumeParser
#   fields = ResumeParser().parse(document_text)
#   print(fields["currentTitle"])
# =============================================================================

import json
import logging
import re
from typing import Any

from openai import OpenAI

from app.config import settings
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are an expert resume parser. Extract information accurately from "
    "resumes and documents. Always return valid JSON format. If information "
    "is not found, use empty strings or empty arrays as appropriate."
)

DEFAULT_EXTRACTION_PROMPT = (
    "Extract the following fields from this resume and return them as a JSON "
    "object: name, email, phone, currentTitle, industry, skills (array of "
    "strings), goals, experience, education."
)

# Text fields returned to callers, in order
TEXT_FIELDS = (
    "name",
    "email",
    "phone",
    "currentTitle",
    "industry",
    "goals",
    "experience",
    "education",
)

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


class ResumeParseError(ApplicationError):
    """Raised when the LLM call fails or returns no usable JSON."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="RESUME_PARSE_ERROR", **kwargs)


def extract_json(text: str) -> dict[str, Any]:
    """
    Parse a model response into a dict.

    Tries the whole text first, then the outermost {...} block.

    Raises:
        ResumeParseError: If neither yields a JSON object
    """
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        match = _JSON_BLOCK.search(text or "")
        if not match:
            raise ResumeParseError("Failed to parse AI response as JSON")
        try:
            parsed = json.loads(match.group(0))
        except ValueError:
            raise ResumeParseError("Failed to parse AI response as JSON")

    if not isinstance(parsed, dict):
        raise ResumeParseError("AI response was not a JSON object")
    return parsed


def clean_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Keep only the known fields; blanks for missing values, list for skills."""
    cleaned: dict[str, Any] = {field: data.get(field) or "" for field in TEXT_FIELDS}
    skills = data.get("skills")
    cleaned["skills"] = skills if isinstance(skills, list) else []
    return cleaned


class ResumeParser:
    """
    OpenAI-backed resume field extractor.

    Attributes:
        model: OpenAI model (default settings.OPENAI_MODEL)
        temperature: Low for repeatable extraction
        max_tokens: Response cap
    """

    def __init__(
        self,
        model: str | None = None,
        temperature: float = 0.1,
        max_tokens: int = 1000,
        client: OpenAI | None = None,
    ):
        if client is None:
            if not settings.openai_configured:
                raise ResumeParseError(
                    "OpenAI API key not configured",
                    suggestion="Set OPENAI_API_KEY in your .env file",
                )
            client = OpenAI(api_key=settings.OPENAI_API_KEY)

        self.client = client
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens

    def parse(self, document_text: str, extraction_prompt: str | None = None) -> dict[str, Any]:
        """
        Extract resume fields from raw document text.

        Args:
            document_text: Plain text of the resume
            extraction_prompt: Instructions placed before the document;
                defaults to DEFAULT_EXTRACTION_PROMPT

        Returns:
            Dict with name, email, phone, currentTitle, industry, skills,
            goals, experience, education

        Raises:
            ResumeParseError: If the OpenAI call fails or the reply isn't JSON
        """
        prompt = extraction_prompt or DEFAULT_EXTRACTION_PROMPT
        logger.info("Parsing document with OpenAI...")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": f"{prompt}\n\nDocument content:\n{document_text}"},
                ],
            )
            response_text = response.choices[0].message.content or ""
        except Exception as e:
            raise ResumeParseError(
                f"OpenAI API call failed: {e}",
                suggestion="Check your OPENAI_API_KEY and network connection",
                details={"model": self.model},
            )

        logger.debug(f"OpenAI response: {response_text[:200]}...")
        return clean_fields(extract_json(response_text))
