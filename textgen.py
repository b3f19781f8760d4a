"""
Optional text generation through the Gemini REST API.

The adapter never raises to its callers: every outcome, including a missing
API key or a failed request, is returned as displayable text.
"""

import json
import logging
import re
from typing import Literal, Optional

import requests
from pydantic import Field, ValidationError, field_validator

from schemas import Record

logger = logging.getLogger(__name__)

ModelId = Literal["gemini-3-pro-preview", "gemini-2.5-flash"]
SUPPORTED_MODELS = ("gemini-3-pro-preview", "gemini-2.5-flash")
DEFAULT_MODEL = "gemini-3-pro-preview"

API_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

UNAVAILABLE_MESSAGE = "AI features are unavailable. Please configure your API key."
EMPTY_RESPONSE_MESSAGE = "Sorry, the AI couldn't generate a response. Please try again."
ERROR_MESSAGE = "An error occurred while communicating with the AI. Please check the logs for details."
ANNOUNCEMENT_ERROR = "Sorry, there was an error generating the announcement. Please try a different prompt."

_FENCE = re.compile(r"```(json)?")


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


class TextGenerator:
    def __init__(self, api_key: Optional[str] = None, endpoint: str = API_ENDPOINT, timeout: float = 60):
        self.api_key = api_key or None
        self.endpoint = endpoint
        self.timeout = timeout

    def is_available(self) -> bool:
        return self.api_key is not None

    def generate(self, model_id: str, prompt: str) -> str:
        if not self.is_available():
            return UNAVAILABLE_MESSAGE
        if model_id not in SUPPORTED_MODELS:
            logger.error("Unsupported model %r", model_id)
            return ERROR_MESSAGE

        try:
            response = requests.post(
                self.endpoint.format(model=model_id),
                json={"contents": [{"parts": [{"text": prompt}]}]},
                headers={"x-goog-api-key": self.api_key, "Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            text = _response_text(response.json())
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError):
            logger.exception("Error running Gemini with model %s", model_id)
            return ERROR_MESSAGE

        if text:
            return strip_code_fences(text)
        return EMPTY_RESPONSE_MESSAGE


def _response_text(body: dict) -> str:
    candidates = body.get("candidates") or []
    if not candidates:
        return ""
    parts = candidates[0]["content"].get("parts") or []
    return "".join(part.get("text", "") for part in parts)


# ----------------------- Announcements -----------------------

class AnnouncementDraft(Record):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class GenerationResult(Record):
    ok: bool
    draft: Optional[AnnouncementDraft] = None
    error: Optional[str] = None


def parse_announcement(text: str) -> GenerationResult:
    """Validate model output as ``{"title": ..., "content": ...}``."""
    try:
        payload = json.loads(strip_code_fences(text))
        if not isinstance(payload, dict):
            raise ValueError("expected a JSON object")
        draft = AnnouncementDraft.model_validate(payload)
    except (ValueError, ValidationError) as e:
        logger.warning("Failed to parse generated announcement: %s", e)
        return GenerationResult(ok=False, error=ANNOUNCEMENT_ERROR)
    return GenerationResult(ok=True, draft=draft)


def announcement_prompt(topic: str) -> str:
    return f"""
You are an administrator for an Islamic education system named "Noor ul Masajid".
Generate a concise and professional announcement for the notice board based on the following topic.
The topic is: "{topic}".
Return the response as a single, valid JSON object with two keys: "title" (a short, suitable headline) and "content" (the full announcement text, about 2-3 sentences).
Do not include any other text or markdown formatting outside of the JSON object.
""".strip()


def remark_prompt(student_name: str, class_name: str, total_days: int, present: int, absent: int,
                  leave: int, percentage: str) -> str:
    return f"""
Generate a brief, personalized performance remark for a student named {student_name}.
The student is in class {class_name} at Noor ul Masajid Islamic Education System.
Here is their attendance record summary:
- Total Days Tracked: {total_days}
- Present: {present} days
- Absent: {absent} days
- Leave: {leave} days
- Attendance Percentage: {percentage}%

Based on this data, write a short (2-3 sentences), encouraging, and professional remark suitable for a parent-facing report.
If attendance is good (>=85%), praise their consistency.
If attendance is average (60-84%), encourage them to attend more regularly.
If attendance is poor (<60%), mention it constructively and suggest improvement.
""".strip()
