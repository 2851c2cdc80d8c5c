"""OpenAI-compatible client for the recognition service.

The workflow only depends on :class:`RecognitionService`; tests swap in a
deterministic stub, production uses :class:`LLMCollaborator` against any
OpenAI-compatible endpoint (LM Studio, OpenAI, a proxy to Gemini, ...).
"""

import base64
import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Protocol

import httpx
from openai import OpenAI, OpenAIError

from autofix.agent.prompts import (
    PART_PROMPT,
    PLATE_PROMPT,
    QUOTES_PROMPT,
    SUMMARY_PROMPT,
)
from autofix.config import Config
from autofix.database.models import QuoteCandidate
from autofix.utils.constants import UNKNOWN_PART_NAME
from autofix.workflow.errors import CollaboratorFailure

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


@dataclass(frozen=True)
class PartGuess:
    name: str
    estimated_price: float


class RecognitionService(Protocol):
    def recognize_plate(self, image: bytes) -> str: ...

    def identify_part(self, image: bytes) -> PartGuess: ...

    def simulate_quotes(self, part_name: str) -> list[QuoteCandidate]: ...

    def summarize_job(self, transcript: str) -> str: ...


def _image_content(image: bytes, prompt: str) -> list[dict]:
    encoded = base64.b64encode(image).decode("ascii")
    return [
        {"type": "text", "text": prompt},
        {
            "type": "image_url",
            "image_url": {"url": f"data:image/jpeg;base64,{encoded}"},
        },
    ]


def _parse_json(text: str):
    """Parse a JSON answer, tolerating markdown code fences."""
    cleaned = _FENCE_RE.sub("", text.strip())
    return json.loads(cleaned)


def _amount(value) -> float:
    """Coerce a model-supplied amount; raise ValueError when unusable."""
    if isinstance(value, bool):
        raise ValueError("boolean is not an amount")
    amount = float(value)
    if not math.isfinite(amount) or amount < 0:
        raise ValueError(f"bad amount {value!r}")
    return amount


def parse_part_guess(text: str) -> PartGuess:
    try:
        data = _parse_json(text)
        name = str(data["name"]).strip()
        price = _amount(data.get("estimatedPrice",
                                 data.get("estimated_price")))
        if not name:
            raise ValueError("empty part name")
        return PartGuess(name=name, estimated_price=price)
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        logger.warning(f"Unusable part identification ({e}); using fallback")
        return PartGuess(name=UNKNOWN_PART_NAME, estimated_price=0.0)


def parse_quotes(text: str) -> list[QuoteCandidate]:
    """Parse the distributor list, dropping malformed entries."""
    try:
        data = _parse_json(text)
    except ValueError as e:
        logger.warning(f"Unusable quote list ({e}); no candidates")
        return []
    if isinstance(data, dict):
        data = data.get("quotes", [])
    if not isinstance(data, list):
        logger.warning("Quote list is not an array; no candidates")
        return []

    candidates = []
    for item in data:
        try:
            source = str(item["source"]).strip()
            if not source:
                raise ValueError("empty distributor name")
            candidates.append(QuoteCandidate(
                source=source,
                price=_amount(item["price"]),
                labor_estimate=_amount(item.get("laborEstimate",
                                                item.get("labor_estimate"))),
            ))
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning(f"Skipping malformed quote {item!r}: {e}")
    return candidates


class LLMCollaborator:
    """Recognition service backed by a chat-completions endpoint."""

    def __init__(self, client: OpenAI | None = None, model: str | None = None):
        self.client = client or OpenAI(
            base_url=Config.LLM_BASE_URL,
            api_key=Config.LLM_API_KEY,
            timeout=httpx.Timeout(
                float(Config.LLM_TIMEOUT),
                connect=10.0,
            ),
        )
        self.model = model or Config.LLM_MODEL

    def _ask(self, content) -> str:
        """Send one user message and return the answer text.

        Transport errors and timeouts raise CollaboratorFailure; they are
        never turned into an empty answer.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": content}],
            )
        except OpenAIError as e:
            logger.error(f"Recognition service call failed: {e}")
            raise CollaboratorFailure(f"Recognition service error: {e}") from e
        if not response.choices:
            raise CollaboratorFailure("Recognition service returned no choices")
        return (response.choices[0].message.content or "").strip()

    def recognize_plate(self, image: bytes) -> str:
        """Best-effort plate text; may be empty, callers must validate."""
        return self._ask(_image_content(image, PLATE_PROMPT)).strip("\"'` ")

    def identify_part(self, image: bytes) -> PartGuess:
        return parse_part_guess(self._ask(_image_content(image, PART_PROMPT)))

    def simulate_quotes(self, part_name: str) -> list[QuoteCandidate]:
        return parse_quotes(self._ask(QUOTES_PROMPT.format(part_name=part_name)))

    def summarize_job(self, transcript: str) -> str:
        """Polish the mechanic's notes; falls back to the notes verbatim."""
        if not transcript.strip():
            return transcript
        try:
            summary = self._ask(SUMMARY_PROMPT.format(transcript=transcript))
        except CollaboratorFailure:
            logger.warning("Job summary unavailable; keeping the raw notes")
            return transcript
        return summary or transcript

    def is_connected(self) -> bool:
        """Check if the endpoint is reachable."""
        try:
            self.client.models.list()
            return True
        except OpenAIError:
            return False
