from __future__ import annotations

import base64
import logging
import os
import random
import re
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .constants import DEFAULT_EXTRACTION_MODEL
from .exceptions import ExtractionUnavailable
from .models import Document

try:
    from openai import OpenAI
except ImportError:  # pragma: no cover - optional dependency
    OpenAI = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UsageEvent:
    document: str
    model: str
    input_tokens: Optional[int]
    output_tokens: Optional[int]
    total_tokens: Optional[int]
    note: str = ""


class OpenAIStatementExtractor:
    """Sends a statement (or one chunk of it) to an OpenAI model and returns the raw reply."""

    def __init__(
        self,
        client: Optional["OpenAI"] = None,
        *,
        model: Optional[str] = None,
        temperature: float = 0.1,
        max_output_tokens: int = 16384,
        max_attempts: int = 3,
        retry_base_delay: float = 4.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if client is not None:
            self._client = client
        elif OpenAI is None:
            raise ExtractionUnavailable(
                "OpenAI client not available. Install the 'openai' package and set OPENAI_API_KEY."
            )
        elif not os.getenv("OPENAI_API_KEY"):
            raise ExtractionUnavailable("OPENAI_API_KEY is not set.")
        else:
            self._client = OpenAI()
        self.model = model or os.getenv("OPENAI_EXTRACTION_MODEL", DEFAULT_EXTRACTION_MODEL)
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.max_attempts = max(1, max_attempts)
        self.retry_base_delay = retry_base_delay
        self._sleep = sleep
        self._usage_events: List[UsageEvent] = []

    # ------------------------------------------------------------------ public --
    def extract(self, document: Document, instruction: str) -> str:
        last_error: Optional[Exception] = None
        for attempt in range(self.max_attempts):
            try:
                response = self._client.chat.completions.create(  # type: ignore[attr-defined]
                    model=self.model,
                    messages=self._build_messages(document, instruction),
                    temperature=self.temperature,
                    max_tokens=self.max_output_tokens,
                )
                self._record_usage(document.name, response.usage)
                return response.choices[0].message.content or ""
            except Exception as exc:
                last_error = exc
                if attempt == self.max_attempts - 1:
                    self._usage_events.append(
                        UsageEvent(document.name, self.model, None, None, None, note=f"failure: {exc}")
                    )
                    break
                delay = self._compute_retry_delay(exc, attempt)
                logger.warning(
                    "Extraction attempt %d/%d for %s failed (%s); retrying in %.1fs",
                    attempt + 1,
                    self.max_attempts,
                    document.name,
                    exc,
                    delay,
                )
                self._sleep(delay)
        if last_error:
            raise last_error
        return ""

    def usage_totals(self) -> Dict[str, int]:
        return {
            "calls": len(self._usage_events),
            "input_tokens": sum(event.input_tokens or 0 for event in self._usage_events),
            "output_tokens": sum(event.output_tokens or 0 for event in self._usage_events),
            "total_tokens": sum(event.total_tokens or 0 for event in self._usage_events),
        }

    # -------------------------------------------------------------- internals --
    def _build_messages(self, document: Document, instruction: str) -> List[Dict[str, object]]:
        encoded = base64.b64encode(document.data).decode("ascii")
        data_url = f"data:{document.media_type};base64,{encoded}"
        if document.media_type.startswith("image/"):
            attachment: Dict[str, object] = {"type": "image_url", "image_url": {"url": data_url}}
        else:
            attachment = {"type": "file", "file": {"filename": document.name, "file_data": data_url}}
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": instruction},
                    attachment,
                ],
            }
        ]

    def _record_usage(self, name: str, usage: Optional[object]) -> None:
        if usage is None:
            self._usage_events.append(UsageEvent(name, self.model, None, None, None))
            return
        input_tokens = getattr(usage, "prompt_tokens", None) or getattr(usage, "input_tokens", None)
        output_tokens = getattr(usage, "completion_tokens", None) or getattr(usage, "output_tokens", None)
        total_tokens = getattr(usage, "total_tokens", None)
        self._usage_events.append(UsageEvent(name, self.model, input_tokens, output_tokens, total_tokens))

    def _compute_retry_delay(self, error: Exception, attempt: int) -> float:
        delay = self.retry_base_delay * (2 ** attempt)
        delay += random.uniform(0, min(0.5, self.retry_base_delay))
        parsed = self._parse_wait_seconds(str(error).lower())
        if parsed is not None:
            delay = parsed + random.uniform(0, 0.25)
        return delay

    @staticmethod
    def _parse_wait_seconds(message: str) -> Optional[float]:
        match = re.search(r"try again in\s+([0-9]+(?:\.[0-9]+)?)s", message)
        if match:
            try:
                return float(match.group(1))
            except ValueError:
                return None
        return None
