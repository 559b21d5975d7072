"""Gemini Client - Imperative Shell.

This module handles HTTP communication with the Gemini generateContent
REST endpoint. All I/O is contained here; prompt construction and
response sanitization are in the core module.
"""

import logging
from typing import Any

import requests

from src.core.config import DEFAULT_GEMINI_MODEL
from src.core.conversation import ModelCallError, ModelCallErrorKind, ModelResult


logger = logging.getLogger(__name__)


GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

# Default timeout for model requests (seconds)
DEFAULT_TIMEOUT = 60

# Status codes that mean the key is rejected or the quota is spent
QUOTA_OR_AUTH_STATUSES = {401, 403, 429}


def _extract_text(data: Any) -> str:
    """Concatenate the text parts of the first candidate.

    Anything that does not have the documented shape yields "".
    """
    if not isinstance(data, dict):
        return ""

    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""

    candidate = candidates[0]
    if not isinstance(candidate, dict):
        return ""

    content = candidate.get("content")
    if not isinstance(content, dict):
        return ""

    parts = content.get("parts")
    if not isinstance(parts, list):
        return ""

    return "".join(
        part["text"]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )


class GeminiClient:
    """Client for generating text with Gemini.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        model: str = DEFAULT_GEMINI_MODEL,
        base_url: str = GEMINI_API_BASE,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize Gemini client.

        Args:
            model: Model name
            base_url: API base URL
            timeout: Request timeout in seconds
        """
        self.model = model
        self.base_url = base_url
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def generate(self, prompt: str, api_key: str) -> ModelResult:
        """Generate a completion for a prompt.

        This method performs HTTP I/O.

        Args:
            prompt: Prompt text
            api_key: Gemini API key

        Returns:
            ModelResult with the completion text or the failure cause
        """
        logger.info("Requesting completion from %s", self.model)

        try:
            response = requests.post(
                self.endpoint,
                params={"key": api_key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
            )
        except requests.Timeout:
            logger.error("Gemini request timed out")
            return ModelResult(
                success=False,
                error=ModelCallError(
                    kind=ModelCallErrorKind.NETWORK,
                    message="Request timed out",
                ),
            )
        except requests.RequestException as e:
            logger.error("Gemini request failed: %s", str(e))
            return ModelResult(
                success=False,
                error=ModelCallError(
                    kind=ModelCallErrorKind.NETWORK,
                    message=str(e),
                ),
            )

        if response.status_code != 200:
            kind = (
                ModelCallErrorKind.QUOTA_OR_AUTH
                if response.status_code in QUOTA_OR_AUTH_STATUSES
                else ModelCallErrorKind.UNKNOWN
            )
            logger.warning(
                "Gemini returned non-200: %d - %s",
                response.status_code,
                response.text,
            )
            return ModelResult(
                success=False,
                error=ModelCallError(
                    kind=kind,
                    message=response.text,
                    status_code=response.status_code,
                ),
            )

        try:
            text = _extract_text(response.json())
        except ValueError as e:
            logger.error("Could not read Gemini response: %s", str(e))
            text = ""

        if not text.strip():
            return ModelResult(
                success=False,
                error=ModelCallError(
                    kind=ModelCallErrorKind.UNKNOWN,
                    message="Response contained no text",
                    status_code=response.status_code,
                ),
            )

        logger.info("Received %d characters from %s", len(text), self.model)
        return ModelResult(success=True, text=text)
