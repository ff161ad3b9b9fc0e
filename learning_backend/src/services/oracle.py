import json
import logging
from typing import Optional, Protocol

import httpx

from src.config import OracleSettings
from src.services.errors import ConfigurationError, OracleRejectionError, OracleTransportError
from src.services.prompts import is_quiz_prompt

logger = logging.getLogger(__name__)

# Keep rejection bodies short enough to show to a user.
_MAX_BODY_CHARS = 500


class TextCompletionOracle(Protocol):
    """Anything that turns a system instruction plus a user prompt into text."""

    async def complete(self, system_instruction: str, user_prompt: str) -> str:
        ...


class ChatCompletionsOracle:
    """
    Oracle backed by an OpenAI-compatible /chat/completions endpoint.

    A fresh httpx.AsyncClient is opened per call, so one instance can serve
    many concurrent generate() calls without shared connection state.
    """

    # PUBLIC_INTERFACE
    def __init__(self, settings: OracleSettings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        """
        Args:
            settings: Oracle settings; the API key and base URL are required.
            transport: Optional httpx transport, used by tests to stub the network.

        Raises:
            ConfigurationError: credentials or endpoint are missing.
        """
        settings.require_credentials()
        self.settings = settings
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.settings.base_url}/chat/completions"

    # PUBLIC_INTERFACE
    async def complete(self, system_instruction: str, user_prompt: str) -> str:
        """
        Send one chat completion request and return the assistant text.

        Raises:
            OracleTransportError: the request could not be sent or timed out.
            OracleRejectionError: non-2xx status, or a body without a completion.
        """
        payload = {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": 0.3,
        }
        headers = {"Authorization": f"Bearer {self.settings.api_key}"}

        logger.debug("POST %s model=%s", self.endpoint, self.settings.model)
        try:
            async with httpx.AsyncClient(timeout=self.settings.timeout_seconds, transport=self._transport) as client:
                response = await client.post(self.endpoint, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise OracleTransportError(f"Request to {self.endpoint} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise OracleTransportError(f"Request to {self.endpoint} failed: {e}") from e

        if not response.is_success:
            body = response.text[:_MAX_BODY_CHARS]
            raise OracleRejectionError(
                f"Oracle returned HTTP {response.status_code}: {body}",
                status_code=response.status_code,
                body=body,
            )
        return self._completion_text(response)

    @staticmethod
    def _completion_text(response: httpx.Response) -> str:
        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise OracleRejectionError(
                f"Oracle response had no completion text: {e!r}",
                status_code=response.status_code,
                body=response.text[:_MAX_BODY_CHARS],
            ) from e
        if not isinstance(content, str):
            raise OracleRejectionError("Oracle completion content is not text", status_code=response.status_code)
        return content


_SAMPLE_NOTES = {
    "type": "study_notes",
    "title": "TEST: Buffer Overflow (sample)",
    "tl;dr": "This is a test response.",
    "body_md": "# Test\nThis is a test note body. If you see this, the server returned JSON.",
}

_SAMPLE_QUIZ = {
    "type": "quiz",
    "title": "TEST Quiz",
    "questions": [
        {
            "question": "Test Q1",
            "options": {"A": "One", "B": "Two", "C": "Three", "D": "Four"},
            "answer": "A",
            "explanation": "Because it's a test.",
        }
    ],
}


class SampleOracle:
    """
    Offline oracle returning canned notes and quiz text.

    Useful to check the API and frontend wiring without credentials. Notes come
    wrapped in prose and a ```json fence, the way chat models usually answer.
    """

    async def complete(self, system_instruction: str, user_prompt: str) -> str:
        if is_quiz_prompt(user_prompt):
            return json.dumps(_SAMPLE_QUIZ)
        return "Here you go:\n```json\n" + json.dumps(_SAMPLE_NOTES, indent=2) + "\n```"


# PUBLIC_INTERFACE
def build_oracle(settings: OracleSettings) -> TextCompletionOracle:
    """Create the oracle selected by settings.mode."""
    if settings.mode == "sample":
        return SampleOracle()
    if settings.mode == "openai":
        return ChatCompletionsOracle(settings)
    raise ConfigurationError(f"Unknown oracle mode '{settings.mode}'")
