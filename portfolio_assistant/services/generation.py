"""
Generation Provider

Streams an answer from the LLM, token by token. The chat service only sees
the ``GenerationProvider`` interface; ``GeminiGenerationProvider`` is the
production implementation built on the Google GenAI async client.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

from google import genai
from google.genai import types

from portfolio_assistant.config import settings
from portfolio_assistant.errors import MissingCredentialError
from portfolio_assistant.models.schemas import ChatMessage

logger = logging.getLogger(__name__)

MODEL_ROLES = {"assistant", "model"}


class GenerationProvider(ABC):
    """Produces a finite, non-restartable stream of text deltas."""

    @abstractmethod
    def stream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        """
        Stream a response to the conversation.

        Args:
            messages: System instruction first, then each conversation turn.

        Yields:
            Text deltas in arrival order.
        """

    def is_available(self) -> bool:
        """Whether the provider has what it needs (credentials) to run."""
        return True


def to_gemini_contents(
    messages: Sequence[ChatMessage],
) -> Tuple[Optional[str], List[Dict[str, Any]]]:
    """
    Split chat messages into a Gemini system instruction and contents.

    ``system`` messages are merged into the system instruction; assistant
    turns become ``model`` turns and every other role is sent as ``user``.
    """
    system_parts: List[str] = []
    contents: List[Dict[str, Any]] = []

    for message in messages:
        if message.role == "system":
            system_parts.append(message.content)
            continue

        role = "model" if message.role in MODEL_ROLES else "user"
        contents.append({"role": role, "parts": [{"text": message.content}]})

    system_instruction = "\n\n".join(system_parts) if system_parts else None
    return system_instruction, contents


class GeminiGenerationProvider(GenerationProvider):
    """
    Streams chat completions from Google Gemini.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        client: Optional[Any] = None,
    ) -> None:
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.model = model or settings.gemini_model
        self.temperature = settings.temperature if temperature is None else temperature
        self.max_tokens = settings.max_response_tokens if max_tokens is None else max_tokens
        self._client = client

        logger.info(
            f"GeminiGenerationProvider initialized - model: {self.model}, "
            f"temperature: {self.temperature}"
        )

    def is_available(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise MissingCredentialError("Gemini API key not configured")
            self._client = genai.Client(api_key=self.api_key)
            logger.info("Gemini client initialized successfully")
        return self._client

    async def stream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        client = self._get_client()
        system_instruction, contents = to_gemini_contents(messages)

        config = types.GenerateContentConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
            system_instruction=system_instruction,
        )

        response_stream = await client.aio.models.generate_content_stream(
            model=self.model,
            contents=contents,
            config=config,
        )

        async for chunk in response_stream:
            text = chunk.text
            if text:
                yield text


_generation_provider: Optional[GenerationProvider] = None


def get_generation_provider() -> GenerationProvider:
    """
    Get the global generation provider instance.

    Returns:
        GenerationProvider instance.
    """
    global _generation_provider
    if _generation_provider is None:
        _generation_provider = GeminiGenerationProvider()
    return _generation_provider
