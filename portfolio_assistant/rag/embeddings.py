"""
Embedding Providers

Abstract embedding interface plus the Google Gemini implementation used in
production. The knowledge base only ever talks to ``EmbeddingProvider``, so
tests and alternative backends can plug in without touching the pipeline.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from google import genai
from google.genai import types

from portfolio_assistant.config import settings
from portfolio_assistant.errors import EmbeddingError, MissingCredentialError

logger = logging.getLogger(__name__)

Vector = List[float]


@dataclass
class EmbeddingConfig:
    """Configuration for embedding generation."""

    model: str = "text-embedding-004"
    batch_size: int = 100  # Gemini accepts at most 100 texts per request
    document_task_type: str = "RETRIEVAL_DOCUMENT"
    query_task_type: str = "RETRIEVAL_QUERY"


class EmbeddingProvider(ABC):
    """
    Turns text into fixed-dimension vectors.

    ``embed_many`` must return exactly one vector per input, in input order,
    with the same dimension ``embed_one`` produces.
    """

    @abstractmethod
    async def embed_one(self, text: str) -> Vector:
        """Embed a single query text."""

    @abstractmethod
    async def embed_many(self, texts: Sequence[str]) -> List[Vector]:
        """Embed a batch of document texts."""

    def is_available(self) -> bool:
        """Whether the provider has what it needs (credentials) to run."""
        return True


class GeminiEmbeddingProvider(EmbeddingProvider):
    """
    Generates embeddings using Google's Gemini embedding models.

    Uses the async client so embedding calls do not block other requests.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[EmbeddingConfig] = None,
        client: Optional[Any] = None,
    ) -> None:
        """
        Initialize the embedding provider.

        Args:
            api_key: Gemini API key (defaults to settings).
            config: Optional embedding configuration.
            client: Pre-built ``genai.Client``; created lazily when omitted.
        """
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.config = config or EmbeddingConfig(
            model=settings.embedding_model,
            batch_size=settings.embedding_batch_size,
        )
        self._client = client

        if not self.api_key and client is None:
            logger.warning("Gemini API key not configured - embeddings will not be available")

    def is_available(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise MissingCredentialError("Gemini API key not configured")
            self._client = genai.Client(api_key=self.api_key)
            logger.info(f"Embedding client initialized with model: {self.config.model}")
        return self._client

    async def _embed(self, texts: List[str], task_type: str) -> List[Vector]:
        client = self._get_client()

        try:
            result = await client.aio.models.embed_content(
                model=self.config.model,
                contents=texts,
                config=types.EmbedContentConfig(task_type=task_type),
            )
        except Exception as e:
            logger.error(f"Failed to generate embeddings: {e}")
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        embeddings = result.embeddings or []
        if len(embeddings) != len(texts):
            raise EmbeddingError(
                f"Expected {len(texts)} embeddings, received {len(embeddings)}"
            )

        return [list(embedding.values or []) for embedding in embeddings]

    async def embed_one(self, text: str) -> Vector:
        """
        Generate an embedding for a single query.

        Args:
            text: Text to embed.

        Returns:
            Embedding vector.

        Raises:
            MissingCredentialError: If no API key is configured.
            EmbeddingError: If the API call fails.
        """
        vectors = await self._embed([text], self.config.query_task_type)
        return vectors[0]

    async def embed_many(self, texts: Sequence[str]) -> List[Vector]:
        """
        Generate embeddings for multiple texts.

        Texts are sent in batches of ``config.batch_size``; the result keeps
        the input order.

        Args:
            texts: Texts to embed.

        Returns:
            One embedding vector per input text.

        Raises:
            MissingCredentialError: If no API key is configured.
            EmbeddingError: If any batch fails.
        """
        texts = list(texts)
        if not texts:
            return []

        embeddings: List[Vector] = []
        batch_size = self.config.batch_size

        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            embeddings.extend(await self._embed(batch, self.config.document_task_type))

            if i + batch_size < len(texts):
                logger.debug(f"Processed {i + batch_size}/{len(texts)} embeddings")

        logger.info(f"Generated {len(embeddings)} embeddings with {self.config.model}")
        return embeddings


_embedding_provider: Optional[EmbeddingProvider] = None


def get_embedding_provider() -> EmbeddingProvider:
    """
    Get the global embedding provider instance.

    Returns:
        EmbeddingProvider instance.
    """
    global _embedding_provider
    if _embedding_provider is None:
        _embedding_provider = GeminiEmbeddingProvider()
    return _embedding_provider
