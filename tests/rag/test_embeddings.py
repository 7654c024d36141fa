"""
Test suite for the Gemini embedding provider.

The google-genai client is replaced by a MagicMock whose ``aio.models``
methods are AsyncMocks.
"""

from types import SimpleNamespace
from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest

from portfolio_assistant.errors import EmbeddingError, MissingCredentialError
from portfolio_assistant.rag.embeddings import EmbeddingConfig, GeminiEmbeddingProvider


def _response(vectors: List[List[float]]) -> SimpleNamespace:
    return SimpleNamespace(embeddings=[SimpleNamespace(values=v) for v in vectors])


def _echo_embed(**kwargs) -> SimpleNamespace:
    """Embed each text as [len(text)] so order can be checked."""
    return _response([[float(len(t))] for t in kwargs["contents"]])


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.aio.models.embed_content = AsyncMock(side_effect=_echo_embed)
    return client


@pytest.fixture
def provider(mock_client: MagicMock) -> GeminiEmbeddingProvider:
    return GeminiEmbeddingProvider(
        api_key="test-key",
        config=EmbeddingConfig(model="text-embedding-004", batch_size=2),
        client=mock_client,
    )


class TestGeminiEmbeddingProvider:

    @pytest.mark.asyncio
    async def test_embed_many_batches_and_keeps_order(
        self, provider: GeminiEmbeddingProvider, mock_client: MagicMock
    ) -> None:
        texts = ["a", "bb", "ccc", "dddd", "eeeee"]

        vectors = await provider.embed_many(texts)

        assert vectors == [[1.0], [2.0], [3.0], [4.0], [5.0]]
        batches = [c.kwargs["contents"] for c in mock_client.aio.models.embed_content.call_args_list]
        assert batches == [["a", "bb"], ["ccc", "dddd"], ["eeeee"]]

    @pytest.mark.asyncio
    async def test_task_types(self, provider: GeminiEmbeddingProvider, mock_client: MagicMock) -> None:
        await provider.embed_many(["doc"])
        await provider.embed_one("query")

        calls = mock_client.aio.models.embed_content.call_args_list
        assert calls[0].kwargs["config"].task_type == "RETRIEVAL_DOCUMENT"
        assert calls[1].kwargs["config"].task_type == "RETRIEVAL_QUERY"
        assert calls[1].kwargs["model"] == "text-embedding-004"

    @pytest.mark.asyncio
    async def test_embed_one_returns_single_vector(self, provider: GeminiEmbeddingProvider) -> None:
        assert await provider.embed_one("four") == [4.0]

    @pytest.mark.asyncio
    async def test_embed_many_empty_makes_no_call(
        self, provider: GeminiEmbeddingProvider, mock_client: MagicMock
    ) -> None:
        assert await provider.embed_many([]) == []
        mock_client.aio.models.embed_content.assert_not_called()

    @pytest.mark.asyncio
    async def test_sdk_error_becomes_embedding_error(
        self, provider: GeminiEmbeddingProvider, mock_client: MagicMock
    ) -> None:
        mock_client.aio.models.embed_content.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(EmbeddingError, match="quota exceeded"):
            await provider.embed_many(["a"])

    @pytest.mark.asyncio
    async def test_missing_vectors_become_embedding_error(
        self, provider: GeminiEmbeddingProvider, mock_client: MagicMock
    ) -> None:
        mock_client.aio.models.embed_content.side_effect = None
        mock_client.aio.models.embed_content.return_value = _response([[1.0]])

        with pytest.raises(EmbeddingError):
            await provider.embed_many(["a", "b"])

    @pytest.mark.asyncio
    async def test_without_api_key(self) -> None:
        provider = GeminiEmbeddingProvider(api_key="")

        assert provider.is_available() is False
        with pytest.raises(MissingCredentialError):
            await provider.embed_one("hello")
