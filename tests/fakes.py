"""
In-memory stand-ins for the embedding and generation providers.

FakeEmbeddingProvider maps text to a bag-of-keywords vector, so similarity
is predictable: a query mentioning "java" is closest to chunks mentioning
"java". Call counts, latency and failures are configurable.
"""

import asyncio
from typing import AsyncIterator, List, Optional, Sequence

from portfolio_assistant.models.schemas import ChatMessage
from portfolio_assistant.rag.embeddings import EmbeddingProvider
from portfolio_assistant.services.generation import GenerationProvider

VOCABULARY = ["java", "python", "react", "unity", "dashboard", "email", "sql", "showcase"]


def keyword_vector(text: str) -> List[float]:
    """Count vocabulary keywords in ``text``; the last slot is a constant bias."""
    lowered = text.lower()
    return [float(lowered.count(word)) for word in VOCABULARY] + [0.1]


class FakeEmbeddingProvider(EmbeddingProvider):
    def __init__(
        self,
        delay: float = 0.0,
        fail_times: int = 0,
        available: bool = True,
        vectors: Optional[List[List[float]]] = None,
    ) -> None:
        self.delay = delay
        self.fail_times = fail_times
        self.available = available
        self.vectors = vectors
        self.embed_many_calls: List[List[str]] = []
        self.embed_one_calls: List[str] = []

    def is_available(self) -> bool:
        return self.available

    async def embed_one(self, text: str) -> List[float]:
        self.embed_one_calls.append(text)
        return keyword_vector(text)

    async def embed_many(self, texts: Sequence[str]) -> List[List[float]]:
        self.embed_many_calls.append(list(texts))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_times > 0:
            self.fail_times -= 1
            raise RuntimeError("embedding service unavailable")
        if self.vectors is not None:
            return self.vectors
        return [keyword_vector(t) for t in texts]


class FakeGenerationProvider(GenerationProvider):
    def __init__(
        self,
        deltas: Sequence[str] = ("Hello", " ", "world"),
        fail_after: Optional[int] = None,
        available: bool = True,
    ) -> None:
        self.deltas = list(deltas)
        self.fail_after = fail_after
        self.available = available
        self.received: List[List[ChatMessage]] = []

    def is_available(self) -> bool:
        return self.available

    async def stream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        self.received.append(list(messages))
        for i, delta in enumerate(self.deltas):
            if self.fail_after is not None and i >= self.fail_after:
                raise ConnectionError("stream reset by peer")
            yield delta
