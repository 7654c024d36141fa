"""
Knowledge Base Cache

Holds the embedded chunk set for the corpus. The set is built on first use,
with a single batch embedding call, and then served as an immutable snapshot
for the rest of the process lifetime.

Concurrent cold-start callers all await the same in-flight build task, so the
embedding provider is called once no matter how many requests arrive while
the build runs. A failed build leaves the cache empty again so the next
request can retry.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from portfolio_assistant.errors import EmbeddingError, MissingCredentialError
from portfolio_assistant.models.corpus import Corpus, get_corpus
from portfolio_assistant.rag.chunking import Chunk, build_chunks
from portfolio_assistant.rag.embeddings import EmbeddingProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmbeddedChunk:
    """A chunk together with its embedding vector. Metadata is read-only."""

    content: str
    metadata: Mapping[str, Any]
    embedding: Tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @classmethod
    def from_chunk(cls, chunk: Chunk, embedding: Sequence[float]) -> "EmbeddedChunk":
        return cls(
            content=chunk.content,
            metadata=chunk.metadata,
            embedding=tuple(float(x) for x in embedding),
        )


@dataclass(frozen=True)
class KnowledgeBase:
    """
    Immutable snapshot of the embedded corpus.

    All embeddings share one dimension (the provider's output size).
    """

    chunks: Tuple[EmbeddedChunk, ...] = ()
    system_instructions: str = ""

    @classmethod
    def from_vectors(
        cls,
        chunks: Sequence[Chunk],
        vectors: Sequence[Sequence[float]],
        system_instructions: str = "",
    ) -> "KnowledgeBase":
        """
        Zip chunks and vectors by index.

        Raises:
            EmbeddingError: If the counts differ or the vectors are not all
                the same non-zero length.
        """
        if len(chunks) != len(vectors):
            raise EmbeddingError(
                f"Received {len(vectors)} embeddings for {len(chunks)} chunks"
            )

        dimensions = {len(v) for v in vectors}
        if len(dimensions) > 1 or 0 in dimensions:
            raise EmbeddingError(f"Inconsistent embedding dimensions: {sorted(dimensions)}")

        embedded = tuple(
            EmbeddedChunk.from_chunk(chunk, vector) for chunk, vector in zip(chunks, vectors)
        )
        return cls(chunks=embedded, system_instructions=system_instructions)

    @property
    def dimension(self) -> Optional[int]:
        if not self.chunks:
            return None
        return len(self.chunks[0].embedding)

    def type_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for chunk in self.chunks:
            chunk_type = chunk.metadata.get("type", "unknown")
            counts[chunk_type] = counts.get(chunk_type, 0) + 1
        return counts

    def __len__(self) -> int:
        return len(self.chunks)

    def __iter__(self) -> Iterator[EmbeddedChunk]:
        return iter(self.chunks)


class KnowledgeBaseState(str, Enum):
    """Build state of the cache."""

    EMPTY = "empty"
    BUILDING = "building"
    READY = "ready"


class KnowledgeBaseCache:
    """
    Process-wide, build-once holder of the knowledge base.

    Usage:
        cache = KnowledgeBaseCache()
        knowledge_base = await cache.get_knowledge_base(provider)
    """

    def __init__(self, corpus_loader: Callable[[], Corpus] = get_corpus) -> None:
        """
        Initialize an empty cache.

        Args:
            corpus_loader: Returns the corpus to chunk; called once per build attempt.
        """
        self._corpus_loader = corpus_loader
        self._snapshot: Optional[KnowledgeBase] = None
        self._build_task: Optional["asyncio.Task[KnowledgeBase]"] = None
        self.last_error: Optional[str] = None
        self.build_attempts = 0

    @property
    def state(self) -> KnowledgeBaseState:
        if self._snapshot is not None:
            return KnowledgeBaseState.READY
        if self._build_task is not None:
            return KnowledgeBaseState.BUILDING
        return KnowledgeBaseState.EMPTY

    @property
    def snapshot(self) -> Optional[KnowledgeBase]:
        """The ready knowledge base, or None if it has not been built."""
        return self._snapshot

    async def get_knowledge_base(self, embedding_provider: EmbeddingProvider) -> KnowledgeBase:
        """
        Return the ready knowledge base, building it first if necessary.

        Callers that arrive while a build is running wait for that build
        instead of starting another one. Cancelling a waiting caller does not
        cancel the shared build.

        Args:
            embedding_provider: Provider used for the batch embedding call.

        Returns:
            The ready KnowledgeBase snapshot.

        Raises:
            MissingCredentialError: If the provider has no API key.
            EmbeddingError: If the build failed; the cache is empty again.
        """
        if self._snapshot is not None:
            return self._snapshot

        # No await between the check and the assignment: every coroutine that
        # gets here while a build is in flight attaches to the same task.
        if self._build_task is None:
            self._build_task = asyncio.ensure_future(self._build(embedding_provider))

        return await asyncio.shield(self._build_task)

    async def _build(self, embedding_provider: EmbeddingProvider) -> KnowledgeBase:
        self.build_attempts += 1
        logger.info("Cold start: building knowledge base...")

        try:
            corpus = self._corpus_loader()
            chunks: List[Chunk] = build_chunks(corpus)

            if chunks:
                vectors = await embedding_provider.embed_many([c.content for c in chunks])
            else:
                logger.warning("Corpus produced no chunks - knowledge base will be empty")
                vectors = []

            knowledge_base = KnowledgeBase.from_vectors(
                chunks,
                vectors,
                system_instructions=corpus.system_instructions or "",
            )

        except (EmbeddingError, MissingCredentialError) as e:
            self._reset(e)
            raise
        except Exception as e:
            self._reset(e)
            raise EmbeddingError(f"Knowledge base build failed: {e}") from e
        except BaseException as e:
            self._reset(e)
            raise

        self._snapshot = knowledge_base
        self._build_task = None
        self.last_error = None

        logger.info(
            f"Knowledge base built: {len(knowledge_base)} chunks, "
            f"dimension={knowledge_base.dimension}"
        )
        return knowledge_base

    def _reset(self, error: BaseException) -> None:
        self._build_task = None
        self.last_error = str(error) or type(error).__name__
        logger.error(f"Knowledge base build failed, cache reset to empty: {self.last_error}")


_knowledge_base_cache: Optional[KnowledgeBaseCache] = None


def get_knowledge_base_cache() -> KnowledgeBaseCache:
    """
    Get the global knowledge base cache.

    Returns:
        KnowledgeBaseCache instance.
    """
    global _knowledge_base_cache
    if _knowledge_base_cache is None:
        _knowledge_base_cache = KnowledgeBaseCache()
    return _knowledge_base_cache


async def get_knowledge_base(embedding_provider: EmbeddingProvider) -> KnowledgeBase:
    """
    Convenience function returning the process-wide knowledge base.

    Args:
        embedding_provider: Provider used if the knowledge base must be built.

    Returns:
        The ready KnowledgeBase.
    """
    return await get_knowledge_base_cache().get_knowledge_base(embedding_provider)
