"""
RAG Retriever Module

Embeds the incoming query, ranks the cached knowledge base against it and
joins the winning chunks into the context block handed to the LLM.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from portfolio_assistant.config import settings
from portfolio_assistant.rag.embeddings import EmbeddingProvider, get_embedding_provider
from portfolio_assistant.rag.knowledge_base import (
    KnowledgeBaseCache,
    get_knowledge_base_cache,
)
from portfolio_assistant.rag.ranking import RankedResult, rank

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n---\n\n"


@dataclass
class RetrievalResult:
    """
    Result from the RAG retrieval pipeline.
    """

    query: str
    results: List[RankedResult]
    context_text: str
    system_instructions: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def relevance_scores(self) -> List[float]:
        return [r.score for r in self.results]

    @property
    def top_score(self) -> float:
        """Get the highest relevance score."""
        return max(self.relevance_scores) if self.results else 0.0

    @property
    def has_relevant_content(self) -> bool:
        """False when nothing scored above zero (empty or degenerate ranking)."""
        return self.top_score > 0.0


def format_context(results: List[RankedResult]) -> str:
    """Join ranked chunk contents, best first, with a visible separator."""
    return CONTEXT_SEPARATOR.join(r.chunk.content for r in results)


class RAGRetriever:
    """
    Query-time retrieval over the cached knowledge base.
    """

    def __init__(
        self,
        embedding_provider: Optional[EmbeddingProvider] = None,
        knowledge_base_cache: Optional[KnowledgeBaseCache] = None,
        top_k: Optional[int] = None,
    ) -> None:
        """
        Initialize the RAG retriever.

        Args:
            embedding_provider: Provider for document and query embeddings.
            knowledge_base_cache: Cache holding the embedded corpus.
            top_k: Number of chunks to retrieve (default: settings.retrieval_top_k).
        """
        self.embedding_provider = embedding_provider or get_embedding_provider()
        self.knowledge_base_cache = knowledge_base_cache or get_knowledge_base_cache()
        self.top_k = settings.retrieval_top_k if top_k is None else top_k

    async def retrieve(self, query: str, top_k: Optional[int] = None) -> RetrievalResult:
        """
        Retrieve the most relevant chunks for a query.

        Args:
            query: The user's question.
            top_k: Override default top_k for this query.

        Returns:
            RetrievalResult with ranked chunks and joined context.

        Raises:
            MissingCredentialError: If the embedding provider has no API key.
            EmbeddingError: If building the knowledge base or embedding the
                query fails.
        """
        k = self.top_k if top_k is None else top_k

        knowledge_base = await self.knowledge_base_cache.get_knowledge_base(
            self.embedding_provider
        )
        query_vector = await self.embedding_provider.embed_one(query)
        results = rank(query_vector, knowledge_base.chunks, k)

        result = RetrievalResult(
            query=query,
            results=results,
            context_text=format_context(results),
            system_instructions=knowledge_base.system_instructions,
            metadata={
                "knowledge_base_size": len(knowledge_base),
                "top_k_used": k,
            },
        )

        if not result.has_relevant_content:
            logger.warning(f"No relevant chunks for query ({len(query)} chars)")

        logger.info(
            f"Retrieved top {len(results)} chunks (top_score={result.top_score:.3f}) "
            f"for query ({len(query)} chars)"
        )
        logger.debug(f"Query: {query!r}")
        return result
