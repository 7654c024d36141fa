"""
RAG (Retrieval-Augmented Generation) Pipeline

This package provides the knowledge retrieval infrastructure for the Portfolio Assistant.

Modules:
    - chunking: Splits the corpus into one chunk per logical fact
    - embeddings: Embedding provider interface and Gemini implementation
    - knowledge_base: Build-once, in-memory cache of embedded chunks
    - ranking: Cosine similarity and top-k selection
    - retriever: Query embedding, ranking and context formatting
    - cli: Command-line interface for inspecting the knowledge base

Usage:
    from portfolio_assistant.rag import RAGRetriever

    retriever = RAGRetriever()
    result = await retriever.retrieve("Which courses used Java?")
    print(result.context_text)

    # CLI usage
    python -m portfolio_assistant.rag.cli chunks
    python -m portfolio_assistant.rag.cli query "Which courses used Java?"
"""

from portfolio_assistant.rag.chunking import Chunk, ChunkType, build_chunks
from portfolio_assistant.rag.embeddings import (
    EmbeddingConfig,
    EmbeddingProvider,
    GeminiEmbeddingProvider,
    get_embedding_provider,
)
from portfolio_assistant.rag.knowledge_base import (
    EmbeddedChunk,
    KnowledgeBase,
    KnowledgeBaseCache,
    KnowledgeBaseState,
    get_knowledge_base,
    get_knowledge_base_cache,
)
from portfolio_assistant.rag.ranking import RankedResult, cosine_similarity, rank
from portfolio_assistant.rag.retriever import (
    CONTEXT_SEPARATOR,
    RAGRetriever,
    RetrievalResult,
    format_context,
)

__all__ = [
    # Chunking
    "Chunk",
    "ChunkType",
    "build_chunks",
    # Embeddings
    "EmbeddingConfig",
    "EmbeddingProvider",
    "GeminiEmbeddingProvider",
    "get_embedding_provider",
    # Knowledge Base
    "EmbeddedChunk",
    "KnowledgeBase",
    "KnowledgeBaseCache",
    "KnowledgeBaseState",
    "get_knowledge_base",
    "get_knowledge_base_cache",
    # Ranking
    "RankedResult",
    "cosine_similarity",
    "rank",
    # Retriever
    "CONTEXT_SEPARATOR",
    "RAGRetriever",
    "RetrievalResult",
    "format_context",
]
