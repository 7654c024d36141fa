"""
Similarity Ranking

Cosine similarity over dense NumPy arrays and exact top-k selection against
the embedded chunks of a knowledge base.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from portfolio_assistant.errors import DimensionMismatchError
from portfolio_assistant.rag.knowledge_base import EmbeddedChunk

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedResult:
    """A chunk and its similarity to the query (higher = more similar)."""

    chunk: EmbeddedChunk
    score: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine of the angle between two vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)
    if vec_a.shape != vec_b.shape:
        raise DimensionMismatchError(
            f"Cannot compare vectors of length {vec_a.size} and {vec_b.size}"
        )

    magnitude = float(np.linalg.norm(vec_a) * np.linalg.norm(vec_b))
    if magnitude == 0.0:
        return 0.0
    return float(np.dot(vec_a, vec_b) / magnitude)


def _scores(query: np.ndarray, corpus: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against every row of ``corpus``."""
    magnitudes = np.linalg.norm(corpus, axis=1) * np.linalg.norm(query)
    dots = corpus @ query
    return np.divide(dots, magnitudes, out=np.zeros_like(dots), where=magnitudes > 0)


def rank(
    query_vector: Sequence[float],
    embedded_chunks: Sequence[EmbeddedChunk],
    k: int = 5,
) -> List[RankedResult]:
    """
    Select the ``k`` chunks most similar to the query.

    Results are sorted by descending score. Equal scores keep knowledge-base
    order, so the earlier chunk wins a tie.

    Args:
        query_vector: Query embedding.
        embedded_chunks: Candidate chunks, in knowledge-base order.
        k: Maximum number of results.

    Returns:
        Up to ``k`` ranked results (all chunks if there are fewer than ``k``).

    Raises:
        ValueError: If ``k`` is negative.
        DimensionMismatchError: If the query and chunk embeddings differ in length.
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    if not embedded_chunks or k == 0:
        return []

    query = np.asarray(query_vector, dtype=np.float64)
    corpus = np.asarray([c.embedding for c in embedded_chunks], dtype=np.float64)

    if query.ndim != 1 or corpus.shape[1] != query.shape[0]:
        raise DimensionMismatchError(
            f"Query has {query.size} dimensions, knowledge base has {corpus.shape[1]}"
        )

    scores = _scores(query, corpus)
    top_idx = np.argsort(-scores, kind="stable")[: min(k, len(embedded_chunks))]

    return [RankedResult(chunk=embedded_chunks[i], score=float(scores[i])) for i in top_idx]
