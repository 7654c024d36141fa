"""
Health Check Endpoint

Provides health status for monitoring and load balancer checks.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from portfolio_assistant import __version__
from portfolio_assistant.config import settings
from portfolio_assistant.models.schemas import HealthStatus, KnowledgeBaseStatus
from portfolio_assistant.rag.knowledge_base import KnowledgeBaseState, get_knowledge_base_cache

router = APIRouter()
logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """
    Health check endpoint.

    Returns service status and configuration information.
    """
    return HealthStatus(
        status="healthy",
        timestamp=_now(),
        version=__version__,
        config={
            "gemini_model": settings.gemini_model,
            "embedding_model": settings.embedding_model,
            "retrieval_top_k": settings.retrieval_top_k,
            "corpus_path": settings.corpus_path,
            "gemini_configured": bool(settings.gemini_api_key),
        },
    )


@router.get("/health/ready")
async def readiness_check() -> Dict[str, str]:
    """
    Readiness check for container orchestration.

    The service accepts traffic before the knowledge base is built; the
    first chat request builds it.
    """
    return {"status": "ready"}


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Liveness check for container orchestration.

    Verifies the service is running.
    """
    return {"status": "alive"}


@router.get("/health/rag", response_model=KnowledgeBaseStatus)
async def rag_status() -> KnowledgeBaseStatus:
    """
    Knowledge base status.

    Reports the cache state without triggering a build.
    """
    cache = get_knowledge_base_cache()
    snapshot = cache.snapshot

    status: Dict[str, Any] = {
        "status": "healthy" if cache.last_error is None else "degraded",
        "state": cache.state.value,
        "last_error": cache.last_error,
        "embedding_model": settings.embedding_model,
        "timestamp": _now(),
    }

    if cache.state == KnowledgeBaseState.READY and snapshot is not None:
        status.update(
            chunk_count=len(snapshot),
            dimension=snapshot.dimension,
            chunk_types=snapshot.type_counts(),
        )

    return KnowledgeBaseStatus(**status)
