"""
Pydantic Schemas

Defines the request and response bodies of the chat API and the
message shape shared with the generation provider.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Chat
# =============================================================================


class ChatMessage(BaseModel):
    """A single conversation turn."""

    role: str = Field(..., description="Speaker role: system, user, assistant")
    content: str = Field(..., description="Message text")


class ChatRequest(BaseModel):
    """Body of POST /chat."""

    messages: List[ChatMessage] = Field(
        ...,
        min_length=1,
        description="Conversation so far; the last message is used as the retrieval query",
    )


class ErrorResponse(BaseModel):
    """Structured error returned when a request fails before streaming starts."""

    error: str = Field(..., description="Human-readable error message")


# =============================================================================
# Health Check Models
# =============================================================================


class KnowledgeBaseStatus(BaseModel):
    """Knowledge base cache status."""

    status: str
    state: str
    chunk_count: int = 0
    dimension: Optional[int] = None
    last_error: Optional[str] = None
    embedding_model: str
    chunk_types: Dict[str, int] = Field(default_factory=dict)
    timestamp: str


class HealthStatus(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str
    config: Dict[str, Any]
