"""Pydantic Models and Schemas."""

from portfolio_assistant.models.corpus import (
    Corpus,
    Course,
    Job,
    PersonalProject,
    Profile,
    get_corpus,
    load_corpus,
)
from portfolio_assistant.models.schemas import (
    ChatMessage,
    ChatRequest,
    ErrorResponse,
    HealthStatus,
    KnowledgeBaseStatus,
)

__all__ = [
    # Corpus
    "Corpus",
    "Course",
    "Job",
    "PersonalProject",
    "Profile",
    "get_corpus",
    "load_corpus",
    # API
    "ChatMessage",
    "ChatRequest",
    "ErrorResponse",
    "HealthStatus",
    "KnowledgeBaseStatus",
]
