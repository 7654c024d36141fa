"""
Shared test fixtures and configuration for entire test suite.

Provides: sample corpus, fake embedding/generation providers, fresh
knowledge base caches and chat services wired to them.
"""

from typing import Any, Dict

import pytest

from portfolio_assistant.models.corpus import Corpus
from portfolio_assistant.rag.knowledge_base import KnowledgeBaseCache
from portfolio_assistant.services.chat import ChatService
from tests.fakes import FakeEmbeddingProvider, FakeGenerationProvider


@pytest.fixture
def sample_corpus_data() -> Dict[str, Any]:
    """Raw corpus covering every section."""
    return {
        "profile": {"name": "Alice", "role": "Engineer", "bio": "Builds things."},
        "contact": {
            "email": "alice@example.com",
            "phone": "555-0101",
            "linkedin": "https://linkedin.com/in/alice",
            "github": "https://github.com/alice",
        },
        "academics": {
            "courses": [
                {
                    "identifier": "CS101",
                    "title": "Intro to Java",
                    "year": 2020,
                    "description": "Java fundamentals.",
                    "accomplishments": ["Top grade", "TA"],
                    "technology": ["Java", "Git"],
                },
                {
                    "identifier": "CS348",
                    "title": "Databases",
                    "year": 2021,
                    "description": "SQL and schema design.",
                    "technology": ["SQL"],
                },
            ],
            "extracurriculars": [
                {
                    "title": "Web Lead",
                    "org": "Hack Club",
                    "description": "Ran React workshops.",
                    "technology": ["React"],
                }
            ],
        },
        "work": {
            "envision_center": {
                "projects": [
                    {
                        "name": "VR Tour",
                        "team_size": 4,
                        "description": "Unity campus tour.",
                        "technology": ["Unity"],
                    }
                ],
                "events": [{"name": "Showcase", "description": "Research showcase demo."}],
            },
            "data_mine": {
                "projects": [
                    {
                        "name": "Yield Dashboard",
                        "team_size": 6,
                        "description": "Python dashboard for crop yields.",
                        "technology": ["Python"],
                    }
                ]
            },
        },
        "projects": [
            {
                "title": "Bookmarks",
                "description": "Reading list app.",
                "technology": ["TypeScript"],
                "link": "https://github.com/alice/bookmarks",
                "category": ["Web", "Tools"],
            }
        ],
        "system_instructions": "- Refer to Alice in the third person.",
    }


@pytest.fixture
def sample_corpus(sample_corpus_data: Dict[str, Any]) -> Corpus:
    return Corpus.model_validate(sample_corpus_data)


@pytest.fixture
def embedding_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture
def generation_provider() -> FakeGenerationProvider:
    return FakeGenerationProvider()


@pytest.fixture
def knowledge_base_cache(sample_corpus: Corpus) -> KnowledgeBaseCache:
    """A fresh, empty cache over the sample corpus."""
    return KnowledgeBaseCache(corpus_loader=lambda: sample_corpus)


@pytest.fixture
def chat_service(
    embedding_provider: FakeEmbeddingProvider,
    generation_provider: FakeGenerationProvider,
    knowledge_base_cache: KnowledgeBaseCache,
) -> ChatService:
    return ChatService(
        embedding_provider=embedding_provider,
        generation_provider=generation_provider,
        knowledge_base_cache=knowledge_base_cache,
        top_k=5,
    )
