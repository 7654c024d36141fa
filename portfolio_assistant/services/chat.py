"""
Chat Service

Runs one chat request through the retrieval pipeline:

    Received -> KnowledgeBaseReady -> QueryEmbedded -> Ranked
             -> PromptAssembled -> Streaming -> Completed | Failed

``prepare`` covers everything up to the assembled prompt; any failure there
is raised before a single byte is streamed. ``stream`` relays the LLM's text
deltas and turns provider failures into ``StreamInterruptedError``.
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Sequence

from portfolio_assistant.errors import MissingCredentialError, StreamInterruptedError
from portfolio_assistant.models.schemas import ChatMessage
from portfolio_assistant.rag.embeddings import EmbeddingProvider, get_embedding_provider
from portfolio_assistant.rag.knowledge_base import (
    KnowledgeBaseCache,
    get_knowledge_base_cache,
)
from portfolio_assistant.rag.retriever import RAGRetriever, RetrievalResult
from portfolio_assistant.services.generation import (
    GenerationProvider,
    get_generation_provider,
)

logger = logging.getLogger(__name__)


SYSTEM_PROMPT_TEMPLATE = """You are an interactive portfolio assistant.

CONTEXT:
{context}

INSTRUCTIONS:
- Use ONLY the provided context information. If the answer isn't there, say you don't know.
- Link Formatting: [Title](URL) or [Email](mailto:...). No raw URLs.
- Keep it concise and professional.
{extra_instructions}"""


def build_system_instruction(context: str, extra_instructions: str = "") -> str:
    """
    Build the system instruction that grounds the LLM in retrieved context.

    Args:
        context: Joined chunk contents (may be empty).
        extra_instructions: Corpus-supplied instructions, appended verbatim.

    Returns:
        The system instruction text.
    """
    return SYSTEM_PROMPT_TEMPLATE.format(
        context=context,
        extra_instructions=extra_instructions or "",
    )


@dataclass
class PreparedChat:
    """A request that is ready to stream."""

    query: str
    retrieval: RetrievalResult
    system_instruction: str
    messages: List[ChatMessage]


class ChatService:
    """
    Retrieval-grounded chat over the portfolio corpus.
    """

    def __init__(
        self,
        embedding_provider: Optional[EmbeddingProvider] = None,
        generation_provider: Optional[GenerationProvider] = None,
        knowledge_base_cache: Optional[KnowledgeBaseCache] = None,
        top_k: Optional[int] = None,
    ) -> None:
        self.embedding_provider = embedding_provider or get_embedding_provider()
        self.generation_provider = generation_provider or get_generation_provider()
        self.retriever = RAGRetriever(
            embedding_provider=self.embedding_provider,
            knowledge_base_cache=knowledge_base_cache or get_knowledge_base_cache(),
            top_k=top_k,
        )

    async def prepare(self, messages: Sequence[ChatMessage]) -> PreparedChat:
        """
        Retrieve context for the last message and assemble the prompt.

        Args:
            messages: The conversation; the last message is the query.

        Returns:
            PreparedChat ready for ``stream``.

        Raises:
            ValueError: If there are no messages.
            MissingCredentialError: If a provider has no API key.
            EmbeddingError: If the knowledge base or query embedding fails.
        """
        if not messages:
            raise ValueError("At least one message is required")

        if not (self.embedding_provider.is_available() and self.generation_provider.is_available()):
            raise MissingCredentialError("Gemini API key not configured")

        last_message = messages[-1]
        if last_message.role != "user":
            logger.warning(
                f"Last message has role {last_message.role!r}; using it as the query anyway"
            )

        retrieval = await self.retriever.retrieve(last_message.content)
        system_instruction = build_system_instruction(
            retrieval.context_text,
            retrieval.system_instructions,
        )

        conversation = [ChatMessage(role="system", content=system_instruction)]
        conversation.extend(messages)

        return PreparedChat(
            query=last_message.content,
            retrieval=retrieval,
            system_instruction=system_instruction,
            messages=conversation,
        )

    async def stream(self, prepared: PreparedChat) -> AsyncIterator[str]:
        """
        Relay the LLM's text deltas for a prepared request.

        Yields:
            Non-empty text deltas in arrival order.

        Raises:
            StreamInterruptedError: If the provider fails mid-stream. Deltas
                already yielded stay delivered.
        """
        delta_count = 0
        try:
            async for delta in self.generation_provider.stream(prepared.messages):
                if not delta:
                    continue
                delta_count += 1
                yield delta
        except StreamInterruptedError:
            raise
        except Exception as e:
            logger.error(f"Generation stream failed after {delta_count} deltas: {e}")
            raise StreamInterruptedError(str(e)) from e

        logger.debug(f"Generation stream completed with {delta_count} deltas")


_chat_service: Optional[ChatService] = None


def get_chat_service() -> ChatService:
    """
    Get the global chat service instance.

    Returns:
        ChatService instance.
    """
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService()
    return _chat_service
