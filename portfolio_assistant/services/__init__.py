"""
Services Package

Contains the core business logic services for the Portfolio Assistant:
- ChatService: Retrieval, prompt assembly and answer streaming
- GenerationProvider: Gemini streaming chat completions
"""

from portfolio_assistant.services.chat import (
    ChatService,
    PreparedChat,
    build_system_instruction,
    get_chat_service,
)
from portfolio_assistant.services.generation import (
    GeminiGenerationProvider,
    GenerationProvider,
    get_generation_provider,
)

__all__ = [
    # Chat
    "ChatService",
    "PreparedChat",
    "build_system_instruction",
    "get_chat_service",
    # Generation
    "GeminiGenerationProvider",
    "GenerationProvider",
    "get_generation_provider",
]
