"""
Chat Router

POST /chat - answer a question about the portfolio, streamed as plain text.
"""

import logging
from typing import AsyncIterator, Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from portfolio_assistant.errors import PortfolioAssistantError, StreamInterruptedError
from portfolio_assistant.models.schemas import ChatRequest, ErrorResponse
from portfolio_assistant.services.chat import ChatService, PreparedChat, get_chat_service

router = APIRouter(tags=["Chat"])
logger = logging.getLogger(__name__)


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content=ErrorResponse(error=message).model_dump())


@router.post(
    "/chat",
    response_class=StreamingResponse,
    response_model=None,
    responses={500: {"model": ErrorResponse}},
)
async def chat(
    request: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> Union[StreamingResponse, JSONResponse]:
    """
    Answer the last message of the conversation from the portfolio corpus.

    The response body is the LLM's answer, streamed as it is generated.
    Failures before streaming starts return HTTP 500 with ``{"error": ...}``;
    a failure mid-stream aborts the response.
    """
    try:
        prepared = await chat_service.prepare(request.messages)

    except PortfolioAssistantError as e:
        logger.error(f"Chat Error: {type(e).__name__}: {e}")
        return _error_response(e.public_message)
    except Exception as e:
        logger.error(f"Chat Error: {type(e).__name__}: {e}")
        return _error_response(PortfolioAssistantError.public_message)

    return StreamingResponse(
        _relay(chat_service, prepared),
        media_type="text/plain; charset=utf-8",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )


async def _relay(chat_service: ChatService, prepared: PreparedChat) -> AsyncIterator[str]:
    try:
        async for delta in chat_service.stream(prepared):
            yield delta
    except StreamInterruptedError as e:
        logger.error(f"Chat stream interrupted: {e}")
        raise
