"""
FastAPI Application Entry Point

Configures and runs the Portfolio Assistant backend service.
Answers questions about a personal portfolio by retrieving the most relevant
facts from the corpus and streaming a Gemini answer grounded in them.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portfolio_assistant import __version__
from portfolio_assistant.config import settings
from portfolio_assistant.routers import chat, health


def configure_logging() -> None:
    """Configure application logging."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Set specific loggers
    logging.getLogger("uvicorn").setLevel(log_level)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    # Reduce noise from the HTTP and Gemini clients
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


# Configure logging on module load
configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan events.

    Startup:
    - Log configuration
    - Validate environment

    The knowledge base is not built here; the first chat request builds it.
    """
    # Startup
    logger.info(f"Starting Portfolio Assistant v{app.version}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Gemini model: {settings.gemini_model}")
    logger.info(f"Embedding model: {settings.embedding_model}")
    logger.info(f"Corpus: {settings.corpus_path}")

    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY / GOOGLE_API_KEY not set - /chat will return errors")
    else:
        logger.info("Gemini API key configured")

    yield

    # Shutdown
    logger.info("Shutting down Portfolio Assistant")


app = FastAPI(
    title="Portfolio Assistant",
    description="""
Retrieval-augmented chat over a personal portfolio.

## Endpoints

- `POST /chat`: `{"messages": [{"role": "user", "content": "..."}]}`; the answer
  is streamed back as plain text
- `GET /health/rag`: knowledge base build state
""",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(chat.router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic service information."""
    return {
        "name": "Portfolio Assistant",
        "version": __version__,
        "status": "running",
        "docs": "/docs",
        "chat": "/chat",
    }


# For running directly with Python
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "portfolio_assistant.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
