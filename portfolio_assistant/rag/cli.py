#!/usr/bin/env python3
"""
RAG Knowledge Base CLI

Command-line tool for inspecting the portfolio knowledge base.
Shows the chunks built from the corpus, runs retrieval for a query, or asks
a full question and streams the answer.

Usage:
    python -m portfolio_assistant.rag.cli chunks
    python -m portfolio_assistant.rag.cli chunks --type course
    python -m portfolio_assistant.rag.cli query "Which courses used Java?"
    python -m portfolio_assistant.rag.cli ask "What did they build at Envision?"
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from portfolio_assistant.config import settings
from portfolio_assistant.models.corpus import load_corpus
from portfolio_assistant.models.schemas import ChatMessage
from portfolio_assistant.rag.chunking import ChunkType, build_chunks
from portfolio_assistant.rag.knowledge_base import KnowledgeBaseCache
from portfolio_assistant.rag.retriever import RAGRetriever
from portfolio_assistant.services.chat import ChatService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _cache_for(args: argparse.Namespace) -> KnowledgeBaseCache:
    return KnowledgeBaseCache(corpus_loader=lambda: load_corpus(args.corpus))


async def cmd_chunks(args: argparse.Namespace) -> int:
    """List the chunks built from the corpus."""
    try:
        chunks = build_chunks(load_corpus(args.corpus))
    except Exception as e:
        logger.error(f"Failed to load corpus: {e}")
        return 1

    if args.type:
        chunks = [c for c in chunks if c.chunk_type == ChunkType(args.type)]

    print(f"Corpus: {args.corpus}")
    print(f"Chunks: {len(chunks)}")
    print("-" * 50)

    for i, chunk in enumerate(chunks):
        print(f"\n--- Chunk {i + 1} {chunk.metadata} ---")
        print(chunk.content)

    return 0


async def cmd_query(args: argparse.Namespace) -> int:
    """Query the knowledge base."""
    query = " ".join(args.query)

    if not query.strip():
        print("Error: Please provide a query")
        return 1

    print(f"Query: {query}")
    print("-" * 50)

    try:
        retriever = RAGRetriever(knowledge_base_cache=_cache_for(args), top_k=args.top_k)
        result = await retriever.retrieve(query)

    except Exception as e:
        logger.error(f"Query failed: {e}")
        return 1

    print(f"\nRetrieved {len(result.results)} chunks")
    print(f"Has relevant content: {result.has_relevant_content}")
    print(f"Top score: {result.top_score:.3f}")

    for i, ranked in enumerate(result.results):
        print(f"\n--- Chunk {i + 1} (score: {ranked.score:.3f}) ---")
        print(f"Type: {ranked.chunk.metadata.get('type')}")
        print(ranked.chunk.content)

    print("\n" + "=" * 50)
    print("FORMATTED CONTEXT:")
    print("=" * 50)
    print(result.context_text)

    return 0


async def cmd_ask(args: argparse.Namespace) -> int:
    """Ask a question and stream the answer."""
    question = " ".join(args.question)

    if not question.strip():
        print("Error: Please provide a question")
        return 1

    service = ChatService(knowledge_base_cache=_cache_for(args), top_k=args.top_k)

    try:
        prepared = await service.prepare([ChatMessage(role="user", content=question)])
        async for delta in service.stream(prepared):
            sys.stdout.write(delta)
            sys.stdout.flush()
        print()

    except Exception as e:
        logger.error(f"Ask failed: {e}")
        return 1

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Portfolio Knowledge Base CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  List all chunks:
    python -m portfolio_assistant.rag.cli chunks

  Rank chunks for a query:
    python -m portfolio_assistant.rag.cli query "Which courses used Java?" -k 3

  Ask a question:
    python -m portfolio_assistant.rag.cli ask "What projects use React?"
        """,
    )
    parser.add_argument(
        "--corpus", "-c", type=str, default=settings.corpus_path,
        help=f"Corpus JSON file (default: {settings.corpus_path})"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Chunks command
    chunks_parser = subparsers.add_parser("chunks", help="List corpus chunks")
    chunks_parser.add_argument(
        "--type", "-t", choices=[t.value for t in ChunkType],
        help="Only show chunks of this type"
    )

    # Query command
    query_parser = subparsers.add_parser("query", help="Query the knowledge base")
    query_parser.add_argument("query", nargs="+", help="Query text")
    query_parser.add_argument(
        "--top-k", "-k", type=int, default=settings.retrieval_top_k,
        help=f"Number of results to retrieve (default: {settings.retrieval_top_k})"
    )

    # Ask command
    ask_parser = subparsers.add_parser("ask", help="Ask a question and stream the answer")
    ask_parser.add_argument("question", nargs="+", help="Question text")
    ask_parser.add_argument(
        "--top-k", "-k", type=int, default=settings.retrieval_top_k,
        help=f"Number of context chunks (default: {settings.retrieval_top_k})"
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Run the appropriate command
    commands = {
        "chunks": cmd_chunks,
        "query": cmd_query,
        "ask": cmd_ask,
    }

    return asyncio.run(commands[args.command](args))


if __name__ == "__main__":
    sys.exit(main())
