"""
Knowledge Retriever - Best-effort retrieval over the destination corpus.

Semantic search (embeddings + cosine similarity) is used whenever the
embedding capability is configured; otherwise a keyword containment match
stands in. Retrieval never raises: any failure yields an empty list.
"""
import asyncio
import json
import logging
import math
import os
from dataclasses import dataclass
from typing import Any, Optional

from .llm_client import LLMClient, get_llm_client

logger = logging.getLogger(__name__)

RESOURCE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "resources")


def load_destination_data(filename: str = "destinations.json") -> dict[str, Any]:
    """Load the bundled destination resource file."""
    path = os.path.join(RESOURCE_DIR, filename)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading {filename}: {e}")
    return {}


@dataclass(frozen=True)
class Passage:
    """One document of the corpus, tagged with its destination."""
    destination: str
    country: str
    category: str
    content: str


def load_corpus() -> list[Passage]:
    return [
        Passage(
            destination=doc["destination"],
            country=doc.get("country", ""),
            category=doc.get("category", "overview"),
            content=doc["content"],
        )
        for doc in load_destination_data().get("documents", [])
    ]


def cosine(a: list[float], b: list[float]) -> float:
    n = min(len(a), len(b))
    dot = sum(a[i] * b[i] for i in range(n))
    na = math.sqrt(sum(x * x for x in a[:n])) or 1.0
    nb = math.sqrt(sum(x * x for x in b[:n])) or 1.0
    return dot / (na * nb)


class KnowledgeRetriever:
    """Top-k passage retrieval over a fixed corpus."""

    def __init__(
        self,
        llm: Optional[LLMClient] = None,
        passages: Optional[list[Passage]] = None,
        top_k: int = 2
    ):
        self.llm = llm
        self.passages = passages if passages is not None else load_corpus()
        self.top_k = top_k
        self._vectors: Optional[list[list[float]]] = None
        self._embed_lock = asyncio.Lock()

    @property
    def semantic(self) -> bool:
        """Whether the embedding path will be used."""
        return self.llm is not None and self.llm.embeddings_available

    async def retrieve(self, query: str, k: Optional[int] = None) -> list[str]:
        """
        Return up to ``k`` relevant passage texts for the query.

        Args:
            query: Free-text query
            k: Number of passages, defaults to the retriever's top_k

        Returns:
            Passage texts, most relevant first; empty on any failure
        """
        k = self.top_k if k is None else k
        if k <= 0 or not self.passages:
            return []

        try:
            if self.semantic:
                return await self._semantic_search(query, k)
            return self._keyword_search(query, k)
        except Exception as e:
            logger.warning(f"Knowledge retrieval failed, continuing without context: {e!r}")
            return []

    async def _corpus_vectors(self) -> list[list[float]]:
        # Embedded once per process; a failed attempt is retried on the next call
        async with self._embed_lock:
            if self._vectors is None:
                self._vectors = await self.llm.embed([p.content for p in self.passages])
                logger.info(f"Embedded {len(self._vectors)} knowledge passages")
        return self._vectors

    async def _semantic_search(self, query: str, k: int) -> list[str]:
        vectors = await self._corpus_vectors()
        query_vector = (await self.llm.embed([query]))[0]

        ranked = sorted(
            range(len(vectors)),
            key=lambda i: (-cosine(query_vector, vectors[i]), i)
        )
        return [self.passages[i].content for i in ranked[:k]]

    def _keyword_search(self, query: str, k: int) -> list[str]:
        words = (query or "").lower().split()
        matches = [
            passage.content
            for passage in self.passages
            if any(
                word in passage.content.lower() or word in passage.destination.lower()
                for word in words
            )
        ]
        return matches[:k]


# Global retriever instance
knowledge_retriever: Optional[KnowledgeRetriever] = None


def get_knowledge_retriever() -> KnowledgeRetriever:
    """Get or create the global knowledge retriever."""
    global knowledge_retriever
    if knowledge_retriever is None:
        from ..config import settings
        knowledge_retriever = KnowledgeRetriever(
            llm=get_llm_client(),
            top_k=settings.knowledge_top_k
        )
    return knowledge_retriever
