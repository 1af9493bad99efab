"""
Retrieval over vectorized knowledge documents.

Embeds the query once, scores every chunk of every active document by cosine
similarity, and greedily selects the best chunks under a relevance threshold,
a character budget and a chunk cap. The budget is enforced in characters;
token estimates play no part in selection.
"""

import html
import logging
from dataclasses import dataclass
from typing import List, Sequence

from casual_cowriter.catalog import MAX_RAG_CHARS, MAX_RAG_CHUNKS, RELEVANCE_THRESHOLD
from casual_cowriter.embeddings import EmbeddingClient
from casual_cowriter.models import KnowledgeDocument
from casual_cowriter.utils.vector_math import cosine_similarity

logger = logging.getLogger(__name__)


@dataclass
class ScoredChunk:
    content: str
    score: float
    source: str


class KnowledgeRetriever:
    """
    RAG engine for the story bible.

    Selection rules, in order:
    1. A chunk is eligible only if its score is above `threshold`
    2. Adding it must keep the selected character count under `max_chars`
    3. Selection stops once `max_chunks` chunks have been selected
    """

    def __init__(
        self,
        embedding: EmbeddingClient,
        threshold: float = RELEVANCE_THRESHOLD,
        max_chars: int = MAX_RAG_CHARS,
        max_chunks: int = MAX_RAG_CHUNKS,
    ):
        self.embedding = embedding
        self.threshold = threshold
        self.max_chars = max_chars
        self.max_chunks = max_chunks

        logger.info(
            f"KnowledgeRetriever initialized (threshold={threshold}, "
            f"max_chars={max_chars}, max_chunks={max_chunks})"
        )

    @staticmethod
    def eligible_documents(documents: Sequence[KnowledgeDocument]) -> List[KnowledgeDocument]:
        """Active documents that have at least one embedded chunk."""
        return [doc for doc in documents if doc.is_active and doc.is_vectorized]

    @staticmethod
    def score_chunks(
        query_vector: List[float], documents: Sequence[KnowledgeDocument]
    ) -> List[ScoredChunk]:
        """Score every chunk against the query, highest first."""
        scored = [
            ScoredChunk(
                content=chunk.text,
                score=cosine_similarity(query_vector, chunk.vector),
                source=doc.name,
            )
            for doc in documents
            for chunk in doc.chunks
        ]
        scored.sort(key=lambda c: c.score, reverse=True)
        return scored

    def select(self, scored: Sequence[ScoredChunk]) -> List[ScoredChunk]:
        selected: List[ScoredChunk] = []
        current_chars = 0

        for chunk in scored:
            if chunk.score > self.threshold:
                if current_chars + len(chunk.content) < self.max_chars:
                    selected.append(chunk)
                    current_chars += len(chunk.content)
            if len(selected) >= self.max_chunks:
                break

        return selected

    @staticmethod
    def render(chunks: Sequence[ScoredChunk]) -> str:
        return "\n".join(
            f'\n<story_bible_fragment source="{html.escape(c.source, quote=True)}" '
            f'relevance="{c.score:.2f}">\n'
            f"{c.content}\n"
            f"</story_bible_fragment>"
            for c in chunks
        )

    async def retrieve(self, query: str, documents: Sequence[KnowledgeDocument]) -> str:
        """
        Build the retrieved-knowledge prompt fragment for a query.

        Returns an empty string, without spending an embedding call, when no
        document is both active and vectorized. Also returns an empty string
        when the query cannot be embedded or nothing clears the threshold.
        """
        eligible = self.eligible_documents(documents)
        if not eligible:
            return ""

        query_vector = await self.embedding.embed(query)
        if not query_vector:
            logger.warning("Query embedding failed, continuing without retrieved context")
            return ""

        scored = self.score_chunks(query_vector, eligible)
        selected = self.select(scored)

        logger.debug(
            f"Retrieved {len(selected)}/{len(scored)} chunks from {len(eligible)} documents"
        )

        if not selected:
            return ""

        return self.render(selected)
