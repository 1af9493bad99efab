"""
Knowledge vectorizer.

Turns uploaded document text into a KnowledgeDocument with embedded chunks.
Embedding calls run one at a time with a fixed pause between them, trading
upload latency for staying clear of rate-limit bursts.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from casual_cowriter.catalog import (
    CHUNK_SIZE_CHARS,
    EMBEDDING_PACING_SECONDS,
    MAX_FILE_SIZE_BYTES,
    MIN_CHUNK_CHARS,
)
from casual_cowriter.embeddings import EmbeddingClient
from casual_cowriter.exceptions import ConfigurationError
from casual_cowriter.ingest import chunk_text, extract_text
from casual_cowriter.models import KnowledgeDocument, VectorChunk

logger = logging.getLogger(__name__)


@dataclass
class FileUpload:
    """A raw file as received from the user, before text extraction."""

    name: str
    data: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)


class KnowledgeVectorizer:
    """Chunks and embeds documents for retrieval."""

    def __init__(
        self,
        embedding: EmbeddingClient,
        chunk_size: int = CHUNK_SIZE_CHARS,
        min_chunk_chars: int = MIN_CHUNK_CHARS,
        pacing_seconds: float = EMBEDDING_PACING_SECONDS,
        max_file_size: int = MAX_FILE_SIZE_BYTES,
    ):
        """
        Initialize the vectorizer.

        Args:
            embedding: Client used to embed each chunk
            chunk_size: Characters per chunk
            min_chunk_chars: Chunks shorter than this (after stripping) are not embedded
            pacing_seconds: Delay after each embedding call
            max_file_size: Uploads above this size in bytes are skipped
        """
        self.embedding = embedding
        self.chunk_size = chunk_size
        self.min_chunk_chars = min_chunk_chars
        self.pacing_seconds = pacing_seconds
        self.max_file_size = max_file_size

    async def vectorize(
        self,
        name: str,
        content: str,
        mime_type: str,
        size: int,
        api_key: str,
    ) -> KnowledgeDocument:
        """
        Build an active KnowledgeDocument with embedded chunks.

        Chunks that are too short are skipped, and chunks whose embedding
        fails are dropped, so the document may end up with no chunks at all.

        Args:
            name: Display name of the document
            content: Full extracted text
            mime_type: MIME type of the original upload
            size: Size of the original upload in bytes
            api_key: Credential used for every embedding call

        Returns:
            KnowledgeDocument (is_active=True)
        """
        document = KnowledgeDocument(
            name=name,
            content=content,
            mime_type=mime_type,
            size=size,
            is_active=True,
        )

        pieces = chunk_text(content, self.chunk_size)
        chunks: List[VectorChunk] = []

        for index, piece in enumerate(pieces):
            if len(piece.strip()) < self.min_chunk_chars:
                logger.debug(f"Skipping short chunk {index} of {name}")
                continue

            vector = await self.embedding.embed(piece, api_key=api_key)
            if vector:
                chunks.append(
                    VectorChunk(text=piece, vector=vector, source_id=document.id, index=index)
                )

            await asyncio.sleep(self.pacing_seconds)

        document.chunks = chunks

        logger.info(f"Vectorized {name}: {len(chunks)}/{len(pieces)} chunks embedded")
        return document

    async def vectorize_uploads(
        self, uploads: Sequence[FileUpload], api_key: Optional[str]
    ) -> List[KnowledgeDocument]:
        """
        Extract and vectorize a batch of uploads.

        A file that is too large, fails extraction, or yields no text is
        skipped without aborting the rest of the batch.

        Raises:
            ConfigurationError: If no API key is provided
        """
        if not api_key:
            raise ConfigurationError(
                "An API key is required to vectorize knowledge files. Add one in settings."
            )

        documents: List[KnowledgeDocument] = []

        for upload in uploads:
            if upload.size > self.max_file_size:
                logger.warning(f"Skipping {upload.name}: file too large ({upload.size} bytes)")
                continue

            text = extract_text(upload.name, upload.data, upload.mime_type)
            if not text:
                logger.warning(f"Skipping {upload.name}: no text extracted")
                continue

            documents.append(
                await self.vectorize(
                    name=upload.name,
                    content=text,
                    mime_type=upload.mime_type,
                    size=upload.size,
                    api_key=api_key,
                )
            )

        logger.info(f"Vectorized {len(documents)}/{len(uploads)} uploads")
        return documents
