"""Text ingestion: file-to-text extraction and chunking."""

from casual_cowriter.ingest.chunker import chunk_text
from casual_cowriter.ingest.file_text import extract_text

__all__ = ["chunk_text", "extract_text"]
