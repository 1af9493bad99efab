"""Knowledge base: document vectorization and retrieval."""

from casual_cowriter.knowledge.retriever import KnowledgeRetriever, ScoredChunk
from casual_cowriter.knowledge.vectorizer import FileUpload, KnowledgeVectorizer

__all__ = [
    "FileUpload",
    "KnowledgeRetriever",
    "KnowledgeVectorizer",
    "ScoredChunk",
]
