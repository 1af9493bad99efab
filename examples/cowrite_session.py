"""
Co-writing Session Example

Runs a short story session against the Gemini API: vectorizes a story bible,
streams two turns with retrieval and thought parsing, and persists the
session to SQLite.

Requires GEMINI_API_KEY (or COWRITER_API_KEYS) in the environment.
"""

import asyncio
import logging

from casual_llm import ModelConfig, Provider, create_provider
from sqlalchemy import create_engine

from casual_cowriter import ChatSession, CowriterService, GenerationOrchestrator, load_app_config
from casual_cowriter.catalog import EXTRACTION_MODEL_ID, GEMINI_OPENAI_BASE_URL
from casual_cowriter.credentials import KeyRotationManager
from casual_cowriter.embeddings import OpenAIEmbeddingClient
from casual_cowriter.extractors import LLMMemoryExtractor
from casual_cowriter.generation import OpenAIChatBackend
from casual_cowriter.knowledge import FileUpload, KnowledgeRetriever, KnowledgeVectorizer
from casual_cowriter.storage import SQLAlchemySessionStore

STORY_BIBLE = """
The lighthouse on Gull Rock is kept by Ada Venn, a former naval cartographer.
She lost her left hand in the wreck of the Gannet and writes with her right.
The village of Saltmere sits across the bay; its fishermen distrust her.
""" * 3


async def main():
    logging.basicConfig(level=logging.INFO)

    config = load_app_config()
    credentials = KeyRotationManager()

    embedding = OpenAIEmbeddingClient(credentials=credentials)
    orchestrator = GenerationOrchestrator(
        backend=OpenAIChatBackend(),
        retriever=KnowledgeRetriever(embedding),
        credentials=credentials,
    )
    orchestrator.start_chat(config)

    print("=== Vectorizing story bible ===\n")
    vectorizer = KnowledgeVectorizer(embedding)
    documents = await vectorizer.vectorize_uploads(
        [FileUpload("bible.txt", STORY_BIBLE.encode("utf-8"), "text/plain")],
        api_key=credentials.current_key,
    )
    for document in documents:
        print(f"  {document.name}: {len(document.chunks)} chunks")
    orchestrator.config = orchestrator.config.model_copy(update={"knowledge_files": documents})

    llm_provider = create_provider(
        ModelConfig(
            name=EXTRACTION_MODEL_ID,
            provider=Provider.OPENAI,
            base_url=GEMINI_OPENAI_BASE_URL,
            api_key=credentials.current_key,
        )
    )

    store = SQLAlchemySessionStore(create_engine("sqlite:///cowriter.db"))
    store.create_tables()

    service = CowriterService(
        orchestrator,
        store=store,
        memory_extractor=LLMMemoryExtractor(llm_provider),
    )

    session = ChatSession()
    for prompt in [
        "Open the story on the night a stranger rows out to Gull Rock.",
        "Continue: Ada decides whether to let the stranger in.",
    ]:
        print(f"\n=== USER: {prompt} ===\n")
        reply = await service.send_message(
            session,
            prompt,
            on_update=lambda message, update: print(update.text, end="", flush=True),
        )
        if reply.is_error:
            print(reply.text)
        print(f"\n\n  [tokens this turn: {reply.token_count}]")

    print(f"\nSession '{session.title}' saved with {len(session.messages)} messages")
    print(f"Total tokens: {session.total_tokens}")


if __name__ == "__main__":
    asyncio.run(main())
