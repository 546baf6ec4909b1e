from __future__ import annotations

from typing import Optional

from chains.doc_synthesizer import DocumentSynthesizer
from ingestion.chunkers import Chunker
from ingestion.doc_pipeline import DocumentationPipeline
from models.llm import LLMSummarizer, load_local_llm
from notifications.event_sink import EventSink, build_event_sink
from storage.sql_store import SqlDocumentStore


def build_pipeline(
    database_url: Optional[str] = None,
    events: Optional[EventSink] = None,
) -> DocumentationPipeline:
    """
    Wire the pipeline from config/config.yaml once at process start.
    The LLM client, splitter, store and sink are shared by reference.
    """
    chunker = Chunker()
    summarizer = LLMSummarizer(load_local_llm())
    return DocumentationPipeline(
        store=SqlDocumentStore(url=database_url),
        synthesizer=DocumentSynthesizer(summarizer, chunker=chunker),
        chunker=chunker,
        events=events or build_event_sink(),
    )
