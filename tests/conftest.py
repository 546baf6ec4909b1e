from __future__ import annotations

import re
from typing import Dict, List

import pytest

from chains.doc_synthesizer import DocumentSynthesizer
from ingestion.chunkers import Chunker
from ingestion.doc_pipeline import DocumentationPipeline
from notifications.event_sink import MemoryEventSink
from storage.sql_store import SqlDocumentStore

_PART_RE = re.compile(r"### Code snippet \((\d+)/(\d+)\)")


class FakeSummarizer:
    """Answers every prompt with a short line naming the snippet position."""

    def __init__(self, fail_on_calls: tuple[int, ...] = ()):
        self.prompts: List[str] = []
        self.fail_on_calls = fail_on_calls

    def summarize(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if len(self.prompts) in self.fail_on_calls:
            raise TimeoutError("summarizer timed out")
        m = _PART_RE.search(prompt)
        return f"Summary of snippet {m.group(1)} of {m.group(2)}"


def source_text(lines: int = 90) -> str:
    """lines * 50 characters of code-like text without blank lines or sentences."""
    return "".join(f"x{i:03d}" + "-" * 45 + "\n" for i in range(lines))


@pytest.fixture
def summarizer() -> FakeSummarizer:
    return FakeSummarizer()


@pytest.fixture
def store(tmp_path) -> SqlDocumentStore:
    s = SqlDocumentStore(url=f"sqlite:///{tmp_path / 'docs.db'}")
    yield s
    s.close()


@pytest.fixture
def events() -> MemoryEventSink:
    return MemoryEventSink()


@pytest.fixture
def pipeline(store, summarizer, events) -> DocumentationPipeline:
    chunker = Chunker(chunk_size=2000, overlap=200)
    return DocumentationPipeline(
        store=store,
        synthesizer=DocumentSynthesizer(summarizer, chunker=chunker),
        chunker=chunker,
        events=events,
        repository_fingerprint="batch",
        show_progress=False,
    )


@pytest.fixture
def make_repo(store):
    def _make(files: Dict[str, str], name: str = "demo", full_name: str = "acme/demo") -> int:
        with store.transaction() as tx:
            repo = tx.add_repository(name=name, full_name=full_name)
            for path, content in files.items():
                tx.put_file(repo.id, path, content)
        return repo.id

    return _make


@pytest.fixture
def source():
    return source_text


@pytest.fixture
def make_summarizer():
    return FakeSummarizer
