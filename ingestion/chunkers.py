from __future__ import annotations

from typing import List, Optional, Sequence

from langchain_text_splitters import RecursiveCharacterTextSplitter

from common.config import yaml_config
from ingestion.document_models import Chunk
from ingestion.hash_utils import sha256_text


class Chunker:
    """
    Overlapping, boundary-aware splitter for source text.

    Wraps LangChain's RecursiveCharacterTextSplitter: each level tries the next
    finer separator (paragraph, line, sentence, word, character) until pieces fit
    into chunk_size, then merges neighbours back up to chunk_size carrying up to
    chunk_overlap characters of trailing context into the next chunk.
    Output only depends on (text, chunk_size, overlap, separators).
    """

    def __init__(
        self,
        chunk_size: Optional[int] = None,
        overlap: Optional[int] = None,
        separators: Optional[Sequence[str]] = None,
    ):
        cfg = yaml_config.chunking
        self.chunk_size = cfg.chunk_size if chunk_size is None else chunk_size
        self.overlap = cfg.chunk_overlap if overlap is None else overlap
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if not 0 <= self.overlap < self.chunk_size:
            raise ValueError(
                f"overlap must be in [0, chunk_size), got {self.overlap} "
                f"for chunk_size={self.chunk_size}"
            )
        self.separators = list(separators if separators is not None else cfg.separators)
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.overlap,
            separators=self.separators,
        )

    def split(self, text: str) -> List[str]:
        if not text:
            return []
        if len(text) <= self.chunk_size:
            return [text]
        return self._splitter.split_text(text)

    def chunk(self, text: str) -> List[Chunk]:
        return [
            Chunk(index=i, text=piece, content_sha256=sha256_text(piece))
            for i, piece in enumerate(self.split(text))
        ]


def split_text(
    text: str,
    chunk_size: Optional[int] = None,
    overlap: Optional[int] = None,
) -> List[str]:
    """Split text with the configured defaults (2000 / 200 characters)."""
    return Chunker(chunk_size=chunk_size, overlap=overlap).split(text)


def chunk_text(
    text: str,
    chunk_size: Optional[int] = None,
    overlap: Optional[int] = None,
) -> List[Chunk]:
    return Chunker(chunk_size=chunk_size, overlap=overlap).chunk(text)
