from __future__ import annotations

from typing import List, Optional, Protocol

from chains.prompts import CHUNK_DOC_TEMPLATE, DOC_HEADING, TOO_SMALL_DOC
from common.config import yaml_config
from common.logger import get_logger
from ingestion.chunkers import Chunker

log = get_logger(__name__)


class Summarizer(Protocol):
    def summarize(self, prompt: str) -> str: ...


class SynthesisError(RuntimeError):
    """Documentation could not be produced for a whole file."""

    def __init__(self, file_path: str, cause: Exception):
        super().__init__(f"Failed to synthesize documentation for {file_path}: {cause}")
        self.file_path = file_path
        self.cause = cause


class DocumentSynthesizer:
    """
    Builds one Markdown document per file from per-chunk LLM fragments.

    Chunks are summarised strictly in order, one summarizer call each. A chunk
    whose call fails or comes back empty is left out; the rest of the file is
    still documented. If no chunk produces a fragment the file fails as a whole.
    """

    def __init__(
        self,
        summarizer: Summarizer,
        chunker: Optional[Chunker] = None,
        min_content_length: Optional[int] = None,
    ):
        self.summarizer = summarizer
        self.chunker = chunker or Chunker()
        self.min_content_length = (
            yaml_config.synthesis.min_content_length
            if min_content_length is None
            else min_content_length
        )

    def synthesize(self, file_path: str, content: Optional[str]) -> str:
        if not content or len(content) < self.min_content_length:
            log.info("File too small or empty, skipping: %s", file_path)
            return TOO_SMALL_DOC.format(file_path=file_path)

        try:
            chunks = self.chunker.split(content)
        except Exception as e:
            raise SynthesisError(file_path, e) from e

        log.info(
            "Documenting %s (%.2f KB, %d chunks)",
            file_path,
            len(content) / 1024,
            len(chunks),
        )
        parts: List[str] = []
        for i, chunk in enumerate(chunks):
            fragment = self._summarize_chunk(file_path, chunk, i, len(chunks))
            if fragment:
                parts.append(f"## Part {i + 1}\n{fragment}")
        if chunks and not parts:
            raise SynthesisError(
                file_path, RuntimeError(f"no documentation for any of {len(chunks)} chunks")
            )

        heading = DOC_HEADING.format(file_path=file_path)
        return f"{heading}\n\n" + "\n\n".join(parts)

    def _summarize_chunk(self, file_path: str, chunk: str, i: int, total: int) -> str:
        prompt = CHUNK_DOC_TEMPLATE.format(
            file_path=file_path, part=i + 1, total=total, code=chunk
        )
        try:
            text = self.summarizer.summarize(prompt)
        except Exception as e:
            log.warning(
                "Summarizer failed for %s chunk %d/%d: %s", file_path, i + 1, total, e
            )
            return ""
        return (text or "").strip()
