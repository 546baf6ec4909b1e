from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from tqdm import tqdm

from chains.doc_synthesizer import DocumentSynthesizer, SynthesisError
from common.config import yaml_config
from common.logger import get_logger
from ingestion.chunkers import Chunker
from ingestion.document_models import (
    FileChange,
    FileContent,
    FileDocument,
    GenerationResult,
    ProgressEvent,
    RepositoryRecord,
    UpdateResult,
)
from ingestion.file_filters import filter_documentable
from ingestion.fingerprint import Fingerprint, fingerprint
from notifications.event_sink import EventSink, NullEventSink
from storage.sql_store import SqlDocumentStore, StoreTransaction

log = get_logger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DocumentationPipeline:
    """
    Keeps per-file documentation and fingerprints in step with a repository.

    Two entry points with different failure isolation:
      - generate_all: bulk (re)build; every file commits on its own, a failing
        file is logged and skipped while the rest continue.
      - apply_changes: incremental update; the whole batch is one transaction,
        any storage failure rolls everything back.

    Files are processed one at a time, in order. Nothing is cached between calls.
    """

    def __init__(
        self,
        store: SqlDocumentStore,
        synthesizer: DocumentSynthesizer,
        chunker: Optional[Chunker] = None,
        events: Optional[EventSink] = None,
        repository_fingerprint: Optional[str] = None,
        show_progress: Optional[bool] = None,
    ):
        self.store = store
        self.synthesizer = synthesizer
        self.chunker = chunker or synthesizer.chunker
        self.events = events or NullEventSink()
        self.repository_fingerprint = (
            repository_fingerprint or yaml_config.reconciliation.repository_fingerprint
        )
        if self.repository_fingerprint not in ("batch", "full"):
            raise ValueError(
                f"Unsupported repository_fingerprint mode: {self.repository_fingerprint}"
            )
        self.show_progress = (
            yaml_config.app.show_progress if show_progress is None else show_progress
        )

    # ------------------------------------------------------------------
    # Full generation
    # ------------------------------------------------------------------
    def generate_all(self, repository_id: int) -> GenerationResult:
        start = time.perf_counter()
        log.info("Starting documentation generation for repo id %d", repository_id)

        try:
            repo = self.store.get_repository(repository_id)
            if repo is None:
                log.warning("Repository %d not found", repository_id)
                return GenerationResult(
                    success=False,
                    message="Repository not found",
                    total_time_seconds=self._elapsed(start),
                )
            files = self.store.list_files(repository_id)
        except Exception as e:
            log.error("Could not load repository %d: %s", repository_id, e, exc_info=True)
            return GenerationResult(
                success=False, message=str(e), total_time_seconds=self._elapsed(start)
            )

        if not files:
            return GenerationResult(
                success=True,
                message="No files found in repository",
                total_time_seconds=self._elapsed(start),
            )

        valid_files = filter_documentable(files)
        log.info("Discovered %d files, %d documentable", len(files), len(valid_files))
        if not valid_files:
            return GenerationResult(
                success=True,
                message="No valid code files found",
                total_time_seconds=self._elapsed(start),
            )

        repo_name = repo.display_name
        processed = 0
        repo_hashes: List[str] = []
        generated: List[Dict[str, str]] = []

        iterator = (
            tqdm(valid_files, desc=f"Documenting {repo_name}", unit="file")
            if self.show_progress
            else valid_files
        )
        for file in iterator:
            try:
                doc = self._regenerate_file(repo, file)
            except Exception as e:
                log.error("Error processing %s: %s", file.path, e, exc_info=True)
                self._notify(
                    ProgressEvent(
                        type="documentation_error",
                        repo_name=repo_name,
                        file_path=file.path,
                        error=str(e),
                        processed_files=processed,
                        total_files=len(valid_files),
                        status="error",
                        message=f"Failed to generate documentation for {file.path}: {e}",
                        timestamp=_now_iso(),
                    )
                )
                continue

            processed += 1
            repo_hashes.extend(doc.chunk_hashes)
            generated.append({"filePath": doc.file_path, "content": doc.content})
            self._notify(
                ProgressEvent(
                    type="documentation_stored",
                    repo_name=repo_name,
                    file_path=doc.file_path,
                    content=doc.content,
                    processed_files=processed,
                    total_files=len(valid_files),
                    status="generating",
                    message=f"Documentation generated for {doc.file_path}",
                    timestamp=_now_iso(),
                )
            )

        if processed:
            self._finish_full_run(repository_id, repo_hashes)

        self._notify(
            ProgressEvent(
                type="documentation_complete",
                repo_name=repo_name,
                processed_files=processed,
                total_files=len(valid_files),
                status="complete",
                message=(
                    f"Documentation generation completed for {repo_name}. "
                    f"Processed {processed} files."
                ),
                timestamp=_now_iso(),
                documents=generated,
            )
        )

        elapsed = self._elapsed(start)
        log.info("Documented %d/%d files in %.2fs", processed, len(valid_files), elapsed)
        return GenerationResult(
            success=True,
            message="Documentation generated successfully",
            processed_files=processed,
            total_time_seconds=elapsed,
        )

    def _regenerate_file(self, repo: RepositoryRecord, file: FileContent) -> FileDocument:
        fp = self._fingerprint(file.content)
        content = self.synthesizer.synthesize(file.path, file.content)
        with self.store.transaction() as tx:
            previous = tx.get_version(repo.id, file.path) or 0
            return tx.upsert_document(
                FileDocument(
                    repository_id=repo.id,
                    file_path=file.path,
                    content=content,
                    fingerprint_root=fp.root,
                    chunk_hashes=fp.hashes,
                    version=previous + 1,
                ),
                repo_name=repo.display_name,
            )

    def _finish_full_run(self, repository_id: int, repo_hashes: List[str]) -> None:
        try:
            with self.store.transaction() as tx:
                tx.update_repository_fingerprint(
                    repository_id, self._repository_root(tx, repository_id, repo_hashes)
                )
                tx.set_repository_status(repository_id, "documented")
        except Exception as e:
            # documents are already committed; only the summary record is stale
            log.error(
                "Could not update repository %d fingerprint: %s",
                repository_id,
                e,
                exc_info=True,
            )

    # ------------------------------------------------------------------
    # Incremental update
    # ------------------------------------------------------------------
    def apply_changes(
        self, repository_id: int, changes: Sequence[FileChange]
    ) -> UpdateResult:
        total = len(changes)
        log.info("Applying %d changes to repo id %d", total, repository_id)

        try:
            with self.store.transaction() as tx:
                repo = tx.get_repository(repository_id)
                if repo is None:
                    log.warning("Repository %d not found", repository_id)
                    return UpdateResult(
                        success=False,
                        updated_files=0,
                        total_changes=total,
                        message="Repository not found",
                    )

                updated, batch_hashes = self._apply_in_transaction(tx, repo, changes)

                root: Optional[str] = None
                if self.repository_fingerprint == "full" or batch_hashes:
                    root = self._repository_root(tx, repository_id, batch_hashes)
                    tx.update_repository_fingerprint(repository_id, root)
        except Exception as e:
            log.error(
                "Incremental update for repo %d rolled back: %s",
                repository_id,
                e,
                exc_info=True,
            )
            return UpdateResult(
                success=False,
                updated_files=0,
                total_changes=total,
                message=str(e) or e.__class__.__name__,
            )

        log.info("Updated %d files for repo id %d", updated, repository_id)
        return UpdateResult(
            success=True,
            updated_files=updated,
            total_changes=total,
            message=f"Updated {updated} files",
            fingerprint_root=root,
        )

    def _apply_in_transaction(
        self,
        tx: StoreTransaction,
        repo: RepositoryRecord,
        changes: Sequence[FileChange],
    ) -> tuple[int, List[str]]:
        updated = 0
        batch_hashes: List[str] = []

        for change in changes:
            if change.action == "removed":
                if not tx.delete_document(repo.id, change.path):
                    log.info("No documentation stored for removed file %s", change.path)
                updated += 1
                continue

            if not change.content:
                log.info("Skipping %s - no content provided", change.path)
                continue

            # hashes count towards the repository fingerprint even if synthesis fails
            fp = self._fingerprint(change.content)
            batch_hashes.extend(fp.hashes)

            try:
                content = self.synthesizer.synthesize(change.path, change.content)
            except SynthesisError as e:
                log.error("%s", e)
                continue

            previous = tx.get_version(repo.id, change.path) or 0
            tx.upsert_document(
                FileDocument(
                    repository_id=repo.id,
                    file_path=change.path,
                    content=content,
                    fingerprint_root=fp.root,
                    chunk_hashes=fp.hashes,
                    version=previous + 1,
                ),
                repo_name=repo.display_name,
            )
            updated += 1

        return updated, batch_hashes

    # ------------------------------------------------------------------
    # Reads & helpers
    # ------------------------------------------------------------------
    def get_file_documentation(
        self, repository_id: int, file_path: str
    ) -> Optional[FileDocument]:
        return self.store.get_document(repository_id, file_path)

    def _fingerprint(self, content: str) -> Fingerprint:
        return fingerprint(self.chunker.split(content))

    def _repository_root(
        self, tx: StoreTransaction, repository_id: int, hashes: List[str]
    ) -> Optional[str]:
        if self.repository_fingerprint == "full":
            hashes = [
                h for doc in tx.list_documents(repository_id) for h in doc.chunk_hashes
            ]
            # an emptied repository gets EMPTY_ROOT, not None
            return fingerprint(hashes).root
        if not hashes:
            return None
        # chunk hashes are the leaves' payload, so they are hashed once more
        return fingerprint(hashes).root

    def _notify(self, event: ProgressEvent) -> None:
        try:
            self.events.emit(event)
        except Exception as e:
            log.warning("Progress event %s not delivered: %s", event.type, e)

    @staticmethod
    def _elapsed(start: float) -> float:
        return round(time.perf_counter() - start, 2)
