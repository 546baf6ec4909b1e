from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from sqlalchemy import create_engine, delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, sessionmaker

from common.config import secrets, yaml_config
from common.logger import get_logger
from ingestion.document_models import FileContent, FileDocument, RepositoryRecord
from storage.tables import (
    Base,
    RepoContentRow,
    RepoDocumentationRow,
    RepositoryRow,
    utcnow,
)

log = get_logger(__name__)


def _to_repository(row: RepositoryRow) -> RepositoryRecord:
    return RepositoryRecord(
        id=row.id,
        name=row.name,
        full_name=row.full_name,
        fingerprint_root=row.fingerprint_root,
        status=row.status,
        updated_at=row.updated_at,
    )


def _to_document(row: RepoDocumentationRow) -> FileDocument:
    return FileDocument(
        repository_id=row.repo_id,
        file_path=row.file_path,
        content=row.content,
        fingerprint_root=row.fingerprint_root,
        chunk_hashes=list(row.chunk_hashes or []),
        version=row.version,
        updated_at=row.updated_at,
    )


class StoreTransaction:
    """
    Unit of work over one SQLAlchemy session. Everything done through one
    instance commits or rolls back together.
    """

    def __init__(self, session: Session):
        self.session = session

    # --- repositories ---
    def get_repository(self, repo_id: int) -> Optional[RepositoryRecord]:
        row = self.session.get(RepositoryRow, repo_id)
        return _to_repository(row) if row else None

    def add_repository(self, name: str, full_name: str = "") -> RepositoryRecord:
        row = RepositoryRow(name=name, full_name=full_name or name)
        self.session.add(row)
        self.session.flush()
        return _to_repository(row)

    def update_repository_fingerprint(self, repo_id: int, root: Optional[str]) -> None:
        row = self.session.get(RepositoryRow, repo_id)
        if row is None:
            raise LookupError(f"Repository {repo_id} not found")
        row.fingerprint_root = root
        row.updated_at = utcnow()

    def set_repository_status(self, repo_id: int, status: str) -> None:
        row = self.session.get(RepositoryRow, repo_id)
        if row is None:
            raise LookupError(f"Repository {repo_id} not found")
        row.status = status

    # --- content store ---
    def list_files(self, repo_id: int) -> List[FileContent]:
        rows = self.session.scalars(
            select(RepoContentRow)
            .where(RepoContentRow.repo_id == repo_id)
            .order_by(RepoContentRow.id)
        )
        return [
            FileContent(path=r.file_path, content=r.content, size=r.file_size, sha=r.sha)
            for r in rows
        ]

    def put_file(self, repo_id: int, path: str, content: str, sha: str = "") -> None:
        row = self.session.scalar(
            select(RepoContentRow).where(
                RepoContentRow.repo_id == repo_id, RepoContentRow.file_path == path
            )
        )
        if row is None:
            row = RepoContentRow(repo_id=repo_id, file_path=path)
            self.session.add(row)
        row.content = content
        row.file_size = len(content)
        row.sha = sha

    # --- documentation ---
    def _document_row(self, repo_id: int, file_path: str) -> Optional[RepoDocumentationRow]:
        return self.session.scalar(
            select(RepoDocumentationRow).where(
                RepoDocumentationRow.repo_id == repo_id,
                RepoDocumentationRow.file_path == file_path,
            )
        )

    def get_document(self, repo_id: int, file_path: str) -> Optional[FileDocument]:
        row = self._document_row(repo_id, file_path)
        return _to_document(row) if row else None

    def get_version(self, repo_id: int, file_path: str) -> Optional[int]:
        return self.session.scalar(
            select(RepoDocumentationRow.version).where(
                RepoDocumentationRow.repo_id == repo_id,
                RepoDocumentationRow.file_path == file_path,
            )
        )

    def upsert_document(self, doc: FileDocument, repo_name: str = "") -> FileDocument:
        row = self._document_row(doc.repository_id, doc.file_path)
        if row is None:
            row = RepoDocumentationRow(repo_id=doc.repository_id, file_path=doc.file_path)
            self.session.add(row)
        row.repo_name = repo_name
        row.content = doc.content
        row.fingerprint_root = doc.fingerprint_root
        row.chunk_hashes = list(doc.chunk_hashes)
        row.version = doc.version
        row.updated_at = doc.updated_at or utcnow()
        self.session.flush()
        return _to_document(row)

    def delete_document(self, repo_id: int, file_path: str) -> bool:
        result = self.session.execute(
            delete(RepoDocumentationRow).where(
                RepoDocumentationRow.repo_id == repo_id,
                RepoDocumentationRow.file_path == file_path,
            )
        )
        deleted = bool(result.rowcount)
        if deleted:
            log.debug("Deleted documentation for %s in repo %d", file_path, repo_id)
        return deleted

    def list_documents(self, repo_id: int) -> List[FileDocument]:
        rows = self.session.scalars(
            select(RepoDocumentationRow)
            .where(RepoDocumentationRow.repo_id == repo_id)
            .order_by(RepoDocumentationRow.file_path)
        )
        return [_to_document(r) for r in rows]


class SqlDocumentStore:
    def __init__(
        self,
        url: str | None = None,
        engine: Engine | None = None,
        create_schema: bool = True,
    ):
        """
        Persistence adapter for repositories, their file contents and the
        generated documentation. Accepts any SQLAlchemy URL; defaults to
        DATABASE_URL, then app.database_url from config/config.yaml.
        """
        if engine is None:
            url = url or secrets.database_url or yaml_config.app.database_url
            _ensure_sqlite_dir(url)
            engine = create_engine(url)
        self.engine = engine
        log.debug("Document store bound to %s", engine.url)
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        if create_schema:
            Base.metadata.create_all(engine)

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        with self._session_factory() as session, session.begin():
            yield StoreTransaction(session)

    def get_repository(self, repo_id: int) -> Optional[RepositoryRecord]:
        with self.transaction() as tx:
            return tx.get_repository(repo_id)

    def list_files(self, repo_id: int) -> List[FileContent]:
        with self.transaction() as tx:
            return tx.list_files(repo_id)

    def get_document(self, repo_id: int, file_path: str) -> Optional[FileDocument]:
        with self.transaction() as tx:
            return tx.get_document(repo_id, file_path)

    def list_documents(self, repo_id: int) -> List[FileDocument]:
        with self.transaction() as tx:
            return tx.list_documents(repo_id)

    def close(self) -> None:
        self.engine.dispose()


def _ensure_sqlite_dir(url: str) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
