from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

ChangeAction = Literal["added", "modified", "removed"]


@dataclass
class Chunk:
    index: int  # position within the file's chunk sequence
    text: str
    content_sha256: str  # chunk-level hash, leaf of the file fingerprint


@dataclass
class FileContent:
    path: str  # repository-relative path
    content: str
    size: int
    sha: str = ""  # blob sha reported by the content store


class FileChange(BaseModel):
    """One entry of an incoming change notification (e.g. a push webhook)."""

    path: str
    action: ChangeAction
    content: Optional[str] = None
    sha: Optional[str] = None


@dataclass
class FileDocument:
    repository_id: int
    file_path: str
    content: str
    fingerprint_root: Optional[str]
    chunk_hashes: List[str]
    version: int = 1
    updated_at: Optional[datetime] = None


@dataclass
class RepositoryRecord:
    id: int
    name: str
    full_name: str = ""
    fingerprint_root: Optional[str] = None
    status: str = "registered"
    updated_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        """Repository name without the owner prefix ("owner/name" -> "name")."""
        if not self.full_name:
            return self.name
        return self.full_name.split("/")[-1]


@dataclass
class ProgressEvent:
    type: str  # documentation_stored | documentation_error | documentation_complete
    repo_name: str
    processed_files: int
    total_files: int
    status: str
    message: str
    timestamp: str
    file_path: Optional[str] = None
    content: Optional[str] = None
    error: Optional[str] = None
    documents: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class GenerationResult:
    success: bool
    message: str
    processed_files: int = 0
    total_time_seconds: float = 0.0


@dataclass(frozen=True)
class UpdateResult:
    success: bool
    updated_files: int
    total_changes: int
    message: str
    fingerprint_root: Optional[str] = None
