from __future__ import annotations

import argparse
from pathlib import Path
from typing import List

from tqdm import tqdm

from common.logger import get_logger
from ingestion.file_filters import is_documentable
from ingestion.hash_utils import sha256_text
from storage.sql_store import SqlDocumentStore

log = get_logger(__name__)


def discover_files(root: Path) -> List[Path]:
    """
    Recursively find source files under root, relative paths filtered by the
    configured extensions and ignore patterns.
    """
    paths: List[Path] = []
    for p in root.rglob("*"):
        if p.is_file() and is_documentable(p.relative_to(root).as_posix()):
            paths.append(p)
    return sorted(paths)


def register_directory(
    store: SqlDocumentStore, root: Path, name: str, full_name: str = ""
) -> int:
    """Create a repository record and load its files into the content store."""
    files = discover_files(root)
    log.info("Discovered %d source files under %s", len(files), root)

    with store.transaction() as tx:
        repo = tx.add_repository(name=name, full_name=full_name)
        for f in tqdm(files, desc="Loading files", unit="file"):
            content = f.read_text(encoding="utf-8", errors="ignore")
            tx.put_file(
                repo.id, f.relative_to(root).as_posix(), content, sha=sha256_text(content)
            )
    log.info("Registered repository '%s' with id %d", name, repo.id)
    return repo.id


def main():
    parser = argparse.ArgumentParser(
        description="Register a local checkout as a repository in the content store."
    )
    parser.add_argument("input_dir", type=str, help="Repository checkout")
    parser.add_argument("--name", type=str, default="", help="Repository name")
    parser.add_argument("--full_name", type=str, default="", help="owner/name")
    parser.add_argument("--database_url", type=str, default=None)
    args = parser.parse_args()

    input_dir = Path(args.input_dir)
    if not input_dir.is_dir():
        log.error("Input directory does not exist: %s", input_dir)
        raise SystemExit(1)

    store = SqlDocumentStore(url=args.database_url)
    repo_id = register_directory(
        store, input_dir, name=args.name or input_dir.resolve().name, full_name=args.full_name
    )
    print(repo_id)


if __name__ == "__main__":
    main()
