from __future__ import annotations

import argparse
from pathlib import Path
from typing import List

import orjson
from pydantic import ValidationError

from common.logger import get_logger
from ingestion.document_models import FileChange
from ingestion.factory import build_pipeline

log = get_logger(__name__)


def load_changes(path: Path) -> List[FileChange]:
    """
    Read a change set: a JSON list of {"path", "action", "content"?} objects,
    or an object with such a list under "changes".
    """
    raw = orjson.loads(path.read_bytes())
    if isinstance(raw, dict):
        raw = raw.get("changes", [])
    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of changes in {path}")
    return [FileChange(**item) for item in raw]


def main():
    parser = argparse.ArgumentParser(
        description="Re-document the files touched by a change set."
    )
    parser.add_argument("repo_id", type=int, help="Repository id")
    parser.add_argument("changes_file", type=str, help="JSON file with file changes")
    parser.add_argument("--database_url", type=str, default=None)
    args = parser.parse_args()

    changes_file = Path(args.changes_file)
    if not changes_file.exists():
        log.error("Changes file does not exist: %s", changes_file)
        raise SystemExit(1)

    try:
        changes = load_changes(changes_file)
    except (ValueError, ValidationError) as e:
        log.error("Invalid changes file %s: %s", changes_file, e)
        raise SystemExit(1)

    pipeline = build_pipeline(database_url=args.database_url)
    result = pipeline.apply_changes(args.repo_id, changes)

    print(
        orjson.dumps(
            {
                "success": result.success,
                "updatedFiles": result.updated_files,
                "totalChanges": result.total_changes,
                "message": result.message,
                "fingerprintRoot": result.fingerprint_root,
            },
            option=orjson.OPT_INDENT_2,
        ).decode()
    )
    if not result.success:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
