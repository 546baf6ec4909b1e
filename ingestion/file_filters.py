from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from common.config import yaml_config
from ingestion.document_models import FileContent


def is_documentable(
    path: str,
    valid_exts: Optional[Sequence[str]] = None,
    ignore_patterns: Optional[Sequence[str]] = None,
) -> bool:
    """
    True when the path has a recognised source extension and contains none of
    the ignored substrings (build output, dependencies, VCS metadata).
    Substring matching is deliberate: "build" also excludes "src/build_utils.py".
    """
    exts = valid_exts if valid_exts is not None else yaml_config.files.valid_exts
    ignored = (
        ignore_patterns if ignore_patterns is not None else yaml_config.files.ignore_patterns
    )
    has_valid_ext = any(path.endswith(ext) for ext in exts)
    should_ignore = any(pattern in path for pattern in ignored)
    return has_valid_ext and not should_ignore


def filter_documentable(
    files: Iterable[FileContent],
    valid_exts: Optional[Sequence[str]] = None,
    ignore_patterns: Optional[Sequence[str]] = None,
) -> List[FileContent]:
    return [
        f for f in files if is_documentable(f.path, valid_exts, ignore_patterns)
    ]
