from __future__ import annotations

import argparse

from common.logger import get_logger
from ingestion.factory import build_pipeline

log = get_logger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Generate documentation for every source file of a repository."
    )
    parser.add_argument("repo_id", type=int, help="Repository id")
    parser.add_argument(
        "--database_url",
        type=str,
        default=None,
        help="SQLAlchemy URL (defaults to DATABASE_URL / config.yaml)",
    )
    args = parser.parse_args()

    pipeline = build_pipeline(database_url=args.database_url)
    result = pipeline.generate_all(args.repo_id)

    if not result.success:
        log.error("Generation failed: %s", result.message)
        raise SystemExit(1)

    print(
        f"{result.message}: {result.processed_files} files "
        f"in {result.total_time_seconds:.2f}s"
    )


if __name__ == "__main__":
    main()
