"""
Binary hash tree (Merkle-style) over an ordered sequence of chunks.

Leaves are sha256 hex digests of the chunk texts. Each parent is the sha256 of
the concatenated hex strings of its two children; a trailing unpaired node is
paired with itself. Order matters: swapping two chunks changes the root.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from ingestion.hash_utils import sha256_pair, sha256_text

# Marks a tree without leaves. Not hex, so no digest can ever equal it.
EMPTY_ROOT = "empty"


@dataclass(frozen=True)
class Fingerprint:
    root: str
    hashes: List[str]

    @property
    def is_empty(self) -> bool:
        return self.root == EMPTY_ROOT


def hash_chunks(chunks: Sequence[str]) -> List[str]:
    return [sha256_text(c) for c in chunks]


def next_level(level: Sequence[str]) -> List[str]:
    parents: List[str] = []
    for i in range(0, len(level), 2):
        left = level[i]
        right = level[i + 1] if i + 1 < len(level) else left
        parents.append(sha256_pair(left, right))
    return parents


def merkle_root(hashes: Sequence[str]) -> str:
    if not hashes:
        return EMPTY_ROOT
    level = list(hashes)
    while len(level) > 1:
        level = next_level(level)
    return level[0]


def fingerprint(chunks: Sequence[str]) -> Fingerprint:
    hashes = hash_chunks(chunks)
    return Fingerprint(root=merkle_root(hashes), hashes=hashes)
