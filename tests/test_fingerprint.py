from __future__ import annotations

import hashlib

from ingestion.fingerprint import EMPTY_ROOT, fingerprint, merkle_root


def h(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def test_empty_sequence_uses_the_sentinel():
    fp = fingerprint([])

    assert fp.hashes == []
    assert fp.root == EMPTY_ROOT
    assert fp.is_empty
    assert len(EMPTY_ROOT) != 64


def test_single_chunk_root_is_its_hash():
    fp = fingerprint(["def main(): pass"])

    assert fp.root == h("def main(): pass")
    assert fp.hashes == [fp.root]


def test_two_leaves_hash_the_concatenated_hex_strings():
    h1, h2 = h("a"), h("b")
    assert fingerprint(["a", "b"]).root == h(h1 + h2)


def test_odd_level_duplicates_the_last_node():
    h1, h2, h3 = h("a"), h("b"), h("c")
    expected = h(h(h1 + h2) + h(h3 + h3))

    assert fingerprint(["a", "b", "c"]).root == expected


def test_five_leaves_duplicate_on_every_odd_level():
    leaves = [h(c) for c in "abcde"]
    l1 = [h(leaves[0] + leaves[1]), h(leaves[2] + leaves[3]), h(leaves[4] + leaves[4])]
    l2 = [h(l1[0] + l1[1]), h(l1[2] + l1[2])]

    assert merkle_root(leaves) == h(l2[0] + l2[1])


def test_hashes_follow_chunk_order():
    fp = fingerprint(["one", "two", "three"])
    assert fp.hashes == [h("one"), h("two"), h("three")]


def test_order_changes_the_root():
    assert fingerprint(["a", "b"]).root != fingerprint(["b", "a"]).root


def test_same_text_hashes_identically_at_any_position():
    fp = fingerprint(["x", "y", "x"])
    assert fp.hashes[0] == fp.hashes[2]


def test_fingerprint_is_deterministic():
    chunks = ["alpha", "beta", "gamma", "delta"]
    assert fingerprint(chunks) == fingerprint(list(chunks))
