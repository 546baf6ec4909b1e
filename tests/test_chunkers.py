from __future__ import annotations

import pytest

from ingestion.chunkers import Chunker, chunk_text, split_text
from ingestion.hash_utils import sha256_text


def _text(lines: int) -> str:
    return "".join(f"x{i:03d}" + "-" * 45 + "\n" for i in range(lines))


def _overlap(left: str, right: str) -> int:
    for k in range(min(len(left), len(right)), 0, -1):
        if left.endswith(right[:k]):
            return k
    return 0


def test_empty_text_yields_no_chunks():
    assert split_text("", chunk_size=100, overlap=10) == []


def test_short_text_is_a_single_verbatim_chunk():
    text = "  def f():\n    return 1\n"
    assert split_text(text, chunk_size=100, overlap=10) == [text]


def test_4500_characters_split_into_three_overlapping_chunks():
    text = _text(90)
    assert len(text) == 4500

    chunks = split_text(text, chunk_size=2000, overlap=200)

    assert len(chunks) == 3
    assert all(len(c) <= 2000 for c in chunks)
    assert len(chunks[0]) > 1900 and len(chunks[1]) > 1900
    assert len(chunks[2]) < 1000
    assert chunks[0].startswith("x000")
    assert chunks[2].endswith("x089" + "-" * 45)


def test_neighbouring_chunks_overlap_by_at_most_the_configured_amount():
    chunks = split_text(_text(90), chunk_size=2000, overlap=200)

    for left, right in zip(chunks, chunks[1:]):
        shared = _overlap(left, right)
        assert 0 < shared <= 200


def test_boundaries_fall_on_line_breaks():
    chunks = split_text(_text(90), chunk_size=2000, overlap=200)

    for c in chunks:
        assert c.startswith("x")
        assert c.endswith("-")


def test_paragraph_breaks_are_preferred_over_line_breaks():
    para_a = "a = 1\n" * 10
    para_b = "b = 2\n" * 10
    chunks = split_text(para_a + "\n" + para_b, chunk_size=70, overlap=0)

    assert chunks == [para_a.strip(), para_b.strip()]


def test_split_is_deterministic():
    text = _text(200)
    assert split_text(text, 500, 50) == split_text(text, 500, 50)


def test_zero_overlap_produces_disjoint_chunks():
    chunks = split_text(_text(90), chunk_size=2000, overlap=0)

    assert "".join(chunks).count("x040") == 1


@pytest.mark.parametrize("size, overlap", [(0, 0), (100, 100), (100, 150), (100, -1)])
def test_invalid_sizes_are_rejected(size, overlap):
    with pytest.raises(ValueError):
        Chunker(chunk_size=size, overlap=overlap)


def test_defaults_come_from_config():
    chunker = Chunker()
    assert chunker.chunk_size == 2000
    assert chunker.overlap == 200


def test_chunk_text_indexes_and_hashes_each_piece():
    chunks = chunk_text(_text(90), chunk_size=2000, overlap=200)

    assert [c.index for c in chunks] == [0, 1, 2]
    assert all(c.content_sha256 == sha256_text(c.text) for c in chunks)
