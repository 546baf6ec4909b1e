import hashlib


def sha256_text(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def sha256_pair(left: str, right: str) -> str:
    """Parent node of two hex digests: hash of their string concatenation."""
    return sha256_text(left + right)
