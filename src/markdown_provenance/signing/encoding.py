"""Base64url helpers (unpadded, as used throughout Arweave)."""
from __future__ import annotations

import base64


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64url_decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def int_to_bytes(value: int, length: int | None = None) -> bytes:
    """Big-endian encoding of a non-negative integer."""
    size = length if length is not None else max(1, (value.bit_length() + 7) // 8)
    return value.to_bytes(size, "big")


__all__ = [
    "b64url_decode",
    "b64url_encode",
    "int_to_bytes",
]
