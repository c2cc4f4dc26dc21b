"""Pointer sub-package for markdown-provenance.

Updates a mutable ArNS name so it resolves to the latest brain document.
"""
from __future__ import annotations

from markdown_provenance.pointer.publisher import PointerPublisher, PointerUpdate

__all__ = [
    "PointerPublisher",
    "PointerUpdate",
]
