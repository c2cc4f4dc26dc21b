"""Content addressing sub-package for markdown-provenance.

Derives the IPFS-compatible identifier that doubles as the dedup key for
local and remote lookups.
"""
from __future__ import annotations

from markdown_provenance.addressing.cid import ContentAddresser, identify

__all__ = [
    "ContentAddresser",
    "identify",
]
