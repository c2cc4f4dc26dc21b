"""Signing sub-package for markdown-provenance.

Loads the Arweave wallet, builds ANS-104 data items and submits them to
the Turbo upload service.
"""
from __future__ import annotations

from markdown_provenance.signing.data_item import DataItem, decode_tags, deep_hash, encode_tags
from markdown_provenance.signing.signer import ArweaveSigner
from markdown_provenance.signing.wallet import Wallet

__all__ = [
    "ArweaveSigner",
    "DataItem",
    "Wallet",
    "decode_tags",
    "deep_hash",
    "encode_tags",
]
