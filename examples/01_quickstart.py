#!/usr/bin/env python3
"""Example: Quickstart for markdown-provenance

Compute the content identifier of a markdown file, upload it to Arweave
unless it is already there, and print the local history.

Usage:
    export MP_WALLET_PATH=/path/to/wallet.json
    python examples/01_quickstart.py post.md

Requirements:
    pip install markdown-provenance
"""
from __future__ import annotations

import sys
from pathlib import Path

import markdown_provenance
from markdown_provenance import (
    InsufficientFundsError,
    Provenance,
    ProvenanceError,
    identify,
)


def main() -> None:
    print(f"markdown-provenance version: {markdown_provenance.__version__}")
    if len(sys.argv) != 2:
        print("usage: 01_quickstart.py FILE")
        sys.exit(2)
    document = Path(sys.argv[1])

    # Step 1: The identifier is derived from the bytes alone
    print(f"IPFS CID: {identify(document.read_bytes())}")

    # Step 2: Upload (skipped when the content is already on Arweave)
    provenance = Provenance()
    try:
        result = provenance.upload_file(document, author="Quickstart")
    except InsufficientFundsError as exc:
        print(f"Upload needs Turbo credits: {exc}")
        sys.exit(1)
    except ProvenanceError as exc:
        print(f"Upload failed: {exc}")
        sys.exit(1)

    status = "already on Arweave" if result.already_exists else "uploaded"
    print(f"\n{document.name}: {status}")
    print(f"  Transaction: {result.transaction_id}")
    print(f"  Gateway:     {result.arweave_url}")

    # Step 3: Local history
    print("\nHistory:")
    for record in provenance.history()[-5:]:
        print(f"  {record.timestamp[:10]}  {record.file:<24} {record.tx_id}")


if __name__ == "__main__":
    main()
