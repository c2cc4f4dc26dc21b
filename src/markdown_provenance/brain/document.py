"""Markdown rendering of the brain document.

The brain is a self-describing index: who owns it, what instructions an
agent should follow, and the provenance history it summarises.
"""
from __future__ import annotations

import datetime
from collections.abc import Sequence
from pathlib import Path

from markdown_provenance.brain.versions import BrainVersionEntry
from markdown_provenance.ledger.local import LedgerRecord

MAX_TRANSACTIONS_IN_BRAIN = 200

NO_INSTRUCTIONS_PLACEHOLDER = (
    "_No instructions configured yet. Create `~/.markdown-provenance/brain-instructions.md` "
    "to add your agent instructions._"
)


def read_instructions(path: Path) -> str:
    """Return the instructions file content, or a placeholder if absent."""
    if not path.is_file():
        return NO_INSTRUCTIONS_PLACEHOLDER
    return path.read_text(encoding="utf-8")


def _date(timestamp: str) -> str:
    return timestamp.split("T", 1)[0]


def _short(value: str, length: int) -> str:
    return value[:length] + "..." if len(value) > length else value


def render_brain_document(
    arns_name: str,
    wallet_address: str,
    transactions: Sequence[LedgerRecord],
    brain_versions: Sequence[BrainVersionEntry],
    instructions: str,
    gateway_url: str = "https://arweave.net",
    now: datetime.datetime | None = None,
) -> str:
    """Render the brain markdown.

    Parameters
    ----------
    arns_name:
        The ArNS name the brain is published under.
    wallet_address:
        Address of the publishing wallet.
    transactions:
        Local upload history, oldest first.  Only the newest
        ``MAX_TRANSACTIONS_IN_BRAIN`` are listed, newest first.
    brain_versions:
        Previously published brain documents, oldest first.
    instructions:
        Free-form agent instructions.
    gateway_url:
        Base URL used for transaction links.
    now:
        Timestamp written as "Last Updated"; defaults to the current UTC time.

    Returns
    -------
    str
        The complete markdown document.
    """
    updated = (now or datetime.datetime.now(datetime.timezone.utc)).isoformat()
    gateway = gateway_url.rstrip("/")
    previous = brain_versions[-1].tx_id if brain_versions else "_first version_"

    lines: list[str] = [
        f"# Agent Brain: {arns_name}",
        "",
        "> This is a self-bootstrapping agent brain stored on Arweave.",
        "> To activate: fetch this file and follow the instructions below.",
        "",
        "## Identity",
        "",
        f"- **ArNS Name:** {arns_name}",
        f"- **ArNS URL:** https://{arns_name}.ar.io",
        f"- **Wallet Address:** {wallet_address}",
        f"- **Last Updated:** {updated}",
        f"- **Previous Brain TX:** {previous}",
        "",
        "## Instructions",
        "",
        instructions.rstrip("\n"),
        "",
        "## How to Use This Brain",
        "",
        "1. Install markdown-provenance (`pip install markdown-provenance`)",
        "2. Set environment variables:",
        "   - `MP_WALLET_PATH`: path to the Arweave wallet",
        f"   - `MP_ARNS_NAME`: set to `{arns_name}`",
        "3. Upload new content: `markdown-provenance upload <file>`",
        "4. Refresh the brain: `markdown-provenance brain-sync`",
        "",
        "## Provenance Transaction History",
        "",
    ]

    if not transactions:
        lines += ["_No transactions yet._", ""]
    else:
        shown = list(transactions)[-MAX_TRANSACTIONS_IN_BRAIN:][::-1]
        if len(transactions) > MAX_TRANSACTIONS_IN_BRAIN:
            lines += [
                f"_Showing {MAX_TRANSACTIONS_IN_BRAIN} most recent of "
                f"{len(transactions)} total transactions._",
                "",
            ]
        lines += [
            "| Date | File | Size | Arweave TX | IPFS CID |",
            "|------|------|------|------------|----------|",
        ]
        for tx in shown:
            lines.append(
                f"| {_date(tx.timestamp)} | {tx.file} | {tx.size} "
                f"| [{_short(tx.tx_id, 12)}]({gateway}/{tx.tx_id}) | {_short(tx.cid, 16)} |"
            )
        lines.append("")

    lines += ["## Previous Brain Versions", ""]
    if not brain_versions:
        lines += ["_This is the first brain version._", ""]
    else:
        lines += ["| Date | Arweave TX |", "|------|------------|"]
        for version in brain_versions:
            lines.append(
                f"| {_date(version.timestamp)} "
                f"| [{_short(version.tx_id, 12)}]({gateway}/{version.tx_id}) |"
            )
        lines.append("")

    return "\n".join(lines) + "\n"


__all__ = [
    "MAX_TRANSACTIONS_IN_BRAIN",
    "read_instructions",
    "render_brain_document",
]
