"""CLI entry point for markdown-provenance.

Invoked as::

    markdown-provenance [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m markdown_provenance.cli.main

Commands
--------
- ``upload``      Upload a markdown file to Arweave (deduplicated).
- ``cid``         Print the IPFS content identifier of a file.
- ``history``     Show the local transaction log.
- ``brain-sync``  Publish the brain document and update its ArNS name.
- ``version``     Show version information.
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from markdown_provenance.errors import (
    ConnectivityError,
    InsufficientFundsError,
    ProvenanceError,
)

if TYPE_CHECKING:
    from markdown_provenance.convenience import Provenance

console = Console()
err_console = Console(stderr=True)

_LOG_HANDLER_NAME = "markdown-provenance-cli"


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("markdown_provenance")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(h.get_name() == _LOG_HANDLER_NAME for h in package_logger.handlers):
        handler = RichHandler(console=err_console, show_time=False, show_path=False)
        handler.set_name(_LOG_HANDLER_NAME)
        package_logger.addHandler(handler)


def _load_provenance() -> Provenance:
    from markdown_provenance.config import ProvenanceConfig
    from markdown_provenance.convenience import Provenance

    return Provenance(ProvenanceConfig.load())


def _fail(title: str, exc: ProvenanceError) -> None:
    err_console.print(f"\n[bold red]{title}[/bold red]\n")
    err_console.print(str(exc), markup=False, highlight=False)
    if isinstance(exc, InsufficientFundsError):
        err_console.print(
            "\n[yellow]Hint:[/yellow] Files over 100KB require Turbo credits. Fund your wallet."
        )
    elif isinstance(exc, ConnectivityError):
        err_console.print(
            "\n[yellow]Hint:[/yellow] Check your internet connection and try again."
        )
    sys.exit(1)


@click.group()
@click.version_option(package_name="markdown-provenance")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Permanent, verifiable provenance records for markdown documents"""
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from markdown_provenance import __version__

    console.print(f"[bold]markdown-provenance[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# cid
# ---------------------------------------------------------------------------


@cli.command(name="cid")
@click.argument("file_path", type=click.Path(path_type=Path))
def cid_command(file_path: Path) -> None:
    """Print the IPFS CID (v1, raw, sha2-256) of FILE_PATH."""
    from markdown_provenance.addressing.cid import identify
    from markdown_provenance.convenience import read_document

    try:
        content = read_document(file_path)
    except ProvenanceError as exc:
        _fail("Could not read file:", exc)
        return
    click.echo(identify(content))


# ---------------------------------------------------------------------------
# upload
# ---------------------------------------------------------------------------


@cli.command(name="upload")
@click.argument("file_path", type=click.Path(path_type=Path))
@click.option("--author", "-a", default=None, help="Author tag. Overrides MP_AUTHOR.")
@click.option(
    "--file-name",
    "--fileName",
    "file_name",
    default=None,
    help="Custom File-Name tag for later lookup.",
)
@click.option("--source", "-s", default=None, help="Source tag (URL or URI of the original).")
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output results as JSON.",
)
def upload_command(
    file_path: Path,
    author: str | None,
    file_name: str | None,
    source: str | None,
    json_output: bool,
) -> None:
    """Upload a markdown file to Arweave, skipping content already uploaded.

    Examples:

    \b
        markdown-provenance upload post.md
        markdown-provenance upload post.md --author "Ada Lovelace"
        markdown-provenance upload post.md --fileName essay-v2 --source https://example.com/essay
    """
    from markdown_provenance.addressing.cid import identify
    from markdown_provenance.convenience import is_markdown, read_document
    from markdown_provenance.service import DedupSource

    try:
        content = read_document(file_path)
        provenance = _load_provenance()
        # Wallet problems surface here, before any network request.
        provenance.signer()
    except ProvenanceError as exc:
        _fail("Upload failed:", exc)
        return

    if not is_markdown(file_path):
        err_console.print(
            f"[yellow]Warning:[/yellow] File extension {file_path.suffix!r} is not .md or .markdown"
        )

    if not json_output:
        console.print(f"IPFS CID: {identify(content)}")
        console.print("Checking for existing upload...")

    try:
        result = provenance.upload_file(
            file_path, author=author, file_name=file_name, source=source
        )
    except ProvenanceError as exc:
        _fail("Upload failed:", exc)
        return

    if json_output:
        console.print_json(json.dumps(result.to_dict(), indent=2))
        return

    if result.already_exists:
        where = "local log" if result.source is DedupSource.LOCAL else "Arweave network"
        console.print(
            Panel(
                f"Content already exists on Arweave (found in {where}).\n"
                "This exact content was previously uploaded. No new upload needed.",
                title="[green]Already uploaded[/green]",
                expand=False,
            )
        )
    else:
        console.print(
            Panel(
                f"Transaction logged to {provenance.ledger.path}",
                title="[green]Upload successful[/green]",
                expand=False,
            )
        )
    console.print(f"  Transaction ID     : {result.transaction_id}")
    console.print(f"  View on ViewBlock  : {result.viewblock_url}")
    console.print(f"  Direct Arweave URL : {result.arweave_url}")
    console.print(f"  IPFS CID           : {result.ipfs_cid}")
    console.print(f"  File size          : {result.file_size} bytes")


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------


@cli.command(name="history")
@click.option(
    "--limit",
    "-n",
    default=20,
    type=click.IntRange(min=0),
    help="Show at most this many recent records (0 for all).",
    show_default=True,
)
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output results as JSON.",
)
def history_command(limit: int, json_output: bool) -> None:
    """Show uploads recorded in the local transaction log."""
    try:
        provenance = _load_provenance()
        records = provenance.history()
    except ProvenanceError as exc:
        _fail("Could not read history:", exc)
        return

    shown = records[-limit:] if limit else records

    if json_output:
        console.print_json(
            json.dumps([r.model_dump(mode="json", by_alias=True) for r in shown], indent=2)
        )
        return

    if not records:
        console.print("[dim]No uploads recorded yet.[/dim]")
        return

    table = Table(title=f"Provenance history ({len(shown)} of {len(records)})", show_header=True)
    table.add_column("Date", style="cyan")
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Arweave TX")
    table.add_column("IPFS CID", style="dim")
    for record in reversed(shown):
        table.add_row(
            record.timestamp.split("T", 1)[0],
            record.file,
            str(record.size),
            record.tx_id,
            record.cid,
        )
    console.print(table)


# ---------------------------------------------------------------------------
# brain-sync
# ---------------------------------------------------------------------------


@cli.command(name="brain-sync")
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output results as JSON.",
)
def brain_sync_command(json_output: bool) -> None:
    """Upload a fresh brain document and point the ArNS name at it.

    Requires MP_WALLET_PATH and MP_ARNS_NAME.  A failed ArNS update is
    reported as a warning; the brain upload itself still succeeds.
    """
    from markdown_provenance.brain.sync import SyncStatus

    try:
        provenance = _load_provenance()
        outcome = provenance.brain_sync()
    except ProvenanceError as exc:
        _fail("Brain sync failed:", exc)
        return

    upload = outcome.upload
    if json_output:
        output: dict[str, object] = {
            "status": outcome.status.value,
            "arnsName": outcome.arns_name,
            "transactionCount": outcome.transaction_count,
            "upload": upload.to_dict(),
            "pointerMessageId": outcome.pointer.message_id if outcome.pointer else None,
            "pointerError": outcome.pointer_error,
        }
        console.print_json(json.dumps(output, indent=2))
        return

    console.print(f"Brain uploaded: {upload.arweave_url}")
    console.print(f"  Transactions : {outcome.transaction_count}")
    console.print(f"  IPFS CID     : {upload.ipfs_cid}")
    console.print(f"  Size         : {upload.file_size} bytes")

    if outcome.status is SyncStatus.POINTER_FAILED:
        err_console.print(
            f"\n[yellow]Warning:[/yellow] ArNS update failed: {outcome.pointer_error}"
        )
        err_console.print(
            "The brain was uploaded successfully to Arweave, "
            "but the ArNS pointer was not updated.\n"
            f"Brain TX: {upload.transaction_id}\n\n"
            "Common causes:\n"
            f"  - Your wallet ({provenance.signer().address}) is not an owner or controller "
            "of the ArNS name's ANT process\n"
            "  - The ArNS name is not registered or has expired\n"
            "  - Network connectivity issue (retry with: markdown-provenance brain-sync)",
            markup=False,
            highlight=False,
        )
    elif outcome.pointer is not None:
        console.print(f"\nArNS updated! Message: {outcome.pointer.message_id}")
        console.print(f"Brain accessible at: {outcome.pointer.url}")

    console.print("\n[green]Brain sync complete.[/green]")


if __name__ == "__main__":
    cli()
