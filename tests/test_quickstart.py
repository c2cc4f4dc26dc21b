"""Test that the quickstart API works for markdown-provenance."""
from __future__ import annotations

from pathlib import Path

import pytest


def test_quickstart_import() -> None:
    import markdown_provenance

    assert markdown_provenance.__version__ == "0.1.0"


def test_quickstart_identify() -> None:
    from markdown_provenance import identify

    assert identify(b"# Hello") == "bafkreiabzdpejycnf55dat2qsy2ulivp6wgdh2oejipth7ols6h3ejgloq"


def test_quickstart_provenance_without_wallet(tmp_path: Path) -> None:
    from markdown_provenance import Provenance, ProvenanceConfig

    provenance = Provenance(ProvenanceConfig(data_dir=tmp_path))
    assert provenance.history() == []
    assert provenance.ledger.path == tmp_path / "transactions.jsonl"


def test_quickstart_missing_wallet_is_configuration_error(tmp_path: Path) -> None:
    from markdown_provenance import ConfigurationError, Provenance, ProvenanceConfig

    document = tmp_path / "post.md"
    document.write_text("# Post\n", encoding="utf-8")
    provenance = Provenance(ProvenanceConfig(data_dir=tmp_path))
    with pytest.raises(ConfigurationError, match="MP_WALLET_PATH"):
        provenance.upload_file(document)


def test_quickstart_missing_document(tmp_path: Path) -> None:
    from markdown_provenance import ContentNotFoundError, Provenance, ProvenanceConfig

    provenance = Provenance(ProvenanceConfig(data_dir=tmp_path))
    with pytest.raises(ContentNotFoundError):
        provenance.upload_file(tmp_path / "missing.md")


def test_quickstart_repr(tmp_path: Path) -> None:
    from markdown_provenance import Provenance, ProvenanceConfig

    text = repr(Provenance(ProvenanceConfig(data_dir=tmp_path)))
    assert "Provenance" in text


def test_quickstart_error_hierarchy() -> None:
    from markdown_provenance import (
        InsufficientFundsError,
        NameNotRegisteredError,
        PointerPublishError,
        ProvenanceError,
        SubmissionError,
    )

    assert issubclass(InsufficientFundsError, SubmissionError)
    assert issubclass(SubmissionError, ProvenanceError)
    assert issubclass(NameNotRegisteredError, PointerPublishError)
