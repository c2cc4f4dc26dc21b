"""End-to-end tests for markdown_provenance.convenience.Provenance.

A real wallet, real signing and a real local log; only HTTP is mocked,
routed by URL.
"""
from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from markdown_provenance import ProvenanceConfig
from markdown_provenance.brain.sync import SyncStatus
from markdown_provenance.convenience import Provenance, is_markdown, read_document
from markdown_provenance.errors import ConfigurationError, ContentNotFoundError
from markdown_provenance.signing.encoding import b64url_encode

HELLO_CID = "bafkreiabzdpejycnf55dat2qsy2ulivp6wgdh2oejipth7ols6h3ejgloq"
ANT_PROCESS = b64url_encode(b"\x33" * 32)


@pytest.fixture()
def session(response_factory: Callable[..., requests.Response]) -> MagicMock:
    session = MagicMock(spec=requests.Session)
    uploads: list[bytes] = []

    def post(url: str, **kwargs: object) -> requests.Response:
        if url.endswith("/graphql"):
            return response_factory(200, {"data": {"transactions": {"edges": []}}})
        if url.endswith("/v1/tx"):
            uploads.append(kwargs["data"])  # type: ignore[arg-type]
            return response_factory(200, {"id": f"tx-{len(uploads)}"})
        if url.endswith("/dry-run"):
            return response_factory(
                200, {"Messages": [{"Data": json.dumps({"processId": ANT_PROCESS})}]}
            )
        return response_factory(200, {"id": "msg-1"})

    session.post.side_effect = post
    session.get.return_value = response_factory(200, {"Messages": []})
    session.uploads = uploads
    return session


@pytest.fixture()
def config(tmp_path: Path, wallet_file: Path) -> ProvenanceConfig:
    return ProvenanceConfig(
        wallet_path=wallet_file,
        author="Ada",
        arns_name="demo",
        data_dir=tmp_path / "home",
    )


@pytest.fixture()
def document(tmp_path: Path) -> Path:
    path = tmp_path / "hello.md"
    path.write_bytes(b"# Hello")
    return path


class TestHelpers:
    def test_read_document(self, document: Path) -> None:
        assert read_document(document) == b"# Hello"

    def test_read_missing_document(self, tmp_path: Path) -> None:
        with pytest.raises(ContentNotFoundError, match="File not found"):
            read_document(tmp_path / "nope.md")

    def test_directory_is_not_a_document(self, tmp_path: Path) -> None:
        with pytest.raises(ContentNotFoundError):
            read_document(tmp_path)

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("a.md", True), ("a.MARKDOWN", True), ("a.txt", False), ("md", False)],
    )
    def test_is_markdown(self, name: str, expected: bool) -> None:
        assert is_markdown(Path(name)) is expected


class TestUploadFile:
    def test_upload_then_dedup(
        self, config: ProvenanceConfig, session: MagicMock, document: Path
    ) -> None:
        provenance = Provenance(config, session=session)

        first = provenance.upload_file(document)
        second = provenance.upload_file(document)

        assert first.already_exists is False
        assert first.ipfs_cid == HELLO_CID
        assert second.already_exists is True
        assert second.transaction_id == first.transaction_id
        assert len(session.uploads) == 1
        assert len(provenance.history()) == 1

    def test_configured_author_and_extra_tags(
        self, config: ProvenanceConfig, session: MagicMock, document: Path
    ) -> None:
        provenance = Provenance(config, session=session)
        provenance.upload_file(document, file_name="greeting", source="https://x.y")
        record = provenance.history()[0]
        assert record.tags["Author"] == "Ada"
        assert record.tags["File-Name"] == "greeting"
        assert record.tags["Source"] == "https://x.y"
        assert record.file == "hello.md"

    def test_explicit_author_wins(
        self, config: ProvenanceConfig, session: MagicMock, document: Path
    ) -> None:
        provenance = Provenance(config, session=session)
        provenance.upload_file(document, author="Grace")
        assert provenance.history()[0].tags["Author"] == "Grace"

    def test_missing_wallet_makes_no_request(
        self, tmp_path: Path, session: MagicMock, document: Path
    ) -> None:
        provenance = Provenance(ProvenanceConfig(data_dir=tmp_path / "home"), session=session)
        with pytest.raises(ConfigurationError):
            provenance.upload_file(document)
        session.post.assert_not_called()

    def test_signer_is_cached(self, config: ProvenanceConfig, session: MagicMock) -> None:
        provenance = Provenance(config, session=session)
        assert provenance.signer() is provenance.signer()


class TestBrainSync:
    def test_brain_sync_updates_pointer(
        self, config: ProvenanceConfig, session: MagicMock, document: Path
    ) -> None:
        provenance = Provenance(config, session=session)
        provenance.upload_file(document)
        outcome = provenance.brain_sync()

        assert outcome.status is SyncStatus.PRIMARY_SUCCEEDED
        assert outcome.transaction_count == 1
        assert outcome.pointer is not None
        assert outcome.pointer.process_id == ANT_PROCESS
        assert (config.data_dir / "brain-versions.jsonl").is_file()
        # The brain is not part of the document history.
        assert len(provenance.history()) == 1

    def test_brain_sync_requires_arns_name(
        self, tmp_path: Path, wallet_file: Path, session: MagicMock
    ) -> None:
        config = ProvenanceConfig(wallet_path=wallet_file, data_dir=tmp_path / "home")
        with pytest.raises(ConfigurationError, match="MP_ARNS_NAME"):
            Provenance(config, session=session).brain_sync()
        session.post.assert_not_called()
