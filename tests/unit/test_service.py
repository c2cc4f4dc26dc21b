"""Unit tests for markdown_provenance.service.ProvenanceService.

The remote index and the upload service are replaced by in-memory fakes;
the local ledger is real and lives in ``tmp_path``.
"""
from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from markdown_provenance.errors import InsufficientFundsError, LedgerStorageError
from markdown_provenance.ledger.local import LedgerRecord, LocalLedger
from markdown_provenance.ledger.remote import RemoteMatch
from markdown_provenance.service import DedupSource, ProvenanceService
from markdown_provenance.tags import UploadTag

HELLO = b"# Hello"
HELLO_CID = "bafkreiabzdpejycnf55dat2qsy2ulivp6wgdh2oejipth7ols6h3ejgloq"


class FakeRemote:
    def __init__(self, match: RemoteMatch | None = None) -> None:
        self.match = match
        self.lookups: list[str] = []

    def find_by_content_id(self, cid: str) -> RemoteMatch | None:
        self.lookups.append(cid)
        return self.match


class FakeSubmitter:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.submissions: list[tuple[bytes, list[UploadTag]]] = []

    def submit(self, content: bytes, tags: Sequence[UploadTag]) -> str:
        if self.error is not None:
            raise self.error
        self.submissions.append((content, list(tags)))
        return f"tx-{len(self.submissions)}"


@pytest.fixture()
def ledger(tmp_path: Path) -> LocalLedger:
    return LocalLedger(tmp_path / "transactions.jsonl")


@pytest.fixture()
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture()
def submitter() -> FakeSubmitter:
    return FakeSubmitter()


@pytest.fixture()
def service(
    ledger: LocalLedger, remote: FakeRemote, submitter: FakeSubmitter
) -> ProvenanceService:
    return ProvenanceService(
        local_ledger=ledger,
        remote=remote,
        submitter=submitter,
        app_version="9.9.9",
        gateway_url="https://gw.example/",
        viewblock_url="https://explorer.example/tx",
    )


def _tag_dict(tags: Sequence[UploadTag]) -> dict[str, str]:
    return {tag.name: tag.value for tag in tags}


# ---------------------------------------------------------------------------
# New uploads
# ---------------------------------------------------------------------------


class TestNewUpload:
    def test_hello_document(
        self,
        service: ProvenanceService,
        ledger: LocalLedger,
        submitter: FakeSubmitter,
    ) -> None:
        result = service.upload(HELLO, "hello.md")

        assert result.already_exists is False
        assert result.source is None
        assert result.ipfs_cid == HELLO_CID
        assert result.file_size == 7
        assert result.transaction_id == "tx-1"
        assert result.arweave_url == "https://gw.example/tx-1"
        assert result.viewblock_url == "https://explorer.example/tx/tx-1"

        content, tags = submitter.submissions[0]
        assert content == HELLO
        assert _tag_dict(tags)["IPFS-CID"] == HELLO_CID

        record = ledger.find_by_content_id(HELLO_CID)
        assert record is not None
        assert record.tx_id == "tx-1"
        assert record.file == "hello.md"
        assert record.size == 7

    def test_submitted_tags(self, service: ProvenanceService, submitter: FakeSubmitter) -> None:
        service.upload(
            HELLO,
            "hello.md",
            author="Ada",
            extra_tags=[UploadTag("File-Name", "greeting"), UploadTag("Source", "https://x.y")],
        )
        tags = _tag_dict(submitter.submissions[0][1])
        assert tags == {
            "Content-Type": "text/markdown",
            "App-Name": "Markdown Provenance",
            "App-Version": "9.9.9",
            "Type": "Attestation",
            "Author": "Ada",
            "File-Name": "greeting",
            "Source": "https://x.y",
            "IPFS-CID": HELLO_CID,
        }

    def test_content_id_tag_cannot_be_forged(
        self, service: ProvenanceService, submitter: FakeSubmitter
    ) -> None:
        service.upload(HELLO, "hello.md", extra_tags=[UploadTag("IPFS-CID", "bafk-forged")])
        tags = submitter.submissions[0][1]
        content_ids = [t.value for t in tags if t.name == "IPFS-CID"]
        assert content_ids == [HELLO_CID]

    def test_record_stores_submitted_tags(
        self, service: ProvenanceService, ledger: LocalLedger
    ) -> None:
        service.upload(HELLO, "hello.md", author="Ada")
        record = ledger.find_by_content_id(HELLO_CID)
        assert record is not None
        assert record.tags["Author"] == "Ada"
        assert record.tags["IPFS-CID"] == HELLO_CID

    def test_distinct_contents_each_get_a_record(
        self, service: ProvenanceService, ledger: LocalLedger, submitter: FakeSubmitter
    ) -> None:
        for i in range(10):
            service.upload(f"# Note {i}\n".encode(), f"note-{i}.md")
        assert len(submitter.submissions) == 10
        assert len(ledger) == 10

    def test_empty_document(self, service: ProvenanceService) -> None:
        result = service.upload(b"", "empty.md")
        assert result.file_size == 0
        assert result.ipfs_cid == "bafkreihdwdcefgh4dqkjv67uzcmw7ojee6xedzdetojuzjevtenxquvyku"


# ---------------------------------------------------------------------------
# Deduplication
# ---------------------------------------------------------------------------


class TestLocalDedup:
    def test_second_upload_is_idempotent(
        self,
        service: ProvenanceService,
        submitter: FakeSubmitter,
        remote: FakeRemote,
        ledger: LocalLedger,
    ) -> None:
        first = service.upload(HELLO, "hello.md")
        second = service.upload(HELLO, "renamed.md")

        assert len(submitter.submissions) == 1
        assert second.already_exists is True
        assert second.source is DedupSource.LOCAL
        assert second.transaction_id == first.transaction_id
        assert second.ipfs_cid == first.ipfs_cid
        assert len(ledger) == 1
        # Local hit answers without the network.
        assert remote.lookups == [HELLO_CID]

    def test_preexisting_record_is_used(
        self, service: ProvenanceService, submitter: FakeSubmitter, ledger: LocalLedger
    ) -> None:
        ledger.append(
            LedgerRecord(
                file="old.md", tx_id="tx-old", url="https://v/tx-old", cid=HELLO_CID, size=7
            )
        )
        result = service.upload(HELLO, "hello.md")
        assert result.transaction_id == "tx-old"
        assert result.viewblock_url == "https://v/tx-old"
        assert submitter.submissions == []

    def test_skip_dedup_always_submits(
        self, service: ProvenanceService, submitter: FakeSubmitter
    ) -> None:
        service.upload(HELLO, "hello.md")
        result = service.upload(HELLO, "hello.md", skip_dedup=True)
        assert result.already_exists is False
        assert len(submitter.submissions) == 2


class TestRemoteDedup:
    def test_remote_hit_skips_submission(
        self,
        service: ProvenanceService,
        remote: FakeRemote,
        submitter: FakeSubmitter,
    ) -> None:
        remote.match = RemoteMatch("tx-remote", (UploadTag("IPFS-CID", HELLO_CID),))
        result = service.upload(HELLO, "hello.md")

        assert submitter.submissions == []
        assert result.already_exists is True
        assert result.source is DedupSource.REMOTE
        assert result.transaction_id == "tx-remote"
        assert result.file_size == 7

    def test_remote_hit_is_cached_locally(
        self,
        service: ProvenanceService,
        remote: FakeRemote,
        ledger: LocalLedger,
    ) -> None:
        remote.match = RemoteMatch("tx-remote", (UploadTag("IPFS-CID", HELLO_CID),))
        service.upload(HELLO, "hello.md")
        record = ledger.find_by_content_id(HELLO_CID)
        assert record is not None
        assert record.tx_id == "tx-remote"

        remote.match = None
        again = service.upload(HELLO, "hello.md")
        assert again.source is DedupSource.LOCAL
        assert len(remote.lookups) == 1

    def test_remote_hit_not_cached_when_disabled(
        self,
        ledger: LocalLedger,
        remote: FakeRemote,
        submitter: FakeSubmitter,
    ) -> None:
        service = ProvenanceService(ledger, remote, submitter, cache_remote_hits=False)
        remote.match = RemoteMatch("tx-remote", (UploadTag("IPFS-CID", HELLO_CID),))
        service.upload(HELLO, "hello.md")
        assert len(ledger) == 0

    def test_remote_miss_submits(
        self, service: ProvenanceService, remote: FakeRemote, submitter: FakeSubmitter
    ) -> None:
        result = service.upload(HELLO, "hello.md")
        assert remote.lookups == [HELLO_CID]
        assert len(submitter.submissions) == 1
        assert result.already_exists is False


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_failed_submission_writes_no_record(
        self, ledger: LocalLedger, remote: FakeRemote
    ) -> None:
        submitter = FakeSubmitter(error=InsufficientFundsError("no credits", status_code=402))
        service = ProvenanceService(ledger, remote, submitter)
        with pytest.raises(InsufficientFundsError):
            service.upload(HELLO, "hello.md")
        assert len(ledger) == 0
        assert not ledger.path.exists()

    def test_retry_after_failure_submits_again(
        self, ledger: LocalLedger, remote: FakeRemote
    ) -> None:
        submitter = FakeSubmitter(error=InsufficientFundsError("no credits"))
        service = ProvenanceService(ledger, remote, submitter)
        with pytest.raises(InsufficientFundsError):
            service.upload(HELLO, "hello.md")
        submitter.error = None
        result = service.upload(HELLO, "hello.md")
        assert result.already_exists is False
        assert len(ledger) == 1

    def test_ledger_failure_after_upload_is_raised(
        self, tmp_path: Path, remote: FakeRemote, submitter: FakeSubmitter
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        service = ProvenanceService(LocalLedger(blocker / "tx.jsonl"), remote, submitter)
        with pytest.raises(LedgerStorageError):
            service.upload(HELLO, "hello.md")
        assert len(submitter.submissions) == 1


# ---------------------------------------------------------------------------
# submit_fresh and result serialisation
# ---------------------------------------------------------------------------


class TestSubmitFresh:
    def test_no_dedup_and_no_record(
        self,
        service: ProvenanceService,
        submitter: FakeSubmitter,
        remote: FakeRemote,
        ledger: LocalLedger,
    ) -> None:
        service.submit_fresh(HELLO, [])
        service.submit_fresh(HELLO, [])
        assert len(submitter.submissions) == 2
        assert remote.lookups == []
        assert len(ledger) == 0

    def test_doc_type_overrides_type_tag(
        self, service: ProvenanceService, submitter: FakeSubmitter
    ) -> None:
        service.submit_fresh(HELLO, [UploadTag("ArNS-Name", "demo")], doc_type="Agent-Brain")
        tags = _tag_dict(submitter.submissions[0][1])
        assert tags["Type"] == "Agent-Brain"
        assert tags["ArNS-Name"] == "demo"
        assert tags["IPFS-CID"] == HELLO_CID


class TestUploadResult:
    def test_to_dict_keys(self, service: ProvenanceService) -> None:
        data = service.upload(HELLO, "hello.md").to_dict()
        assert data == {
            "transactionId": "tx-1",
            "viewblockUrl": "https://explorer.example/tx/tx-1",
            "arweaveUrl": "https://gw.example/tx-1",
            "ipfsCid": HELLO_CID,
            "fileSize": 7,
            "alreadyExists": False,
            "source": None,
        }

    def test_to_dict_source_value(self, service: ProvenanceService) -> None:
        service.upload(HELLO, "hello.md")
        assert service.upload(HELLO, "hello.md").to_dict()["source"] == "local"
