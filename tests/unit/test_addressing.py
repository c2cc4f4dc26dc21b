"""Unit tests for markdown_provenance.addressing.cid."""
from __future__ import annotations

import string

import pytest

from markdown_provenance.addressing.cid import ContentAddresser, identify

EMPTY_CID = "bafkreihdwdcefgh4dqkjv67uzcmw7ojee6xedzdetojuzjevtenxquvyku"
HELLO_CID = "bafkreiabzdpejycnf55dat2qsy2ulivp6wgdh2oejipth7ols6h3ejgloq"


@pytest.fixture()
def addresser() -> ContentAddresser:
    return ContentAddresser()


class TestKnownIdentifiers:
    def test_empty_content(self, addresser: ContentAddresser) -> None:
        assert addresser.identify(b"") == EMPTY_CID

    def test_hello_heading(self, addresser: ContentAddresser) -> None:
        assert addresser.identify(b"# Hello") == HELLO_CID

    def test_module_shortcut_matches_class(self) -> None:
        assert identify(b"# Hello") == HELLO_CID


class TestIdentifierShape:
    def test_raw_sha256_prefix(self, addresser: ContentAddresser) -> None:
        assert addresser.identify(b"anything").startswith("bafkrei")

    def test_fixed_length(self, addresser: ContentAddresser) -> None:
        for size in (0, 1, 100, 10_000):
            assert len(addresser.identify(b"x" * size)) == 59

    def test_base32_lower_alphabet_without_padding(self, addresser: ContentAddresser) -> None:
        cid = addresser.identify(b"some markdown\n")
        allowed = set(string.ascii_lowercase + "234567")
        assert set(cid[1:]) <= allowed
        assert "=" not in cid


class TestDeterminism:
    def test_same_bytes_same_identifier(self, addresser: ContentAddresser) -> None:
        content = "# Title\n\nBody with unicode: café\n".encode("utf-8")
        assert addresser.identify(content) == addresser.identify(bytes(content))

    def test_independent_instances_agree(self) -> None:
        assert ContentAddresser().identify(b"abc") == ContentAddresser().identify(b"abc")

    def test_single_byte_change_changes_identifier(self, addresser: ContentAddresser) -> None:
        assert addresser.identify(b"# Hello") != addresser.identify(b"# Hellp")

    def test_trailing_newline_is_significant(self, addresser: ContentAddresser) -> None:
        assert addresser.identify(b"# Hello") != addresser.identify(b"# Hello\n")

    def test_many_similar_documents_are_distinct(self, addresser: ContentAddresser) -> None:
        cids = {addresser.identify(f"# Note {i}\n".encode()) for i in range(2000)}
        assert len(cids) == 2000
