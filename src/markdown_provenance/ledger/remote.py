"""Remote dedup lookups against the Arweave GraphQL index.

Lookups are best-effort.  An unreachable gateway, an HTTP error or an
unexpected payload is logged as a warning and reported as "no match": a
missed dedup costs one redundant upload, whereas blocking on the index
would stop uploads entirely.  A match is only reported when the returned
transaction actually carries the requested tag value.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

import requests

from markdown_provenance.tags import CONTENT_ID_TAG, UploadTag

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TIMEOUT_SECONDS = 15.0

TAG_QUERY = """
query FindByTag($name: String!, $values: [String!]!, $first: Int!) {
  transactions(tags: [{ name: $name, values: $values }], first: $first) {
    edges {
      node {
        id
        tags {
          name
          value
        }
      }
    }
  }
}
"""


class _MalformedResponse(ValueError):
    """The GraphQL payload did not have the expected shape."""


@dataclass(frozen=True)
class RemoteMatch:
    """A transaction returned by the GraphQL index.

    Attributes
    ----------
    transaction_id:
        The Arweave transaction / data item id.
    tags:
        Tags the index reports for the transaction.
    """

    transaction_id: str
    tags: tuple[UploadTag, ...] = field(default_factory=tuple)

    def tag_value(self, name: str) -> str | None:
        for tag in self.tags:
            if tag.name == name:
                return tag.value
        return None


class RemoteLedgerQuery:
    """Read-only client for the Arweave GraphQL endpoint.

    Parameters
    ----------
    graphql_url:
        Full URL of the GraphQL endpoint.
    session:
        Optional ``requests.Session`` (injected in tests).
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        graphql_url: str = "https://arweave.net/graphql",
        session: requests.Session | None = None,
        timeout: float = DEFAULT_QUERY_TIMEOUT_SECONDS,
    ) -> None:
        self._url = graphql_url
        self._session = session or requests.Session()
        self._timeout = timeout

    def query(self, tag_name: str, values: list[str], first: int = 1) -> list[RemoteMatch]:
        """Return up to *first* transactions tagged ``tag_name`` in *values*.

        Raises
        ------
        requests.RequestException
            On transport or HTTP errors.
        ValueError
            If the response is not the expected GraphQL shape.
        """
        payload = {
            "query": TAG_QUERY,
            "variables": {"name": tag_name, "values": values, "first": first},
        }
        response = self._session.post(
            self._url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=self._timeout,
        )
        response.raise_for_status()
        return _parse_matches(response.json())[:first]

    def find_by_content_id(self, cid: str) -> RemoteMatch | None:
        """Return a transaction tagged ``IPFS-CID == cid``, or None.

        Never raises: every failure is logged and treated as no match.
        """
        try:
            matches = self.query(CONTENT_ID_TAG, [cid], first=1)
        except requests.RequestException as exc:
            logger.warning("Could not query Arweave GraphQL endpoint: %s", exc)
            return None
        except ValueError as exc:
            logger.warning("Unexpected response from Arweave GraphQL endpoint: %s", exc)
            return None

        for match in matches:
            if match.tag_value(CONTENT_ID_TAG) == cid:
                logger.debug("Remote match for %s: %s", cid, match.transaction_id)
                return match
        return None


def _parse_matches(body: object) -> list[RemoteMatch]:
    if not isinstance(body, dict):
        raise _MalformedResponse("response body is not a JSON object")
    if body.get("errors"):
        raise _MalformedResponse(f"GraphQL errors: {body['errors']}")
    try:
        edges = body["data"]["transactions"]["edges"]
    except (KeyError, TypeError) as exc:
        raise _MalformedResponse(f"missing transactions.edges ({exc})") from exc
    if not isinstance(edges, list):
        raise _MalformedResponse("transactions.edges is not a list")

    matches: list[RemoteMatch] = []
    for edge in edges:
        try:
            node = edge["node"]
            tags = tuple(UploadTag(t["name"], t["value"]) for t in node.get("tags") or [])
            matches.append(RemoteMatch(transaction_id=str(node["id"]), tags=tags))
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            raise _MalformedResponse(f"malformed transaction node ({exc})") from exc
    return matches


__all__ = [
    "RemoteLedgerQuery",
    "RemoteMatch",
]
