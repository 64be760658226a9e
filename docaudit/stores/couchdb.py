"""CouchDB implementations of the store interfaces.

Talks to the CouchDB HTTP API with httpx. One CouchDBClient holds the
connection to a server and hands out CouchDBDatabase handles, which act
as both primary and audit stores.

Usage:
    async with CouchDBClient("http://localhost:5984") as client:
        docs = client.database("medic")
        ids = await client.allocate(1)
"""

from typing import Any
from urllib.parse import quote

import httpx

from docaudit.observability.logging import get_logger
from docaudit.stores.store import (
    AuditStore,
    DocumentConflictError,
    DocumentNotFoundError,
    IdentifierAllocator,
    PrimaryStore,
    StoreError,
)

logger = get_logger(__name__)


def _quote_id(doc_id: str) -> str:
    # Design documents keep their slash, everything else is fully escaped
    if str(doc_id).startswith("_design/"):
        return "_design/" + quote(str(doc_id)[len("_design/"):], safe="")
    return quote(str(doc_id), safe="")


class CouchDBClient(IdentifierAllocator):
    """Async connection to a CouchDB server.

    Attributes:
        base_url: Server URL
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5984",
        username: str | None = None,
        password: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Server URL
            username: Basic auth user, if the server requires it
            password: Basic auth password
            timeout: Request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        auth = httpx.BasicAuth(username, password or "") if username else None
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "CouchDBClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def database(self, name: str) -> "CouchDBDatabase":
        """Get a handle to a database on this server."""
        return CouchDBDatabase(self, name)

    async def request(
        self,
        method: str,
        path: str,
        *,
        doc_id: str | None = None,
        json: Any = None,
        params: dict | None = None,
    ) -> Any:
        """Make a CouchDB request and decode the JSON body.

        Raises:
            DocumentNotFoundError: On HTTP 404
            DocumentConflictError: On HTTP 409
            StoreError: On any other failure
        """
        try:
            response = await self._client.request(
                method=method,
                url=path,
                headers={"Accept": "application/json"},
                json=json,
                params=params,
            )
        except httpx.HTTPError as e:
            logger.error("couchdb_request_failed", method=method, path=path, error=str(e))
            raise StoreError(f"CouchDB request failed: {e}", doc_id=doc_id) from e

        if response.status_code >= 400:
            try:
                error_data = response.json()
                message = f"{error_data.get('error')}: {error_data.get('reason')}"
            except ValueError:
                message = response.text

            if response.status_code == 404:
                raise DocumentNotFoundError(message, doc_id=doc_id, status_code=404)
            if response.status_code == 409:
                raise DocumentConflictError(message, doc_id=doc_id, status_code=409)
            raise StoreError(message, doc_id=doc_id, status_code=response.status_code)

        return response.json()

    async def allocate(self, count: int = 1) -> list[str]:
        """Fetch fresh ids from the server's uuid generator."""
        data = await self.request("GET", "/_uuids", params={"count": count})
        return list(data.get("uuids", []))


class CouchDBDatabase(PrimaryStore, AuditStore):
    """One CouchDB database, usable as primary and audit store."""

    def __init__(self, client: CouchDBClient, name: str) -> None:
        self.client = client
        self.name = name
        self._path = "/" + quote(name, safe="")

    def __repr__(self) -> str:
        return f"CouchDBDatabase(name={self.name!r})"

    async def get_doc(self, doc_id: str) -> dict[str, Any]:
        """Get the current state of a document."""
        return await self.client.request(
            "GET", f"{self._path}/{_quote_id(doc_id)}", doc_id=doc_id
        )

    async def save_doc(self, doc: dict[str, Any]) -> dict[str, Any]:
        """Create or update a document.

        Documents without an ``_id`` are POSTed and get a server-side id.
        """
        doc_id = doc.get("_id")
        if doc_id is None:
            return await self.client.request("POST", self._path, json=doc)
        return await self.client.request(
            "PUT", f"{self._path}/{_quote_id(doc_id)}", doc_id=doc_id, json=doc
        )

    async def remove_doc(self, doc_id: str, rev: str) -> dict[str, Any]:
        """Delete a document at the given revision."""
        return await self.client.request(
            "DELETE",
            f"{self._path}/{_quote_id(doc_id)}",
            doc_id=doc_id,
            params={"rev": rev},
        )

    async def bulk_docs(
        self,
        docs: list[dict[str, Any]],
        options: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Write many documents through ``_bulk_docs``.

        Extra options (``all_or_nothing``, ``new_edits``) go into the body.
        """
        body = dict(options or {})
        body["docs"] = docs
        return await self.client.request("POST", f"{self._path}/_bulk_docs", json=body)

    async def fetch_by_keys(self, keys: list[str]) -> list[dict[str, Any] | None]:
        """Fetch documents through ``_all_docs`` with ``include_docs``.

        Missing keys and deleted documents come back as None.
        """
        data = await self.client.request(
            "POST",
            f"{self._path}/_all_docs",
            params={"include_docs": "true"},
            json={"keys": keys},
        )
        return [row.get("doc") for row in data.get("rows", [])]
