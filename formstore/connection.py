"""
Connection to the Supabase REST endpoint and an in-memory stand-in for tests.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Optional, Protocol

import requests

from formstore.config import Settings, clean_endpoint, clean_key
from formstore.errors import ConfigurationMissing

REST_PATH = "/rest/v1"


class RemoteError(Exception):
    """Raw failure reported by the remote store (or the transport to it)."""

    def __init__(
        self,
        message: str | None,
        *,
        code: str | None = None,
        details: str | None = None,
        hint: str | None = None,
        status: int | None = None,
    ):
        super().__init__(message or "")
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint
        self.status = status

    def __repr__(self) -> str:
        return (
            f"RemoteError(code={self.code!r}, status={self.status!r}, "
            f"message={self.message!r})"
        )


class RemoteStore(Protocol):
    """Operations the gateway needs from the hosted database."""

    def insert(self, table: str, rows: list[dict]) -> None:
        ...

    def select(
        self,
        table: str,
        columns: str = "*",
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict]:
        ...


@dataclass
class InMemoryRemoteStore:
    """Test double for the hosted database."""

    tables: dict = field(default_factory=dict)
    fail_next: Optional[RemoteError] = None

    def _raise_pending(self) -> None:
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error

    def insert(self, table: str, rows: list[dict]) -> None:
        self._raise_pending()
        stored = self.tables.setdefault(table, [])
        # Round-trip through JSON to mimic what actually reaches the server
        stored.extend(json.loads(json.dumps(rows, default=str)))

    def select(
        self,
        table: str,
        columns: str = "*",
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict]:
        self._raise_pending()
        rows = [dict(row) for row in self.tables.get(table, [])]
        if order_by:
            rows.sort(key=lambda row: row.get(order_by) or "", reverse=descending)
        if columns != "*":
            wanted = [c.strip() for c in columns.split(",")]
            rows = [{k: row.get(k) for k in wanted} for row in rows]
        return rows

    def reset(self) -> None:
        """Clear all stored rows (useful in tests)."""
        self.tables.clear()
        self.fail_next = None


class SupabaseConnection:
    """
    PostgREST client for a Supabase project.

    The session carries the project key on every request and is never
    written to disk, so there is nothing to refresh or restore between runs.
    Writes ask the server not to echo the inserted rows back.
    """

    def __init__(self, url: str | None, key: str | None, schema: str = "public"):
        url = clean_endpoint(url)
        key = clean_key(key)
        if not url or not key:
            raise ConfigurationMissing("Missing Supabase environment variables")
        self.url = url.rstrip("/")
        self.schema = schema
        self.session = requests.Session()
        self.session.headers.update(
            {
                "apikey": key,
                "Authorization": f"Bearer {key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
                "Accept-Profile": schema,
                "Content-Profile": schema,
                "Prefer": "return=minimal",
            }
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseConnection":
        return cls(
            settings.supabase_url,
            settings.supabase_anon_key,
            schema=settings.supabase_schema,
        )

    def _table_url(self, table: str) -> str:
        return f"{self.url}{REST_PATH}/{table}"

    def _send(self, method: str, table: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(method, self._table_url(table), **kwargs)
        except requests.RequestException as exc:
            raise RemoteError(str(exc)) from exc
        if response.status_code >= 400:
            raise _error_from_response(response)
        return response

    def insert(self, table: str, rows: list[dict]) -> None:
        self._send("POST", table, data=json.dumps(rows, default=str))

    def select(
        self,
        table: str,
        columns: str = "*",
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict]:
        params = {"select": columns}
        if order_by:
            direction = "desc" if descending else "asc"
            params["order"] = f"{order_by}.{direction}"
        response = self._send("GET", table, params=params)
        if not response.content:
            return []
        try:
            rows = response.json()
        except ValueError as exc:
            raise RemoteError(
                None,
                details="Invalid response from Supabase",
                status=response.status_code,
            ) from exc
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise RemoteError(
                None,
                details="Invalid response from Supabase",
                status=response.status_code,
            )
        return rows


def _error_from_response(response: requests.Response) -> RemoteError:
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        return RemoteError(
            response.text or response.reason, status=response.status_code
        )
    return RemoteError(
        body.get("message"),
        code=body.get("code"),
        details=body.get("details"),
        hint=body.get("hint"),
        status=response.status_code,
    )
