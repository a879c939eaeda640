"""Minimal Supabase PostgREST client used by backend repositories only."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen


Query = dict[str, str | int] | list[tuple[str, str | int]]


@dataclass(slots=True)
class SupabaseSettings:
    url: str
    service_role_key: str
    timeout_seconds: float = 10.0


class SupabaseClient:
    def __init__(self, settings: SupabaseSettings) -> None:
        self.settings = settings

    def _build_request(
        self,
        *,
        table: str,
        query: Query,
        method: str,
        prefer: str,
        body: bytes | None = None,
    ) -> Request:
        encoded_query = urlencode(query, doseq=True)
        api_key = self.settings.service_role_key
        if not api_key:
            raise ValueError("Missing Supabase service role key")

        url = f"{self.settings.url}/rest/v1/{table}"
        if encoded_query:
            url = f"{url}?{encoded_query}"

        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
            "Prefer": prefer,
        }
        if body is not None:
            headers["Content-Type"] = "application/json"
        return Request(url=url, headers=headers, data=body, method=method)

    def _send(self, request: Request) -> tuple[Any, Any]:
        try:
            with urlopen(request, timeout=self.settings.timeout_seconds) as response:  # noqa: S310 - URL comes from trusted env config
                raw_body = response.read().decode("utf-8")
                payload = json.loads(raw_body) if raw_body else []
                return payload, response.headers
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")[:500]
            raise RuntimeError(
                f"Supabase request failed with status {exc.code}: {body}"
            ) from exc

    def get_rows(
        self,
        *,
        table: str,
        query: Query,
        with_count: bool,
    ) -> tuple[list[dict[str, Any]], int | None]:
        """Fetch rows from PostgREST and optionally parse exact row count."""

        request = self._build_request(
            table=table,
            query=query,
            method="GET",
            prefer="count=exact" if with_count else "return=representation",
        )
        rows, headers = self._send(request)
        total: int | None = None
        if with_count:
            content_range = headers.get("content-range")
            if content_range and "/" in content_range:
                _, total_str = content_range.split("/", maxsplit=1)
                if total_str.isdigit():
                    total = int(total_str)
        return rows, total

    def post_rows(
        self,
        *,
        table: str,
        payload: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Insert rows and return the inserted representation."""

        request = self._build_request(
            table=table,
            query={},
            method="POST",
            prefer="return=representation",
            body=json.dumps(payload).encode("utf-8"),
        )
        rows, _ = self._send(request)
        return rows

    def delete_rows(
        self,
        *,
        table: str,
        query: Query,
    ) -> int:
        """Delete rows matching the query and return the deleted row count."""

        request = self._build_request(
            table=table,
            query=query,
            method="DELETE",
            prefer="return=representation",
        )
        rows, _ = self._send(request)
        return len(rows) if isinstance(rows, list) else 0
