from __future__ import annotations

from typing import Any

import httpx

from alert_issues.errors import TransportError


def github_headers(token: str | None) -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


class AsyncFetcher:
    """Thin JSON client over httpx. Every failure is raised as TransportError; nothing is retried."""

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout_seconds: float = 10.0,
        max_pages: int = 50,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self.timeout_seconds = timeout_seconds
        self.max_pages = max_pages
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> AsyncFetcher:
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout_seconds,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_json_pages(self, path: str, params: dict[str, str] | None = None) -> list[Any]:
        """Collect list payloads across every page linked with rel="next"."""
        items: list[Any] = []
        next_url: str | None = path
        next_params = params
        pages = 0
        while next_url is not None:
            if pages >= self.max_pages:
                raise TransportError(f"Pagination for {path} exceeded {self.max_pages} pages")
            response = await self._request("GET", next_url, params=next_params)
            pages += 1
            payload = self._decode(response)
            if not isinstance(payload, list):
                raise TransportError(f"Expected a JSON list from {path}", status_code=response.status_code)
            items.extend(payload)
            next_link = response.links.get("next", {}).get("url")
            next_url = next_link if next_link else None
            # The next link already carries the query string.
            next_params = None
        return items

    async def post_json(self, path: str, json_payload: dict[str, Any]) -> Any:
        response = await self._request("POST", path, json_payload=json_payload)
        return self._decode(response)

    async def patch_json(self, path: str, json_payload: dict[str, Any]) -> Any:
        response = await self._request("PATCH", path, json_payload=json_payload)
        return self._decode(response)

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        json_payload: dict[str, Any] | None = None,
    ) -> httpx.Response:
        if self._client is None:
            raise TransportError("AsyncFetcher must be used as an async context manager")
        try:
            response = await self._client.request(method, url, params=params, json=json_payload)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Timed out after {self.timeout_seconds}s: {method} {url}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        if response.status_code == 429 or (response.status_code == 403 and _rate_limited(response)):
            raise TransportError(f"Rate limited: {method} {url}", status_code=response.status_code)
        if response.status_code >= 400:
            raise TransportError(
                f"HTTP status {response.status_code} for {method} {url}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                f"Undecodable JSON from {response.request.url}",
                status_code=response.status_code,
            ) from exc


def _rate_limited(response: httpx.Response) -> bool:
    return response.headers.get("x-ratelimit-remaining") == "0"
