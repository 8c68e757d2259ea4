from __future__ import annotations

import urllib.parse

from ..cancel import CancelToken
from ..progress import fetch_each
from ..transport import DEFAULT_TIMEOUT_S, HttpClient, basic_auth, validate_base_url

LIMIT = 100


def creator_name(page: dict) -> str:
    history = page.get("history") or {}
    created_by = history.get("createdBy") or {}
    return str(created_by.get("displayName") or "")


class ConfluenceClient:
    """Client for the Confluence REST API; `url` is the API base, e.g. https://x.atlassian.net/wiki/rest/api."""

    def __init__(self, url: str, user: str, token: str, *, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        base = validate_base_url(url, what="Confluence")
        self.http = HttpClient(base, headers={"Authorization": basic_auth(user, token)}, timeout_s=timeout_s)

    def space_pages(self, cancel: CancelToken, space: str) -> list[dict]:
        try:
            data = self.http.get_json(
                cancel,
                "/content",
                {"spaceKey": space, "limit": LIMIT, "orderby": "history.createdDate desc"},
            )
        except Exception as e:
            raise RuntimeError(f"get Confluence pages: {e}") from e
        return list((data or {}).get("results") or [])

    def pages(self, cancel: CancelToken, space: str, ids: list[str]) -> list[dict]:
        def one(page_id: str) -> list[dict]:
            page = self.http.get_json(
                cancel,
                f"/content/{urllib.parse.quote(page_id, safe='')}",
                {"spaceKey": space, "expand": "history"},
            )
            return [page or {}]

        return fetch_each(
            ids,
            one,
            what="pages",
            unit="ids",
            describe=lambda i: f"page {i}",
            cancel=cancel,
        )
