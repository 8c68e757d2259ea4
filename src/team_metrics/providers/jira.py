from __future__ import annotations

import urllib.parse

from ..cancel import CancelToken
from ..progress import fetch_each
from ..transport import DEFAULT_TIMEOUT_S, HttpClient, basic_auth, validate_base_url

MAX_RESULTS = 100


def assignee_name(issue: dict) -> str | None:
    fields = issue.get("fields") or {}
    assignee = fields.get("assignee")
    if not assignee:
        return None
    return str(assignee.get("displayName") or "")


def author_name(comment: dict) -> str:
    author = comment.get("author") or {}
    return str(author.get("displayName") or "")


class JiraClient:
    def __init__(self, url: str, user: str, token: str, *, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        base = validate_base_url(url, what="JIRA")
        self.http = HttpClient(base, headers={"Authorization": basic_auth(user, token)}, timeout_s=timeout_s)

    def issues(self, cancel: CancelToken, query: str) -> list[dict]:
        try:
            data = self.http.get_json(cancel, "/rest/api/2/search", {"jql": query, "maxResults": MAX_RESULTS})
        except Exception as e:
            raise RuntimeError(f"search issues: {e}") from e
        return list((data or {}).get("issues") or [])

    def issue_comments(self, cancel: CancelToken, keys: list[str]) -> list[dict]:
        def one(key: str) -> list[dict]:
            issue = self.http.get_json(cancel, f"/rest/api/2/issue/{urllib.parse.quote(key, safe='')}") or {}
            fields = issue.get("fields") or {}
            return list((fields.get("comment") or {}).get("comments") or [])

        return fetch_each(
            keys,
            one,
            what="comments",
            unit="issues",
            describe=lambda k: f"comments for issue {k}",
            cancel=cancel,
        )
