from __future__ import annotations

from ..cancel import CancelToken
from ..progress import fetch_each
from ..transport import DEFAULT_TIMEOUT_S, HttpClient, basic_auth

DEFAULT_API_URL = "https://api.github.com"
PER_PAGE = 100


def login_of(obj: dict) -> str:
    user = obj.get("user") or {}
    return str(user.get("login") or "")


def dedupe_reviews(reviews: list[dict]) -> list[dict]:
    """Keep the first review per author, ordered by author login."""
    out: list[dict] = []
    for r in sorted(reviews, key=login_of):
        if out and login_of(out[-1]) == login_of(r):
            continue
        out.append(r)
    return out


class GithubClient:
    def __init__(self, token: str, *, api_url: str = DEFAULT_API_URL, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        self.http = HttpClient(
            api_url or DEFAULT_API_URL,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": basic_auth("", token),
            },
            timeout_s=timeout_s,
        )

    def _list_prs(self, cancel: CancelToken, owner: str, repo: str, state: str) -> list[dict]:
        data = self.http.get_json(
            cancel,
            f"/repos/{owner}/{repo}/pulls",
            {"state": state, "sort": "created", "direction": "desc", "per_page": PER_PAGE},
        )
        return list(data or [])

    def open_prs(self, cancel: CancelToken, owner: str, repo: str) -> list[dict]:
        try:
            return self._list_prs(cancel, owner, repo, "open")
        except Exception as e:
            raise RuntimeError(f"get open PRs: {e}") from e

    def closed_prs(self, cancel: CancelToken, owner: str, repo: str) -> list[dict]:
        try:
            return self._list_prs(cancel, owner, repo, "closed")
        except Exception as e:
            raise RuntimeError(f"get closed PRs: {e}") from e

    def pr_reviews(self, cancel: CancelToken, owner: str, repo: str, numbers: list[int]) -> list[dict]:
        def one(number: int) -> list[dict]:
            data = self.http.get_json(cancel, f"/repos/{owner}/{repo}/pulls/{number}/reviews", {"per_page": PER_PAGE})
            return dedupe_reviews(list(data or []))

        return fetch_each(
            numbers,
            one,
            what="reviews",
            unit="PRs",
            describe=lambda n: f"reviews for PR #{n}",
            cancel=cancel,
        )

    def pr_comments(self, cancel: CancelToken, owner: str, repo: str, numbers: list[int]) -> list[dict]:
        def one(number: int) -> list[dict]:
            data = self.http.get_json(cancel, f"/repos/{owner}/{repo}/pulls/{number}/comments", {"per_page": PER_PAGE})
            return list(data or [])

        return fetch_each(
            numbers,
            one,
            what="comments",
            unit="PRs",
            describe=lambda n: f"comments for PR #{n}",
            cancel=cancel,
        )
