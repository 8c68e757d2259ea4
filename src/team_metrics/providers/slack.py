from __future__ import annotations

from ..cancel import CancelToken
from ..transport import DEFAULT_TIMEOUT_S, HttpClient, bearer_auth

DEFAULT_API_URL = "https://slack.com/api"
COUNT = 100


def user_of(message: dict) -> str:
    return str(message.get("user") or message.get("username") or "")


class SlackClient:
    def __init__(self, token: str, *, api_url: str = DEFAULT_API_URL, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        self.http = HttpClient(api_url or DEFAULT_API_URL, headers={"Authorization": bearer_auth(token)}, timeout_s=timeout_s)

    def messages(self, cancel: CancelToken, query: str) -> list[dict]:
        try:
            data = self.http.get_json(
                cancel,
                "/search.messages",
                {"query": query, "sort": "timestamp", "sort_dir": "desc", "count": COUNT},
            )
            data = data or {}
            if not data.get("ok"):
                raise RuntimeError(f"slack error: {data.get('error') or 'unknown'}")
        except Exception as e:
            raise RuntimeError(f"search Slack messages: {e}") from e
        return list((data.get("messages") or {}).get("matches") or [])
