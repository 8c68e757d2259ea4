from __future__ import annotations

import base64
import json
import os
import socket
import ssl
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Mapping
from pathlib import Path

import certifi

from .cancel import CancelToken
from .errors import ConfigError

DEFAULT_TIMEOUT_S = 10


def basic_auth(user: str, password: str) -> str:
    raw = f"{user}:{password}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def bearer_auth(token: str) -> str:
    return f"Bearer {token}"


def validate_base_url(url: str, *, what: str) -> str:
    u = (url or "").strip().rstrip("/")
    parsed = urllib.parse.urlparse(u)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"invalid {what} URL: {url!r}")
    return u


class HttpClient:
    """
    JSON-over-HTTP GET client bound to one base URL.

    Every request carries `headers`, times out after `timeout_s` and checks
    the cancel token before and after the round trip. Failures are raised as
    RuntimeError with the HTTP status and the first 500 characters of the body.
    """

    def __init__(
        self,
        base_url: str,
        *,
        headers: Mapping[str, str] | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = {"Accept": "application/json", **dict(headers or {})}
        self.timeout_s = timeout_s
        self._ctx: ssl.SSLContext | None = None

    def url_for(self, path: str, params: Mapping[str, object] | None = None) -> str:
        url = self.base_url + "/" + path.lstrip("/")
        if params:
            query = urllib.parse.urlencode({k: str(v) for k, v in params.items() if v is not None})
            url = f"{url}?{query}"
        return url

    def get_json(self, cancel: CancelToken, path: str, params: Mapping[str, object] | None = None) -> object:
        cancel.check()
        url = self.url_for(path, params)
        req = urllib.request.Request(url, method="GET", headers=self.headers)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_s, context=self._ssl_context()) as resp:
                code = int(getattr(resp, "status", 0) or 0)
                payload = resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as e:
            body = ""
            try:
                body = e.read().decode("utf-8", errors="replace")
            except OSError:
                body = ""
            raise RuntimeError(f"HTTP {e.code}: {body[:500]}") from e
        except urllib.error.URLError as e:
            if isinstance(e.reason, (socket.timeout, TimeoutError)):
                raise RuntimeError(f"request timed out after {self.timeout_s:g}s") from e
            msg = f"request failed: {e.reason}"
            if _is_cert_verify_error(e):
                msg = msg + "\n" + _cert_verify_hint()
            raise RuntimeError(msg) from e
        except (socket.timeout, TimeoutError) as e:
            raise RuntimeError(f"request timed out after {self.timeout_s:g}s") from e

        cancel.check()
        if not 200 <= code < 300:
            raise RuntimeError(f"HTTP {code}: {payload[:500]}")
        try:
            return json.loads(payload) if payload.strip() else None
        except json.JSONDecodeError as e:
            raise RuntimeError(f"invalid JSON response from {url}: {e}") from e

    def _ssl_context(self) -> ssl.SSLContext:
        if self._ctx is None:
            self._ctx = ssl_context()
        return self._ctx


def ssl_context() -> ssl.SSLContext:
    cafile, capath = _resolve_ca_paths()
    return ssl.create_default_context(cafile=cafile, capath=capath)


def _resolve_ca_paths() -> tuple[str | None, str | None]:
    for k in ("SSL_CERT_FILE", "REQUESTS_CA_BUNDLE", "CURL_CA_BUNDLE"):
        v = (os.environ.get(k) or "").strip()
        if not v:
            continue
        path = Path(v).expanduser()
        if path.is_dir():
            return None, str(path)
        return str(path), None

    return certifi.where(), None


def _is_cert_verify_error(e: urllib.error.URLError) -> bool:
    reason = getattr(e, "reason", None)
    if isinstance(reason, ssl.SSLCertVerificationError):
        return True
    s = str(e)
    return "CERTIFICATE_VERIFY_FAILED" in s or "certificate verify failed" in s.lower()


def _cert_verify_hint() -> str:
    return (
        "Hint: HTTPS certificate verification failed (client does not trust the issuer). "
        "If this is a private CA, set SSL_CERT_FILE=/path/to/ca.pem."
    )
