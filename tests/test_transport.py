from __future__ import annotations

import threading
import time
from http.server import BaseHTTPRequestHandler, HTTPServer

import certifi
import pytest

from team_metrics.cancel import CancelToken
from team_metrics.errors import Cancelled
from team_metrics.transport import HttpClient, _resolve_ca_paths, basic_auth


def test_basic_auth_header() -> None:
    assert basic_auth("user", "pw") == "Basic dXNlcjpwdw=="


def test_url_for_encodes_params() -> None:
    http = HttpClient("https://example.com/api/")
    assert http.url_for("/items", {"q": "a b", "n": 2, "skip": None}) == "https://example.com/api/items?q=a+b&n=2"


def test_cancelled_token_skips_request(json_server) -> None:
    url, seen = json_server({"/x": {"ok": True}})
    cancel = CancelToken()
    cancel.cancel()
    with pytest.raises(Cancelled):
        HttpClient(url).get_json(cancel, "/x")
    assert seen == []


def test_non_2xx_includes_body(json_server) -> None:
    url, _ = json_server({"/x": (503, {"message": "maintenance"})})
    with pytest.raises(RuntimeError, match=r"HTTP 503: .*maintenance"):
        HttpClient(url).get_json(CancelToken(), "/x")


def test_connection_refused_is_wrapped() -> None:
    server = HTTPServer(("127.0.0.1", 0), BaseHTTPRequestHandler)
    port = server.server_port
    server.server_close()
    with pytest.raises(RuntimeError, match="request failed"):
        HttpClient(f"http://127.0.0.1:{port}", timeout_s=2).get_json(CancelToken(), "/x")


def test_timeout_is_reported() -> None:
    class Slow(BaseHTTPRequestHandler):
        def do_GET(self) -> None:  # noqa: N802
            time.sleep(1.0)
            self.send_response(200)
            self.end_headers()

        def log_message(self, fmt: str, *args: object) -> None:
            return

    server = HTTPServer(("127.0.0.1", 0), Slow)
    t = threading.Thread(target=server.serve_forever, daemon=True)
    t.start()
    try:
        with pytest.raises(RuntimeError, match="timed out"):
            HttpClient(f"http://127.0.0.1:{server.server_port}", timeout_s=0.2).get_json(CancelToken(), "/x")
    finally:
        server.shutdown()
        server.server_close()


def test_cancel_during_request_is_raised_after_response(json_server) -> None:
    cancel = CancelToken()

    def slow(query):
        cancel.wait(2)
        return 200, {"ok": True}

    url, seen = json_server({"/x": slow})
    timer = threading.Timer(0.1, cancel.cancel, args=("interrupted by signal 2",))
    timer.start()
    try:
        with pytest.raises(Cancelled, match="interrupted by signal 2"):
            HttpClient(url).get_json(cancel, "/x")
    finally:
        timer.cancel()
    assert len(seen) == 1


_CA_VARS = ("SSL_CERT_FILE", "REQUESTS_CA_BUNDLE", "CURL_CA_BUNDLE")


def test_ca_bundle_file_from_env(monkeypatch, tmp_path) -> None:
    for k in _CA_VARS:
        monkeypatch.delenv(k, raising=False)
    bundle = tmp_path / "ca.pem"
    bundle.write_text("")
    monkeypatch.setenv("SSL_CERT_FILE", str(bundle))
    assert _resolve_ca_paths() == (str(bundle), None)


def test_ca_bundle_dir_from_env(monkeypatch, tmp_path) -> None:
    for k in _CA_VARS:
        monkeypatch.delenv(k, raising=False)
    monkeypatch.setenv("REQUESTS_CA_BUNDLE", str(tmp_path))
    assert _resolve_ca_paths() == (None, str(tmp_path))


def test_ca_bundle_defaults_to_certifi(monkeypatch) -> None:
    for k in _CA_VARS:
        monkeypatch.delenv(k, raising=False)
    monkeypatch.setenv("SSL_CERT_FILE", "  ")
    assert _resolve_ca_paths() == (certifi.where(), None)
