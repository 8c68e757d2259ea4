from __future__ import annotations

import json
import threading
from collections.abc import Callable, Iterator
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlparse

import pytest

# path -> body, (status, body), or callable(query) -> (status, body)
Routes = dict[str, object]


@pytest.fixture
def json_server() -> Iterator[Callable[[Routes], tuple[str, list[dict]]]]:
    servers: list[HTTPServer] = []

    def start(routes: Routes) -> tuple[str, list[dict]]:
        seen: list[dict] = []

        class Handler(BaseHTTPRequestHandler):
            def do_GET(self) -> None:  # noqa: N802
                parsed = urlparse(self.path)
                query = parse_qs(parsed.query)
                seen.append({"path": parsed.path, "query": query, "auth": self.headers.get("Authorization")})
                route = routes.get(parsed.path)
                if route is None:
                    status, body = 404, {"message": "Not Found"}
                elif callable(route):
                    status, body = route(query)
                elif isinstance(route, tuple):
                    status, body = route
                else:
                    status, body = 200, route
                raw = json.dumps(body).encode("utf-8")
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(raw)))
                self.end_headers()
                self.wfile.write(raw)

            def log_message(self, fmt: str, *args: object) -> None:
                return

        server = HTTPServer(("127.0.0.1", 0), Handler)
        t = threading.Thread(target=server.serve_forever, daemon=True)
        t.start()
        servers.append(server)
        return f"http://127.0.0.1:{server.server_port}", seen

    yield start

    for server in servers:
        server.shutdown()
        server.server_close()
