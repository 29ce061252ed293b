"""Single-use loopback HTTP listener that captures the login redirect.

The identity provider redirects the browser to
``http://localhost:<port>/oauth2/callback?token=<bearer>``.  The handler
writes a static success page, then completes a :class:`~concurrent.futures.Future`
with the token.  Only the first request carrying a token completes the
future; the listener answers later requests with ``410 Gone``.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import parse_qs, urlsplit

from simbridge.api.errors import AuthError
from simbridge.models.auth import CALLBACK_PATH

logger = logging.getLogger(__name__)

SUCCESS_PAGE = (
    "<!DOCTYPE html><html><head><title>simbridge</title></head><body>"
    "<h1><strong>Success!</strong></h1>"
    "<p>You are authenticated. You can close this window and return to the CLI.</p>"
    "</body></html>"
)

_ACCEPTED_PATHS = frozenset({"/", CALLBACK_PATH})


class _CallbackHandler(BaseHTTPRequestHandler):
    server: _CallbackHTTPServer

    def do_GET(self) -> None:  # noqa: N802
        parts = urlsplit(self.path)
        if parts.path not in _ACCEPTED_PATHS:
            self._reply(HTTPStatus.NOT_FOUND, "<h1>Not found</h1>")
            return

        result = self.server.result
        if result.done():
            self._reply(HTTPStatus.GONE, "<h1>Login already completed</h1>")
            return

        token = parse_qs(parts.query).get("token", [""])[0]
        if not token:
            logger.warning("Login redirect arrived without a token parameter")
            self._reply(HTTPStatus.BAD_REQUEST, "<h1>Missing token parameter</h1>")
            return

        self._reply(HTTPStatus.OK, SUCCESS_PAGE)
        # Completed after the response is written so the waiter never races
        # the browser's page load.
        result.set_result(token)

    def _reply(self, status: HTTPStatus, body: str) -> None:
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.debug("callback listener: " + format, *args)


class _CallbackHTTPServer(HTTPServer):
    def __init__(self, address: tuple[str, int]) -> None:
        super().__init__(address, _CallbackHandler)
        self.result: Future[str] = Future()


class OAuthCallbackServer:
    """Loopback listener running ``serve_forever`` on a daemon thread."""

    def __init__(self, port: int, host: str = "127.0.0.1") -> None:
        self._host = host
        self._requested_port = port
        self._httpd: _CallbackHTTPServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def port(self) -> int:
        """Bound port (resolves ``0`` to the OS-assigned port once started)."""
        if self._httpd is None:
            return self._requested_port
        return int(self._httpd.server_address[1])

    @property
    def redirect_uri(self) -> str:
        return f"http://localhost:{self.port}{CALLBACK_PATH}"

    @property
    def result(self) -> Future[str]:
        if self._httpd is None:
            raise AuthError("Callback listener is not running")
        return self._httpd.result

    def start(self) -> None:
        """Bind the socket and start serving in the background."""
        try:
            self._httpd = _CallbackHTTPServer((self._host, self._requested_port))
        except OSError as exc:
            raise AuthError(
                f"Cannot listen on {self._host}:{self._requested_port} for the login redirect: {exc}"
            ) from exc
        self._thread = threading.Thread(
            target=self._httpd.serve_forever,
            name="simbridge-oauth-callback",
            daemon=True,
        )
        self._thread.start()
        logger.info("Login callback listener on %s:%d", self._host, self.port)

    def stop(self, timeout: float = 60.0) -> None:
        """Shut the listener down, failing if it does not stop within *timeout*."""
        httpd, thread = self._httpd, self._thread
        if httpd is None:
            return

        stopper = threading.Thread(target=httpd.shutdown, daemon=True)
        stopper.start()
        stopper.join(timeout)
        if stopper.is_alive():
            raise AuthError(f"Callback listener did not shut down within {timeout:.0f}s")

        httpd.server_close()
        if thread is not None:
            thread.join(timeout)
        self._thread = None
        logger.info("Login callback listener stopped")
