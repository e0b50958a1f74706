"""Liveness endpoint for external uptime monitors."""

import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

ALIVE_MESSAGE = "✅ Bot is alive!"


class HealthHandler(BaseHTTPRequestHandler):
    """Answers GET / and GET /health with a static message."""

    def log_message(self, format, *args):
        """Override to use Python logging instead of stderr."""
        logger.debug("%s - %s", self.address_string(), format % args)

    def do_GET(self):
        path = urlparse(self.path).path
        if path in ("/", "/health"):
            self._send(200, ALIVE_MESSAGE)
        else:
            self._send(404, "Not found")

    def _send(self, status: int, body: str):
        data = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)


_server: Optional[ThreadingHTTPServer] = None


def start_server(port: int, host: str = "0.0.0.0") -> Optional[str]:
    """Start the liveness server on a daemon thread and return its URL.

    Returns None if the port cannot be bound; monitoring carries on.
    """
    global _server
    if _server is not None:
        return f"http://{host}:{_server.server_address[1]}"
    try:
        _server = ThreadingHTTPServer((host, port), HealthHandler)
    except OSError:
        logger.exception("Failed to start web server on port %s", port)
        return None

    thread = threading.Thread(target=_server.serve_forever, name="health-server", daemon=True)
    thread.start()
    url = f"http://{host}:{_server.server_address[1]}"
    logger.info("✅ Web server running on port %s", _server.server_address[1])
    return url


def stop_server() -> None:
    global _server
    if _server is not None:
        _server.shutdown()
        _server.server_close()
        _server = None
