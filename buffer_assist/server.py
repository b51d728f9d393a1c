"""Line-delimited JSON server: one request per line in, one response per line out."""

import json
import os
import socketserver
import threading
import uuid
from typing import Optional, Union

from . import config
from .documents import DocumentStore
from .handlers import handle_message
from .utils import dbg


def generate_session_id() -> str:
    return uuid.uuid4().hex[:12]


def socket_path_for(session_id: str) -> str:
    return os.path.join(config.BASE_DIR, f"{session_id}.sock")


class LineRequestHandler(socketserver.StreamRequestHandler):
    def _reply(self, response: str):
        self.wfile.write((response + "\n").encode("utf-8"))
        self.wfile.flush()

    def handle(self):
        dbg("server: client connected")
        limit = config.MAX_MESSAGE_BYTES
        while True:
            raw = self.rfile.readline(limit + 1)
            if not raw:
                break
            if len(raw) > limit and not raw.endswith(b"\n"):
                # Skip the rest of the oversized line so the next one parses.
                while raw and not raw.endswith(b"\n"):
                    raw = self.rfile.readline(limit + 1)
                self._reply(json.dumps({
                    "success": False,
                    "error": f"Message exceeds {limit} bytes",
                    "code": "message_too_large",
                }))
                continue
            try:
                message = raw.decode("utf-8").rstrip("\n")
            except UnicodeDecodeError:
                self._reply(json.dumps({"success": False, "error": "Invalid UTF-8", "code": "invalid_json"}))
                continue
            if not message.strip():
                continue
            self._reply(handle_message(self.server.store, message))
        dbg("server: client disconnected")


class LineTCPServer(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = True


class LineUnixServer(socketserver.ThreadingUnixStreamServer):
    daemon_threads = True


AnyLineServer = Union[LineTCPServer, LineUnixServer]


def start_server(
    store: Optional[DocumentStore] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    unix: Optional[bool] = None,
) -> AnyLineServer:
    """Bind and serve on a daemon thread. Returns the running server."""
    store = store or DocumentStore()
    session_id = generate_session_id()
    use_unix = config.USE_UNIX_SOCKET if unix is None else unix
    if use_unix:
        path = socket_path_for(session_id)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        if os.path.exists(path):
            os.unlink(path)
        server: AnyLineServer = LineUnixServer(path, LineRequestHandler)
        address = path
    else:
        bind_host = config.SERVER_HOST if host is None else host
        bind_port = config.SERVER_PORT if port is None else port
        server = LineTCPServer((bind_host, bind_port), LineRequestHandler)
        address = "%s:%d" % server.server_address[:2]
    server.store = store
    server.session_id = session_id
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    dbg(f"server: session {session_id} listening on {address}")
    return server


def stop_server(server: AnyLineServer) -> None:
    server.shutdown()
    server.server_close()
    if isinstance(server, LineUnixServer):
        try:
            os.unlink(server.server_address)
        except FileNotFoundError:
            pass
    dbg(f"server: session {server.session_id} stopped")
