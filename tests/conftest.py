import socket
import threading

import pytest


def read_request(conn: socket.socket) -> bytes:
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = conn.recv(4096)
        if not chunk:
            return data
        data += chunk
    # body follows the blank line; take whatever else arrives promptly
    conn.settimeout(0.2)
    try:
        while True:
            chunk = conn.recv(4096)
            if not chunk:
                break
            data += chunk
    except socket.timeout:
        pass
    return data


class LoopbackServer:
    """One-connection TCP server on 127.0.0.1 driven by a handler on a thread."""

    def __init__(self, handler) -> None:
        self.handler = handler
        self.received = b""
        self.error = None
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(1)
        self._sock.settimeout(5.0)
        self.port = self._sock.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self) -> None:
        try:
            conn, _ = self._sock.accept()
        except OSError as e:
            self.error = e
            return
        with conn:
            conn.settimeout(5.0)
            try:
                self.received = read_request(conn)
                conn.settimeout(5.0)
                self.handler(conn)
            except OSError as e:
                self.error = e

    def close(self) -> None:
        self._sock.close()
        self._thread.join(timeout=10)


@pytest.fixture
def serve():
    servers = []

    def start(handler):
        server = LoopbackServer(handler)
        servers.append(server)
        return server

    yield start

    for server in servers:
        server.close()


def reply(payload: bytes):
    def handler(conn):
        conn.sendall(payload)
    return handler


def flood(size: int):
    """Send size bytes and keep the connection open until the peer hangs up."""
    def handler(conn):
        conn.sendall(b"x" * size)
        while conn.recv(1024):
            pass
    return handler


def silent(conn):
    conn.recv(1024)


@pytest.fixture
def closed_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
