import logging
import socket
from typing import Callable, Optional

from .config import Config
from .errors import CapacityError, ConnectError, ReadError, ResolutionError, SocketError, WriteError
from .models import RawRequest, RawResponse, RequestSpec

logger = logging.getLogger(__name__)


class RequestRunner:
    """
    Single-shot blocking exchange: open a socket, resolve, connect,
    write the whole request, then read into a capped buffer.
    """

    def __init__(self, config: Config, resolver: Optional[Callable[[str], str]] = None) -> None:
        self.config = config
        if resolver is None:
            resolver = socket.gethostbyname
        self.resolver = resolver

    def run(self, spec: RequestSpec, raw: RawRequest) -> RawResponse:
        sock = self.open_socket()
        try:
            address = self.resolve(spec.host)
            self.connect(sock, address, spec.port)
            self.send(sock, raw)
            return self.receive(sock)
        finally:
            try:
                sock.close()
            except OSError:
                pass

    def open_socket(self) -> socket.socket:
        try:
            return socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as e:
            raise SocketError("Cannot open socket: %s", e) from e

    def resolve(self, host: str) -> str:
        try:
            address = self.resolver(host)
        except (OSError, UnicodeError) as e:
            raise ResolutionError("No such host %r: %s", host, e) from e
        logger.debug(f"Resolved {host} to {address}")
        return address

    def connect(self, sock: socket.socket, address: str, port: int) -> None:
        sock.settimeout(self.config.connect_timeout)
        try:
            sock.connect((address, port))
        except socket.timeout as e:
            raise ConnectError("Timed out connecting to %s:%d", address, port) from e
        except OSError as e:
            raise ConnectError("Cannot connect to %s:%d: %s", address, port, e) from e
        except OverflowError as e:
            raise ConnectError("Invalid port %d: %s", port, e) from e
        sock.settimeout(self.config.read_timeout)
        logger.debug(f"Connected to {address}:{port}")

    def send(self, sock: socket.socket, raw: RawRequest) -> int:
        view = memoryview(raw.data)
        sent = 0
        try:
            while sent < len(view):
                n = sock.send(view[sent:])
                if n == 0:
                    raise WriteError("Connection closed after %d of %d bytes", sent, len(view))
                sent += n
        except socket.timeout as e:
            raise WriteError("Timed out after writing %d of %d bytes", sent, len(view)) from e
        except OSError as e:
            raise WriteError("Cannot write request to the socket: %s", e) from e
        logger.debug(f"Sent {sent} bytes")
        return sent

    def receive(self, sock: socket.socket) -> RawResponse:
        response = RawResponse(self.config.max_response_bytes)
        failure = None
        while not response.is_full:
            try:
                n = response.append_from(sock, self.config.chunk_size)
            except OSError as e:
                logger.warning(f"Read failed after {response.received} bytes: {e}")
                failure = e
                break
            if n == 0:
                break

        if response.is_full:
            raise CapacityError(
                "Cannot store the complete response from the socket (limit %d bytes)",
                response.capacity,
            )
        if failure is not None:
            if isinstance(failure, socket.timeout):
                raise ReadError("Timed out reading response from the socket") from failure
            raise ReadError("Cannot read response from the socket: %s", failure) from failure

        logger.debug(f"Received {response.received} bytes")
        return response
