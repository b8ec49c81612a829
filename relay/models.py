import socket
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class RequestSpec:
    method: str
    host: str
    port: int
    path: str
    body: Optional[str] = None
    headers: Tuple[str, ...] = field(default_factory=tuple)
    # port argument as given, echoed verbatim in the Host header
    port_text: Optional[str] = None

    @property
    def effective_path(self) -> str:
        return self.path if self.path else "/"

    @property
    def host_port(self) -> str:
        return self.port_text if self.port_text is not None else str(self.port)


@dataclass(frozen=True)
class RawRequest:
    data: bytes

    @property
    def length(self) -> int:
        return len(self.data)


class RawResponse:
    """Fixed-capacity buffer filled straight from the socket. Never parsed."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._buf = bytearray(capacity)
        self.received = 0

    @property
    def capacity(self) -> int:
        return len(self._buf)

    @property
    def is_full(self) -> bool:
        return self.received == self.capacity

    @property
    def data(self) -> bytes:
        return bytes(self._buf[:self.received])

    def append_from(self, sock: socket.socket, chunk_size: int) -> int:
        """Read at most chunk_size bytes into the free tail. Returns 0 on EOF."""
        free = self.capacity - self.received
        if free == 0:
            return 0
        view = memoryview(self._buf)[self.received:self.received + min(free, chunk_size)]
        n = sock.recv_into(view)
        self.received += n
        return n
