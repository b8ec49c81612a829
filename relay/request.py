import re
from typing import Iterable, Optional

from .config import Config
from .errors import UsageError
from .models import RawRequest, RequestSpec

CRLF = "\r\n"
ENCODING = "utf-8"
SUPPORTED_METHODS = ("POST",)
MAX_PORT = 65535

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def resolve_port(text: str, default: int = 80) -> int:
    # leading integer only, like atoi(): "8332x" -> 8332, "abc" -> 0
    match = _LEADING_INT.match(text)
    port = int(match.group(1)) if match else 0
    # out of TCP range counts as unparsable
    return port if 0 < port <= MAX_PORT else default


def resolve_host(text: str, default: str = "localhost") -> str:
    return text if text else default


def parse_request_spec(
    method: str,
    host: str,
    port: str,
    path: str,
    body: Optional[str] = None,
    headers: Iterable[str] = (),
    config: Optional[Config] = None,
) -> RequestSpec:
    if config is None:
        config = Config()
    if method not in SUPPORTED_METHODS:
        raise UsageError("Invalid HTTP request.")
    return RequestSpec(
        method=method,
        host=resolve_host(host, config.default_host),
        port=resolve_port(port, config.default_port),
        port_text=port,
        path=path,
        body=body,
        headers=tuple(headers),
    )


def _head_lines(spec: RequestSpec, config: Config) -> str:
    return (
        f"{spec.method} {spec.effective_path} {config.http_version}{CRLF}"
        f"Host: {spec.host}:{spec.host_port}{CRLF}"
    )


def _encoded_len(text: str) -> int:
    return len(text.encode(ENCODING))


def request_length(spec: RequestSpec, config: Optional[Config] = None) -> int:
    """
    Exact size in bytes of the assembled request.
    Sized from the effective path, so an empty path still accounts for "/".
    """
    if config is None:
        config = Config()
    size = _encoded_len(_head_lines(spec, config))
    for header in spec.headers:
        size += _encoded_len(header) + len(CRLF)
    size += len(CRLF)
    if spec.body is not None:
        size += _encoded_len(spec.body)
    return size


def build_request(spec: RequestSpec, config: Optional[Config] = None) -> RawRequest:
    if config is None:
        config = Config()

    size = request_length(spec, config)
    buf = bytearray(size)
    offset = 0

    def put(text: str) -> None:
        nonlocal offset
        chunk = text.encode(ENCODING)
        buf[offset:offset + len(chunk)] = chunk
        offset += len(chunk)

    put(_head_lines(spec, config))
    for header in spec.headers:
        put(header)
        put(CRLF)
    put(CRLF)
    if spec.body is not None:
        put(spec.body)

    if offset != size:
        raise RuntimeError(f"request sized {size} bytes but {offset} were written")
    return RawRequest(data=bytes(buf))


def format_request(raw: RawRequest) -> str:
    return "Request:\n" + raw.data.decode(ENCODING, errors="replace") + "\n"
