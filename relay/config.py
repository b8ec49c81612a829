import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "RPCPOST_"

@dataclass(frozen=True)
class Config:
    default_host: str = "localhost"
    default_port: int = 80
    http_version: str = "HTTP/2"
    connect_timeout: Optional[float] = 5.0
    read_timeout: Optional[float] = 10.0
    max_response_bytes: int = 2048
    chunk_size: int = 1024
    print_response: bool = False
    debug: bool = False

    def __post_init__(self) -> None:
        if self.max_response_bytes <= 0:
            raise ValueError("max_response_bytes must be positive")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        for name in ("connect_timeout", "read_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive or None")

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "Config":
        """
        Build a Config from RPCPOST_* variables.
        Keyword overrides that are not None take precedence over the environment.
        """
        if environ is None:
            environ = os.environ

        values = {}
        for name in ("connect_timeout", "read_timeout"):
            key = ENV_PREFIX + name.upper()
            if key in environ:
                values[name] = _parse_timeout(key, environ[key])

        key = ENV_PREFIX + "MAX_RESPONSE_BYTES"
        if key in environ:
            values["max_response_bytes"] = _parse_int(key, environ[key])

        key = ENV_PREFIX + "DEBUG"
        if key in environ:
            values["debug"] = environ[key].strip().lower() in ("1", "true", "yes", "on")

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def _parse_int(key: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


def _parse_timeout(key: str, raw: str) -> Optional[float]:
    text = raw.strip().lower()
    if text in ("", "none"):
        return None
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"{key} must be a number of seconds, got {raw!r}") from None
