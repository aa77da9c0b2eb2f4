from .json import json_dumps, canonical_json_bytes
from .timestamps import unix_now, monotonic_ms
from .logging import configure_logging

__all__ = [
    "json_dumps",
    "canonical_json_bytes",
    "unix_now",
    "monotonic_ms",
    "configure_logging",
]
