"""
Wire encoding helpers.

Bytes travel as 0x-prefixed lowercase hex, integers as JSON numbers.
Every decoder raises ValidationError on bad input; nothing here is used
inside the validated computation path.
"""

from __future__ import annotations

from typing import Any, List

from .errors import ValidationError

ADDRESS_LENGTH = 20
DIGEST_LENGTH = 32
SECRET_LENGTH = 32

U64_MAX = 2**64 - 1


def bytes_to_hex(data: bytes) -> str:
    return "0x" + data.hex()


def hex_to_bytes(value: Any, length: int, what: str = "value") -> bytes:
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {what}: expected hex string")
    raw = value[2:] if value[:2] in ("0x", "0X") else value
    if len(raw) != length * 2:
        raise ValidationError(
            f"Invalid {what} length, expected {length * 2} characters"
        )
    try:
        decoded = bytes.fromhex(raw)
    except ValueError:
        raise ValidationError(f"Invalid {what} encoding") from None
    # fromhex skips whitespace, so the character count alone is not enough
    if len(decoded) != length:
        raise ValidationError(f"Invalid {what} encoding")
    return decoded


def hex_to_bytes32(value: Any, what: str = "hash") -> bytes:
    return hex_to_bytes(value, DIGEST_LENGTH, what)


def hex_to_bytes20(value: Any, what: str = "address") -> bytes:
    return hex_to_bytes(value, ADDRESS_LENGTH, what)


def hex_list_to_bytes32(values: Any, what: str = "hash") -> List[bytes]:
    if not isinstance(values, list):
        raise ValidationError(f"Invalid {what} list: expected array")
    return [hex_to_bytes32(v, what) for v in values]


def require_u64(value: Any, name: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an unsigned 64-bit integer")
    if value < 0 or value > U64_MAX:
        raise ValidationError(f"{name} out of range for u64: {value}")
    return value


def require_bytes(value: Any, length: int, name: str) -> bytes:
    if not isinstance(value, (bytes, bytearray)) or len(value) != length:
        raise ValidationError(f"{name} must be exactly {length} bytes")
    return bytes(value)


def u64_le(value: int) -> bytes:
    return value.to_bytes(8, "little")
