"""Encoding of single local storage values.

A stored value is one tag byte followed by JSON text. The tag selects the
text encoding of the body: 0x00 is UTF-16LE, 0x01 is Latin-1. On the
textual (hex) wire the tag is the first two hex digits, so `encode()`
always starts with "00" and `decode()` strips exactly one byte.
"""

from __future__ import annotations

import json
from typing import Any

from steamcat.errors import DecodeError, UnsupportedFormatError

FORMAT_UTF16 = 0x00
FORMAT_LATIN1 = 0x01

_BODY_ENCODINGS = {
    FORMAT_UTF16: "utf-16-le",
    FORMAT_LATIN1: "latin-1",
}

KEY_ENCODING = "latin-1"


def encode_key(key: str) -> bytes:
    return key.encode(KEY_ENCODING)


def encode_value(value: Any) -> bytes:
    """Serialize *value* to the raw bytes stored in the database."""
    text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return bytes([FORMAT_UTF16]) + text.encode(_BODY_ENCODINGS[FORMAT_UTF16])


def encode(value: Any) -> str:
    """Serialize *value* to hex wire text ("00" + hex of the UTF-16LE JSON)."""
    return encode_value(value).hex()


def decode_value(raw: bytes) -> Any:
    """Decode raw stored bytes back into a JSON value."""
    if not raw:
        raise DecodeError("Empty value", raw)

    tag = raw[0]
    encoding = _BODY_ENCODINGS.get(tag)
    if encoding is None:
        raise UnsupportedFormatError(tag, raw[:16])

    body = raw[1:]
    try:
        text = body.decode(encoding)
    except UnicodeDecodeError as e:
        raise DecodeError(f"Value body is not valid {encoding}", body[:32]) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        start = max(e.pos - 20, 0)
        raise DecodeError(f"Malformed JSON ({e.msg})", text[start : e.pos + 20]) from e


def decode(raw: str | bytes) -> Any:
    """Decode either raw stored bytes or hex wire text."""
    if isinstance(raw, str):
        try:
            raw = bytes.fromhex(raw)
        except ValueError as e:
            raise DecodeError("Value is not valid hex text", raw) from e
    return decode_value(raw)
