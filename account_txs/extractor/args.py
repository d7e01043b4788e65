"""
Function-call argument decoding.

NEAR stores call arguments as an opaque blob. Payloads in the primary table
carry it either as base64 text or as a JSON array of byte values rendered to a
string ("[123,34,...]"). Both are decoded to text and then parsed as JSON.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

BYTE_ARRAY_PATTERN = re.compile(r"^\[.+\]$", re.DOTALL)
EMPTY_ARGS_TEXT = "{}"


class ArgsEncoding(Enum):
    """How an argument blob was encoded in the payload."""

    EMPTY = "empty"
    BYTE_ARRAY = "byte_array"
    BASE64 = "base64"
    INVALID = "invalid"


@dataclass(frozen=True)
class DecodedArgs:
    """Result of decoding one argument blob. value is set only for JSON objects."""

    encoding: ArgsEncoding
    text: str | None
    value: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.encoding is not ArgsEncoding.INVALID


def _chars_from_codes(codes: Any) -> str | None:
    """Join a list of character codes into a string; None if any item is not a code."""
    if not isinstance(codes, list):
        return None
    if any(isinstance(c, bool) or not isinstance(c, int) for c in codes):
        return None
    try:
        return "".join(chr(c) for c in codes)
    except (ValueError, OverflowError):
        return None


def decode_args_text(blob: Any) -> tuple[ArgsEncoding, str | None]:
    """
    Decode an argument blob to text.

    - None / "" -> (EMPTY, "{}")
    - "[104,105]" or [104, 105] -> (BYTE_ARRAY, "hi")
    - anything else -> base64 decoded as UTF-8 (invalid bytes replaced)
    Returns (INVALID, None) when the blob cannot be decoded.
    """
    if blob is None or blob == "":
        return ArgsEncoding.EMPTY, EMPTY_ARGS_TEXT
    if isinstance(blob, list):
        text = _chars_from_codes(blob)
        return (ArgsEncoding.BYTE_ARRAY, text) if text is not None else (ArgsEncoding.INVALID, None)
    if not isinstance(blob, str):
        return ArgsEncoding.INVALID, None

    if BYTE_ARRAY_PATTERN.match(blob):
        try:
            codes = json.loads(blob)
        except json.JSONDecodeError:
            return ArgsEncoding.INVALID, None
        text = _chars_from_codes(codes)
        return (ArgsEncoding.BYTE_ARRAY, text) if text is not None else (ArgsEncoding.INVALID, None)

    try:
        raw = base64.b64decode(blob)
    except (binascii.Error, ValueError):
        return ArgsEncoding.INVALID, None
    return ArgsEncoding.BASE64, raw.decode("utf-8", errors="replace")


def decode_args(blob: Any) -> DecodedArgs:
    """
    Decode an argument blob and parse it as JSON.

    value is the parsed object when the text is a JSON object; arrays and
    scalars decode fine but carry no keys (value None). Malformed JSON gives
    encoding INVALID.
    """
    encoding, text = decode_args_text(blob)
    if text is None:
        return DecodedArgs(encoding=ArgsEncoding.INVALID, text=None)
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return DecodedArgs(encoding=ArgsEncoding.INVALID, text=text)
    return DecodedArgs(
        encoding=encoding,
        text=text,
        value=parsed if isinstance(parsed, dict) else None,
    )
