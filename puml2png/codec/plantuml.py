"""Encoder for the token format PlantUML servers expect in request URLs.

The server decodes ``/png/<token>`` by reversing three steps:

1. UTF-8 encode the diagram text.
2. Compress with raw DEFLATE (no zlib header or checksum) at level 9.
3. Map the compressed bytes onto a base64-style alphabet that starts with
   the digits and uses ``-`` and ``_`` instead of ``+`` and ``/``. No
   padding is emitted; a trailing 1-byte group yields 2 characters and a
   trailing 2-byte group yields 3.

Standard ``base64`` can't be reused directly because both the alphabet
order and the padding rules differ.
"""

from __future__ import annotations

import zlib

ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-_"

_REVERSE = {ch: i for i, ch in enumerate(ALPHABET)}

# Negative wbits selects raw deflate output (no header, no adler32 trailer).
_RAW_DEFLATE_WBITS = -15


def _deflate(data: bytes) -> bytes:
    compressor = zlib.compressobj(9, zlib.DEFLATED, _RAW_DEFLATE_WBITS)
    return compressor.compress(data) + compressor.flush()


def encode_bytes(data: bytes) -> str:
    """Encode raw bytes with the PlantUML alphabet, without padding."""
    out: list[str] = []
    length = len(data)

    for i in range(0, length, 3):
        b1 = data[i]
        b2 = data[i + 1] if i + 1 < length else 0
        b3 = data[i + 2] if i + 2 < length else 0

        out.append(ALPHABET[b1 >> 2])
        out.append(ALPHABET[((b1 & 0x3) << 4) | (b2 >> 4)])
        if i + 1 < length:
            out.append(ALPHABET[((b2 & 0xF) << 2) | (b3 >> 6)])
        if i + 2 < length:
            out.append(ALPHABET[b3 & 0x3F])

    return "".join(out)


def encode(source: str) -> str:
    """Turn diagram source text into a transport token.

    Empty text maps to the empty token rather than to the encoding of an
    empty deflate stream.
    """
    if not source:
        return ""
    return encode_bytes(_deflate(source.encode("utf-8")))


def _decode_bytes(token: str) -> bytes:
    out = bytearray()
    for i in range(0, len(token), 4):
        chunk = [_REVERSE[ch] for ch in token[i:i + 4]]
        if len(chunk) == 1:
            raise ValueError(f"Truncated token: dangling character at {i}")
        c1, c2 = chunk[0], chunk[1]
        out.append(((c1 << 2) | (c2 >> 4)) & 0xFF)
        if len(chunk) > 2:
            c3 = chunk[2]
            out.append(((c2 & 0xF) << 4 | (c3 >> 2)) & 0xFF)
        if len(chunk) > 3:
            c4 = chunk[3]
            out.append(((chunk[2] & 0x3) << 6 | c4) & 0xFF)
    return bytes(out)


def decode(token: str) -> str:
    """Reverse ``encode``. Only used for debugging and tests.

    Raises ValueError for characters outside the alphabet or a token that
    doesn't inflate to valid UTF-8.
    """
    if not token:
        return ""
    try:
        compressed = _decode_bytes(token)
    except KeyError as exc:
        raise ValueError(f"Character {exc.args[0]!r} is not in the PlantUML alphabet") from exc
    try:
        return zlib.decompress(compressed, _RAW_DEFLATE_WBITS).decode("utf-8")
    except (zlib.error, UnicodeDecodeError) as exc:
        raise ValueError(f"Token does not decode to diagram text: {exc}") from exc
