"""PlantUML transport encoding: raw deflate plus a URL-safe 64-char alphabet."""

from puml2png.codec.plantuml import ALPHABET, decode, encode, encode_bytes

__all__ = [
    "ALPHABET",
    "decode",
    "encode",
    "encode_bytes",
]
