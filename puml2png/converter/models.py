"""Pydantic models for the conversion subsystem."""

from __future__ import annotations

from pydantic import BaseModel


class ConversionResult(BaseModel):
    """Result of rendering one source file to disk."""

    source_path: str
    artifact_path: str
    size_bytes: int
