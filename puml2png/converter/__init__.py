"""Conversion of a single PlantUML source file into an image beside it."""

from puml2png.converter.converter import (
    DiagramConverter,
    artifact_path,
    validate_source,
)
from puml2png.converter.models import ConversionResult

__all__ = [
    "ConversionResult",
    "DiagramConverter",
    "artifact_path",
    "validate_source",
]
