"""Reads a PlantUML source, renders it remotely, and writes the image beside it."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol

from puml2png.converter.models import ConversionResult

logger = logging.getLogger(__name__)

# @startuml ... @enduml, @startmindmap ... @endmindmap, etc.
_START_MARKER = re.compile(r"^\s*@start(\w+)\b", re.MULTILINE)


class Renderer(Protocol):
    """Anything that can turn diagram source into image bytes."""

    def render(self, source: str) -> bytes | None:
        ...


def artifact_path(source: str | Path, output_format: str = "png") -> Path:
    """Image path for a source file: same directory, same stem, new extension."""
    return Path(source).with_suffix(f".{output_format}")


def validate_source(content: str) -> bool:
    """Cheap structural guard: non-blank and wrapped in matching start/end markers."""
    content = (content or "").removeprefix("\ufeff")
    if not content.strip():
        return False

    for match in _START_MARKER.finditer(content):
        kind = match.group(1)
        if re.search(rf"^\s*@end{kind}\b", content[match.end():], re.MULTILINE):
            return True
    return False


class DiagramConverter:
    """Converts ``.puml`` files to images through a renderer.

    None of the public methods raise; failures are logged and returned as
    None / False so a caller looping over many files keeps going.
    """

    def __init__(self, renderer: Renderer, output_format: str = "png") -> None:
        self._renderer = renderer
        self.output_format = output_format

    def convert(self, source_path: str | Path) -> ConversionResult | None:
        """Render one file and write the image. Returns None on any error."""
        path = Path(source_path)
        logger.info(
            "Converting %s to %s",
            path,
            self.output_format.upper(),
            extra={"event": "conversion_started", "source": str(path)},
        )

        try:
            content = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Could not read %s: %s", path, exc)
            return None

        if not validate_source(content):
            logger.error("Invalid PlantUML content (missing @start/@end markers): %s", path)
            return None

        image = self._renderer.render(content)
        if image is None:
            return None

        output = artifact_path(path, self.output_format)
        try:
            output.write_bytes(image)
        except OSError as exc:
            logger.error("Could not write %s: %s", output, exc)
            return None

        return ConversionResult(
            source_path=str(path),
            artifact_path=str(output),
            size_bytes=len(image),
        )

    def process_file(self, source_path: str | Path) -> bool:
        """Convert ``source_path``; True only if the image was written."""
        result = self.convert(source_path)
        ok = result is not None
        if ok:
            logger.info(
                "Successfully converted: %s -> %s",
                result.source_path,
                result.artifact_path,
                extra={"event": "conversion_finished", "source": result.source_path, "ok": True},
            )
        else:
            logger.error(
                "Failed to convert file: %s",
                source_path,
                extra={"event": "conversion_finished", "source": str(source_path), "ok": False},
            )
        return ok
