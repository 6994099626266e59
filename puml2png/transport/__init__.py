"""HTTP transport to a PlantUML rendering server."""

from puml2png.transport.client import (
    DEFAULT_SERVER_URL,
    DEFAULT_TIMEOUT,
    SOFT_ERROR_STATUSES,
    PlantUMLClient,
)

__all__ = [
    "DEFAULT_SERVER_URL",
    "DEFAULT_TIMEOUT",
    "PlantUMLClient",
    "SOFT_ERROR_STATUSES",
]
