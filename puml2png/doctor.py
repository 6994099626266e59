"""Environment checks for ``puml2png doctor``."""

from __future__ import annotations

import logging
import shutil
import subprocess

from pydantic import BaseModel

from puml2png.transport import PlantUMLClient

logger = logging.getLogger(__name__)


class DoctorReport(BaseModel):
    graphviz: bool
    graphviz_version: str | None = None
    server_url: str
    server_reachable: bool

    @property
    def ok(self) -> bool:
        # Graphviz only matters for a local server; reachability is what counts.
        return self.server_reachable


def graphviz_version() -> str | None:
    """Version line printed by ``dot -V``, or None if Graphviz isn't usable."""
    dot = shutil.which("dot")
    if dot is None:
        return None
    try:
        proc = subprocess.run(
            [dot, "-V"], capture_output=True, text=True, timeout=10, check=False
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug("dot -V failed: %s", exc)
        return None
    if proc.returncode != 0:
        return None
    # dot prints its version on stderr
    return (proc.stderr or proc.stdout).strip() or "unknown"


def run_checks(client: PlantUMLClient) -> DoctorReport:
    version = graphviz_version()
    return DoctorReport(
        graphviz=version is not None,
        graphviz_version=version,
        server_url=client.server_url,
        server_reachable=client.ping(),
    )
