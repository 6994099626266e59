"""Per-file conversion decision for the polling watcher."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from puml2png.watch.models import ConversionDecision, DecisionReason

logger = logging.getLogger(__name__)

DEFAULT_RECENCY_WINDOW = 10.0


class RecencyCheck:
    """Callable telling whether a file was modified within the trailing window.

    ``clock`` returns epoch seconds and is sampled once per call, so tests
    can pin "now" without touching file timestamps.
    """

    def __init__(
        self,
        window: float = DEFAULT_RECENCY_WINDOW,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if window <= 0:
            raise ValueError(f"Recency window must be positive, got {window}")
        self.window = window
        self._clock = clock

    def __call__(self, path: Path) -> bool:
        try:
            mtime = path.stat().st_mtime
        except OSError as exc:
            logger.warning("Could not check modification time for %s: %s", path, exc)
            return False
        return mtime > self._clock() - self.window


def decide(
    source: Path,
    artifact: Path,
    is_recent: Callable[[Path], bool],
) -> ConversionDecision:
    """Decide whether ``source`` must be converted this cycle.

    Rules are evaluated in order and the first match wins:

    1. the artifact is missing,
    2. the source changed within the recency window,
    3. the source is recent (checked again) while the artifact is not,
    4. otherwise the pair is up to date.

    Rule 3 can only fire if ``is_recent`` answers differently on its second
    call for the same source; it is kept as a separate branch so the
    reported reason stays distinguishable.
    """
    if not artifact.exists():
        return ConversionDecision(should_convert=True, reason=DecisionReason.NO_ARTIFACT_EXISTS)

    if is_recent(source):
        return ConversionDecision(should_convert=True, reason=DecisionReason.SOURCE_RECENTLY_MODIFIED)

    if is_recent(source) and not is_recent(artifact):
        return ConversionDecision(should_convert=True, reason=DecisionReason.SYNCHRONIZATION_REQUIRED)

    return ConversionDecision(should_convert=False, reason=DecisionReason.UP_TO_DATE)
