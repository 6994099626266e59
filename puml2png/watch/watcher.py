"""Polling directory watcher that keeps rendered images in sync with sources."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from puml2png.converter import artifact_path
from puml2png.watch.models import (
    ConversionDecision,
    ConversionOutcome,
    DecisionRecord,
    PollReport,
    RunStatus,
    SourceFile,
)
from puml2png.watch.policy import RecencyCheck, decide

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
SOURCE_EXTENSION = ".puml"


class FileProcessor(Protocol):
    """The conversion step the watcher drives for each qualifying file."""

    output_format: str

    def process_file(self, source_path: str | Path) -> bool:
        ...


def list_sources(root: Path, extension: str = SOURCE_EXTENSION) -> list[SourceFile]:
    """Regular files under ``root`` ending in ``extension`` (any case), sorted by path.

    Raises OSError if ``root`` is missing or not a directory.
    """
    if not root.exists():
        raise FileNotFoundError(f"Directory does not exist: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    suffix = extension.lower()
    found: list[SourceFile] = []
    for path in sorted(root.rglob("*")):
        if not path.name.lower().endswith(suffix) or not path.is_file():
            continue
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            # Deleted between listing and stat.
            continue
        found.append(SourceFile(path=str(path.absolute()), mtime=mtime))
    return found


class _WakeHandler(FileSystemEventHandler):
    """Sets the wake event when a source file is touched."""

    def __init__(self, wake: threading.Event, extension: str) -> None:
        super().__init__()
        self._wake = wake
        self._suffix = extension.lower()

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        if any(str(p).lower().endswith(self._suffix) for p in paths if p):
            self._wake.set()


class DirectoryWatcher:
    """Scans a directory on a fixed cadence and converts sources that need it.

    Each scan is sequential, so at most one render request is in flight.
    ``stop()`` may be called from any thread; a loop blocked in its sleep
    wakes immediately. With ``use_fs_events`` a watchdog observer cuts the
    sleep short whenever a source file changes. Decisions are still made by
    ``poll_once`` alone.
    """

    def __init__(
        self,
        processor: FileProcessor,
        interval: float = DEFAULT_POLL_INTERVAL,
        is_recent: Callable[[Path], bool] | None = None,
        extension: str = SOURCE_EXTENSION,
        use_fs_events: bool = False,
        on_poll: Callable[[PollReport], None] | None = None,
    ) -> None:
        self._processor = processor
        self.interval = _check_interval(interval)
        self._is_recent = is_recent or RecencyCheck()
        self.extension = extension
        self.use_fs_events = use_fs_events
        self._on_poll = on_poll
        self._stop = threading.Event()
        self._wake = threading.Event()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        """Ask the loop to finish once the current scan completes."""
        self._stop.set()
        self._wake.set()

    # ------------------------------------------------------------------
    # Single scan
    # ------------------------------------------------------------------

    def decision_for(self, source: Path) -> ConversionDecision:
        artifact = artifact_path(source, self._processor.output_format)
        return decide(source, artifact, self._is_recent)

    def poll_once(self, root: str | Path) -> PollReport:
        """Scan ``root`` once, converting what needs it. Never raises."""
        root = Path(root)
        start = time.monotonic()
        report = PollReport(root=str(root))

        try:
            sources = list_sources(root, self.extension)
        except OSError as exc:
            logger.error("Error scanning %s for %s files: %s", root, self.extension, exc)
            report.error = str(exc)
            report.duration = time.monotonic() - start
            return report

        for source in sources:
            path = Path(source.path)
            rel = _relative(path, root)
            try:
                decision = self.decision_for(path)
            except Exception as exc:
                logger.exception("Could not decide whether to convert %s", rel)
                report.records.append(DecisionRecord(
                    path=rel, outcome=ConversionOutcome.FAILED, error=str(exc),
                ))
                continue

            if not decision.should_convert:
                report.records.append(DecisionRecord(
                    path=rel, decision=decision, outcome=ConversionOutcome.SKIPPED,
                ))
                continue

            logger.info(
                "Found: %s (%s)",
                rel,
                decision.reason.value.replace("_", " "),
                extra={"event": "decision", "source": rel, "reason": decision.reason.value},
            )
            try:
                ok = self._processor.process_file(path)
            except Exception:
                logger.exception("Unexpected error converting %s", rel)
                ok = False

            if not ok:
                logger.error("Failed to convert PlantUML file: %s", rel)
            report.records.append(DecisionRecord(
                path=rel,
                decision=decision,
                outcome=ConversionOutcome.CONVERTED if ok else ConversionOutcome.FAILED,
            ))

        report.duration = time.monotonic() - start
        return report

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run(self, root: str | Path, interval: float | None = None) -> RunStatus:
        """Poll ``root`` until stopped. Returns how the loop ended."""
        root = Path(root)
        interval = self.interval if interval is None else _check_interval(interval)
        logger.info("Starting watch mode in directory: %s", root)

        observer = self._start_observer(root) if self.use_fs_events else None
        try:
            return self._loop(root, interval)
        except KeyboardInterrupt:
            logger.info("Watch mode interrupted. Exiting...")
            return RunStatus.CANCELLED
        finally:
            if observer is not None:
                observer.stop()
                observer.join(timeout=5)
            logger.info("Stopped watching %s", root)

    def _loop(self, root: Path, interval: float) -> RunStatus:
        while not self._stop.is_set():
            report = self.poll_once(root)
            if self._on_poll is not None:
                try:
                    self._on_poll(report)
                except Exception:
                    logger.exception("on_poll callback failed")
            if report.error is not None:
                return RunStatus.FAILED

            if self._stop.is_set():
                break
            self._wake.wait(interval)
            self._wake.clear()
        return RunStatus.STOPPED

    def _start_observer(self, root: Path) -> Observer | None:
        observer = Observer()
        try:
            observer.schedule(_WakeHandler(self._wake, self.extension), str(root), recursive=True)
            observer.start()
        except OSError as exc:
            # Polling still works; only the early wake-ups are lost.
            logger.warning("File system events unavailable for %s: %s", root, exc)
            return None
        return observer


def _relative(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root.absolute()))
    except ValueError:
        return str(path)


def _check_interval(interval: float) -> float:
    if interval <= 0:
        raise ValueError(f"Polling interval must be positive, got {interval}")
    return interval
