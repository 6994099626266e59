"""Directory watching: conversion decisions and the polling loop."""

from puml2png.watch.models import (
    ConversionDecision,
    ConversionOutcome,
    DecisionReason,
    DecisionRecord,
    PollReport,
    RunStatus,
    SourceFile,
)
from puml2png.watch.policy import DEFAULT_RECENCY_WINDOW, RecencyCheck, decide
from puml2png.watch.watcher import (
    DEFAULT_POLL_INTERVAL,
    SOURCE_EXTENSION,
    DirectoryWatcher,
    list_sources,
)

__all__ = [
    "ConversionDecision",
    "ConversionOutcome",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_RECENCY_WINDOW",
    "DecisionReason",
    "DecisionRecord",
    "DirectoryWatcher",
    "PollReport",
    "RecencyCheck",
    "RunStatus",
    "SOURCE_EXTENSION",
    "SourceFile",
    "decide",
    "list_sources",
]
