"""Tests for logging setup and the doctor checks."""

from __future__ import annotations

import json
import logging
import subprocess
from unittest.mock import MagicMock, patch

from rich.logging import RichHandler

from puml2png.doctor import DoctorReport, graphviz_version, run_checks
from puml2png.logs import JsonFormatter, configure_logging


class TestConfigureLogging:
    def test_text_uses_rich(self):
        logger = configure_logging("debug", "text")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_json_handler(self):
        logger = configure_logging("warning", "json")
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)
        assert logger.level == logging.WARNING

    def test_reconfigure_replaces_handler(self):
        configure_logging("info", "text")
        logger = configure_logging("info", "json")
        assert len(logger.handlers) == 1


class TestJsonFormatter:
    def test_includes_event_fields(self):
        record = logging.LogRecord(
            "puml2png.watch", logging.INFO, __file__, 1, "Found: %s", ("a.puml",), None
        )
        record.event = "decision"
        record.reason = "no_artifact_exists"

        entry = json.loads(JsonFormatter().format(record))

        assert entry["message"] == "Found: a.puml"
        assert entry["level"] == "info"
        assert entry["event"] == "decision"
        assert entry["reason"] == "no_artifact_exists"
        assert "ok" not in entry

    def test_plain_record(self):
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", (), None)
        entry = json.loads(JsonFormatter().format(record))
        assert entry["message"] == "boom"
        assert "event" not in entry


class TestGraphviz:
    def test_not_installed(self):
        with patch("puml2png.doctor.shutil.which", return_value=None):
            assert graphviz_version() is None

    def test_version_from_stderr(self):
        proc = subprocess.CompletedProcess(
            ["dot", "-V"], 0, stdout="", stderr="dot - graphviz version 9.0.0 (0)\n"
        )
        with patch("puml2png.doctor.shutil.which", return_value="/usr/bin/dot"), \
                patch("puml2png.doctor.subprocess.run", return_value=proc):
            assert graphviz_version() == "dot - graphviz version 9.0.0 (0)"

    def test_nonzero_exit(self):
        proc = subprocess.CompletedProcess(["dot", "-V"], 1, stdout="", stderr="")
        with patch("puml2png.doctor.shutil.which", return_value="/usr/bin/dot"), \
                patch("puml2png.doctor.subprocess.run", return_value=proc):
            assert graphviz_version() is None

    def test_exec_failure(self):
        with patch("puml2png.doctor.shutil.which", return_value="/usr/bin/dot"), \
                patch("puml2png.doctor.subprocess.run", side_effect=OSError("exec format error")):
            assert graphviz_version() is None


class TestRunChecks:
    def test_report(self):
        client = MagicMock()
        client.server_url = "http://plantuml.test"
        client.ping.return_value = True
        with patch("puml2png.doctor.graphviz_version", return_value=None):
            report = run_checks(client)

        assert report == DoctorReport(
            graphviz=False, server_url="http://plantuml.test", server_reachable=True
        )
        assert report.ok

    def test_unreachable_server_is_not_ok(self):
        report = DoctorReport(graphviz=True, server_url="http://x", server_reachable=False)
        assert not report.ok
