"""Tests for DiagramConverter, validate_source, and artifact_path."""

from __future__ import annotations

from pathlib import Path

import pytest

from puml2png.converter import ConversionResult, DiagramConverter, artifact_path, validate_source

from tests.conftest import FAKE_PNG, VALID_PUML, FakeRenderer


# ---------------------------------------------------------------------------
# artifact_path
# ---------------------------------------------------------------------------


class TestArtifactPath:
    def test_same_directory_and_stem(self, tmp_path):
        source = tmp_path / "docs" / "flow.puml"
        out = artifact_path(source)
        assert out == tmp_path / "docs" / "flow.png"
        assert out.parent == source.parent
        assert out.stem == source.stem

    def test_uppercase_extension(self):
        assert artifact_path("a/B.PUML") == Path("a/B.png")

    def test_only_last_suffix_replaced(self):
        assert artifact_path("x.v2.puml") == Path("x.v2.png")

    def test_svg(self):
        assert artifact_path("diagram.puml", "svg") == Path("diagram.svg")


# ---------------------------------------------------------------------------
# validate_source
# ---------------------------------------------------------------------------


class TestValidateSource:
    @pytest.mark.parametrize(
        "content",
        [
            VALID_PUML,
            "@startuml\n@enduml",
            "  @startuml\nA -> B\n  @enduml  \n",
            "@startmindmap\n* root\n** child\n@endmindmap\n",
            "' comment\n@startuml name\nA -> B\n@enduml\n",
            "\ufeff" + VALID_PUML,
        ],
    )
    def test_accepts(self, content):
        assert validate_source(content) is True

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "   \n\t ",
            "\ufeff",
            "A -> B",
            "@startuml\nA -> B\n",
            "A -> B\n@enduml",
            "@startuml\nA -> B\n@endmindmap",
            "@enduml\n@startuml",
        ],
    )
    def test_rejects(self, content):
        assert validate_source(content) is False


# ---------------------------------------------------------------------------
# DiagramConverter
# ---------------------------------------------------------------------------


class TestDiagramConverter:
    def test_converts_and_writes_beside_source(self, tmp_path, write_source, fake_renderer):
        source = write_source(tmp_path / "seq.puml")
        converter = DiagramConverter(fake_renderer)

        result = converter.convert(source)

        assert isinstance(result, ConversionResult)
        assert result.artifact_path == str(tmp_path / "seq.png")
        assert result.size_bytes == len(FAKE_PNG)
        assert (tmp_path / "seq.png").read_bytes() == FAKE_PNG
        assert fake_renderer.calls == [VALID_PUML]

    def test_process_file_true_on_success(self, tmp_path, write_source, fake_renderer):
        source = write_source(tmp_path / "seq.puml")
        assert DiagramConverter(fake_renderer).process_file(source) is True

    def test_overwrites_existing_artifact(self, tmp_path, write_source, fake_renderer):
        source = write_source(tmp_path / "seq.puml")
        (tmp_path / "seq.png").write_bytes(b"old")

        assert DiagramConverter(fake_renderer).process_file(source) is True
        assert (tmp_path / "seq.png").read_bytes() == FAKE_PNG

    def test_svg_output(self, tmp_path, write_source, fake_renderer):
        source = write_source(tmp_path / "seq.puml")
        DiagramConverter(fake_renderer, output_format="svg").process_file(source)
        assert (tmp_path / "seq.svg").exists()
        assert not (tmp_path / "seq.png").exists()

    def test_missing_file(self, tmp_path, fake_renderer):
        converter = DiagramConverter(fake_renderer)
        assert converter.convert(tmp_path / "nope.puml") is None
        assert converter.process_file(tmp_path / "nope.puml") is False
        assert fake_renderer.calls == []

    def test_invalid_utf8(self, tmp_path, fake_renderer):
        source = tmp_path / "binary.puml"
        source.write_bytes(b"\xff\xfe@startuml\n@enduml")
        assert DiagramConverter(fake_renderer).process_file(source) is False
        assert fake_renderer.calls == []

    def test_byte_order_mark_is_dropped(self, tmp_path, fake_renderer):
        source = tmp_path / "bom.puml"
        source.write_bytes(b"\xef\xbb\xbf" + VALID_PUML.encode("utf-8"))

        assert DiagramConverter(fake_renderer).process_file(source) is True
        assert fake_renderer.calls == [VALID_PUML]
        assert (tmp_path / "bom.png").read_bytes() == FAKE_PNG

    def test_malformed_content_skips_render(self, tmp_path, write_source, fake_renderer):
        source = write_source(tmp_path / "bad.puml", "A -> B\n")
        assert DiagramConverter(fake_renderer).process_file(source) is False
        assert fake_renderer.calls == []
        assert not (tmp_path / "bad.png").exists()

    def test_render_failure(self, tmp_path, write_source):
        source = write_source(tmp_path / "seq.puml")
        renderer = FakeRenderer(image=None)
        assert DiagramConverter(renderer).process_file(source) is False
        assert not (tmp_path / "seq.png").exists()

    def test_unwritable_destination(self, tmp_path, write_source, fake_renderer):
        source = write_source(tmp_path / "seq.puml")
        (tmp_path / "seq.png").mkdir()  # a directory where the image should go
        assert DiagramConverter(fake_renderer).process_file(source) is False
