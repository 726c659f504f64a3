"""Tests for the on-disk artifact store."""

import json

import pytest

from gameqa.capture.artifact_store import ArtifactKind, ArtifactStore
from gameqa.models.evidence import ConsoleLog, ErrorLog
from gameqa.utils.errors import ErrorKind, GameQAError
from gameqa.utils.helpers import generate_session_id


class TestArtifactStore:
    def test_screenshot_path_creates_directory(self, tmp_path):
        store = ArtifactStore(tmp_path)

        path = store.screenshot_path("s1", 3)

        assert path == str(tmp_path / "s1" / "screenshots" / "screenshot-3.png")
        assert (tmp_path / "s1" / "screenshots").is_dir()

    def test_console_logs_text_format(self, tmp_path):
        store = ArtifactStore(tmp_path)
        logs = [
            ConsoleLog(timestamp="2024-01-01T00:00:00", level="warn", message="Low FPS"),
            ConsoleLog(timestamp="2024-01-01T00:00:01", level="log", message="Level 1"),
        ]

        path = store.save(ArtifactKind.CONSOLE_LOGS, "s1", logs)

        assert path.endswith("logs/console.log")
        content = (tmp_path / "s1" / "logs" / "console.log").read_text()
        assert content.splitlines() == [
            "[2024-01-01T00:00:00] [WARN] Low FPS",
            "[2024-01-01T00:00:01] [LOG] Level 1",
        ]

    def test_error_logs_include_stack_and_source(self, tmp_path):
        store = ArtifactStore(tmp_path)
        errors = [ErrorLog(timestamp="t1", type="error", message="x is undefined", stack="at main.js:10", source="main.js")]

        store.save("error_logs", "s1", errors)

        content = (tmp_path / "s1" / "logs" / "errors.log").read_text()
        assert "[t1] [error] x is undefined" in content
        assert "at main.js:10" in content
        assert "main.js" in content
        assert "---" in content

    def test_metadata_and_report_are_indented_json(self, tmp_path):
        store = ArtifactStore(tmp_path)

        store.save(ArtifactKind.METADATA, "s1", {"session_id": "s1"})
        store.save(ArtifactKind.REPORT, "s1", {"status": "pass", "playability_score": 90})

        assert (tmp_path / "s1" / "metadata.json").read_text() == json.dumps({"session_id": "s1"}, indent=2)
        assert store.load_report("s1") == {"status": "pass", "playability_score": 90}

    def test_unknown_kind_rejected(self, tmp_path):
        with pytest.raises(GameQAError) as exc_info:
            ArtifactStore(tmp_path).save("videos", "s1", b"")
        assert exc_info.value.kind is ErrorKind.VALIDATION_ERROR

    def test_load_report_missing(self, tmp_path):
        assert ArtifactStore(tmp_path).load_report("nope") is None

    def test_list_artifacts(self, tmp_path):
        store = ArtifactStore(tmp_path)
        store.save(ArtifactKind.REPORT, "s1", {"status": "fail"})
        store.save(ArtifactKind.CONSOLE_LOGS, "s1", [])

        artifacts = store.list_artifacts("s1")

        names = {a["name"]: a for a in artifacts}
        assert set(names) == {"report.json", "console.log"}
        assert names["report.json"]["type"] == "json"
        assert names["report.json"]["path"].startswith("s1")
        assert store.list_artifacts("missing") == []

    @pytest.mark.parametrize("session_id", ["..", ".", "a/b", "s1.bak", ""])
    def test_session_id_must_be_single_safe_component(self, tmp_path, session_id):
        store = ArtifactStore(tmp_path / "out")
        (tmp_path / "report.json").write_text(json.dumps({"status": "pass"}))

        assert store.load_report(session_id) is None
        with pytest.raises(GameQAError) as exc_info:
            store.list_artifacts(session_id)
        assert exc_info.value.kind is ErrorKind.VALIDATION_ERROR
        with pytest.raises(GameQAError):
            store.save(ArtifactKind.REPORT, session_id, {"status": "pass"})

    def test_generated_session_ids_are_accepted(self):
        assert ArtifactStore.is_valid_session_id(generate_session_id())
