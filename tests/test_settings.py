"""Tests for settings loading."""

import json

from tsm.settings import Settings, settings_path


class TestSettingsLoad:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert Settings.load(tmp_path / "absent.json") == Settings()

    def test_reads_values(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"refresh_interval": 5, "agent_command": "codex", "show_preview": False}))
        settings = Settings.load(path)
        assert settings.refresh_interval == 5.0
        assert settings.agent_command == "codex"
        assert settings.show_preview is False
        assert settings.preview_lines == 15

    def test_bad_json_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        assert Settings.load(path) == Settings()
        assert "unreadable settings" in caplog.text

    def test_non_object_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        assert Settings.load(path) == Settings()

    def test_bad_types_give_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"preview_lines": "many"}))
        assert Settings.load(path) == Settings()


def test_path_override(monkeypatch, tmp_path):
    monkeypatch.setenv("TSM_SETTINGS", str(tmp_path / "custom.json"))
    assert settings_path() == tmp_path / "custom.json"
