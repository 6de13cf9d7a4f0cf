"""Tests for path completion."""

import pytest

from tsm import completion
from tsm.completion import complete_path, expand_path


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    (tmp_path / "apple").mkdir()
    (tmp_path / "Banana.txt").write_text("")
    (tmp_path / ".hidden").mkdir()
    (tmp_path / "apricot.md").write_text("")
    (tmp_path / "apple" / "core").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestCompletePath:
    def test_empty_input_lists_cwd_directories_first(self, workdir):
        (workdir / "apricot.md").unlink()
        result = complete_path("")
        assert result.suggestions == ["apple/", "Banana.txt"]

    def test_hidden_entries_suppressed(self, workdir):
        assert ".hidden/" not in complete_path("").suggestions

    def test_dot_prefix_shows_hidden(self, workdir):
        assert complete_path(".h").suggestions == [".hidden/"]

    def test_prefix_match_and_ghost_text(self, workdir):
        result = complete_path("ap")
        assert result.suggestions == ["apple/", "apricot.md"]
        assert result.ghost_text == "ple/"

    def test_prefix_is_case_insensitive(self, workdir):
        assert complete_path("ban").suggestions == ["Banana.txt"]

    def test_trailing_slash_lists_directory(self, workdir):
        result = complete_path("apple/")
        assert result.suggestions == ["apple/core/"]

    def test_absolute_path(self, workdir):
        result = complete_path(str(workdir / "Ban"))
        assert result.suggestions == [str(workdir / "Banana.txt")]
        assert result.ghost_text == "ana.txt"

    def test_missing_parent_gives_nothing(self, workdir):
        result = complete_path("no/such/dir/x")
        assert result.suggestions == []
        assert result.ghost_text is None

    def test_trailing_slash_on_file_gives_nothing(self, workdir):
        assert complete_path("Banana.txt/").suggestions == []

    def test_no_match(self, workdir):
        result = complete_path("zzz")
        assert result.suggestions == []
        assert result.ghost_text is None

    def test_exact_match_has_no_ghost(self, workdir):
        assert complete_path("apricot.md").ghost_text is None

    def test_tilde_is_kept_in_suggestions(self, tmp_path, monkeypatch):
        (tmp_path / "projects").mkdir()
        monkeypatch.setenv("HOME", str(tmp_path))
        result = complete_path("~/pro")
        assert result.suggestions == ["~/projects/"]
        assert result.ghost_text == "jects/"

    def test_unreadable_directory_degrades_silently(self, workdir, monkeypatch, caplog):
        def denied(path):
            raise PermissionError(13, "Permission denied", path)

        monkeypatch.setattr(completion.os, "scandir", denied)
        result = complete_path("apple/")
        assert result.suggestions == []
        assert result.ghost_text is None
        assert "WARNING" not in caplog.text


class TestExpandPath:
    def test_expands_tilde(self, monkeypatch):
        monkeypatch.setenv("HOME", "/home/someone")
        assert expand_path("~/code") == "/home/someone/code"

    def test_strips_whitespace(self):
        assert expand_path("  /tmp  ") == "/tmp"
