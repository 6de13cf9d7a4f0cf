"""Tests for the auto-restarting dev runner."""

from watchfiles import Change

from tsm import dev


class TestCommand:
    def test_always_debug(self):
        assert dev.command([]) == "tsm --debug"

    def test_passes_arguments_through_quoted(self):
        assert dev.command(["--log-file", "/tmp/my log"]) == "tsm --debug --log-file '/tmp/my log'"


class TestSourceFilter:
    def test_watches_python_and_stylesheets(self):
        source_filter = dev.SourceFilter()
        assert source_filter(Change.modified, "/src/tsm/state.py")
        assert source_filter(Change.modified, "/src/tsm/app.tcss")

    def test_ignores_other_files(self):
        source_filter = dev.SourceFilter()
        assert not source_filter(Change.modified, "/src/tsm/notes.txt")
        assert not source_filter(Change.added, "/src/tsm/__pycache__/state.cpython-312.py")


def test_main_runs_watcher(monkeypatch):
    calls = []
    monkeypatch.setattr(dev, "run_process", lambda *paths, **kwargs: calls.append((paths, kwargs)))
    assert dev.main(["--no-preview"]) == 0
    (paths, kwargs), = calls
    assert paths == (dev.SOURCE_DIR,)
    assert kwargs["target"] == "tsm --debug --no-preview"
    assert kwargs["target_type"] == "command"
