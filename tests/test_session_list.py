"""Tests for the rows the session list paints."""

import pytest

from tsm.state import SessionBrowser
from tsm.widgets.dialogs import dialog_for, footer_hints, status_line
from tsm.widgets.session_list import build_rows

from conftest import FakeClient, make_session


class TestBuildRows:
    def test_row_count_matches_index(self, browser):
        assert len(build_rows(browser)) == browser.total_list_items()

    def test_headers_and_cursor(self, browser):
        rows = build_rows(browser)
        assert rows[0].plain.startswith(" ─ /code/api (2)")
        assert "api" in rows[browser.flat_list_index()].plain
        assert "▸" in rows[browser.flat_list_index()].plain

    @pytest.mark.parametrize("action", [0, 1, 2])
    def test_overlay_rows(self, browser, action):
        browser.select_next()
        browser.enter_action_menu()
        browser.selected_action = action
        rows = build_rows(browser)
        assert len(rows) == browser.total_list_items()
        cursor = rows[browser.flat_list_index()].plain
        assert browser.available_actions[action].label in cursor
        assert "▸" in cursor

    def test_empty(self):
        assert build_rows(SessionBrowser.load(FakeClient())) == []

    @pytest.mark.parametrize("action", [None, 0, 1, 2])
    def test_cursor_row_with_interleaved_groups(self, action):
        browser = SessionBrowser.load(FakeClient([
            make_session("a1", created=1, path="/a"),
            make_session("b1", created=2, path="/b"),
            make_session("a2", created=3, path="/a"),
        ]))
        browser.selected = 2
        if action is not None:
            browser.enter_action_menu()
            browser.selected_action = action
        rows = build_rows(browser)
        assert len(rows) == browser.total_list_items()
        cursor = rows[browser.flat_list_index()].plain
        expected = "a2" if action is None else browser.available_actions[action].label
        assert expected in cursor
        assert "▸" in cursor


class TestChrome:
    def test_dialog_only_for_modal_modes(self, browser):
        assert dialog_for(browser) is None
        browser.start_kill()
        assert dialog_for(browser) is not None
        browser.cancel()
        browser.start_new_session()
        assert dialog_for(browser) is not None

    def test_status_line_shows_filter(self, browser):
        browser.filter = "api"
        assert 'filter: "api"' in status_line(browser).plain
        browser.start_filter()
        assert status_line(browser).plain.strip() == "/ api_"

    def test_footer_per_mode(self, browser):
        assert "quit" in footer_hints(browser.mode)
        browser.start_kill()
        assert "confirm" in footer_hints(browser.mode)
