"""
Tests for window view models.
"""

import pytest

from agentarium_client.schemas.events import AgentEvent
from agentarium_client.views.activity import ActivityEntry, ActivityLog
from agentarium_client.views.directory_picker import DirectoryPicker
from agentarium_client.views.loading import WAITING_MESSAGE, WorldLoadingOverlay
from agentarium_client.views.status import StatusIndicator


def event(**kwargs):
    values = {"agent_id": "agent-1", "event_type": "read", "timestamp": 1}
    values.update(kwargs)
    return AgentEvent(**values)


class TestActivityLog:
    """Tests for the bounded activity log"""

    def test_entry_prefers_thought(self):
        entry = ActivityEntry.from_event(event(thought="Reading index.ts", target_path="/src/index.ts"))

        assert entry.message == "Reading index.ts"
        assert entry.target_path == "/src/index.ts"

    def test_entry_from_path(self):
        entry = ActivityEntry.from_event(event(target_path="/src/index.ts"))

        assert entry.message == "read index.ts"

    def test_entry_bare_event(self):
        entry = ActivityEntry.from_event(event(event_type="idle"))

        assert entry.message == "idle"
        assert entry.icon == "💭"

    def test_oldest_entries_dropped(self):
        log = ActivityLog(max_entries=3)
        for i in range(5):
            log.add_event(event(thought=f"step {i}"))

        assert len(log) == 3
        assert [e.message for e in log.entries] == ["step 2", "step 3", "step 4"]

    def test_current_file(self):
        log = ActivityLog()

        assert log.current_file is None
        assert log.current_file_name == "—"

        log.add_event(event(target_path="/src/app.ts"))
        log.add_event(event(event_type="idle"))

        assert log.current_file == "/src/app.ts"
        assert log.current_file_name == "app.ts"

    def test_clear(self):
        log = ActivityLog()
        log.add_event(event())

        log.clear()

        assert log.entries == []


class TestStatusIndicator:
    """Tests for the connection badge"""

    def test_connected(self):
        status = StatusIndicator(is_connected=True, error="stale")

        assert status.text == "CONNECTED"
        assert status.color == "green"

    def test_error(self):
        status = StatusIndicator(is_connected=False, error="Connection failed after 5 attempts")

        assert status.text == "ERROR: Connection failed after 5 attempts"
        assert status.color == "red"

    def test_disconnected(self):
        assert StatusIndicator(is_connected=False).text == "DISCONNECTED"


class TestLoadingOverlay:
    """Tests for the world loading banner"""

    def test_initially_hidden(self):
        overlay = WorldLoadingOverlay()

        assert not overlay.visible
        assert overlay.message == WAITING_MESSAGE
        assert overlay.subtitle is None

    def test_show_resets_counts(self):
        overlay = WorldLoadingOverlay()
        overlay.set_counts(3, 4)

        overlay.show("Creating world...", cwd="/test")

        assert overlay.visible
        assert overlay.cwd == "/test"
        assert overlay.subtitle is None

    def test_counts_subtitle(self):
        overlay = WorldLoadingOverlay()
        overlay.set_counts(3, 4)

        assert overlay.subtitle == "(3 folders, 4 files)"


class TestDirectoryPicker:
    """Tests for directory selection"""

    def test_nothing_selected(self):
        assert DirectoryPicker().display_text == "No directory selected"

    def test_select_directory(self, tmp_path):
        selected = []
        picker = DirectoryPicker(on_select=selected.append)

        path = picker.select(str(tmp_path))

        assert path == str(tmp_path.resolve())
        assert picker.display_text == path
        assert selected == [path]

    def test_select_file_rejected(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("hello")
        picker = DirectoryPicker()

        with pytest.raises(ValueError):
            picker.select(str(target))

        assert picker.selected_path is None

    def test_select_missing_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            DirectoryPicker().select(str(tmp_path / "missing"))
