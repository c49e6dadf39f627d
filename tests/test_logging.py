#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

from beatwave import debug
from beatwave.ui.tui import TUIManager
from beatwave.utils.debug import DebugManager


class TUILoggingTests(unittest.TestCase):
    def setUp(self):
        self.tui = TUIManager()
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.log_path = Path(tmpdir.name) / "session.log"

    def test_log_prints_when_tui_disabled(self):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            self.tui.log("Album art loaded")
        self.assertIn("Album art loaded", buffer.getvalue())
        self.assertEqual(len(self.tui.log_buffer), 0)

    def test_log_buffers_when_tui_enabled(self):
        self.tui.enable_tui()
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            self.tui.log("Next scheme")
        self.assertEqual(buffer.getvalue(), "")
        self.assertTrue(self.tui.log_buffer[-1].endswith("Next scheme"))

    def test_log_buffer_keeps_last_fifty(self):
        self.tui.enable_tui()
        for i in range(60):
            self.tui.log(f"message {i}")
        self.assertEqual(len(self.tui.log_buffer), 50)
        self.assertTrue(self.tui.log_buffer[0].endswith("message 10"))

    def test_file_logging_writes_timestamped_lines(self):
        self.tui.enable_tui()
        self.tui.start_file_logging(self.log_path)
        self.tui.log("Bpm up (130 BPM, Cyan (Default))")
        self.tui.stop_file_logging()

        contents = self.log_path.read_text(encoding="utf-8")
        self.assertIn("Bpm up (130 BPM", contents)
        self.assertRegex(contents, r"^\d{2}:\d{2}:\d{2} ")
        self.assertIsNone(self.tui.log_file_handle)
        self.assertIsNone(self.tui.log_file_path)

    def test_file_logging_failure_warns(self):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            self.tui.start_file_logging(Path(self.log_path.parent) / "missing" / "x.log")
        self.assertIn("unable to start file logging", buffer.getvalue())
        self.assertIsNone(self.tui.log_file_handle)


class DebugManagerTests(unittest.TestCase):
    def test_disabled_manager_records_nothing(self):
        manager = DebugManager()
        manager.debug_log("EVENT", "ignored")
        manager.update_state("session", "bpm", 130)
        self.assertEqual(manager.state_changes, [])
        self.assertEqual(manager.current_state, {})

    def test_state_changes_are_tracked(self):
        manager = DebugManager()
        with redirect_stdout(io.StringIO()) as buffer:
            manager.enable()
            manager.update_state("session", "scheme", "warm")
            manager.update_state("session", "scheme", "purple")

        state = manager.get_current_state()
        self.assertEqual(state["state"], {"session": {"scheme": "purple"}})
        self.assertIn("session.scheme: warm -> purple", buffer.getvalue())

    def test_log_error_includes_component(self):
        manager = DebugManager()
        with redirect_stdout(io.StringIO()):
            manager.enable()
            manager.log_error("LOAD_FAILED", "artwork", "bad file", {"path": "x.png"})
        entry = manager.state_changes[-1]
        self.assertEqual(entry["event_type"], "ERROR")
        self.assertEqual(entry["data"]["path"], "x.png")


    def test_log_operation_records_component(self):
        manager = DebugManager()
        with redirect_stdout(io.StringIO()) as buffer:
            manager.enable()
            manager.log_operation("palette_derived", "artwork", {"dominant": (1, 2, 3)})
        entry = manager.state_changes[-1]
        self.assertEqual(entry["event_type"], "OPERATION")
        self.assertEqual(entry["message"], "artwork: palette_derived")
        self.assertIn("dominant: (1, 2, 3)", buffer.getvalue())


class DebugFacadeTests(unittest.TestCase):
    def tearDown(self):
        with redirect_stdout(io.StringIO()):
            debug.set_debug_mode(False)

    def test_facade_is_noop_when_disabled(self):
        with redirect_stdout(io.StringIO()):
            debug.set_debug_mode(False)
        with mock.patch.object(debug.debug_manager, "debug_log") as debug_log_mock:
            debug.debug_log("EVENT", "ignored")
        debug_log_mock.assert_not_called()

    def test_facade_forwards_when_enabled(self):
        with redirect_stdout(io.StringIO()):
            debug.set_debug_mode(True)
        self.assertTrue(debug.is_debug_enabled())
        with mock.patch.object(debug.debug_manager, "debug_log") as debug_log_mock:
            debug.debug_log("EVENT", "forwarded", {"bpm": 120})
        debug_log_mock.assert_called_once_with("EVENT", "forwarded", {"bpm": 120})

    def test_facade_forwards_operations_when_enabled(self):
        with redirect_stdout(io.StringIO()):
            debug.set_debug_mode(True)
        with mock.patch.object(debug.debug_manager, "log_operation") as log_operation_mock:
            debug.log_operation("config_loaded", "cli", {"name": "Default"})
        log_operation_mock.assert_called_once_with("config_loaded", "cli", {"name": "Default"})


if __name__ == "__main__":
    unittest.main()
