"""Tests for command-file dispatch and the individual simulator commands."""

import json
import os
import shutil
import sys
import tempfile
import unittest
from unittest.mock import MagicMock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from watchdog.events import FileCreatedEvent, FileModifiedEvent, FileMovedEvent

from adsb.errors import SimulationAlreadyRunningError
from commands.recording import StartRecordingCommand, StopRecordingCommand
from commands.start import StartSimulationCommand
from commands.stop import StopSimulationCommand
from config_loader import ConfigError
from simulation.command_watcher import COMMAND_MAP, CommandHandler
from simulation.host import SimulatorHost
from simulation.recorder import SessionRecorder
from simulation.state import SimulationConfig, SimulationState


class TestCommands(unittest.TestCase):

    def setUp(self):
        self.host = MagicMock()

    def test_start_passes_config(self):
        self.host.start_simulation.return_value = "Simulation started"
        cfg = {"aircraft_count": 3}
        self.assertTrue(StartSimulationCommand(self.host).execute({"config": cfg}))
        self.host.start_simulation.assert_called_once_with(cfg)

    def test_start_without_config(self):
        self.assertTrue(StartSimulationCommand(self.host).execute({}))
        self.host.start_simulation.assert_called_once_with(None)

    def test_start_failures(self):
        for error in (ConfigError("bad lat"), SimulationAlreadyRunningError()):
            with self.subTest(error=error):
                self.host.start_simulation.side_effect = error
                self.assertFalse(StartSimulationCommand(self.host).execute({"config": {}}))

    def test_stop(self):
        self.assertTrue(StopSimulationCommand(self.host).execute({}))
        self.host.stop_simulation.assert_called_with(join_timeout=None)
        self.assertTrue(StopSimulationCommand(self.host).execute({"join_timeout_s": "2"}))
        self.host.stop_simulation.assert_called_with(join_timeout=2.0)

    def test_stop_rejects_bad_timeout(self):
        for raw in ("abc", -1, True, float('inf'), [5]):
            with self.subTest(raw=raw):
                self.assertFalse(StopSimulationCommand(self.host).execute({"join_timeout_s": raw}))
        self.host.stop_simulation.assert_not_called()

    def test_start_recording(self):
        self.assertTrue(StartRecordingCommand(self.host).execute({"zoom": 7}))
        self.host.start_recording.assert_called_once_with(zoom=7)

    def test_stop_recording_outcomes(self):
        command = StopRecordingCommand(self.host)
        self.host.stop_recording.return_value = None
        self.assertFalse(command.execute({}))
        self.host.stop_recording.return_value = {"session": {}, "path": None}
        self.assertFalse(command.execute({}))
        self.host.stop_recording.return_value = {"session": {}, "path": "/tmp/x.json"}
        self.assertTrue(command.execute({}))


class TestCommandHandler(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.tmpdir, True)
        self.command_file = os.path.join(self.tmpdir, "command.json")
        self.host = MagicMock()
        self.handler = CommandHandler(self.host, command_file=self.command_file)

    def _write(self, payload):
        with open(self.command_file, 'w', encoding='utf-8') as f:
            if isinstance(payload, str):
                f.write(payload)
            else:
                json.dump(payload, f)

    def test_command_map(self):
        self.assertEqual(set(COMMAND_MAP), {
            'start_simulation', 'stop_simulation', 'start_recording', 'stop_recording'})

    def test_dispatch_unknown_command(self):
        self.assertFalse(self.handler.dispatch({"command": "park"}))
        self.assertFalse(self.handler.dispatch({}))

    def test_process_command_consumes_file(self):
        self._write({"command": "stop_simulation"})
        self.assertTrue(self.handler.process_command())
        self.assertFalse(os.path.exists(self.command_file))
        self.host.stop_simulation.assert_called_once()

    def test_missing_file(self):
        self.assertIsNone(self.handler.process_command())

    def test_invalid_json(self):
        self._write("{not json")
        self.assertIsNone(self.handler.process_command())
        self.assertEqual(self.host.method_calls, [])

    def test_non_object_payload(self):
        self._write(["start_simulation"])
        self.assertIsNone(self.handler.process_command())
        self.host.start_simulation.assert_not_called()

    def test_non_string_command_is_unknown(self):
        self._write({"command": ["start_simulation"]})
        self.assertFalse(self.handler.process_command())
        self.assertFalse(self.handler.dispatch({"command": {"name": "stop_simulation"}}))
        self.assertEqual(self.host.method_calls, [])

    def test_bad_stop_timeout_from_file(self):
        self._write({"command": "stop_simulation", "join_timeout_s": "abc"})
        self.assertFalse(self.handler.process_command())
        self.host.stop_simulation.assert_not_called()

    def test_command_error_is_logged_and_watcher_keeps_working(self):
        self.host.stop_simulation.side_effect = RuntimeError("boom")
        self._write({"command": "stop_simulation"})
        with self.assertLogs('simulation.command_watcher', level='ERROR'):
            self.assertFalse(self.handler.process_command())
        self.assertFalse(os.path.exists(self.command_file))

        self._write({"command": "start_recording"})
        self.assertTrue(self.handler.process_command())
        self.host.start_recording.assert_called_once()

    def test_filesystem_events(self):
        other = os.path.join(self.tmpdir, "other.json")
        self._write({"command": "start_recording"})
        self.handler.on_modified(FileModifiedEvent(other))
        self.host.start_recording.assert_not_called()

        self.handler.on_created(FileCreatedEvent(self.command_file))
        self.host.start_recording.assert_called_once()

        self._write({"command": "stop_simulation"})
        self.handler.on_moved(FileMovedEvent(other, self.command_file))
        self.host.stop_simulation.assert_called_once()

        self._write({"command": "stop_recording"})
        self.handler.on_modified(FileModifiedEvent(self.command_file))
        self.host.stop_recording.assert_called_once_with(save=True)


class TestCommandsAgainstHost(unittest.TestCase):
    """Drives a real host through the handler."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.tmpdir, True)
        state = SimulationState(config=SimulationConfig(aircraft_count=3, update_interval_ms=10), seed=3)
        self.host = SimulatorHost(state=state, recorder=SessionRecorder(), feed_enabled=False)
        self.addCleanup(self.host.stop_simulation, 5.0)
        self.handler = CommandHandler(self.host, command_file=os.path.join(self.tmpdir, "command.json"))

    def test_start_then_stop(self):
        started = self.handler.dispatch({
            "command": "start_simulation",
            "config": {"aircraft_count": 4, "update_interval_ms": 10},
        })
        self.assertTrue(started)
        self.assertTrue(self.host.runner.is_running())
        self.assertEqual(self.host.state.config.aircraft_count, 4)

        self.assertFalse(self.handler.dispatch({"command": "start_simulation"}))

        self.assertTrue(self.handler.dispatch({"command": "stop_simulation", "join_timeout_s": 5}))
        self.assertFalse(self.host.runner.is_running())

    def test_invalid_config_does_not_start(self):
        self.assertFalse(self.handler.dispatch({
            "command": "start_simulation", "config": {"center_lat": 200}}))
        self.assertFalse(self.host.runner.is_running())

    def test_stop_recording_when_idle(self):
        self.assertFalse(self.handler.dispatch({"command": "stop_recording"}))


if __name__ == '__main__':
    unittest.main()
