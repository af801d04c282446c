# simulation/host.py
"""
Wires the simulation state, runner and sinks into one object that the
dashboard and the command watcher drive.
"""
import logging
from typing import Any, Dict, Optional

from config_loader import CONFIG
from simulation.feed_writer import FeedWriter
from simulation.recorder import SessionRecorder, save_session
from simulation.runner import SimulationRunner
from simulation.state import SimulationConfig, SimulationState

logger = logging.getLogger(__name__)


class SimulatorHost:
    """Owns the long-lived simulation objects for one process."""

    def __init__(self, state: Optional[SimulationState] = None,
                 recorder: Optional[SessionRecorder] = None,
                 feed_enabled: Optional[bool] = None):
        self.state = state or SimulationState()
        self.recorder = recorder or SessionRecorder()
        self.runner = SimulationRunner(self.state, recorder=self.recorder)

        if feed_enabled is None:
            feed_enabled = bool(CONFIG.get('feed', {}).get('enabled', False))
        self.feed_writer: Optional[FeedWriter] = None
        if feed_enabled:
            cfg = self.state.config
            self.feed_writer = FeedWriter(center=(cfg.center_lat, cfg.center_lng))
            self.runner.add_sink(self.feed_writer.on_batch)
            logger.info(f"Writing aircraft feed to {self.feed_writer.out_path}")

    # --- Simulation ---

    def start_simulation(self, params: Optional[Dict[str, Any]] = None) -> str:
        """
        Starts a run; ``params`` overrides the configured defaults.

        Raises:
            ConfigError: on invalid overrides.
            SimulationAlreadyRunningError: if a run is active.
        """
        config = SimulationConfig.from_dict(params, base=SimulationConfig.from_config())
        if self.feed_writer is not None:
            self.feed_writer.center = (config.center_lat, config.center_lng)
        return self.runner.start(config)

    def stop_simulation(self, join_timeout: Optional[float] = None) -> str:
        return self.runner.stop(join_timeout=join_timeout)

    # --- Recording ---

    def start_recording(self, zoom: Optional[int] = None):
        simulator = self.state.simulator
        self.recorder.start_recording(
            (simulator.center_lat, simulator.center_lng),
            zoom=zoom,
            truth_aircraft=simulator.snapshot(),
        )

    def stop_recording(self, save: bool = True) -> Optional[Dict[str, Any]]:
        """
        Stops recording and, if ``save``, writes the session to the recordings directory.

        Returns:
            ``{"session": ..., "path": ...}`` or None when nothing was being recorded.
        """
        session = self.recorder.stop_recording()
        if session is None:
            return None
        path = save_session(session) if save else None
        return {"session": session, "path": path}

    def shutdown(self):
        if self.recorder.get_status()["isRecording"]:
            self.stop_recording(save=True)
        self.stop_simulation(join_timeout=5.0)
