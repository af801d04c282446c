# simulation/runner.py
"""
Drives a simulation run from a background thread.

Each cycle checks the run flag, advances and encodes the population as one
exclusive unit, hands the resulting batch to every registered sink, then
sleeps for the configured interval. Pacing is plain sleep with no drift
compensation. A stop request is observed at the top of the next cycle, so a
batch that is already being emitted still completes.
"""
import dataclasses
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from adsb.aircraft import Aircraft
from adsb.encoder import BroadcastMessage
from adsb.errors import AdsbSimError, SimulationAlreadyRunningError
from simulation.state import SimulationConfig, SimulationState
from utils.geo import max_range_km

logger = logging.getLogger(__name__)

BATCH_EVENT = "adsb-batch"

BatchSink = Callable[["AdsbBatch"], None]


@dataclasses.dataclass(frozen=True)
class AdsbBatch:
    """Everything emitted for one tick."""
    messages: List[BroadcastMessage]
    aircraft: List[Aircraft]
    timestamp: int  # ms since run start (tick * interval)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "messages": [m.to_dict() for m in self.messages],
            "aircrafts": [a.to_dict() for a in self.aircraft],
            "timestamp": self.timestamp,
        }


class SimulationRunner:
    """
    Start/stop/status front for a ``SimulationState``.

    Sinks are plain callables taking an ``AdsbBatch``; they run on the tick
    thread and must not block for long.
    """

    def __init__(self, state: SimulationState, sinks: Optional[List[BatchSink]] = None, recorder=None):
        self.state = state
        self._sinks: List[BatchSink] = list(sinks or [])
        self._sinks_lock = threading.Lock()
        self.recorder = recorder
        if recorder is not None:
            self.add_sink(recorder.on_batch)

    def add_sink(self, sink: BatchSink):
        with self._sinks_lock:
            self._sinks.append(sink)

    def remove_sink(self, sink: BatchSink):
        with self._sinks_lock:
            try:
                self._sinks.remove(sink)
            except ValueError:
                pass

    # --- Lifecycle ---

    def start(self, config: Optional[SimulationConfig] = None) -> str:
        """
        Generates a fresh population and starts the tick thread.

        Raises:
            SimulationAlreadyRunningError: if a run is active.
        """
        with self.state.lock:
            if self.state.running:
                raise SimulationAlreadyRunningError()
            config = config or SimulationConfig.from_config()
            run_id = self.state.begin_run(config)
            stop_handle = self.state.get_stop_handle()
            simulator = self.state.simulator

            worker = threading.Thread(
                target=self._run_loop,
                args=(run_id, simulator, stop_handle, config.update_interval_ms),
                name=f"adsb-sim-{run_id}",
                daemon=True,
            )
            self.state.attach_worker(worker)
            worker.start()

        logger.info(
            f"Simulation started: {config.aircraft_count} aircraft around "
            f"({config.center_lat:.4f}, {config.center_lng:.4f}), every {config.update_interval_ms} ms.")
        return "Simulation started"

    def stop(self, join_timeout: Optional[float] = None) -> str:
        """
        Requests the tick thread to exit. Stopping an idle simulator is not an error.

        Args:
            join_timeout: If given, wait up to this many seconds for the thread to exit.
        """
        with self.state.lock:
            worker = self.state.worker
            self.state.request_stop()

        if worker and join_timeout is not None and worker is not threading.current_thread():
            worker.join(timeout=join_timeout)
            if worker.is_alive():
                logger.warning(f"Simulation thread did not exit within {join_timeout}s.")

        logger.info("Simulation stop requested.")
        return "Simulation stopped"

    # --- Queries ---

    def is_running(self) -> bool:
        return self.state.is_running()

    def get_aircraft(self) -> List[Dict[str, Any]]:
        return [a.to_dict() for a in self.state.simulator.snapshot()]

    def status(self) -> Dict[str, Any]:
        snapshot = self.state.get_snapshot()
        status = dataclasses.asdict(snapshot)
        simulator = self.state.simulator
        status["max_range_km"] = max_range_km(
            simulator.center_lat, simulator.center_lng, simulator.snapshot())
        if self.recorder is not None:
            status["recording"] = self.recorder.get_status()
        return status

    # --- Worker ---

    def _emit(self, batch: AdsbBatch):
        with self._sinks_lock:
            sinks = list(self._sinks)
        for sink in sinks:
            try:
                sink(batch)
            except Exception as e:
                logger.error(f"Failed to emit batch to {getattr(sink, '__qualname__', sink)}: {e}")

    def _run_loop(self, run_id: int, simulator, stop_handle: SimulationState.StopHandle, interval_ms: int):
        tick = 0
        try:
            while not stop_handle.should_stop():
                messages, aircraft = simulator.tick_and_encode()
                batch = AdsbBatch(messages=messages, aircraft=aircraft, timestamp=tick * interval_ms)
                self._emit(batch)
                self.state.record_tick(run_id, batch.timestamp)
                tick += 1
                stop_handle.wait(interval_ms / 1000.0)
        except AdsbSimError as e:
            logger.error(f"Simulation run {run_id} aborted: {e}")
        except Exception:
            logger.exception(f"Unexpected error in simulation run {run_id}")
        finally:
            self.state.finish_run(run_id)
            logger.info(f"Simulation thread stopped after {tick} ticks.")
