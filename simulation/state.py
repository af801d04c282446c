# simulation/state.py
"""
Defines the host-owned, thread-safe state for a simulation run.
- `SimulationConfig`: the start-time configuration surface.
- `SimulationState`: simulator, run flag and counters shared across threads.
- `SimulationSnapshot`: an immutable view of the state for safe consumption.
"""
import dataclasses
import logging
import math
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from adsb.kinematics import make_noise
from adsb.simulator import AdsbSimulator
from config_loader import CONFIG, ConfigError

logger = logging.getLogger(__name__)


def _number(params: Dict[str, Any], key: str, default: float) -> float:
    value = params.get(key, default)
    if isinstance(value, bool):
        raise ConfigError(f"'{key}' must be a number, got {value!r}")
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be a number, got {value!r}") from None
    if not math.isfinite(value):
        raise ConfigError(f"'{key}' must be finite, got {value!r}")
    return value


@dataclass(frozen=True)
class SimulationConfig:
    """Center, population size and tick cadence of one run."""
    center_lat: float = 22.5431
    center_lng: float = 114.0579
    aircraft_count: int = 12
    update_interval_ms: int = 1000

    @classmethod
    def from_dict(cls, params: Optional[Dict[str, Any]], base: Optional["SimulationConfig"] = None) -> "SimulationConfig":
        """
        Builds a config from a JSON-like mapping, falling back to ``base`` for missing keys.

        Raises:
            ConfigError: on non-numeric or out-of-range values.
        """
        base = base or cls()
        params = params or {}
        if not isinstance(params, dict):
            raise ConfigError(f"Simulation config must be an object, got {type(params).__name__}")

        center_lat = _number(params, 'center_lat', base.center_lat)
        center_lng = _number(params, 'center_lng', base.center_lng)
        count = _number(params, 'aircraft_count', base.aircraft_count)
        interval = _number(params, 'update_interval_ms', base.update_interval_ms)

        if not -90.0 <= center_lat <= 90.0:
            raise ConfigError(f"'center_lat' must be within [-90, 90], got {center_lat}")
        if not -180.0 <= center_lng <= 180.0:
            raise ConfigError(f"'center_lng' must be within [-180, 180], got {center_lng}")
        if count < 0 or count != int(count):
            raise ConfigError(f"'aircraft_count' must be a non-negative integer, got {count}")
        if interval <= 0 or interval != int(interval):
            raise ConfigError(f"'update_interval_ms' must be a positive integer, got {interval}")

        return cls(center_lat=center_lat, center_lng=center_lng,
                   aircraft_count=int(count), update_interval_ms=int(interval))

    @classmethod
    def from_config(cls) -> "SimulationConfig":
        """Defaults taken from the ``simulation`` section of the loaded CONFIG."""
        return cls.from_dict(CONFIG.get('simulation', {}))

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class SimulationSnapshot:
    """Immutable view of simulation state for lock-free consumption."""
    running: bool
    stop_requested: bool
    tick: int
    aircraft_count: int
    config: Dict[str, Any]
    last_batch_timestamp: Optional[int]
    worker_alive: bool


class SimulationState:
    """
    Holds the simulator and run-state flags shared between the host and the tick worker.
    """

    class StopHandle:
        """
        Stop signal of a single run. Bound to that run's event, so a worker
        still finishing its last tick never picks up the next run's cleared flag.
        """

        def __init__(self, event: threading.Event):
            self._event = event

        def should_stop(self) -> bool:
            return self._event.is_set()

        def wait(self, timeout: float) -> bool:
            """Sleeps up to ``timeout`` seconds; returns True early if a stop was requested."""
            return self._event.wait(timeout)

    def __init__(self, config: Optional[SimulationConfig] = None, seed: Optional[int] = None,
                 lock_timeout_s: Optional[float] = None):
        """Initializes an idle state around ``config`` (defaults from CONFIG)."""
        sim_cfg = CONFIG.get('simulation', {})
        self.lock = threading.RLock()
        self.stop_event = threading.Event()
        self.running = False

        self.config: SimulationConfig = config or SimulationConfig.from_config()
        self.seed = sim_cfg.get('seed') if seed is None else seed
        self.lock_timeout_s = sim_cfg.get('lock_timeout_s') if lock_timeout_s is None else lock_timeout_s

        self.simulator = AdsbSimulator(
            self.config.center_lat, self.config.center_lng,
            noise=make_noise(self.seed), lock_timeout_s=self.lock_timeout_s)
        self.worker: Optional[threading.Thread] = None
        self.tick: int = 0
        self.last_batch_timestamp: Optional[int] = None
        self.run_id: int = 0

    # --- Run Flag Helpers ---

    def is_running(self) -> bool:
        with self.lock:
            return self.running

    def request_stop(self):
        """Clears the run flag; the worker exits at the top of its next cycle."""
        with self.lock:
            self.running = False
            self.stop_event.set()

    def get_stop_handle(self) -> "SimulationState.StopHandle":
        with self.lock:
            return SimulationState.StopHandle(self.stop_event)

    # --- Run Lifecycle Helpers ---

    def begin_run(self, config: SimulationConfig) -> int:
        """
        Atomically reset for a new run: fresh simulator and population,
        cleared counters, a new stop event, run flag set.

        Returns:
            The id of the new run. Workers pass it back so that a worker from
            a stopped run cannot touch the counters of its successor.
        """
        with self.lock:
            self.config = config
            self.simulator = AdsbSimulator(
                config.center_lat, config.center_lng,
                noise=make_noise(self.seed), lock_timeout_s=self.lock_timeout_s)
            self.simulator.generate(config.center_lat, config.center_lng, config.aircraft_count)
            self.tick = 0
            self.last_batch_timestamp = None
            self.stop_event = threading.Event()
            self.running = True
            self.run_id += 1
            return self.run_id

    def attach_worker(self, worker: threading.Thread):
        with self.lock:
            self.worker = worker

    def record_tick(self, run_id: int, timestamp: int) -> int:
        """Records an emitted batch and returns the tick count so far."""
        with self.lock:
            if run_id != self.run_id:
                return self.tick
            self.last_batch_timestamp = timestamp
            self.tick += 1
            return self.tick

    def finish_run(self, run_id: int):
        """Called by the worker on exit."""
        with self.lock:
            if run_id != self.run_id:
                return
            self.running = False
            self.worker = None

    # --- Snapshot ---

    def get_snapshot(self) -> SimulationSnapshot:
        with self.lock:
            worker = self.worker
            return SimulationSnapshot(
                running=self.running,
                stop_requested=self.stop_event.is_set(),
                tick=self.tick,
                aircraft_count=len(self.simulator.population),
                config=self.config.to_dict(),
                last_batch_timestamp=self.last_batch_timestamp,
                worker_alive=bool(worker and worker.is_alive()),
            )
