# errors.py
"""Exceptions raised by the simulator core and its host layer."""


class AdsbSimError(RuntimeError):
    """Base class for simulator failures surfaced to the host."""
    pass


class PopulationBusyError(AdsbSimError):
    """Raised when exclusive access to the aircraft population cannot be obtained in time."""
    pass


class SimulationAlreadyRunningError(AdsbSimError):
    """Raised when a run is started while another is still active."""

    def __init__(self, message: str = "Simulation already running"):
        super().__init__(message)
