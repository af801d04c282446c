# population.py
"""
Thread-safe container for the aircraft set of one simulation run.
"""
import contextlib
import logging
import threading
from typing import Callable, Iterable, List, Optional

from adsb.aircraft import Aircraft
from adsb.errors import PopulationBusyError

logger = logging.getLogger(__name__)


class Population:
    """
    Owns the current aircraft list.

    The list is only ever swapped wholesale (``replace_all``) or mutated in
    place entry by entry (``mutate_all``); its size is fixed between
    replacements. Readers get deep copies so they never observe a
    half-updated tick.
    """

    def __init__(self, lock_timeout_s: Optional[float] = None):
        self._lock = threading.RLock()
        self._aircraft: List[Aircraft] = []
        self.lock_timeout_s = lock_timeout_s

    @contextlib.contextmanager
    def exclusive(self, timeout: Optional[float] = None):
        """
        Holds the population lock for the duration of the block and yields the live list.

        Raises:
            PopulationBusyError: if the lock is not acquired within ``timeout``
                seconds (defaults to ``lock_timeout_s``; None waits forever).
        """
        timeout = self.lock_timeout_s if timeout is None else timeout
        acquired = self._lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            raise PopulationBusyError(
                f"Aircraft population is locked by another operation (waited {timeout:.1f}s).")
        try:
            yield self._aircraft
        finally:
            self._lock.release()

    def replace_all(self, aircraft: Iterable[Aircraft]) -> None:
        with self.exclusive():
            self._aircraft = list(aircraft)
            logger.debug(f"Population replaced ({len(self._aircraft)} aircraft).")

    def snapshot(self) -> List[Aircraft]:
        """Returns copies of every aircraft in population order."""
        with self.exclusive() as aircraft:
            return [a.copy() for a in aircraft]

    def mutate_all(self, fn: Callable[[Aircraft], None]) -> None:
        """Applies ``fn`` to every aircraft in place, as one exclusive unit."""
        with self.exclusive() as aircraft:
            for a in aircraft:
                fn(a)

    def __len__(self) -> int:
        with self.exclusive() as aircraft:
            return len(aircraft)
