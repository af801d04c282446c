"""Unit tests for the aircraft population container and the simulator core."""

import os
import re
import sys
import threading
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from adsb.errors import PopulationBusyError
from adsb.generator import generate_aircraft
from adsb.kinematics import SeededNoise, update_all
from adsb.population import Population
from adsb.simulator import AdsbSimulator

CENTER = (22.5431, 114.0579)


def _hold_lock(population, release):
    """Starts a thread that holds the population lock until ``release`` is set."""
    acquired = threading.Event()

    def holder():
        with population.exclusive():
            acquired.set()
            release.wait(5.0)

    t = threading.Thread(target=holder, daemon=True)
    t.start()
    acquired.wait(5.0)
    return t


class TestPopulation(unittest.TestCase):

    def test_replace_and_len(self):
        population = Population()
        self.assertEqual(len(population), 0)
        population.replace_all(generate_aircraft(*CENTER, 5))
        self.assertEqual(len(population), 5)
        population.replace_all([])
        self.assertEqual(len(population), 0)

    def test_snapshot_is_a_copy(self):
        population = Population()
        population.replace_all(generate_aircraft(*CENTER, 3))
        snap = population.snapshot()
        snap[0].altitude = -1.0
        snap.pop()
        fresh = population.snapshot()
        self.assertEqual(len(fresh), 3)
        self.assertNotEqual(fresh[0].altitude, -1.0)

    def test_mutate_all_applies_in_place(self):
        population = Population()
        population.replace_all(generate_aircraft(*CENTER, 4))

        def bump(a):
            a.speed += 1.0
        before = [a.speed for a in population.snapshot()]
        population.mutate_all(bump)
        after = [a.speed for a in population.snapshot()]
        self.assertEqual(after, [s + 1.0 for s in before])

    def test_lock_is_reentrant_on_same_thread(self):
        population = Population(lock_timeout_s=0.1)
        population.replace_all(generate_aircraft(*CENTER, 2))
        with population.exclusive():
            self.assertEqual(len(population.snapshot()), 2)

    def test_busy_population_times_out(self):
        population = Population(lock_timeout_s=0.05)
        release = threading.Event()
        holder = _hold_lock(population, release)
        try:
            with self.assertRaises(PopulationBusyError):
                population.snapshot()
            with self.assertRaises(PopulationBusyError):
                with population.exclusive(timeout=0.01):
                    pass
        finally:
            release.set()
            holder.join(5.0)
        # Usable again once released
        self.assertEqual(len(population), 0)


class TestAdsbSimulator(unittest.TestCase):

    def setUp(self):
        self.sim = AdsbSimulator(*CENTER, noise=SeededNoise(99))

    def test_empty_before_generate(self):
        self.assertEqual(self.sim.snapshot(), [])
        self.assertEqual(self.sim.encode_all(), [])
        self.sim.tick()  # ticking an empty population is harmless

    def test_generate_replaces_population(self):
        self.sim.generate(*CENTER, 8)
        self.assertEqual(len(self.sim.snapshot()), 8)
        self.sim.generate(10.0, 20.0, 3)
        self.assertEqual(len(self.sim.snapshot()), 3)
        self.assertEqual((self.sim.center_lat, self.sim.center_lng), (10.0, 20.0))

    def test_generate_matches_generator(self):
        self.sim.generate(*CENTER, 6)
        self.assertEqual(self.sim.snapshot(), generate_aircraft(*CENTER, 6))

    def test_tick_preserves_identity_and_count(self):
        self.sim.generate(*CENTER, 10)
        before = self.sim.snapshot()
        for _ in range(5):
            self.sim.tick()
        after = self.sim.snapshot()
        self.assertEqual([a.id for a in after], [a.id for a in before])
        self.assertEqual([a.callsign for a in after], [a.callsign for a in before])
        self.assertEqual([a.speed for a in after], [a.speed for a in before])
        self.assertNotEqual([(a.lat, a.lng) for a in after], [(a.lat, a.lng) for a in before])

    def test_encode_all_yields_two_frames_per_aircraft(self):
        self.sim.generate(*CENTER, 7)
        messages = self.sim.encode_all()
        self.assertEqual(len(messages), 14)
        for m in messages:
            self.assertRegex(m.hex_message, re.compile(r'^8D[0-9A-F]{20}A5A5A5$'))

    def test_tick_and_encode_returns_matching_snapshot(self):
        self.sim.generate(*CENTER, 4)
        messages, snapshot = self.sim.tick_and_encode()
        self.assertEqual(len(messages), 8)
        self.assertEqual([m.aircraft_id for m in messages[::2]], [a.id for a in snapshot])
        # The snapshot is the post-tick state and is detached from the population
        self.assertEqual(snapshot, self.sim.snapshot())
        snapshot[0].lat = 0.0
        self.assertNotEqual(self.sim.snapshot()[0].lat, 0.0)

    def test_tick_and_encode_matches_update_all(self):
        sim = AdsbSimulator(*CENTER, noise=SeededNoise(5))
        sim.generate(*CENTER, 4)
        expected = generate_aircraft(*CENTER, 4)
        update_all(expected, SeededNoise(5))
        _messages, snapshot = sim.tick_and_encode()
        self.assertEqual(snapshot, expected)

    def test_tick_and_encode_busy(self):
        sim = AdsbSimulator(*CENTER, lock_timeout_s=0.05)
        sim.generate(*CENTER, 2)
        release = threading.Event()
        holder = _hold_lock(sim.population, release)
        try:
            with self.assertRaises(PopulationBusyError):
                sim.tick_and_encode()
        finally:
            release.set()
            holder.join(5.0)


if __name__ == '__main__':
    unittest.main()
