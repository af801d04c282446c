"""Unit tests for golden-angle population generation."""

import math
import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from adsb.generator import (
    AIRLINES,
    GOLDEN_ANGLE_RAD,
    generate_aircraft,
    make_address,
    make_callsign,
)

CENTER = (22.5431, 114.0579)


class TestGenerateAircraft(unittest.TestCase):

    def test_count_and_unique_addresses(self):
        for n in (0, 1, 7, 50):
            aircraft = generate_aircraft(*CENTER, n)
            self.assertEqual(len(aircraft), n)
            self.assertEqual(len({a.id for a in aircraft}), n)

    def test_initial_field_ranges(self):
        for a in generate_aircraft(*CENTER, 200):
            self.assertTrue(5 <= a.nic <= 11, a)
            self.assertTrue(3000 <= a.altitude <= 12000, a)
            self.assertTrue(400 <= a.speed < 650, a)
            self.assertTrue(0 <= a.heading < 360, a)

    def test_single_aircraft_scenario(self):
        (a,) = generate_aircraft(*CENTER, 1)
        self.assertEqual(a.id, "780000")
        self.assertEqual(a.callsign, "CZ1000")
        self.assertEqual(a.nic, 5)
        self.assertEqual(a.altitude, 5000.0)
        self.assertEqual(a.speed, 400.0)
        self.assertEqual(a.heading, 271.0)
        # Index 0 lies on angle 0: due "east" of the center at the hashed distance
        self.assertAlmostEqual(a.lat, CENTER[0], places=12)
        self.assertAlmostEqual(a.lng, CENTER[1] + 0.15 + 0.4729 * 0.45, places=12)

    def test_second_aircraft_fields(self):
        a = generate_aircraft(*CENTER, 2)[1]
        self.assertEqual(a.id, "781111")
        self.assertEqual(a.callsign, "CA1111")
        self.assertEqual(a.nic, 6)
        self.assertEqual(a.altitude, 7749.0)
        self.assertEqual(a.speed, 471.0)
        self.assertEqual(a.heading, 68.0)

    def test_hashed_altitude_above_ceiling_is_clamped(self):
        # (3 * 2749) % 10000 + 5000 = 13247
        a = generate_aircraft(*CENTER, 4)[3]
        self.assertEqual(a.altitude, 12000.0)

    def test_positions_follow_golden_angle(self):
        for i, a in enumerate(generate_aircraft(*CENTER, 30)):
            d_lat, d_lng = a.lat - CENTER[0], a.lng - CENTER[1]
            distance = math.hypot(d_lat, d_lng)
            self.assertTrue(0.15 <= distance < 0.6, distance)
            angle = math.atan2(d_lat, d_lng) % (2 * math.pi)
            expected = (i * GOLDEN_ANGLE_RAD) % (2 * math.pi)
            self.assertAlmostEqual(angle, expected, places=9)

    def test_generation_is_reproducible(self):
        first = generate_aircraft(*CENTER, 25)
        second = generate_aircraft(*CENTER, 25)
        self.assertEqual(first, second)

    def test_callsigns_cycle_airlines(self):
        self.assertEqual(make_callsign(10), "CZ2110")
        self.assertEqual([make_callsign(i)[:2] for i in range(10)], list(AIRLINES))

    def test_large_index_address_is_not_clamped(self):
        self.assertEqual(make_address(0), "780000")
        # 0x780000 + 3000 * 0x1111 exceeds 24 bits and renders in full
        address = make_address(3000)
        self.assertEqual(address, f"{0x780000 + 3000 * 0x1111:X}")
        self.assertEqual(len(address), 7)

    def test_negative_count_rejected(self):
        with self.assertRaises(ValueError):
            generate_aircraft(*CENTER, -1)


if __name__ == '__main__':
    unittest.main()
