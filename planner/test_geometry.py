#!/usr/bin/env python3
"""
Tests for the curvilinear ↔ Cartesian segment transforms.
"""

from __future__ import annotations

import math
import unittest

from planner.geometry import (
    GeometryError,
    RoadSegment,
    SegmentKind,
    cartesian_to_frenet,
    curvilinear_to_cartesian,
    normalize_heading_deg,
)


class StraightSegmentTests(unittest.TestCase):
    def setUp(self) -> None:
        self.segment = RoadSegment.straight((0.0, 0.0), (10.0, 0.0))

    def test_position_and_heading_along_x_axis(self) -> None:
        pose = curvilinear_to_cartesian(self.segment, 4.0)
        self.assertAlmostEqual(pose.x, 4.0)
        self.assertAlmostEqual(pose.y, 0.0)
        self.assertAlmostEqual(pose.heading_deg, 0.0)

    def test_heading_of_diagonal_segment(self) -> None:
        segment = RoadSegment.straight((0.0, 0.0), (-5.0, -5.0))
        pose = curvilinear_to_cartesian(segment, 1.0)
        self.assertAlmostEqual(pose.heading_deg, -135.0)

    def test_lateral_offset_is_ignored_for_position(self) -> None:
        pose = curvilinear_to_cartesian(self.segment, 2.0, 3.0)
        self.assertEqual(pose.position, (2.0, 0.0))

    def test_projection_left_is_positive(self) -> None:
        frenet = cartesian_to_frenet(self.segment, (3.0, 2.0))
        self.assertAlmostEqual(frenet.s, 3.0)
        self.assertAlmostEqual(frenet.d, 2.0)
        right = cartesian_to_frenet(self.segment, (3.0, -1.5))
        self.assertAlmostEqual(right.d, -1.5)

    def test_round_trip_recovers_s(self) -> None:
        segment = RoadSegment.straight((1.0, 1.0), (4.0, 5.0))
        self.assertAlmostEqual(segment.length, 5.0)
        for s in (0.0, 0.37, 1.3, 2.5, 4.999, 5.0):
            pose = curvilinear_to_cartesian(segment, s)
            back = cartesian_to_frenet(segment, pose.position)
            self.assertLess(abs(back.s - s), 1e-9, msg=f"s={s}")
            self.assertLess(abs(back.d), 1e-9, msg=f"s={s}")

    def test_zero_length_segment_raises(self) -> None:
        segment = RoadSegment.straight((2.0, 2.0), (2.0, 2.0))
        with self.assertRaises(GeometryError):
            curvilinear_to_cartesian(segment, 1.0)
        with self.assertRaises(GeometryError):
            cartesian_to_frenet(segment, (0.0, 0.0))


class ArcSegmentTests(unittest.TestCase):
    def setUp(self) -> None:
        # Quarter circle of radius 10 around the origin, travelled clockwise.
        self.cw = RoadSegment.arc((10.0, 0.0), (0.0, -10.0), (0.0, 0.0), 1)
        self.ccw = RoadSegment.arc((10.0, 0.0), (0.0, 10.0), (0.0, 0.0), -1)

    def test_radius_and_length(self) -> None:
        self.assertAlmostEqual(self.cw.radius, 10.0)
        self.assertAlmostEqual(self.cw.length, 5.0 * math.pi)

    def test_start_pose(self) -> None:
        pose = curvilinear_to_cartesian(self.cw, 0.0)
        self.assertAlmostEqual(pose.x, 10.0)
        self.assertAlmostEqual(pose.y, 0.0)
        self.assertAlmostEqual(pose.heading_deg, -90.0)

    def test_clockwise_quarter_turn(self) -> None:
        pose = curvilinear_to_cartesian(self.cw, 5.0 * math.pi)
        self.assertAlmostEqual(pose.x, 0.0, places=9)
        self.assertAlmostEqual(pose.y, -10.0, places=9)
        # -180 wraps to +180
        self.assertAlmostEqual(pose.heading_deg, 180.0)

    def test_counter_clockwise_quarter_turn(self) -> None:
        pose = curvilinear_to_cartesian(self.ccw, 5.0 * math.pi)
        self.assertAlmostEqual(pose.x, 0.0, places=9)
        self.assertAlmostEqual(pose.y, 10.0, places=9)
        self.assertAlmostEqual(pose.heading_deg, 180.0)

    def test_lateral_offset_changes_lane_radius(self) -> None:
        inner = curvilinear_to_cartesian(self.cw, 0.0, 2.0)
        self.assertAlmostEqual(inner.x, 8.0)
        outer = curvilinear_to_cartesian(self.ccw, 0.0, 2.0)
        self.assertAlmostEqual(outer.x, 12.0)

    def test_heading_stays_in_half_open_range(self) -> None:
        for segment in (self.cw, self.ccw):
            for i in range(-200, 201):
                s = i * 0.9
                heading = curvilinear_to_cartesian(segment, s).heading_deg
                self.assertGreater(heading, -180.0, msg=f"s={s}")
                self.assertLessEqual(heading, 180.0, msg=f"s={s}")

    def test_projection_offset_and_arc_length(self) -> None:
        frenet = cartesian_to_frenet(self.cw, (0.0, -12.0))
        self.assertAlmostEqual(frenet.d, 2.0)
        self.assertAlmostEqual(frenet.s, 5.0 * math.pi)

    def test_projection_returns_unsigned_arc_length(self) -> None:
        ahead = cartesian_to_frenet(self.cw, (0.0, -10.0))
        behind = cartesian_to_frenet(self.cw, (0.0, 10.0))
        self.assertAlmostEqual(ahead.s, behind.s)
        self.assertGreaterEqual(behind.s, 0.0)

    def test_round_trip_magnitude_on_centre_line(self) -> None:
        for s in (0.0, 1.0, 7.5, 15.0):
            pose = curvilinear_to_cartesian(self.cw, s)
            back = cartesian_to_frenet(self.cw, pose.position)
            self.assertAlmostEqual(back.s, s, places=6)
            self.assertAlmostEqual(back.d, 0.0, places=9)

    def test_zero_radius_raises(self) -> None:
        segment = RoadSegment.arc((1.0, 1.0), (1.0, 1.0), (1.0, 1.0), 1)
        with self.assertRaises(GeometryError):
            curvilinear_to_cartesian(segment, 1.0)
        with self.assertRaises(GeometryError):
            cartesian_to_frenet(segment, (2.0, 2.0))

    def test_position_on_rotation_center_raises(self) -> None:
        with self.assertRaises(GeometryError):
            cartesian_to_frenet(self.cw, (0.0, 0.0))


class SegmentConstructionTests(unittest.TestCase):
    def test_invalid_turn_direction(self) -> None:
        with self.assertRaises(GeometryError):
            RoadSegment.arc((1.0, 0.0), (0.0, 1.0), (0.0, 0.0), 0)

    def test_arc_needs_center(self) -> None:
        with self.assertRaises(GeometryError):
            RoadSegment(start=(0.0, 0.0), end=(1.0, 1.0), kind=SegmentKind.ARC)

    def test_from_trajectory_straight_flips_y(self) -> None:
        segment = RoadSegment.from_trajectory(
            [[0.0, 0.0, 2.0], [10.0, 0.0, 2.0], [0.0, 0.0, 0.0], [0.0, 0.0, 0.0]]
        )
        self.assertIs(segment.kind, SegmentKind.STRAIGHT)
        self.assertEqual(segment.start, (0.0, -2.0))
        self.assertEqual(segment.end, (10.0, -2.0))

    def test_from_trajectory_arc(self) -> None:
        segment = RoadSegment.from_trajectory(
            [[10.0, 0.0, 0.0], [0.0, 0.0, -10.0], [1.5708, 0.0, 0.0], [-1.0, 0.0, 0.0]]
        )
        self.assertIs(segment.kind, SegmentKind.ARC)
        self.assertEqual(segment.end, (0.0, 10.0))
        self.assertEqual(segment.turn_direction, -1)
        self.assertAlmostEqual(segment.radius, 10.0)


class HeadingNormalizationTests(unittest.TestCase):
    def test_wraps_into_range(self) -> None:
        cases = {
            0.0: 0.0,
            180.0: 180.0,
            -180.0: 180.0,
            270.0: -90.0,
            540.0: 180.0,
            -190.0: 170.0,
            725.0: 5.0,
        }
        for raw, expected in cases.items():
            self.assertAlmostEqual(normalize_heading_deg(raw), expected, msg=f"raw={raw}")

    def test_tiny_negative_does_not_wrap_to_360(self) -> None:
        value = normalize_heading_deg(-1e-20)
        self.assertGreater(value, -180.0)
        self.assertLessEqual(value, 180.0)
        self.assertAlmostEqual(value, 0.0)


if __name__ == "__main__":
    unittest.main()
