#!/usr/bin/env python3
"""
Tick-loop tests: snapshot consistency, apply step, trace export.
"""

from __future__ import annotations

import unittest

from planner.driving_policy import DrivingPolicy
from planner.network import arm_waypoint, crossroad_map, crossroad_route
from planner.scheduler import TickScheduler
from planner.vehicle import DrivingMode, Dynamics, PathInfo, Sensors, Vehicle, VehicleRegistry


class TickSchedulerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.waypoint_map = crossroad_map()

    def _competing_registry(self) -> VehicleRegistry:
        n_to_s = crossroad_route("N", "S")
        e_to_s = crossroad_route("E", "S")
        return VehicleRegistry([
            Vehicle(
                id=2,
                dynamics=Dynamics(speed=0.0, max_speed=10.0,
                                  position=self.waypoint_map.coordinates_of(n_to_s[1])),
                path_info=PathInfo(path=n_to_s, last_waypoint=n_to_s[1]),
            ),
            Vehicle(
                id=1,
                dynamics=Dynamics(speed=0.0, max_speed=10.0,
                                  position=self.waypoint_map.coordinates_of(e_to_s[1])),
                path_info=PathInfo(path=e_to_s, last_waypoint=e_to_s[1]),
            ),
        ])

    def test_tick_applies_modes_to_live_vehicles(self) -> None:
        w_to_e = crossroad_route("W", "E")
        registry = VehicleRegistry([
            Vehicle(
                id=1,
                dynamics=Dynamics(speed=20.0, max_speed=30.0,
                                  position=self.waypoint_map.coordinates_of(w_to_e[0])),
                sensors=Sensors(distance_to_leading_vehicle=4.0, leading_vehicle_speed=10.0),
                path_info=PathInfo(path=w_to_e, last_waypoint=w_to_e[0]),
            ),
        ])
        scheduler = TickScheduler(registry, self.waypoint_map)
        results = scheduler.tick()
        self.assertEqual(results[1].driving_mode, DrivingMode.STOP)
        self.assertEqual(registry[1].driving_mode, DrivingMode.STOP)
        self.assertEqual(scheduler.tick_count, 1)

    def test_explicit_detection_overrides_sensor_default(self) -> None:
        w_to_e = crossroad_route("W", "E")
        registry = VehicleRegistry([
            Vehicle(
                id=1,
                dynamics=Dynamics(speed=20.0, max_speed=30.0),
                sensors=Sensors(distance_to_leading_vehicle=4.0, leading_vehicle_speed=10.0),
                path_info=PathInfo(path=w_to_e, last_waypoint=w_to_e[0]),
            ),
        ])
        scheduler = TickScheduler(registry, self.waypoint_map)
        results = scheduler.tick({1: False})
        self.assertEqual(results[1].driving_mode, DrivingMode.CRUISE)

    def test_resolver_reads_pre_tick_snapshot(self) -> None:
        registry = self._competing_registry()
        policy = DrivingPolicy(conflict_resolver_enabled=True)
        scheduler = TickScheduler(registry, self.waypoint_map, policy)

        results = scheduler.tick()
        self.assertEqual(results[1].driving_mode, DrivingMode.CRUISE)
        self.assertEqual(results[2].driving_mode, DrivingMode.STOP)
        self.assertEqual(registry[2].driving_mode, DrivingMode.STOP)

        # Stationary vehicles are re-checked every tick; the outcome is stable.
        results = scheduler.run(5)
        self.assertEqual(results[2].driving_mode, DrivingMode.STOP)
        self.assertEqual(results[1].driving_mode, DrivingMode.CRUISE)

    def test_vehicle_added_after_construction_is_scheduled(self) -> None:
        registry = VehicleRegistry()
        scheduler = TickScheduler(registry, self.waypoint_map)
        route = crossroad_route("S", "N")
        registry.add(Vehicle(id=9, path_info=PathInfo(path=route, last_waypoint=route[0])))
        results = scheduler.tick()
        self.assertIn(9, results)

    def test_trace_frame_has_one_row_per_vehicle_per_tick(self) -> None:
        registry = self._competing_registry()
        scheduler = TickScheduler(registry, self.waypoint_map)
        scheduler.run(3)
        frame = scheduler.trace_frame()
        self.assertEqual(len(frame), 6)
        self.assertEqual(list(frame["tick"].unique()), [1, 2, 3])
        self.assertEqual(list(frame["vehicle_id"][:2]), [1, 2])
        self.assertTrue((frame["driving_mode"] == int(DrivingMode.CRUISE)).all())
        self.assertTrue((frame["lane_change"] == 0).all())

    def test_stop_waypoint_distance_in_trace(self) -> None:
        route = crossroad_route("W", "E")
        entry = self.waypoint_map.coordinates_of(route[0])
        registry = VehicleRegistry([
            Vehicle(
                id=1,
                dynamics=Dynamics(speed=10.0, max_speed=12.0, position=entry),
                path_info=PathInfo(path=route, last_waypoint=route[0],
                                   stop_at=arm_waypoint("W", 2)),
            ),
        ])
        scheduler = TickScheduler(registry, self.waypoint_map)
        out = scheduler.tick()[1]
        self.assertEqual(out.driving_mode, DrivingMode.APPROACH_INTERSECTION)
        self.assertAlmostEqual(out.dist_to_stop, 60.0 - 8.0)
        self.assertAlmostEqual(scheduler.trace_frame()["dist_to_stop"].iloc[0], 52.0)


if __name__ == "__main__":
    unittest.main()
