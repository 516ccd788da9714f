#!/usr/bin/env python3
"""
main.py
=======
Runs the behavioural planner on a fixed crossroad scenario and logs the
per-vehicle decisions.

Environment overrides
---------------------
``PLANNER_TICKS``
    Number of ticks to run (default :data:`config.DEFAULT_TICK_COUNT`).
``PLANNER_CONFLICT_RESOLVER``
    ``1`` / ``true`` enables the intersection conflict resolver.
``PLANNER_TRACE_CSV``
    When set, the per-tick trace is written to this CSV path.
``PLANNER_LOG_LEVEL``
    Logging level name (``DEBUG``, ``INFO``, ...).

Usage::

    PLANNER_CONFLICT_RESOLVER=1 python main.py
"""

import logging
import os

import config
from logging_setup import setup_logging
from planner.driving_policy import DrivingPolicy
from planner.geometry import cartesian_to_frenet, curvilinear_to_cartesian
from planner.network import WaypointMap, arm_waypoint, crossroad_map, crossroad_route
from planner.scheduler import TickScheduler
from planner.vehicle import Dynamics, PathInfo, Sensors, Vehicle, VehicleRegistry

log = logging.getLogger("main")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("ignoring %s=%r (not an integer)", name, raw)
        return default


def build_scenario(waypoint_map: WaypointMap) -> VehicleRegistry:
    """Five vehicles around one crossroad.

    Vehicles 3 and 4 wait at different stop lines for the same exit
    waypoint, so they compete when the conflict resolver is enabled.
    """
    def at(arm: str, slot: int):
        return waypoint_map.coordinates_of(arm_waypoint(arm, slot))

    w_to_e = crossroad_route("W", "E")
    s_to_w = crossroad_route("S", "W")
    n_to_s = crossroad_route("N", "S")
    e_to_s = crossroad_route("E", "S")
    w_to_n = crossroad_route("W", "N")

    return VehicleRegistry([
        # Following a slower car towards the W stop line.
        Vehicle(
            id=1,
            dynamics=Dynamics(speed=12.0, max_speed=14.0, position=at("W", 1)),
            sensors=Sensors(distance_to_leading_vehicle=30.0, leading_vehicle_speed=10.0),
            path_info=PathInfo(path=w_to_e, last_waypoint=w_to_e[0], stop_at=w_to_e[1]),
        ),
        # Free road, turning right through the box.
        Vehicle(
            id=2,
            dynamics=Dynamics(speed=8.0, max_speed=10.0, position=at("S", 2)),
            path_info=PathInfo(path=s_to_w, last_waypoint=s_to_w[1]),
        ),
        # Waiting at the N stop line, going straight to the S exit.
        Vehicle(
            id=3,
            dynamics=Dynamics(speed=0.0, max_speed=10.0, position=at("N", 2)),
            path_info=PathInfo(path=n_to_s, last_waypoint=n_to_s[1]),
        ),
        # Waiting at the E stop line, turning left to the S exit.
        Vehicle(
            id=4,
            dynamics=Dynamics(speed=0.0, max_speed=10.0, position=at("E", 2)),
            path_info=PathInfo(path=e_to_s, last_waypoint=e_to_s[1]),
        ),
        # Already parked at its destination.
        Vehicle(
            id=5,
            dynamics=Dynamics(speed=0.0, max_speed=10.0, position=at("N", 4)),
            path_info=PathInfo(path=w_to_n, last_waypoint=w_to_n[-1],
                               destination_reached=True),
        ),
    ])


def log_reference_poses(registry: VehicleRegistry, waypoint_map: WaypointMap) -> None:
    """Project each active vehicle onto its current lane and log the reference pose."""
    for vehicle in registry:
        info = vehicle.path_info
        if info.destination_reached:
            continue
        segment = waypoint_map.segment_between(info.last_waypoint, info.next_waypoint())
        if segment is None:
            continue
        frenet = cartesian_to_frenet(segment, vehicle.dynamics.position)
        pose = curvilinear_to_cartesian(segment, frenet.s, frenet.d)
        log.info(
            "vehicle %d  s=%.2f d=%.2f  ref=(%.2f, %.2f) heading=%.1f deg",
            vehicle.id, frenet.s, frenet.d, pose.x, pose.y, pose.heading_deg,
        )


def main():
    level_name = os.environ.get("PLANNER_LOG_LEVEL", config.DEFAULT_LOG_LEVEL).upper()
    setup_logging(getattr(logging, level_name, logging.INFO))
    log.info("Starting planner scenario...")

    policy = DrivingPolicy(
        distance_reference_cap_m=config.DEFAULT_DISTANCE_REFERENCE_CAP_M,
        conflict_resolver_enabled=_env_flag(
            "PLANNER_CONFLICT_RESOLVER", config.DEFAULT_CONFLICT_RESOLVER_ENABLED,
        ),
    )
    waypoint_map = crossroad_map(
        arm_length_m=config.ARM_LENGTH_M,
        lane_offset_m=config.LANE_WIDTH_M / 2.0,
        stop_line_m=config.STOP_LINE_M,
    )
    registry = build_scenario(waypoint_map)
    scheduler = TickScheduler(registry, waypoint_map, policy)

    ticks = _env_int("PLANNER_TICKS", config.DEFAULT_TICK_COUNT)
    results = scheduler.run(ticks)
    for vehicle_id, outputs in results.items():
        log.info("vehicle %d -> %s %s", vehicle_id, outputs.driving_mode.name, tuple(outputs))

    log_reference_poses(registry, waypoint_map)

    trace_path = os.environ.get("PLANNER_TRACE_CSV")
    if trace_path:
        scheduler.trace_frame().to_csv(trace_path, index=False)
        log.info("trace written to %s", trace_path)


if __name__ == "__main__":
    main()
