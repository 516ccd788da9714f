#!/usr/bin/env python3
"""
planner/driving_mode.py
=======================
Behavioural planner: picks the longitudinal driving mode of one vehicle
once per tick.

:class:`DrivingModeClassifier` reads the vehicle's dynamics, front-sensor
and path snapshot and returns :class:`ModeOutputs` for the longitudinal
controllers.  It never writes vehicle state itself; the caller hands
the result to :func:`apply_outputs`, the only writer of
``Vehicle.driving_mode``.
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple, Optional

from planner.conflict import IntersectionConflictResolver
from planner.driving_policy import (
    DrivingPolicy,
    clamp_distance_reference,
    ignore_distance_m,
)
from planner.network import WaypointMap
from planner.vehicle import DrivingMode, Dynamics, Sensors, Vehicle, VehicleRegistry

log = logging.getLogger("driving_mode")


class ModeOutputs(NamedTuple):
    """Per-tick classifier outputs.

    ``-1`` in ``distance_reference`` / ``lead_speed`` / ``dist_to_stop``
    is a "not applicable" sentinel, not a measurement.
    """

    speed_reference: float
    distance_reference: float
    lead_speed: float
    driving_mode: DrivingMode
    dist_to_stop: float
    lane_change: int = 0


# Emitted once the destination is reached: the vehicle is inactive.
INACTIVE_OUTPUTS = ModeOutputs(
    speed_reference=0.0,
    distance_reference=-1.0,
    lead_speed=-1.0,
    driving_mode=DrivingMode.CRUISE,
    dist_to_stop=-1.0,
    lane_change=0,
)


def select_mode(
    vehicle_detected: bool,
    dynamics: Dynamics,
    sensors: Sensors,
    policy: DrivingPolicy,
) -> DrivingMode:
    """Mode from the leading-vehicle situation alone (no stop point).

    Comparisons are strict, so a gap exactly on a threshold falls to the
    more cautious branch.
    """
    if not vehicle_detected:
        return DrivingMode.CRUISE

    gap = sensors.distance_to_leading_vehicle
    if (gap > sensors.front_sensor_range
            or gap < 0
            or gap > ignore_distance_m(dynamics.speed, sensors.safe_distance, policy)):
        return DrivingMode.CRUISE
    if gap > sensors.aeb_distance:
        return DrivingMode.PLATOON
    # Too close, but the gap is not shrinking.
    if sensors.leading_vehicle_speed - dynamics.speed > 0:
        return DrivingMode.PLATOON
    return DrivingMode.STOP


class DrivingModeClassifier:
    """Driving-mode decision for a single vehicle.

    Parameters
    ----------
    vehicle_id : int
        Id of the vehicle in *registry*.
    registry : VehicleRegistry
        All vehicles; read when no snapshot is passed to :meth:`step`.
    waypoint_map : WaypointMap
        Resolves the stop waypoint to world coordinates.
    policy : DrivingPolicy or None
        Thresholds; uses defaults when *None*.
    resolver : IntersectionConflictResolver or None
        Conflict resolver.  Created on demand when
        ``policy.conflict_resolver_enabled`` is set.
    """

    def __init__(
        self,
        vehicle_id: int,
        registry: VehicleRegistry,
        waypoint_map: WaypointMap,
        policy: Optional[DrivingPolicy] = None,
        resolver: Optional[IntersectionConflictResolver] = None,
    ) -> None:
        self.vehicle_id = vehicle_id
        self.registry = registry
        self.waypoint_map = waypoint_map
        self.policy = policy or DrivingPolicy()
        if resolver is None and self.policy.conflict_resolver_enabled:
            resolver = IntersectionConflictResolver()
        self.resolver = resolver
        self._previous_next_waypoint: Optional[int] = None

    def step(
        self,
        vehicle_detected: bool,
        snapshot: Optional[VehicleRegistry] = None,
    ) -> ModeOutputs:
        """Classify one tick.

        *snapshot* is the pre-tick view of every vehicle; when omitted the
        live registry is read.
        """
        view = snapshot if snapshot is not None else self.registry
        vehicle = view[self.vehicle_id]
        info = vehicle.path_info

        if info.destination_reached:
            return INACTIVE_OUTPUTS

        sensors = vehicle.sensors
        dynamics = vehicle.dynamics
        mode = select_mode(vehicle_detected, dynamics, sensors, self.policy)

        if info.stop_at != 0:
            stop_xy = self.waypoint_map.coordinates_of(info.stop_at)
            dist_to_stop = math.hypot(
                dynamics.position[0] - stop_xy[0],
                dynamics.position[1] - stop_xy[1],
            )
            if mode is not DrivingMode.STOP:
                mode = DrivingMode.APPROACH_INTERSECTION
        else:
            dist_to_stop = 0.0

        if self.resolver is not None:
            resolution = self.resolver.resolve(
                self.vehicle_id, view, self._previous_next_waypoint,
            )
            self._previous_next_waypoint = resolution.next_waypoint
            if resolution.must_yield:
                mode = DrivingMode.STOP

        log.debug(
            "vehicle %d: detected=%s gap=%.1f speed=%.1f stop_at=%d -> %s",
            self.vehicle_id, vehicle_detected, sensors.distance_to_leading_vehicle,
            dynamics.speed, info.stop_at, mode.name,
        )
        return ModeOutputs(
            speed_reference=dynamics.max_speed,
            distance_reference=clamp_distance_reference(
                sensors.distance_to_leading_vehicle, self.policy,
            ),
            lead_speed=sensors.leading_vehicle_speed,
            driving_mode=mode,
            dist_to_stop=dist_to_stop,
            lane_change=0,
        )


def apply_outputs(vehicle: Vehicle, outputs: ModeOutputs) -> None:
    """Write the classifier decision back onto *vehicle*."""
    if vehicle.driving_mode != outputs.driving_mode:
        log.debug(
            "vehicle %d mode %s -> %s",
            vehicle.id, vehicle.driving_mode.name, outputs.driving_mode.name,
        )
    vehicle.set_driving_mode(outputs.driving_mode)
