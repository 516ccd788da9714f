#!/usr/bin/env python3
"""
planner/vehicle.py
==================
Per-vehicle state read by the behavioural planner.

Each :class:`Vehicle` bundles three snapshots owned by other subsystems
(:class:`Dynamics`, :class:`Sensors`, :class:`PathInfo`) plus the one
field the planner writes back: ``driving_mode``.

:class:`VehicleRegistry` is the enumerable, id-indexed collection that
is passed explicitly to the classifier and the conflict resolver.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

# Sensor value meaning "no leading vehicle detected"
NO_LEAD = -1.0


class DrivingMode(IntEnum):
    """Longitudinal driving mode, one authoritative value per tick."""

    CRUISE = 1
    PLATOON = 2
    STOP = 3
    APPROACH_INTERSECTION = 4


@dataclass
class Dynamics:
    """Kinematic snapshot.

    Attributes
    ----------
    speed : float
        Current speed in m/s.
    max_speed : float
        Reference cruise speed in m/s.
    position : (float, float)
        World position in metres.
    """

    speed: float = 0.0
    max_speed: float = 0.0
    position: Tuple[float, float] = (0.0, 0.0)


@dataclass
class Sensors:
    """Front-sensor readings.  Distances in metres, speeds in m/s."""

    distance_to_leading_vehicle: float = NO_LEAD
    leading_vehicle_speed: float = NO_LEAD
    front_sensor_range: float = 100.0
    safe_distance: float = 10.0
    aeb_distance: float = 5.0

    @property
    def lead_detected(self) -> bool:
        return self.distance_to_leading_vehicle >= 0.0


@dataclass
class PathInfo:
    """Route bookkeeping.

    A waypoint, once passed, is never revisited: ``last_waypoint`` must
    occur exactly once in ``path``.  ``stop_at == 0`` means no pending
    mandatory stop.
    """

    path: List[int] = field(default_factory=list)
    last_waypoint: int = 0
    stop_at: int = 0
    destination_reached: bool = False

    def next_waypoint(self) -> int:
        """Waypoint following ``last_waypoint``.

        Returns ``last_waypoint`` itself once the destination is reached
        or when it is the final waypoint of the path.

        Raises
        ------
        ValueError
            ``last_waypoint`` is missing from ``path`` or occurs twice.
        """
        if self.destination_reached:
            return self.last_waypoint
        hits = [i for i, wp in enumerate(self.path) if wp == self.last_waypoint]
        if len(hits) != 1:
            raise ValueError(
                f"waypoint {self.last_waypoint} occurs {len(hits)} times in "
                f"path {self.path}; expected exactly once"
            )
        idx = hits[0]
        if idx + 1 >= len(self.path):
            return self.last_waypoint
        return self.path[idx + 1]


@dataclass
class Vehicle:
    """A vehicle as seen by the planner."""

    id: int
    dynamics: Dynamics = field(default_factory=Dynamics)
    sensors: Sensors = field(default_factory=Sensors)
    path_info: PathInfo = field(default_factory=PathInfo)
    driving_mode: DrivingMode = DrivingMode.CRUISE

    def set_driving_mode(self, mode: int) -> None:
        self.driving_mode = DrivingMode(mode)

    def snapshot(self) -> "Vehicle":
        """Independent deep copy, safe to read while the original changes."""
        return copy.deepcopy(self)


class VehicleRegistry:
    """All vehicles of a scenario, indexed by id, iterated in ascending id.

    Parameters
    ----------
    vehicles : iterable of Vehicle
        Vehicles to register.  Ids must be unique.
    """

    def __init__(self, vehicles: Iterable[Vehicle] = ()) -> None:
        self._vehicles: Dict[int, Vehicle] = {}
        for vehicle in vehicles:
            self.add(vehicle)

    def add(self, vehicle: Vehicle) -> None:
        if vehicle.id in self._vehicles:
            raise ValueError(f"duplicate vehicle id {vehicle.id}")
        self._vehicles[vehicle.id] = vehicle

    def ids(self) -> List[int]:
        return sorted(self._vehicles)

    def get(self, vehicle_id: int) -> Optional[Vehicle]:
        return self._vehicles.get(vehicle_id)

    def snapshot(self) -> "VehicleRegistry":
        """Registry of copies: the consistent pre-tick view of every vehicle."""
        return VehicleRegistry(v.snapshot() for v in self)

    def __getitem__(self, vehicle_id: int) -> Vehicle:
        return self._vehicles[vehicle_id]

    def __contains__(self, vehicle_id: object) -> bool:
        return vehicle_id in self._vehicles

    def __iter__(self) -> Iterator[Vehicle]:
        for vehicle_id in self.ids():
            yield self._vehicles[vehicle_id]

    def __len__(self) -> int:
        return len(self._vehicles)
