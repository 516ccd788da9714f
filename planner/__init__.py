"""
planner: Behavioural planner core
==================================

Decides *what* longitudinal mode each vehicle drives in and converts
between lane-relative and world coordinates for the lateral controller.

Modules
-------
geometry
    :class:`RoadSegment` and the curvilinear ↔ Cartesian transforms.
vehicle
    :class:`Vehicle` snapshots, :class:`DrivingMode`, :class:`VehicleRegistry`.
network
    :class:`WaypointMap` map collaborator and the crossroad layout.
driving_policy
    :class:`DrivingPolicy` tunable thresholds.
driving_mode
    :class:`DrivingModeClassifier` per-tick mode decision.
conflict
    :class:`IntersectionConflictResolver` right-of-way at shared waypoints.
scheduler
    :class:`TickScheduler` synchronous per-tick loop.
"""

from .geometry import (
    FrenetCoordinate,
    GeometryError,
    Pose,
    RoadSegment,
    SegmentKind,
    cartesian_to_frenet,
    curvilinear_to_cartesian,
    normalize_heading_deg,
)
from .vehicle import DrivingMode, Dynamics, PathInfo, Sensors, Vehicle, VehicleRegistry
from .network import WaypointMap, crossroad_map, crossroad_route
from .driving_policy import DrivingPolicy
from .driving_mode import DrivingModeClassifier, ModeOutputs, apply_outputs
from .conflict import IntersectionConflictResolver
from .scheduler import TickScheduler

__all__ = [
    "FrenetCoordinate",
    "GeometryError",
    "Pose",
    "RoadSegment",
    "SegmentKind",
    "cartesian_to_frenet",
    "curvilinear_to_cartesian",
    "normalize_heading_deg",
    "DrivingMode",
    "Dynamics",
    "PathInfo",
    "Sensors",
    "Vehicle",
    "VehicleRegistry",
    "WaypointMap",
    "crossroad_map",
    "crossroad_route",
    "DrivingPolicy",
    "DrivingModeClassifier",
    "ModeOutputs",
    "apply_outputs",
    "IntersectionConflictResolver",
    "TickScheduler",
]
