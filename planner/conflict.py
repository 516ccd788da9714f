#!/usr/bin/env python3
"""
planner/conflict.py
===================
Right-of-way resolution for vehicles converging on the same waypoint
from different lanes.

The resolver only ever reads a pre-tick :class:`~planner.vehicle.VehicleRegistry`
snapshot, so every vehicle of a tick sees the same neighbour state no
matter in which order the vehicles are evaluated.

Priority rule (:func:`has_priority`): a moving vehicle goes before a
stationary one; between two stationary (or two moving) vehicles the
lower id goes first.  For any pair exactly one vehicle yields.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, NamedTuple, Optional, Tuple

from planner.vehicle import Vehicle, VehicleRegistry

log = logging.getLogger("conflict")


class Resolution(NamedTuple):
    must_yield: bool
    competitor_id: Optional[int]
    next_waypoint: int


def get_active_waypoints(
    vehicles: Iterable[Vehicle],
) -> Tuple[Dict[int, int], Dict[int, int]]:
    """Last and next waypoint of every vehicle, keyed by vehicle id.

    A vehicle parked at its destination reports its last waypoint as the
    next one, so it never competes for a new node.

    Raises
    ------
    ValueError
        A vehicle's ``last_waypoint`` is not exactly once in its path.
    """
    last_waypoints: Dict[int, int] = {}
    next_waypoints: Dict[int, int] = {}
    for vehicle in sorted(vehicles, key=lambda v: v.id):
        info = vehicle.path_info
        last_waypoints[vehicle.id] = info.last_waypoint
        next_waypoints[vehicle.id] = info.next_waypoint()
    return last_waypoints, next_waypoints


def check_next_waypoint_clear(
    vehicle_id: int,
    last_waypoints: Dict[int, int],
    next_waypoints: Dict[int, int],
) -> Optional[int]:
    """Return the first competitor heading to the same next waypoint, or ``None``.

    A competitor is any other vehicle with the same next waypoint but a
    different last waypoint (a vehicle on the same lane is handled by the
    front sensor instead).  Vehicles are scanned in ascending id.
    """
    target = next_waypoints[vehicle_id]
    origin = last_waypoints[vehicle_id]
    for other_id in sorted(next_waypoints):
        if other_id == vehicle_id:
            continue
        if next_waypoints[other_id] == target and last_waypoints[other_id] != origin:
            return other_id
    return None


def priority_key(vehicle_id: int, speed: float) -> Tuple[bool, int]:
    """Ordering key, smaller goes first: moving before stationary, then lower id."""
    return (speed == 0, vehicle_id)


def has_priority(
    vehicle_id: int,
    speed: float,
    competitor_id: int,
    competitor_speed: float,
) -> bool:
    """True when *vehicle_id* keeps right-of-way over *competitor_id*.

    Ids are unique, so for any pair exactly one side has priority.
    """
    return priority_key(vehicle_id, speed) < priority_key(competitor_id, competitor_speed)


class IntersectionConflictResolver:
    """Decides whether a vehicle must yield at its next waypoint.

    The check is repeated only when the vehicle has just switched to a new
    next waypoint or is standing still; a vehicle already committed to a
    node at speed is not re-litigated every tick.
    """

    def resolve(
        self,
        vehicle_id: int,
        snapshot: VehicleRegistry,
        previous_next_waypoint: Optional[int],
    ) -> Resolution:
        last_waypoints, next_waypoints = get_active_waypoints(snapshot)
        next_wp = next_waypoints[vehicle_id]
        speed = snapshot[vehicle_id].dynamics.speed

        transitioned = previous_next_waypoint != next_wp
        if not (transitioned or speed == 0):
            return Resolution(False, None, next_wp)

        competitor_id = check_next_waypoint_clear(vehicle_id, last_waypoints, next_waypoints)
        if competitor_id is None:
            return Resolution(False, None, next_wp)

        competitor_speed = snapshot[competitor_id].dynamics.speed
        must_yield = not has_priority(vehicle_id, speed, competitor_id, competitor_speed)
        log.debug(
            "vehicle %d vs %d at waypoint %d: competitor speed=%.2f -> %s",
            vehicle_id, competitor_id, next_wp, competitor_speed,
            "yield" if must_yield else "proceed",
        )
        return Resolution(must_yield, competitor_id, next_wp)
