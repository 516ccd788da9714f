#!/usr/bin/env python3
"""
planner/network.py
==================
Waypoint map consumed by the behavioural planner.

Defines :class:`WaypointNode`, :class:`LaneLink`, and
:class:`WaypointMap`: a lightweight directed graph that locates
waypoints in world space and stores the :class:`~planner.geometry.RoadSegment`
driven between two consecutive waypoints.

:func:`crossroad_map` builds a single four-arm intersection with
straight approach / exit lanes and arc turning lanes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from planner.geometry import RoadSegment

Point = Tuple[float, float]


# ── Nodes and links ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class WaypointNode:
    """A discrete node of the lane network.

    Ids are positive; ``0`` is reserved for "no waypoint".
    """

    id: int
    x: float
    y: float


@dataclass(frozen=True)
class LaneLink:
    """Directed lane piece from ``from_id`` to ``to_id``."""

    from_id: int
    to_id: int
    segment: RoadSegment


# ── Map ───────────────────────────────────────────────────────────────────────

class WaypointMap:
    """Graph of waypoints connected by lane links.

    Provides the lookups used by the classifier and the lateral planner:

    * **coordinates_of**: world position of a waypoint.
    * **segment_between**: geometry driven between two waypoints.
    * **path_length**: reference-line length of a whole route.
    """

    def __init__(
        self,
        waypoints: Iterable[WaypointNode],
        links: Iterable[LaneLink] = (),
    ) -> None:
        self.waypoints: Dict[int, WaypointNode] = {}
        for node in waypoints:
            if node.id <= 0:
                raise ValueError(f"waypoint ids must be positive, got {node.id}")
            self.waypoints[node.id] = node
        self.links = list(links)

        # (from_id, to_id) → segment
        self._segments: Dict[Tuple[int, int], RoadSegment] = {}
        self._successors: Dict[int, List[int]] = {}
        for link in self.links:
            for wp in (link.from_id, link.to_id):
                if wp not in self.waypoints:
                    raise ValueError(f"link references unknown waypoint {wp}")
            self._segments[(link.from_id, link.to_id)] = link.segment
            self._successors.setdefault(link.from_id, []).append(link.to_id)

    # ── queries ───────────────────────────────────────────────────────────

    def coordinates_of(self, waypoint_id: int) -> Point:
        """World ``(x, y)`` of *waypoint_id*; ``KeyError`` when unknown."""
        node = self.waypoints[waypoint_id]
        return (node.x, node.y)

    def segment_between(self, from_id: int, to_id: int) -> Optional[RoadSegment]:
        return self._segments.get((from_id, to_id))

    def successors(self, waypoint_id: int) -> List[int]:
        return list(self._successors.get(waypoint_id, ()))

    def path_length(self, path: Sequence[int]) -> float:
        """Sum of link lengths along *path*.

        Raises
        ------
        ValueError
            Two consecutive waypoints are not linked.
        """
        total = 0.0
        for a, b in zip(path, path[1:]):
            segment = self.segment_between(a, b)
            if segment is None:
                raise ValueError(f"no lane link from waypoint {a} to {b}")
            total += segment.length
        return total


# ── Default layout ────────────────────────────────────────────────────────────

# Arm name → (index used for waypoint ids, outward unit vector)
_ARMS: Dict[str, Tuple[int, Point]] = {
    "W": (1, (-1.0, 0.0)),
    "S": (2, (0.0, -1.0)),
    "E": (3, (1.0, 0.0)),
    "N": (4, (0.0, 1.0)),
}

# Waypoint slots along each arm
_ENTRY, _STOP_LINE, _EXIT, _END = 1, 2, 3, 4


def arm_waypoint(arm: str, slot: int) -> int:
    """Waypoint id of *slot* on *arm* in :func:`crossroad_map` (e.g. W/stop → 12)."""
    return _ARMS[arm][0] * 10 + slot


def crossroad_route(from_arm: str, to_arm: str) -> List[int]:
    """Waypoint path entering on *from_arm* and leaving on *to_arm*."""
    if from_arm == to_arm:
        raise ValueError("U-turns are not part of the crossroad layout")
    return [
        arm_waypoint(from_arm, _ENTRY),
        arm_waypoint(from_arm, _STOP_LINE),
        arm_waypoint(to_arm, _EXIT),
        arm_waypoint(to_arm, _END),
    ]


def crossroad_map(
    arm_length_m: float = 60.0,
    lane_offset_m: float = 1.85,
    stop_line_m: float = 8.0,
) -> WaypointMap:
    """Build a four-arm intersection centred on the origin (right-hand traffic).

    Every arm carries an inbound lane (entry → stop line) and an
    outbound lane (exit → end).  Each stop line links to the exit of the
    three other arms: straight across, or a 90° arc for turns.

    Parameters
    ----------
    arm_length_m : float
        Distance of the entry / end waypoints from the centre.
    lane_offset_m : float
        Lane-centre offset from the arm axis.
    stop_line_m : float
        Distance of the stop line / exit waypoints from the centre.
        Must exceed *lane_offset_m* so right turns have a positive radius.
    """
    if stop_line_m <= lane_offset_m:
        raise ValueError("stop_line_m must be larger than lane_offset_m")

    nodes: List[WaypointNode] = []
    inbound: Dict[str, Tuple[np.ndarray, np.ndarray]] = {}   # arm → (stop point, travel dir)
    outbound: Dict[str, Tuple[np.ndarray, np.ndarray]] = {}  # arm → (exit point, travel dir)
    links: List[LaneLink] = []

    for arm, (_idx, out) in _ARMS.items():
        outward = np.array(out)
        travel_in = -outward
        right_in = np.array([travel_in[1], -travel_in[0]])
        right_out = np.array([outward[1], -outward[0]])

        entry = arm_length_m * outward + lane_offset_m * right_in
        stop = stop_line_m * outward + lane_offset_m * right_in
        exit_ = stop_line_m * outward + lane_offset_m * right_out
        end = arm_length_m * outward + lane_offset_m * right_out

        for slot, p in ((_ENTRY, entry), (_STOP_LINE, stop), (_EXIT, exit_), (_END, end)):
            nodes.append(WaypointNode(arm_waypoint(arm, slot), float(p[0]), float(p[1])))

        links.append(LaneLink(
            arm_waypoint(arm, _ENTRY), arm_waypoint(arm, _STOP_LINE),
            RoadSegment.straight(tuple(entry), tuple(stop)),
        ))
        links.append(LaneLink(
            arm_waypoint(arm, _EXIT), arm_waypoint(arm, _END),
            RoadSegment.straight(tuple(exit_), tuple(end)),
        ))
        inbound[arm] = (stop, travel_in)
        outbound[arm] = (exit_, outward)

    for from_arm, (p, travel_in) in inbound.items():
        right_in = np.array([travel_in[1], -travel_in[0]])
        for to_arm, (q, out_dir) in outbound.items():
            if to_arm == from_arm:
                continue
            links.append(LaneLink(
                arm_waypoint(from_arm, _STOP_LINE),
                arm_waypoint(to_arm, _EXIT),
                _turn_segment(p, q, travel_in, right_in, out_dir),
            ))

    return WaypointMap(nodes, links)


def _turn_segment(
    p: np.ndarray,
    q: np.ndarray,
    travel_in: np.ndarray,
    right_in: np.ndarray,
    out_dir: np.ndarray,
) -> RoadSegment:
    """Straight or quarter-circle segment from stop point *p* to exit *q*."""
    denom = float(right_in @ out_dir)
    if abs(denom) < 1e-9:
        return RoadSegment.straight(tuple(p), tuple(q))
    # Centre lies on the normal through p and on the normal through q.
    t = float((q - p) @ out_dir) / denom
    center = p + t * right_in
    cross = travel_in[0] * out_dir[1] - travel_in[1] * out_dir[0]
    # Clockwise (right) turn → +1, counter-clockwise (left) → -1
    turn = 1 if cross < 0 else -1
    return RoadSegment.arc(tuple(p), tuple(q), tuple(center), turn)
