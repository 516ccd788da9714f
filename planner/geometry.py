#!/usr/bin/env python3
"""
planner/geometry.py
===================
Curvilinear ↔ Cartesian transforms for a single road segment.

A segment is either a straight line from ``start`` to ``end`` or a
circular arc around ``rotation_center``.  The curvilinear frame follows
the segment's reference line: ``s`` is the distance travelled from
``start`` and ``d`` the lateral offset (positive = left of travel).

Both transforms are pure functions of ``(segment, …)``.  Degenerate
segments (zero length, zero radius) raise :class:`GeometryError` instead
of leaking NaN / Inf into the controllers.

Known asymmetries, kept on purpose:

* the straight :func:`curvilinear_to_cartesian` ignores ``d`` for the
  position;
* the arc :func:`cartesian_to_frenet` returns only the unsigned arc
  length, so the direction of travel along the arc is not recovered.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]

_EPS = 1e-12


class GeometryError(ValueError):
    """Raised for a degenerate segment or an undefined projection."""


class SegmentKind(str, Enum):
    STRAIGHT = "straight"
    ARC = "arc"


class Pose(NamedTuple):
    """World pose produced by :func:`curvilinear_to_cartesian`."""

    x: float
    y: float
    heading_deg: float

    @property
    def position(self) -> Point:
        return (self.x, self.y)


class FrenetCoordinate(NamedTuple):
    s: float   # distance along the segment from its start point
    d: float   # lateral offset, positive = left of travel


@dataclass(frozen=True)
class RoadSegment:
    """One lane piece, shared read-only by every vehicle.

    Parameters
    ----------
    start, end : (float, float)
        Start and end point in world metres.
    kind : SegmentKind
        ``STRAIGHT`` or ``ARC``.
    rotation_center : (float, float) or None
        Arc centre; required for ``ARC``.
    turn_direction : int
        ``+1`` or ``-1``; sign convention of the lateral planner.
    """

    start: Point
    end: Point
    kind: SegmentKind = SegmentKind.STRAIGHT
    rotation_center: Optional[Point] = None
    turn_direction: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", SegmentKind(self.kind))
        if self.turn_direction not in (1, -1):
            raise GeometryError(
                f"turn_direction must be +1 or -1, got {self.turn_direction!r}"
            )
        if self.kind is SegmentKind.ARC and self.rotation_center is None:
            raise GeometryError("arc segment needs a rotation_center")

    # ── constructors ──────────────────────────────────────────────────────

    @classmethod
    def straight(cls, start: Point, end: Point) -> "RoadSegment":
        return cls(start=tuple(start), end=tuple(end))

    @classmethod
    def arc(cls, start: Point, end: Point, rotation_center: Point,
            turn_direction: int) -> "RoadSegment":
        return cls(
            start=tuple(start),
            end=tuple(end),
            kind=SegmentKind.ARC,
            rotation_center=tuple(rotation_center),
            turn_direction=int(turn_direction),
        )

    @classmethod
    def from_trajectory(cls, rows: Sequence[Sequence[float]]) -> "RoadSegment":
        """Build a segment from the lateral planner's trajectory rows.

        Layout::

            [[x_start, _, y_start],
             [x_end,   _, y_end  ],
             [radian,  cx, cy    ],
             [turn,    ...       ]]

        The rows store ``y`` mirrored, so every ``y`` is negated here.
        ``radian == 0`` marks a straight segment.
        """
        start = (float(rows[0][0]), -float(rows[0][2]))
        end = (float(rows[1][0]), -float(rows[1][2]))
        radian = float(rows[2][0])
        turn = int(rows[3][0])
        if radian == 0:
            return cls(start=start, end=end, turn_direction=turn or 1)
        center = (float(rows[2][1]), -float(rows[2][2]))
        return cls.arc(start, end, center, turn)

    # ── derived values ────────────────────────────────────────────────────

    @property
    def radius(self) -> float:
        """``|start - rotation_center|`` for arcs, ``inf`` for straights."""
        if self.rotation_center is None:
            return math.inf
        return float(np.linalg.norm(np.subtract(self.start, self.rotation_center)))

    @property
    def length(self) -> float:
        """Reference-line length.

        Arcs are measured through the unsigned start/end angle, so only
        arcs of at most half a turn are measured correctly.
        """
        if self.kind is SegmentKind.STRAIGHT:
            return float(np.linalg.norm(np.subtract(self.end, self.start)))
        return cartesian_to_frenet(self, self.end).s


# ── helpers ───────────────────────────────────────────────────────────────────

def normalize_heading_deg(angle_deg: float) -> float:
    """Wrap *angle_deg* into ``(-180, 180]``."""
    wrapped = float(angle_deg) % 360.0
    # ``%`` can return exactly 360.0 for tiny negative inputs.
    if wrapped > 180.0:
        wrapped -= 360.0
    return wrapped


def _unit_direction(segment: RoadSegment) -> np.ndarray:
    v = np.subtract(segment.end, segment.start).astype(float)
    norm = np.linalg.norm(v)
    if norm < _EPS:
        raise GeometryError(
            f"degenerate segment: start {segment.start} equals end {segment.end}"
        )
    return v / norm


def _arc_frame(segment: RoadSegment) -> Tuple[np.ndarray, np.ndarray, float]:
    """Return ``(center, start_vector, radius)`` of an arc segment."""
    center = np.asarray(segment.rotation_center, dtype=float)
    start_vec = np.asarray(segment.start, dtype=float) - center
    r = float(np.linalg.norm(start_vec))
    if r < _EPS:
        raise GeometryError(
            f"degenerate arc: start {segment.start} lies on rotation center"
        )
    return center, start_vec, r


# ── transforms ────────────────────────────────────────────────────────────────

def curvilinear_to_cartesian(segment: RoadSegment, s: float, d: float = 0.0) -> Pose:
    """Map ``(s, d)`` on *segment* to a world :class:`Pose`.

    Parameters
    ----------
    segment : RoadSegment
        Reference segment.
    s : float
        Distance travelled along the reference line.
    d : float
        Lateral offset.  Only the arc case uses it for the position.

    Raises
    ------
    GeometryError
        Zero-length straight segment or zero-radius arc.
    """
    if segment.kind is SegmentKind.STRAIGHT:
        u = _unit_direction(segment)
        heading = math.degrees(math.atan2(u[1], u[0]))
        pos = np.asarray(segment.start, dtype=float) + s * u
        return Pose(float(pos[0]), float(pos[1]), heading)

    center, start_vec, r = _arc_frame(segment)
    turn = segment.turn_direction
    theta0 = math.atan2(start_vec[1], start_vec[0])
    lane_radius = r - d * turn
    theta = -turn * s / r + theta0
    pos = center + lane_radius * np.array([math.cos(theta), math.sin(theta)])
    heading = normalize_heading_deg(math.degrees(theta) - turn * 90.0)
    return Pose(float(pos[0]), float(pos[1]), heading)


def cartesian_to_frenet(segment: RoadSegment, position: Point) -> FrenetCoordinate:
    """Project a world *position* onto *segment*'s curvilinear frame.

    Raises
    ------
    GeometryError
        Degenerate segment, or a position on the arc's rotation center
        (the angle is undefined there).
    """
    p = np.asarray(position, dtype=float)

    if segment.kind is SegmentKind.STRAIGHT:
        u = _unit_direction(segment)
        rel = p - np.asarray(segment.start, dtype=float)
        side = np.array([-u[1], u[0]])  # u rotated +90°
        return FrenetCoordinate(float(rel @ u), float(rel @ side))

    center, start_vec, r = _arc_frame(segment)
    rel = p - center
    dist = float(np.linalg.norm(rel))
    if dist < _EPS:
        raise GeometryError("position coincides with the arc's rotation center")
    d = (dist - r) * segment.turn_direction
    cos_angle = float(rel @ start_vec) / (dist * r)
    angle = math.acos(float(np.clip(cos_angle, -1.0, 1.0)))
    return FrenetCoordinate(angle * r, d)
