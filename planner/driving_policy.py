#!/usr/bin/env python3
"""
planner/driving_policy.py
=========================
Tunable thresholds of the behavioural planner.  Every constant lives in
the frozen :class:`DrivingPolicy` dataclass so that experiments can swap
policies without touching code.

Also provides two stateless helpers:

* :func:`ignore_distance_m`: speed-scaled "far enough to ignore" gap.
* :func:`clamp_distance_reference`: upper clamp for the platoon input.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DrivingPolicy:
    """Immutable bag of every decision threshold.

    Groups: platoon reference, lead-vehicle relevance, intersection
    conflict resolution.
    """

    # ── Platoon reference ─────────────────────────────────────────────────
    distance_reference_cap_m: float = 1000.0
    """Upper clamp on the distance reference fed to the platoon controller."""

    # ── Lead-vehicle relevance ────────────────────────────────────────────
    ignore_gap_time_s: float = 1.4
    """Speed multiplier of the "far enough to ignore" threshold."""

    ignore_gap_margin_m: float = 25.0
    """Constant margin added to the "far enough to ignore" threshold."""

    # ── Intersection conflict resolver ────────────────────────────────────
    conflict_resolver_enabled: bool = False
    """Downgrade to STOP when a competitor has right-of-way at the next waypoint."""


def ignore_distance_m(speed: float, safe_distance: float, policy: DrivingPolicy) -> float:
    """Gap beyond which a detected leading vehicle is ignored.

    ``speed * ignore_gap_time_s + safe_distance + ignore_gap_margin_m``
    """
    return speed * policy.ignore_gap_time_s + safe_distance + policy.ignore_gap_margin_m


def clamp_distance_reference(distance: float, policy: DrivingPolicy) -> float:
    """Upper-clamp *distance*; negative "no lead" values pass through."""
    return min(distance, policy.distance_reference_cap_m)
