#!/usr/bin/env python3
"""
planner/scheduler.py
====================
Synchronous tick loop driving one :class:`~planner.driving_mode.DrivingModeClassifier`
per vehicle.

Every tick:

1. snapshot all vehicles (the consistent pre-tick view);
2. evaluate each vehicle in ascending id against that snapshot;
3. apply the outputs to the live vehicle (single writer per vehicle);
4. append one trace record per vehicle.

:meth:`TickScheduler.trace_frame` exposes the trace as a
:class:`pandas.DataFrame` for analysis or CSV export.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from planner.conflict import IntersectionConflictResolver
from planner.driving_mode import DrivingModeClassifier, ModeOutputs, apply_outputs
from planner.driving_policy import DrivingPolicy
from planner.network import WaypointMap
from planner.vehicle import VehicleRegistry

log = logging.getLogger("scheduler")

_TRACE_COLUMNS = (
    "tick", "vehicle_id", "vehicle_detected",
    "speed_reference", "distance_reference", "lead_speed",
    "driving_mode", "dist_to_stop", "lane_change",
)


class TickScheduler:
    """Runs the behavioural planner for every vehicle, once per tick.

    Parameters
    ----------
    registry : VehicleRegistry
        Live vehicles; only ``driving_mode`` is written.
    waypoint_map : WaypointMap
        Map collaborator shared by all classifiers.
    policy : DrivingPolicy or None
        Thresholds; uses defaults when *None*.
    """

    def __init__(
        self,
        registry: VehicleRegistry,
        waypoint_map: WaypointMap,
        policy: Optional[DrivingPolicy] = None,
    ) -> None:
        self.registry = registry
        self.waypoint_map = waypoint_map
        self.policy = policy or DrivingPolicy()
        self._resolver = (
            IntersectionConflictResolver()
            if self.policy.conflict_resolver_enabled else None
        )
        self._classifiers: Dict[int, DrivingModeClassifier] = {}
        self.history: List[Dict[str, Any]] = []
        self._tick_count: int = 0

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def _classifier_for(self, vehicle_id: int) -> DrivingModeClassifier:
        clf = self._classifiers.get(vehicle_id)
        if clf is None:
            clf = DrivingModeClassifier(
                vehicle_id, self.registry, self.waypoint_map, self.policy, self._resolver,
            )
            self._classifiers[vehicle_id] = clf
        return clf

    def tick(self, detections: Optional[Dict[int, bool]] = None) -> Dict[int, ModeOutputs]:
        """Advance one tick.

        *detections* maps vehicle id → "leading vehicle detected".  Missing
        entries fall back to ``Sensors.lead_detected``.
        """
        detections = detections or {}
        self._tick_count += 1
        snapshot = self.registry.snapshot()

        results: Dict[int, ModeOutputs] = {}
        for vehicle in snapshot:
            detected = detections.get(vehicle.id, vehicle.sensors.lead_detected)
            outputs = self._classifier_for(vehicle.id).step(detected, snapshot=snapshot)
            apply_outputs(self.registry[vehicle.id], outputs)
            results[vehicle.id] = outputs
            self.history.append({
                "tick": self._tick_count,
                "vehicle_id": vehicle.id,
                "vehicle_detected": bool(detected),
                **outputs._asdict(),
            })

        if self._tick_count % 10 == 1:
            log.debug(
                "=== TICK %d === %s", self._tick_count,
                {vid: out.driving_mode.name for vid, out in results.items()},
            )
        return results

    def run(
        self,
        ticks: int,
        detections: Optional[Dict[int, bool]] = None,
    ) -> Dict[int, ModeOutputs]:
        """Run *ticks* ticks with fixed *detections*; return the last outputs."""
        results: Dict[int, ModeOutputs] = {}
        for _ in range(max(0, int(ticks))):
            results = self.tick(detections)
        log.info("ran %d ticks for %d vehicles", ticks, len(self.registry))
        return results

    def trace_frame(self) -> pd.DataFrame:
        """Trace as a DataFrame, one row per vehicle per tick."""
        frame = pd.DataFrame(self.history, columns=list(_TRACE_COLUMNS))
        frame["driving_mode"] = frame["driving_mode"].astype(int)
        return frame
