#!/usr/bin/env python3
"""
config.py
=========
Application-wide configuration constants.

Values can be overridden via environment variables (see :mod:`main`).
This module is a thin, import-safe leaf: it never imports from
other project packages.
"""

# ── Simulation defaults ──────────────────────────────────────────────────────
DEFAULT_TICK_COUNT: int = 50
DEFAULT_TICK_RATE_HZ: float = 10.0

# ── Planner defaults ─────────────────────────────────────────────────────────
DEFAULT_CONFLICT_RESOLVER_ENABLED: bool = False
DEFAULT_DISTANCE_REFERENCE_CAP_M: float = 1000.0

# ── Map defaults ─────────────────────────────────────────────────────────────
LANE_WIDTH_M: float = 3.7
ARM_LENGTH_M: float = 60.0
STOP_LINE_M: float = 8.0

# ── Logging / output ─────────────────────────────────────────────────────────
LOG_FILE: str = "planner.log"
CONFLICT_DEBUG_LOG_FILE: str = "conflict_debug.log"
DEFAULT_LOG_LEVEL: str = "INFO"
