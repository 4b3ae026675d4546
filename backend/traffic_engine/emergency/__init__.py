"""
Emergency Vehicle Module

Emergency vehicle detection, time-to-live tracking and junction alerts.

Components:
- EmergencyClassifier: Replaceable heuristics (qualify, type, direction)
- EmergencyVehicleMonitor: Live registry and append-only alert log
"""

from .emergency_classifier import (
    PRIORITY_LEVELS,
    EmergencyClassifier,
)

from .emergency_monitor import (
    TYPE_NAMES,
    EmergencyVehicleMonitor,
)


__all__ = [
    "PRIORITY_LEVELS",
    "EmergencyClassifier",
    "TYPE_NAMES",
    "EmergencyVehicleMonitor",
]
