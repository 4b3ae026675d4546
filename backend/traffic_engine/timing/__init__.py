"""
Signal Timing Module

Adaptive green/red timing per junction with emergency preemption.
"""

from traffic_engine.timing.signal_controller import (
    CONGESTION_ADJUSTMENTS,
    SmartSignalController
)


__all__ = [
    'CONGESTION_ADJUSTMENTS',
    'SmartSignalController',
]
