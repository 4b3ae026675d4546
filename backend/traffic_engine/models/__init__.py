"""
Pydantic Models Package

All data models for the perception and signal decision engine.
Import from here for convenience.
"""

# Detection models
from .detection import (
    BoundingBox,
    Detection,
    RawDetection,
)

# Density models
from .traffic import (
    VehicleType,
    CongestionLevel,
    ClassifiedVehicle,
    TrafficDensity,
)

# Signal timing models
from .signal import (
    JunctionConfig,
    SignalTimingResult,
)

# Emergency models
from .emergency import (
    EmergencyType,
    Direction,
    AlertAction,
    EmergencyVehicle,
    EmergencyAlert,
)

# Engine output models
from .engine import (
    JunctionStats,
    CycleResult,
    FrameSample,
    VideoAnalysisSummary,
)


__all__ = [
    # Detection
    'BoundingBox',
    'Detection',
    'RawDetection',

    # Density
    'VehicleType',
    'CongestionLevel',
    'ClassifiedVehicle',
    'TrafficDensity',

    # Signal
    'JunctionConfig',
    'SignalTimingResult',

    # Emergency
    'EmergencyType',
    'Direction',
    'AlertAction',
    'EmergencyVehicle',
    'EmergencyAlert',

    # Engine
    'JunctionStats',
    'CycleResult',
    'FrameSample',
    'VideoAnalysisSummary',
]
