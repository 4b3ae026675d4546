"""
Engine Output Models

Results of one evaluation cycle and of a sampled video analysis.
"""

from pydantic import BaseModel, Field
from typing import Optional
import time

from .traffic import ClassifiedVehicle, TrafficDensity
from .signal import SignalTimingResult
from .emergency import EmergencyVehicle, EmergencyAlert


class JunctionStats(BaseModel):
    """Snapshot handed to the external persistence layer after each cycle"""
    junction_id: str
    avg_density: float
    recommended_green_time: int
    efficiency: float
    wait_time_reduction: float
    updated_at: float = Field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            'junction_id': self.junction_id,
            'avg_density': self.avg_density,
            'recommended_green_time': self.recommended_green_time,
            'efficiency': self.efficiency,
            'wait_time_reduction': self.wait_time_reduction,
            'updated_at': self.updated_at
        }


class CycleResult(BaseModel):
    """Everything the engine produced for one junction in one refresh cycle"""
    junction_id: str
    detections: list[ClassifiedVehicle] = Field(default_factory=list)
    traffic_density: TrafficDensity
    signal_timing: SignalTimingResult
    emergency_vehicles: list[EmergencyVehicle] = Field(default_factory=list)
    emergency_alerts: list[EmergencyAlert] = Field(default_factory=list)
    preempted: bool = False
    rush_hour: bool = False
    timestamp: float = Field(default_factory=time.time)

    def junction_stats(self) -> JunctionStats:
        return JunctionStats(
            junction_id=self.junction_id,
            avg_density=self.traffic_density.density,
            recommended_green_time=self.signal_timing.green_time,
            efficiency=self.signal_timing.efficiency,
            wait_time_reduction=self.signal_timing.wait_time_reduction,
            updated_at=self.timestamp
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            'junctionId': self.junction_id,
            'detections': [d.to_dict() for d in self.detections],
            'trafficDensity': self.traffic_density.to_dict(),
            'signalTiming': self.signal_timing.to_dict(),
            'emergencyVehicles': [v.to_dict() for v in self.emergency_vehicles],
            'emergencyAlerts': [a.to_dict() for a in self.emergency_alerts],
            'preempted': self.preempted,
            'rushHour': self.rush_hour,
            'lastUpdated': self.timestamp
        }


class FrameSample(BaseModel):
    """Vehicle count observed in one sampled video frame"""
    frame: int = Field(ge=0)
    vehicles: int = Field(ge=0)
    density: float = 0.0
    time_seconds: Optional[float] = None


class VideoAnalysisSummary(BaseModel):
    """Aggregate of a sampled video analysis"""
    total_frames: int = 0
    avg_vehicles: float = 0.0
    avg_density: float = 0.0
    frames: list[FrameSample] = Field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'totalFrames': self.total_frames,
            'avgVehicles': self.avg_vehicles,
            'avgDensity': self.avg_density,
            'detections': [
                {'frame': f.frame, 'vehicles': f.vehicles, 'density': f.density}
                for f in self.frames
            ]
        }
