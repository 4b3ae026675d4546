"""
Traffic Density Models

Classified vehicles and the per-evaluation density snapshot.
"""

from pydantic import BaseModel, Field
from enum import Enum
from uuid import uuid4
import time


class VehicleType(str, Enum):
    """Vehicle categories used for weighted occupancy"""
    CAR = "car"
    TRUCK = "truck"
    BUS = "bus"
    MOTORCYCLE = "motorcycle"
    BICYCLE = "bicycle"


class CongestionLevel(str, Enum):
    """Discretized traffic density buckets"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ClassifiedVehicle(BaseModel):
    """A raw detection that passed the confidence filter, with its inferred type"""
    id: str = Field(default_factory=lambda: f"veh-{uuid4().hex[:12]}")
    vehicle_type: VehicleType
    confidence: float
    x: float
    y: float
    width: float
    height: float
    timestamp: float = Field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'vehicleType': self.vehicle_type.value,
            'confidence': self.confidence,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
            'timestamp': self.timestamp
        }


class TrafficDensity(BaseModel):
    """
    Per-evaluation traffic snapshot

    Computed fresh each cycle from the current detection batch.
    """
    vehicle_count: int = Field(default=0, ge=0)
    density: float = Field(default=0.0, ge=0.0, le=1.0)
    congestion_level: CongestionLevel = CongestionLevel.LOW
    average_speed: float = 50.0                 # km/h, derived estimate
    queue_length: float = Field(default=0.0, ge=0.0)

    class Config:
        json_schema_extra = {
            "example": {
                "vehicle_count": 12,
                "density": 0.31,
                "congestion_level": "medium",
                "average_speed": 38,
                "queue_length": 12
            }
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            'vehicleCount': self.vehicle_count,
            'density': self.density,
            'congestionLevel': self.congestion_level.value,
            'averageSpeed': self.average_speed,
            'queueLength': self.queue_length
        }
