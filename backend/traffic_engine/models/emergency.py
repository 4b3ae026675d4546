"""
Emergency Vehicle Models

Tracked emergency actors and the alerts derived from them.
"""

from pydantic import BaseModel, Field
from enum import Enum
import time


class EmergencyType(str, Enum):
    """Types of emergency vehicles"""
    AMBULANCE = "ambulance"
    FIRE_TRUCK = "fire_truck"
    POLICE = "police"


class Direction(str, Enum):
    """Approach direction relative to the junction"""
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"


class AlertAction(str, Enum):
    """Signal action requested by an emergency alert"""
    PREEMPT = "preempt"
    CLEAR_PATH = "clear_path"
    EXTEND_GREEN = "extend_green"


class EmergencyVehicle(BaseModel):
    """
    Emergency vehicle held in the monitor's live registry

    priority 1 is the highest. timestamp is the creation or last-seen time.
    """
    id: str
    type: EmergencyType
    confidence: float = Field(ge=0.0, le=1.0)
    direction: Direction
    estimated_arrival: int                  # seconds
    priority: int = Field(ge=1)
    timestamp: float = Field(default_factory=time.time)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "emergency-3f2a9c1d0b4e",
                "type": "ambulance",
                "confidence": 0.8,
                "direction": "east",
                "estimated_arrival": 7,
                "priority": 2,
                "timestamp": 1704067200.0
            }
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            'id': self.id,
            'type': self.type.value,
            'confidence': self.confidence,
            'direction': self.direction.value,
            'estimatedArrival': self.estimated_arrival,
            'priority': self.priority,
            'timestamp': self.timestamp
        }


class EmergencyAlert(BaseModel):
    """Actionable notification for one junction"""
    vehicle_id: str
    junction_id: str
    message: str
    action: AlertAction
    duration: int                           # seconds
    timestamp: float = Field(default_factory=time.time)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            'vehicleId': self.vehicle_id,
            'junctionId': self.junction_id,
            'message': self.message,
            'action': self.action.value,
            'duration': self.duration,
            'timestamp': self.timestamp
        }
