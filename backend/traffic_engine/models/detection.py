"""
Detection Models

Geometric detections produced by the decoder and the raw detection records
supplied by external storage.
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional


class BoundingBox(BaseModel):
    """Axis-aligned rectangle in source-image pixel coordinates"""
    xmin: float
    ymin: float
    xmax: float
    ymax: float

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {"xmin": 120.0, "ymin": 80.0, "xmax": 260.0, "ymax": 170.0}
        }

    @model_validator(mode='after')
    def check_corners(self) -> 'BoundingBox':
        if self.xmin > self.xmax or self.ymin > self.ymax:
            raise ValueError("box corners must satisfy xmin <= xmax and ymin <= ymax")
        return self

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def area(self) -> float:
        return self.width * self.height


class Detection(BaseModel):
    """
    A single recognized object in one frame

    Created fresh per inference call by the decoder and never mutated.
    """
    label: str
    score: float = Field(ge=0.0, le=1.0)
    box: BoundingBox

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "label": "car",
                "score": 0.87,
                "box": {"xmin": 120.0, "ymin": 80.0, "xmax": 260.0, "ymax": 170.0}
            }
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for renderers"""
        return {
            'label': self.label,
            'score': self.score,
            'box': self.box.model_dump()
        }


class RawDetection(BaseModel):
    """
    Detection record read from external storage

    Geometry is top-left anchored. Records written by the dashboard use
    camelCase keys, so every optional field also accepts its camelCase alias.
    """
    id: Optional[str] = None
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    class_name: Optional[str] = Field(default=None, alias="className")

    # Motion
    speed: Optional[float] = None                         # m/s as reported upstream
    distance_to_intersection: Optional[float] = Field(default=None, alias="distanceToIntersection")
    previous_x: Optional[float] = Field(default=None, alias="previousX")
    previous_y: Optional[float] = Field(default=None, alias="previousY")

    # Appearance
    color: Optional[str] = None
    size: Optional[str] = None
    has_flashing_lights: bool = Field(default=False, alias="hasFlashingLights")
    has_emergency_marking: bool = Field(default=False, alias="hasEmergencyMarking")
    has_ambulance_marking: bool = Field(default=False, alias="hasAmbulanceMarking")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "x": 310.0,
                "y": 120.0,
                "width": 240.0,
                "height": 130.0,
                "confidence": 0.91,
                "speed": 35.0,
                "hasFlashingLights": True,
                "color": "white"
            }
        }
