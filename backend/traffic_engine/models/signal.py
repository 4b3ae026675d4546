"""
Signal Timing Models

Per-junction tunables and the timing recommendation produced each cycle.
"""

from pydantic import BaseModel, Field, model_validator


class JunctionConfig(BaseModel):
    """
    Static tunables for one intersection

    Owned by the caller; the controller never mutates it.
    """
    id: str = "default"
    max_green_time: float = Field(default=90.0, gt=0)    # seconds
    min_green_time: float = Field(default=15.0, ge=0)    # seconds
    base_red_time: float = Field(default=30.0, ge=0)     # seconds
    rush_hour_multiplier: float = Field(default=1.3, gt=0)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "J-1",
                "max_green_time": 90,
                "min_green_time": 15,
                "base_red_time": 30,
                "rush_hour_multiplier": 1.3
            }
        }

    @model_validator(mode='after')
    def check_green_bounds(self) -> 'JunctionConfig':
        if self.min_green_time > self.max_green_time:
            raise ValueError("min_green_time must not exceed max_green_time")
        return self

    @classmethod
    def from_dict(cls, data: dict) -> 'JunctionConfig':
        """Build from a camelCase config section (traffic.yaml defaultJunction)"""
        defaults = cls()
        return cls(
            id=data.get('id', defaults.id),
            max_green_time=data.get('maxGreenTime', defaults.max_green_time),
            min_green_time=data.get('minGreenTime', defaults.min_green_time),
            base_red_time=data.get('baseRedTime', defaults.base_red_time),
            rush_hour_multiplier=data.get('rushHourMultiplier', defaults.rush_hour_multiplier)
        )


class SignalTimingResult(BaseModel):
    """Timing recommendation for one junction"""
    green_time: int                         # seconds
    red_time: int                           # seconds
    cycle_time: int                         # green_time + red_time
    efficiency: float = Field(ge=0.0, le=100.0)   # percent
    wait_time_reduction: float = Field(ge=0.0)    # seconds

    class Config:
        json_schema_extra = {
            "example": {
                "green_time": 45,
                "red_time": 30,
                "cycle_time": 75,
                "efficiency": 75.0,
                "wait_time_reduction": 4.0
            }
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            'greenTime': self.green_time,
            'redTime': self.red_time,
            'cycleTime': self.cycle_time,
            'efficiency': self.efficiency,
            'waitTimeReduction': self.wait_time_reduction
        }
