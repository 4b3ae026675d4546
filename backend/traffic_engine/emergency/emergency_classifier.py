"""
Emergency Vehicle Heuristics

Replaceable policy for deciding whether a raw detection is an emergency
vehicle, what kind it is, and where it is heading. The monitor only talks
to the EmergencyClassifier interface, so a trained classifier can replace
these rules without touching timing or alert logic.
"""

from traffic_engine.models import Direction, EmergencyType, RawDetection

PRIORITY_LEVELS = {
    EmergencyType.FIRE_TRUCK: 1,    # Highest priority
    EmergencyType.AMBULANCE: 2,
    EmergencyType.POLICE: 3,
}


class EmergencyClassifier:
    """
    Color/size/flag heuristics for emergency vehicles

    A detection qualifies if it reports flashing lights, an emergency
    marking, or is large (width > 200, height > 100) and fast (speed > 30).
    """

    def __init__(self, min_width: float = 200, min_height: float = 100, min_speed: float = 30):
        self.min_width = min_width
        self.min_height = min_height
        self.min_speed = min_speed

    def is_emergency_vehicle(self, detection: RawDetection) -> bool:
        has_proper_size = detection.width > self.min_width and detection.height > self.min_height
        is_fast = detection.speed is not None and detection.speed > self.min_speed
        return (
            detection.has_flashing_lights
            or detection.has_emergency_marking
            or (has_proper_size and is_fast)
        )

    def classify_type(self, detection: RawDetection) -> EmergencyType:
        if detection.color == 'red' and detection.size == 'large':
            return EmergencyType.FIRE_TRUCK
        if detection.has_ambulance_marking or detection.color == 'white':
            return EmergencyType.AMBULANCE
        return EmergencyType.POLICE

    def priority_for(self, vehicle_type: EmergencyType) -> int:
        return PRIORITY_LEVELS[vehicle_type]

    def determine_direction(self, detection: RawDetection) -> Direction:
        """
        Heading from displacement since the previous position

        A missing previous position is taken as (0, 0), which biases the
        result toward east/south. Upstream detectors rarely fill these fields.
        """
        previous_x = detection.previous_x if detection.previous_x is not None else 0.0
        previous_y = detection.previous_y if detection.previous_y is not None else 0.0
        delta_x = detection.x - previous_x
        delta_y = detection.y - previous_y

        if abs(delta_x) >= abs(delta_y):
            return Direction.EAST if delta_x > 0 else Direction.WEST
        return Direction.SOUTH if delta_y > 0 else Direction.NORTH
