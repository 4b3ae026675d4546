"""
Model Validation Tests

Tests pydantic models of detections, density, timing and emergencies.
"""

import pytest
import sys
import os

from pydantic import ValidationError

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from traffic_engine.models import (
    BoundingBox,
    ClassifiedVehicle,
    Detection,
    Direction,
    EmergencyType,
    EmergencyVehicle,
    RawDetection,
    SignalTimingResult,
    TrafficDensity,
    VehicleType,
)
from traffic_engine.utils import round_half_up


# ============================================
# Detection Models
# ============================================

class TestDetectionModels:
    """Test boxes, detections and raw records"""

    def test_box_geometry(self):
        box = BoundingBox(xmin=10, ymin=20, xmax=50, ymax=80)

        assert box.width == 40
        assert box.height == 60
        assert box.area == 2400

    def test_box_rejects_inverted_corners(self):
        with pytest.raises(ValidationError):
            BoundingBox(xmin=50, ymin=0, xmax=10, ymax=10)

    def test_detection_score_range(self):
        box = BoundingBox(xmin=0, ymin=0, xmax=1, ymax=1)

        with pytest.raises(ValidationError):
            Detection(label='car', score=1.2, box=box)

    def test_detection_is_frozen(self):
        d = Detection(label='car', score=0.5, box=BoundingBox(xmin=0, ymin=0, xmax=1, ymax=1))

        with pytest.raises(ValidationError):
            d.score = 0.9

    def test_detection_to_dict(self):
        d = Detection(label='car', score=0.5, box=BoundingBox(xmin=0, ymin=0, xmax=1, ymax=1))

        assert d.to_dict() == {
            'label': 'car', 'score': 0.5,
            'box': {'xmin': 0.0, 'ymin': 0.0, 'xmax': 1.0, 'ymax': 1.0}
        }

    def test_raw_detection_aliases(self):
        """Test camelCase storage keys and snake_case names both populate fields"""
        by_alias = RawDetection.model_validate({
            'className': 'car', 'distanceToIntersection': 50,
            'previousX': 1, 'previousY': 2, 'hasAmbulanceMarking': True
        })
        by_name = RawDetection(class_name='car', distance_to_intersection=50,
                               previous_x=1, previous_y=2, has_ambulance_marking=True)

        assert by_alias == by_name

    @pytest.mark.parametrize("confidence", [-0.1, 1.2])
    def test_raw_detection_confidence_range(self, confidence):
        """Test out-of-range confidence is rejected when the record is read"""
        with pytest.raises(ValidationError):
            RawDetection(confidence=confidence, has_flashing_lights=True)

    def test_raw_detection_defaults(self):
        raw = RawDetection()

        assert raw.confidence is None
        assert raw.has_flashing_lights is False


# ============================================
# Traffic Models
# ============================================

class TestTrafficModels:
    """Test classified vehicles and density snapshots"""

    def test_vehicle_id_generated(self):
        v = ClassifiedVehicle(vehicle_type=VehicleType.CAR, confidence=0.9, x=0, y=0, width=1, height=1)

        assert v.id.startswith('veh-')
        assert v.to_dict()['vehicleType'] == 'car'

    def test_density_range(self):
        with pytest.raises(ValidationError):
            TrafficDensity(density=1.5)

    def test_timing_efficiency_range(self):
        with pytest.raises(ValidationError):
            SignalTimingResult(green_time=10, red_time=10, cycle_time=20, efficiency=120, wait_time_reduction=0)

    def test_emergency_priority_minimum(self):
        with pytest.raises(ValidationError):
            EmergencyVehicle(id='x', type=EmergencyType.POLICE, confidence=0.9,
                             direction=Direction.EAST, estimated_arrival=5, priority=0)


# ============================================
# Rounding
# ============================================

class TestRounding:
    """Test half-up rounding used for durations"""

    @pytest.mark.parametrize("value,expected", [
        (0.5, 1),
        (1.5, 2),
        (2.5, 3),
        (2.49, 2),
        (-0.5, 0),
        (128.571, 129),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected
