"""
Emergency Vehicle Monitor Tests

Tests emergency heuristics, the time-to-live registry, alert derivation
and the alert window.
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from traffic_engine.emergency import EmergencyClassifier, EmergencyVehicleMonitor
from traffic_engine.models import (
    AlertAction,
    Direction,
    EmergencyType,
    EmergencyVehicle,
    RawDetection,
)


class FakeClock:
    """Manually advanced time source"""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def ambulance(vid='amb-1', **overrides):
    fields = dict(id=vid, x=100, y=50, width=80, height=50, confidence=0.9,
                  color='white', has_flashing_lights=True)
    fields.update(overrides)
    return RawDetection(**fields)


def vehicle(vid, vtype, priority, eta=7, direction=Direction.EAST):
    return EmergencyVehicle(id=vid, type=vtype, confidence=0.9, direction=direction,
                            estimated_arrival=eta, priority=priority, timestamp=0.0)


# ============================================
# Heuristic Tests
# ============================================

class TestEmergencyClassifier:
    """Test emergency qualification, typing and direction"""

    def setup_method(self):
        self.classifier = EmergencyClassifier()

    def test_flashing_lights_qualify(self):
        assert self.classifier.is_emergency_vehicle(RawDetection(has_flashing_lights=True))

    def test_marking_qualifies(self):
        assert self.classifier.is_emergency_vehicle(RawDetection(hasEmergencyMarking=True))

    def test_large_and_fast_qualifies(self):
        assert self.classifier.is_emergency_vehicle(RawDetection(width=240, height=130, speed=35))

    def test_large_but_slow_does_not_qualify(self):
        """Test the size/speed rule needs speed strictly above 30"""
        assert not self.classifier.is_emergency_vehicle(RawDetection(width=240, height=130, speed=30))
        assert not self.classifier.is_emergency_vehicle(RawDetection(width=240, height=130))

    def test_ordinary_car_does_not_qualify(self):
        assert not self.classifier.is_emergency_vehicle(RawDetection(width=80, height=50, speed=12))

    @pytest.mark.parametrize("fields,expected", [
        ({'color': 'red', 'size': 'large'}, EmergencyType.FIRE_TRUCK),
        ({'color': 'white'}, EmergencyType.AMBULANCE),
        ({'has_ambulance_marking': True}, EmergencyType.AMBULANCE),
        ({'color': 'red'}, EmergencyType.POLICE),
        ({}, EmergencyType.POLICE),
    ])
    def test_classify_type(self, fields, expected):
        assert self.classifier.classify_type(RawDetection(**fields)) == expected

    def test_priority_levels(self):
        assert self.classifier.priority_for(EmergencyType.FIRE_TRUCK) == 1
        assert self.classifier.priority_for(EmergencyType.AMBULANCE) == 2
        assert self.classifier.priority_for(EmergencyType.POLICE) == 3

    @pytest.mark.parametrize("x,y,px,py,expected", [
        (100, 50, 50, 50, Direction.EAST),
        (50, 50, 100, 50, Direction.WEST),
        (50, 120, 50, 50, Direction.SOUTH),
        (50, 10, 50, 50, Direction.NORTH),
        (60, 60, 50, 50, Direction.EAST),     # tie goes to the horizontal axis
        (40, 40, 50, 50, Direction.WEST),
    ])
    def test_direction(self, x, y, px, py, expected):
        detection = RawDetection(x=x, y=y, previousX=px, previousY=py)
        assert self.classifier.determine_direction(detection) == expected

    def test_direction_without_previous_position(self):
        """Test a missing previous position is read as the origin"""
        assert self.classifier.determine_direction(RawDetection(x=100, y=50)) == Direction.EAST
        assert self.classifier.determine_direction(RawDetection(x=10, y=300)) == Direction.SOUTH


# ============================================
# Registry Tests
# ============================================

class TestEmergencyRegistry:
    """Test detection, time-to-live and queries"""

    def setup_method(self):
        self.clock = FakeClock()
        self.monitor = EmergencyVehicleMonitor({}, clock=self.clock)

    def test_detect_ambulance(self):
        """Test a white vehicle with flashing lights registers as an ambulance"""
        vehicles = self.monitor.detect_emergency_vehicles([ambulance()])

        assert len(vehicles) == 1
        v = vehicles[0]
        assert v.id == 'amb-1'
        assert v.type == EmergencyType.AMBULANCE
        assert v.priority == 2
        assert v.direction == Direction.EAST
        assert v.estimated_arrival == 7
        assert v.timestamp == self.clock.now

    def test_low_confidence_not_registered(self):
        assert self.monitor.detect_emergency_vehicles([ambulance(confidence=0.69)]) == []
        assert not self.monitor.has_active_emergency_vehicles()

    def test_missing_confidence_defaults(self):
        """Test a record without confidence uses 0.8 and qualifies"""
        vehicles = self.monitor.detect_emergency_vehicles([ambulance(confidence=None)])

        assert vehicles[0].confidence == 0.8

    def test_zero_confidence_defaults(self):
        """Test a confidence of 0 is read as unreported and uses 0.8"""
        vehicles = self.monitor.detect_emergency_vehicles([ambulance(confidence=0)])

        assert len(vehicles) == 1
        assert vehicles[0].confidence == 0.8

    def test_zero_distance_uses_default(self):
        """Test a distance of 0 is read as unreported, giving ETA 7 and a 129 s preemption"""
        record = ambulance(distance_to_intersection=0, speed=15)

        vehicles = self.monitor.detect_emergency_vehicles([record])
        alert = self.monitor.create_emergency_alert(vehicles[0], 'J-1')

        assert vehicles[0].estimated_arrival == 7
        assert alert.duration == 129

    def test_non_emergency_ignored(self):
        car = RawDetection(id='car-1', width=80, height=50, confidence=0.95)
        assert self.monitor.detect_emergency_vehicles([car]) == []

    def test_accepts_camel_case_dicts(self):
        record = {'id': 'fire-1', 'x': 10, 'y': 10, 'width': 300, 'height': 150, 'speed': 40,
                  'confidence': 0.9, 'color': 'red', 'size': 'large', 'distanceToIntersection': 400}

        vehicles = self.monitor.detect_emergency_vehicles([record])

        assert vehicles[0].type == EmergencyType.FIRE_TRUCK
        assert vehicles[0].estimated_arrival == 10

    def test_arrival_time(self):
        assert self.monitor._calculate_arrival_time(RawDetection(distanceToIntersection=200, speed=20)) == 10
        assert self.monitor._calculate_arrival_time(RawDetection()) == 7
        assert self.monitor._calculate_arrival_time(RawDetection(speed=0)) == 7
        assert self.monitor._calculate_arrival_time(RawDetection(distanceToIntersection=0, speed=10)) == 10

    def test_expires_after_ttl(self):
        """Test a vehicle not seen for more than 120 s is dropped"""
        self.monitor.detect_emergency_vehicles([ambulance()])

        self.clock.advance(120)
        assert self.monitor.has_active_emergency_vehicles()

        self.clock.advance(1)
        assert self.monitor.detect_emergency_vehicles([]) == []
        assert not self.monitor.has_active_emergency_vehicles()

    def test_redetection_refreshes_timestamp(self):
        self.monitor.detect_emergency_vehicles([ambulance()])
        self.clock.advance(100)
        self.monitor.detect_emergency_vehicles([ambulance()])
        self.clock.advance(100)

        active = self.monitor.get_active_vehicles()

        assert [v.id for v in active] == ['amb-1']

    def test_generated_ids_are_unique(self):
        record = ambulance(vid=None)

        vehicles = self.monitor.detect_emergency_vehicles([record, record])

        assert len(vehicles) == 2
        assert all(v.id.startswith('emergency-') for v in vehicles)

    def test_highest_priority_vehicle(self):
        """Test fire truck outranks ambulance and police"""
        self.monitor.detect_emergency_vehicles([
            RawDetection(id='pol', has_flashing_lights=True, confidence=0.9),
            ambulance('amb'),
            RawDetection(id='fire', has_flashing_lights=True, confidence=0.9, color='red', size='large'),
        ])

        assert self.monitor.get_highest_priority_vehicle().id == 'fire'

    def test_highest_priority_tie_keeps_first(self):
        self.monitor.detect_emergency_vehicles([ambulance('amb-a'), ambulance('amb-b')])

        assert self.monitor.get_highest_priority_vehicle().id == 'amb-a'

    def test_highest_priority_none_when_empty(self):
        assert self.monitor.get_highest_priority_vehicle() is None


# ============================================
# Alert Tests
# ============================================

class TestEmergencyAlerts:
    """Test alert derivation and the five-minute window"""

    def setup_method(self):
        self.clock = FakeClock()
        self.monitor = EmergencyVehicleMonitor({}, clock=self.clock)

    def test_ambulance_alert(self):
        """Test an ambulance 7 s out gets a preempt alert"""
        alert = self.monitor.create_emergency_alert(
            vehicle('amb-1', EmergencyType.AMBULANCE, 2, eta=7), 'J-1'
        )

        assert alert.vehicle_id == 'amb-1'
        assert alert.junction_id == 'J-1'
        assert alert.message == 'Ambulance approaching from east. ETA: 7s'
        assert alert.action == AlertAction.PREEMPT
        assert alert.duration == 129
        assert alert.timestamp == self.clock.now

    def test_fire_truck_alert(self):
        alert = self.monitor.create_emergency_alert(
            vehicle('fire-1', EmergencyType.FIRE_TRUCK, 1, eta=20, direction=Direction.NORTH), 'J-1'
        )

        assert alert.message == 'Fire Truck approaching from north. ETA: 20s'
        assert alert.action == AlertAction.CLEAR_PATH
        assert alert.duration == 90

    def test_police_alert(self):
        alert = self.monitor.create_emergency_alert(
            vehicle('pol-1', EmergencyType.POLICE, 3, eta=45, direction=Direction.WEST), 'J-1'
        )

        assert alert.message == 'Police Vehicle approaching from west. ETA: 45s'
        assert alert.action == AlertAction.EXTEND_GREEN
        assert alert.duration == 20

    @pytest.mark.parametrize("eta,expected", [
        (0, AlertAction.PREEMPT),
        (10, AlertAction.PREEMPT),
        (11, AlertAction.CLEAR_PATH),
        (30, AlertAction.CLEAR_PATH),
        (31, AlertAction.EXTEND_GREEN),
    ])
    def test_action_thresholds(self, eta, expected):
        assert self.monitor.determine_action(vehicle('v', EmergencyType.POLICE, 3, eta=eta)) == expected

    def test_zero_eta_duration(self):
        """Test an ETA of zero is treated as one second"""
        duration = self.monitor.calculate_preemption_duration(vehicle('v', EmergencyType.FIRE_TRUCK, 1, eta=0))

        assert duration == 1800

    def test_alert_window(self):
        """Test alerts leave the active list after five minutes but stay logged"""
        self.monitor.create_emergency_alert(vehicle('amb-1', EmergencyType.AMBULANCE, 2), 'J-1')

        self.clock.advance(299)
        assert len(self.monitor.get_active_alerts()) == 1

        self.clock.advance(2)
        assert self.monitor.get_active_alerts() == []
        assert len(self.monitor.alerts) == 1

    def test_statistics(self):
        self.monitor.detect_emergency_vehicles([ambulance()])
        self.monitor.create_emergency_alert(self.monitor.get_highest_priority_vehicle(), 'J-1')

        stats = self.monitor.get_statistics()

        assert stats == {'activeVehicles': 1, 'totalAlerts': 1, 'recentAlerts': 1}

    def test_alert_to_dict(self):
        alert = self.monitor.create_emergency_alert(vehicle('amb-1', EmergencyType.AMBULANCE, 2), 'J-1')

        data = alert.to_dict()

        assert data['vehicleId'] == 'amb-1'
        assert data['action'] == 'preempt'

    def test_statistics_skip_expired_vehicles(self):
        """Test statistics do not count vehicles past their time-to-live"""
        self.monitor.detect_emergency_vehicles([ambulance()])
        self.clock.advance(121)

        assert self.monitor.get_statistics()['activeVehicles'] == 0
