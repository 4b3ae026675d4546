"""
Emergency Vehicle Monitor

Detects emergency vehicles in raw detection batches, keeps them in a live
registry with a time-to-live, and derives junction alerts.

Vehicle lifecycle:
    detected (heuristic + confidence >= 0.7)
      -> active (held in registry, refreshed on re-detection)
      -> expired (no re-detection for 120 s)

The registry and the alert log are the engine's only mutable state. Calls
must be serialized by the owner (see TrafficEngine); the monitor itself does
no locking.
"""

import logging
import time
import uuid
from typing import Callable, Dict, Iterable, List, Optional, Union

from traffic_engine.config import get_config
from traffic_engine.models import (
    AlertAction,
    EmergencyAlert,
    EmergencyType,
    EmergencyVehicle,
    RawDetection,
)
from traffic_engine.emergency.emergency_classifier import EmergencyClassifier
from traffic_engine.utils import round_half_up

logger = logging.getLogger(__name__)

TYPE_NAMES = {
    EmergencyType.AMBULANCE: 'Ambulance',
    EmergencyType.FIRE_TRUCK: 'Fire Truck',
    EmergencyType.POLICE: 'Police Vehicle',
}


class EmergencyVehicleMonitor:
    """
    Track emergency vehicles and manage alerts

    Responsibilities:
    - Detect and register emergency vehicles
    - Expire vehicles that are no longer re-detected
    - Derive alerts for junctions and keep an append-only alert log

    Usage:
        monitor = EmergencyVehicleMonitor()
        vehicles = monitor.detect_emergency_vehicles(raw_records)
        if monitor.has_active_emergency_vehicles():
            alert = monitor.create_emergency_alert(
                monitor.get_highest_priority_vehicle(), "J-1"
            )
    """

    def __init__(
        self,
        config: Optional[dict] = None,
        classifier: Optional[EmergencyClassifier] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize emergency monitor

        Args:
            config: Emergency configuration dictionary (defaults to emergency config)
            classifier: Emergency heuristics policy
            clock: Time source in POSIX seconds
        """
        if config is None:
            config = get_config().get_emergency_config()

        self.confidence_threshold: float = config.get('confidenceThreshold', 0.7)
        self.default_confidence: float = config.get('defaultConfidence', 0.8)
        self.vehicle_ttl: float = config.get('vehicleTtl', 120)
        self.alert_window: float = config.get('alertWindow', 300)
        self.default_distance: float = config.get('defaultDistance', 100)   # meters
        self.default_speed: float = config.get('defaultSpeed', 15)          # m/s
        self.base_alert_duration: float = config.get('baseAlertDuration', 60)

        self.classifier = classifier or EmergencyClassifier()
        self.clock = clock

        # Live registry keyed by vehicle id, in insertion order
        self.active_vehicles: Dict[str, EmergencyVehicle] = {}

        # Append-only alert log
        self.alerts: List[EmergencyAlert] = []

        logger.info("Emergency vehicle monitor initialized")

    def detect_emergency_vehicles(
        self,
        detections: Iterable[Union[RawDetection, dict]]
    ) -> List[EmergencyVehicle]:
        """
        Register emergency vehicles found in a raw detection batch

        Args:
            detections: Raw detection records

        Returns:
            All active vehicles after registering this batch and expiring old ones
        """
        now = self.clock()

        for item in detections:
            detection = RawDetection.model_validate(item) if isinstance(item, dict) else item
            if not self.classifier.is_emergency_vehicle(detection):
                continue

            vehicle = self._create_vehicle(detection, now)
            if vehicle.confidence < self.confidence_threshold:
                continue

            if vehicle.id not in self.active_vehicles:
                logger.info(
                    "Emergency vehicle registered: %s (%s, ETA %ss)",
                    vehicle.id, vehicle.type.value, vehicle.estimated_arrival
                )
            self.active_vehicles[vehicle.id] = vehicle

        self._cleanup_old_detections(now)
        return list(self.active_vehicles.values())

    def _create_vehicle(self, detection: RawDetection, now: float) -> EmergencyVehicle:
        vehicle_type = self.classifier.classify_type(detection)
        # A zero confidence means the detector did not report one
        confidence = detection.confidence or self.default_confidence

        return EmergencyVehicle(
            id=detection.id or f"emergency-{uuid.uuid4().hex[:12]}",
            type=vehicle_type,
            confidence=confidence,
            direction=self.classifier.determine_direction(detection),
            estimated_arrival=self._calculate_arrival_time(detection),
            priority=self.classifier.priority_for(vehicle_type),
            timestamp=now
        )

    def _calculate_arrival_time(self, detection: RawDetection) -> int:
        """Seconds to the intersection. Zero or missing inputs use 100 m and 15 m/s."""
        distance = detection.distance_to_intersection or self.default_distance
        speed = detection.speed
        if speed is None or speed <= 0:
            speed = self.default_speed
        return round_half_up(distance / speed)

    def _cleanup_old_detections(self, now: Optional[float] = None):
        """Drop vehicles not seen within the time-to-live"""
        now = self.clock() if now is None else now
        expired = [
            vehicle_id for vehicle_id, vehicle in self.active_vehicles.items()
            if now - vehicle.timestamp > self.vehicle_ttl
        ]
        for vehicle_id in expired:
            del self.active_vehicles[vehicle_id]
            logger.info("Emergency vehicle expired: %s", vehicle_id)

    def create_emergency_alert(self, vehicle: EmergencyVehicle, junction_id: str) -> EmergencyAlert:
        """
        Derive an alert for a junction and append it to the log

        Args:
            vehicle: Tracked emergency vehicle
            junction_id: Junction that should react

        Returns:
            The logged EmergencyAlert
        """
        alert = EmergencyAlert(
            vehicle_id=vehicle.id,
            junction_id=junction_id,
            message=self.generate_alert_message(vehicle),
            action=self.determine_action(vehicle),
            duration=self.calculate_preemption_duration(vehicle),
            timestamp=self.clock()
        )

        self.alerts.append(alert)
        logger.info("Emergency alert for %s: %s (%s)", junction_id, alert.message, alert.action.value)
        return alert

    def generate_alert_message(self, vehicle: EmergencyVehicle) -> str:
        return (
            f"{TYPE_NAMES[vehicle.type]} approaching from {vehicle.direction.value}. "
            f"ETA: {vehicle.estimated_arrival}s"
        )

    def determine_action(self, vehicle: EmergencyVehicle) -> AlertAction:
        if vehicle.estimated_arrival <= 10:
            return AlertAction.PREEMPT
        if vehicle.estimated_arrival <= 30:
            return AlertAction.CLEAR_PATH
        return AlertAction.EXTEND_GREEN

    def calculate_preemption_duration(self, vehicle: EmergencyVehicle) -> int:
        """
        Preemption length in seconds

        Formula: 60 x (1 / priority) x max(1, 30 / ETA). An ETA below one
        second counts as one second.
        """
        priority_multiplier = 1 / vehicle.priority
        urgency_multiplier = max(1.0, 30 / max(vehicle.estimated_arrival, 1))
        return round_half_up(self.base_alert_duration * priority_multiplier * urgency_multiplier)

    def get_active_alerts(self) -> List[EmergencyAlert]:
        """Alerts from the last five minutes. The log itself is never trimmed."""
        cutoff = self.clock() - self.alert_window
        return [alert for alert in self.alerts if alert.timestamp > cutoff]

    def get_active_vehicles(self) -> List[EmergencyVehicle]:
        self._cleanup_old_detections()
        return list(self.active_vehicles.values())

    def has_active_emergency_vehicles(self) -> bool:
        self._cleanup_old_detections()
        return len(self.active_vehicles) > 0

    def get_highest_priority_vehicle(self) -> Optional[EmergencyVehicle]:
        """Active vehicle with the lowest priority number, first in registry order on ties"""
        self._cleanup_old_detections()
        if not self.active_vehicles:
            return None
        return min(self.active_vehicles.values(), key=lambda v: v.priority)

    def get_statistics(self) -> dict:
        """Get emergency monitor statistics"""
        self._cleanup_old_detections()
        return {
            'activeVehicles': len(self.active_vehicles),
            'totalAlerts': len(self.alerts),
            'recentAlerts': len(self.get_active_alerts())
        }
