"""
Traffic Density Estimator

Aggregates one batch of detections into a capacity-normalized density,
a congestion level, and speed/queue estimates.

Features:
- Confidence filter with size-based vehicle classification
- Weighted occupancy (a bus counts for 2.5 cars)
- Congestion classification at 0.3 / 0.7
- Linear speed proxy and queue estimate
"""

import logging
import time
from typing import Any, Dict, Iterable, List, Optional, Union

from traffic_engine.config import get_config
from traffic_engine.models import (
    ClassifiedVehicle,
    CongestionLevel,
    RawDetection,
    TrafficDensity,
    VehicleType,
)
from traffic_engine.density.vehicle_classifier import VehicleClassifier, classify_vehicle
from traffic_engine.utils import round_half_up

logger = logging.getLogger(__name__)

DetectionInput = Union[RawDetection, ClassifiedVehicle, Dict[str, Any]]

DEFAULT_VEHICLE_WEIGHTS = {
    VehicleType.CAR: 1.0,
    VehicleType.MOTORCYCLE: 0.5,
    VehicleType.BICYCLE: 0.3,
    VehicleType.TRUCK: 2.0,
    VehicleType.BUS: 2.5,
}


def congestion_level_for(density: float, low: float = 0.3, medium: float = 0.7) -> CongestionLevel:
    """
    Classify density into a congestion bucket

    - LOW: density < 0.3
    - MEDIUM: 0.3 <= density < 0.7
    - HIGH: density >= 0.7
    """
    if density < low:
        return CongestionLevel.LOW
    if density < medium:
        return CongestionLevel.MEDIUM
    return CongestionLevel.HIGH


class TrafficDensityEstimator:
    """
    Estimate traffic density from detection batches

    Stateless: every call works only on the batch it is given.

    Usage:
        estimator = TrafficDensityEstimator()
        vehicles = estimator.filter_detections_by_confidence(raw_records)
        density = estimator.calculate_traffic_density(vehicles)
    """

    def __init__(self, config: Optional[dict] = None, classifier: VehicleClassifier = classify_vehicle):
        """
        Initialize estimator with configuration

        Args:
            config: Traffic configuration dictionary (defaults to traffic config)
            classifier: Vehicle type policy, (width, height) -> VehicleType
        """
        if config is None:
            config = get_config().get_traffic_config()

        density_config = config.get('density', {})
        thresholds = density_config.get('thresholds', {})

        self.road_capacity: float = density_config.get('roadCapacity', 50)
        self.confidence_threshold: float = density_config.get('confidenceThreshold', 0.5)
        self.low_threshold: float = thresholds.get('low', 0.3)
        self.medium_threshold: float = thresholds.get('medium', 0.7)
        self.max_speed: float = density_config.get('maxSpeed', 50)
        self.queue_factor: float = density_config.get('queueFactor', 0.8)

        weights = density_config.get('weights', {})
        self.vehicle_weights = {
            vtype: float(weights.get(vtype.value, default))
            for vtype, default in DEFAULT_VEHICLE_WEIGHTS.items()
        }
        self.classifier = classifier

    def filter_detections_by_confidence(
        self,
        detections: Iterable[DetectionInput],
        now: Optional[float] = None
    ) -> List[ClassifiedVehicle]:
        """
        Drop low-confidence detections and classify the rest

        Order-preserving. Feeding the output back in returns an equal list.

        Args:
            detections: Raw records, dicts, or already-classified vehicles
            now: Timestamp for newly classified vehicles (default: time.time())

        Returns:
            Classified vehicles with confidence >= threshold
        """
        timestamp = time.time() if now is None else now
        vehicles: List[ClassifiedVehicle] = []

        for item in detections:
            if isinstance(item, dict):
                item = RawDetection.model_validate(item)
            if item.confidence is None or item.confidence < self.confidence_threshold:
                continue

            fields = dict(
                vehicle_type=self.classifier(item.width, item.height),
                confidence=item.confidence,
                x=item.x,
                y=item.y,
                width=item.width,
                height=item.height,
                timestamp=item.timestamp if isinstance(item, ClassifiedVehicle) else timestamp
            )
            if item.id:
                fields['id'] = item.id
            vehicles.append(ClassifiedVehicle(**fields))

        return vehicles

    def weighted_count(self, vehicles: Iterable[ClassifiedVehicle]) -> float:
        """Sum of per-type vehicle weights"""
        return sum(self.vehicle_weights[v.vehicle_type] for v in vehicles)

    def calculate_traffic_density(
        self,
        vehicles: List[ClassifiedVehicle],
        road_capacity: Optional[float] = None
    ) -> TrafficDensity:
        """
        Compute the density snapshot for one batch

        Formula: density = min(weighted_count / road_capacity, 1.0)

        Args:
            vehicles: Confidence-filtered, classified vehicles
            road_capacity: Capacity in weighted vehicle units (default 50)

        Returns:
            TrafficDensity for the batch
        """
        capacity = self.road_capacity if road_capacity is None else road_capacity
        weighted = self.weighted_count(vehicles)

        if capacity <= 0:
            density = 0.0
        else:
            density = min(weighted / capacity, 1.0)

        return TrafficDensity(
            vehicle_count=len(vehicles),
            density=density,
            congestion_level=self.get_congestion_level(density),
            average_speed=self.estimate_average_speed(density),
            queue_length=round_half_up(weighted * self.queue_factor)
        )

    def estimate(self, detections: Iterable[DetectionInput], road_capacity: Optional[float] = None) -> TrafficDensity:
        """Filter a raw batch and compute its density in one step"""
        return self.calculate_traffic_density(
            self.filter_detections_by_confidence(detections), road_capacity
        )

    def get_congestion_level(self, density: float) -> CongestionLevel:
        return congestion_level_for(density, self.low_threshold, self.medium_threshold)

    def estimate_average_speed(self, density: float) -> int:
        """Speed proxy in km/h that falls linearly with density"""
        return round_half_up(self.max_speed * (1 - density * 0.8))
