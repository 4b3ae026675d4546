"""
Density Module

Traffic density estimation for a single junction approach.

Usage:
    from traffic_engine.density import TrafficDensityEstimator

    estimator = TrafficDensityEstimator()
    density = estimator.estimate(raw_records)
"""

from traffic_engine.density.vehicle_classifier import (
    VehicleClassifier,
    classify_vehicle
)
from traffic_engine.density.density_estimator import (
    DEFAULT_VEHICLE_WEIGHTS,
    TrafficDensityEstimator,
    congestion_level_for
)


__all__ = [
    'VehicleClassifier',
    'classify_vehicle',
    'DEFAULT_VEHICLE_WEIGHTS',
    'TrafficDensityEstimator',
    'congestion_level_for',
]
