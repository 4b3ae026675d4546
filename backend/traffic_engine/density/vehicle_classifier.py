"""
Vehicle Classifier

Size-based vehicle type heuristic. Geometry from external storage carries no
trusted label, so the type is inferred from box area and aspect ratio.

Any callable with the signature ``(width, height) -> VehicleType`` can stand
in for ``classify_vehicle`` in the density estimator.
"""

from typing import Callable

from traffic_engine.models import VehicleType

VehicleClassifier = Callable[[float, float], VehicleType]

BUS_MIN_AREA = 15000
TRUCK_MIN_AREA = 10000
MOTORCYCLE_MAX_ASPECT = 0.8
BICYCLE_MAX_AREA = 3000


def classify_vehicle(width: float, height: float) -> VehicleType:
    """
    Classify a vehicle from its box size

    Rules, first match wins:
    - area > 15000 -> bus
    - area > 10000 -> truck
    - width / height < 0.8 -> motorcycle
    - area < 3000 -> bicycle
    - otherwise car
    """
    area = width * height
    aspect_ratio = width / height if height else float('inf')

    if area > BUS_MIN_AREA:
        return VehicleType.BUS
    if area > TRUCK_MIN_AREA:
        return VehicleType.TRUCK
    if aspect_ratio < MOTORCYCLE_MAX_ASPECT:
        return VehicleType.MOTORCYCLE
    if area < BICYCLE_MAX_AREA:
        return VehicleType.BICYCLE
    return VehicleType.CAR
