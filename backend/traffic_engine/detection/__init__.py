"""
Detection Module

Decoding of raw object-detection model output and duplicate suppression.

Usage:
    from traffic_engine.detection import DetectionDecoder

    decoder = DetectionDecoder()
    detections = decoder.decode_and_suppress(output, [1, 84, 8400], 1280, 720)
"""

from traffic_engine.detection.vocabulary import (
    COCO_CLASSES,
    VEHICLE_LABELS,
    label_for_class
)
from traffic_engine.detection.suppression import (
    DEFAULT_IOU_THRESHOLD,
    iou,
    non_max_suppression
)
from traffic_engine.detection.decoder import DetectionDecoder


__all__ = [
    'COCO_CLASSES',
    'VEHICLE_LABELS',
    'DEFAULT_IOU_THRESHOLD',
    'label_for_class',
    'iou',
    'non_max_suppression',
    'DetectionDecoder',
]
