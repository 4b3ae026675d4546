"""
Traffic Perception & Signal Decision Engine

Decodes object-detection model output into vehicle detections and turns
detection batches into adaptive signal timing with emergency preemption.
"""

__version__ = "1.0.0"
