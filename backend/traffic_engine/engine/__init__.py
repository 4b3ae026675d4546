"""
Engine Module

Cycle orchestration across the perception and decision components, plus
video frame sampling helpers.
"""

from traffic_engine.engine.cycle_runner import (
    TrafficEngine,
    detections_to_raw,
    get_engine,
    init_engine
)
from traffic_engine.engine.video_analysis import (
    plan_frame_sampling,
    summarize_frames
)


__all__ = [
    'TrafficEngine',
    'detections_to_raw',
    'get_engine',
    'init_engine',
    'plan_frame_sampling',
    'summarize_frames',
]
