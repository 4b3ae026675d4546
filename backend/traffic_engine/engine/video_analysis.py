"""
Video Analysis

Frame sampling plan and summary statistics for an uploaded clip. Frames
are extracted by the media layer at the planned timestamps; the per-frame
vehicle counts come back here to be summarized.
"""

import math
from typing import Iterable, List, Optional, Tuple, Union

from traffic_engine.models import FrameSample, VideoAnalysisSummary

DEFAULT_FRAME_RATE = 30       # assumed when the container does not report it
DEFAULT_FRAME_INTERVAL = 5    # analyze every 5th frame
DEFAULT_MAX_CAPACITY = 20     # vehicles per frame treated as full


def plan_frame_sampling(
    duration: float,
    frame_rate: float = DEFAULT_FRAME_RATE,
    frame_interval: int = DEFAULT_FRAME_INTERVAL
) -> List[Tuple[int, float]]:
    """
    Timestamps of the frames to analyze

    Args:
        duration: Clip length in seconds
        frame_rate: Frames per second
        frame_interval: Analyze every n-th frame

    Returns:
        (sample index, time in seconds) pairs
    """
    if duration <= 0 or frame_rate <= 0 or frame_interval <= 0:
        return []

    total = math.floor((duration * frame_rate) / frame_interval)
    return [(i, (i * frame_interval) / frame_rate) for i in range(total)]


def summarize_frames(
    samples: Iterable[Union[FrameSample, int]],
    max_capacity: float = DEFAULT_MAX_CAPACITY,
    times: Optional[List[float]] = None
) -> VideoAnalysisSummary:
    """
    Summarize per-frame vehicle counts

    Per-frame density is vehicles / max_capacity, not clamped, so an
    overfull frame shows up as a density above 1.

    Args:
        samples: FrameSample records or bare vehicle counts in frame order
        max_capacity: Vehicles per frame that count as density 1.0
        times: Optional timestamps for bare counts

    Returns:
        VideoAnalysisSummary with averages over all frames
    """
    frames: List[FrameSample] = []
    for i, sample in enumerate(samples):
        if not isinstance(sample, FrameSample):
            sample = FrameSample(
                frame=i,
                vehicles=int(sample),
                time_seconds=times[i] if times and i < len(times) else None
            )
        density = sample.vehicles / max_capacity if max_capacity > 0 else 0.0
        frames.append(sample.model_copy(update={'density': density}))

    if not frames:
        return VideoAnalysisSummary()

    return VideoAnalysisSummary(
        total_frames=len(frames),
        avg_vehicles=sum(f.vehicles for f in frames) / len(frames),
        avg_density=sum(f.density for f in frames) / len(frames),
        frames=frames
    )
