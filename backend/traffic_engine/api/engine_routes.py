"""
Engine API Routes

REST endpoints exposing the perception and signal decision engine.

Endpoints:
- POST /api/engine/frame - Decode one model output buffer
- POST /api/engine/evaluate - Run one refresh cycle for a junction
- GET /api/engine/emergency/vehicles?junctionId= - Active emergency vehicles of a junction
- GET /api/engine/emergency/alerts?junctionId= - Alerts from the last 5 minutes
- GET /api/engine/emergency/highest-priority?junctionId= - Top-priority active vehicle
- POST /api/engine/video/summary - Frame sampling plan and summary
- GET /api/engine/statistics - Engine counters
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, ValidationError
from typing import List, Optional

from traffic_engine.engine import (
    TrafficEngine,
    get_engine,
    init_engine,
    plan_frame_sampling,
    summarize_frames
)
from traffic_engine.engine.video_analysis import (
    DEFAULT_FRAME_INTERVAL,
    DEFAULT_FRAME_RATE,
    DEFAULT_MAX_CAPACITY,
)
from traffic_engine.exceptions import EngineError
from traffic_engine.models import JunctionConfig, RawDetection

router = APIRouter(prefix="/api/engine", tags=["engine"])


# ============================================
# Request Models
# ============================================

class FrameRequest(BaseModel):
    """Raw model output for one video frame"""
    data: List[float] = Field(..., description="Flat model output buffer")
    shape: List[int] = Field(..., description="Declared output tensor shape, e.g. [1, 84, 8400]")
    sourceWidth: float = Field(..., gt=0, description="Source frame width in pixels")
    sourceHeight: float = Field(..., gt=0, description="Source frame height in pixels")


class JunctionConfigBody(BaseModel):
    """Junction tunables in dashboard naming"""
    id: str = "default"
    maxGreenTime: float = 90
    minGreenTime: float = 15
    baseRedTime: float = 30
    rushHourMultiplier: float = 1.3


class EvaluateRequest(BaseModel):
    """Detection batch for one refresh cycle"""
    junctionId: str = "main"
    detections: List[RawDetection] = Field(default_factory=list)
    config: Optional[JunctionConfigBody] = None
    rushHour: Optional[bool] = Field(
        default=None,
        description="Force rush hour on/off (defaults to wall-clock check)"
    )
    roadCapacity: Optional[float] = Field(default=None, gt=0)


class VideoSummaryRequest(BaseModel):
    """Per-frame vehicle counts of a sampled clip"""
    duration: float = Field(..., ge=0)
    frameRate: float = Field(default=DEFAULT_FRAME_RATE, gt=0)
    frameInterval: int = Field(default=DEFAULT_FRAME_INTERVAL, gt=0)
    maxCapacity: float = Field(default=DEFAULT_MAX_CAPACITY, gt=0)
    vehicleCounts: List[int] = Field(default_factory=list)


def get_traffic_engine() -> TrafficEngine:
    """Dependency to get the traffic engine"""
    engine = get_engine()
    if engine is None:
        engine = init_engine()
    return engine


# ============================================
# Endpoints
# ============================================

@router.post("/frame")
async def decode_frame(request: FrameRequest, engine: TrafficEngine = Depends(get_traffic_engine)):
    """
    Decode one frame's model output

    Returns vehicle detections after duplicate suppression.
    """
    try:
        detections = engine.process_frame(
            request.data, request.shape, request.sourceWidth, request.sourceHeight
        )
    except EngineError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        'count': len(detections),
        'detections': [d.to_dict() for d in detections]
    }


@router.post("/evaluate")
async def evaluate_cycle(request: EvaluateRequest, engine: TrafficEngine = Depends(get_traffic_engine)):
    """
    Run one refresh cycle for a junction

    Returns density, signal timing (preempted if an emergency vehicle is
    active), emergency vehicles, recent alerts and the junction stats record.
    """
    config = None
    if request.config:
        try:
            config = JunctionConfig.from_dict(request.config.model_dump())
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))

    result = engine.evaluate_cycle(
        request.detections,
        junction_id=request.junctionId,
        config=config,
        is_rush_hour=request.rushHour,
        road_capacity=request.roadCapacity
    )

    response = result.to_dict()
    response['junctionStats'] = result.junction_stats().to_dict()
    return response


@router.get("/emergency/vehicles")
async def get_emergency_vehicles(junctionId: str = "main", engine: TrafficEngine = Depends(get_traffic_engine)):
    """Get active emergency vehicles"""
    return [v.to_dict() for v in engine.get_monitor(junctionId).get_active_vehicles()]


@router.get("/emergency/alerts")
async def get_emergency_alerts(junctionId: str = "main", engine: TrafficEngine = Depends(get_traffic_engine)):
    """Get alerts from the last 5 minutes"""
    return [a.to_dict() for a in engine.get_monitor(junctionId).get_active_alerts()]


@router.get("/emergency/highest-priority")
async def get_highest_priority_vehicle(junctionId: str = "main", engine: TrafficEngine = Depends(get_traffic_engine)):
    """Get the active emergency vehicle with the highest priority"""
    vehicle = engine.get_monitor(junctionId).get_highest_priority_vehicle()
    if vehicle is None:
        raise HTTPException(status_code=404, detail="No active emergency vehicles")
    return vehicle.to_dict()


@router.post("/video/summary")
async def summarize_video(request: VideoSummaryRequest):
    """
    Plan frame sampling for a clip and summarize its vehicle counts

    Counts beyond the planned frame count are ignored.
    """
    plan = plan_frame_sampling(request.duration, request.frameRate, request.frameInterval)
    counts = request.vehicleCounts[:len(plan)]
    summary = summarize_frames(
        counts,
        max_capacity=request.maxCapacity,
        times=[t for _, t in plan]
    )

    response = summary.to_dict()
    response['plannedFrames'] = len(plan)
    response['sampleTimes'] = [t for _, t in plan]
    return response


@router.get("/statistics")
async def get_statistics(engine: TrafficEngine = Depends(get_traffic_engine)):
    """Get engine statistics"""
    return engine.get_statistics()
