"""
Traffic Engine

Runs the perception and decision components for one junction per refresh
cycle, the way the dashboard's real-time feed consumes them:

    raw detections -> confidence filter -> density
                   -> emergency registry -> timing (+ preemption)

Per-frame decoding is exposed separately through process_frame().
"""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from traffic_engine.config import ConfigManager, get_config
from traffic_engine.detection import DetectionDecoder
from traffic_engine.density import TrafficDensityEstimator
from traffic_engine.emergency import EmergencyVehicleMonitor
from traffic_engine.timing import SmartSignalController
from traffic_engine.models import (
    CycleResult,
    Detection,
    JunctionConfig,
    RawDetection,
)

logger = logging.getLogger(__name__)


def detections_to_raw(detections: Iterable[Detection]) -> List[RawDetection]:
    """Convert decoded boxes into top-left anchored raw records"""
    return [
        RawDetection(
            x=d.box.xmin,
            y=d.box.ymin,
            width=d.box.width,
            height=d.box.height,
            confidence=d.score,
            class_name=d.label
        )
        for d in detections
    ]


class TrafficEngine:
    """
    Owner of the engine components and the per-junction emergency registries

    Evaluations are serialized with a lock, so one engine can be shared
    across request threads.

    Usage:
        engine = TrafficEngine()
        result = engine.evaluate_cycle(raw_records, junction_id="J-1")
        stats = result.junction_stats()
    """

    def __init__(self, config: Optional[ConfigManager] = None, clock: Callable[[], float] = time.time):
        """
        Initialize the engine

        Args:
            config: Configuration manager (defaults to the global instance)
            clock: Time source in POSIX seconds, shared with the emergency monitors
        """
        cfg = config or get_config()
        self.clock = clock

        self.decoder = DetectionDecoder(cfg.get_detection_config())
        self.estimator = TrafficDensityEstimator(cfg.get_traffic_config())
        self.controller = SmartSignalController(cfg.get_traffic_config())
        self.emergency_config = cfg.get_emergency_config()

        # One emergency registry per junction, created on first evaluation
        self.monitors: Dict[str, EmergencyVehicleMonitor] = {}

        self._lock = threading.Lock()
        self.total_cycles = 0
        self.total_frames = 0
        self.total_preemptions = 0

        logger.info("Traffic engine initialized")

    def process_frame(
        self,
        buffer: Sequence[float],
        shape: Sequence[int],
        source_width: float,
        source_height: float
    ) -> List[Detection]:
        """Decode one model output and suppress duplicate boxes"""
        detections = self.decoder.decode_and_suppress(buffer, shape, source_width, source_height)
        with self._lock:
            self.total_frames += 1
        logger.debug("Frame detection: %d vehicles detected", len(detections))
        return detections

    def evaluate_cycle(
        self,
        raw_detections: Iterable[Union[RawDetection, dict]],
        junction_id: str = "main",
        config: Optional[JunctionConfig] = None,
        is_rush_hour: Optional[bool] = None,
        road_capacity: Optional[float] = None,
        now: Optional[datetime] = None
    ) -> CycleResult:
        """
        Evaluate one refresh cycle for a junction

        Args:
            raw_detections: Current detection batch from external storage
            junction_id: Junction the batch belongs to
            config: Junction tunables (defaults to the configured default junction)
            is_rush_hour: Override the wall-clock rush hour check
            road_capacity: Override the configured road capacity
            now: Wall-clock time for the rush hour check

        Returns:
            CycleResult with density, timing, emergency vehicles and alerts
        """
        raws = [
            RawDetection.model_validate(item) if isinstance(item, dict) else item
            for item in raw_detections
        ]

        with self._lock:
            timestamp = self.clock()

            vehicles = self.estimator.filter_detections_by_confidence(raws, now=timestamp)
            density = self.estimator.calculate_traffic_density(vehicles, road_capacity)

            monitor = self._monitor_for(junction_id)
            emergency_vehicles = monitor.detect_emergency_vehicles(raws)

            rush_hour = self.controller.is_rush_hour(now) if is_rush_hour is None else is_rush_hour
            timing = self.controller.calculate_optimal_timing(density, config, rush_hour)

            preempted = False
            if monitor.has_active_emergency_vehicles():
                timing = self.controller.preempt_for_emergency(timing)
                preempted = True
                self.total_preemptions += 1
                self._alert_for_leader(monitor, junction_id)

            self.total_cycles += 1

            result = CycleResult(
                junction_id=junction_id,
                detections=vehicles,
                traffic_density=density,
                signal_timing=timing,
                emergency_vehicles=emergency_vehicles,
                emergency_alerts=monitor.get_active_alerts(),
                preempted=preempted,
                rush_hour=rush_hour,
                timestamp=timestamp
            )

        logger.debug(
            "Cycle %s: %d vehicles, density %.2f, green %ss%s",
            junction_id, density.vehicle_count, density.density,
            timing.green_time, " (preempted)" if preempted else ""
        )
        return result

    def _alert_for_leader(self, monitor: EmergencyVehicleMonitor, junction_id: str):
        """Alert the junction about the top-priority vehicle once per alert window"""
        leader = monitor.get_highest_priority_vehicle()
        if leader is None:
            return
        already_alerted = any(
            alert.vehicle_id == leader.id and alert.junction_id == junction_id
            for alert in monitor.get_active_alerts()
        )
        if not already_alerted:
            monitor.create_emergency_alert(leader, junction_id)

    def _monitor_for(self, junction_id: str) -> EmergencyVehicleMonitor:
        # Caller holds the lock
        monitor = self.monitors.get(junction_id)
        if monitor is None:
            monitor = EmergencyVehicleMonitor(self.emergency_config, clock=self.clock)
            self.monitors[junction_id] = monitor
        return monitor

    def get_monitor(self, junction_id: str = "main") -> EmergencyVehicleMonitor:
        """Emergency registry of one junction (created empty if never evaluated)"""
        with self._lock:
            return self._monitor_for(junction_id)

    def get_statistics(self) -> dict:
        """Get engine statistics"""
        with self._lock:
            return {
                'totalCycles': self.total_cycles,
                'totalFrames': self.total_frames,
                'totalPreemptions': self.total_preemptions,
                'emergency': {
                    junction_id: monitor.get_statistics()
                    for junction_id, monitor in self.monitors.items()
                }
            }


# Global engine instance
_engine: Optional[TrafficEngine] = None


def get_engine() -> Optional[TrafficEngine]:
    """Get global engine instance"""
    return _engine


def init_engine(config: Optional[ConfigManager] = None, clock: Callable[[], float] = time.time) -> TrafficEngine:
    """Initialize global engine instance"""
    global _engine
    _engine = TrafficEngine(config=config, clock=clock)
    return _engine
