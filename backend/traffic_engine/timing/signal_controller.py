"""
Smart Signal Controller

Maps a traffic density snapshot to green/red/cycle durations for one
junction, with rush-hour and congestion adjustments and emergency
preemption.

Timing steps (in order):
1. Base green: blend of density (80%) and normalized vehicle count (20%)
2. Rush hour multiplier
3. Congestion multiplier (low 0.8, medium 1.0, high 1.4)
4. Clamp to [min_green_time, max_green_time]
5. Red time covers queue clearance at 2 s per vehicle
6. Efficiency and wait-time reduction metrics

Durations stay unrounded until the result is built.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from traffic_engine.config import get_config
from traffic_engine.models import (
    CongestionLevel,
    JunctionConfig,
    SignalTimingResult,
    TrafficDensity,
)
from traffic_engine.utils import round_half_up

logger = logging.getLogger(__name__)

CONGESTION_ADJUSTMENTS = {
    CongestionLevel.LOW: 0.8,
    CongestionLevel.MEDIUM: 1.0,
    CongestionLevel.HIGH: 1.4,
}

DEFAULT_RUSH_HOURS = [(7, 9), (17, 19)]

SECONDS_PER_QUEUED_VEHICLE = 2
TARGET_THROUGHPUT = 30          # vehicles per minute
STANDARD_WAIT_PER_VEHICLE = 3   # seconds

PREEMPT_GREEN_TIME = 120
PREEMPT_RED_TIME = 10
PREEMPT_WAIT_BONUS = 60


class SmartSignalController:
    """
    Compute adaptive signal timing for a junction

    Usage:
        controller = SmartSignalController()
        timing = controller.calculate_optimal_timing(density, is_rush_hour=controller.is_rush_hour())
        if emergency_active:
            timing = controller.preempt_for_emergency(timing)
    """

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize controller with configuration

        Args:
            config: Traffic configuration dictionary (defaults to traffic config)
        """
        if config is None:
            config = get_config().get_traffic_config()

        self.default_config = JunctionConfig.from_dict(config.get('defaultJunction', {}))
        windows = config.get('rushHours', DEFAULT_RUSH_HOURS)
        self.rush_hours: List[Tuple[int, int]] = [(int(start), int(end)) for start, end in windows]

    def calculate_optimal_timing(
        self,
        traffic_density: TrafficDensity,
        config: Optional[JunctionConfig] = None,
        is_rush_hour: bool = False
    ) -> SignalTimingResult:
        """
        Calculate signal timing for the current density

        Args:
            traffic_density: Current density snapshot
            config: Junction tunables (defaults to the configured default junction)
            is_rush_hour: Apply the junction's rush hour multiplier

        Returns:
            SignalTimingResult with green time within [min_green_time, max_green_time]
        """
        config = config or self.default_config

        green_time = self.calculate_base_green_time(
            traffic_density.density, traffic_density.vehicle_count, config
        )
        if is_rush_hour:
            green_time *= config.rush_hour_multiplier

        green_time = self.apply_congestion_adjustment(green_time, traffic_density.congestion_level)
        green_time = max(config.min_green_time, min(green_time, config.max_green_time))

        red_time = self.calculate_red_time(traffic_density.queue_length, config)

        green = round_half_up(green_time)
        red = round_half_up(red_time)

        return SignalTimingResult(
            green_time=green,
            red_time=red,
            cycle_time=green + red,
            efficiency=self.calculate_efficiency(traffic_density, green_time),
            wait_time_reduction=self.calculate_wait_time_reduction(traffic_density, green_time)
        )

    def calculate_base_green_time(self, density: float, vehicle_count: int, config: JunctionConfig) -> float:
        """Linear blend of density and normalized vehicle count over the green range"""
        density_factor = density * 0.8
        vehicle_factor = min(vehicle_count / 20, 1.0) * 0.2
        green_range = config.max_green_time - config.min_green_time
        return config.min_green_time + green_range * (density_factor + vehicle_factor)

    def apply_congestion_adjustment(self, green_time: float, congestion_level: CongestionLevel) -> float:
        return green_time * CONGESTION_ADJUSTMENTS[congestion_level]

    def calculate_red_time(self, queue_length: float, config: JunctionConfig) -> float:
        """Base red time, extended to clear the estimated queue"""
        return max(config.base_red_time, queue_length * SECONDS_PER_QUEUED_VEHICLE)

    def calculate_efficiency(self, traffic_density: TrafficDensity, green_time: float) -> float:
        """Throughput against the target, as a percentage capped at 100"""
        throughput = (traffic_density.vehicle_count * green_time) / 60
        return min((throughput / TARGET_THROUGHPUT) * 100, 100.0)

    def calculate_wait_time_reduction(self, traffic_density: TrafficDensity, green_time: float) -> float:
        queue_length = traffic_density.queue_length
        standard_wait = queue_length * STANDARD_WAIT_PER_VEHICLE
        optimized_wait = max(queue_length * SECONDS_PER_QUEUED_VEHICLE, green_time * 0.3)
        return max(0.0, standard_wait - optimized_wait)

    def preempt_for_emergency(self, current_timing: SignalTimingResult) -> SignalTimingResult:
        """
        Override timing for an approaching emergency vehicle

        Ignores the junction's max green time on purpose.
        """
        logger.info("Emergency preemption applied (green %ss)", PREEMPT_GREEN_TIME)
        return SignalTimingResult(
            green_time=PREEMPT_GREEN_TIME,
            red_time=PREEMPT_RED_TIME,
            cycle_time=PREEMPT_GREEN_TIME + PREEMPT_RED_TIME,
            efficiency=100.0,
            wait_time_reduction=current_timing.wait_time_reduction + PREEMPT_WAIT_BONUS
        )

    def is_rush_hour(self, now: Optional[datetime] = None) -> bool:
        """Rush hours by local wall-clock hour: 7-9 and 17-19 inclusive"""
        hour = (now or datetime.now()).hour
        return any(start <= hour <= end for start, end in self.rush_hours)
