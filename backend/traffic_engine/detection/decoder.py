"""
Detection Decoder

Turns the raw output tensor of a YOLOv8-style detection model into labeled,
scored boxes in source-image pixel coordinates.

Recognized layouts (C = number of vocabulary classes):
- [1, 4 + C, N]  channels-first, one column per candidate
- [1, N, 4 + C]  one row per candidate

Each candidate holds (cx, cy, w, h) at the model's square input resolution
followed by one score per class.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from traffic_engine.config import get_config
from traffic_engine.exceptions import DecodeError
from traffic_engine.models import BoundingBox, Detection
from traffic_engine.detection.vocabulary import COCO_CLASSES, VEHICLE_LABELS, label_for_class
from traffic_engine.detection.suppression import DEFAULT_IOU_THRESHOLD, non_max_suppression

logger = logging.getLogger(__name__)


class DetectionDecoder:
    """
    Decode model output buffers into vehicle detections

    The decoder is a pure function of (buffer, shape, frame dimensions):
    the buffer is never written to and repeated calls give equal results.

    Usage:
        decoder = DetectionDecoder()
        detections = decoder.decode_and_suppress(output, [1, 84, 8400], 1280, 720)
    """

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize decoder with configuration

        Args:
            config: Detection configuration dictionary (defaults to detection config)
        """
        if config is None:
            config = get_config().get_detection_config()

        self.input_size: int = config.get('inputSize', 640)
        self.confidence_threshold: float = config.get('confidenceThreshold', 0.25)
        self.iou_threshold: float = config.get('iouThreshold', DEFAULT_IOU_THRESHOLD)
        self.vocabulary: Tuple[str, ...] = tuple(config.get('classes', COCO_CLASSES))
        self.allowed_labels = frozenset(config.get('allowedLabels', VEHICLE_LABELS))

        # Compatibility shim for 640px YOLOv8 exports whose shape metadata is
        # missing or unrecognized: 8400 anchors x (4 + 80 classes).
        fallback = config.get('fallbackShape', {})
        self.fallback_rows: int = fallback.get('rows', 8400)
        self.fallback_cols: int = fallback.get('cols', 84)

    @property
    def channels(self) -> int:
        """Values per candidate in a recognized layout"""
        return 4 + len(self.vocabulary)

    def decode(
        self,
        buffer: Sequence[float],
        shape: Sequence[int],
        source_width: float,
        source_height: float
    ) -> List[Detection]:
        """
        Decode a raw output buffer into vehicle detections (before NMS)

        Args:
            buffer: Flat model output
            shape: Declared tensor shape of the output
            source_width: Pixel width of the original frame
            source_height: Pixel height of the original frame

        Returns:
            Allow-listed detections in candidate order

        Raises:
            DecodeError: If the buffer or shape holds non-numeric values
        """
        try:
            data = np.asarray(buffer, dtype=np.float64).ravel()
            dims = [int(d) for d in shape]
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Model output is not numeric: {e}") from e

        candidates = self._candidate_matrix(data, dims)

        if candidates.shape[0] == 0 or candidates.shape[1] <= 4:
            return []

        scores = candidates[:, 4:]
        best_class = np.argmax(scores, axis=1)
        best_score = scores[np.arange(scores.shape[0]), best_class]
        keep = np.nonzero(best_score >= self.confidence_threshold)[0]

        w_scale = source_width / self.input_size
        h_scale = source_height / self.input_size

        detections: List[Detection] = []
        for r in keep:
            cx, cy, w, h = candidates[r, :4]
            label = label_for_class(int(best_class[r]), self.vocabulary)
            if label not in self.allowed_labels:
                continue

            x1 = float((cx - w / 2) * w_scale)
            x2 = float((cx + w / 2) * w_scale)
            y1 = float((cy - h / 2) * h_scale)
            y2 = float((cy + h / 2) * h_scale)

            detections.append(Detection(
                label=label,
                score=min(float(best_score[r]), 1.0),
                box=BoundingBox(
                    xmin=min(x1, x2), ymin=min(y1, y2),
                    xmax=max(x1, x2), ymax=max(y1, y2)
                )
            ))

        logger.debug("Decoded %d vehicle candidates from %d rows", len(detections), candidates.shape[0])
        return detections

    def decode_and_suppress(
        self,
        buffer: Sequence[float],
        shape: Sequence[int],
        source_width: float,
        source_height: float
    ) -> List[Detection]:
        """Decode a buffer and remove duplicate boxes"""
        detections = self.decode(buffer, shape, source_width, source_height)
        return non_max_suppression(detections, self.iou_threshold)

    def _candidate_matrix(self, data: np.ndarray, shape: List[int]) -> np.ndarray:
        """
        View the flat buffer as an [N, channels] matrix

        Falls back to reading the last two axes as [N, channels] row-major
        when the shape matches neither recognized layout.
        """
        channels = self.channels

        if len(shape) == 3 and shape[1] == channels:
            rows = shape[2]
            needed = rows * channels
            if data.size < needed:
                # Missing values score NaN, so rows that lose any of them never pass the threshold
                logger.warning(
                    "Buffer holds %d values but shape %s declares %d, padding with NaN",
                    data.size, shape, needed
                )
                data = np.concatenate([data, np.full(needed - data.size, np.nan)])
            return data[:needed].reshape(channels, rows).T

        if len(shape) == 3 and shape[2] == channels:
            return self._row_major(data, shape[1], channels, shape)

        rows = shape[-2] if len(shape) >= 2 and shape[-2] else self.fallback_rows
        cols = shape[-1] if len(shape) >= 1 and shape[-1] else self.fallback_cols
        logger.warning(
            "Unrecognized output shape %s, reading as [%d, %d] row-major", shape, rows, cols
        )
        return self._row_major(data, rows, cols, shape)

    def _row_major(self, data: np.ndarray, rows: int, cols: int, shape: List[int]) -> np.ndarray:
        if cols <= 0 or rows <= 0:
            return np.empty((0, max(cols, 0)))

        available = data.size // cols
        if available < rows:
            logger.warning(
                "Buffer holds %d complete rows but shape %s declares %d, decoding the complete rows only",
                available, shape, rows
            )
            rows = available
        return data[:rows * cols].reshape(rows, cols)
