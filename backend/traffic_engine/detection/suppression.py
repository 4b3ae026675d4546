"""
Box Suppressor

Greedy non-maximum suppression over decoded detections. Candidates are
walked in descending score order (stable, so equal scores keep their input
order) and kept only if they do not overlap any already-kept box by more
than the IoU threshold.
"""

from typing import List, Sequence

import numpy as np

from traffic_engine.models import BoundingBox, Detection

DEFAULT_IOU_THRESHOLD = 0.45


def iou(a: BoundingBox, b: BoundingBox) -> float:
    """
    Intersection-over-union of two rectangles

    Returns 0.0 when the union area is not positive.
    """
    x1 = max(a.xmin, b.xmin)
    y1 = max(a.ymin, b.ymin)
    x2 = min(a.xmax, b.xmax)
    y2 = min(a.ymax, b.ymax)
    inter = max(0.0, x2 - x1) * max(0.0, y2 - y1)
    union = a.area + b.area - inter
    if union <= 0:
        return 0.0
    return inter / union


def _iou_against(box: np.ndarray, kept: np.ndarray) -> np.ndarray:
    """IoU of one [4] box against an [K, 4] array of boxes"""
    x1 = np.maximum(box[0], kept[:, 0])
    y1 = np.maximum(box[1], kept[:, 1])
    x2 = np.minimum(box[2], kept[:, 2])
    y2 = np.minimum(box[3], kept[:, 3])
    inter = np.maximum(0.0, x2 - x1) * np.maximum(0.0, y2 - y1)

    area = (box[2] - box[0]) * (box[3] - box[1])
    kept_areas = (kept[:, 2] - kept[:, 0]) * (kept[:, 3] - kept[:, 1])
    union = area + kept_areas - inter

    out = np.zeros_like(inter)
    np.divide(inter, union, out=out, where=union > 0)
    return out


def non_max_suppression(
    detections: Sequence[Detection],
    iou_threshold: float = DEFAULT_IOU_THRESHOLD
) -> List[Detection]:
    """
    Remove lower-score detections that overlap a kept one

    Args:
        detections: Class-filtered detections
        iou_threshold: Maximum IoU allowed between two kept boxes

    Returns:
        Kept detections, highest score first
    """
    if not detections:
        return []

    scores = np.array([d.score for d in detections], dtype=np.float64)
    boxes = np.array(
        [[d.box.xmin, d.box.ymin, d.box.xmax, d.box.ymax] for d in detections],
        dtype=np.float64
    )
    order = np.argsort(-scores, kind='stable')

    keep: List[int] = []
    for idx in order:
        if keep and np.any(_iou_against(boxes[idx], boxes[keep]) > iou_threshold):
            continue
        keep.append(int(idx))

    return [detections[i] for i in keep]
