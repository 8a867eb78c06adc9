import math
from typing import Dict, List, MutableMapping, Sequence, Tuple, Union

WRIST = 0

# (knuckle, tip) landmark indices per finger. Thumb is not part of the metric.
FINGER_KNUCKLES: Dict[str, Tuple[int, int]] = {
    "index": (5, 8),
    "middle": (9, 12),
    "ring": (13, 16),
    "pinky": (17, 20),
}

LANDMARK_COUNT = 21
KNUCKLE_EPSILON = 0.001

Point = Tuple[float, float, float]
LandmarkLike = Union[Sequence[float], MutableMapping[str, float]]


def _extract_point(entry: Union[LandmarkLike, object]) -> Point:
    if hasattr(entry, "x") and hasattr(entry, "y") and hasattr(entry, "z"):
        return (float(entry.x), float(entry.y), float(entry.z))
    if isinstance(entry, dict):
        return (float(entry.get("x", 0.0)), float(entry.get("y", 0.0)), float(entry.get("z", 0.0)))
    if isinstance(entry, (list, tuple)) and len(entry) >= 3:
        return (float(entry[0]), float(entry[1]), float(entry[2]))
    raise ValueError("Unsupported landmark format; expected object with x,y,z or sequence of 3 values.")


def _distance(a: Point, b: Point) -> float:
    return math.sqrt((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2)


def _points(landmarks: Sequence[object]) -> List[Point]:
    if landmarks is None or len(landmarks) < LANDMARK_COUNT:
        raise ValueError(f"Expected {LANDMARK_COUNT} hand landmarks.")
    return [_extract_point(lm) for lm in landmarks]


def finger_ratios(landmarks: Sequence[object], epsilon: float = KNUCKLE_EPSILON) -> Dict[str, float]:
    """
    Wrist->tip distance over wrist->knuckle distance for each finger.
    The knuckle distance is floored at epsilon, so coincident points give a
    large but finite ratio.
    """
    points = _points(landmarks)
    wrist = points[WRIST]
    ratios: Dict[str, float] = {}
    for finger, (knuckle, tip) in FINGER_KNUCKLES.items():
        knuckle_dist = _distance(wrist, points[knuckle])
        tip_dist = _distance(wrist, points[tip])
        ratios[finger] = tip_dist / max(knuckle_dist, epsilon)
    return ratios


def compute_openness(landmarks: Sequence[object], epsilon: float = KNUCKLE_EPSILON) -> float:
    """Mean extension ratio of index..pinky. ~1.0 for a fist, ~2.0 for a flat hand."""
    ratios = finger_ratios(landmarks, epsilon)
    return sum(ratios.values()) / len(ratios)
