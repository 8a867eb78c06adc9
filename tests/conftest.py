import numpy as np
import pytest

from HandData import HandData
from Openness import FINGER_KNUCKLES
from Settings import InstallationConfig, SceneConfig

# Unit directions wrist -> knuckle for index..pinky, roughly fanned out.
FINGER_DIRECTIONS = {
    "index": (0.3, 1.0, 0.0),
    "middle": (0.1, 1.0, 0.05),
    "ring": (-0.1, 1.0, 0.05),
    "pinky": (-0.3, 1.0, 0.0),
}


def make_landmarks(ratio=2.0, knuckle_len=0.08, wrist=(0.0, 0.0, 0.0)):
    """21 landmarks whose wrist->tip / wrist->knuckle ratio is `ratio` for every finger."""
    wrist = np.asarray(wrist, dtype=float)
    points = [tuple(wrist + (0.02 * i, -0.01 * i, 0.0)) for i in range(21)]
    points[0] = tuple(wrist)
    for finger, (knuckle, tip) in FINGER_KNUCKLES.items():
        d = np.asarray(FINGER_DIRECTIONS[finger], dtype=float)
        d = d / np.linalg.norm(d)
        points[knuckle] = tuple(wrist + d * knuckle_len)
        points[tip] = tuple(wrist + d * knuckle_len * ratio)
    return points


def make_hand(ratio=2.0):
    return HandData(landmarks=make_landmarks(ratio), handedness="Right", confidence=0.9)


class FakeCamera:
    """Delivers a frame per read; video time advances unless `stalled`."""

    def __init__(self, blank_reads=0):
        self.blank_reads = blank_reads
        self.video_time = 0.0
        self.reads = 0
        self.released = False
        self.stalled = False
        self.frame = np.zeros((24, 32, 3), dtype=np.uint8)

    def read(self):
        self.reads += 1
        if self.blank_reads > 0:
            self.blank_reads -= 1
            return None, self.video_time
        if not self.stalled:
            self.video_time += 33.3
        return self.frame, self.video_time

    def release(self):
        self.released = True


class FakeDetector:
    """Returns whatever `hand` currently holds (HandData or None)."""

    def __init__(self, hand=None):
        self.hand = hand
        self.calls = []
        self.closed = False

    def detect(self, frame, timestamp_ms):
        self.calls.append(timestamp_ms)
        return self.hand

    def close(self):
        self.closed = True


@pytest.fixture
def small_config():
    return InstallationConfig(
        scene=SceneConfig(particle_count=300, ring_count=200, star_count=100, snow_count=150),
        seed=1234,
    )


@pytest.fixture
def rng():
    return np.random.default_rng(42)
