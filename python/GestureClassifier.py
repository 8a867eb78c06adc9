# GestureClassifier.py
from typing import Optional

from GestureState import GestureState, Status
from HandData import HandData
from Openness import KNUCKLE_EPSILON, compute_openness
from Settings import GestureConfig

OPEN_HAND_THRESHOLD = 1.6


def is_open_hand(openness: float, threshold: float = OPEN_HAND_THRESHOLD) -> bool:
    # inclusive: exactly at the threshold counts as open
    return openness >= threshold


class GestureClassifier:
    """
    Open hand -> frozen, anything else (including no hand) -> flowing.

    The state is re-emitted on every processed frame, so listeners see
    repeated identical values. Frames whose video time did not advance are
    skipped entirely.
    """

    def __init__(self, cfg: Optional[GestureConfig] = None, state: Optional[GestureState] = None):
        self.cfg = cfg or GestureConfig()
        self.state = state if state is not None else GestureState()
        self.threshold = self.cfg.open_threshold
        self.epsilon = self.cfg.knuckle_epsilon or KNUCKLE_EPSILON
        self.last_video_time = None

    def accepts(self, video_time) -> bool:
        return video_time != self.last_video_time

    def classify(self, hand: Optional[HandData], video_time) -> Optional[bool]:
        """
        Returns the emitted frozen flag, or None when the frame was a duplicate.
        """
        if not self.accepts(video_time):
            return None
        self.last_video_time = video_time

        if hand is None or hand.landmarks is None:
            self.state.emit(False, Status.NO_HAND)
            return False

        openness = compute_openness(hand.landmarks, self.epsilon)
        frozen = is_open_hand(openness, self.threshold)
        hand.openness = openness
        hand.is_open = frozen
        self.state.emit(frozen, Status.FREEZING if frozen else Status.FLOWING, openness)
        return frozen

    def reset(self):
        self.last_video_time = None
