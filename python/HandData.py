class HandData:
    """
    Simple container for one detected hand in one frame.
    Only lives for the duration of that frame's processing.
    """

    def __init__(self, landmarks=None, handedness="Unknown", confidence=0.0, timestamp=0.0):
        # 21 world landmarks (metres, wrist-relative), objects with x/y/z or 3-sequences
        self.landmarks = landmarks

        # "Left" / "Right"
        self.handedness = handedness

        # detector score for the handedness classification
        self.confidence = confidence

        # timing
        self.timestamp = timestamp  # detector timestamp (ms)

        # filled in by the classifier
        self.openness = 0.0
        self.is_open = False

    @property
    def visible(self):
        return self.landmarks is not None

    def to_dict(self):
        """Serialize to JSON-friendly dict."""
        return {
            "handedness": self.handedness,
            "visible": self.visible,
            "confidence": self.confidence,
            "openness": self.openness,
            "is_open": self.is_open,
            "timestamp": self.timestamp,
        }
