from enum import Enum


class Status(Enum):
    INITIALIZING = "Initializing Vision..."
    ACTIVE = "Active"
    FREEZING = "Freezing Time"
    FLOWING = "Flowing"
    NO_HAND = "No Hand Detected"
    CAMERA_ERROR = "Camera Error"


# ==========================================
# SHARED STATE (single writer)
# ==========================================
class GestureState:
    """
    The only state shared between the gesture loop and the scene.
    Written by the classifier (and the detection loop's failure path),
    read by everything else.
    """

    def __init__(self, log_changes=False):
        self.frozen = False
        self.status = Status.INITIALIZING
        self.openness = None
        self.log_changes = log_changes
        self._listeners = []

    def add_listener(self, callback):
        """callback(frozen) is invoked on every emission, changed or not."""
        self._listeners.append(callback)

    def emit(self, frozen, status, openness=None):
        self.frozen = bool(frozen)
        self.openness = openness
        self.set_status(status)
        for callback in self._listeners:
            callback(self.frozen)

    def set_status(self, status):
        if self.log_changes and status != self.status:
            print(f"[PY] status: {self.status.value} -> {status.value}")
        self.status = status

    def fail(self):
        """Terminal failure of the gesture subsystem. Never leaves the scene frozen."""
        self.emit(False, Status.CAMERA_ERROR)

    @property
    def indicator(self):
        return "PAUSED" if self.status is Status.FREEZING else "LIVE"

    def to_dict(self):
        return {
            "frozen": self.frozen,
            "status": self.status.value,
            "indicator": self.indicator,
            "openness": self.openness,
        }
