import json
import os

import cv2

from GestureState import Status

# BGR
PILL_BG = (0, 0, 0)
LIVE_COLOR = (94, 197, 34)
PAUSED_COLOR = (238, 211, 34)
ERROR_COLOR = (60, 60, 230)
TEXT_COLOR = (230, 230, 230)


def load_config(path="config.json"):
    if not os.path.exists(path):
        print(f"[PY] config '{path}' not found, using defaults.")
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        print("[PY] Failed to load config:", e)
        return {}


def indicator_color(state):
    if state.status is Status.CAMERA_ERROR:
        return ERROR_COLOR
    return PAUSED_COLOR if state.indicator == "PAUSED" else LIVE_COLOR


# ---------- debug drawing ----------
def draw_status(frame, state, mirror=True):
    """
    Draw the LIVE/PAUSED pill and the status line onto a BGR camera frame.
    Returns the (possibly mirrored) frame that was drawn on.
    """
    if frame is None:
        return None
    if mirror:
        frame = cv2.flip(frame, 1)
    h, w = frame.shape[:2]

    label = state.indicator
    font = cv2.FONT_HERSHEY_SIMPLEX
    (tw, th), baseline = cv2.getTextSize(label, font, 0.4, 1)
    x1, y1 = w - tw - 28, 8
    x2, y2 = w - 8, y1 + th + baseline + 8
    cv2.rectangle(frame, (x1, y1), (x2, y2), PILL_BG, -1)
    cv2.circle(frame, (x1 + 8, (y1 + y2) // 2), 4, indicator_color(state), -1)
    cv2.putText(frame, label, (x1 + 16, y2 - baseline - 3), font, 0.4, TEXT_COLOR, 1, cv2.LINE_AA)

    text = state.status.value
    if state.openness is not None:
        text += f"  open={state.openness:.2f}"
    cv2.putText(frame, text, (8, h - 10), font, 0.45, TEXT_COLOR, 1, cv2.LINE_AA)
    return frame
