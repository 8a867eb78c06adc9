import os
import urllib.request

import cv2
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from Errors import DetectionInitFailure
from HandData import HandData


def ensure_model(path, url):
    """One-time fetch of the hand landmarker asset."""
    if os.path.exists(path):
        return path
    print(f"[VISION] Downloading {os.path.basename(path)}...")
    # a partial download must never land on the final path
    tmp_path = path + ".tmp"
    try:
        urllib.request.urlretrieve(url, tmp_path)
        os.replace(tmp_path, path)
    except (OSError, ValueError) as e:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise DetectionInitFailure(f"Could not download hand model: {e}") from e
    print("[VISION] Download complete.")
    return path


class HandTracker:
    def __init__(self, cfg):
        self.cfg = cfg
        self._last_timestamp = -1
        model_path = ensure_model(cfg.model_path, cfg.model_url)

        try:
            options = vision.HandLandmarkerOptions(
                base_options=python.BaseOptions(model_asset_path=model_path),
                running_mode=vision.RunningMode.VIDEO,
                num_hands=cfg.num_hands,
                min_hand_detection_confidence=cfg.min_detection_confidence,
                min_hand_presence_confidence=cfg.min_presence_confidence,
                min_tracking_confidence=cfg.min_tracking_confidence,
            )
            self.landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError, OSError) as e:
            raise DetectionInitFailure(f"Hand landmarker failed to load: {e}") from e
        print("[VISION] Hand landmarker ready.")

    def detect(self, frame_bgr, timestamp_ms):
        """
        Run detection on one BGR frame. Returns HandData for the first hand
        (world landmarks, metres) or None.
        timestamp_ms: must increase between calls in VIDEO mode; bumped if not.
        """
        if self.landmarker is None:
            return None
        ts = max(int(timestamp_ms), self._last_timestamp + 1)
        self._last_timestamp = ts

        # MediaPipe expects RGB in uint8
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        result = self.landmarker.detect_for_video(image, ts)

        if not result.hand_world_landmarks:
            return None

        handedness, score = "Unknown", 0.0
        if result.handedness and result.handedness[0]:
            category = result.handedness[0][0]
            handedness, score = category.category_name, category.score
        return HandData(
            landmarks=result.hand_world_landmarks[0],
            handedness=handedness,
            confidence=score,
            timestamp=ts,
        )

    def close(self):
        if self.landmarker is not None:
            self.landmarker.close()
            self.landmarker = None
