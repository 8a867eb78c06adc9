import time

import cv2

from Errors import AcquisitionFailure


class CameraStream:
    """
    Owns the OpenCV capture device.
    read() returns (frame, video_time_ms); video time only advances when a new
    frame was actually delivered.
    """

    def __init__(self, cfg):
        self.cfg = cfg
        self.cap = cv2.VideoCapture(cfg.camera_index)
        if not self.cap.isOpened():
            self.cap.release()
            self.cap = None
            raise AcquisitionFailure(f"Cannot open camera {cfg.camera_index}")
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, cfg.frame_width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, cfg.frame_height)
        self.video_time = -1.0
        print(f"[CAM] Opened camera {cfg.camera_index} ({cfg.frame_width}x{cfg.frame_height})")

    def read(self):
        if self.cap is None:
            return None, self.video_time
        ok, frame = self.cap.read()
        if not ok:
            return None, self.video_time

        # Webcams usually report no position; fall back to the receive time.
        pos = self.cap.get(cv2.CAP_PROP_POS_MSEC)
        self.video_time = pos if pos > 0 else time.monotonic() * 1000.0
        return frame, self.video_time

    def release(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            print("[CAM] Camera released.")
