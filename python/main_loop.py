import time

import cv2

from DetectionLoop import DetectionLoop
from FrameScheduler import FrameScheduler
from GestureClassifier import GestureClassifier
from GestureState import GestureState
from Particles import make_rng
from Scene import Scene
from Settings import InstallationConfig
from helpers import draw_status, load_config

PREVIEW_WINDOW = "Hand Tracking"


def default_camera_factory(cfg):
    from CameraStream import CameraStream

    return lambda: CameraStream(cfg.tracker)


def default_detector_factory(cfg):
    from HandTracker import HandTracker

    return lambda: HandTracker(cfg.tracker)


class Installation:
    """
    Wires the gesture loop to the scene. One call to tick() is one rendered
    frame: detection and classification, then the explosion smoother, then
    the snow, then publishing.
    """

    def __init__(self, cfg=None, camera_factory=None, detector_factory=None, bridge=None,
                 rng=None, gestures=True):
        self.cfg = cfg or InstallationConfig()
        self.scheduler = FrameScheduler()
        self.state = GestureState(log_changes=self.cfg.debug.log_status_changes)
        self.classifier = GestureClassifier(self.cfg.gesture, self.state)
        self.scene = Scene(
            self.cfg.scene,
            self.cfg.palette,
            self.cfg.smoothing,
            rng if rng is not None else make_rng(self.cfg.seed),
        )
        self.bridge = bridge
        self.loop = None
        if gestures:
            self.loop = DetectionLoop(
                self.scheduler,
                self.classifier,
                self.state,
                camera_factory or default_camera_factory(self.cfg),
                detector_factory or default_detector_factory(self.cfg),
            )
        self.clock = 0.0
        self.frames = 0

    def start(self):
        if self.bridge is not None:
            self.bridge.publish_populations(self.scene.populations)
        if self.loop is not None:
            self.loop.start()

    def tick(self, elapsed):
        elapsed = max(0.0, elapsed)
        self.clock += elapsed
        self.scheduler.run_frame(self.clock)
        frame = self.scene.tick(elapsed, self.state.frozen)
        if self.bridge is not None:
            self.bridge.publish_frame(frame, self.state, self.scene.populations["snow"])
        self.frames += 1
        return frame

    def stop(self):
        try:
            if self.loop is not None:
                self.loop.stop()
        finally:
            self.scheduler.clear()
            if self.bridge is not None:
                self.bridge.close()
                self.bridge = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False

    def run(self, max_frames=None, show_preview=None):
        """Host loop paced to debug.target_fps. ESC in the preview window quits."""
        if show_preview is None:
            show_preview = self.cfg.debug.show_preview
        frame_time = 1.0 / self.cfg.debug.target_fps
        last = time.perf_counter()

        print("[PY] Installation running. Press ESC (preview) or Ctrl+C to stop.")
        try:
            while max_frames is None or self.frames < max_frames:
                now = time.perf_counter()
                self.tick(now - last)
                last = now

                if show_preview and self.loop is not None and self.loop.last_frame is not None:
                    cv2.imshow(PREVIEW_WINDOW, draw_status(self.loop.last_frame, self.state))
                    if cv2.waitKey(1) & 0xFF == 27:
                        break

                spare = frame_time - (time.perf_counter() - now)
                if spare > 0:
                    time.sleep(spare)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()
            if show_preview:
                cv2.destroyAllWindows()
        print("[PY] Shutdown complete.")


# --------------------------------------------------------
# MAIN ENTRY
# --------------------------------------------------------
def main(config_path="config.json", mode="live", seed=None, max_frames=None, show_preview=None):
    raw = load_config(config_path)
    if seed is not None:
        raw = dict(raw, seed=seed)
    cfg = InstallationConfig.from_dict(raw)

    bridge = None
    if cfg.bridge.enabled:
        from Network import RenderBridge

        bridge = RenderBridge(cfg.bridge.endpoint)

    if show_preview is None:
        show_preview = cfg.debug.show_preview

    installation = Installation(cfg, bridge=bridge, gestures=(mode == "live"))
    try:
        installation.start()
    except Exception:
        installation.stop()
        raise
    installation.run(max_frames=max_frames, show_preview=show_preview and mode == "live")
    return installation


if __name__ == "__main__":
    main()
