from Errors import AcquisitionFailure, DetectionInitFailure
from GestureState import Status


class DetectionLoop:
    """
    Owns the camera and the detector and drives one detection per frame on the
    shared FrameScheduler.

    camera_factory() -> object with read() -> (frame, video_time) and release()
    detector_factory() -> object with detect(frame, timestamp_ms) and close()
    """

    def __init__(self, scheduler, classifier, state, camera_factory, detector_factory):
        self.scheduler = scheduler
        self.classifier = classifier
        self.state = state
        self.camera_factory = camera_factory
        self.detector_factory = detector_factory

        self.camera = None
        self.detector = None
        self.error = None
        self.last_frame = None
        self._frame_id = None
        self._started = False

    @property
    def running(self):
        return self._frame_id is not None

    def start(self):
        if self._started:
            return
        self._started = True
        self.error = None
        self.state.set_status(Status.INITIALIZING)

        try:
            self.detector = self.detector_factory()
            self.camera = self.camera_factory()
        except (AcquisitionFailure, DetectionInitFailure) as e:
            print(f"[PY] ERROR initializing hand tracking: {e}")
            self.error = e
            self.stop()
            self.state.fail()
            return

        self._frame_id = self.scheduler.request_frame(self._wait_for_data)

    def _wait_for_data(self, now):
        self._frame_id = None
        if self.camera is None:
            return
        frame, video_time = self.camera.read()
        if frame is None:
            self._frame_id = self.scheduler.request_frame(self._wait_for_data)
            return
        self.state.set_status(Status.ACTIVE)
        self._process(now, frame, video_time)
        self._reschedule()

    def _predict(self, now):
        self._frame_id = None
        if self.camera is None or self.detector is None:
            return
        frame, video_time = self.camera.read()
        self._process(now, frame, video_time)
        self._reschedule()

    def _process(self, now, frame, video_time):
        if frame is None:
            return
        self.last_frame = frame
        # video did not advance since the last classified frame
        if not self.classifier.accepts(video_time):
            return
        try:
            hand = self.detector.detect(frame, now * 1000.0)
        except Exception as e:
            print(f"[VISION] Detection failed, frame treated as no hand: {e}")
            hand = None
        try:
            self.classifier.classify(hand, video_time)
        except ValueError as e:
            # malformed landmark set
            print(f"[VISION] Could not classify hand: {e}")
            self.state.emit(False, Status.NO_HAND)

    def _reschedule(self):
        # a listener may have stopped us during classification
        if self.camera is not None and self.detector is not None:
            self._frame_id = self.scheduler.request_frame(self._predict)

    def stop(self):
        """Cancel the pending cycle and release the detector and the camera."""
        self.scheduler.cancel_frame(self._frame_id)
        self._frame_id = None
        detector, self.detector = self.detector, None
        camera, self.camera = self.camera, None
        try:
            if detector is not None:
                detector.close()
        finally:
            if camera is not None:
                camera.release()
        self._started = False
