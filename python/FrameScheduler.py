from collections import OrderedDict


class FrameScheduler:
    """
    Cooperative "next frame" primitive for a single-threaded host loop.

    Callbacks requested while a frame is running are deferred to the next
    frame, so a self-rescheduling cycle runs exactly once per frame.
    """

    def __init__(self):
        self._next_handle = 1
        self._pending = OrderedDict()
        self._running = None

    def request_frame(self, callback):
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle):
        if handle is None:
            return
        self._pending.pop(handle, None)
        if self._running is not None:
            self._running.pop(handle, None)

    def run_frame(self, now):
        """Run everything requested before this frame. Returns how many ran."""
        self._running, self._pending = self._pending, OrderedDict()
        ran = 0
        try:
            while self._running:
                _, callback = self._running.popitem(last=False)
                callback(now)
                ran += 1
        finally:
            # a raising callback leaves the rest of this frame queued, ahead of
            # anything requested meanwhile
            leftover, self._running = self._running, None
            if leftover:
                leftover.update(self._pending)
                self._pending = leftover
        return ran

    @property
    def pending(self):
        return len(self._pending)

    def clear(self):
        self._pending.clear()
