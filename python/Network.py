import json

import zmq


# ==========================================
# RENDER BRIDGE
# ==========================================
class RenderBridge:
    """
    Publishes scene data to an out-of-process renderer over ZeroMQ PUB.

    Messages:
        [b"population", header_json, buffer, buffer, ...]   once per population
        [b"frame", frame_json]                              every tick
    """

    def __init__(self, endpoint="tcp://*:5556", context=None):
        self.endpoint = endpoint
        self._own_context = context is None
        self.context = context or zmq.Context()
        self.socket = self.context.socket(zmq.PUB)
        self.socket.bind(endpoint)
        print(f"[NET] Publishing on {endpoint}")

    def publish_population(self, population):
        buffers = population.buffers()
        header = {
            "name": population.name,
            "count": population.count,
            "attributes": list(buffers.keys()),
            "item_sizes": population.item_sizes(),
            "tint": list(population.tint) if population.tint else None,
            "origin": list(population.origin),
        }
        frames = [b"population", json.dumps(header).encode("utf-8")]
        frames.extend(buf.tobytes() for buf in buffers.values())
        self.socket.send_multipart(frames)

    def publish_populations(self, populations):
        for population in populations.values():
            self.publish_population(population)

    def publish_frame(self, frame_state, gesture_state, snow=None):
        payload = dict(frame_state.to_dict())
        payload["gesture"] = gesture_state.to_dict()
        frames = [b"frame", json.dumps(payload).encode("utf-8")]
        if snow is not None and frame_state.snow_moved:
            frames.append(snow.buffers()["positions"].tobytes())
        # PUB drops messages for slow subscribers instead of blocking
        self.socket.send_multipart(frames)

    def close(self):
        if self.socket is not None:
            self.socket.close(linger=0)
            self.socket = None
        if self._own_context and self.context is not None:
            self.context.term()
            self.context = None
        print("[NET] Bridge closed.")
