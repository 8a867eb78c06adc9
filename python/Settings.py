from dataclasses import dataclass, field, fields
from typing import Dict, Optional, Tuple

from Errors import ConfigError

HAND_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/1/hand_landmarker.task"
)

RGB = Tuple[float, float, float]


def hex_to_rgb(value: str) -> RGB:
    """'#ff0055' -> (1.0, 0.0, 0.333...)"""
    text = str(value).strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ConfigError(f"Invalid colour '{value}'; expected #rrggbb.")
    try:
        r, g, b = (int(text[i : i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        raise ConfigError(f"Invalid colour '{value}'; expected #rrggbb.") from None
    return (r / 255.0, g / 255.0, b / 255.0)


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


@dataclass(frozen=True)
class TrackerConfig:
    camera_index: int = 0
    frame_width: int = 320
    frame_height: int = 240
    model_path: str = "hand_landmarker.task"
    model_url: str = HAND_MODEL_URL
    num_hands: int = 1
    min_detection_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

    def __post_init__(self):
        _require(self.camera_index >= 0, "tracker.camera_index must be >= 0")
        _require(self.frame_width > 0 and self.frame_height > 0, "tracker frame size must be positive")
        _require(self.num_hands >= 1, "tracker.num_hands must be >= 1")
        for name in ("min_detection_confidence", "min_presence_confidence", "min_tracking_confidence"):
            value = getattr(self, name)
            _require(0.0 <= value <= 1.0, f"tracker.{name} must be in [0, 1]")


@dataclass(frozen=True)
class GestureConfig:
    # openness >= open_threshold counts as an open hand
    open_threshold: float = 1.6
    knuckle_epsilon: float = 0.001

    def __post_init__(self):
        _require(self.open_threshold >= 0.0, "gesture.open_threshold must be >= 0")
        _require(self.knuckle_epsilon > 0.0, "gesture.knuckle_epsilon must be > 0")


@dataclass(frozen=True)
class SmoothingConfig:
    rate: float = 3.0
    lower: float = 0.0
    upper: float = 1.0

    def __post_init__(self):
        _require(self.rate >= 0.0, "smoothing.rate must be >= 0")
        _require(self.lower <= self.upper, "smoothing.lower must be <= smoothing.upper")


@dataclass(frozen=True)
class SceneConfig:
    tree_height: float = 12.0
    tree_radius: float = 4.5
    particle_count: int = 15000
    ring_count: int = 6000
    star_count: int = 500
    star_radius: float = 0.8
    snow_count: int = 2000
    snow_box_size: float = 30.0
    snow_speed_min: float = 0.02
    snow_speed_range: float = 0.05
    inner_ring_share: float = 0.6
    explosion_on_freeze: bool = True

    def __post_init__(self):
        for name in ("tree_height", "tree_radius", "star_radius", "snow_box_size",
                     "snow_speed_min", "snow_speed_range"):
            _require(getattr(self, name) >= 0.0, f"scene.{name} must be >= 0")
        for name in ("particle_count", "ring_count", "star_count", "snow_count"):
            value = getattr(self, name)
            _require(isinstance(value, int) and value >= 0, f"scene.{name} must be a non-negative integer")
        _require(0.0 <= self.inner_ring_share <= 1.0, "scene.inner_ring_share must be in [0, 1]")


@dataclass(frozen=True)
class PaletteConfig:
    background: str = "#050205"
    tree_core: str = "#ff0055"
    tree_mid: str = "#ff5e78"
    tree_outer: str = "#ffbd69"
    snow: str = "#ffffff"
    ring_gold: str = "#ffeb3b"
    star: str = "#fff0f5"

    def __post_init__(self):
        for f in fields(self):
            hex_to_rgb(getattr(self, f.name))

    def rgb(self, name: str) -> RGB:
        return hex_to_rgb(getattr(self, name))


@dataclass(frozen=True)
class BridgeConfig:
    enabled: bool = False
    endpoint: str = "tcp://*:5556"


@dataclass(frozen=True)
class DebugConfig:
    show_preview: bool = True
    target_fps: float = 60.0
    log_status_changes: bool = True

    def __post_init__(self):
        _require(self.target_fps > 0.0, "debug.target_fps must be > 0")


_SECTIONS = {
    "tracker": TrackerConfig,
    "gesture": GestureConfig,
    "smoothing": SmoothingConfig,
    "scene": SceneConfig,
    "palette": PaletteConfig,
    "bridge": BridgeConfig,
    "debug": DebugConfig,
}


def _build_section(name, cls, data):
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"config section '{name}' must be an object")
    known = {f.name for f in fields(cls)}
    for key in data:
        if key not in known:
            print(f"[CFG] ignoring unknown key '{name}.{key}'")
    try:
        return cls(**{k: v for k, v in data.items() if k in known})
    except TypeError as e:
        raise ConfigError(f"config section '{name}': {e}") from e


@dataclass(frozen=True)
class InstallationConfig:
    """Immutable configuration passed into every constructor."""

    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    gesture: GestureConfig = field(default_factory=GestureConfig)
    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    scene: SceneConfig = field(default_factory=SceneConfig)
    palette: PaletteConfig = field(default_factory=PaletteConfig)
    bridge: BridgeConfig = field(default_factory=BridgeConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)
    seed: Optional[int] = None

    @classmethod
    def from_dict(cls, cfg: Optional[Dict]) -> "InstallationConfig":
        cfg = cfg or {}
        sections = {}
        for name, section_cls in _SECTIONS.items():
            sections[name] = _build_section(name, section_cls, cfg.get(name, {}))
        for key in cfg:
            if key not in _SECTIONS and key != "seed":
                print(f"[CFG] ignoring unknown section '{key}'")
        seed = cfg.get("seed")
        if seed is not None and (not isinstance(seed, int) or seed < 0):
            raise ConfigError("seed must be a non-negative integer or null")
        return cls(seed=seed, **sections)
