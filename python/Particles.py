from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from Settings import PaletteConfig, SceneConfig

# Radial ratio where the tree gradient switches from core->mid to mid->outer.
GRADIENT_SPLIT = 0.4
# Vertical lift applied to the whole cone, as a share of its height.
TREE_LIFT = 0.4

EXPLOSION_DISTANCE = 25.0
EXPLOSION_RISE = 5.0
EXPLOSION_SWIRL = 5.0

ATTRIBUTES = ("positions", "colors", "sizes", "randomness", "directions", "speeds")


def make_rng(seed=None) -> np.random.Generator:
    return np.random.default_rng(seed)


def _normalize_rows(v: np.ndarray, fallback=(0.0, 1.0, 0.0)) -> np.ndarray:
    length = np.linalg.norm(v, axis=1, keepdims=True)
    out = np.empty_like(v)
    ok = length[:, 0] > 1e-12
    out[ok] = v[ok] / length[ok]
    out[~ok] = fallback
    return out


@dataclass(frozen=True, eq=False)
class ParticlePopulation:
    """
    Index-aligned per-particle arrays. Row i of every array describes particle i.
    Arrays are read-only unless the population was built as mutable.
    """

    name: str
    positions: np.ndarray
    colors: Optional[np.ndarray] = None
    sizes: Optional[np.ndarray] = None
    randomness: Optional[np.ndarray] = None
    directions: Optional[np.ndarray] = None
    speeds: Optional[np.ndarray] = None
    tint: Optional[Tuple[float, float, float]] = None
    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    mutable_positions: bool = False

    def __post_init__(self):
        count = len(self.positions)
        for attr in ATTRIBUTES:
            arr = getattr(self, attr)
            if arr is None:
                continue
            if len(arr) != count:
                raise ValueError(f"{self.name}.{attr} has {len(arr)} rows, expected {count}")
            if attr != "positions" or not self.mutable_positions:
                arr.flags.writeable = False

    @property
    def count(self) -> int:
        return len(self.positions)

    def attributes(self) -> Dict[str, np.ndarray]:
        return {attr: getattr(self, attr) for attr in ATTRIBUTES if getattr(self, attr) is not None}

    def buffers(self) -> Dict[str, np.ndarray]:
        """Flat float32 buffers (count * item size) ready for upload."""
        return {attr: np.ascontiguousarray(arr, dtype=np.float32).reshape(-1) for attr, arr in self.attributes().items()}

    def item_sizes(self) -> Dict[str, int]:
        return {attr: 1 if arr.ndim == 1 else arr.shape[1] for attr, arr in self.attributes().items()}


# ---------- tree ----------
def tree_gradient(ratio: np.ndarray, core, mid, outer) -> np.ndarray:
    """Two-stage linear gradient keyed by normalized radial distance."""
    ratio = np.asarray(ratio, dtype=np.float64)[:, None]
    core, mid, outer = (np.asarray(c, dtype=np.float64) for c in (core, mid, outer))
    inner_t = ratio / GRADIENT_SPLIT
    outer_t = (ratio - GRADIENT_SPLIT) / (1.0 - GRADIENT_SPLIT)
    inner = core + (mid - core) * inner_t
    outside = mid + (outer - mid) * outer_t
    return np.where(ratio < GRADIENT_SPLIT, inner, outside)


def generate_tree(count: int, rng: np.random.Generator, radius: float, height: float,
                  palette: Optional[PaletteConfig] = None) -> ParticlePopulation:
    palette = palette or PaletteConfig()

    h = rng.random(count)
    theta = rng.random(count) * np.pi * 2.0
    max_r = (1.0 - h) * radius
    # sqrt keeps each height slice area-uniform instead of piling up at the axis
    r = max_r * np.sqrt(rng.random(count))

    x = r * np.cos(theta)
    y = h * height - height / 2.0
    z = r * np.sin(theta)
    positions = np.stack([x, y + height * TREE_LIFT, z], axis=1)

    ratio = r / (max_r + 0.001)
    colors = tree_gradient(ratio, palette.rgb("tree_core"), palette.rgb("tree_mid"), palette.rgb("tree_outer"))
    sizes = (rng.random(count) * 0.5 + 0.5) * (1.0 - ratio * 0.5) * 0.6
    randomness = rng.random(count)

    directions = _normalize_rows(np.stack([x, y, z], axis=1))
    jitter = np.stack(
        [
            (rng.random(count) - 0.5) * 1.5,
            (rng.random(count) - 0.1) * 1.0,
            (rng.random(count) - 0.5) * 1.5,
        ],
        axis=1,
    )
    directions = _normalize_rows(directions + jitter)

    return ParticlePopulation(
        name="tree",
        positions=positions.astype(np.float32),
        colors=colors.astype(np.float32),
        sizes=sizes.astype(np.float32),
        randomness=randomness.astype(np.float32),
        directions=directions.astype(np.float32),
    )


def smoothstep(edge0, edge1, x):
    t = np.clip((np.asarray(x, dtype=np.float64) - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def explosion_offsets(tree: ParticlePopulation, amount: float) -> np.ndarray:
    """
    Per-particle displacement for an explosion amount in [0, 1]
    (0 = collapsed, 1 = fully exploded), swirled around the vertical axis.
    Mirrors what the tree vertex shader does with uExplosion.
    """
    f = float(smoothstep(0.0, 1.0, amount))
    offset = tree.directions.astype(np.float64) * (f * EXPLOSION_DISTANCE)
    angle = f * tree.randomness.astype(np.float64) * EXPLOSION_SWIRL
    s, c = np.sin(angle), np.cos(angle)
    nx = offset[:, 0] * c - offset[:, 2] * s
    nz = offset[:, 0] * s + offset[:, 2] * c
    ny = offset[:, 1] + f * EXPLOSION_RISE * tree.randomness
    return np.stack([nx, ny, nz], axis=1)


def explosion_appearance(amount: float) -> Tuple[float, float]:
    """(point size multiplier, alpha) for an explosion amount."""
    f = float(smoothstep(0.0, 1.0, amount))
    return 1.0 + (0.6 - 1.0) * f, 1.0 - f * 0.3


# ---------- decorations ----------
def generate_rings(count: int, rng: np.random.Generator, radius: float, inner_share: float = 0.6,
                   palette: Optional[PaletteConfig] = None) -> ParticlePopulation:
    palette = palette or PaletteConfig()

    theta = rng.random(count) * np.pi * 2.0
    inner = rng.random(count) > (1.0 - inner_share)
    band = rng.random(count)
    r = np.where(inner, radius * (1.2 + band * 0.8), radius * (2.5 + band * 1.5))
    spread = np.where(inner, 0.5, 0.8)
    y = (rng.random(count) - 0.5) * spread - 1.0

    positions = np.stack([r * np.cos(theta), y, r * np.sin(theta)], axis=1)
    scales = rng.random(count)
    return ParticlePopulation(
        name="rings",
        positions=positions.astype(np.float32),
        sizes=scales.astype(np.float32),
        tint=palette.rgb("ring_gold"),
    )


def generate_star(count: int, rng: np.random.Generator, radius: float = 0.8, tree_height: float = 12.0,
                  palette: Optional[PaletteConfig] = None) -> ParticlePopulation:
    palette = palette or PaletteConfig()

    theta = rng.random(count) * np.pi * 2.0
    phi = np.arccos(2.0 * rng.random(count) - 1.0)
    # cube root keeps the ball volumetrically uniform
    r = np.cbrt(rng.random(count)) * radius

    positions = np.stack(
        [r * np.sin(phi) * np.cos(theta), r * np.sin(phi) * np.sin(theta), r * np.cos(phi)],
        axis=1,
    )
    return ParticlePopulation(
        name="star",
        positions=positions.astype(np.float32),
        tint=palette.rgb("star"),
        origin=(0.0, tree_height + 0.5, 0.0),
    )


def generate_snow(count: int, rng: np.random.Generator, box_size: float = 30.0, speed_min: float = 0.02,
                  speed_range: float = 0.05, palette: Optional[PaletteConfig] = None) -> ParticlePopulation:
    palette = palette or PaletteConfig()

    positions = (rng.random((count, 3)) - 0.5) * box_size
    speeds = rng.random(count) * speed_range + speed_min
    return ParticlePopulation(
        name="snow",
        positions=positions.astype(np.float32),
        speeds=speeds.astype(np.float32),
        tint=palette.rgb("snow"),
        mutable_positions=True,
    )


class SnowField:
    """Falling snow. The only population whose buffer changes after construction."""

    def __init__(self, population: ParticlePopulation, box_size: float):
        if not population.mutable_positions or population.speeds is None:
            raise ValueError("SnowField needs a snow population with mutable positions and speeds")
        self.population = population
        self.box_size = box_size
        self.top = box_size / 2.0
        self.bottom = -box_size / 2.0

    @property
    def positions(self):
        return self.population.positions

    def step(self, frozen: bool = False) -> bool:
        """One frame of fall. Wraps to the top (not a bounce). Returns whether it moved."""
        if frozen:
            return False
        y = self.population.positions[:, 1]
        y -= self.population.speeds
        y[y < self.bottom] = self.top
        return True


def build_populations(scene: SceneConfig, palette: PaletteConfig, rng: np.random.Generator) -> Dict[str, ParticlePopulation]:
    return {
        "tree": generate_tree(scene.particle_count, rng, scene.tree_radius, scene.tree_height, palette),
        "rings": generate_rings(scene.ring_count, rng, scene.tree_radius, scene.inner_ring_share, palette),
        "star": generate_star(scene.star_count, rng, scene.star_radius, scene.tree_height, palette),
        "snow": generate_snow(scene.snow_count, rng, scene.snow_box_size, scene.snow_speed_min,
                              scene.snow_speed_range, palette),
    }
