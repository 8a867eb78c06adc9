from dataclasses import dataclass
from typing import Optional

import numpy as np

from Particles import SnowField, build_populations, explosion_offsets, make_rng, smoothstep
from Settings import PaletteConfig, SceneConfig, SmoothingConfig
from Smoothing import ParameterSmoother


@dataclass
class FrameState:
    time: float
    frozen: bool
    explosion: float
    explosion_factor: float
    snow_moved: bool

    def to_dict(self):
        return {
            "time": self.time,
            "frozen": self.frozen,
            "explosion": self.explosion,
            "explosion_factor": self.explosion_factor,
            "snow_moved": self.snow_moved,
        }


class Scene:
    """
    Particle populations plus the per-frame parameters a renderer needs.
    Populations are generated once here; only the snow moves afterwards.
    """

    def __init__(self, cfg: Optional[SceneConfig] = None, palette: Optional[PaletteConfig] = None,
                 smoothing: Optional[SmoothingConfig] = None, rng: Optional[np.random.Generator] = None):
        self.cfg = cfg or SceneConfig()
        self.palette = palette or PaletteConfig()
        self.rng = rng if rng is not None else make_rng()

        self.populations = build_populations(self.cfg, self.palette, self.rng)
        self.snow = SnowField(self.populations["snow"], self.cfg.snow_box_size)
        self.explosion = ParameterSmoother.from_config(smoothing or SmoothingConfig())
        self.time = 0.0
        print(
            "[SCENE] Generated "
            + ", ".join(f"{name}={pop.count}" for name, pop in self.populations.items())
        )

    @property
    def tree(self):
        return self.populations["tree"]

    def explosion_target(self, frozen):
        return 1.0 if (frozen and self.cfg.explosion_on_freeze) else 0.0

    def tick(self, elapsed, frozen=False) -> FrameState:
        self.time += max(0.0, elapsed)
        value = self.explosion.update(self.explosion_target(frozen), elapsed)
        moved = self.snow.step(frozen)
        return FrameState(
            time=self.time,
            frozen=bool(frozen),
            explosion=value,
            explosion_factor=float(smoothstep(0.0, 1.0, value)),
            snow_moved=moved,
        )

    def tree_positions(self):
        """Tree positions with the current explosion applied."""
        return self.tree.positions + explosion_offsets(self.tree, self.explosion.current)
