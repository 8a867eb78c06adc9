from Settings import SmoothingConfig


class ParameterSmoother:
    """
    Frame-rate independent exponential approach of `current` toward a target:

        current += (target - current) * min(1, elapsed * rate)

    The blend factor is clamped so a long frame (e.g. after the window was
    suspended) lands exactly on the target instead of overshooting.
    """

    def __init__(self, rate=3.0, initial=0.0, lower=0.0, upper=1.0):
        if lower > upper:
            raise ValueError("lower bound must not exceed upper bound")
        self.rate = rate
        self.lower = lower
        self.upper = upper
        self.current = self._clamp(initial)

    @classmethod
    def from_config(cls, cfg: SmoothingConfig, initial=0.0):
        return cls(rate=cfg.rate, initial=initial, lower=cfg.lower, upper=cfg.upper)

    def _clamp(self, value):
        return max(self.lower, min(self.upper, float(value)))

    def update(self, target, elapsed):
        target = self._clamp(target)
        blend = min(1.0, max(0.0, elapsed) * self.rate)
        if blend >= 1.0:
            self.current = target
        else:
            self.current += (target - self.current) * blend
        return self.current

    def reset(self, value=None):
        self.current = self._clamp(self.lower if value is None else value)
        return self.current
