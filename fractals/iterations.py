import math

from fractals.base import EngineSettings


class IterationBudgetPolicy:
    """
    Scales the escape-time iteration cap with zoom depth.

    Growth is logarithmic in zoom and clamped to the configured bounds.
    """
    def __init__(self, settings: EngineSettings):
        self.base = settings.base_iteration_count
        self.scaling_factor = settings.scaling_factor
        self.minimum = settings.min_iteration_count
        self.maximum = settings.max_iteration_count

    def budget(self, zoom: float) -> int:
        iterations = self.base
        if zoom > 1.0:
            # round() is half-to-even
            iterations = round(self.base + math.log2(zoom) * self.scaling_factor)
        return max(self.minimum, min(self.maximum, iterations))
