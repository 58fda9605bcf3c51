import math
from dataclasses import dataclass


@dataclass(frozen=True)
class ViewState:
    """
    Per-request view: center point in the complex plane and zoom factor.
    """
    center_real: float
    center_imaginary: float
    zoom: float


@dataclass(frozen=True)
class ComplexBounds:
    """
    Rectangular region of the complex plane covered by the pixel grid.
    """
    min_real: float
    max_real: float
    min_imag: float
    max_imag: float

    @property
    def width(self) -> float:
        return self.max_real - self.min_real

    @property
    def height(self) -> float:
        return self.max_imag - self.min_imag


@dataclass(frozen=True)
class EngineSettings:
    """
    Process-wide invariant configuration of the compute engine.
    Width and height fix the pixel grid (one work unit per pixel).
    Viewport width/height are the complex-plane extent shown at zoom 1.
    Iteration counts and the scaling factor drive the zoom-dependent budget;
    min/max zoom bound every request.
    """
    width: int = 1024
    height: int = 768

    default_center_real: float = -0.5
    default_center_imaginary: float = 0.0
    default_zoom: float = 1.0

    viewport_width: float = 3.5
    viewport_height: float = 2.5

    base_iteration_count: int = 100000
    min_iteration_count: int = 100000
    max_iteration_count: int = 10000000
    scaling_factor: float = 50000.0

    min_zoom: float = 0.1
    max_zoom: float = 1000000.0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Pixel grid must be positive, got {self.width}x{self.height}")
        if not (self.viewport_width > 0 and self.viewport_height > 0):
            raise ValueError("Viewport extent must be positive")
        if not all(map(math.isfinite, (self.viewport_width, self.viewport_height,
                                       self.scaling_factor, self.max_zoom))):
            raise ValueError("Viewport, scaling factor and max zoom must be finite")
        if not 0 < self.min_zoom <= self.max_zoom:
            raise ValueError(f"Invalid zoom range [{self.min_zoom}, {self.max_zoom}]")
        if not self.min_zoom <= self.default_zoom <= self.max_zoom:
            raise ValueError(f"Default zoom {self.default_zoom} outside zoom range")
        if not 1 <= self.min_iteration_count <= self.max_iteration_count:
            raise ValueError("Iteration bounds must satisfy 1 <= min <= max")
        if self.max_iteration_count > 2 ** 31 - 1:
            raise ValueError("Iteration counts must fit a 32-bit result buffer")
        if self.scaling_factor < 0:
            raise ValueError("Scaling factor must be non-negative")

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def clamp_zoom(self, zoom: float) -> float:
        if math.isnan(zoom):
            return self.default_zoom
        return max(self.min_zoom, min(self.max_zoom, zoom))

    def default_view(self) -> ViewState:
        return ViewState(self.default_center_real,
                         self.default_center_imaginary,
                         self.default_zoom)
