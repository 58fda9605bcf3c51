from typing import Tuple

from fractals.base import ComplexBounds, EngineSettings, ViewState
from utils.coords import pixel_to_complex, window_bounds


class ZoomLimitError(ValueError):
    """Zooming further would exceed the configured maximum zoom."""


class ViewWindowResolver:
    """
    Derives the visible complex-plane window from a center and zoom.

    The arithmetic lives in utils.coords and is compiled unchanged into every
    kernel, so the bounds reported here match the pixels the device computes.
    """
    def __init__(self, settings: EngineSettings):
        self.settings = settings

    def resolve(self, center_real: float, center_imaginary: float, zoom: float) -> ComplexBounds:
        return ComplexBounds(*window_bounds(center_real, center_imaginary, zoom,
                                            self.settings.viewport_width,
                                            self.settings.viewport_height))

    def resolve_view(self, view: ViewState) -> ComplexBounds:
        return self.resolve(view.center_real, view.center_imaginary, view.zoom)

    def pixel_to_complex(self, bounds: ComplexBounds, x: float, y: float) -> Tuple[float, float]:
        """
        Complex coordinate of grid pixel (x, y), using the per-pixel kernel formula.
        """
        return pixel_to_complex(x, y, self.settings.width, self.settings.height,
                                bounds.min_real, bounds.max_real,
                                bounds.min_imag, bounds.max_imag)

    def zoom_at(self, view: ViewState, x: float, y: float, factor: float = 2.0) -> ViewState:
        """
        Click-to-zoom: recenter on pixel (x, y) of the current view and
        multiply the zoom by `factor`.

        Raises:
            ZoomLimitError: the new zoom would exceed the configured maximum.
        """
        if factor <= 0:
            raise ValueError(f"Zoom factor must be positive, got {factor}")
        new_zoom = view.zoom * factor
        if new_zoom > self.settings.max_zoom:
            raise ZoomLimitError(f"Maximum zoom level reached ({self.settings.max_zoom}x)")
        real, imag = self.pixel_to_complex(self.resolve_view(view), x, y)
        return ViewState(real, imag, self.settings.clamp_zoom(new_zoom))

    def default_view(self) -> ViewState:
        return self.settings.default_view()
