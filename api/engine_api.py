from dataclasses import replace
from typing import Any, Dict, List, Optional

from backend.kernels import KernelRegistry, KernelSpec
from devices.manager import AcceleratorManager, DeviceProvider
from fractals.base import EngineSettings
from rendering.compute import ComputeEngine


class EngineConfigBuilder:
    """
    Fluent builder for EngineSettings.
    """
    def __init__(self, base: Optional[EngineSettings] = None):
        self._base = base or EngineSettings()
        self._changes: Dict[str, Any] = {}

    def resolution(self, preset: str) -> 'EngineConfigBuilder':
        w, h = self._compute_size(preset)
        return self.grid(w, h)

    def grid(self, width: int, height: int) -> 'EngineConfigBuilder':
        self._changes.update(width=int(width), height=int(height))
        return self

    def viewport(self, width: float, height: float) -> 'EngineConfigBuilder':
        self._changes.update(viewport_width=float(width), viewport_height=float(height))
        return self

    def default_view(self, center_real: float, center_imaginary: float, zoom: float = 1.0) -> 'EngineConfigBuilder':
        self._changes.update(default_center_real=float(center_real),
                             default_center_imaginary=float(center_imaginary),
                             default_zoom=float(zoom))
        return self

    def iterations(self, base: int, maximum: int, scaling_factor: float,
                   minimum: Optional[int] = None) -> 'EngineConfigBuilder':
        """
        The minimum defaults to the base count.
        """
        self._changes.update(base_iteration_count=int(base),
                             min_iteration_count=int(base if minimum is None else minimum),
                             max_iteration_count=int(maximum),
                             scaling_factor=float(scaling_factor))
        return self

    def zoom_range(self, minimum: float, maximum: float) -> 'EngineConfigBuilder':
        self._changes.update(min_zoom=float(minimum), max_zoom=float(maximum))
        return self

    def build(self) -> EngineSettings:
        return replace(self._base, **self._changes)

    @staticmethod
    def _compute_size(preset: str) -> tuple[int, int]:
        mapping = {
            "2160p": 3840,
            "1440p": 2560,
            "1080p": 1920,
            "768p": 1024,
            "720p": 1280,
            "480p": 854,
            "360p": 640,
        }
        if preset not in mapping:
            raise ValueError(f"Unknown resolution preset '{preset}'")
        return mapping[preset], int(preset.replace("p", ""))


def create_engine(
    settings: Optional[EngineSettings] = None,
    providers: Optional[List[DeviceProvider]] = None,
    accelerators: Optional[AcceleratorManager] = None,
) -> ComputeEngine:
    """
    Composition root: discover the accelerator once, eagerly build the
    kernel when a device is available, and wire the engine.
    """
    settings = settings or EngineSettings()
    accelerators = accelerators or AcceleratorManager(providers=providers)
    kernels = None
    if accelerators.is_available:
        kernels = KernelRegistry(
            accelerators.backend,
            KernelSpec(settings.viewport_width, settings.viewport_height),
        )
        kernels.precompile()
    return ComputeEngine(settings, accelerators, kernels)


class MandelbrotAPI:
    """
    Facade for the request-handling layer. Returns plain dict payloads in the
    public camelCase shape; each call is expected to run on the caller's own
    worker thread.
    """
    def __init__(self, engine: ComputeEngine):
        self.engine: ComputeEngine = engine

    @classmethod
    def from_settings(cls, settings: Optional[EngineSettings] = None,
                      providers: Optional[List[DeviceProvider]] = None) -> 'MandelbrotAPI':
        return cls(create_engine(settings, providers))

    def generate(self,
                 center_real: Optional[float] = None,
                 center_imaginary: Optional[float] = None,
                 zoom: Optional[float] = None) -> Dict[str, Any]:
        """
        Computes iteration counts for the configured grid.

        Args:
            center_real (float): Real part of the view center (default from settings).
            center_imaginary (float): Imaginary part of the view center.
            zoom (float): Zoom factor; clamped to the configured range.
        """
        view = self.engine.settings.default_view()
        result = self.engine.generate(
            view.center_real if center_real is None else center_real,
            view.center_imaginary if center_imaginary is None else center_imaginary,
            view.zoom if zoom is None else zoom,
        )
        return result.to_dict()

    def device_info(self) -> Dict[str, Any]:
        return self.engine.device_info().to_dict()

    def close(self) -> None:
        self.engine.accelerators.close()
