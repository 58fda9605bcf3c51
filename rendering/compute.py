from __future__ import annotations

import logging
import math
import threading
import time
from typing import Optional

import numpy as np

from backend.errors import CompilationError, ComputeError
from backend.kernels import KernelRegistry, KernelSpec
from devices.manager import AcceleratorManager
from fractals.base import ComplexBounds, EngineSettings
from fractals.iterations import IterationBudgetPolicy
from fractals.view_window import ViewWindowResolver
from rendering.results import (DeviceInfoReport, GenerateFailure,
                               GenerateResult, GenerateSuccess)

logger = logging.getLogger(__name__)


class ComputeEngine:
    """
    Orchestrates one escape-time request on the accelerator:
      - clamps zoom, derives the iteration budget and view window,
      - dispatches width*height independent work units,
      - waits once for all of them and copies the counts back.

    Failures never escape as exceptions; they come back as GenerateFailure.
    Device access is serialized per engine, so concurrent callers queue
    behind each other instead of interleaving buffer lifetimes.
    """

    def __init__(
        self,
        settings: EngineSettings,
        accelerators: AcceleratorManager,
        kernels: Optional[KernelRegistry] = None,
        *,
        budget_policy: Optional[IterationBudgetPolicy] = None,
        resolver: Optional[ViewWindowResolver] = None,
    ) -> None:
        self.settings = settings
        self.accelerators = accelerators
        if kernels is None and accelerators.is_available:
            # built on first request
            kernels = KernelRegistry(
                accelerators.backend,
                KernelSpec(settings.viewport_width, settings.viewport_height),
            )
        self.kernels = kernels
        self.budget_policy = budget_policy or IterationBudgetPolicy(settings)
        self.resolver = resolver or ViewWindowResolver(settings)
        self._lock = threading.Lock()

    # ---------------------------------------------------------------------
    # Public contract
    # ---------------------------------------------------------------------

    def generate(self, center_real: float, center_imaginary: float, zoom: float) -> GenerateResult:
        zoom = self.settings.clamp_zoom(float(zoom))
        budget = self.budget_policy.budget(zoom)

        if not self.accelerators.is_available:
            return GenerateFailure(error=self.accelerators.diagnostic, max_iterations=budget)

        if not (math.isfinite(center_real) and math.isfinite(center_imaginary)):
            return GenerateFailure(
                error=f"Center coordinates must be finite, got ({center_real}, {center_imaginary})",
                max_iterations=budget)

        bounds = self.resolver.resolve(center_real, center_imaginary, zoom)
        try:
            with self._lock:
                t0 = time.perf_counter()
                data = self._dispatch(budget, center_real, center_imaginary, zoom)
                elapsed_ms = int((time.perf_counter() - t0) * 1000.0)
        except CompilationError as e:
            logger.exception("On-demand kernel compilation failed")
            return GenerateFailure(error=str(e), max_iterations=budget)
        except Exception as e:
            logger.exception("GPU computation failed")
            return GenerateFailure(error=f"GPU computation failed: {e}", max_iterations=budget)

        logger.debug("Generated %dx%d at zoom %g (%d iterations) in %d ms",
                     self.settings.width, self.settings.height, zoom, budget, elapsed_ms)
        return self._success(data, budget, bounds, elapsed_ms,
                             center_real, center_imaginary, zoom)

    def device_info(self) -> DeviceInfoReport:
        acc = self.accelerators
        if not acc.is_available:
            return DeviceInfoReport(
                available=False,
                error=acc.diagnostic,
                status_message=acc.status_message(),
            )
        h = acc.identity
        return DeviceInfoReport(
            available=True,
            status_message=acc.status_message(),
            name=h.name,
            type=h.type_name,
            max_threads=h.max_threads,
            max_group_size=h.max_group_size,
            warp_size=h.warp_size,
            multiprocessor_count=h.multiprocessor_count,
            kernel_precompiled=self.kernels.is_precompiled if self.kernels else False,
        )

    # ---------------------------------------------------------------------
    # Device work
    # ---------------------------------------------------------------------

    def _dispatch(self, budget: int, center_real: float,
                  center_imaginary: float, zoom: float) -> np.ndarray:
        backend = self.accelerators.backend
        width, height = self.settings.width, self.settings.height
        n = self.settings.pixel_count

        with backend.device_buffer(n) as buf:
            kernel = self.kernels.try_get_precompiled() or self.kernels.compile_on_demand()
            kernel.launch(buf, width, height, budget, center_real, center_imaginary, zoom)
            backend.synchronize()
            data = backend.copy_to_host(buf)

        if data.shape != (n,):
            raise ComputeError(f"Device returned {data.size} results, expected {n}")
        return data

    def _success(self, data: np.ndarray, budget: int, bounds: ComplexBounds, elapsed_ms: int,
                 center_real: float, center_imaginary: float, zoom: float) -> GenerateSuccess:
        return GenerateSuccess(
            max_iterations=budget,
            data=data,
            compute_time_ms=elapsed_ms,
            accelerator_type=self.accelerators.device_type,
            accelerator_name=self.accelerators.device_name,
            bounds=bounds,
            center_real=center_real,
            center_imaginary=center_imaginary,
            zoom=zoom,
        )
