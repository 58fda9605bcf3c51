import numpy as np
from typing import Any

from backend.errors import CompilationError
from backend.model.be_base import Backend, CompiledKernel
from kernel_sources.loader import load_kernel


class HostBackend(Backend):
    """
    Sequential in-process execution context running the same arithmetic as
    the device kernels. Used to verify engine behaviour without hardware;
    default discovery never selects it.
    """
    name = "HOST"

    def __init__(self):
        self.live_buffers = 0
        self.closed = False

    def compile(self, spec) -> CompiledKernel:
        meta = load_kernel(self.name, spec.fractal, spec.operation)
        try:
            kernel = meta["build"](spec.viewport_width, spec.viewport_height)
        except Exception as e:
            raise CompilationError(f"Host kernel build failed: {e}") from e

        def launch(buffer: Any, width: int, height: int, max_iter: int,
                   center_real: float, center_imag: float, zoom: float) -> None:
            kernel(buffer, np.int32(width), np.int32(height), np.int32(max_iter),
                   np.float64(center_real), np.float64(center_imag), np.float64(zoom))

        return CompiledKernel(name="mandelbrot_iter", backend=self.name, launch=launch)

    def allocate(self, size: int) -> Any:
        self.live_buffers += 1
        return np.zeros(int(size), dtype=np.int32)

    def synchronize(self) -> None:
        return None

    def copy_to_host(self, buffer: Any) -> np.ndarray:
        return buffer.copy()

    def release(self, buffer: Any) -> None:
        self.live_buffers -= 1

    def close(self) -> None:
        self.closed = True
