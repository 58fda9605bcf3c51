import numpy as np
from typing import Any, Optional
from numba import config, cuda
import logging

from backend.errors import CompilationError
from backend.model.be_base import Backend, CompiledKernel
from kernel_sources.loader import load_kernel


logger = logging.getLogger(__name__)


class CudaBackend(Backend):
    """
    Backend for CUDA devices driven through numba.cuda.
    """
    name = "CUDA"

    def __init__(self, device: Optional[int] = None):
        if not cuda.is_available():
            raise RuntimeError("CUDA not available")
        self.device_id = int(device or 0)
        # Creates (or retains) the primary context of the device
        self._gpu = cuda.gpus[self.device_id]
        with self._gpu:
            self.stream = cuda.stream()
        self.threads_per_block = 256

    # ------ compilation --------
    def compile(self, spec) -> CompiledKernel:
        meta = load_kernel(self.name, spec.fractal, spec.operation)
        try:
            with self._gpu:
                kernel = meta["build"](spec.viewport_width, spec.viewport_height)
        except Exception as e:
            raise CompilationError(f"CUDA kernel build failed: {e}") from e
        threads = int(meta.get("block") or self.threads_per_block)

        def launch(buffer: Any, width: int, height: int, max_iter: int,
                   center_real: float, center_imag: float, zoom: float) -> None:
            n = int(width) * int(height)
            blocks = (n + threads - 1) // threads
            with self._gpu:
                kernel[blocks, threads, self.stream](
                    buffer, np.int32(width), np.int32(height), np.int32(max_iter),
                    np.float64(center_real), np.float64(center_imag), np.float64(zoom))

        return CompiledKernel(name="mandelbrot_iter", backend=self.name, launch=launch)

    # ------ buffers --------
    def allocate(self, size: int) -> Any:
        with self._gpu:
            return cuda.device_array(int(size), dtype=np.int32, stream=self.stream)

    def synchronize(self) -> None:
        with self._gpu:
            self.stream.synchronize()

    def copy_to_host(self, buffer: Any) -> np.ndarray:
        with self._gpu:
            out = buffer.copy_to_host(stream=self.stream)
            self.stream.synchronize()
        return out

    def release(self, buffer: Any) -> None:
        if config.ENABLE_CUDASIM:
            # simulated arrays are plain host memory
            return
        with self._gpu:
            # the caller may still reference the array; free it regardless
            buffer.gpu_data.free()
            cuda.current_context().deallocations.clear()

    def close(self) -> None:
        if self.stream is not None:
            try:
                with self._gpu:
                    self.stream.synchronize()
            except Exception:
                logger.exception("Error in closing CUDA stream")
        self.stream = None
