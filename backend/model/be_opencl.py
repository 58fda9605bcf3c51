import numpy as np
import pyopencl as cl
import logging
from typing import Any, Optional

from backend.errors import CompilationError
from backend.model.be_base import Backend, CompiledKernel
from kernel_sources.loader import load_kernel


logger = logging.getLogger(__name__)


class OpenClBackend(Backend):
    """
    Backend for OpenCL GPU devices.
    """
    name = "OPENCL"

    def __init__(self, device: cl.Device):
        self.device = device
        self.ctx: Optional[cl.Context] = cl.Context([self.device])
        self.queue: Optional[cl.CommandQueue] = cl.CommandQueue(self.ctx, self.device)

    def compile(self, spec) -> CompiledKernel:
        meta = load_kernel(self.name, spec.fractal, spec.operation)
        opts = meta["build_options"]
        if callable(opts):
            opts = opts(spec.viewport_width, spec.viewport_height)
        try:
            program = cl.Program(self.ctx, meta["src"]).build(options=list(opts))
            kernel = cl.Kernel(program, meta["kernel_name"])
        except Exception as e:
            raise CompilationError(f"OpenCL kernel build failed: {e}") from e

        def launch(buffer: Any, width: int, height: int, max_iter: int,
                   center_real: float, center_imag: float, zoom: float) -> None:
            n = int(width) * int(height)
            kernel.set_args(buffer, np.int32(width), np.int32(height), np.int32(max_iter),
                            np.float64(center_real), np.float64(center_imag), np.float64(zoom))
            cl.enqueue_nd_range_kernel(self.queue, kernel, (n,), None)

        return CompiledKernel(name=meta["kernel_name"], backend=self.name, launch=launch)

    def allocate(self, size: int) -> Any:
        nbytes = int(size) * np.dtype(np.int32).itemsize
        return cl.Buffer(self.ctx, cl.mem_flags.WRITE_ONLY, nbytes)

    def synchronize(self) -> None:
        self.queue.finish()

    def copy_to_host(self, buffer: Any) -> np.ndarray:
        n = buffer.size // np.dtype(np.int32).itemsize
        out = np.empty(n, dtype=np.int32)
        cl.enqueue_copy(self.queue, out, buffer, is_blocking=True)
        return out

    def release(self, buffer: Any) -> None:
        buffer.release()

    def close(self) -> None:
        if self.queue is not None:
            try:
                self.queue.finish()
            except Exception as e:
                logger.exception("Error finishing OpenCL queue during close: %s", e)
        self.queue = None
        self.ctx = None
