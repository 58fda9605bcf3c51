from __future__ import annotations
import logging
import threading
from dataclasses import dataclass
from typing import Optional, Union

from backend.errors import CompilationError
from backend.model.be_base import Backend, CompiledKernel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KernelSpec:
    """
    What to build: the registered (fractal, operation) kernel, with the
    viewport extent baked in at build time.
    """
    viewport_width: float
    viewport_height: float
    fractal: str = "mandelbrot"
    operation: str = "iter"


class _NotBuilt:
    def __repr__(self) -> str:
        return "NOT_BUILT"


NOT_BUILT = _NotBuilt()


class KernelRegistry:
    """
    Owns the compiled per-pixel kernel of one execution context.

    The cache holds either a ready kernel or NOT_BUILT. An eager build is
    attempted right after the device becomes available; if it fails the
    first request builds on demand instead. A successful build is kept until
    invalidate() is called.
    """
    def __init__(self, backend: Backend, spec: KernelSpec):
        self.backend = backend
        self.spec = spec
        self._cached: Union[CompiledKernel, _NotBuilt] = NOT_BUILT
        self._lock = threading.Lock()

    @property
    def is_precompiled(self) -> bool:
        return self._cached is not NOT_BUILT

    def compile(self) -> CompiledKernel:
        """
        Build a fresh kernel for the backend. Raises CompilationError.
        """
        try:
            return self.backend.compile(self.spec)
        except CompilationError:
            raise
        except Exception as e:
            raise CompilationError(f"{self.backend.name} kernel build failed: {e}") from e

    def precompile(self) -> bool:
        """
        Eager build. Failure is logged and deferred to the first request.
        """
        try:
            self.compile_on_demand()
        except CompilationError:
            logger.exception("Failed to pre-compile Mandelbrot kernel; will compile on demand")
            return False
        logger.info("Pre-compiled %s kernel on %s", self.spec.operation, self.backend.name)
        return True

    def try_get_precompiled(self) -> Optional[CompiledKernel]:
        cached = self._cached
        return None if cached is NOT_BUILT else cached

    def compile_on_demand(self) -> CompiledKernel:
        with self._lock:
            if self._cached is NOT_BUILT:
                self._cached = self.compile()
            return self._cached

    def invalidate(self) -> None:
        with self._lock:
            self._cached = NOT_BUILT
