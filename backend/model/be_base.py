from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from backend.kernels import KernelSpec


@dataclass(frozen=True)
class CompiledKernel:
    """
    A built per-pixel kernel bound to one execution context.
    launch(buffer, width, height, max_iter, center_real, center_imag, zoom)
    enqueues width*height independent work units writing into buffer.
    """
    name: str
    backend: str
    launch: Callable[..., None]


class Backend(ABC):
    """
    Execution context of one accelerator: builds kernels, owns device
    buffers and the single queue/stream work is dispatched on.
    """
    name: str

    @abstractmethod
    def compile(self, spec: KernelSpec) -> CompiledKernel: ...

    @abstractmethod
    def allocate(self, size: int) -> Any: ...

    @abstractmethod
    def synchronize(self) -> None: ...

    @abstractmethod
    def copy_to_host(self, buffer: Any) -> np.ndarray: ...

    @abstractmethod
    def release(self, buffer: Any) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @contextmanager
    def device_buffer(self, size: int) -> Iterator[Any]:
        """
        Scoped int32 device buffer of `size` slots, released on every exit path.
        """
        buf = self.allocate(size)
        try:
            yield buf
        finally:
            self.release(buf)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
