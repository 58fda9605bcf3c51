import logging

import pytest

from backend.errors import CompilationError
from backend.kernels import KernelRegistry, KernelSpec, NOT_BUILT
from backend.model.be_base import CompiledKernel
from backend.model.be_host import HostBackend


SPEC = KernelSpec(viewport_width=3.5, viewport_height=2.5)


class CountingBackend(HostBackend):
    """Host backend whose first `failures` builds fail."""
    def __init__(self, failures=0, error=CompilationError("nvvm said no")):
        super().__init__()
        self.failures = failures
        self.error = error
        self.builds = 0

    def compile(self, spec):
        self.builds += 1
        if self.failures > 0:
            self.failures -= 1
            raise self.error
        return CompiledKernel(name="fake", backend=self.name, launch=lambda *args: None)


def test_starts_not_built():
    reg = KernelRegistry(CountingBackend(), SPEC)
    assert reg.try_get_precompiled() is None
    assert not reg.is_precompiled
    assert repr(NOT_BUILT) == "NOT_BUILT"


def test_precompile_caches_the_kernel():
    be = CountingBackend()
    reg = KernelRegistry(be, SPEC)
    assert reg.precompile()
    kernel = reg.try_get_precompiled()
    assert kernel is not None
    assert reg.compile_on_demand() is kernel
    assert be.builds == 1


def test_failed_precompile_defers_to_first_use(caplog):
    be = CountingBackend(failures=1)
    reg = KernelRegistry(be, SPEC)
    with caplog.at_level(logging.ERROR, logger="backend.kernels"):
        assert not reg.precompile()
    assert "pre-compile" in caplog.text
    assert reg.try_get_precompiled() is None

    kernel = reg.compile_on_demand()
    assert reg.try_get_precompiled() is kernel
    assert be.builds == 2


def test_on_demand_failure_raises_compilation_error():
    reg = KernelRegistry(CountingBackend(failures=2), SPEC)
    reg.precompile()
    with pytest.raises(CompilationError, match="nvvm said no"):
        reg.compile_on_demand()


def test_unexpected_build_errors_are_wrapped():
    reg = KernelRegistry(CountingBackend(failures=1, error=OSError("no libnvvm")), SPEC)
    with pytest.raises(CompilationError, match="HOST kernel build failed: no libnvvm"):
        reg.compile_on_demand()


def test_invalidate_forces_rebuild():
    be = CountingBackend()
    reg = KernelRegistry(be, SPEC)
    first = reg.compile_on_demand()
    reg.invalidate()
    assert reg.try_get_precompiled() is None
    second = reg.compile_on_demand()
    assert second is not first
    assert be.builds == 2


def test_host_backend_builds_real_kernel():
    reg = KernelRegistry(HostBackend(), SPEC)
    kernel = reg.compile_on_demand()
    assert kernel.backend == "HOST"
    assert kernel.name == "mandelbrot_iter"


def test_registered_operations_per_backend():
    from kernel_sources import list_kernels, load_kernel as load_meta
    for backend in ("HOST", "OPENCL"):
        load_meta(backend, "mandelbrot", "iter")
        assert list_kernels("mandelbrot", backend) == ["iter"]
    assert list_kernels("julia", "HOST") == []
