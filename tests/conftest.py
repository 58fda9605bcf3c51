import pytest

from api.engine_api import EngineConfigBuilder, create_engine
from backend.model.be_host import HostBackend
from devices.manager import AcceleratorManager
from devices.types import AcceleratorHandle
from utils.enums import AcceleratorType


HOST_HANDLE = AcceleratorHandle(
    accelerator_type=AcceleratorType.HOST,
    device_id=0,
    name="Reference Host",
    vendor="test",
    max_threads=1,
    max_group_size=1,
    warp_size=1,
    multiprocessor_count=1,
)


class HostProvider:
    """Provider that hands out the sequential host backend."""
    accelerator_type = AcceleratorType.HOST

    def __init__(self, backend=None):
        self.backend = backend or HostBackend()
        self.opened = 0

    def enumerate(self):
        return [HOST_HANDLE]

    def open(self, handle):
        self.opened += 1
        return self.backend


class EmptyProvider:
    accelerator_type = AcceleratorType.CUDA

    def enumerate(self):
        return []

    def open(self, handle):
        raise AssertionError("open() must not be called without devices")


class BrokenDetectionProvider:
    accelerator_type = AcceleratorType.OPENCL

    def enumerate(self):
        raise RuntimeError("driver exploded")

    def open(self, handle):
        raise AssertionError("unreachable")


class FailingOpenProvider:
    accelerator_type = AcceleratorType.CUDA

    def enumerate(self):
        return [AcceleratorHandle(AcceleratorType.CUDA, 0, "Fake GPU"),
                AcceleratorHandle(AcceleratorType.CUDA, 1, "Second GPU")]

    def open(self, handle):
        raise RuntimeError("context creation failed")


@pytest.fixture
def small_settings():
    return (EngineConfigBuilder()
            .grid(16, 12)
            .iterations(base=50, maximum=400, scaling_factor=25.0)
            .build())


@pytest.fixture
def host_provider():
    return HostProvider()


@pytest.fixture
def host_manager(host_provider):
    return AcceleratorManager(providers=[host_provider],
                              accepted_types={AcceleratorType.HOST})


@pytest.fixture
def host_engine(small_settings, host_manager):
    return create_engine(small_settings, accelerators=host_manager)


@pytest.fixture
def unavailable_engine(small_settings):
    return create_engine(small_settings, providers=[EmptyProvider()])
