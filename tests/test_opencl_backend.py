import pytest

cl = pytest.importorskip("pyopencl")

from api.engine_api import EngineConfigBuilder, create_engine
from backend.model.be_opencl import OpenClBackend
from devices.manager import AcceleratorManager
from devices.types import AcceleratorHandle
from kernel_sources.common.escape import escape_time
from utils.coords import index_to_pixel
from utils.enums import AcceleratorType


def _fp64_device():
    try:
        platforms = cl.get_platforms()
    except cl.Error:
        return None
    for platform in platforms:
        for device in platform.get_devices():
            if device.double_fp_config:
                return device
    return None


DEVICE = _fp64_device()
pytestmark = pytest.mark.skipif(DEVICE is None, reason="no OpenCL device with fp64")


class SingleDeviceProvider:
    accelerator_type = AcceleratorType.OPENCL

    def enumerate(self):
        return [AcceleratorHandle(AcceleratorType.OPENCL, 0, DEVICE.name.strip())]

    def open(self, handle):
        return OpenClBackend(DEVICE)


def test_opencl_kernel_matches_reported_bounds():
    settings = (EngineConfigBuilder().grid(9, 7)
                .iterations(base=40, maximum=200, scaling_factor=10.0).build())
    manager = AcceleratorManager(providers=[SingleDeviceProvider()],
                                 accepted_types={AcceleratorType.OPENCL})
    engine = create_engine(settings, accelerators=manager)
    assert engine.kernels.is_precompiled

    for zoom in (1.0, 6.0):
        res = engine.generate(-0.6, 0.2, zoom)
        assert res.success, res
        assert res.accelerator_type == "OPENCL"
        for i, count in enumerate(res.data):
            x, y = index_to_pixel(i, 9)
            real, imag = engine.resolver.pixel_to_complex(res.bounds, x, y)
            assert count == escape_time(real, imag, res.max_iterations)
    manager.close()
