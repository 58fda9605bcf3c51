import pytest

from api.engine_api import EngineConfigBuilder, MandelbrotAPI, create_engine
from devices.manager import NO_DEVICE_DIAGNOSTIC
from fractals.base import EngineSettings

from tests.conftest import EmptyProvider


SUCCESS_KEYS = {
    "success", "maxIterations", "data", "computeTimeMs",
    "acceleratorType", "acceleratorName",
    "viewMinReal", "viewMaxReal", "viewMinImaginary", "viewMaxImaginary",
    "centerReal", "centerImaginary", "zoom",
}


@pytest.fixture
def api(host_engine):
    return MandelbrotAPI(host_engine)


def test_generate_payload(api, small_settings):
    out = api.generate(-0.5, 0.0, 2.0)
    assert set(out) == SUCCESS_KEYS
    assert out["success"] is True
    assert out["maxIterations"] == 75
    assert len(out["data"]) == small_settings.pixel_count
    assert all(isinstance(v, int) for v in out["data"])
    assert out["viewMinReal"] == pytest.approx(-0.5 - 3.5 / 4)
    assert out["viewMaxImaginary"] == pytest.approx(2.5 / 4)
    assert out["acceleratorType"] == "HOST"


def test_generate_uses_default_view(api):
    out = api.generate()
    assert out["centerReal"] == -0.5
    assert out["centerImaginary"] == 0.0
    assert out["zoom"] == 1.0
    assert out["maxIterations"] == 50


def test_failure_payload(small_settings):
    api = MandelbrotAPI(create_engine(small_settings, providers=[EmptyProvider()]))
    out = api.generate(-0.5, 0.0, 1.0)
    assert out == {"success": False, "error": NO_DEVICE_DIAGNOSTIC, "maxIterations": 50}


def test_device_info_payload(api):
    info = api.device_info()
    assert info["available"] is True
    assert info["name"] == "Reference Host"
    assert info["type"] == "HOST"
    assert info["kernelPrecompiled"] is True
    assert info["warpSize"] == 1
    assert "error" not in info


def test_device_info_payload_unavailable(small_settings):
    api = MandelbrotAPI.from_settings(small_settings, providers=[EmptyProvider()])
    info = api.device_info()
    assert info == {
        "available": False,
        "statusMessage": NO_DEVICE_DIAGNOSTIC,
        "error": NO_DEVICE_DIAGNOSTIC,
    }
    assert "name" not in info


def test_close_releases_backend(api, host_provider):
    api.generate()
    assert host_provider.backend.live_buffers == 0
    assert not host_provider.backend.closed
    api.close()
    assert host_provider.backend.closed


def test_builder_presets():
    s = EngineConfigBuilder().resolution("1080p").build()
    assert (s.width, s.height) == (1920, 1080)
    s = EngineConfigBuilder().resolution("768p").build()
    assert (s.width, s.height) == (1024, 768)


def test_builder_unknown_preset():
    with pytest.raises(ValueError):
        EngineConfigBuilder().resolution("999p")


def test_builder_minimum_defaults_to_base():
    s = EngineConfigBuilder().iterations(base=200, maximum=1000, scaling_factor=10.0).build()
    assert s.min_iteration_count == 200
    s = EngineConfigBuilder().iterations(200, 1000, 10.0, minimum=20).build()
    assert s.min_iteration_count == 20


def test_builder_keeps_base_values():
    base = EngineSettings(width=64, height=48)
    s = EngineConfigBuilder(base).viewport(3.0, 2.0).build()
    assert (s.width, s.height) == (64, 48)
    assert (s.viewport_width, s.viewport_height) == (3.0, 2.0)


def test_default_settings():
    s = EngineSettings()
    assert (s.width, s.height) == (1024, 768)
    assert (s.viewport_width, s.viewport_height) == (3.5, 2.5)
    assert s.base_iteration_count == 100000
    assert s.max_iteration_count == 10000000
    assert (s.min_zoom, s.max_zoom) == (0.1, 1e6)


@pytest.mark.parametrize("kwargs", [
    dict(width=0),
    dict(height=-1),
    dict(min_zoom=0.0),
    dict(min_zoom=10.0, max_zoom=1.0),
    dict(viewport_width=0.0),
    dict(min_iteration_count=500, max_iteration_count=100),
    dict(max_iteration_count=2 ** 31),
    dict(scaling_factor=-1.0),
])
def test_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        EngineSettings(**kwargs)
