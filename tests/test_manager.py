from devices.manager import AcceleratorManager, DEFAULT_DIAGNOSTIC, NO_DEVICE_DIAGNOSTIC
from utils.enums import AcceleratorType

from tests.conftest import (BrokenDetectionProvider, EmptyProvider,
                            FailingOpenProvider, HostProvider, HOST_HANDLE)


HOST_ONLY = {AcceleratorType.HOST}


def test_available_device(host_manager, host_provider):
    assert host_manager.is_available
    assert host_manager.identity == HOST_HANDLE
    assert host_manager.backend is host_provider.backend
    assert host_manager.device_name == "Reference Host"
    assert host_manager.device_type == "HOST"
    assert host_manager.error_message is None
    assert host_manager.diagnostic == DEFAULT_DIAGNOSTIC
    assert host_manager.status_message() == "HOST device available: Reference Host"
    assert host_provider.opened == 1


def test_no_device_is_reported_not_raised():
    m = AcceleratorManager(providers=[EmptyProvider()])
    assert not m.is_available
    assert m.identity is None
    assert m.backend is None
    assert m.device_name == "No Device"
    assert m.device_type == "None"
    assert m.diagnostic == NO_DEVICE_DIAGNOSTIC
    assert m.status_message() == NO_DEVICE_DIAGNOSTIC


def test_no_providers():
    m = AcceleratorManager(providers=[])
    assert not m.is_available
    assert m.error_message == NO_DEVICE_DIAGNOSTIC


def test_host_is_not_accepted_by_default():
    provider = HostProvider()
    m = AcceleratorManager(providers=[provider])
    assert not m.is_available
    assert provider.opened == 0


def test_detection_error_is_the_diagnostic():
    m = AcceleratorManager(providers=[BrokenDetectionProvider()])
    assert not m.is_available
    assert m.diagnostic == "Error during OPENCL device detection: driver exploded"


def test_detection_error_falls_through_to_next_provider():
    provider = HostProvider()
    m = AcceleratorManager(providers=[BrokenDetectionProvider(), provider],
                           accepted_types=HOST_ONLY)
    assert m.is_available
    assert m.error_message is None


def test_context_failure_stops_discovery():
    provider = HostProvider()
    m = AcceleratorManager(providers=[FailingOpenProvider(), provider],
                           accepted_types={AcceleratorType.CUDA, AcceleratorType.HOST})
    assert not m.is_available
    assert "Fake GPU" in m.diagnostic
    assert "found but failed to initialize: context creation failed" in m.diagnostic
    assert provider.opened == 0


def test_close_releases_backend(host_manager, host_provider):
    assert not host_provider.backend.closed
    with host_manager:
        pass
    assert host_provider.backend.closed
