from __future__ import annotations
import logging
from typing import Iterable, List, Optional, Protocol

from backend.model.be_base import Backend
from devices.types import AcceleratorHandle
from devices.providers.prov_cuda import CudaDeviceProvider
from devices.providers.prov_opencl import OpenClDeviceProvider
from utils.enums import AcceleratorType, GPU_CLASSES

logger = logging.getLogger(__name__)

DEFAULT_DIAGNOSTIC = "GPU accelerator not available"
NO_DEVICE_DIAGNOSTIC = ("No GPU accelerator detected. "
                        "GPU acceleration is required for Mandelbrot computation.")


class DeviceProvider(Protocol):
    accelerator_type: AcceleratorType

    def enumerate(self) -> List[AcceleratorHandle]: ...

    def open(self, handle: AcceleratorHandle) -> Backend: ...


class AcceleratorManager:
    """
    Discovers and owns the compute device for the process lifetime.

    Discovery runs once, from the constructor, and never raises: when no
    device can be used the manager is simply unavailable and carries a
    human-readable diagnostic. There is no re-discovery path; a device that
    becomes unusable later requires a process restart.
    """
    def __init__(
        self,
        providers: Optional[List[DeviceProvider]] = None,
        accepted_types: Iterable[AcceleratorType] = GPU_CLASSES,
    ) -> None:
        self.providers = providers if providers is not None else [CudaDeviceProvider(), OpenClDeviceProvider()]
        self.accepted_types = frozenset(accepted_types)
        self._identity: Optional[AcceleratorHandle] = None
        self._backend: Optional[Backend] = None
        self._error: Optional[str] = None
        self._discover()

    # ---- Discovery ------------------------------------------------------

    def _discover(self) -> None:
        detection_error: Optional[str] = None
        for p in self.providers:
            kind = p.accelerator_type.name
            try:
                handles = p.enumerate()
            except Exception as e:
                logger.exception("Error during %s device detection", kind)
                detection_error = f"Error during {kind} device detection: {e}"
                continue

            for h in handles:
                if h.accelerator_type not in self.accepted_types:
                    continue
                logger.info("Found %s device: %s", kind, h.name)
                try:
                    self._backend = p.open(h)
                except Exception as e:
                    logger.exception("%s device initialization failed", kind)
                    self._error = f"{kind} device '{h.name}' found but failed to initialize: {e}"
                    return
                self._identity = h
                logger.info("Initialized %s accelerator: %s", kind, h.name)
                return

        self._error = detection_error or NO_DEVICE_DIAGNOSTIC
        logger.warning("No usable accelerator: %s", self._error)

    # ---- Status ---------------------------------------------------------

    @property
    def is_available(self) -> bool:
        return self._backend is not None

    @property
    def identity(self) -> Optional[AcceleratorHandle]:
        return self._identity

    @property
    def backend(self) -> Optional[Backend]:
        return self._backend

    @property
    def device_name(self) -> str:
        return self._identity.name if self._identity else "No Device"

    @property
    def device_type(self) -> str:
        return self._identity.type_name if self._identity else "None"

    @property
    def error_message(self) -> Optional[str]:
        return self._error

    @property
    def diagnostic(self) -> str:
        return self._error or DEFAULT_DIAGNOSTIC

    def status_message(self) -> str:
        if self.is_available:
            return f"{self.device_type} device available: {self.device_name}"
        return self.diagnostic

    # ---- Lifecycle ------------------------------------------------------

    def close(self) -> None:
        """
        Releases the execution context at process shutdown.
        """
        if self._backend is not None:
            try:
                self._backend.close()
            except Exception:
                logger.exception("Error closing %s backend", self.device_type)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
