from __future__ import annotations
from typing import List, Dict, Tuple
import logging

from devices.types import AcceleratorHandle
from utils.enums import AcceleratorType

logger = logging.getLogger(__name__)


class OpenClDeviceProvider:
    accelerator_type = AcceleratorType.OPENCL

    def __init__(self) -> None:
        # ordinal -> pyopencl device, kept so open() binds the enumerated device
        self._devices: Dict[int, object] = {}

    def enumerate(self) -> List[AcceleratorHandle]:
        """
        Enumerate pyopencl platforms and return GPU devices with FP64 support.
        """
        import pyopencl as cl

        devs: List[AcceleratorHandle] = []
        ordinal = 0
        for p in cl.get_platforms():
            try:
                gpus = p.get_devices(device_type=cl.device_type.GPU)
            except cl.Error:
                # platform without GPU devices
                gpus = []
            for d in gpus:
                if not getattr(d, "double_fp_config", 0):
                    logger.info("Skipping OpenCL device %s: no FP64 support", d.name)
                    continue
                group = int(getattr(d, "max_work_group_size", 0)) or None
                units = int(getattr(d, "max_compute_units", 0)) or None
                warp, extra = self._warp_size(d)
                devs.append(AcceleratorHandle(
                    accelerator_type=AcceleratorType.OPENCL,
                    device_id=ordinal,
                    name=(d.name or f"OpenCL Device {ordinal}").strip(),
                    vendor=getattr(d, "vendor", None),
                    max_threads=group * units if group and units else None,
                    max_group_size=group,
                    warp_size=warp,
                    multiprocessor_count=units,
                    compute_capability=getattr(d, "version", None),
                    memory_total_mb=int(getattr(d, "global_mem_size", 0) // (1024 ** 2)),
                    extra=extra,
                ))
                self._devices[ordinal] = d
                ordinal += 1
        return devs

    @staticmethod
    def _warp_size(d) -> Tuple[int | None, dict]:
        # vendor extensions: NVIDIA warp, AMD wavefront
        for attr in ("warp_size_nv", "wavefront_width_amd"):
            try:
                return int(getattr(d, attr)), {"warp_source": attr}
            except Exception:
                continue
        return None, {}

    def open(self, handle: AcceleratorHandle):
        from backend.model.be_opencl import OpenClBackend
        try:
            device = self._devices[handle.device_id]
        except KeyError:
            raise RuntimeError(f"No OpenCL device with ordinal {handle.device_id} found.")
        return OpenClBackend(device)
