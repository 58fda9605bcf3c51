from __future__ import annotations
from typing import List
import logging

from devices.types import AcceleratorHandle
from utils.enums import AcceleratorType

logger = logging.getLogger(__name__)


def _attr(dev, name: str):
    try:
        return int(getattr(dev, name))
    except Exception:
        return None


class CudaDeviceProvider:
    accelerator_type = AcceleratorType.CUDA

    @staticmethod
    def enumerate() -> List[AcceleratorHandle]:
        """
        Enumerate CUDA devices via numba.cuda. Returns an empty list when the
        driver reports no CUDA support; other detection failures propagate so the
        manager can report them.
        """
        from numba import cuda

        if not cuda.is_available():
            logger.info("No CUDA driver or device present")
            return []

        devs: List[AcceleratorHandle] = []
        for d in cuda.list_devices():
            name = d.name.decode("utf-8") if isinstance(d.name, bytes) else str(d.name)
            per_sm = _attr(d, "MAX_THREADS_PER_MULTI_PROCESSOR")
            sm_count = _attr(d, "MULTIPROCESSOR_COUNT")
            try:
                cc = d.compute_capability
                compute_capability = f"{cc[0]}.{cc[1]}"
            except Exception:
                compute_capability = None
            devs.append(AcceleratorHandle(
                accelerator_type=AcceleratorType.CUDA,
                device_id=int(d.id),
                name=name,
                vendor="NVIDIA",
                max_threads=per_sm * sm_count if per_sm and sm_count else None,
                max_group_size=_attr(d, "MAX_THREADS_PER_BLOCK"),
                warp_size=_attr(d, "WARP_SIZE"),
                multiprocessor_count=sm_count,
                compute_capability=compute_capability,
            ))
        return devs

    @staticmethod
    def open(handle: AcceleratorHandle):
        from backend.model.be_cuda import CudaBackend
        return CudaBackend(device=handle.device_id)
