from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import numpy as np

from fractals.base import ComplexBounds


@dataclass(frozen=True)
class GenerateSuccess:
    """
    Iteration counts for the whole pixel grid, row-major (i = y * width + x).
    Center and zoom are the post-clamp values the device actually used.
    """
    max_iterations: int
    data: np.ndarray
    compute_time_ms: int
    accelerator_type: str
    accelerator_name: str
    bounds: ComplexBounds
    center_real: float
    center_imaginary: float
    zoom: float

    success = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "maxIterations": self.max_iterations,
            "data": self.data.tolist(),
            "computeTimeMs": self.compute_time_ms,
            "acceleratorType": self.accelerator_type,
            "acceleratorName": self.accelerator_name,
            "viewMinReal": self.bounds.min_real,
            "viewMaxReal": self.bounds.max_real,
            "viewMinImaginary": self.bounds.min_imag,
            "viewMaxImaginary": self.bounds.max_imag,
            "centerReal": self.center_real,
            "centerImaginary": self.center_imaginary,
            "zoom": self.zoom,
        }


@dataclass(frozen=True)
class GenerateFailure:
    """
    A request that produced no data. The budget is still reported.
    """
    error: str
    max_iterations: int

    success = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.error,
            "maxIterations": self.max_iterations,
        }


GenerateResult = Union[GenerateSuccess, GenerateFailure]


@dataclass(frozen=True)
class DeviceInfoReport:
    available: bool
    status_message: str
    name: Optional[str] = None
    type: Optional[str] = None
    max_threads: Optional[int] = None
    max_group_size: Optional[int] = None
    warp_size: Optional[int] = None
    multiprocessor_count: Optional[int] = None
    kernel_precompiled: Optional[bool] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "available": self.available,
            "statusMessage": self.status_message,
        }
        optional = {
            "name": self.name,
            "type": self.type,
            "maxThreads": self.max_threads,
            "maxGroupSize": self.max_group_size,
            "warpSize": self.warp_size,
            "multiprocessorCount": self.multiprocessor_count,
            "kernelPrecompiled": self.kernel_precompiled,
            "error": self.error,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        return out
