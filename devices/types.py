from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Dict

from utils.enums import AcceleratorType

@dataclass(frozen=True)
class AcceleratorHandle:
    """
    Identity and capability descriptor of a compute device.
    Immutable once acquired.
    """
    accelerator_type: AcceleratorType
    device_id: Optional[int]
    name: str
    vendor: Optional[str] = None
    max_threads: Optional[int] = None
    max_group_size: Optional[int] = None
    warp_size: Optional[int] = None
    multiprocessor_count: Optional[int] = None
    compute_capability: Optional[str] = None
    memory_total_mb: Optional[int] = None
    extra: Dict[str, object] = field(default_factory=dict)

    @property
    def type_name(self) -> str:
        return self.accelerator_type.name
