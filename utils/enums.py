from enum import Enum, auto

class AcceleratorType(Enum):
    CUDA = auto()
    OPENCL = auto()
    HOST = auto()

# Accelerator classes accepted by default discovery (the host is never one)
GPU_CLASSES = frozenset({AcceleratorType.CUDA, AcceleratorType.OPENCL})
