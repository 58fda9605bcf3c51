from __future__ import annotations
from typing import Dict, Any, List

# Nested dict: [fractal][op_name][backend] -> meta
_REGISTRY: Dict[str, Dict[str, Dict[str, Dict[str, Any]]]] = {}

def register_kernel(fractal: str, op_name: str, backend: str, **meta: Any) -> None:
    """
    Register kernel metadata for a given fractal, operation and backend.
    Example:
        register_kernel("mandelbrot", "iter", "CUDA", build=make_kernel, arg_order=[...])
    """
    _REGISTRY.setdefault(fractal, {}).setdefault(op_name, {})[backend.upper()] = meta

def load_kernel(backend: str, fractal: str, op_name: str) -> Dict[str, Any]:
    """
    Load kernel metadata from the registry for the given parameters.
    Raises KeyError if not found.
    """
    be = backend.upper()
    try:
        meta = _REGISTRY[fractal][op_name][be]
    except KeyError as e:
        raise KeyError(f"Kernel not found for fractal='{fractal}', op='{op_name}', backend='{be}'") from e
    return meta

def list_kernels(fractal: str, backend: str) -> List[str]:
    """
    List all registered operation names for the given fractal and backend.
    """
    be = backend.upper()
    if fractal not in _REGISTRY:
        return []
    return sorted(op for op, backends in _REGISTRY[fractal].items() if be in backends)
