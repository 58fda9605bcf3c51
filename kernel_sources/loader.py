from __future__ import annotations
import importlib
from typing import Dict, Any

from kernel_sources.registry import load_kernel as load_registered


KERNEL_ROOT = "kernel_sources"

def _module_name(backend: str, fractal: str, operation: str) -> str:
    return f"{KERNEL_ROOT}.{backend.lower()}.{fractal.lower()}.{operation.lower()}"

def load_kernel(backend: str, fractal: str, operation: str) -> Dict[str, Any]:
    """
    Import the kernel module by convention (it registers itself on import)
    and return its validated metadata.
    """
    importlib.import_module(_module_name(backend, fractal, operation))
    meta = load_registered(backend, fractal, operation)
    _validate_meta(backend, meta, f"registry[{fractal}.{operation}:{backend}]")
    return meta

def _validate_meta(backend: str, meta: Dict[str, Any], where: str) -> None:
    if "arg_order" not in meta or not isinstance(meta["arg_order"], (list, tuple)):
        raise KeyError(f"{where} must provide an 'arg_order' list")
    if backend.upper() == "OPENCL":
        if "src" not in meta or "kernel_name" not in meta:
            raise KeyError(f"{where} must provide 'src' and 'kernel_name' for OpenCL")
    elif not callable(meta.get("build")):
        raise KeyError(f"{where} must provide a callable 'build' for {backend}")
