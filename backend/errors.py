class EngineError(Exception):
    """Base class for compute engine errors."""


class CompilationError(EngineError):
    """The per-pixel kernel could not be built for the current device."""


class ComputeError(EngineError):
    """A device dispatch, synchronization or copy-back produced no usable result."""
