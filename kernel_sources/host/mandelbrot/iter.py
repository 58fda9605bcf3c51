from numba import njit

from kernel_sources.common.escape import escape_time
from kernel_sources.registry import register_kernel
from utils.coords import index_to_pixel, pixel_to_complex, window_bounds

ARG_BUFFERS_OUT = ["output"]
ARG_SCALARS = [
    "width", "height", "max_iter",
    "center_real", "center_imag", "zoom",
]
ARG_ORDER = ARG_BUFFERS_OUT + ARG_SCALARS

SIGNATURE = "void(int32[:], int32, int32, int32, float64, float64, float64)"

_escape_time = njit(escape_time)
_window_bounds = njit(window_bounds)
_pixel_to_complex = njit(pixel_to_complex)
_index_to_pixel = njit(index_to_pixel)


def build(viewport_width: float, viewport_height: float):
    """
    Sequential reference kernel: the same work units as the device kernels,
    evaluated one index at a time in-process.
    """
    viewport_width = float(viewport_width)
    viewport_height = float(viewport_height)

    @njit(SIGNATURE)
    def _mandelbrot_iter(output, width, height, max_iter,
                         center_real, center_imag, zoom):
        for index in range(width * height):
            x, y = _index_to_pixel(index, width)
            min_r, max_r, min_i, max_i = _window_bounds(
                center_real, center_imag, zoom, viewport_width, viewport_height)
            real, imag = _pixel_to_complex(x, y, width, height,
                                           min_r, max_r, min_i, max_i)
            output[index] = _escape_time(real, imag, max_iter)

    return _mandelbrot_iter


register_kernel(
    fractal="mandelbrot",
    op_name="iter",
    backend="HOST",
    build=build,
    arg_order=ARG_ORDER,
    scalars=ARG_SCALARS,
    produces=ARG_BUFFERS_OUT,
    block=None,
)
