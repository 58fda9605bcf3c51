from kernel_sources.registry import register_kernel

# Mirrors kernel_sources.common.escape and utils.coords operation for operation.
SRC = r"""
#pragma OPENCL EXTENSION cl_khr_fp64 : enable
#pragma OPENCL FP_CONTRACT OFF

__kernel void mandelbrot_iter(
    __global int* output,
    const int width, const int height, const int max_iter,
    const double center_real, const double center_imag, const double zoom)
{
    const int index = get_global_id(0);
    if (index >= width * height) return;

    const int x = index % width;
    const int y = index / width;

    const double view_width = VIEWPORT_WIDTH / zoom;
    const double view_height = VIEWPORT_HEIGHT / zoom;
    const double min_r = center_real - view_width / 2.0;
    const double max_r = center_real + view_width / 2.0;
    const double min_i = center_imag - view_height / 2.0;
    const double max_i = center_imag + view_height / 2.0;

    const double real = min_r + (double)x * (max_r - min_r) / (double)width;
    const double imag = min_i + (double)y * (max_i - min_i) / (double)height;

    double zr = 0.0, zi = 0.0;
    int n = 0;
    while (n < max_iter) {
        const double zr2 = zr*zr;
        const double zi2 = zi*zi;
        if (zr2 + zi2 > 4.0) break;
        const double new_zr = zr2 - zi2 + real;
        zi = 2.0 * zr * zi + imag;
        zr = new_zr;
        ++n;
    }
    output[index] = n;
}
"""

KERNEL_NAME = "mandelbrot_iter"

ARG_BUFFERS_OUT = ["output"]
ARG_SCALARS = [
    "width", "height", "max_iter",
    "center_real", "center_imag", "zoom",
]
ARG_ORDER = ARG_BUFFERS_OUT + ARG_SCALARS


def build_options(viewport_width: float, viewport_height: float) -> list:
    return [
        "-D", f"VIEWPORT_WIDTH={float(viewport_width)!r}",
        "-D", f"VIEWPORT_HEIGHT={float(viewport_height)!r}",
    ]


register_kernel(
    fractal="mandelbrot",
    op_name="iter",
    backend="OPENCL",
    src=SRC,
    kernel_name=KERNEL_NAME,
    build_options=build_options,
    arg_order=ARG_ORDER,
    scalars=ARG_SCALARS,
    produces=ARG_BUFFERS_OUT,
    block=None,
)
