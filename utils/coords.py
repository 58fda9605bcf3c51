"""
Pure coordinate arithmetic shared by host code and compiled kernels.

Every function here must stay numba-compatible (scalars and tuples only):
the same source is compiled into the device kernels, so reported bounds and
rendered pixels come from identical arithmetic.
"""


def window_bounds(center_real, center_imaginary, zoom,
                  viewport_width, viewport_height):
    view_width = viewport_width / zoom
    view_height = viewport_height / zoom
    min_real = center_real - view_width / 2.0
    max_real = center_real + view_width / 2.0
    min_imag = center_imaginary - view_height / 2.0
    max_imag = center_imaginary + view_height / 2.0
    return min_real, max_real, min_imag, max_imag


def pixel_to_complex(x, y, width, height,
                     min_real, max_real, min_imag, max_imag):
    real = min_real + x * (max_real - min_real) / width
    imag = min_imag + y * (max_imag - min_imag) / height
    return real, imag


def index_to_pixel(index, width):
    return index % width, index // width


def pixel_to_index(x, y, width):
    return y * width + x
