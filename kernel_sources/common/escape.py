ESCAPE_RADIUS_SQ = 4.0


def escape_time(real, imag, max_iter):
    """
    Number of z <- z^2 + c iterations before |z|^2 exceeds 4, capped at max_iter.
    A result equal to max_iter means the point is presumed inside the set.
    """
    zr = 0.0
    zi = 0.0
    iterations = 0
    while iterations < max_iter:
        zr2 = zr * zr
        zi2 = zi * zi
        # strict: a point landing exactly on the radius iterates once more
        if zr2 + zi2 > ESCAPE_RADIUS_SQ:
            break
        new_zr = zr2 - zi2 + real
        zi = 2.0 * zr * zi + imag
        zr = new_zr
        iterations += 1
    return iterations
