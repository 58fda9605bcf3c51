"""
Benchmark the escape-time compute engine on the discovered accelerator.
Runs generate() at a series of zoom levels and reports the iteration budget,
device time and throughput for each.

Usage examples:
  python -m benchmarking.benchmark --zooms 1,16,1024,65536 --runs 5
  python -m benchmarking.benchmark --res 1920x1080 --center -0.743643887,0.131825904 --csv out.csv
"""

import csv
import time
import logging
import argparse
import platform
from typing import List, Optional, Tuple

from api.engine_api import EngineConfigBuilder, create_engine
from rendering.compute import ComputeEngine

# --- Helpers -----------------------------------------------------------------

def parse_resolution(token: str) -> Tuple[int, int]:
    """
    Parse a resolution like "1024x768".
    """
    w, h = token.strip().lower().replace(' ', '').split('x')
    return int(w), int(h)

def parse_zoom_list(zoom_str: str) -> List[float]:
    """
    Parse zoom levels like "1,16,1024".
    """
    out = [float(t) for t in zoom_str.split(',') if t.strip()]
    if not out:
        raise ValueError("At least one zoom level is required")
    return out

def parse_center(token: str) -> Tuple[float, float]:
    re_s, im_s = token.split(',')
    return float(re_s), float(im_s)

def positive_int(token: str) -> int:
    value = int(token)
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected an integer >= 1, got {value}")
    return value

# --- Benchmark core ----------------------------------------------------------

def benchmark_zoom(engine: ComputeEngine,
                   center: Tuple[float, float],
                   zoom: float,
                   runs: int,
                   warmup: int = 1) -> Optional[Tuple[int, float, float]]:
    """
    Runs warmups (not timed), then 'runs' timed requests.
    Returns (budget, avg_seconds, megapixels_per_second), or None on failure.
    """
    for _ in range(max(0, warmup)):
        res = engine.generate(center[0], center[1], zoom)
        if not res.success:
            print(f"  zoom={zoom:g}  FAIL: {res.error}")
            return None

    times = []
    budget = 0
    for _ in range(runs):
        t0 = time.perf_counter()
        res = engine.generate(center[0], center[1], zoom)
        times.append(time.perf_counter() - t0)
        if not res.success:
            print(f"  zoom={zoom:g}  FAIL: {res.error}")
            return None
        budget = res.max_iterations

    avg = sum(times) / len(times)
    mpix = engine.settings.pixel_count / 1_000_000
    return budget, avg, (mpix / avg if avg > 0 else 0.0)

# --- CLI ---------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Benchmark the Mandelbrot compute engine.")
    p.add_argument("--res", type=str, default="1024x768", help="Pixel grid WxH")
    p.add_argument("--zooms", type=str, default="1,4,64,4096,262144",
                   help="Comma separated zoom levels")
    p.add_argument("--center", type=str, default="-0.5,0.0", help="real,imag")
    p.add_argument("--runs", type=positive_int, default=3)
    p.add_argument("--warmup", type=int, default=1)
    p.add_argument("--csv", type=str, default=None)
    p.add_argument("-v", "--verbose", action="store_true")
    args = p.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    w, h = parse_resolution(args.res)
    settings = EngineConfigBuilder().grid(w, h).build()
    engine = create_engine(settings)

    info = engine.device_info()
    print("=== Hardware Summary ===")
    print("CPU:", platform.processor() or platform.machine() or "Unknown CPU")
    print("Accel:", info.status_message)
    print()
    if not info.available:
        return 1

    center = parse_center(args.center)
    rows = []
    try:
        print(f"=== {w}x{h} @ {center[0]}{center[1]:+}i ===")
        for zoom in parse_zoom_list(args.zooms):
            result = benchmark_zoom(engine, center, zoom, args.runs, args.warmup)
            if result is None:
                rows.append([f"{zoom:g}", "n/a", "n/a", "n/a"])
                continue
            budget, avg, mpps = result
            print(f"  zoom={zoom:<10g} iter={budget:<9d} avg={avg:.4f}s  {mpps:.2f} MPix/s")
            rows.append([f"{zoom:g}", budget, f"{avg:.4f}", f"{mpps:.2f}"])
    finally:
        engine.accelerators.close()

    if args.csv:
        with open(args.csv, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["Accelerator", info.name])
            writer.writerow(["Resolution", f"{w}x{h}"])
            writer.writerow([])
            writer.writerow(["Zoom", "Iterations", "Time (s)", "MPix/s"])
            writer.writerows(rows)
        print(f"Benchmark results saved to {args.csv}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
