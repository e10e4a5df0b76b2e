"""
Timing demonstration for row-band parallel compositing.

Runs make_transparent on a synthetic icon sequentially and with a thread
pool, and checks that both produce identical pixels. NumPy releases the GIL
for most of the per-band work, so larger images benefit the most.

    python examples/parallel_compositing_demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import time

from PV_Libs.ChromaKeyLib import RasterBuffer, RgbColor, make_transparent


def synthetic_icon(size):
    """White canvas with a dark square and a soft gray halo around it."""
    raster = RasterBuffer.filled(size, size, (255, 255, 255, 255))
    pixels = raster.as_array()
    quarter = size // 4
    pixels[quarter - 4:size - quarter + 4, quarter - 4:size - quarter + 4, :3] = 235
    pixels[quarter:size - quarter, quarter:size - quarter, :3] = (30, 60, 120)
    return raster


def time_pass(raster, max_workers, iterations):
    white = RgbColor(255, 255, 255)
    times = []
    result = None
    for _ in range(iterations):
        start = time.perf_counter()
        result = make_transparent(raster, white, 20, 30, max_workers=max_workers)
        times.append(time.perf_counter() - start)
    # First run includes warmup
    return result, sum(times[1:]) / len(times[1:])


def benchmark(size, workers, iterations=4):
    print(f"\n{size}x{size} icon")
    print("-" * 40)
    raster = synthetic_icon(size)

    sequential, t_seq = time_pass(raster, None, iterations)
    print(f"  sequential:        {t_seq * 1000:8.2f} ms")

    parallel, t_par = time_pass(raster, workers, iterations)
    print(f"  {workers} workers:         {t_par * 1000:8.2f} ms")

    if sequential.data != parallel.data:
        print("  MISMATCH between sequential and parallel output")
        return False

    print(f"  speedup: {t_seq / t_par:.2f}x (outputs identical)")
    return True


def main():
    print("=" * 40)
    print("Parallel compositing benchmark")
    print("=" * 40)

    ok = True
    for size in (256, 1024, 2048):
        ok = benchmark(size, workers=4) and ok
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
