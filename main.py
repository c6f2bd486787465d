"""
main.py — Entry Point
======================
Runs the light field simulation in one of four modes.

Usage:
    python main.py                      # Headless run, prints stats (default)
    python main.py --mode live          # Live matplotlib window
    python main.py --mode benchmark     # Per-phase timing breakdown
    python main.py --mode snapshot      # Save generations as .npy files
"""

import argparse
import logging

import numpy as np

from lightfield import LightSimulation, SimulationConfig, default_scene
from lightfield.attenuation import ATTENUATION_POLICIES
from lightfield.logging_config import setup_logging


def run_live(config: SimulationConfig):
    """Live interactive visualization."""
    from visualizer import FieldVisualizer

    print(f"Starting live simulation ({config.width}x{config.height})...")
    print("Close the window to exit.\n")

    with LightSimulation(config, default_scene(config.width, config.height)) as sim:
        viz = FieldVisualizer(sim)
        viz.run(fps=10)


def run_headless(config: SimulationConfig, frames: int = 100):
    """Run without display — prints stats every 10 generations."""
    print(f"\nHeadless simulation | {config.width}x{config.height} | {frames} generations")
    print(f"{'─'*60}")

    total_times = []
    with LightSimulation(config, default_scene(config.width, config.height)) as sim:
        for f in range(frames):
            metrics = sim.step()
            total_times.append(metrics["total_ms"])

            if f % 10 == 0:
                print(f"  Generation {f:03d} | {metrics['total_ms']:6.1f}ms "
                      f"({metrics['fps']:.1f} FPS) | "
                      f"energy={metrics['energy_total']:.2f} | "
                      f"max={metrics['energy_max']:.3f}")

        sim.print_status()

    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean(total_times):.1f}ms/generation ({1000/np.mean(total_times):.1f} FPS)")
    print(f"  Min:     {np.min(total_times):.1f}ms")
    print(f"  Max:     {np.max(total_times):.1f}ms")


def run_benchmark(config: SimulationConfig, frames: int = 20):
    """Per-phase performance breakdown."""
    print(f"\n{'='*60}")
    print(f"  BENCHMARK | {config.width}x{config.height} | workers={config.workers} | {frames} generations")
    print(f"{'='*60}")

    with LightSimulation(config, default_scene(config.width, config.height)) as sim:
        # Warm up
        sim.run(2)
        logs = sim.run(frames)

    keys = ["propagate_ms", "forcing_ms", "total_ms"]

    print(f"\n{'Step':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.1f}ms {np.min(vals):>7.1f}ms {np.max(vals):>7.1f}ms")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  Generations/s: {1000/np.mean(total_vals):.2f}")


def run_snapshot(config: SimulationConfig, frames: int = 100, save_every: int = 10):
    """Save generations to ./snapshots/."""
    from data_pipeline import SnapshotRecorder

    print(f"\nSnapshot mode | {frames} generations, every {save_every} saved")
    print(f"  Saving to: ./snapshots/\n")

    rec = SnapshotRecorder(output_dir="snapshots")
    rec.record_run(run_id=1, config=config, n_frames=frames, save_every=save_every)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Light Field Simulation")
    parser.add_argument(
        "--mode", choices=["live", "headless", "benchmark", "snapshot"],
        default="headless",
        help="Run mode (default: headless)"
    )
    parser.add_argument("--width",  type=int, default=64, help="Field width in cells (default: 64)")
    parser.add_argument("--height", type=int, default=64, help="Field height in cells (default: 64)")
    parser.add_argument("--frames", type=int, default=100, help="Number of generations")
    parser.add_argument("--workers", type=int, default=None, help="Thread pool size (default: sequential)")
    parser.add_argument("--attenuation", choices=ATTENUATION_POLICIES, default="throughput",
                        help="Attenuation policy (default: throughput)")
    parser.add_argument("--accumulation", type=float, default=1.0, help="Accumulation factor [0, 1]")
    parser.add_argument("--blur", type=float, default=0.1, help="Blur factor [0, 1]")
    parser.add_argument("--save-every", type=int, default=10, help="Snapshot interval")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args()
    setup_logging(getattr(logging, args.log_level))

    config = SimulationConfig(
        width=args.width,
        height=args.height,
        accumulation=args.accumulation,
        blur=args.blur,
        attenuation=args.attenuation,
        workers=args.workers,
    )

    if args.mode == "live":
        run_live(config)
    elif args.mode == "headless":
        run_headless(config, frames=args.frames)
    elif args.mode == "benchmark":
        run_benchmark(config, frames=args.frames)
    elif args.mode == "snapshot":
        run_snapshot(config, frames=args.frames, save_every=args.save_every)
