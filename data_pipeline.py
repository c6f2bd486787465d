"""
data_pipeline.py — Field Snapshot Recorder
===========================================
Runs a light field simulation and saves generations as .npy files.

Layout on disk:
  snapshots/
    run_001/
      frame_0000_rgb.npy        ← shape (H, W, 3) float32 quantities
      frame_0000_targets.npy    ← shape (H, W, 2) int32 target (x, y), channel 0
      ...
    metadata.json               ← config, scene, saved frame counts

Load back with:
  rgb = np.load("snapshots/run_001/frame_0000_rgb.npy")
"""

import json
import logging
from pathlib import Path

import numpy as np

from lightfield import LightSimulation, SimulationConfig, default_scene

logger = logging.getLogger("lightfield.snapshots")


class SnapshotRecorder:
    """
    Usage:
        rec = SnapshotRecorder(output_dir="snapshots/")
        rec.record_run(run_id=1, config=SimulationConfig(width=64, height=64),
                       n_frames=200, save_every=10)
    """

    def __init__(self, output_dir: str = "snapshots"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.metadata = {"runs": []}

    def record_run(self, run_id: int, config: SimulationConfig = None, scene=None,
                   n_frames: int = 100, save_every: int = 1) -> dict:
        """
        Simulate one run and save every `save_every`-th generation.

        Args:
            run_id     : Integer ID for this run (used in folder name)
            config     : Simulation parameters (default SimulationConfig())
            scene      : Lights and barriers (default: default_scene for the config size)
            n_frames   : Generations to simulate
            save_every : Save a snapshot every N generations (1 = all)
        """
        if save_every < 1:
            raise ValueError(f"save_every must be at least 1, got {save_every}")

        config = config or SimulationConfig()
        scene = scene or default_scene(config.width, config.height)

        run_dir = self.output_dir / f"run_{run_id:03d}"
        run_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Starting run {run_id:03d} | {n_frames} generations | "
                    f"{config.width}x{config.height}")

        saved_count = 0
        with LightSimulation(config, scene) as sim:
            for frame in range(n_frames):
                metrics = sim.step()

                if frame % save_every == 0:
                    snapshot = sim.get_snapshot()
                    prefix = run_dir / f"frame_{frame:04d}"
                    np.save(f"{prefix}_rgb.npy", snapshot["rgb"])
                    np.save(f"{prefix}_targets.npy", snapshot["targets"])
                    saved_count += 1

                if frame % 50 == 0:
                    logger.info(f"  Generation {frame:04d}/{n_frames} | "
                                f"{metrics['fps']:.1f} FPS | "
                                f"energy={metrics['energy_total']:.2f}")

        logger.info(f"Run {run_id:03d} done. Saved {saved_count} snapshots → {run_dir}")

        run_meta = {
            "run_id"       : run_id,
            "n_frames"     : n_frames,
            "saved_frames" : saved_count,
            "save_every"   : save_every,
            "config"       : config.as_dict(),
            "lights"       : [[list(pos), value if isinstance(value, (int, float)) else list(value)]
                              for pos, value in scene.sources.items()],
            "barriers"     : sorted(list(pos) for pos in scene.barriers),
            "directory"    : str(run_dir),
        }
        self.metadata["runs"].append(run_meta)

        meta_path = self.output_dir / "metadata.json"
        with open(meta_path, "w") as f:
            json.dump(self.metadata, f, indent=2)

        return run_meta
