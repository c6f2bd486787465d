"""
visualizer.py — Live Light Field Viewer
========================================
Renders the current generation as an RGB image next to a map of where
each cell draws its light from (distance to its target).

Uses matplotlib FuncAnimation for real-time updates.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation

from lightfield.render import targets, to_rgb8


class FieldVisualizer:
    """
    Real-time viewer of a light field simulation.

    Usage (standalone):
        from lightfield import LightSimulation, SimulationConfig, default_scene
        from visualizer import FieldVisualizer

        sim = LightSimulation(SimulationConfig(width=64, height=64), default_scene(64, 64))
        viz = FieldVisualizer(sim)
        viz.run()  # Opens live window
    """

    def __init__(self, simulation, steps_per_frame: int = 1):
        """
        Args:
            simulation      : LightSimulation instance
            steps_per_frame : Generations advanced between redraws
        """
        self.sim = simulation
        self.steps_per_frame = steps_per_frame
        self.width = simulation.config.width
        self.height = simulation.config.height

        self._setup_figure()

    def _setup_figure(self):
        """Two panels: the lit field and the target-distance map."""
        self.fig, self.axes = plt.subplots(1, 2, figsize=(11, 5))
        self.fig.patch.set_facecolor('#0a0a0a')

        titles = ["Light (RGB)", "Distance to target"]
        dummy_rgb = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        dummy_dist = np.zeros((self.height, self.width))

        for ax, title in zip(self.axes, titles):
            ax.set_facecolor('#0a0a0a')
            ax.set_title(title, color='#aaaaaa', fontsize=9, fontfamily='monospace')
            ax.set_xticks([])
            ax.set_yticks([])
            for spine in ax.spines.values():
                spine.set_edgecolor('#333333')

        self.rgb_img = self.axes[0].imshow(dummy_rgb, interpolation='nearest', aspect='equal')
        self.dist_img = self.axes[1].imshow(
            dummy_dist, cmap='magma',
            vmin=0, vmax=np.hypot(self.width, self.height) / 2,
            interpolation='nearest', aspect='equal'
        )
        self.imgs = [self.rgb_img, self.dist_img]

        self.title_text = self.fig.suptitle(
            "Light Field — Generation 0 | 0.0 FPS",
            color='#cccccc', fontsize=10, fontfamily='monospace'
        )

        plt.tight_layout()

    def _target_distance(self) -> np.ndarray:
        t = targets(self.sim.current(0))
        ys, xs = np.mgrid[0:self.height, 0:self.width]
        return np.hypot(t[:, :, 0] - xs, t[:, :, 1] - ys)

    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps sim and updates plots."""
        for _ in range(self.steps_per_frame):
            metrics = self.sim.step()

        self.rgb_img.set_data(to_rgb8(self.sim.rgb()))
        self.dist_img.set_data(self._target_distance())

        self.title_text.set_text(
            f"Light Field — Generation {metrics['frame']} | "
            f"{metrics['fps']:.1f} FPS | "
            f"energy={metrics['energy_total']:.1f}"
        )

        return self.imgs + [self.title_text]

    def run(self, fps: int = 10, frames: int = 500):
        """
        Start the live animation window.

        Args:
            fps    : Target animation frame rate
            frames : Total frames to render
        """
        interval_ms = 1000 // fps
        self.anim = animation.FuncAnimation(
            self.fig,
            self.update,
            frames=frames,
            interval=interval_ms,
            blit=True
        )
        plt.show()

    def save_gif(self, path: str = "light_field.gif", fps: int = 10, frames: int = 100):
        """Save animation as a GIF."""
        print(f"Rendering {frames} frames to {path}...")
        self.anim = animation.FuncAnimation(
            self.fig, self.update, frames=frames, interval=100, blit=True
        )
        writer = animation.PillowWriter(fps=fps)
        self.anim.save(path, writer=writer)
        print(f"Saved: {path}")
