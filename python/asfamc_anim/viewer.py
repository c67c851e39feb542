"""
Matplotlib stick-figure renderer for an animated Character.

Draws every bone as a line segment between its world-space start and end
points, the root as a marker, and optionally the recorded root trajectory
smoothed by a Hermite spline. The skeleton's +Y (up) axis is plotted on the
vertical axis of the 3D plot.
"""

import logging
import math
from typing import Dict, Optional

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation

from .camera import OrbitCamera
from .character import Character
from .spline import Spline3

logger = logging.getLogger(__name__)


def _to_plot(points: np.ndarray) -> np.ndarray:
    """Map (x, y, z) with Y up to plot coordinates (x, z, y) with the last axis up"""
    points = np.asarray(points)
    return points[..., [0, 2, 1]]


class SkeletonViewer:
    """Renders a Character with matplotlib's 3D axes"""

    def __init__(self, character: Character, camera: Optional[OrbitCamera] = None):
        self.character = character
        self.camera = camera or OrbitCamera(dist=3.0, lat=0.3, lon=0.6)
        self._lines: Dict[str, object] = {}
        self._root_marker = None
        self._animation = None

    def camera_angles(self):
        """Matplotlib (elevation, azimuth) in degrees matching the orbit camera"""
        eye = self.camera.eye() - self.camera.get_center()
        x, z, y = _to_plot(eye)
        elev = math.degrees(math.atan2(y, math.hypot(x, z)))
        azim = math.degrees(math.atan2(z, x))
        return elev, azim

    def _setup_axes(self, ax):
        ax.set_xlabel('X')
        ax.set_ylabel('Z')
        ax.set_zlabel('Y')
        elev, azim = self.camera_angles()
        ax.view_init(elev=elev, azim=azim)

    def _fit_limits(self, ax, points: np.ndarray):
        if len(points) == 0:
            return
        center = points.mean(axis=0)
        radius = max(float(np.abs(points - center).max()), 1e-3)
        ax.set_xlim(center[0] - radius, center[0] + radius)
        ax.set_ylim(center[1] - radius, center[1] + radius)
        ax.set_zlim(center[2] - radius, center[2] + radius)

    def draw_frame(self, ax=None, save_path: str = None):
        """Draw the character in its current pose. Returns the figure."""
        if ax is None:
            fig = plt.figure(figsize=(8, 8))
            ax = fig.add_subplot(111, projection='3d')
        else:
            fig = ax.figure
        self._setup_axes(ax)
        ax.set_title(f'Frame {self.character.animation_frame} (t={self.character.time:.2f}s)')

        segments = self.character.joint_positions()
        self._lines = {}
        for name, (start, end) in segments.items():
            xs, ys, zs = _to_plot(np.array([start, end])).T
            (line,) = ax.plot(xs, ys, zs, 'b-', linewidth=2)
            self._lines[name] = line

        root = _to_plot(self.character.get_current_position())
        (self._root_marker,) = ax.plot([root[0]], [root[1]], [root[2]], 'ro', markersize=6)

        points = [root] + [p for seg in segments.values() for p in _to_plot(np.array(seg))]
        self._fit_limits(ax, np.array(points))

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')
        return fig

    def plot_trajectory(self, ax, step: int = 10, samples: int = 200):
        """
        Plot the recorded root path, smoothed by a spline through every
        ``step``-th frame.
        """
        motion = self.character.motion
        if motion.frame_count < 2:
            logger.warning("Not enough frames to plot a root trajectory")
            return None
        config = self.character.config
        indices = np.arange(0, motion.frame_count, step)
        if indices[-1] != motion.frame_count - 1:
            indices = np.append(indices, motion.frame_count - 1)
        times = indices / config.fps
        positions = (config.scale * motion.root_positions()[indices]
                     + config.base_position
                     + np.outer(times, config.base_velocity))

        spline = Spline3.from_samples(times, positions)
        dense = _to_plot(spline.sample(np.linspace(spline.min_time(), spline.max_time(), samples)))
        (line,) = ax.plot(dense[:, 0], dense[:, 1], dense[:, 2], 'g--', linewidth=1, alpha=0.7)
        return line

    def _update(self, _tick, dt: float):
        self.character.advance(dt)
        for name, (start, end) in self.character.joint_positions().items():
            line = self._lines.get(name)
            if line is not None:
                xs, ys, zs = _to_plot(np.array([start, end])).T
                line.set_data_3d(xs, ys, zs)
        root = _to_plot(self.character.get_current_position())
        self._root_marker.set_data_3d([root[0]], [root[1]], [root[2]])
        return list(self._lines.values()) + [self._root_marker]

    def animate(self, speed: float = 1.0, interval_ms: float = 1000.0 / 30, trajectory: bool = False):
        """
        Play the motion, advancing by ``speed * interval_ms`` of mocap time per
        displayed frame.

        Returns:
            The FuncAnimation, also kept on the viewer while it plays
        """
        if speed <= 0 or interval_ms <= 0:
            raise ValueError("speed and interval_ms must be positive")
        fig = self.draw_frame()
        ax = fig.axes[0]
        if trajectory:
            self.plot_trajectory(ax)
        dt = speed * interval_ms / 1000.0
        n_ticks = None
        if self.character.has_animation():
            n_ticks = int(math.ceil(self.character.frame_count / (self.character.config.fps * dt))) + 1
        self._animation = FuncAnimation(fig, self._update, frames=n_ticks, fargs=(dt,),
                                        interval=interval_ms, blit=False, repeat=False)
        return self._animation

    def show(self):
        plt.show()
