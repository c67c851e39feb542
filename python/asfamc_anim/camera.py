"""
Orbiting camera for viewing the character.

Computes view and projection matrices only; applying them is left to the
renderer. pyrr builds matrices for row vectors, so they are transposed to
the column-vector convention used by ``transforms``.
"""

import math
from dataclasses import dataclass

import numpy as np
from pyrr import Matrix44, Vector3

# Keeps the camera off the poles, where the look-at up vector degenerates
_LAT_LIMIT = math.pi / 2 - 0.001
_MOUSE_SENSITIVITY = 0.005


@dataclass
class Perspective:
    """Perspective projection (fov in degrees)"""
    fov: float = 90.0
    aspect: float = 1.0
    zmin: float = 0.1
    zmax: float = 10.0

    def projection_matrix(self) -> np.ndarray:
        """OpenGL-style perspective matrix, as built by gluPerspective"""
        m = Matrix44.perspective_projection(self.fov, self.aspect, self.zmin, self.zmax, dtype=float)
        return np.asarray(m.T)


def look_at(eye: np.ndarray, center: np.ndarray, up: np.ndarray) -> np.ndarray:
    """View matrix placing the camera at ``eye`` looking toward ``center``"""
    m = Matrix44.look_at(Vector3(eye, dtype=float), Vector3(center, dtype=float),
                         Vector3(up, dtype=float), dtype=float)
    return np.asarray(m.T)


class OrbitCamera:
    """
    Camera orbiting a center point at fixed distance.

    ``lat`` and ``lon`` are in radians; latitude is measured from the
    horizontal plane and longitude around the +Y axis.
    """

    def __init__(self, dist: float = 1.0, lat: float = 0.0, lon: float = 0.0,
                 perspective: Perspective = None):
        self.dist = dist
        self.lat = lat
        self.lon = lon
        self.perspective = perspective or Perspective()
        self.center = np.zeros(3)

    def get_center(self) -> np.ndarray:
        return self.center

    def set_center(self, center):
        self.center = np.asarray(center, dtype=float)

    def eye(self) -> np.ndarray:
        direction = np.array([
            math.sin(self.lon) * math.cos(self.lat),
            math.sin(self.lat),
            math.cos(self.lon) * math.cos(self.lat),
        ])
        return self.center + self.dist * direction

    def view_matrix(self) -> np.ndarray:
        return look_at(self.eye(), self.center, np.array([0.0, 1.0, 0.0]))

    def projection_matrix(self) -> np.ndarray:
        return self.perspective.projection_matrix()

    def on_mouse_motion(self, dx: float, dy: float, left_button: bool = True):
        """Orbit by a mouse drag of (dx, dy) pixels while the left button is held"""
        if not left_button:
            return
        self.lon -= _MOUSE_SENSITIVITY * dx
        self.lat += _MOUSE_SENSITIVITY * dy
        self.lat = min(max(self.lat, -_LAT_LIMIT), _LAT_LIMIT)
