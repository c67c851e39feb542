"""
Homogeneous transform utilities for forward kinematics.

Provides 4x4 translation and rotation matrices and conversions from
Euler angles, in the column-vector convention (p' = M @ p).
"""

import numpy as np
from scipy.spatial.transform import Rotation as R

_AXIS_INDEX = {'X': 0, 'Y': 1, 'Z': 2}


class TransformMath:
    """Homogeneous matrix utilities"""

    @staticmethod
    def identity() -> np.ndarray:
        return np.identity(4)

    @staticmethod
    def translation(offset: np.ndarray) -> np.ndarray:
        """Translation matrix moving points by ``offset``"""
        m = np.identity(4)
        m[:3, 3] = offset
        return m

    @staticmethod
    def homogeneous(rotation: np.ndarray) -> np.ndarray:
        """Embed a 3x3 rotation matrix in a 4x4 transform"""
        m = np.identity(4)
        m[:3, :3] = rotation
        return m

    @staticmethod
    def rotation(axis: str, angle: float) -> np.ndarray:
        """Rotation of ``angle`` radians about a principal axis ('X', 'Y' or 'Z')"""
        return TransformMath.homogeneous(R.from_euler(axis.lower(), angle).as_matrix())

    @staticmethod
    def euler_matrix(angles: np.ndarray, order: str = "XYZ") -> np.ndarray:
        """
        Rotation from Euler angles (radians) about fixed axes.

        ``angles`` holds the X, Y and Z angles; ``order`` gives the order in
        which they are applied. For "XYZ" the result is Rz @ Ry @ Rx, so the
        X rotation acts first.

        Args:
            angles: Angles about X, Y, Z in radians
            order: Application order of the axes

        Returns:
            4x4 rotation matrix
        """
        order = order.upper()
        ordered = [angles[_AXIS_INDEX[axis]] for axis in order]
        # Lowercase sequences are extrinsic in scipy
        return TransformMath.homogeneous(R.from_euler(order.lower(), ordered).as_matrix())

    @staticmethod
    def rigid_inverse(m: np.ndarray) -> np.ndarray:
        """Inverse of a rotation + translation transform"""
        inv = np.identity(4)
        rot_t = m[:3, :3].T
        inv[:3, :3] = rot_t
        inv[:3, 3] = -rot_t @ m[:3, 3]
        return inv

    @staticmethod
    def conjugate(rotation: np.ndarray, frame: np.ndarray) -> np.ndarray:
        """Express ``rotation`` in ``frame``: frame @ rotation @ frame^-1"""
        return frame @ rotation @ TransformMath.rigid_inverse(frame)

    @staticmethod
    def transform_point(m: np.ndarray, point: np.ndarray) -> np.ndarray:
        """Apply a 4x4 transform to a 3D point"""
        return m[:3, :3] @ point + m[:3, 3]
