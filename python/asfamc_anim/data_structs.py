"""
Data structures for the articulated character.

Contains dataclasses for joint rotation limits, bones, the skeleton
hierarchy, motion frames and complete motion data. All angles are stored
in radians.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .transforms import TransformMath

ROTATION_DOFS = ('RX', 'RY', 'RZ')
TRANSLATION_DOFS = ('TX', 'TY', 'TZ')
# 'L' is a bone length channel; it is parsed but does not affect the pose
VALID_DOFS = ROTATION_DOFS + TRANSLATION_DOFS + ('L',)


@dataclass
class RotationBounds:
    """Which rotation axes a joint may use, with min/max angles per axis"""
    dof_rx: bool = False
    dof_ry: bool = False
    dof_rz: bool = False
    dofs: int = 0
    min_angles: np.ndarray = field(default_factory=lambda: np.full(3, -np.inf))
    max_angles: np.ndarray = field(default_factory=lambda: np.full(3, np.inf))

    def set_dof(self, rx: bool, ry: bool, rz: bool):
        self.dof_rx, self.dof_ry, self.dof_rz = bool(rx), bool(ry), bool(rz)
        self.dofs = int(self.dof_rx) + int(self.dof_ry) + int(self.dof_rz)

    def set_r(self, index: int, min_angle: float, max_angle: float):
        """Set limits (radians) for axis ``index`` (0=X, 1=Y, 2=Z)"""
        self.min_angles[index] = min_angle
        self.max_angles[index] = max_angle

    @property
    def enabled(self) -> np.ndarray:
        return np.array([self.dof_rx, self.dof_ry, self.dof_rz])

    def clamp(self, angles: np.ndarray) -> np.ndarray:
        """Zero disabled axes and clamp enabled ones to their limits"""
        enabled = self.enabled
        clamped = np.clip(angles, self.min_angles, self.max_angles)
        return np.where(enabled, clamped, 0.0)

    def restrict(self, angles: np.ndarray) -> np.ndarray:
        """Zero disabled axes without clamping"""
        return np.where(self.enabled, angles, 0.0)


@dataclass(eq=False)
class Bone:
    """
    A bone of the skeleton tree.

    Shape fields (length, direction, axis) are fixed after parsing. The pose
    (``angles``) is rewritten every time a motion frame is applied.
    """
    name: str
    id: int = 0
    length: float = 0.0
    direction: np.ndarray = field(default_factory=lambda: np.zeros(3))
    # Reference orientation (radians) and the order its angles are applied in
    axis: np.ndarray = field(default_factory=lambda: np.zeros(3))
    axis_order: str = "XYZ"
    dof: List[str] = field(default_factory=list)
    rotation_bounds: RotationBounds = field(default_factory=RotationBounds)
    # Current joint angles about X, Y, Z (radians)
    angles: np.ndarray = field(default_factory=lambda: np.zeros(3))
    children: List['Bone'] = field(default_factory=list, repr=False)
    parent: Optional['Bone'] = field(default=None, repr=False)

    def get_name(self) -> str:
        return self.name

    def get_bone_vector(self) -> np.ndarray:
        """Bone end point in the bone's local frame"""
        return self.length * self.direction

    @property
    def axis_frame(self) -> np.ndarray:
        """Rotation taking the bone's dof axes into its parent's space"""
        return TransformMath.euler_matrix(self.axis, self.axis_order)

    @property
    def current_rotation(self) -> np.ndarray:
        """Pose rotation about the bone's own dof axes"""
        return TransformMath.euler_matrix(self.angles, "XYZ")

    def get_current_local_rotation(self) -> np.ndarray:
        """Pose rotation conjugated by the reference orientation: C @ M @ C^-1"""
        return TransformMath.conjugate(self.current_rotation, self.axis_frame)

    def get_current_local_transform(self) -> np.ndarray:
        """Local rotation followed by translation to the bone's end point"""
        return self.get_current_local_rotation() @ TransformMath.translation(self.get_bone_vector())

    def set_pose(self, angles: np.ndarray, clamp: bool = True):
        """Set joint angles (X, Y, Z radians), keeping only enabled axes"""
        angles = np.asarray(angles, dtype=float)
        if clamp:
            self.angles = self.rotation_bounds.clamp(angles)
        else:
            self.angles = self.rotation_bounds.restrict(angles)

    def reset_pose(self):
        self.angles = np.zeros(3)

    def add_child(self, child: 'Bone'):
        child.parent = self
        self.children.append(child)

    def walk(self) -> Iterator['Bone']:
        """Depth-first iteration over this bone and its descendants"""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class RootSpec:
    """The distinguished root of the skeleton (not a bone)"""
    order: List[str] = field(default_factory=lambda: ['TX', 'TY', 'TZ', 'RX', 'RY', 'RZ'])
    axis_order: str = "XYZ"
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orientation: np.ndarray = field(default_factory=lambda: np.zeros(3))


@dataclass
class Skeleton:
    """Represents the complete skeleton structure"""
    name: str = "VICON"
    # Every bone in declaration order; children lists below own the tree
    bones: List[Bone] = field(default_factory=list)
    bone_table: Dict[str, Bone] = field(default_factory=dict)
    root_bones: List[Bone] = field(default_factory=list)
    root: RootSpec = field(default_factory=RootSpec)
    length_unit: float = 1.0
    mass_unit: float = 1.0
    angle_unit: str = "deg"

    def add_bone(self, bone: Bone):
        self.bones.append(bone)
        self.bone_table[bone.name] = bone

    def walk(self) -> Iterator[Bone]:
        """Depth-first iteration over every bone reachable from the root"""
        for bone in self.root_bones:
            yield from bone.walk()

    def reset_pose(self):
        for bone in self.bones:
            bone.reset_pose()


@dataclass
class MotionFrame:
    """Represents a single frame of motion data"""
    frame_number: int
    root_position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    # Root Euler angles about X, Y, Z (radians)
    root_orientation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    # Raw dof values per bone, in the bone's dof order (rotations in radians)
    bone_data: Dict[str, np.ndarray] = field(default_factory=dict)


@dataclass
class Motion:
    """Contains all motion data"""
    frames: List[MotionFrame] = field(default_factory=list)

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    def duration(self, fps: float = 120.0) -> float:
        return self.frame_count / fps

    def root_positions(self) -> np.ndarray:
        """Recorded root translation per frame as an (N, 3) array"""
        if not self.frames:
            return np.zeros((0, 3))
        return np.array([frame.root_position for frame in self.frames])
