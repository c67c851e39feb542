"""
ASF/AMC Character Animation Package

Loads an Acclaim skeleton (ASF) and motion capture stream (AMC) into an
articulated bone tree and plays it back:
- Hierarchical bones with per-joint rotation limits
- Fixed 120 Hz frame stepping from continuous time
- Forward kinematics with axis-conjugated joint rotations
- Cubic Hermite splines for smooth 3D trajectories
"""

from .data_structs import RotationBounds, Bone, RootSpec, Skeleton, MotionFrame, Motion
from .config import AngleUnit, CharacterConfig
from .transforms import TransformMath
from .asf_parser import ASFParser, ASFParseError
from .amc_parser import AMCParser, AMCParseError
from .character import Character
from .spline import SplinePoint3, Spline3
from .camera import Perspective, OrbitCamera
# Note: viewer not imported here so matplotlib is only loaded when rendering

__version__ = "1.0.0"

__all__ = [
    # Data structures
    'RotationBounds',
    'Bone',
    'RootSpec',
    'Skeleton',
    'MotionFrame',
    'Motion',

    # Configuration
    'AngleUnit',
    'CharacterConfig',

    # Math utilities
    'TransformMath',

    # Parsers
    'ASFParser',
    'ASFParseError',
    'AMCParser',
    'AMCParseError',

    # Animation
    'Character',

    # Interpolation
    'SplinePoint3',
    'Spline3',

    # Camera
    'Perspective',
    'OrbitCamera',
]
