"""
Configuration classes for skeleton loading and playback.

Contains the angle unit definition and character playback options.
"""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np


class AngleUnit(Enum):
    """Angle units accepted in ASF/AMC files"""
    DEG = "deg"
    RAD = "rad"

    @classmethod
    def parse(cls, token: str) -> 'AngleUnit':
        """Map an ASF ``angle`` token (deg, degree, rad, radian) to a unit"""
        token = token.lower()
        if token.startswith('deg'):
            return cls.DEG
        if token.startswith('rad'):
            return cls.RAD
        raise ValueError(f"Unknown angle unit: {token!r}")

    def to_radians(self, values):
        """Convert values expressed in this unit to radians"""
        if self is AngleUnit.DEG:
            return np.radians(values)
        return np.asarray(values, dtype=float)


@dataclass
class CharacterConfig:
    """Configuration for character playback"""
    # Sample rate of the motion stream (CMU data is 120 fps)
    fps: float = 120.0

    # Offsets compensating for the absolute translation recorded in the AMC
    base_position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    base_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))

    # Scale factor for root translation and bone lengths (default: no scaling)
    scale: float = 1.0

    # Clamp joint angles to the limits declared in the ASF
    clamp_to_bounds: bool = True

    def __post_init__(self):
        self.base_position = np.asarray(self.base_position, dtype=float)
        self.base_velocity = np.asarray(self.base_velocity, dtype=float)
