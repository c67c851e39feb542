"""
AMC (Acclaim Motion Capture) parser.

Parses AMC motion files and creates Motion objects containing
frame-by-frame root placement and per-bone dof values.
"""

import logging
from pathlib import Path
from typing import List, Optional, Set, Union

import numpy as np

from .config import AngleUnit
from .data_structs import Skeleton, Motion, MotionFrame, ROTATION_DOFS, TRANSLATION_DOFS

logger = logging.getLogger(__name__)


class AMCParseError(ValueError):
    """Raised when a motion file cannot be parsed"""

    def __init__(self, message: str, source: Optional[str] = None, line_number: Optional[int] = None):
        self.source = source
        self.line_number = line_number
        location = source or "<amc>"
        if line_number is not None:
            location = f"{location}:{line_number}"
        super().__init__(f"{location}: {message}")


class AMCParser:
    """Parser for AMC (Acclaim Motion Capture) files"""

    def __init__(self, skeleton: Skeleton, angle_unit: Optional[AngleUnit] = None):
        """
        Initialize parser with skeleton reference.

        Args:
            skeleton: Skeleton object containing bone definitions
            angle_unit: Unit of the angle values; defaults to the skeleton's
                unit and is overridden by a :DEGREES/:RADIANS header
        """
        self.skeleton = skeleton
        self.default_unit = angle_unit or AngleUnit.parse(skeleton.angle_unit)
        self.angle_unit = self.default_unit
        self.motion = Motion()
        self._source = "<amc>"
        self._unknown: Set[str] = set()

    def parse(self, filepath: Union[str, Path]) -> Motion:
        """
        Parse an AMC file.

        Args:
            filepath: Path to the AMC file

        Returns:
            Motion object containing all frames

        Raises:
            AMCParseError: If the file holds no frames or malformed data
            OSError: If the file cannot be read
        """
        with open(filepath, 'r') as f:
            lines = f.readlines()
        return self.parse_lines(lines, source=str(filepath))

    def parse_string(self, text: str) -> Motion:
        """Parse AMC content held in a string"""
        return self.parse_lines(text.splitlines(), source="<string>")

    def parse_lines(self, lines: List[str], source: str = "<amc>") -> Motion:
        # Each parse starts a new Motion; header units do not carry over
        self.angle_unit = self.default_unit
        self.motion = Motion()
        self._unknown = set()
        self._source = source
        current_frame = None

        for line_number, raw in enumerate(lines, start=1):
            line = raw.strip()

            if not line or line.startswith('#'):
                continue

            if line.startswith(':'):
                keyword = line.upper()
                if keyword == ':DEGREES':
                    self.angle_unit = AngleUnit.DEG
                elif keyword == ':RADIANS':
                    self.angle_unit = AngleUnit.RAD
                continue

            if line.isdigit():
                if current_frame is not None:
                    self.motion.frames.append(current_frame)
                current_frame = MotionFrame(frame_number=int(line))
                continue

            if current_frame is None:
                raise AMCParseError(f"data before first frame number: {line!r}", source, line_number)
            self._parse_bone_data(line, line_number, current_frame)

        if current_frame is not None:
            self.motion.frames.append(current_frame)

        if not self.motion.frames:
            raise AMCParseError("no motion frames found", source)

        logger.debug(f"Parsed {self.motion.frame_count} frames from {source}")
        return self.motion

    def _values(self, tokens: List[str], line_number: int) -> np.ndarray:
        try:
            return np.array([float(t) for t in tokens])
        except ValueError:
            raise AMCParseError(f"non-numeric value in {' '.join(tokens)!r}", self._source, line_number)

    def _convert(self, dofs: List[str], values: np.ndarray) -> np.ndarray:
        """Convert rotational channels to radians, leave the rest untouched"""
        data = values.copy()
        for i, dof in enumerate(dofs):
            if dof in ROTATION_DOFS:
                data[i] = self.angle_unit.to_radians(values[i])
        return data

    def _parse_bone_data(self, line: str, line_number: int, frame: MotionFrame):
        """
        Parse one bone line of a frame.

        Args:
            line: Line containing bone name and values
            line_number: 1-based line number for error messages
            frame: Current frame to add data to
        """
        parts = line.split()
        name = parts[0]
        values = self._values(parts[1:], line_number)

        if name == 'root':
            order = self.skeleton.root.order
            self._check_count(name, order, values, line_number)
            data = self._convert(order, values)
            for dof, value in zip(order, data):
                if dof in TRANSLATION_DOFS:
                    frame.root_position[TRANSLATION_DOFS.index(dof)] = value
                elif dof in ROTATION_DOFS:
                    frame.root_orientation[ROTATION_DOFS.index(dof)] = value
            return

        bone = self.skeleton.bone_table.get(name)
        if bone is None:
            if name not in self._unknown:
                self._unknown.add(name)
                logger.warning(f"Skipping motion data for unknown bone '{name}' ({self._source})")
            return

        self._check_count(name, bone.dof, values, line_number)
        frame.bone_data[name] = self._convert(bone.dof, values)

    def _check_count(self, name: str, dofs: List[str], values: np.ndarray, line_number: int):
        if len(values) != len(dofs):
            raise AMCParseError(
                f"bone '{name}' expects {len(dofs)} values, got {len(values)}",
                self._source,
                line_number,
            )
