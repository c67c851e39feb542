"""
ASF (Acclaim Skeleton Format) parser.

Parses ASF skeleton files and creates Skeleton objects with
complete bone hierarchy, axes, degrees of freedom and joint limits.

Parsing happens in two passes: the file is first read into raw records,
then bones are built (angles converted to radians exactly once) and linked
according to the hierarchy section.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from .config import AngleUnit
from .data_structs import (
    Bone,
    RotationBounds,
    Skeleton,
    ROTATION_DOFS,
    VALID_DOFS,
)

logger = logging.getLogger(__name__)

_LIMIT_PAIR = re.compile(r'\(\s*([^\s()]+)\s+([^\s()]+)\s*\)')


class ASFParseError(ValueError):
    """Raised when a skeleton file cannot be parsed"""

    def __init__(self, message: str, source: Optional[str] = None, line_number: Optional[int] = None):
        self.source = source
        self.line_number = line_number
        location = source or "<asf>"
        if line_number is not None:
            location = f"{location}:{line_number}"
        super().__init__(f"{location}: {message}")


@dataclass
class _BoneRecord:
    """Raw bone block as read from the file (angles in file units)"""
    line_number: int
    id: int = 0
    name: str = ""
    direction: np.ndarray = field(default_factory=lambda: np.zeros(3))
    length: float = 0.0
    axis: np.ndarray = field(default_factory=lambda: np.zeros(3))
    axis_order: str = "XYZ"
    dof: List[str] = field(default_factory=list)
    limits: List[Tuple[float, float]] = field(default_factory=list)


class ASFParser:
    """Parser for ASF (Acclaim Skeleton Format) files"""

    def __init__(self):
        self._reset()

    def _reset(self):
        """Start from an empty skeleton; each parse returns a new one"""
        self.skeleton = Skeleton()
        self.angle_unit = AngleUnit.DEG
        self._source = "<asf>"
        self._records: List[_BoneRecord] = []
        self._hierarchy: List[Tuple[int, str, List[str]]] = []
        self._root_orientation = np.zeros(3)

    def parse(self, filepath: Union[str, Path]) -> Skeleton:
        """
        Parse an ASF file.

        Args:
            filepath: Path to the ASF file

        Returns:
            Skeleton object with complete hierarchy

        Raises:
            ASFParseError: If the file is malformed
            OSError: If the file cannot be read
        """
        with open(filepath, 'r') as f:
            lines = f.readlines()
        return self.parse_lines(lines, source=str(filepath))

    def parse_string(self, text: str) -> Skeleton:
        """Parse ASF content held in a string"""
        return self.parse_lines(text.splitlines(), source="<string>")

    def parse_lines(self, lines: List[str], source: str = "<asf>") -> Skeleton:
        self._reset()
        self._source = source
        if not any(line.strip() and not line.strip().startswith('#') for line in lines):
            raise ASFParseError("file is empty", source)

        mode = None
        current: Optional[_BoneRecord] = None
        hierarchy_open = False
        in_limits = False

        for line_number, raw in enumerate(lines, start=1):
            line = raw.strip()

            if not line or line.startswith('#'):
                continue

            if line.startswith(':'):
                if current is not None:
                    self._error("bone block not closed with 'end'", current.line_number)
                keyword = line.split()[0]
                if keyword == ':name':
                    parts = line.split(None, 1)
                    self.skeleton.name = parts[1] if len(parts) > 1 else "VICON"
                    mode = None
                else:
                    mode = keyword[1:]
                in_limits = False
                logger.debug(f"ASF section {keyword} at line {line_number}")
                continue

            if mode == 'units':
                self._parse_units(line, line_number)
            elif mode == 'root':
                self._parse_root(line, line_number)
            elif mode == 'bonedata':
                if line == 'begin':
                    if current is not None:
                        self._error("nested 'begin' in bonedata", line_number)
                    current = _BoneRecord(line_number=line_number)
                    in_limits = False
                elif line == 'end':
                    if current is None:
                        self._error("'end' without matching 'begin'", line_number)
                    self._finish_record(current, line_number)
                    current = None
                    in_limits = False
                elif current is None:
                    self._error(f"bone field outside begin/end: {line!r}", line_number)
                else:
                    in_limits = self._parse_bone_field(line, line_number, current, in_limits)
            elif mode == 'hierarchy':
                if line == 'begin':
                    hierarchy_open = True
                elif line == 'end':
                    hierarchy_open = False
                    mode = None
                else:
                    parts = line.split()
                    if len(parts) >= 2:
                        self._hierarchy.append((line_number, parts[0], parts[1:]))

        if current is not None:
            self._error(f"file ends inside bone block '{current.name}'", current.line_number)
        if hierarchy_open:
            self._error("file ends inside hierarchy section")

        return self._build()

    def _error(self, message: str, line_number: Optional[int] = None):
        raise ASFParseError(message, self._source, line_number)

    def _floats(self, tokens: List[str], count: int, line_number: int) -> np.ndarray:
        if len(tokens) < count:
            self._error(f"expected {count} numbers, got {len(tokens)}", line_number)
        try:
            return np.array([float(t) for t in tokens[:count]])
        except ValueError:
            self._error(f"non-numeric value in {' '.join(tokens[:count])!r}", line_number)

    def _parse_units(self, line: str, line_number: int):
        """Parse units section"""
        parts = line.split()
        if len(parts) < 2:
            return
        if parts[0] == 'length':
            self.skeleton.length_unit = float(self._floats(parts[1:], 1, line_number)[0])
        elif parts[0] == 'mass':
            self.skeleton.mass_unit = float(self._floats(parts[1:], 1, line_number)[0])
        elif parts[0] == 'angle':
            try:
                self.angle_unit = AngleUnit.parse(parts[1])
            except ValueError as e:
                self._error(str(e), line_number)
            self.skeleton.angle_unit = self.angle_unit.value

    def _parse_root(self, line: str, line_number: int):
        """Parse root section"""
        parts = line.split()
        root = self.skeleton.root
        if parts[0] == 'order':
            order = [p.upper() for p in parts[1:]]
            for dof in order:
                if dof not in VALID_DOFS:
                    self._error(f"unknown root channel {dof!r}", line_number)
            root.order = order
        elif parts[0] == 'axis' and len(parts) >= 2:
            root.axis_order = parts[1].upper()
        elif parts[0] == 'position':
            root.position = self._floats(parts[1:], 3, line_number)
        elif parts[0] == 'orientation':
            self._root_orientation = self._floats(parts[1:], 3, line_number)

    def _parse_bone_field(self, line: str, line_number: int, record: _BoneRecord, in_limits: bool) -> bool:
        """Parse one line of a bone block. Returns True while inside a limits list."""
        if line.startswith('('):
            if not in_limits:
                self._error("limit pair outside 'limits'", line_number)
            self._parse_limit_pairs(line, line_number, record)
            return True

        parts = line.split()
        key = parts[0]
        if key == 'id':
            try:
                record.id = int(parts[1])
            except (IndexError, ValueError):
                self._error(f"bad bone id: {line!r}", line_number)
        elif key == 'name':
            if len(parts) < 2:
                self._error("bone name missing", line_number)
            record.name = parts[1]
        elif key == 'direction':
            record.direction = self._floats(parts[1:], 3, line_number)
        elif key == 'length':
            record.length = float(self._floats(parts[1:], 1, line_number)[0])
        elif key == 'axis':
            record.axis = self._floats(parts[1:], 3, line_number)
            if len(parts) > 4:
                record.axis_order = parts[4].upper()
        elif key == 'dof':
            record.dof = [d.upper() for d in parts[1:]]
            for dof in record.dof:
                if dof not in VALID_DOFS:
                    self._error(f"unknown dof {dof!r}", line_number)
        elif key == 'limits':
            self._parse_limit_pairs(line[len('limits'):], line_number, record)
            return True
        else:
            logger.debug(f"Ignoring bone field {key!r} at line {line_number}")
        return False

    def _parse_limit_pairs(self, text: str, line_number: int, record: _BoneRecord):
        pairs = _LIMIT_PAIR.findall(text)
        if not pairs:
            self._error(f"malformed limits: {text.strip()!r}", line_number)
        for lo, hi in pairs:
            lo_hi = self._floats([lo, hi], 2, line_number)
            record.limits.append((lo_hi[0], lo_hi[1]))

    def _finish_record(self, record: _BoneRecord, line_number: int):
        if not record.name:
            self._error("bone block without a name", record.line_number)
        if record.limits and len(record.limits) != len(record.dof):
            self._error(
                f"bone '{record.name}' has {len(record.dof)} dofs but {len(record.limits)} limits",
                line_number,
            )
        if any(r.name == record.name for r in self._records):
            self._error(f"duplicate bone name '{record.name}'", record.line_number)
        self._records.append(record)

    def _build(self) -> Skeleton:
        """Create all bones, then link them per the hierarchy section"""
        unit = self.angle_unit
        self.skeleton.root.orientation = unit.to_radians(self._root_orientation)

        for record in self._records:
            self.skeleton.add_bone(self._make_bone(record, unit))

        self._link_hierarchy()
        logger.debug(
            f"Built skeleton '{self.skeleton.name}': {len(self.skeleton.bones)} bones, "
            f"{len(self.skeleton.root_bones)} attached to root"
        )
        return self.skeleton

    @staticmethod
    def _make_bone(record: _BoneRecord, unit: AngleUnit) -> Bone:
        norm = np.linalg.norm(record.direction)
        direction = record.direction / norm if norm > 0 else record.direction.copy()

        bounds = RotationBounds()
        bounds.set_dof(*(axis in record.dof for axis in ROTATION_DOFS))
        for dof, (lo, hi) in zip(record.dof, record.limits):
            if dof in ROTATION_DOFS:
                bounds.set_r(ROTATION_DOFS.index(dof), unit.to_radians(lo), unit.to_radians(hi))

        return Bone(
            name=record.name,
            id=record.id,
            length=record.length,
            direction=direction,
            axis=unit.to_radians(record.axis),
            axis_order=record.axis_order,
            dof=list(record.dof),
            rotation_bounds=bounds,
        )

    def _link_hierarchy(self):
        table: Dict[str, Bone] = self.skeleton.bone_table
        for line_number, parent_name, child_names in self._hierarchy:
            if parent_name == 'root':
                parent = None
            else:
                parent = table.get(parent_name)
                if parent is None:
                    self._error(f"hierarchy references unknown bone '{parent_name}'", line_number)

            for child_name in child_names:
                child = table.get(child_name)
                if child is None:
                    self._error(f"hierarchy references unknown bone '{child_name}'", line_number)
                if child.parent is not None or child in self.skeleton.root_bones:
                    self._error(f"bone '{child_name}' has more than one parent", line_number)
                if child is parent:
                    self._error(f"bone '{child_name}' is its own parent", line_number)
                if parent is None:
                    self.skeleton.root_bones.append(child)
                else:
                    parent.add_child(child)

        self._check_cycles()

        reachable = {id(bone) for bone in self.skeleton.walk()}
        for bone in self.skeleton.bones:
            if id(bone) not in reachable:
                logger.warning(f"Bone '{bone.name}' is not attached to the root")

    def _check_cycles(self):
        for bone in self.skeleton.bones:
            seen = {id(bone)}
            parent = bone.parent
            while parent is not None:
                if id(parent) in seen:
                    self._error(f"hierarchy cycle through bone '{bone.name}'")
                seen.add(id(parent))
                parent = parent.parent
