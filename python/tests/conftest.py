"""Shared ASF/AMC fixtures written to temporary files."""

from pathlib import Path

import pytest

# Root bones A and B; A has child A1 whose dof axis is rotated 90 degrees about Z
TREE_ASF = """\
# small test skeleton
:version 1.10
:name TEST
:units
  mass 1.0
  length 1.0
  angle deg
:documentation
  Skeleton used by the unit tests
:root
   order TX TY TZ RX RY RZ
   axis XYZ
   position 0 0 0
   orientation 0 0 0
:bonedata
  begin
     id 1
     name A
     direction 0 0 2
     length 1
     axis 0 0 0  XYZ
     dof rx ry rz
     limits (-180.0 180.0)
            (-180.0 180.0)
            (-180.0 180.0)
  end
  begin
     id 2
     name B
     direction 0 1 0
     length 0.5
     axis 0 0 0 XYZ
  end
  begin
     id 3
     name A1
     direction 1 0 0
     length 2
     axis 0 0 90 XYZ
     dof rx
     limits (-45 45)
  end
:hierarchy
  begin
    root A B
    A A1
  end
"""

UPPERARM_ASF = """\
:version 1.10
:name ARM
:units
  mass 1.0
  length 1.0
  angle deg
:root
   order TX TY TZ RX RY RZ
   axis XYZ
   position 0 0 0
   orientation 0 0 0
:bonedata
  begin
     id 1
     name upperarm
     direction 0 0 1
     length 1
     axis 0 0 0 XYZ
     dof rx ry
     limits (-90.0 90.0)
            (-180.0 180.0)
  end
:hierarchy
  begin
    root upperarm
  end
"""

UPPERARM_AMC = """\
#!OML:ASF ARM
:FULLY-SPECIFIED
:DEGREES
1
root 0 0 0 0 0 0
upperarm 30 0
2
root 1 0 0 0 0 0
upperarm 120 10
3
root 2 0 0 0 0 90
upperarm 45 -10
"""


def linear_amc(frames: int) -> str:
    """Motion whose root x position equals the frame index"""
    lines = [":FULLY-SPECIFIED", ":DEGREES"]
    for i in range(frames):
        lines.append(str(i + 1))
        lines.append(f"root {i} 0 0 0 0 0")
        lines.append(f"upperarm {i} 0")
    return "\n".join(lines) + "\n"


def write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text)
    return path


@pytest.fixture
def tree_asf(tmp_path) -> Path:
    return write(tmp_path, "tree.asf", TREE_ASF)


@pytest.fixture
def arm_asf(tmp_path) -> Path:
    return write(tmp_path, "arm.asf", UPPERARM_ASF)


@pytest.fixture
def arm_amc(tmp_path) -> Path:
    return write(tmp_path, "arm.amc", UPPERARM_AMC)


@pytest.fixture
def linear_arm_amc(tmp_path) -> Path:
    return write(tmp_path, "linear.amc", linear_amc(10))
