"""
Animated character driven by ASF/AMC motion capture data.

The Character owns the bone tree parsed from the skeleton file and the
frame sequence parsed from the motion file. ``advance`` steps through the
fixed-rate motion stream; the query methods expose the root coordinate
frame and per-bone transforms for a renderer to consume.
"""

import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

import numpy as np

from .amc_parser import AMCParser, AMCParseError
from .asf_parser import ASFParser, ASFParseError
from .config import CharacterConfig
from .data_structs import Bone, Motion, Skeleton, ROTATION_DOFS
from .transforms import TransformMath

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


class Character:
    """
    Root of the character's scene graph.

    Load failures never raise: a skeleton that cannot be parsed leaves the
    bone table empty (``has_skeleton()`` is False), and a motion file that
    cannot be parsed leaves the character in its rest pose
    (``has_animation()`` is False). The exceptions are kept in
    ``skeleton_error`` and ``animation_error``.

    Not thread safe: ``advance`` mutates the pose and must not run
    concurrently with pose queries.

    Example:
        >>> character = Character("01.asf", "01_01.amc")
        >>> character.advance(1 / 120.0)
        >>> frame = character.get_current_coordinate_frame()
    """

    def __init__(self,
                 asf_filename: PathLike,
                 amc_filename: Optional[PathLike] = None,
                 base_position: Optional[np.ndarray] = None,
                 base_velocity: Optional[np.ndarray] = None,
                 config: Optional[CharacterConfig] = None):
        config = config or CharacterConfig()
        if base_position is not None:
            config = replace(config, base_position=base_position)
        if base_velocity is not None:
            config = replace(config, base_velocity=base_velocity)
        self.config = config

        self.skeleton = Skeleton()
        self.motion = Motion()
        self.skeleton_error: Optional[Exception] = None
        self.animation_error: Optional[Exception] = None

        self._load_skeleton(asf_filename)
        self._load_animation(amc_filename)
        self.reset()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_skeleton(self, asf_filename: PathLike):
        try:
            skeleton = ASFParser().parse(asf_filename)
        except (ASFParseError, OSError) as e:
            logger.error(f"Failed to load skeleton {asf_filename}: {e}")
            self.skeleton_error = e
            return

        if self.config.scale != 1.0:
            for bone in skeleton.bones:
                bone.length *= self.config.scale
        self.skeleton = skeleton
        logger.info(
            f"Loaded skeleton {asf_filename}: {len(skeleton.bones)} bones, "
            f"{len(skeleton.root_bones)} root bones"
        )

    def _load_animation(self, amc_filename: Optional[PathLike]):
        if amc_filename is None:
            return
        if not self.has_skeleton():
            logger.error(f"Cannot load motion {amc_filename} without a skeleton")
            self.animation_error = RuntimeError("no skeleton loaded")
            return
        try:
            self.motion = AMCParser(self.skeleton).parse(amc_filename)
        except (AMCParseError, OSError) as e:
            logger.error(f"Failed to load motion {amc_filename}: {e}")
            self.animation_error = e
            self.motion = Motion()
            return
        logger.info(
            f"Loaded motion {amc_filename}: {self.motion.frame_count} frames "
            f"({self.motion.duration(self.config.fps):.2f}s)"
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def has_animation(self) -> bool:
        return self.motion.frame_count > 0

    def has_skeleton(self) -> bool:
        return bool(self.skeleton.bone_table)

    @property
    def frame_count(self) -> int:
        return self.motion.frame_count

    @property
    def root_node_bones(self) -> List[Bone]:
        return self.skeleton.root_bones

    @property
    def bone_table(self) -> Dict[str, Bone]:
        return self.skeleton.bone_table

    def get_bone(self, name: str) -> Optional[Bone]:
        return self.skeleton.bone_table.get(name)

    def reset(self):
        """Rewind to time 0 in the rest pose"""
        self.time = 0.0
        self.animation_frame = 0
        self.position = self.config.scale * self.skeleton.root.position + self.config.base_position
        self.orientation = self.skeleton.root.orientation.copy()
        self.skeleton.reset_pose()

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def advance(self, dt: float):
        """
        Advance the motion by ``dt`` seconds.

        Every motion frame whose index lies in
        [round(fps * time), round(fps * (time + dt))) is applied in order.
        Past the end of the stream the last frame is held; it is applied
        once, not once per elapsed tick.
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")
        fps = self.config.fps
        f0 = _round_half_up(fps * self.time)
        f1 = _round_half_up(fps * (self.time + dt))
        for f in range(f0, min(f1, self.frame_count)):
            self.apply_frame(f)
        self.time += dt

    def apply_frame(self, index: int):
        """Set the root placement and bone poses from motion frame ``index``"""
        frame = self.motion.frames[index]
        config = self.config

        self.position = (config.scale * frame.root_position
                         + config.base_position
                         + config.base_velocity * (index / config.fps))
        self.orientation = frame.root_orientation.copy()

        for name, data in frame.bone_data.items():
            bone = self.skeleton.bone_table[name]
            angles = np.zeros(3)
            for dof, value in zip(bone.dof, data):
                if dof in ROTATION_DOFS:
                    angles[ROTATION_DOFS.index(dof)] = value
            bone.set_pose(angles, clamp=config.clamp_to_bounds)

        self.animation_frame = index

    # ------------------------------------------------------------------
    # Queries for the renderer
    # ------------------------------------------------------------------

    def get_current_coordinate_frame(self) -> np.ndarray:
        """Root frame: translate(position) @ Rz @ Ry @ Rx of the root orientation"""
        o = self.orientation
        return (TransformMath.translation(self.position)
                @ TransformMath.rotation('Z', o[2])
                @ TransformMath.rotation('Y', o[1])
                @ TransformMath.rotation('X', o[0]))

    def get_current_position(self) -> np.ndarray:
        return self.position

    def traverse(self) -> Iterator[Tuple[Bone, np.ndarray, np.ndarray]]:
        """
        Depth-first walk of the posed skeleton.

        Yields:
            (bone, joint_frame, end_frame) world transforms: the frame at the
            bone's joint after its local rotation, and the frame at the bone's
            end point where its children attach
        """
        stack = [(bone, self.get_current_coordinate_frame())
                 for bone in reversed(self.skeleton.root_bones)]
        while stack:
            bone, parent_frame = stack.pop()
            joint_frame = parent_frame @ bone.get_current_local_rotation()
            end_frame = joint_frame @ TransformMath.translation(bone.get_bone_vector())
            yield bone, joint_frame, end_frame
            for child in reversed(bone.children):
                stack.append((child, end_frame))

    def joint_positions(self) -> Dict[str, Tuple[np.ndarray, np.ndarray]]:
        """World (start, end) points of every bone attached to the root"""
        return {
            bone.name: (joint_frame[:3, 3].copy(), end_frame[:3, 3].copy())
            for bone, joint_frame, end_frame in self.traverse()
        }
