"""
Command-line interface for loading and playing back ASF/AMC motion.

Loads a character, advances it through the motion and reports the root
placement and, optionally, every bone's world-space end point. ``--play``
opens the matplotlib viewer instead.
"""

import argparse
import logging
import sys
from typing import List, Optional

import numpy as np

from .camera import OrbitCamera
from .character import Character
from .config import CharacterConfig


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None):
    """
    Configure logging for the command-line tool.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO)
        log_file: Optional file path to write logs to
    """
    handlers = [logging.StreamHandler()]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def _format_vec(v: np.ndarray) -> str:
    return f"({v[0]:.4f}, {v[1]:.4f}, {v[2]:.4f})"


def print_summary(character: Character):
    skeleton = character.skeleton
    print(f"Skeleton: {skeleton.name}")
    print(f"  Bones: {len(skeleton.bones)}")
    print(f"  Root bones: {', '.join(b.name for b in character.root_node_bones)}")
    print(f"  Angle unit: {skeleton.angle_unit}")
    if character.has_animation():
        print("Motion:")
        print(f"  Frames: {character.frame_count}")
        print(f"  Duration: {character.motion.duration(character.config.fps):.2f}s")
        print(f"  FPS: {character.config.fps}")
    else:
        print("Motion: none (rest pose)")


def print_pose(character: Character, joints: bool):
    print(f"\nTime {character.time:.4f}s, frame {character.animation_frame}")
    print(f"  Root position: {_format_vec(character.get_current_position())}")
    if joints:
        for name, (_, end) in character.joint_positions().items():
            print(f"  {name:<12} {_format_vec(end)}")


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Play back ASF/AMC motion capture on an articulated skeleton',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  # Summarize a skeleton and its rest pose
  %(prog)s 01.asf --joints

  # Advance 60 frames of motion and print bone end points
  %(prog)s 01.asf 01_01.amc --frames 60 --joints

  # Play in a matplotlib window with the root trajectory
  %(prog)s 01.asf 01_01.amc --play --trajectory
        """
    )

    parser.add_argument('asf', help='Input ASF skeleton file')
    parser.add_argument('amc', nargs='?', help='Input AMC motion file')
    parser.add_argument('-n', '--frames', type=int, default=0,
                        help='Number of steps to advance (default: 0)')
    parser.add_argument('--dt', type=float, default=None,
                        help='Seconds per step (default: one motion frame)')
    parser.add_argument('-f', '--fps', type=float, default=120.0,
                        help='Motion frames per second (default: 120)')
    parser.add_argument('-s', '--scale', type=float, default=1.0,
                        help='Scale factor for lengths and positions (default: 1.0)')
    parser.add_argument('--base-position', type=float, nargs=3, metavar=('X', 'Y', 'Z'),
                        default=(0.0, 0.0, 0.0), help='World offset of the recorded motion')
    parser.add_argument('--base-velocity', type=float, nargs=3, metavar=('X', 'Y', 'Z'),
                        default=(0.0, 0.0, 0.0), help='Drift added per second of motion')
    parser.add_argument('--no-clamp', action='store_true',
                        help='Do not clamp joint angles to the ASF limits')
    parser.add_argument('--joints', action='store_true',
                        help='Print the world end point of every bone')
    parser.add_argument('--play', action='store_true',
                        help='Open the matplotlib viewer')
    parser.add_argument('--speed', type=float, default=1.0,
                        help='Playback speed for --play (default: 1.0)')
    parser.add_argument('--trajectory', action='store_true',
                        help='Draw the spline-smoothed root trajectory in the viewer')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', help='Also write logs to this file')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point"""
    args = create_argument_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    config = CharacterConfig(
        fps=args.fps,
        base_position=np.array(args.base_position),
        base_velocity=np.array(args.base_velocity),
        scale=args.scale,
        clamp_to_bounds=not args.no_clamp,
    )
    character = Character(args.asf, args.amc, config=config)

    if not character.has_skeleton():
        print(f"Error: could not load skeleton {args.asf}: {character.skeleton_error or 'no bones declared'}", file=sys.stderr)
        return 1
    if args.amc and not character.has_animation():
        print(f"Warning: no animation loaded from {args.amc}: {character.animation_error}", file=sys.stderr)

    print_summary(character)

    if args.play:
        from .viewer import SkeletonViewer

        camera = OrbitCamera(dist=3.0, lat=0.3, lon=0.6)
        camera.set_center(character.get_current_position())
        viewer = SkeletonViewer(character, camera)
        viewer.animate(speed=args.speed, trajectory=args.trajectory)
        viewer.show()
        return 0

    dt = args.dt if args.dt is not None else 1.0 / config.fps
    for _ in range(args.frames):
        character.advance(dt)
    print_pose(character, args.joints)
    return 0


if __name__ == '__main__':
    sys.exit(main())
