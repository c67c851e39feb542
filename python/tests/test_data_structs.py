"""Tests for rotation bounds, bone transforms and the matrix helpers."""

import numpy as np
import pytest

from asfamc_anim.data_structs import Bone, Motion, MotionFrame, RotationBounds
from asfamc_anim.transforms import TransformMath


def make_bone(**kwargs):
    bounds = RotationBounds()
    bounds.set_dof(True, False, False)
    bounds.set_r(0, -np.pi / 2, np.pi / 2)
    defaults = dict(name='bone', length=1.0, direction=np.array([1.0, 0.0, 0.0]),
                    dof=['RX'], rotation_bounds=bounds)
    defaults.update(kwargs)
    return Bone(**defaults)


class TestRotationBounds:

    def test_defaults_unbounded(self):
        bounds = RotationBounds()
        assert bounds.dofs == 0
        assert np.all(np.isinf(bounds.min_angles))
        assert np.all(bounds.max_angles > 0)

    def test_set_dof_counts(self):
        bounds = RotationBounds()
        bounds.set_dof(True, False, True)
        assert bounds.dofs == 2
        np.testing.assert_array_equal(bounds.enabled, [True, False, True])

    def test_clamp(self):
        bounds = RotationBounds()
        bounds.set_dof(True, True, False)
        bounds.set_r(0, -1.0, 1.0)
        bounds.set_r(1, 0.0, 0.5)
        np.testing.assert_allclose(bounds.clamp(np.array([2.0, -0.3, 4.0])), [1.0, 0.0, 0.0])

    def test_restrict_does_not_clamp(self):
        bounds = RotationBounds()
        bounds.set_dof(True, False, False)
        bounds.set_r(0, -1.0, 1.0)
        np.testing.assert_allclose(bounds.restrict(np.array([2.0, 3.0, 4.0])), [2.0, 0.0, 0.0])

    def test_instances_do_not_share_limits(self):
        a, b = RotationBounds(), RotationBounds()
        a.set_r(0, -1.0, 1.0)
        assert b.min_angles[0] == -np.inf


class TestBone:

    def test_bone_vector(self):
        bone = make_bone(length=2.5, direction=np.array([0.0, 1.0, 0.0]))
        np.testing.assert_allclose(bone.get_bone_vector(), [0, 2.5, 0])

    def test_rest_pose_is_identity(self):
        bone = make_bone(axis=np.radians([10.0, 20.0, 30.0]))
        np.testing.assert_allclose(bone.get_current_local_rotation(), np.identity(4), atol=1e-12)

    def test_axis_conjugation(self):
        """A dof X axis rotated 90 degrees about Z acts about world Y"""
        bone = make_bone(axis=np.array([0.0, 0.0, np.pi / 2]))
        bone.set_pose([np.pi / 2, 0.0, 0.0])
        rotated = TransformMath.transform_point(bone.get_current_local_rotation(),
                                                np.array([1.0, 0.0, 0.0]))
        np.testing.assert_allclose(rotated, [0, 0, -1], atol=1e-12)

    def test_local_transform_translates_after_rotation(self):
        bone = make_bone(direction=np.array([0.0, 0.0, 1.0]))
        bone.set_pose([np.pi / 2, 0.0, 0.0])
        end = TransformMath.transform_point(bone.get_current_local_transform(), np.zeros(3))
        np.testing.assert_allclose(end, [0, -1, 0], atol=1e-12)

    def test_set_pose_clamps_and_masks(self):
        bone = make_bone()
        bone.set_pose([3.0, 1.0, 1.0])
        np.testing.assert_allclose(bone.angles, [np.pi / 2, 0, 0])
        bone.set_pose([3.0, 1.0, 1.0], clamp=False)
        np.testing.assert_allclose(bone.angles, [3.0, 0, 0])
        bone.reset_pose()
        np.testing.assert_allclose(bone.angles, 0.0)

    def test_children_and_walk(self):
        root = make_bone(name='root_bone')
        child = make_bone(name='child')
        grandchild = make_bone(name='grandchild')
        root.add_child(child)
        child.add_child(grandchild)
        assert grandchild.parent is child
        assert [b.get_name() for b in root.walk()] == ['root_bone', 'child', 'grandchild']


class TestTransformMath:

    def test_rotation_about_z(self):
        m = TransformMath.rotation('Z', np.pi / 2)
        np.testing.assert_allclose(TransformMath.transform_point(m, np.array([1.0, 0, 0])),
                                   [0, 1, 0], atol=1e-12)

    def test_euler_xyz_applies_x_first(self):
        angles = np.array([0.3, -0.4, 1.1])
        expected = (TransformMath.rotation('Z', angles[2])
                    @ TransformMath.rotation('Y', angles[1])
                    @ TransformMath.rotation('X', angles[0]))
        np.testing.assert_allclose(TransformMath.euler_matrix(angles, "XYZ"), expected, atol=1e-12)

    def test_euler_zyx_applies_z_first(self):
        angles = np.array([0.3, -0.4, 1.1])
        expected = (TransformMath.rotation('X', angles[0])
                    @ TransformMath.rotation('Y', angles[1])
                    @ TransformMath.rotation('Z', angles[2]))
        np.testing.assert_allclose(TransformMath.euler_matrix(angles, "zyx"), expected, atol=1e-12)

    def test_rigid_inverse(self):
        m = TransformMath.translation(np.array([1.0, 2.0, 3.0])) @ TransformMath.rotation('Y', 0.7)
        np.testing.assert_allclose(m @ TransformMath.rigid_inverse(m), np.identity(4), atol=1e-12)


def test_motion_helpers():
    motion = Motion()
    assert motion.frame_count == 0
    assert motion.root_positions().shape == (0, 3)
    motion.frames.append(MotionFrame(1, root_position=np.array([1.0, 2.0, 3.0])))
    motion.frames.append(MotionFrame(2))
    assert motion.duration(2.0) == pytest.approx(1.0)
    np.testing.assert_allclose(motion.root_positions(), [[1, 2, 3], [0, 0, 0]])
