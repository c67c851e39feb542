"""Orbit camera tests."""

import math

import numpy as np
import pytest

from asfamc_anim.camera import OrbitCamera, Perspective, look_at


def test_eye_position():
    camera = OrbitCamera(dist=2.0)
    np.testing.assert_allclose(camera.eye(), [0, 0, 2])

    camera = OrbitCamera(dist=1.0, lat=math.pi / 2 - 0.001)
    assert camera.eye()[1] == pytest.approx(1.0, abs=1e-5)

    camera = OrbitCamera(dist=3.0, lon=math.pi / 2)
    np.testing.assert_allclose(camera.eye(), [3, 0, 0], atol=1e-12)


def test_eye_follows_center():
    camera = OrbitCamera(dist=2.0)
    camera.set_center([1, 1, 1])
    np.testing.assert_allclose(camera.get_center(), [1, 1, 1])
    np.testing.assert_allclose(camera.eye(), [1, 1, 3])


def test_view_matrix_looks_at_center():
    camera = OrbitCamera(dist=2.0, lat=0.4, lon=-1.2)
    camera.set_center([0.5, 1.0, -2.0])
    view = camera.view_matrix()
    assert type(view) is np.ndarray
    np.testing.assert_allclose(view[3], [0, 0, 0, 1], atol=1e-12)

    center = view @ np.append(camera.get_center(), 1.0)
    np.testing.assert_allclose(center[:3], [0, 0, -2.0], atol=1e-12)
    eye = view @ np.append(camera.eye(), 1.0)
    np.testing.assert_allclose(eye[:3], 0.0, atol=1e-12)
    np.testing.assert_allclose(view[:3, :3] @ view[:3, :3].T, np.identity(3), atol=1e-12)


def test_look_at_keeps_up_vertical():
    view = look_at(np.array([0.0, 0.0, 5.0]), np.zeros(3), np.array([0.0, 1.0, 0.0]))
    np.testing.assert_allclose(view[:3, :3], np.identity(3), atol=1e-12)
    np.testing.assert_allclose(view[:3, 3], [0, 0, -5])


def test_mouse_drag_orbits():
    camera = OrbitCamera(dist=1.0)
    camera.on_mouse_motion(100, 40)
    assert camera.lon == pytest.approx(-0.5)
    assert camera.lat == pytest.approx(0.2)


def test_mouse_motion_without_button_ignored():
    camera = OrbitCamera(dist=1.0, lat=0.1, lon=0.2)
    camera.on_mouse_motion(100, 40, left_button=False)
    assert (camera.lat, camera.lon) == (0.1, 0.2)


def test_latitude_clamped():
    camera = OrbitCamera(dist=1.0)
    camera.on_mouse_motion(0, 10000)
    assert camera.lat < math.pi / 2
    assert camera.lat == pytest.approx(math.pi / 2 - 0.001)
    camera.on_mouse_motion(0, -100000)
    assert camera.lat == pytest.approx(-(math.pi / 2 - 0.001))


def test_projection_matrix():
    perspective = Perspective(fov=90.0, aspect=2.0, zmin=1.0, zmax=3.0)
    m = OrbitCamera(perspective=perspective).projection_matrix()
    assert type(m) is np.ndarray

    assert m[0, 0] == pytest.approx(0.5)
    assert m[1, 1] == pytest.approx(1.0)
    assert m[3, 2] == -1.0
    # Near and far planes map to depth -1 and +1
    for z, depth in ((-1.0, -1.0), (-3.0, 1.0)):
        clip = m @ np.array([0.0, 0.0, z, 1.0])
        assert clip[2] / clip[3] == pytest.approx(depth)
