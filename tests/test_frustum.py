import numpy as np
import pytest

from gengine.frustum import AABB, Frustum, Plane, Visibility

IDENTITY = np.eye(4)


def test_planes_are_normalised():
    proj = np.array(
        [[2.0, 0, 0, 0], [0, 3.0, 0, 0], [0, 0, -1.5, -2.0], [0, 0, -1.0, 0]]
    )
    frustum = Frustum(proj, IDENTITY)
    for plane in Plane:
        assert np.linalg.norm(frustum.plane(plane)[:3]) == pytest.approx(1.0)


def test_scaling_the_matrix_leaves_planes_unchanged():
    a = Frustum(IDENTITY, IDENTITY)
    b = Frustum(2.0 * IDENTITY, IDENTITY)
    for plane in Plane:
        assert np.allclose(a.plane(plane), b.plane(plane))


def test_point_inside_and_outside():
    frustum = Frustum(IDENTITY, IDENTITY)
    assert frustum.is_point_inside((0, 0, 0)) is Visibility.FULL
    assert frustum.is_point_inside((2, 0, 0)) is Visibility.INVISIBLE
    assert frustum.is_point_inside((0, 0, -3)) is Visibility.INVISIBLE


def test_view_matrix_moves_frustum():
    view = np.eye(4)
    view[0, 3] = -5.0  # world moves left by five
    frustum = Frustum(IDENTITY, view)
    assert frustum.is_point_inside((5, 0, 0)) is Visibility.FULL
    assert frustum.is_point_inside((0, 0, 0)) is Visibility.INVISIBLE


def test_box_visibility():
    frustum = Frustum(IDENTITY, IDENTITY)
    inside = AABB((-0.5, -0.5, -0.5), (0.5, 0.5, 0.5))
    straddling = AABB((-2.0, -0.5, -0.5), (0.0, 0.5, 0.5))
    outside = AABB((2.0, 0.0, 0.0), (3.0, 1.0, 1.0))
    assert frustum.is_box_inside(inside) is Visibility.FULL
    assert frustum.is_box_inside(straddling) is Visibility.PARTIAL
    assert frustum.is_box_inside(outside) is Visibility.INVISIBLE


def test_box_back_plane_is_not_tested():
    frustum = Frustum(IDENTITY, IDENTITY)
    behind = AABB((-0.5, -0.5, -5.0), (0.5, 0.5, -3.0))
    assert frustum.is_box_inside(behind) is Visibility.FULL


def test_default_frustum_sees_nothing():
    frustum = Frustum()
    assert frustum.is_point_inside((0, 0, 0)) is Visibility.INVISIBLE
    assert np.array_equal(frustum.plane(Plane.TOP), np.zeros(4))


def test_half_given_matrices_rejected():
    with pytest.raises(TypeError):
        Frustum(IDENTITY)