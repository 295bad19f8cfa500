import pytest

from roadgeom.geometry_utils import cross, dot, norm, triangle_area, triangle_normal
from roadgeom.triangulator import (
    plane_basis,
    project_to_plane,
    ring_normal,
    triangulate_loop,
    triangulate_ring,
)

TOLERANCE = 1e-7


def _loop_area(loop, triangle):
    (x0, y0), (x1, y1), (x2, y2) = (loop[i] for i in triangle)
    return 0.5 * ((x1 - x0) * (y2 - y0) - (x2 - x0) * (y1 - y0))


@pytest.mark.parametrize("normal", [(0.0, 0.0, 1.0), (1.0, 0.0, 0.0), (0.0, -0.6, 0.8)])
def test_plane_basis_is_right_handed(normal):
    u, v = plane_basis(normal)
    assert norm(u) == pytest.approx(1.0)
    assert norm(v) == pytest.approx(1.0)
    assert dot(u, v) == pytest.approx(0.0)
    assert dot(u, normal) == pytest.approx(0.0)
    assert cross(u, v) == pytest.approx(normal)


def test_projection_keeps_distances_in_plane():
    points = [(1.0, 2.0, 3.0), (4.0, 2.0, 3.0), (4.0, 6.0, 3.0)]
    projected = project_to_plane(points, (1.0, 2.0, 3.0), (0.0, 0.0, 1.0))
    assert projected[0] == pytest.approx((0.0, 0.0))
    assert norm(projected[1]) == pytest.approx(3.0)
    assert norm(projected[2]) == pytest.approx(5.0)


class TestTriangulateLoop:

    def test_clockwise_square(self):
        loop = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)]
        triangles = triangulate_loop(loop)
        assert len(triangles) == 2
        assert sum(abs(_loop_area(loop, t)) for t in triangles) == pytest.approx(1.0)

    def test_notched_loop(self):
        loop = [(0.0, 0.0), (4.0, 0.0), (4.0, 4.0), (2.0, 1.0), (0.0, 4.0)]
        triangles = triangulate_loop(loop)
        assert len(triangles) == 3
        assert sum(abs(_loop_area(loop, t)) for t in triangles) == pytest.approx(10.0)
        assert {i for t in triangles for i in t} == set(range(5))

    def test_too_short_loop(self):
        assert triangulate_loop([(0.0, 0.0), (1.0, 0.0)]) == []


class TestTriangulateRing:
    TWISTED = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0), (0.0, 1.0, 1.0)]

    def test_triangles_follow_ring_normal(self):
        _, normal = ring_normal(self.TWISTED)
        triangles = triangulate_ring(self.TWISTED, TOLERANCE)
        assert len(triangles) == 2
        assert all(dot(triangle_normal(*t), normal) > 0 for t in triangles)

    def test_explicit_normal(self):
        triangles = triangulate_ring(self.TWISTED, TOLERANCE, normal=(0.0, 0.0, -1.0))
        assert len(triangles) == 2
        assert all(triangle_normal(*t)[2] < 0 for t in triangles)

    def test_slivers_are_dropped(self):
        # the last vertex sits almost on the line between its neighbours
        ring = [(0.0, 0.0, 0.0), (2.0, 0.0, 0.0), (2.0, 2.0, 1.0), (1.0, 1.0 + 1e-9, 0.5)]
        triangles = triangulate_ring(ring, TOLERANCE)
        assert triangles
        assert all(triangle_area(*t) > TOLERANCE for t in triangles)
