import pytest

from roadgeom.config import DEFAULT_CONFIG
from roadgeom.curve2d import LineSegment2D
from roadgeom.function import ConstantFunction, LinearFunction
from roadgeom.geometry_utils import dot, sub
from roadgeom.range import Range
from roadgeom.solid import Cuboid3D, Cylinder3D, ParametricSweep3D
from roadgeom.xform import Affine3D, AffineSequence3D

TOLERANCE = 1e-7


def _assert_outward(polygons, center):
    for polygon in polygons:
        assert dot(sub(polygon.centroid, center), polygon.normal) > 0.0


def test_cuboid_has_six_outward_faces():
    cuboid = Cuboid3D(4.0, 2.0, 3.0, TOLERANCE)
    polygons = cuboid.calculate_polygons_global_cs().unwrap()
    assert len(polygons) == 6
    _assert_outward(polygons, (0.0, 0.0, 1.5))


def test_cuboid_stands_on_its_ground_face():
    polygons = Cuboid3D(4.0, 2.0, 3.0, TOLERANCE).calculate_polygons_local_cs().unwrap()
    bottom = polygons[0]
    assert all(v[2] == 0.0 for v in bottom.vertices)
    assert bottom.normal == pytest.approx((0.0, 0.0, -1.0))
    assert polygons[1].centroid == pytest.approx((0.0, 0.0, 3.0))


def test_cuboid_placement():
    placement = AffineSequence3D.EMPTY.append(Affine3D.of_translation((10.0, 0.0, 0.0)))
    polygons = Cuboid3D(2.0, 2.0, 2.0, TOLERANCE, placement).calculate_polygons_global_cs().unwrap()
    _assert_outward(polygons, (10.0, 0.0, 1.0))


@pytest.mark.parametrize("dimensions", [(0.0, 1.0, 1.0), (1.0, -1.0, 1.0), (1.0, 1.0, float("nan"))])
def test_cuboid_rejects_invalid_dimensions(dimensions):
    with pytest.raises(ValueError):
        Cuboid3D(*dimensions, TOLERANCE)


def test_cylinder_faces():
    cylinder = Cylinder3D(1.5, 4.0, TOLERANCE, slices=8)
    polygons = cylinder.calculate_polygons_global_cs().unwrap()
    assert len(polygons) == 10
    assert polygons[0].normal == pytest.approx((0.0, 0.0, -1.0))
    assert polygons[1].normal == pytest.approx((0.0, 0.0, 1.0))
    assert all(p.num_vertices == 4 for p in polygons[2:])
    _assert_outward(polygons, (0.0, 0.0, 2.0))


def test_cylinder_default_slices():
    polygons = Cylinder3D(1.0, 1.0, TOLERANCE).calculate_polygons_local_cs().unwrap()
    assert len(polygons) == 18


def test_cylinder_rejects_invalid_dimensions():
    with pytest.raises(ValueError):
        Cylinder3D(0.0, 1.0, TOLERANCE)
    with pytest.raises(ValueError):
        Cylinder3D(1.0, 1.0, TOLERANCE, slices=2)


def test_cylinder_slices_from_config():
    config = DEFAULT_CONFIG.with_overrides(circle_slices=6)
    polygons = Cylinder3D(1.0, 1.0, TOLERANCE, config=config).calculate_polygons_local_cs().unwrap()
    assert len(polygons) == 8


class TestParametricSweep3D:

    def _sweep(self, absolute_height=LinearFunction.X_AXIS, width=ConstantFunction(2.0), **kwargs):
        kwargs.setdefault("step", 2.5)
        return ParametricSweep3D(LineSegment2D(10.0, TOLERANCE), absolute_height, ConstantFunction(1.0),
                                 width, TOLERANCE, **kwargs)

    def test_closed_shell(self):
        sweep = self._sweep()
        assert sweep.length == pytest.approx(10.0)
        polygons = sweep.calculate_polygons_global_cs().unwrap()
        # four side strips of four quads each plus two caps
        assert len(polygons) == 18
        _assert_outward(polygons, (5.0, 0.0, 0.5))
        xs = [v[0] for p in polygons for v in p.vertices]
        ys = [v[1] for p in polygons for v in p.vertices]
        assert (min(xs), max(xs)) == pytest.approx((0.0, 10.0))
        assert (min(ys), max(ys)) == pytest.approx((-1.0, 1.0))

    def test_stands_on_absolute_height(self):
        polygons = self._sweep(LinearFunction(0.0, 3.0)).calculate_polygons_local_cs().unwrap()
        zs = [v[2] for p in polygons for v in p.vertices]
        assert (min(zs), max(zs)) == pytest.approx((3.0, 4.0))
        _assert_outward(polygons, (5.0, 0.0, 3.5))

    def test_step_from_config(self):
        sweep = self._sweep(step=None)
        assert sweep.step == DEFAULT_CONFIG.discretization_step_size
        assert len(sweep.calculate_polygons_local_cs().unwrap()) == 62

    def test_tapering_width_drops_end_cap(self):
        polygons = self._sweep(width=LinearFunction(-0.2, 2.0)).calculate_polygons_local_cs().unwrap()
        assert len(polygons) == 17
        assert sum(p.num_vertices == 3 for p in polygons) == 2
        _assert_outward(polygons, (4.0, 0.0, 0.5))

    def test_functions_must_cover_reference(self):
        with pytest.raises(ValueError):
            self._sweep(width=ConstantFunction(2.0, Range.closed(0.0, 5.0)))

    def test_invalid_step(self):
        with pytest.raises(ValueError):
            self._sweep(step=0.0)
