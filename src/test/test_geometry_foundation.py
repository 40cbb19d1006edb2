"""
Test geometry foundation: vectors, mesh buffer, bounding boxes, scene assembly.
"""

import pytest
import numpy as np

from plantgeom import GeometryParameterError
from plantgeom.geometry import (
    Vec, O, X, Y, Z, Mesh, merge_meshes, BBox, Scene, merge_scenes,
    triangle, rectangle, solid_cube, translate,
)


class TestVec:
    """Test Vec and the axis constructors."""

    def test_vec_creation(self):
        v = Vec(1.0, 2.0, 3.0)
        assert v.x == 1.0
        assert v.y == 2.0
        assert v.z == 3.0
        assert v.dtype == np.float64

    def test_vec_to_array(self):
        v = Vec(1.0, 2.0, 3.0)
        np.testing.assert_array_almost_equal(v.to_array(), [1.0, 2.0, 3.0])

    def test_vector_operations(self):
        v1 = Vec(1.0, 0.0, 0.0)
        v2 = Vec(0.0, 1.0, 0.0)

        assert v1.dot(v2) == 0.0
        assert v1.cross(v2) == Vec(0.0, 0.0, 1.0)
        assert v1 + v2 == Vec(1.0, 1.0, 0.0)
        assert v1 - v2 == Vec(1.0, -1.0, 0.0)
        assert 2 * v1 == Vec(2.0, 0.0, 0.0)
        assert v1 * 3 == Vec(3.0, 0.0, 0.0)
        assert -v2 == Vec(0.0, -1.0, 0.0)
        assert Vec(2.0, 4.0, 6.0) / 2 == Vec(1.0, 2.0, 3.0)

        v = Vec(3.0, 4.0, 0.0)
        assert v.norm() == 5.0
        assert abs(v.normalize().norm() - 1.0) < 1e-12

    def test_normalize_zero_vector(self):
        with pytest.raises(GeometryParameterError):
            O().normalize()

    def test_precision(self):
        v = Vec(1.0, 2.0, 3.0, np.float32)
        assert v.dtype == np.float32
        assert isinstance(v.x, np.float32)
        assert v.to_array().dtype == np.float32

        # Equality requires the same precision
        assert v != Vec(1.0, 2.0, 3.0)
        assert v == Vec(1.0, 2.0, 3.0, "single")

    def test_axis_constructors(self):
        assert O() == Vec(0.0, 0.0, 0.0)
        assert X() == Vec(1.0, 0.0, 0.0)
        assert Y() == Vec(0.0, 1.0, 0.0)
        assert Z() == Vec(0.0, 0.0, 1.0)
        assert X(2.0) == Vec(2.0, 0.0, 0.0)
        assert O(np.float32).dtype == np.float32
        assert Y(np.float32).dtype == np.float32
        assert Z(np.float32(3.0)) == Vec(0.0, 0.0, 3.0, np.float32)
        assert X().cross(Y()) == Z()

    def test_unpack_and_index(self):
        x, y, z = Vec(1.0, 2.0, 3.0)
        assert (x, y, z) == (1.0, 2.0, 3.0)
        assert Vec(1.0, 2.0, 3.0)[2] == 3.0

    def test_from_array(self):
        v = Vec.from_array(np.array([1.0, 2.0, 3.0], dtype=np.float32))
        assert v.dtype == np.float32
        with pytest.raises(GeometryParameterError):
            Vec.from_array([1.0, 2.0])

    def test_invalid_precision(self):
        with pytest.raises(GeometryParameterError):
            Vec(1.0, 2.0, 3.0, "quadruple")
        with pytest.raises(GeometryParameterError):
            Vec(1.0, 2.0, 3.0, np.float16)


class TestMesh:
    """Test Mesh class."""

    def test_empty_mesh(self):
        mesh = Mesh()

        assert mesh.ntriangles == 0
        assert mesh.nvertices == 0
        assert mesh.area() == 0.0
        assert mesh.dtype == np.float64
        assert mesh.vertices.shape == (0, 3)

    def test_sized_mesh(self):
        mesh = Mesh.sized(10, precision=np.float32)

        assert mesh.ntriangles == 0
        assert mesh.capacity >= 30
        assert mesh.dtype == np.float32

        with pytest.raises(GeometryParameterError):
            Mesh.sized(-1)

    def test_append_triangle(self):
        mesh = Mesh()
        mesh.append_triangle(Vec(0.0, 0.0, 0.0), Vec(1.0, 0.0, 0.0), Vec(0.0, 1.0, 0.0))

        assert mesh.ntriangles == 1
        assert mesh.nvertices == 3
        assert abs(mesh.area() - 0.5) < 1e-12
        np.testing.assert_array_almost_equal(mesh.normals[0], [0.0, 0.0, 1.0])

    def test_degenerate_triangle_accepted(self):
        mesh = Mesh()
        mesh.append_triangle([0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0])

        assert mesh.ntriangles == 1
        assert mesh.areas()[0] == 0.0
        np.testing.assert_array_equal(mesh.normals[0], [0.0, 0.0, 0.0])

    def test_growth_preserves_order(self):
        mesh = Mesh.sized(1)
        for i in range(5):
            mesh.append_triangle([i, 0.0, 0.0], [i, 1.0, 0.0], [i, 0.0, 1.0])

        assert mesh.ntriangles == 5
        assert mesh.nvertices == 3 * mesh.ntriangles
        np.testing.assert_array_equal(mesh.vertices[::3, 0], [0.0, 1.0, 2.0, 3.0, 4.0])

    def test_capacity_does_not_change_results(self):
        small = Mesh()
        large = Mesh.sized(100)
        for mesh in (small, large):
            mesh.append(rectangle())
            mesh.append(triangle())

        np.testing.assert_array_equal(small.vertices, large.vertices)

    def test_from_vertices_validation(self):
        with pytest.raises(GeometryParameterError):
            Mesh.from_vertices(np.zeros((4, 3)))
        with pytest.raises(GeometryParameterError):
            Mesh.from_vertices(np.zeros((3, 2)))
        with pytest.raises(GeometryParameterError):
            Mesh.from_vertices(np.zeros((3, 3)), normals=np.zeros((2, 3)))

        mesh = Mesh.from_vertices(np.zeros((2, 3, 3)))
        assert mesh.ntriangles == 2

    def test_areas(self):
        mesh = merge_meshes([triangle(length=2.0, width=2.0), rectangle(length=1.0, width=3.0)])

        np.testing.assert_array_almost_equal(mesh.areas(), [2.0, 1.5, 1.5])
        assert abs(mesh.area() - 5.0) < 1e-12

    def test_merge_preserves_order(self):
        a = triangle()
        b = rectangle()
        a_before = a.vertices.copy()

        merged = merge_meshes([a, b])

        assert merged.ntriangles == 3
        np.testing.assert_array_equal(merged.vertices[:3], a.vertices)
        np.testing.assert_array_equal(merged.vertices[3:], b.vertices)
        # Inputs untouched
        assert a.ntriangles == 1
        np.testing.assert_array_equal(a.vertices, a_before)

    def test_merge_empty_list(self):
        merged = merge_meshes([])
        assert merged.ntriangles == 0

    def test_append_converts_precision(self):
        mesh = Mesh(np.float32)
        mesh.append(rectangle())

        assert mesh.vertices.dtype == np.float32
        assert mesh.ntriangles == 2

    def test_append_refreshes_normals(self):
        mesh = rectangle()
        assert mesh.normals.shape == (2, 3)

        mesh.append(triangle())
        assert mesh.normals.shape == (3, 3)

    def test_set_normals(self):
        mesh = rectangle()
        mesh.set_normals(np.tile([0.0, 0.0, 1.0], (2, 1)))
        np.testing.assert_array_equal(mesh.normals[:, 2], [1.0, 1.0])

        mesh.invalidate_normals()
        np.testing.assert_array_almost_equal(mesh.normals[:, 0], [1.0, 1.0])

    def test_triangle_access(self):
        mesh = rectangle()
        np.testing.assert_array_equal(mesh.triangle(1), mesh.vertices[3:6])
        np.testing.assert_array_equal(mesh.triangle(-1), mesh.vertices[3:6])
        with pytest.raises(IndexError):
            mesh.triangle(2)

    def test_copy_is_independent(self):
        mesh = rectangle()
        clone = mesh.copy()
        translate(clone, (1.0, 0.0, 0.0))

        assert mesh.vertices[:, 0].max() == 0.0
        assert clone.vertices[:, 0].min() == 1.0


class TestBBox:
    """Test bounding boxes."""

    def test_bbox_from_corners(self):
        box = BBox(Vec(0.0, 0.0, 0.0), Vec(1.0, 2.0, 3.0))

        assert box.center == Vec(0.5, 1.0, 1.5)
        assert box.size == Vec(1.0, 2.0, 3.0)
        assert box.contains((0.5, 0.5, 0.5))
        assert not box.contains((2.0, 0.5, 0.5))

    def test_unordered_corners_rejected(self):
        with pytest.raises(GeometryParameterError):
            BBox(Vec(1.0, 0.0, 0.0), Vec(0.0, 1.0, 1.0))

    def test_bbox_from_mesh(self):
        box = BBox.from_mesh(solid_cube(length=2.0, width=2.0, height=2.0))

        assert box.pmin == Vec(-1.0, -1.0, 0.0)
        assert box.pmax == Vec(1.0, 1.0, 2.0)

    def test_empty_mesh_rejected(self):
        with pytest.raises(GeometryParameterError):
            BBox.from_mesh(Mesh())

    def test_bbox_is_a_snapshot(self):
        mesh = solid_cube()
        box = BBox.from_mesh(mesh)
        translate(mesh, (5.0, 0.0, 0.0))

        assert box.pmax.x == 0.5
        assert BBox.from_mesh(mesh).pmax.x == 5.5

    def test_bbox_keeps_precision(self):
        box = BBox.from_mesh(solid_cube(precision=np.float32))
        assert box.pmin.dtype == np.float32


class TestScene:
    """Test Scene assembly and merging."""

    def test_empty_scene(self):
        scene = Scene()

        assert scene.ntriangles == 0
        assert scene.colors == ()
        assert scene.materials == ()
        assert len(scene.material_ids) == 0

    def test_scene_from_mesh(self):
        mesh = triangle(length=2.0, width=2.0)
        scene = Scene(mesh=mesh, colors=["red"], material_ids=[0], materials=["leaf"])

        assert scene.mesh is mesh
        assert scene.colors == ("red",)
        assert scene.materials == ("leaf",)
        np.testing.assert_array_equal(scene.material_ids, [0])

    def test_misaligned_colors_rejected(self):
        with pytest.raises(GeometryParameterError):
            Scene(mesh=rectangle(), colors=["red"])

    def test_misaligned_material_ids_rejected(self):
        with pytest.raises(GeometryParameterError):
            Scene(mesh=rectangle(), material_ids=[0], materials=["leaf"])

    def test_material_id_out_of_range(self):
        with pytest.raises(GeometryParameterError):
            Scene(mesh=triangle(), material_ids=[1], materials=["leaf"])

    def test_material_ids_read_only(self):
        scene = Scene(mesh=triangle(), material_ids=[0], materials=["leaf"])
        with pytest.raises(ValueError):
            scene.material_ids[0] = 5

    def test_add_with_single_color_and_material(self):
        scene = Scene()
        scene.add(rectangle(), color="green", material="leaf")
        scene.add(triangle(), color="brown", material="bark")

        assert scene.ntriangles == 3
        assert scene.colors == ("green", "green", "brown")
        assert scene.materials == ("leaf", "bark")
        np.testing.assert_array_equal(scene.material_ids, [0, 0, 1])

    def test_add_with_per_triangle_values(self):
        scene = Scene()
        scene.add(rectangle(), colors=["a", "b"], materials=["m1", "m2"])

        assert scene.colors == ("a", "b")
        np.testing.assert_array_equal(scene.material_ids, [0, 1])

    def test_add_is_atomic(self):
        scene = Scene()
        scene.add(rectangle(), color="green")

        with pytest.raises(GeometryParameterError):
            scene.add(triangle())
        with pytest.raises(GeometryParameterError):
            scene.add(triangle(), colors=["a", "b"])

        assert scene.ntriangles == 2
        assert len(scene.colors) == 2

    def test_add_adopts_precision_of_first_mesh(self):
        scene = Scene()
        scene.add(rectangle(precision=np.float32))
        assert scene.mesh.dtype == np.float32

    def test_merge_offsets_material_ids(self):
        s1 = Scene(mesh=triangle(), material_ids=[1], materials=["a", "b"])
        s2 = Scene(
            mesh=merge_meshes([triangle(), rectangle()]),
            material_ids=[0, 0, 0],
            materials=["c"]
        )

        merged = merge_scenes([s1, s2])

        assert merged.ntriangles == 4
        assert len(merged.materials) == 3
        np.testing.assert_array_equal(merged.material_ids, [1, 2, 2, 2])
        # Inputs untouched
        np.testing.assert_array_equal(s2.material_ids, [0, 0, 0])
        assert s1.ntriangles == 1

    def test_merge_concatenates_colors(self):
        s1 = Scene(mesh=triangle(), colors=["red"])
        s2 = Scene(mesh=rectangle(), colors=["green", "blue"])

        merged = Scene.merge([s1, s2])

        assert merged.colors == ("red", "green", "blue")
        np.testing.assert_array_equal(merged.mesh.vertices[3:], s2.mesh.vertices)

    def test_merge_mixed_colors_rejected(self):
        s1 = Scene(mesh=triangle(), colors=["red"])
        s2 = Scene(mesh=rectangle())

        with pytest.raises(GeometryParameterError):
            merge_scenes([s1, s2])

    def test_merge_ignores_empty_scenes(self):
        merged = merge_scenes([Scene(), Scene(mesh=triangle(), colors=["red"])])
        assert merged.colors == ("red",)
