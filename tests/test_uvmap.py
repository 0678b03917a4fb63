"""Tests de la projection UV."""
import numpy as np

from uvmap import cell_center_uvs, cylindrical_wall_uvs, project_cap_uvs


class TestCapUVs:

    def test_full_image_corners(self):
        corners = [(0, 0), (8, 0), (8, 4), (0, 4)]

        uvs = project_cap_uvs(corners, (0, 0, 8, 4), 8, 4)

        np.testing.assert_allclose(uvs, [[0, 1], [1, 1], [1, 0], [0, 0]])

    def test_sub_bbox_maps_back_to_image_space(self):
        """Une bbox locale est ramenée dans l'espace normalisé de l'image"""
        points = np.array([[2, 3], [6, 3], [6, 5], [2, 5], [4, 4]])

        uvs = project_cap_uvs(points, (2, 3, 6, 5), 10, 8)

        np.testing.assert_allclose(uvs[:, 0], points[:, 0] / 10)
        np.testing.assert_allclose(uvs[:, 1], 1 - points[:, 1] / 8)

    def test_bounded(self):
        rng = np.random.default_rng(1)
        points = rng.uniform(1, 9, size=(50, 2))

        uvs = project_cap_uvs(points, (1, 1, 9, 9), 12, 10)

        assert (uvs >= 0).all() and (uvs <= 1).all()


class TestWallUVs:

    def test_cylindrical_angle_and_depth(self):
        positions = np.array([
            [1.0, 0.0, -0.5],
            [0.0, 1.0, 0.5],
            [-1.0, 0.0, 0.0],
        ])

        uvs = cylindrical_wall_uvs(positions)

        np.testing.assert_allclose(uvs[:, 0], [0.5, 0.75, 1.0])
        np.testing.assert_allclose(uvs[:, 1], [0.0, 1.0, 0.5])

    def test_cylindrical_empty(self):
        assert cylindrical_wall_uvs(np.zeros((0, 3))).shape == (0, 2)

    def test_cell_centers_repeated_per_quad(self):
        uvs = cell_center_uvs([[0, 0], [3, 1]], 4, 2)

        assert uvs.shape == (8, 2)
        np.testing.assert_allclose(uvs[:4], [[0.125, 0.75]] * 4)
        np.testing.assert_allclose(uvs[4:], [[0.875, 0.25]] * 4)
