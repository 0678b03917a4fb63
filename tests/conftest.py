import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest


def make_rgba(solid, alpha=255):
    """Image RGBA grise dont l'alpha suit le masque donné"""
    solid = np.asarray(solid, dtype=bool)
    rgba = np.zeros(solid.shape + (4,), dtype=np.uint8)
    rgba[..., :3] = 200
    rgba[..., 3] = np.where(solid, alpha, 0)
    return rgba


@pytest.fixture
def rgba_from_mask():
    return make_rgba


@pytest.fixture
def opaque_4x4():
    return make_rgba(np.ones((4, 4), dtype=bool))


@pytest.fixture
def two_blocks():
    solid = np.zeros((12, 20), dtype=bool)
    solid[1:3, 1:3] = True
    solid[8:10, 15:17] = True
    return make_rgba(solid)
