"""

Helpers
=======

These are some helper functions for the test suite.
"""
import numpy as np

from mtsigma import meshes, models


def widths(ncore, npad, width, factor):
    """Get cell widths for TensorMesh."""
    pad = ((np.ones(npad)*np.abs(factor))**(np.arange(npad)+1))*width
    return np.r_[pad[::-1], np.ones(ncore)*width, pad]


def irregular_grid(nz_air=2):
    """Small grid with irregular widths in all directions and air on top."""
    hx = widths(2, 1, 100, 1.5)                # 4 cells
    hy = np.array([80., 120., 100.])           # 3 cells
    hz = np.r_[widths(0, nz_air, 50, 2)[:nz_air], 50, 60, 70]
    return meshes.TensorMesh([hx, hy, hz], origin=(-100, 50, 0),
                             nz_air=nz_air)


def background(grid, conductivity=0.01, seed=None, delta=0.5):
    """LOGE background; homogeneous or, with a seed, randomly perturbed."""
    values = np.log(conductivity)*np.ones(grid.shape_earth)
    if seed is not None:
        rng = np.random.default_rng(seed)
        values += rng.uniform(-delta, delta, grid.shape_earth)
    return models.ModelParameter(grid, values)
