import pytest
import numpy as np
from numpy.testing import assert_allclose

from . import helpers
from mtsigma import meshes


class TestTensorMesh:

    def test_basic(self):
        hx = [100., 200.]
        hy = [50., 50., 50.]
        hz = [1000., 500., 10., 20.]
        grid = meshes.TensorMesh([hx, hy, hz], origin=(1, 2, 3), nz_air=2)

        assert grid.shape_cells == (2, 3, 4)
        assert grid.shape_nodes == (3, 4, 5)
        assert grid.shape_earth == (2, 3, 2)
        assert grid.nz_air == 2
        assert grid.nz_earth == 2
        assert grid.n_cells == 24
        assert grid.n_earth == 12
        assert grid.n_nodes == 60
        assert grid.shape_edges_x == (2, 4, 5)
        assert grid.shape_edges_y == (3, 3, 5)
        assert grid.shape_edges_z == (3, 4, 4)
        assert grid.n_edges == 40 + 45 + 48
        assert_allclose(grid.nodes_x, [1, 101, 301])
        assert_allclose(grid.cell_centers_z, [503, 1253, 1508, 1523])
        assert 'TensorMesh: 2 x 3 x 4 (24); 2 air layer(s)' in repr(grid)

        # Widths are read-only.
        with pytest.raises(ValueError, match='read-only'):
            grid.h[0][0] = 1.0

    def test_errors(self):
        h = [[1., 1.], [1.], [1., 1., 1.]]
        with pytest.raises(ValueError, match='`origin` must be of shape'):
            meshes.TensorMesh(h, origin=(0, 0))
        with pytest.raises(ValueError, match='non-empty 1D array'):
            meshes.TensorMesh([[1.], [], [1.]])
        with pytest.raises(ValueError, match='finite and bigger than zero'):
            meshes.TensorMesh([[1.], [0.], [1.]])
        with pytest.raises(ValueError, match='finite and bigger than zero'):
            meshes.TensorMesh([[1.], [1.], [np.inf]])
        with pytest.raises(ValueError, match='`h` must contain'):
            meshes.TensorMesh([[1.], [1.]])
        with pytest.raises(ValueError, match=r'`nz_air` must be in \[0, 2\]'):
            meshes.TensorMesh(h, nz_air=3)
        with pytest.raises(ValueError, match='`nz_air` must be in'):
            meshes.TensorMesh(h, nz_air=-1)

    def test_copy_dict_eq(self):
        grid = helpers.irregular_grid()

        cgrid = grid.copy()
        assert cgrid == grid
        assert cgrid is not grid
        assert cgrid.nz_air == grid.nz_air

        gdict = grid.to_dict()
        assert gdict['__class__'] == 'TensorMesh'
        assert gdict['nz_air'] == 2
        assert meshes.TensorMesh.from_dict(gdict) == grid

        # Different air split, different grid.
        grid2 = meshes.TensorMesh(grid.h, grid.origin, nz_air=1)
        assert grid2 != grid
        assert grid != grid.h


class TestVolumes:

    def test_dual_widths(self):
        d = meshes.dual_widths([2., 4., 6.])
        assert_allclose(d, [1., 3., 5., 3.])
        assert_allclose(d.sum(), 12.)

    def test_values(self):
        grid = helpers.irregular_grid()
        h = grid.h
        d = grid.dual_h
        total = h[0].sum()*h[1].sum()*h[2].sum()

        # Cells.
        vc = meshes.cell_volume(grid)
        assert vc.size == grid.n_cells
        cv = vc.reshape(grid.shape_cells, order='F')
        assert_allclose(cv[2, 1, 3], h[0][2]*h[1][1]*h[2][3])
        assert_allclose(vc.sum(), total)

        # Edges; every direction sums up to the total volume.
        ve = meshes.edge_volume(grid)
        assert ve.size == grid.n_edges
        nx, ny = grid.n_edges_x, grid.n_edges_y
        assert_allclose(ve[:nx].sum(), total)
        assert_allclose(ve[nx:nx+ny].sum(), total)
        assert_allclose(ve[nx+ny:].sum(), total)
        vx = ve[:nx].reshape(grid.shape_edges_x, order='F')
        assert_allclose(vx[1, 0, 2], h[0][1]*d[1][0]*d[2][2])
        vz = ve[nx+ny:].reshape(grid.shape_edges_z, order='F')
        assert_allclose(vz[4, 3, 1], d[0][4]*d[1][3]*h[2][1])

        # Nodes.
        vn = meshes.node_volume(grid)
        assert vn.size == grid.n_nodes
        assert_allclose(vn.sum(), total)
        assert_allclose(vn[0], h[0][0]*h[1][0]*h[2][0]/8)

    def test_cache(self):
        grid = helpers.irregular_grid()
        cache = grid.volumes
        assert isinstance(cache, meshes.VolumeCache)
        assert not cache.is_cached
        assert 'cached []' in repr(cache)

        # Computed once; the same array is returned afterwards.
        ve = grid.edge_volumes
        assert grid.edge_volumes is ve
        assert "cached ['edges']" in repr(cache)
        _ = grid.cell_volumes
        _ = grid.node_volumes
        assert cache.is_cached

        # Cached arrays are read-only.
        with pytest.raises(ValueError, match='read-only'):
            ve[0] = 1.0

        # Invalidate: recomputed on next access, same values.
        cache.invalidate()
        assert not cache.is_cached
        ve2 = grid.edge_volumes
        assert ve2 is not ve
        assert_allclose(ve2, ve)

        # Meshes do not share caches.
        assert grid.copy().volumes is not cache

    def test_logging(self, caplog):
        grid = helpers.irregular_grid()
        with caplog.at_level('DEBUG', logger='mtsigma.meshes'):
            _ = grid.cell_volumes
            grid.volumes.invalidate()
        assert 'Computing cells volumes' in caplog.text
        assert 'Invalidating volume weights' in caplog.text


def test_all_dir():
    assert set(meshes.__all__) == set(dir(meshes))
