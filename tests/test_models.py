import pytest
import numpy as np
from numpy.testing import assert_allclose

from . import helpers
from mtsigma import maps, meshes, models, utils


class TestModelParameter:
    grid = helpers.irregular_grid()  # 4 x 3 x 5, two air layers

    def test_basic(self):
        # Without values: zero-valued LOGE parameter, default air.
        model = models.ModelParameter(self.grid)
        assert model.shape == (4, 3, 3)
        assert model.size == 36
        assert model.parameterization == 'LOGE'
        assert model.zero_valued
        assert model.allocated
        assert_allclose(model.cell_value, 0.0)
        assert_allclose(model.air_value, np.log(models.AIR_CONDUCTIVITY))
        assert_allclose(model.air_conductivity, 1e-10)
        assert 'LOGE (log_e(conductivity)); 4 x 3 x 3 (36); zero' in repr(
                model)

        # Flat values, Fortran order.
        values = np.arange(36.)
        model = models.ModelParameter(self.grid, values, mapping='LINEAR')
        assert not model.zero_valued
        assert model.cell_value.shape == (4, 3, 3)
        assert model.cell_value[1, 0, 0] == 1.0
        assert model.cell_value[0, 1, 0] == 4.0
        assert_allclose(model.air_value, 1e-10)
        assert_allclose(model.conductivity, model.cell_value)

        # Broadcasting.
        model = models.ModelParameter(self.grid, -2.0, air_value=-20)
        assert_allclose(model.cell_value, -2.0)
        assert_allclose(model.conductivity, np.exp(-2.0))
        assert model.air_value == -20.0

        # Air value is fixed.
        with pytest.raises(AttributeError):
            model.air_value = 1.0

    def test_errors(self):
        with pytest.raises(ValueError, match='`values` must be all finite'):
            models.ModelParameter(self.grid, np.inf)
        with pytest.raises(ValueError, match='`air_value` must be finite'):
            models.ModelParameter(self.grid, air_value=np.nan)
        with pytest.raises(ValueError, match='could not be broadcast'):
            models.ModelParameter(self.grid, np.ones(5))
        with pytest.raises(ValueError, match="Unknown mapping 'LOG10'"):
            models.ModelParameter(self.grid, mapping='LOG10')

    def test_allocation(self):
        model = models.ModelParameter(self.grid, 1.0)
        model.deallocate()
        assert not model.allocated
        assert 'deallocated' in repr(model)

        with pytest.raises(utils.InvalidStateError, match='not allocated'):
            _ = model.cell_value
        with pytest.raises(utils.InvalidStateError, match='not allocated'):
            model.copy()
        with pytest.raises(utils.InvalidStateError, match='not allocated'):
            model.dot(models.ModelParameter(self.grid))

        # Setting values reallocates.
        model.cell_value = 3.0
        assert model.allocated
        assert_allclose(model.cell_value, 3.0)

        # So does zero.
        model.deallocate()
        model.zero()
        assert model.zero_valued
        assert_allclose(model.cell_value, 0.0)

    def test_arithmetic(self):
        rng = np.random.default_rng(5)
        v1 = rng.standard_normal(self.grid.shape_earth)
        v2 = rng.standard_normal(self.grid.shape_earth)
        m1 = models.ModelParameter(self.grid, v1, air_value=-15)
        m2 = models.ModelParameter(self.grid, v2)

        assert_allclose((m1 + m2).cell_value, v1 + v2)
        assert_allclose((m1 - m2).cell_value, v1 - v2)
        assert_allclose((2*m1).cell_value, 2*v1)
        assert_allclose((m1*0.5).cell_value, 0.5*v1)

        # Results share the grid and its volume cache; air is kept.
        scaled = 0.5*m1
        assert scaled.grid is m1.grid
        assert scaled.air_value == -15
        assert (m1 + m2).grid is m1.grid
        assert (m1 - m2).grid is m1.grid
        _ = self.grid.edge_volumes
        assert scaled.grid.volumes.edges is self.grid.edge_volumes

        # Linear combination; air from self.
        out = m1.lin_comb(2.0, -3.0, m2)
        assert_allclose(out.cell_value, 2*v1 - 3*v2)
        assert out.air_value == -15
        assert not out.zero_valued
        assert m2.lin_comb(1, 1, m1).air_value == m2.air_value

        # Zero-valued is kept if both operands are zero.
        z1 = models.ModelParameter(self.grid)
        z2 = models.ModelParameter(self.grid)
        assert (z1 + z2).zero_valued
        assert not (z1 + m1).zero_valued
        assert (3*z1).zero_valued

        # Inner product.
        assert_allclose(m1.dot(m2), np.sum(v1*v2))
        assert m1.dot(z1) == 0.0

        # Not supported.
        with pytest.raises(TypeError):
            _ = m1 + 1.0
        with pytest.raises(TypeError):
            _ = m1*m2

    def test_operator_test(self):
        m1 = models.ModelParameter(self.grid, 1.0)
        with pytest.raises(ValueError, match='different parameterizations'):
            m1.dot(models.ModelParameter(self.grid, 1.0, mapping='LINEAR'))

        grid = meshes.TensorMesh(self.grid.h, nz_air=1)
        with pytest.raises(ValueError, match='different grids'):
            m1.dot(models.ModelParameter(grid, 1.0))

    def test_equal_copy_dict(self):
        model = models.ModelParameter(self.grid, np.arange(36.), -10)
        cp = model.copy()
        assert cp == model
        assert cp.cell_value is not model.cell_value
        assert cp.air_value == -10

        mdict = model.to_dict()
        assert mdict['__class__'] == 'ModelParameter'
        assert mdict['mapping'] == 'LOGE'
        assert mdict['zero_valued'] is False
        assert models.ModelParameter.from_dict(mdict) == model

        # Zero flag survives a copy.
        assert models.ModelParameter(self.grid).copy().zero_valued

        # Differences.
        assert model != models.ModelParameter(self.grid, np.arange(36.))
        assert model != models.ModelParameter(self.grid, 1.0, -10)
        assert model != models.ModelParameter(
                self.grid, np.arange(36.), -10, 'LINEAR')
        assert model != model.cell_value


def test_random_model():
    grid = helpers.irregular_grid()
    m1 = models.random_model(grid, delta=0.1, seed=3)
    m2 = models.random_model(grid, delta=0.1, seed=3)
    assert m1 == m2
    assert not m1.zero_valued
    assert np.all(np.abs(m1.cell_value) <= 0.1)
    assert m1.parameterization == 'LOGE'

    m3 = models.random_model(grid, mapping=maps.MapConductivity(), seed=4,
                             air_value=0.5)
    assert m3.parameterization == 'LINEAR'
    assert m3.air_value == 0.5
    assert m3 != models.random_model(grid, mapping='LINEAR', seed=5,
                                     air_value=0.5)


def test_all_dir():
    assert set(models.__all__) == set(dir(models))
