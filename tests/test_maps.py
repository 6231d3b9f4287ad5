import pytest
import numpy as np
from numpy.testing import assert_allclose

from mtsigma import maps, utils


class TestMaps:
    values = np.array([0.01, 10, 3, 4])

    def test_new(self):

        class MapNew(maps.BaseMap):
            def __init__(self):
                super().__init__(description='my new map')

        testmap = MapNew()

        assert "MapNew: my new map" in testmap.__repr__()
        assert testmap.name == 'New'
        assert testmap.parameterization is None
        assert not testmap.is_linear

        with pytest.raises(NotImplementedError, match='Forward map not imple'):
            testmap.forward(1)

        with pytest.raises(NotImplementedError, match='Backward map not impl'):
            testmap.backward(1)

        with pytest.raises(NotImplementedError, match='Derivative chain not '):
            testmap.derivative_chain(1, 1)

        with pytest.raises(NotImplementedError, match='Linearization not im'):
            testmap.linearize(1, 1)

    def test_conductivity(self):
        pmap = maps.MapConductivity()
        assert pmap.parameterization == 'LINEAR'
        assert pmap.is_linear

        # Forward
        forward = pmap.forward(self.values)
        assert_allclose(forward, self.values)

        # Backward
        backward = pmap.backward(forward)
        assert_allclose(backward, self.values)

        # Derivative
        gradient = 2*np.ones(self.values.shape)
        derivative = gradient.copy()
        pmap.derivative_chain(gradient, self.values)
        assert_allclose(gradient, derivative)

        # No linearization.
        with pytest.raises(utils.UnsupportedParameterizationError,
                           match='not defined for the LINEAR'):
            pmap.linearize(gradient, self.values)

    def test_lnconductivity(self):
        pmap = maps.MapLnConductivity()
        assert pmap.parameterization == 'LOGE'
        assert not pmap.is_linear

        # Forward
        forward = pmap.forward(self.values)
        assert_allclose(forward, np.log(self.values))

        # Backward
        backward = pmap.backward(forward)
        assert_allclose(backward, self.values)

        # Derivative
        gradient = 2*np.ones(self.values.shape)
        derivative = gradient.copy()
        pmap.derivative_chain(gradient, forward)
        assert_allclose(gradient, derivative*self.values)

        # Linearization is the derivative of backward.
        dx = np.array([1e-3, -2e-3, 0, 5e-4])
        assert_allclose(pmap.linearize(dx, forward), dx*self.values)
        h = 1e-6
        fd = (pmap.backward(forward + h*dx) - pmap.backward(forward))/h
        assert_allclose(pmap.linearize(dx, forward), fd, rtol=1e-5,
                        atol=1e-12)


def test_get_map():
    pmap = maps.MapLnConductivity()
    assert maps.get_map(pmap) is pmap
    assert maps.get_map('LOGE') == pmap
    assert maps.get_map('loge') == pmap
    assert maps.get_map('LnConductivity') == pmap
    assert maps.get_map('LINEAR') == maps.MapConductivity()
    assert maps.get_map('Conductivity') == maps.MapConductivity()
    assert maps.get_map('LINEAR') != pmap

    with pytest.raises(ValueError, match="Unknown mapping 'Resistivity'"):
        maps.get_map('Resistivity')


def test_all_dir():
    assert set(maps.__all__) == set(dir(maps))
