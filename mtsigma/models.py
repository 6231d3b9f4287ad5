"""
Model parameters: the earth conductivities (in their parameterization) and
the fixed air value defined on a grid.
"""
# Copyright 2018 The emsig community.
#
# This file is part of mtsigma.
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not
# use this file except in compliance with the License.  You may obtain a copy
# of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.  See the
# License for the specific language governing permissions and limitations under
# the License.

import numbers
from copy import deepcopy

import numpy as np

from mtsigma import maps, meshes, utils

__all__ = ['ModelParameter', 'random_model', 'AIR_CONDUCTIVITY']

# Default conductivity of the air (S/m).
AIR_CONDUCTIVITY = 1e-10


def __dir__():
    return __all__


class ModelParameter:
    r"""A conductivity model parameter on the earth cells of a grid.

    The model parameter holds one value per earth cell, ``cell_value``, of
    shape ``(nx, ny, nz_earth)``, and one scalar for all air cells,
    ``air_value``. The air value is fixed at construction; it is not part of
    the inversion. Both are stored in the parameterization of the ``mapping``,
    either linear conductivity (``'LINEAR'``) or natural logarithm of the
    conductivity (``'LOGE'``).

    A model parameter can also represent a perturbation about a background
    model; a parameter which was created without values (or set to zero with
    :meth:`zero`) is flagged as ``zero_valued``, which lets linear operations
    return early.

    The grid is shared by reference; the ``cell_value`` buffer belongs to the
    model parameter.


    Parameters
    ----------
    grid : TensorMesh
        The grid; a :class:`mtsigma.meshes.TensorMesh` instance.

    values : {None, array_like}, default: None
        Earth-cell values. The values are stored as Fortran-ordered array with
        the shape given by ``grid.shape_earth``. The provided value must be
        broadcastable to that shape, or be a flat array of size
        ``grid.n_earth``. If None, the values are set to zero and the
        parameter is flagged as ``zero_valued``.

    air_value : {None, float}, default: None
        Air value in the parameterization of ``mapping``. Defaults to
        ``AIR_CONDUCTIVITY`` (1e-10 S/m), mapped.

    mapping : {str, BaseMap}, default: 'LOGE'
        Parameterization; ``'LOGE'`` or ``'LINEAR'`` (or the corresponding map
        names ``'LnConductivity'`` or ``'Conductivity'``).

    """

    def __init__(self, grid, values=None, air_value=None, mapping='LOGE'):
        """Initiate a new model parameter."""

        # Store grid.
        self.grid = grid

        # Alias shape_earth and n_earth to shape and size.
        self.shape = self.grid.shape_earth
        self.size = self.grid.n_earth

        # Get and store map.
        self.map = maps.get_map(mapping)

        # Air value; fixed.
        if air_value is None:
            air_value = self.map.forward(AIR_CONDUCTIVITY)
        self._air_value = float(air_value)
        if not np.isfinite(self._air_value):
            raise ValueError("`air_value` must be finite.")

        # Earth values.
        self._cell_value = None
        if values is None:
            self.zero()
        else:
            self.cell_value = values

    def __repr__(self):
        """Simple representation."""
        state = '' if self.allocated else '; deallocated'
        state += '; zero' if self.zero_valued else ''
        return (f"{self.__class__.__name__}: {self.parameterization} "
                f"({self.map.description}); {self.shape[0]} x "
                f"{self.shape[1]} x {self.shape[2]} ({self.size:,}){state}")

    # ARITHMETIC
    def __add__(self, model):
        """Add two model parameters."""
        if not isinstance(model, ModelParameter):
            return NotImplemented
        return self.lin_comb(1.0, 1.0, model)

    def __sub__(self, model):
        """Subtract two model parameters."""
        if not isinstance(model, ModelParameter):
            return NotImplemented
        return self.lin_comb(1.0, -1.0, model)

    def __mul__(self, scalar):
        """Multiply model parameter by a scalar."""
        if not isinstance(scalar, numbers.Real):
            return NotImplemented
        self._check_allocated()
        out = ModelParameter(self.grid, scalar*self.cell_value,
                             self.air_value, self.map)
        out.zero_valued = self.zero_valued
        return out

    __rmul__ = __mul__

    def __eq__(self, model):
        """Compare two model parameters."""

        # Check if model is a ModelParameter instance.
        equal = isinstance(model, ModelParameter)

        # Check input.
        if equal:
            try:
                self._operator_test(model)
            except (ValueError, utils.InvalidStateError):
                equal = False

        # Compare values.
        if equal:
            equal *= self.air_value == model.air_value
            equal *= np.allclose(self.cell_value, model.cell_value)

        return bool(equal)

    def lin_comb(self, a, b, model):
        """Return the linear combination ``a*self + b*model``.

        The air value of the result is the one of ``self``.


        Parameters
        ----------
        a, b : float
            Coefficients.

        model : ModelParameter
            Second model parameter; same grid and parameterization.


        Returns
        -------
        out : ModelParameter
            New model parameter.

        """
        self._operator_test(model)
        values = a*self.cell_value + b*model.cell_value
        out = ModelParameter(self.grid, values, self.air_value, self.map)
        out.zero_valued = self.zero_valued and model.zero_valued
        return out

    def dot(self, model):
        """Return the Euclidean inner product of the earth-cell values."""
        self._operator_test(model)
        if self.zero_valued or model.zero_valued:
            return 0.0
        return float(np.vdot(self.cell_value, model.cell_value))

    def zero(self):
        """Set all earth-cell values to zero; flag as ``zero_valued``.

        Allocates the buffer if necessary; the air value is kept.

        """
        if self._cell_value is None:
            self._cell_value = np.zeros(self.shape, order='F')
        else:
            self._cell_value[...] = 0.0
        self.zero_valued = True

    # SERIALIZATION
    def copy(self):
        """Return a copy of the ModelParameter."""
        return self.from_dict(self.to_dict(True))

    def to_dict(self, copy=False):
        """Store the necessary information in a dict for serialization.

        Parameters
        ----------
        copy : bool, default: False
            If True, returns a deep copy of the dict.


        Returns
        -------
        out : dict
            Dictionary containing all information to re-create the
            ModelParameter.

        """
        self._check_allocated()
        out = {
            '__class__': self.__class__.__name__,
            'grid': self.grid.to_dict(),
            'values': self.cell_value,
            'air_value': self.air_value,
            'mapping': self.parameterization,
            'zero_valued': self.zero_valued,
        }
        if copy:
            return deepcopy(out)
        else:
            return out

    @classmethod
    def from_dict(cls, inp):
        """Convert dict into :class:`mtsigma.models.ModelParameter` instance.

        Parameters
        ----------
        inp : dict
            Dictionary as obtained from
            :func:`mtsigma.models.ModelParameter.to_dict`. The dictionary needs
            the keys ``values``, ``air_value``, ``mapping``, and ``grid``;
            ``grid`` itself is also a dict which needs the keys ``hx``,
            ``hy``, ``hz``, and ``origin``.

        Returns
        -------
        model : ModelParameter
            A :class:`mtsigma.models.ModelParameter` instance.

        """
        inp = {k: v for k, v in inp.items() if k != '__class__'}
        zero_valued = inp.pop('zero_valued', False)
        MeshClass = getattr(meshes, inp['grid']['__class__'])
        out = cls(grid=MeshClass.from_dict(inp.pop('grid')), **inp)
        out.zero_valued = zero_valued
        return out

    # PROPERTIES
    @property
    def parameterization(self):
        """Parameterization tag: 'LINEAR' or 'LOGE'."""
        return self.map.parameterization

    @property
    def air_value(self):
        """Air value (in the parameterization); fixed at construction."""
        return self._air_value

    @property
    def allocated(self):
        """True if the earth-cell values are allocated."""
        return self._cell_value is not None

    @property
    def cell_value(self):
        """Earth-cell values of shape ``grid.shape_earth``."""
        self._check_allocated()
        return self._cell_value

    @cell_value.setter
    def cell_value(self, values):
        """Update earth-cell values; reallocates if not fitting the grid."""

        # Cast it to an array of floats, in Fortran order.
        values = np.asfortranarray(values, dtype=np.float64)

        # If 1D array of self.size, reshape it; else broadcast it.
        if values.size == self.size:
            values = values.reshape(self.shape, order='F')
        elif values.shape != self.shape:
            values = np.ones(self.shape, order='F')*values

        # Check |val| < inf.
        if not np.all(np.isfinite(values)):
            raise ValueError("`values` must be all finite.")

        # Reallocate if there is no fitting buffer.
        if self._cell_value is None or self._cell_value.shape != self.shape:
            self._cell_value = np.zeros(self.shape, order='F')

        self._cell_value[...] = values
        self.zero_valued = False

    @property
    def conductivity(self):
        """Conductivity (S/m) of the earth cells."""
        return self.map.backward(self.cell_value)

    @property
    def air_conductivity(self):
        """Conductivity (S/m) of the air."""
        return float(self.map.backward(self.air_value))

    def deallocate(self):
        """Release the earth-cell values."""
        self._cell_value = None

    # INTERNAL UTILITIES
    def _check_allocated(self):
        """Raise InvalidStateError if values or grid are not available."""
        if self.grid is None or not self.allocated:
            raise utils.InvalidStateError(
                f"{self.__class__.__name__} is not allocated."
            )

    def _operator_test(self, model):
        """Check if ``self`` and ``model`` are consistent for operations."""

        # Ensure both are allocated.
        self._check_allocated()
        model._check_allocated()

        # Ensure the two instances have the same grid.
        if self.grid != model.grid:
            raise ValueError("Model parameters have different grids.")

        # Ensure the two instances have the same parameterization.
        if self.parameterization != model.parameterization:
            raise ValueError(
                "Model parameters have different parameterizations."
            )


def random_model(grid, delta=0.05, mapping='LOGE', seed=None, air_value=None):
    """Return a model parameter with random earth-cell values.

    The values are drawn uniformly from ``[-delta, delta]``; used as random
    perturbation for adjoint and derivative tests.


    Parameters
    ----------
    grid : TensorMesh
        The grid; a :class:`mtsigma.meshes.TensorMesh` instance.

    delta : float, default: 0.05
        Maximum absolute value.

    mapping : {str, BaseMap}, default: 'LOGE'
        Parameterization of the returned model parameter.

    seed : {None, int, Generator}, default: None
        Seed passed to :func:`numpy.random.default_rng`.

    air_value : {None, float}, default: None
        Air value; see :class:`ModelParameter`.


    Returns
    -------
    model : ModelParameter
        Model parameter with random values.

    """
    rng = np.random.default_rng(seed)
    values = rng.uniform(-delta, delta, size=grid.shape_earth)
    return ModelParameter(grid, values, air_value=air_value, mapping=mapping)
