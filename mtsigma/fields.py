"""
Containers for quantities living on the cells, nodes, or edges of a grid.
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

import logging
from copy import deepcopy

import numpy as np

from mtsigma import meshes, utils

__all__ = ['Field']

logger = logging.getLogger(__name__)

# Location name -> grid-attribute suffix.
_LOCATIONS = {'cells': 'cells', 'nodes': 'nodes', 'edges': 'edges'}


def __dir__():
    return __all__


class Field:
    r"""A Field contains a quantity living on cells, nodes, or edges.

    A Field is a simple container that has a 1D array ``Field.field``. Scalar
    quantities live on cell centers (``location='cells'``) or on nodes
    (``location='nodes'``) and are accessible as 3D array through
    ``Field.values``. Vector quantities live on the edges
    (``location='edges'``); the x-, y-, and z-directed components are stored
    one after the other and are accessible through ``Field.f{x;y;z}``. All 3D
    views are Fortran-ordered ('F').

    A field can be deallocated; operators receiving an unallocated field or a
    field of another grid as output container reallocate it.


    Parameters
    ----------

    grid : TensorMesh
        The grid; a :class:`mtsigma.meshes.TensorMesh` instance.

    data : ndarray, default: None
        The actual data, a ``ndarray`` of size ``grid.n_{cells;nodes;edges}``.
        If ``None``, it is initiated with zeros.

    location : {'cells', 'nodes', 'edges'}, default: 'edges'
        Where the quantity lives.

    """

    def __init__(self, grid, data=None, location='edges'):
        """Initiate a new Field instance."""

        if location not in _LOCATIONS:
            raise ValueError(
                f"Unknown location '{location}'; "
                f"implemented: {list(_LOCATIONS)}."
            )

        # Store grid and location.
        self.grid = grid
        self.location = location

        # Store field.
        if data is None:
            field = np.zeros(self._get_prop('n'), dtype=np.float64)
        else:
            field = np.array(data, dtype=np.float64).ravel('F')
            if field.size != self._get_prop('n'):
                raise ValueError(
                    f"`data` must be of size {self._get_prop('n')} for "
                    f"location '{location}'; provided: {field.size}."
                )
        self._field = field

    def __repr__(self):
        """Simple representation."""
        size = f"{self._field.size:,}" if self.allocated else 'deallocated'
        return (f"{self.__class__.__name__}: {self.location}; "
                f"{self.grid.shape_cells[0]} x {self.grid.shape_cells[1]} x "
                f"{self.grid.shape_cells[2]}; {size}")

    def __eq__(self, field):
        """Compare two fields."""
        equal = self.__class__.__name__ == field.__class__.__name__
        equal *= self.location == field.location
        equal *= self.grid == field.grid
        equal *= self.allocated == field.allocated
        if equal and self.allocated:
            equal *= np.allclose(self._field, field._field, atol=0, rtol=1e-10)
        return bool(equal)

    def copy(self):
        """Return a copy of the Field."""
        return self.from_dict(self.to_dict(copy=True))

    def to_dict(self, copy=False):
        """Store the necessary information of the Field in a dict.

        Parameters
        ----------
        copy : bool, default: False
            If True, returns a deep copy of the dict.


        Returns
        -------
        out : dict
            Dictionary containing all information to re-create the Field.

        """
        self._check_allocated()
        out = {
            '__class__': self.__class__.__name__,
            'grid': self.grid.to_dict(),
            'data': self._field,
            'location': self.location,
        }
        if copy:
            return deepcopy(out)
        else:
            return out

    @classmethod
    def from_dict(cls, inp):
        """Convert dictionary into :class:`mtsigma.fields.Field` instance.

        Parameters
        ----------
        inp : dict
            Dictionary as obtained from :func:`mtsigma.fields.Field.to_dict`.
            The dictionary needs the keys ``data``, ``location``, and
            ``grid``; ``grid`` itself is also a dict which needs the keys
            ``hx``, ``hy``, ``hz``, and ``origin``.

        Returns
        -------
        field : Field
            A :class:`mtsigma.fields.Field` instance.

        """
        inp = {k: v for k, v in inp.items() if k != '__class__'}
        MeshClass = getattr(meshes, inp['grid']['__class__'])
        return cls(grid=MeshClass.from_dict(inp.pop('grid')), **inp)

    # ALLOCATION
    @property
    def allocated(self):
        """True if the field holds a buffer."""
        return self._field is not None

    def deallocate(self):
        """Release the buffer; the field has to be reallocated before use."""
        self._field = None

    def reallocate(self, grid=None):
        """Replace the buffer by zeros sized for ``grid``.

        Parameters
        ----------
        grid : TensorMesh, default: None
            New grid of the field; if None, the current grid is kept.

        """
        if grid is not None:
            self.grid = grid
        self._field = np.zeros(self._get_prop('n'), dtype=np.float64)

    def fits(self, grid):
        """True if the field is allocated on ``grid`` with the right size."""
        return (self.allocated and self.grid == grid and
                self._field.size == getattr(grid, self._get_name('n')))

    # DATA
    @property
    def field(self):
        """Entire field as 1D array ([fx, fy, fz] for edges)."""
        self._check_allocated()
        return self._field

    @field.setter
    def field(self, field):
        """Update field as 1D array."""
        self._check_allocated()
        self._field[:] = field

    @property
    def values(self):
        """Field on cells or nodes as 3D array.

        Shape: ``grid.shape_cells`` or ``grid.shape_nodes``.

        """
        if self.location == 'edges':
            raise AttributeError(
                "Edge fields have no `values`; use `fx`, `fy`, and `fz`."
            )
        self._check_allocated()
        return self._field.reshape(self._get_prop('shape'), order='F')

    @values.setter
    def values(self, values):
        """Update field on cells or nodes."""
        self.values[...] = values

    @property
    def fx(self):
        """Edge field in x direction.

        Shape: (grid.cell_centers_x, grid.nodes_y, grid.nodes_z).

        """
        i1 = self._get_edge_prop('n', 'x')
        shape = self._get_edge_prop('shape', 'x')
        return self._field[:i1].reshape(shape, order='F')

    @fx.setter
    def fx(self, fx):
        """Update edge field in x-direction."""
        i1 = self._get_edge_prop('n', 'x')
        self._field[:i1] = np.asarray(fx).ravel('F')

    @property
    def fy(self):
        """Edge field in y direction.

        Shape: (grid.nodes_x, grid.cell_centers_y, grid.nodes_z).

        """
        i0, i1 = self._get_edge_prop('n', 'x'), self._get_edge_prop('n', 'z')
        shape = self._get_edge_prop('shape', 'y')
        return self._field[i0:-i1].reshape(shape, order='F')

    @fy.setter
    def fy(self, fy):
        """Update edge field in y-direction."""
        i0, i1 = self._get_edge_prop('n', 'x'), self._get_edge_prop('n', 'z')
        self._field[i0:-i1] = np.asarray(fy).ravel('F')

    @property
    def fz(self):
        """Edge field in z direction.

        Shape: (grid.nodes_x, grid.nodes_y, grid.cell_centers_z).

        """
        i0 = self._get_edge_prop('n', 'z')
        shape = self._get_edge_prop('shape', 'z')
        return self._field[-i0:].reshape(shape, order='F')

    @fz.setter
    def fz(self, fz):
        """Update edge field in z-direction."""
        i0 = self._get_edge_prop('n', 'z')
        self._field[-i0:] = np.asarray(fz).ravel('F')

    @property
    def volumes(self):
        """Volume weights corresponding to the location of the field."""
        return getattr(self.grid.volumes, _LOCATIONS[self.location])

    # INTERNAL UTILITIES
    def _get_name(self, pre=None, post=None):
        """Returns grid-attribute name for the location of the field."""
        name = '' if pre is None else pre + '_'
        name += _LOCATIONS[self.location]
        name += '' if post is None else '_' + post
        return name

    def _get_prop(self, pre=None, post=None):
        """Returns grid-property for the location of the field."""
        return getattr(self.grid, self._get_name(pre, post))

    def _get_edge_prop(self, pre, post):
        """Returns edge-property; fails for scalar fields."""
        if self.location != 'edges':
            raise AttributeError(
                f"Field on {self.location} has no directional components; "
                "use `values`."
            )
        self._check_allocated()
        return self._get_prop(pre, post)

    def _check_allocated(self):
        """Raise InvalidStateError if the field is not allocated."""
        if not self.allocated:
            raise utils.InvalidStateError(
                f"{self.__class__.__name__} on {self.location} is not "
                "allocated."
            )


def _ensure_field(out, grid, location):
    """Return a zeroed field on ``grid`` at ``location``.

    If ``out`` is None a new field is created. Otherwise ``out`` is reused: it
    is reallocated if it is deallocated or lives on another grid; a fitting
    buffer is set to zero. A field at another location raises a ValueError.

    """
    if out is None:
        return Field(grid, location=location)

    if out.location != location:
        raise ValueError(
            f"Output field must live on {location}; provided: {out.location}."
        )

    if out.fits(grid):
        out._field[:] = 0.0
    else:
        logger.debug(f"Reallocating {out!r} for {grid!r}.")
        out.reallocate(grid)

    return out
