"""
Staggered tensor mesh with an air/earth split, and the volume weights
associated with its cells, edges, and nodes.
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

__all__ = ['TensorMesh', 'VolumeCache', 'dual_widths', 'cell_volume',
           'edge_volume', 'node_volume']

logger = logging.getLogger(__name__)


def __dir__():
    return __all__


class TensorMesh:
    """Staggered 3D tensor mesh with air layers on top.

    The vertical axis is z; layer ``0`` is the top of the domain. The first
    ``nz_air`` layers are air, the remaining ``nz_earth = nz - nz_air`` layers
    are earth. The cell widths are stored read-only; a mesh is not modified
    once built, hence the volume weights computed from it never go stale.

    Edges are grouped by direction: x-directed edges have shape
    ``(nx, ny+1, nz+1)``, y-directed edges ``(nx+1, ny, nz+1)``, and
    z-directed edges ``(nx+1, ny+1, nz)``; all arrays are Fortran-ordered.


    Parameters
    ----------
    h : [array_like, array_like, array_like]
        Cell widths in x, y, and z directions.

    origin : array_like, default: (0, 0, 0)
        Origin (x, y, z).

    nz_air : int, default: 0
        Number of air layers at the top of the mesh.


    Examples
    --------

    .. ipython::

       In [1]: import mtsigma
          ...: import numpy as np

       In [2]: # Four cells of 100 m in x and y, ten layers of which the
          ...: # upper two are air.
          ...: hx = np.ones(4)*100
          ...: grid = mtsigma.TensorMesh(
          ...:            [hx, hx, np.ones(10)*50], nz_air=2)
          ...: grid  # QC grid

    """

    def __init__(self, h, origin=(0, 0, 0), nz_air=0):
        """Initialize the mesh."""

        # Store origin.
        self.origin = np.array(origin, dtype=float)
        if self.origin.shape != (3, ):
            raise ValueError("`origin` must be of shape (3, ).")

        # Width of cells, cast to arrays; check them; make them read-only.
        self.h = []
        for i, hi in enumerate(h):
            hi = np.array(hi, dtype=float)
            if hi.ndim != 1 or hi.size == 0:
                raise ValueError(
                    f"Cell widths in {'xyz'[i]}-direction must be a "
                    "non-empty 1D array."
                )
            if not np.all(np.isfinite(hi)) or np.any(hi <= 0.0):
                raise ValueError(
                    f"Cell widths in {'xyz'[i]}-direction must be all "
                    "finite and bigger than zero."
                )
            hi.flags.writeable = False
            self.h.append(hi)
        if len(self.h) != 3:
            raise ValueError("`h` must contain cell widths for x, y, and z.")

        # Air/earth split.
        self.nz_air = int(nz_air)
        if self.nz_air < 0 or self.nz_air >= self.h[2].size:
            raise ValueError(
                f"`nz_air` must be in [0, {self.h[2].size-1}]; "
                f"provided: {nz_air}."
            )
        self.nz_earth = self.h[2].size - self.nz_air

        # Node related properties.
        shape_nodes = (self.h[0].size+1, self.h[1].size+1, self.h[2].size+1)
        self.shape_nodes = shape_nodes
        self.n_nodes = int(np.prod(shape_nodes))
        self.nodes_x = np.r_[0., self.h[0].cumsum()] + self.origin[0]
        self.nodes_y = np.r_[0., self.h[1].cumsum()] + self.origin[1]
        self.nodes_z = np.r_[0., self.h[2].cumsum()] + self.origin[2]

        # Cell related properties.
        shape_cells = (self.h[0].size, self.h[1].size, self.h[2].size)
        self.shape_cells = shape_cells
        self.n_cells = int(np.prod(shape_cells))
        self.cell_centers_x = (self.nodes_x[1:] + self.nodes_x[:-1])/2
        self.cell_centers_y = (self.nodes_y[1:] + self.nodes_y[:-1])/2
        self.cell_centers_z = (self.nodes_z[1:] + self.nodes_z[:-1])/2

        # Earth related properties.
        self.shape_earth = (shape_cells[0], shape_cells[1], self.nz_earth)
        self.n_earth = int(np.prod(self.shape_earth))

        # Edge related properties.
        self.shape_edges_x = (shape_cells[0], shape_nodes[1], shape_nodes[2])
        self.shape_edges_y = (shape_nodes[0], shape_cells[1], shape_nodes[2])
        self.shape_edges_z = (shape_nodes[0], shape_nodes[1], shape_cells[2])
        self.n_edges_x = int(np.prod(self.shape_edges_x))
        self.n_edges_y = int(np.prod(self.shape_edges_y))
        self.n_edges_z = int(np.prod(self.shape_edges_z))
        self.n_edges = self.n_edges_x + self.n_edges_y + self.n_edges_z

        # Volume weights; computed on first access.
        self._volumes = VolumeCache(self)

    def __repr__(self):
        """Simple representation."""
        return (f"TensorMesh: {self.shape_cells[0]} x {self.shape_cells[1]} x "
                f"{self.shape_cells[2]} ({self.n_cells:,}); "
                f"{self.nz_air} air layer(s)")

    def __eq__(self, mesh):
        """Compare two meshes."""

        # Check if mesh is of the same instance.
        equal = mesh.__class__.__name__ == self.__class__.__name__

        # Check shape and air layers.
        if equal:
            equal *= self.shape_cells == mesh.shape_cells
            equal *= self.nz_air == mesh.nz_air

        # Check distances and origin.
        if equal:
            equal *= np.allclose(self.h[0], mesh.h[0], atol=0)
            equal *= np.allclose(self.h[1], mesh.h[1], atol=0)
            equal *= np.allclose(self.h[2], mesh.h[2], atol=0)
            equal *= np.allclose(self.origin, mesh.origin, atol=0)

        return bool(equal)

    def copy(self):
        """Return a copy of the TensorMesh."""
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
            Dictionary containing all information to re-create the TensorMesh.

        """
        out = {
            'hx': self.h[0],
            'hy': self.h[1],
            'hz': self.h[2],
            'origin': self.origin,
            'nz_air': self.nz_air,
            '__class__': self.__class__.__name__
        }
        if copy:
            return deepcopy(out)
        else:
            return out

    @classmethod
    def from_dict(cls, inp):
        """Convert dictionary into :class:`mtsigma.meshes.TensorMesh` instance.

        Parameters
        ----------
        inp : dict
            Dictionary as obtained from
            :func:`mtsigma.meshes.TensorMesh.to_dict`. The dictionary needs the
            keys ``hx``, ``hy``, ``hz``, and ``origin``; ``nz_air`` is
            optional.

        Returns
        -------
        mesh : TensorMesh
            A :class:`mtsigma.meshes.TensorMesh` instance.

        """
        inp = {k: v for k, v in inp.items() if k != '__class__'}
        return cls(h=[inp.pop('hx'), inp.pop('hy'), inp.pop('hz')], **inp)

    @property
    def volumes(self):
        """Volume cache of this mesh; a :class:`VolumeCache` instance."""
        return self._volumes

    @property
    def cell_volumes(self):
        """Cell volumes as 1D array (Fortran order)."""
        return self._volumes.cells

    @property
    def edge_volumes(self):
        """Edge volumes as 1D array; x-, y-, and z-edges one after another."""
        return self._volumes.edges

    @property
    def node_volumes(self):
        """Node volumes as 1D array (Fortran order)."""
        return self._volumes.nodes

    @property
    def dual_h(self):
        """Dual cell widths (widths associated with nodes) in x, y, z."""
        return [dual_widths(self.h[0]), dual_widths(self.h[1]),
                dual_widths(self.h[2])]


class VolumeCache:
    """Lazily computed diagonal volume weights of a mesh.

    The weights are computed on first access and stored until
    :meth:`invalidate` is called. One cache belongs to exactly one
    :class:`TensorMesh`; meshes never share caches.

    - ``cells``: ``hx[i] hy[j] hz[k]``;
    - ``edges``: x-edges ``hx[i] dy[j] dz[k]``, y-edges ``dx[i] hy[j]
      dz[k]``, z-edges ``dx[i] dy[j] hz[k]``;
    - ``nodes``: ``dx[i] dy[j] dz[k]``;

    where ``d`` are the dual widths from :func:`dual_widths`. Summed over one
    direction the edge volumes, as well as the node volumes, add up to the
    volume of the entire mesh.


    Parameters
    ----------
    grid : TensorMesh
        The mesh to which the weights belong.

    """

    def __init__(self, grid):
        """Initiate an empty cache."""
        self.grid = grid
        self._cells = None
        self._edges = None
        self._nodes = None

    def __repr__(self):
        cached = [k for k in ['cells', 'edges', 'nodes']
                  if getattr(self, '_'+k) is not None]
        return f"{self.__class__.__name__}: cached {cached}"

    @property
    def cells(self):
        """Cell volumes."""
        if self._cells is None:
            h = self.grid.h
            self._cells = self._store(_outer(h[0], h[1], h[2]), 'cells')
        return self._cells

    @property
    def edges(self):
        """Edge volumes, x-, y-, and z-edges one after the other."""
        if self._edges is None:
            h = self.grid.h
            d = self.grid.dual_h
            self._edges = self._store(np.r_[
                _outer(h[0], d[1], d[2]),
                _outer(d[0], h[1], d[2]),
                _outer(d[0], d[1], h[2]),
            ], 'edges')
        return self._edges

    @property
    def nodes(self):
        """Node volumes."""
        if self._nodes is None:
            d = self.grid.dual_h
            self._nodes = self._store(_outer(d[0], d[1], d[2]), 'nodes')
        return self._nodes

    @property
    def is_cached(self):
        """True if all three weights are currently stored."""
        return not any(v is None for v in
                       [self._cells, self._edges, self._nodes])

    def invalidate(self):
        """Drop all stored weights; they are recomputed on next access."""
        logger.debug(f"Invalidating volume weights of {self.grid!r}.")
        self._cells = None
        self._edges = None
        self._nodes = None

    def _store(self, values, name):
        """Make values read-only before caching them."""
        logger.debug(f"Computing {name} volumes ({values.size:,}) "
                     f"of {self.grid!r}.")
        values.flags.writeable = False
        return values


def dual_widths(h):
    """Return the widths associated with the nodes of a 1D cell partition.

    Interior nodes get the mean of the two adjacent cell widths, boundary
    nodes half the width of their only adjacent cell.


    Parameters
    ----------
    h : ndarray
        Cell widths of size n.


    Returns
    -------
    d : ndarray
        Dual widths of size n+1; ``d.sum() == h.sum()``.

    """
    h = np.asarray(h, dtype=float)
    return np.r_[h[0]/2, (h[:-1] + h[1:])/2, h[-1]/2]


def cell_volume(grid):
    """Return cell volumes of ``grid`` (cached by the grid)."""
    return grid.volumes.cells


def edge_volume(grid):
    """Return edge volumes of ``grid`` (cached by the grid)."""
    return grid.volumes.edges


def node_volume(grid):
    """Return node volumes of ``grid`` (cached by the grid)."""
    return grid.volumes.nodes


def _outer(wx, wy, wz):
    """Return the Fortran-raveled outer product of three vectors."""
    return (wx[:, None, None]*wy[None, :, None]*wz[None, None, :]).ravel('F')
