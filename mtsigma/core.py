"""
The **core** contains the number-crunching functionalities of
:mod:`mtsigma.operators`: the averaging operators between cells, edges, and
nodes of the staggered grid, and the single-edge average. These functions are
implemented as just-in-time (jit) compiled functions using the
:func:`numba.jit`-decorator of `numba <https://numba.pydata.org>`_.

These functions are not meant to be called directly, particularly not from an
end-user; they are called from functions in :mod:`mtsigma.operators`. They
carry no volume weighting and know nothing about the model parameterization.

All averaging functions *add* their result to the provided output arrays.
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

import numba as nb
import numpy as np

# Numba-settings
_numba_setting = {'nogil': True, 'fastmath': True, 'cache': True}


@nb.njit(**_numba_setting)
def cell_to_edge(values, ex, ey, ez):
    r"""Distribute cell-centered values to the edges of the cells.

    Every cell has twelve edges, four in each direction. Each of them receives
    a quarter of the cell value:

    .. math::

        e^x_{i,j,k} = \frac{1}{4}\sum_{j'=j-1}^{j}\sum_{k'=k-1}^{k}
                      c_{i,j',k'}\ ,

    and accordingly for :math:`e^y` and :math:`e^z`. Cells outside of the
    grid do not contribute; hence edges on the boundary collect only two (or
    one) cells.


    Parameters
    ----------
    values : ndarray
        Cell-centered values of shape ``grid.shape_cells``.

    ex, ey, ez : ndarray
        Edge arrays in x-, y-, and z-directions (``Field.f{x;y;z}``), to which
        the result is added.

    """

    # Get dimensions
    nx, ny, nz = values.shape

    # Loop over dimensions; x-fastest, then y, z
    for iz in range(nz):
        izp = iz+1
        for iy in range(ny):
            iyp = iy+1
            for ix in range(nx):
                ixp = ix+1

                val = values[ix, iy, iz]/4

                ex[ix, iy, iz] += val
                ex[ix, iyp, iz] += val
                ex[ix, iy, izp] += val
                ex[ix, iyp, izp] += val

                ey[ix, iy, iz] += val
                ey[ixp, iy, iz] += val
                ey[ix, iy, izp] += val
                ey[ixp, iy, izp] += val

                ez[ix, iy, iz] += val
                ez[ixp, iy, iz] += val
                ez[ix, iyp, iz] += val
                ez[ixp, iyp, iz] += val


@nb.njit(**_numba_setting)
def edge_to_cell(ex, ey, ez, values):
    r"""Collect edge values into the cells; transpose of :func:`cell_to_edge`.

    Every cell collects a quarter of each of its twelve edges, summed over
    the three directions. For any cell array ``c`` and edge arrays ``e``

    .. math::

        \langle \mathrm{cell\_to\_edge}(c), e\rangle =
        \langle c, \mathrm{edge\_to\_cell}(e)\rangle

    holds to machine precision.


    Parameters
    ----------
    ex, ey, ez : ndarray
        Edge arrays in x-, y-, and z-directions (``Field.f{x;y;z}``).

    values : ndarray
        Cell array of shape ``grid.shape_cells`` to which the result is added.

    """

    # Get dimensions
    nx, ny, nz = values.shape

    # Loop over dimensions; x-fastest, then y, z
    for iz in range(nz):
        izp = iz+1
        for iy in range(ny):
            iyp = iy+1
            for ix in range(nx):
                ixp = ix+1

                sx = (ex[ix, iy, iz] + ex[ix, iyp, iz] +
                      ex[ix, iy, izp] + ex[ix, iyp, izp])
                sy = (ey[ix, iy, iz] + ey[ixp, iy, iz] +
                      ey[ix, iy, izp] + ey[ixp, iy, izp])
                sz = (ez[ix, iy, iz] + ez[ixp, iy, iz] +
                      ez[ix, iyp, iz] + ez[ixp, iyp, iz])

                values[ix, iy, iz] += (sx + sy + sz)/4


@nb.njit(**_numba_setting)
def cell_to_node(values, nodes):
    r"""Distribute cell-centered values to the eight nodes of the cells.

    Each node receives an eighth of each of its (up to eight) adjacent cells.


    Parameters
    ----------
    values : ndarray
        Cell-centered values of shape ``grid.shape_cells``.

    nodes : ndarray
        Node array of shape ``grid.shape_nodes``, to which the result is
        added.

    """

    # Get dimensions
    nx, ny, nz = values.shape

    # Loop over dimensions; x-fastest, then y, z
    for iz in range(nz):
        for iy in range(ny):
            for ix in range(nx):

                val = values[ix, iy, iz]/8

                for kz in range(iz, iz+2):
                    for ky in range(iy, iy+2):
                        for kx in range(ix, ix+2):
                            nodes[kx, ky, kz] += val


@nb.njit(**_numba_setting)
def edge_average(values, hx, hy, hz, axis, ix, iy, iz, nz_air, loge):
    r"""Area-weighted average of the earth cells adjacent to one edge.

    An edge is shared by up to four cells. Their values are weighted by the
    cross-sectional area of the cell perpendicular to the edge, that is, by
    the product of the two transverse cell widths. Cells in the air (above
    ``nz_air``) and outside of the grid are omitted.


    Parameters
    ----------
    values : ndarray
        Earth-cell values of shape ``(nx, ny, nz_earth)``.

    hx, hy, hz : ndarray
        Cell widths of the entire grid (including air layers).

    axis : int
        Direction of the edge: 0 (x), 1 (y), or 2 (z).

    ix, iy, iz : int
        Global grid indices of the edge.

    nz_air : int
        Number of air layers.

    loge : bool
        If True, ``values`` are natural logarithms and are exponentiated
        before averaging.


    Returns
    -------
    average : float
        The weighted average; NaN if no earth cell is adjacent to the edge.

    """
    nx, ny, nz_earth = values.shape

    total = 0.0
    weight = 0.0
    for a in range(2):
        for b in range(2):

            # Indices of the adjacent cell.
            if axis == 0:
                jx, jy, jz = ix, iy-1+a, iz-1+b
            elif axis == 1:
                jx, jy, jz = ix-1+a, iy, iz-1+b
            else:
                jx, jy, jz = ix-1+a, iy-1+b, iz

            # Index in earth layers.
            ke = jz - nz_air

            # Skip cells in the air or outside of the grid.
            if jx < 0 or jx >= nx or jy < 0 or jy >= ny:
                continue
            if ke < 0 or ke >= nz_earth:
                continue

            # Transverse area.
            if axis == 0:
                w = hy[jy]*hz[jz]
            elif axis == 1:
                w = hx[jx]*hz[jz]
            else:
                w = hx[jx]*hy[jy]

            val = values[jx, jy, ke]
            if loge:
                val = np.exp(val)

            total += w*val
            weight += w

    if weight == 0.0:
        return np.nan
    return total/weight
