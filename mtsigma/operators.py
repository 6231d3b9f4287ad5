r"""
Mappings from model parameters to conductivities on the staggered grid:
cells, edges, and nodes, nonlinear and linearized, and the adjoint of the
linearized edge mapping.

The edge mapping is a volume-weighted average. With ``D_C``, ``D_E`` the
diagonal cell and edge volumes and ``P`` the distribution of cell values to
their edges (:func:`mtsigma.core.cell_to_edge`) the conductivity on the edges
is

.. math::

    \sigma_E = D_E^{-1} P D_C \sigma_C \ ,

the linearized mapping replaces ``σ_C`` by its perturbation (air cells are
fixed, hence their perturbation vanishes), and the adjoint is the transpose
``D_C P^T D_E^{-1}`` restricted to the earth cells, followed by the chain rule
of the parameterization.
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

import numpy as np
from scipy.sparse.linalg import LinearOperator

from mtsigma import core, fields, maps, models, utils

__all__ = ['cell_to_edge', 'edge_to_cell', 'cell_to_node',
           'parameter_to_cell', 'parameter_to_edge',
           'parameter_to_edge_linearized', 'parameter_to_node',
           'parameter_to_node_linearized', 'edge_to_parameter',
           'conductivity_at_edge', 'linearized_operator']

logger = logging.getLogger(__name__)

# Direction names of the edges.
_AXES = {'x': 0, 'y': 1, 'z': 2}


def __dir__():
    return __all__


# AVERAGING OPERATORS
def cell_to_edge(grid, values, out=None):
    """Distribute cell-centered values to the edges, ``P c``.

    Every edge receives a quarter of each of its (up to four) adjacent cells.
    There is no volume weighting.


    Parameters
    ----------
    grid : TensorMesh
        The grid; a :class:`mtsigma.meshes.TensorMesh` instance.

    values : array_like
        Cell values of shape ``grid.shape_cells`` (or flat, Fortran order).

    out : {None, Field}, default: None
        Output container on edges; (re)allocated if it does not fit.


    Returns
    -------
    efield : Field
        Values on the edges.

    """
    values = _cell_array(grid, values)
    out = fields._ensure_field(out, grid, 'edges')
    core.cell_to_edge(values, out.fx, out.fy, out.fz)
    return out


def edge_to_cell(grid, efield):
    """Collect edge values in the cells, ``P^T e``; transpose of ``P``.

    Every cell collects a quarter of each of its twelve edges.


    Parameters
    ----------
    grid : TensorMesh
        The grid; a :class:`mtsigma.meshes.TensorMesh` instance.

    efield : Field
        Field on the edges of ``grid``.


    Returns
    -------
    values : ndarray
        Cell values of shape ``grid.shape_cells``.

    """
    _check_edge_field(efield, grid)
    values = np.zeros(grid.shape_cells, order='F')
    core.edge_to_cell(efield.fx, efield.fy, efield.fz, values)
    return values


def cell_to_node(grid, values, out=None):
    """Distribute cell-centered values to the nodes.

    Every node receives an eighth of each of its (up to eight) adjacent cells.
    There is no volume weighting.


    Parameters
    ----------
    grid : TensorMesh
        The grid; a :class:`mtsigma.meshes.TensorMesh` instance.

    values : array_like
        Cell values of shape ``grid.shape_cells`` (or flat, Fortran order).

    out : {None, Field}, default: None
        Output container on nodes; (re)allocated if it does not fit.


    Returns
    -------
    nfield : Field
        Values on the nodes.

    """
    values = _cell_array(grid, values)
    out = fields._ensure_field(out, grid, 'nodes')
    core.cell_to_node(values, out.values)
    return out


# NONLINEAR MAPPINGS
def parameter_to_cell(model, out=None):
    """Conductivity (S/m) on all cells of the grid, air included.

    Parameters
    ----------
    model : ModelParameter
        Model parameter.

    out : {None, Field}, default: None
        Output container on cells; (re)allocated if it does not fit.


    Returns
    -------
    cfield : Field
        Conductivities on the cells.

    """
    _check_model(model)
    out = fields._ensure_field(out, model.grid, 'cells')
    out.values[...] = _cell_conductivity(model)
    return out


def parameter_to_edge(model, out=None):
    """Conductivity (S/m) on the edges; volume-weighted cell average.

    Every edge gets the average of its adjacent cells, weighted by the
    portion of the edge volume each of them covers. A constant conductivity
    is hence reproduced exactly on every edge.


    Parameters
    ----------
    model : ModelParameter
        Model parameter.

    out : {None, Field}, default: None
        Output container on edges; (re)allocated if it does not fit.


    Returns
    -------
    efield : Field
        Conductivities on the edges.

    """
    _check_model(model)
    return _to_edges(model.grid, _cell_conductivity(model), out)


def parameter_to_edge_linearized(dmodel, model0, out=None):
    """Conductivity perturbation on the edges about a background model.

    The perturbation of the earth cells is the derivative of the
    parameterization at ``model0`` applied to ``dmodel``; for ``'LOGE'`` it is
    ``dmodel.cell_value*exp(model0.cell_value)``. The air cells are fixed, so
    their perturbation is zero, whatever ``dmodel.air_value`` is. The
    perturbation is then averaged exactly like in :func:`parameter_to_edge`.


    Parameters
    ----------
    dmodel : ModelParameter
        Perturbation of the model parameter.

    model0 : ModelParameter
        Background model parameter.

    out : {None, Field}, default: None
        Output container on edges; (re)allocated if it does not fit.


    Returns
    -------
    efield : Field
        Conductivity perturbation on the edges.

    """
    values = _cell_perturbation(dmodel, model0)

    # Linear operation on a zero perturbation.
    if values is None:
        return fields._ensure_field(out, dmodel.grid, 'edges')

    return _to_edges(dmodel.grid, values, out)


def parameter_to_node(model, out=None):
    """Conductivity (S/m) on the nodes; volume-weighted cell average.

    Parameters
    ----------
    model : ModelParameter
        Model parameter.

    out : {None, Field}, default: None
        Output container on nodes; (re)allocated if it does not fit.


    Returns
    -------
    nfield : Field
        Conductivities on the nodes.

    """
    _check_model(model)
    return _to_nodes(model.grid, _cell_conductivity(model), out)


def parameter_to_node_linearized(dmodel, model0, out=None):
    """Conductivity perturbation on the nodes about a background model.

    See :func:`parameter_to_edge_linearized`; the perturbation is averaged
    like in :func:`parameter_to_node`.

    """
    values = _cell_perturbation(dmodel, model0)

    # Linear operation on a zero perturbation.
    if values is None:
        return fields._ensure_field(out, dmodel.grid, 'nodes')

    return _to_nodes(dmodel.grid, values, out)


# ADJOINT MAPPING
def edge_to_parameter(efield, model0=None, out=None, mapping=None):
    r"""Adjoint of :func:`parameter_to_edge_linearized`.

    Maps a field on the edges, e.g., the sensitivity with respect to the edge
    conductivities, to the earth cells of the model parameter:

    .. math::

        x = \mathrm{diag}(\partial\sigma/\partial m) E^T D_C P^T
            D_E^{-1} e \ ,

    where ``E^T`` restricts to the earth cells. For ``'LOGE'`` the chain rule
    multiplies by ``exp(model0.cell_value)``, for ``'LINEAR'`` it is the
    identity.

    The result is the transpose with respect to the plain Euclidean inner
    product; for any ``m``, ``e``:
    ``np.vdot(parameter_to_edge_linearized(m, m0).field, e.field) ==
    m.dot(edge_to_parameter(e, m0))``.


    Parameters
    ----------
    efield : Field
        Field on the edges.

    model0 : {None, ModelParameter}, default: None
        Background model parameter. Required for ``'LOGE'``.

    out : {None, ModelParameter}, default: None
        Output model parameter; its values are overwritten.

    mapping : {None, str, BaseMap}, default: None
        Parameterization of the result. Defaults to the one of ``out``, else
        of ``model0``, else ``'LINEAR'``.


    Returns
    -------
    model : ModelParameter
        Mapped field on the earth cells; ``zero_valued`` is False.

    """
    grid = efield.grid
    _check_edge_field(efield, grid)

    # Target parameterization.
    if mapping is not None:
        pmap = maps.get_map(mapping)
    elif out is not None:
        pmap = out.map
    elif model0 is not None:
        pmap = model0.map
    else:
        pmap = maps.MapConductivity()

    # Check background.
    if model0 is None:
        if not pmap.is_linear:
            raise utils.MissingBackgroundError(
                f"Adjoint mapping to {pmap.parameterization} requires a "
                "background model `model0`."
            )
        background = None
    else:
        _check_model(model0, grid)
        if model0.map != pmap:
            raise ValueError(
                f"Background is {model0.parameterization}; requested "
                f"mapping is {pmap.parameterization}."
            )
        background = model0.cell_value

    # D_C P^T D_E^{-1}, restricted to the earth.
    unscaled = fields.Field(grid, efield.field/grid.edge_volumes)
    values = edge_to_cell(grid, unscaled)
    values *= grid.cell_volumes.reshape(grid.shape_cells, order='F')
    values = np.asfortranarray(values[:, :, grid.nz_air:])

    # Chain rule of the parameterization.
    pmap.derivative_chain(values, background)

    # Store result.
    if out is None:
        air_value = None if model0 is None else model0.air_value
        out = models.ModelParameter(grid, values, air_value, pmap)
    else:
        if out.grid != grid:
            raise ValueError("Output model parameter has a different grid.")
        if out.map != pmap:
            raise ValueError(
                f"Output model parameter is {out.parameterization}; "
                f"requested mapping is {pmap.parameterization}."
            )
        out.cell_value = values

    return out


# SINGLE EDGE
def conductivity_at_edge(model, axis, ix, iy, iz):
    """Conductivity (S/m) at a single edge.

    Area-weighted average of the earth cells adjacent to the edge, weighted
    by the product of their two transverse widths; computed in linear
    conductivity. Air cells are omitted, hence x- and y-edges on the air-earth
    interface (``iz == nz_air``) take only the two cells below. On the lateral
    boundaries the missing cells are omitted likewise.


    Parameters
    ----------
    model : ModelParameter
        Model parameter.

    axis : {'x', 'y', 'z', 0, 1, 2}
        Direction of the edge.

    ix, iy, iz : int
        Indices of the edge in the edge array of that direction, e.g.,
        ``grid.shape_edges_x`` for x-edges; ``iz`` counts from the top of the
        grid, air layers included.


    Returns
    -------
    conductivity : float
        Conductivity at the edge.

    """
    _check_model(model)
    grid = model.grid

    axis = _AXES.get(axis, axis)
    if axis not in [0, 1, 2]:
        raise ValueError(
            f"`axis` must be one of {list(_AXES)} or 0, 1, 2; "
            f"provided: {axis}."
        )

    shape = getattr(grid, 'shape_edges_'+'xyz'[axis])
    for i, n in zip([ix, iy, iz], shape):
        if not 0 <= i < n:
            raise IndexError(
                f"Edge ({ix}, {iy}, {iz}) is outside of the "
                f"{'xyz'[axis]}-edges of shape {shape}."
            )

    # The average is only defined for the two implemented parameterizations.
    if model.parameterization not in ['LINEAR', 'LOGE']:
        raise utils.UnsupportedParameterizationError(
            f"Edge average not implemented for {model.parameterization}."
        )
    loge = model.parameterization == 'LOGE'

    value = core.edge_average(
        model.cell_value, grid.h[0], grid.h[1], grid.h[2],
        axis, ix, iy, iz, grid.nz_air, loge)

    if np.isnan(value):
        raise IndexError(
            f"{'xyz'[axis]}-edge ({ix}, {iy}, {iz}) has no adjacent earth "
            "cell."
        )

    return float(value)


# LINEAR OPERATOR
def linearized_operator(model0):
    """Linearized edge mapping about ``model0`` as a LinearOperator.

    The operator has shape ``(grid.n_edges, grid.n_earth)``; ``matvec`` is
    :func:`parameter_to_edge_linearized` and ``rmatvec`` is
    :func:`edge_to_parameter`. Vectors are flat, earth cells in Fortran order
    and edges as ``Field.field``.


    Parameters
    ----------
    model0 : ModelParameter
        Background model parameter.


    Returns
    -------
    operator : scipy.sparse.linalg.LinearOperator
        The linearized mapping.

    """
    _check_model(model0)
    if model0.map.is_linear:
        raise utils.UnsupportedParameterizationError(
            "Linearized mapping is not defined for the "
            f"{model0.parameterization} parameterization."
        )
    grid = model0.grid

    def matvec(x):
        dmodel = models.ModelParameter(
                grid, np.ravel(x), model0.air_value, model0.map)
        return parameter_to_edge_linearized(dmodel, model0).field

    def rmatvec(y):
        efield = fields.Field(grid, np.ravel(y))
        return edge_to_parameter(efield, model0).cell_value.ravel('F')

    logger.debug(f"Linearized operator about {model0!r}.")

    return LinearOperator(
        shape=(grid.n_edges, grid.n_earth), matvec=matvec, rmatvec=rmatvec,
        dtype=np.float64,
    )


# INTERNAL UTILITIES
def _cell_array(grid, values):
    """Cast cell values to a Fortran-ordered array of ``grid.shape_cells``."""
    values = np.asarray(values, dtype=np.float64)
    if values.size != grid.n_cells:
        raise ValueError(
            f"Cell values must be of size {grid.n_cells}; "
            f"provided: {values.size}."
        )
    return np.asfortranarray(values.reshape(grid.shape_cells, order='F'))


def _cell_conductivity(model):
    """Conductivity on all cells: air on top of the earth."""
    grid = model.grid
    values = np.empty(grid.shape_cells, order='F')
    values[:, :, :grid.nz_air] = model.air_conductivity
    values[:, :, grid.nz_air:] = model.conductivity
    return values


def _cell_perturbation(dmodel, model0):
    """Conductivity perturbation on all cells; None if it is zero."""
    _check_model(dmodel)

    if dmodel.map.is_linear:
        raise utils.UnsupportedParameterizationError(
            "Linearized mapping is not defined for the "
            f"{dmodel.parameterization} parameterization."
        )
    if model0 is None:
        raise utils.MissingBackgroundError(
            f"Linearized mapping for {dmodel.parameterization} requires a "
            "background model `model0`."
        )
    _check_model(model0, dmodel.grid)
    if model0.map != dmodel.map:
        raise ValueError(
            "Perturbation and background have different parameterizations."
        )

    if dmodel.zero_valued:
        return None

    grid = dmodel.grid
    values = np.zeros(grid.shape_cells, order='F')
    values[:, :, grid.nz_air:] = model0.map.linearize(
            dmodel.cell_value, model0.cell_value)
    return values


def _to_edges(grid, values, out):
    """Volume-weighted average of cell values on the edges."""
    weighted = values*grid.cell_volumes.reshape(grid.shape_cells, order='F')
    out = cell_to_edge(grid, weighted, out)
    out.field /= grid.edge_volumes
    return out


def _to_nodes(grid, values, out):
    """Volume-weighted average of cell values on the nodes."""
    weighted = values*grid.cell_volumes.reshape(grid.shape_cells, order='F')
    out = cell_to_node(grid, weighted, out)
    out.field /= grid.node_volumes
    return out


def _check_model(model, grid=None):
    """Model must be an allocated ModelParameter (on ``grid`` if given)."""
    if not isinstance(model, models.ModelParameter):
        raise TypeError(
            "Model must be a ModelParameter instance; provided: "
            f"{type(model).__name__}."
        )
    model._check_allocated()
    if grid is not None and model.grid != grid:
        raise ValueError("Model parameter lives on a different grid.")


def _check_edge_field(efield, grid):
    """Field must be allocated, on the edges of ``grid``."""
    if efield.location != 'edges':
        raise ValueError(
            f"Field must live on edges; provided: {efield.location}."
        )
    efield._check_allocated()
    if efield.grid != grid:
        raise ValueError("Field lives on a different grid.")
