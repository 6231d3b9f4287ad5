"""
Numerical checks of the linearized mapping and its adjoint: the adjoint
symmetry (dot-product) test and the derivative (Taylor) test.
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

from mtsigma import fields, models, operators

__all__ = ['adjoint_test', 'derivative_test']

logger = logging.getLogger(__name__)


def __dir__():
    return __all__


def adjoint_test(model0, dmodel=None, efield=None, delta=0.05, seed=None,
                 rtol=1e-10):
    r"""Dot-product test of the linearized edge mapping and its adjoint.

    With ``L`` the linearized edge mapping about ``model0``
    (:func:`mtsigma.operators.parameter_to_edge_linearized`) and ``L^T`` its
    adjoint (:func:`mtsigma.operators.edge_to_parameter`) it compares

    .. math::

        \langle L m, d \rangle = \langle m, L^T d \rangle \ .


    Parameters
    ----------
    model0 : ModelParameter
        Background model parameter.

    dmodel : {None, ModelParameter}, default: None
        Model perturbation ``m``; random if None.

    efield : {None, Field}, default: None
        Edge field ``d``; random if None.

    delta : float, default: 0.05
        Amplitude of the random values.

    seed : {None, int, Generator}, default: None
        Seed for :func:`numpy.random.default_rng`.

    rtol : float, default: 1e-10
        Relative tolerance for ``passed``.


    Returns
    -------
    result : dict
        ``lhs``, ``rhs``, ``rel_error``, and ``passed``.

    """
    rng = np.random.default_rng(seed)

    if dmodel is None:
        dmodel = models.random_model(
                model0.grid, delta, model0.map, rng, model0.air_value)

    if efield is None:
        data = rng.uniform(-delta, delta, model0.grid.n_edges)
        efield = fields.Field(model0.grid, data)

    lhs = np.vdot(
        operators.parameter_to_edge_linearized(dmodel, model0).field,
        efield.field)
    rhs = dmodel.dot(operators.edge_to_parameter(efield, model0))

    scale = max(abs(lhs), abs(rhs))
    rel_error = abs(lhs - rhs)/scale if scale > 0 else 0.0

    logger.debug(f"Adjoint test: <L m, d> = {lhs:.16e}; "
                 f"<m, L^T d> = {rhs:.16e}; rel. error = {rel_error:.3e}")

    return {
        'lhs': float(lhs),
        'rhs': float(rhs),
        'rel_error': float(rel_error),
        'passed': bool(rel_error <= rtol),
    }


def derivative_test(model0, dmodel=None, steps=None, delta=0.05, seed=None):
    r"""Taylor test of the linearized edge mapping.

    For decreasing steps ``h`` it computes the residuals

    .. math::

        r_1(h) = \| F(m_0 + h m) - F(m_0) \| \ , \quad
        r_2(h) = \| F(m_0 + h m) - F(m_0) - h L m \| \ ,

    where ``F`` is the nonlinear edge mapping
    (:func:`mtsigma.operators.parameter_to_edge`) and ``L`` its linearization.
    The first residual decreases with ``O(h)``, the second with ``O(h^2)``
    if the linearization is the derivative of the nonlinear mapping.


    Parameters
    ----------
    model0 : ModelParameter
        Background model parameter.

    dmodel : {None, ModelParameter}, default: None
        Direction ``m``; random if None.

    steps : {None, array_like}, default: None
        Decreasing step sizes; default is ``[1e-1, 1e-2, 1e-3]``.

    delta : float, default: 0.05
        Amplitude of the random direction.

    seed : {None, int, Generator}, default: None
        Seed for :func:`numpy.random.default_rng`.


    Returns
    -------
    result : dict
        ``steps``, ``first`` (r_1), ``second`` (r_2), ``order`` (observed
        convergence order of r_2 between consecutive steps), and ``passed``
        (observed order of at least 1.8 everywhere).

    """
    if steps is None:
        steps = [1e-1, 1e-2, 1e-3]
    steps = np.asarray(steps, dtype=float)
    if steps.size < 2 or np.any(np.diff(steps) >= 0) or np.any(steps <= 0):
        raise ValueError(
            "`steps` must contain at least two positive, strictly decreasing "
            "values."
        )

    if dmodel is None:
        dmodel = models.random_model(
                model0.grid, delta, model0.map, seed, model0.air_value)

    # Background and linear prediction.
    f0 = operators.parameter_to_edge(model0).field
    df = operators.parameter_to_edge_linearized(dmodel, model0).field

    first = np.zeros(steps.size)
    second = np.zeros(steps.size)
    efield = None
    for i, h in enumerate(steps):
        efield = operators.parameter_to_edge(
                model0.lin_comb(1.0, h, dmodel), efield)
        diff = efield.field - f0
        first[i] = np.linalg.norm(diff)
        second[i] = np.linalg.norm(diff - h*df)
        logger.debug(f"Taylor test: h = {h:.1e}; r1 = {first[i]:.6e}; "
                     f"r2 = {second[i]:.6e}")

    # Observed order of the second residual.
    with np.errstate(divide='ignore', invalid='ignore'):
        order = np.log(second[:-1]/second[1:])/np.log(steps[:-1]/steps[1:])

    return {
        'steps': steps.tolist(),
        'first': first.tolist(),
        'second': second.tolist(),
        'order': order.tolist(),
        'passed': bool(np.all(np.isfinite(order) & (order >= 1.8))),
    }
