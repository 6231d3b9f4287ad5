"""
Parameterization maps: from the model parameter (what the inversion works
with) to linear conductivities (what is used on the grid), and back.

Two parameterizations exist, identified by their tags:

- ``'LINEAR'`` (:class:`MapConductivity`): the parameter is σ (S/m);
- ``'LOGE'`` (:class:`MapLnConductivity`): the parameter is log_e(σ).
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

import numpy as np

from mtsigma import utils

__all__ = ['BaseMap', 'MapConductivity', 'MapLnConductivity', 'get_map']


def __dir__():
    return __all__


class BaseMap:
    """Maps variable `x` to computational variable `σ` (conductivity).

    Subclass this BaseMap to create new maps. A map class must start with
    ``Map`` followed by a name, e.g., ``MapProperty``, and define a
    ``parameterization`` tag.

    .. code-block:: python

        class MapProperty(mtsigma.maps.BaseMap):
            '''Description'''
            parameterization = 'PROPERTY'

            def __init__(self):
                super().__init__('property')

            def forward(self, conductivity):
                return # Mapping from conductivity to your property.

            def backward(self, mapped):
                return # Mapping from your property to conductivity.

            def derivative_chain(self, gradient, mapped):
                gradient *= # Chain rule of your backward mapping.

    """

    parameterization = None
    is_linear = False

    def __init__(self, description):
        """Initiate the map."""
        self.name = self.__class__.__name__[3:]  # Class name without `Map`
        self.description = description

    def __repr__(self):
        return (f"{self.__class__.__name__}: {self.description}\n"
                "    Maps investigation variable `x` to\n"
                "    computational variable `σ` (conductivity).")

    def __eq__(self, other):
        return self.__class__ is getattr(other, '__class__', None)

    def forward(self, conductivity):
        """Conductivity to mapping."""
        raise NotImplementedError("Forward map not implemented.")

    def backward(self, mapped):
        """Mapping to conductivity."""
        raise NotImplementedError("Backward map not implemented.")

    def derivative_chain(self, gradient, mapped):
        """Chain rule to map gradient from conductivity to mapping space."""
        raise NotImplementedError("Derivative chain not implemented.")

    def linearize(self, perturbation, mapped):
        """Perturbation of `x` about `mapped` to perturbation of `σ`.

        This is the derivative of :meth:`backward` at ``mapped`` applied to
        ``perturbation``; as the derivative is diagonal it is its own
        transpose, see :meth:`derivative_chain`.

        """
        raise NotImplementedError("Linearization not implemented.")


class MapConductivity(BaseMap):
    """Maps `σ` to computational variable `σ` (conductivity).

    - forward: x = σ
    - backward: σ = x

    The map is linear; a linearization about a background is not defined
    (:meth:`linearize` raises
    :class:`mtsigma.utils.UnsupportedParameterizationError`).

    """

    parameterization = 'LINEAR'
    is_linear = True

    def __init__(self):
        super().__init__('conductivity')

    def forward(self, conductivity):
        return conductivity

    def backward(self, mapped):
        return mapped

    def derivative_chain(self, gradient, mapped):
        pass

    def linearize(self, perturbation, mapped):
        raise utils.UnsupportedParameterizationError(
            "Linearized mapping is not defined for the LINEAR "
            "parameterization."
        )


class MapLnConductivity(BaseMap):
    """Maps `log_e(σ)` to computational variable `σ` (conductivity).

    - forward: x = log_e(σ)
    - backward: σ = exp(x)

    """

    parameterization = 'LOGE'

    def __init__(self):
        super().__init__('log_e(conductivity)')

    def forward(self, conductivity):
        return np.log(conductivity)

    def backward(self, mapped):
        return np.exp(mapped)

    def derivative_chain(self, gradient, mapped):
        gradient *= self.backward(mapped)

    def linearize(self, perturbation, mapped):
        return perturbation*self.backward(mapped)


# Parameterization tags and their maps.
_TAGS = {
    'LINEAR': MapConductivity,
    'LOGE': MapLnConductivity,
}


def get_map(mapping):
    """Return a map instance for the provided mapping.

    Parameters
    ----------
    mapping : {str, BaseMap}
        Either a map instance, a parameterization tag (``'LINEAR'``,
        ``'LOGE'``), or a map name (``'Conductivity'``, ``'LnConductivity'``).


    Returns
    -------
    map : BaseMap
        Instance of the corresponding map.

    """
    if isinstance(mapping, BaseMap):
        return mapping

    if str(mapping).upper() in _TAGS:
        return _TAGS[str(mapping).upper()]()

    for cls in _TAGS.values():
        if cls.__name__ == 'Map'+str(mapping):
            return cls()

    names = list(_TAGS) + [c.__name__[3:] for c in _TAGS.values()]
    raise ValueError(
        f"Unknown mapping '{mapping}'; implemented: {names}."
    )
