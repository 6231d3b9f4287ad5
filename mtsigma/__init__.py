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

# Import most important functions and classes
from mtsigma.checks import adjoint_test, derivative_test
from mtsigma.fields import Field
from mtsigma.meshes import TensorMesh
from mtsigma.models import ModelParameter, random_model
from mtsigma.operators import (
        parameter_to_cell, parameter_to_edge, parameter_to_edge_linearized,
        parameter_to_node, parameter_to_node_linearized, edge_to_parameter,
        conductivity_at_edge, linearized_operator,
)
from mtsigma.utils import Report, __version__
