"""
Parser for the configuration file of the command-line interface.
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

import os
import configparser
from pathlib import Path


def parse_config_file(args_dict):
    """Read and parse the configuration file and set defaults.

    Parameters
    ----------
    args_dict : dict
        Arguments from terminal, see :func:`mtsigma.cli.main`.


    Returns
    -------
    conf : dict
        Configuration-dict with the sections ``files``, ``grid``, ``model``,
        and ``test``.

    term : dict
        Terminal arguments.

    """

    # # Read parameter-file into dict # #
    config = args_dict.pop('config')
    configfile = os.path.abspath(config)
    cfg = configparser.ConfigParser(inline_comment_prefixes='#')

    # Check if config-file is actually a file.
    if os.path.isfile(configfile):

        # If it is, read it.
        with open(configfile) as f:
            cfg.read_file(f)

    elif config == '.':

        # If config == '.', no parameter file is given. Workaround to suppress
        # the error when one does not want to provide a config file.
        configfile = config

    # # Check the terminal arguments # #

    # Initiate terminal dict.
    term = {}

    # Add config-file to term.
    term['config_file'] = configfile

    # Get terminal input.
    for key in ['verbosity', 'dry_run', 'seed', 'output']:
        term[key] = args_dict.pop(key)

    for key in ['adjoint', 'taylor']:
        function = args_dict.pop(key)
        if function:
            term['function'] = key
    if 'function' not in term.keys():
        term['function'] = 'adjoint'

    # Ensure no keys are left.
    if args_dict:
        raise TypeError(
            f"Unexpected parameter in **args_dict: {list(args_dict.keys())}."
        )

    # Enforce some limits.
    term['verbosity'] = int(min(max(term['verbosity'], -1), 2))  # [-1, 2]

    # # Check file-paths and files # #

    # Check if parameter-file has a files-section, add it otherwise.
    if 'files' not in cfg.sections():
        cfg.add_section('files')

    # Get file names.
    all_files = dict(cfg.items('files'))

    # First path.
    path = os.path.abspath(all_files.pop('path', '.'))

    # Output base name: terminal, else config file, else default.
    fname = term.pop('output')
    if fname is None:
        fname = all_files.pop('output', 'mtsigma_out')
    else:
        all_files.pop('output', None)
    ffile = Path(os.path.join(path, fname))
    files = {
        'output': str(ffile.with_suffix('.json')),
        'log': str(ffile.with_suffix('.log')),
    }

    # Ensure no keys are left.
    if all_files:
        raise TypeError(
            f"Unexpected parameter in [files]: {list(all_files.keys())}."
        )

    # # Grid parameters # #

    if 'grid' not in cfg.sections():
        cfg.add_section('grid')
    all_grid = dict(cfg.items('grid'))
    grid = {}

    # Either cell widths, or number of cells and a constant width.
    if any(key in all_grid for key in ['hx', 'hy', 'hz']):
        for key in ['hx', 'hy', 'hz']:
            if key not in all_grid:
                raise TypeError("[grid] requires `hx`, `hy`, and `hz`.")
            grid[key] = [float(v) for v in all_grid.pop(key).split(',')]
    else:
        width = float(all_grid.pop('width', 100.0))
        for key in ['nx', 'ny', 'nz']:
            grid['h'+key[1]] = [width]*int(all_grid.pop(key, 8))

    grid['nz_air'] = int(all_grid.pop('nz_air', 2))

    key = 'origin'
    if key in all_grid:
        grid[key] = [float(v) for v in all_grid.pop(key).split(',')]
    else:
        grid[key] = [0.0, 0.0, 0.0]

    # Ensure no keys are left.
    if all_grid:
        raise TypeError(
            f"Unexpected parameter in [grid]: {list(all_grid.keys())}."
        )

    # # Model parameters # #

    if 'model' not in cfg.sections():
        cfg.add_section('model')
    all_model = dict(cfg.items('model'))

    model = {'mapping': all_model.pop('mapping', 'LOGE').strip().upper()}

    # Conductivities (S/m) of the background and the air.
    for key, value in [('background', 0.01), ('air_value', 1e-10)]:
        model[key] = float(all_model.pop(key, value))

    # Ensure no keys are left.
    if all_model:
        raise TypeError(
            f"Unexpected parameter in [model]: {list(all_model.keys())}."
        )

    # # Test parameters # #

    if 'test' not in cfg.sections():
        cfg.add_section('test')
    all_test = dict(cfg.items('test'))
    test = {}

    # Check for floats.
    for key, value in [('delta', 0.05), ('rtol', 1e-10)]:
        test[key] = float(all_test.pop(key, value))

    # Check for ints.
    test['ntrials'] = int(max(int(all_test.pop('ntrials', 1)), 1))  # [1, inf]

    # Seed: terminal, else config file, else None.
    seed = all_test.pop('seed', None)
    if term['seed'] is not None:
        seed = term['seed']
    test['seed'] = None if seed is None else int(seed)
    del term['seed']

    # Check for lists.
    steps = all_test.pop('steps', '1e-1, 1e-2, 1e-3')
    test['steps'] = [float(v) for v in steps.split(',')]

    # Ensure no keys are left.
    if all_test:
        raise TypeError(
            f"Unexpected parameter in [test]: {list(all_test.keys())}."
        )

    # Return.
    out = {'files': files, 'grid': grid, 'model': model, 'test': test}
    return out, term
