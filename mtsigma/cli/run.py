"""
Functions that actually call mtsigma within the CLI interface.
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
import sys
import json
import time
import logging

import numpy as np

from mtsigma import checks, maps, meshes, models, utils
from mtsigma.cli import parser


def verification(args_dict):
    """Run `mtsigma` checks invoked by CLI.

    Run and log the adjoint symmetry test or the derivative (Taylor) test of
    the linearized edge mapping, given the settings stored in the config file,
    overruled by settings passed in ``args_dict`` (which correspond to
    command-line arguments).

    Results are saved as JSON to ``<output>.json``, the log to
    ``<output>.log``.


    Parameters
    ----------
    args_dict : dict
        Arguments from terminal, see :func:`mtsigma.cli.main`. Parameters
        passed in ``args_dict`` overrule parameters in the ``config``.


    Returns
    -------
    status : int
        0 if all checks passed (or in a dry run), 1 otherwise; also 1 for a
        parameterization without linearized mapping (LINEAR).

    """

    # Start timer.
    runtime = utils.Timer()

    # Parse configuration file.
    cfg, term = parser.parse_config_file(args_dict)
    check_files(cfg, term)  # Check all files and directories exist.
    function, verb = term['function'], term['verbosity']
    dry_run = term.get('dry_run', False)

    # Start this task: start timing.
    logger = initiate_logger(cfg, runtime, verb)

    # Log start info, python and mtsigma version, and python path.
    logger.info(f":: mtsigma CLI {function} START :: {time.asctime()} :: "
                f"v{utils.__version__}")
    logger.debug(f"{utils.Report()}")

    # Dump the configuration.
    paramdump = json.dumps(cfg, sort_keys=True, indent=4)
    logger.debug("\n    :: CONFIGURATION ::\n")
    logger.debug(f"{term['config_file']}\n{paramdump}")

    # Create grid and background model.
    logger.info("\n    :: GRID AND MODEL ::\n")
    grid_cfg = cfg['grid']
    grid = meshes.TensorMesh(
            [grid_cfg['hx'], grid_cfg['hy'], grid_cfg['hz']],
            origin=grid_cfg['origin'], nz_air=grid_cfg['nz_air'])
    model0 = background_model(grid, **cfg['model'])
    logger.info(f"{grid}")
    logger.info(f"{model0}\n")

    # Initiate output dict, add configuration.
    output = {'configuration': cfg, 'function': function, 'results': []}

    # Both checks need the linearized mapping.
    error = None
    if model0.map.is_linear:
        error = ("Linearized mapping is not defined for the "
                 f"{model0.parameterization} parameterization; use LOGE.")
        logger.error(f"* ERROR   :: {error}")
        output['error'] = error
    compute = not dry_run and error is None

    test = cfg['test']
    rng = np.random.default_rng(test['seed'])
    if function == 'adjoint':
        logger.info("    :: ADJOINT TEST ::\n")
        if compute:
            for i in range(test['ntrials']):
                res = checks.adjoint_test(
                        model0, delta=test['delta'], seed=rng,
                        rtol=test['rtol'])
                logger.info(f"   Trial {i+1}: <L m, d> = {res['lhs']:+.16e}; "
                            f"<m, L^T d> = {res['rhs']:+.16e}; "
                            f"rel. error = {res['rel_error']:.3e}")
                output['results'].append(res)

    else:
        logger.info("    :: DERIVATIVE TEST ::\n")
        if compute:
            for i in range(test['ntrials']):
                res = checks.derivative_test(
                        model0, steps=test['steps'], delta=test['delta'],
                        seed=rng)
                logger.info(f"   Trial {i+1}:")
                for h, r1, r2 in zip(res['steps'], res['first'],
                                     res['second']):
                    logger.info(f"     h = {h:.1e}; r1 = {r1:.6e}; "
                                f"r2 = {r2:.6e}")
                order = ', '.join(f"{o:.2f}" for o in res['order'])
                logger.info(f"     observed order of r2: {order}")
                output['results'].append(res)

    passed = error is None and all(r['passed'] for r in output['results'])
    output['passed'] = passed
    if passed:
        logger.info(f"\n   => {function} test passed")
    else:
        logger.error(f"\n   => {function} test FAILED")

    # Store output to disk.
    logger.info("\n    :: SAVE RESULTS ::\n")
    with open(cfg['files']['output'], 'w') as f:
        json.dump(output, f, indent=4)
    logger.info(f"Data saved to «{cfg['files']['output']}»")

    # Goodbye
    logger.info(f"\n:: mtsigma CLI {function} END   :: {time.asctime()} :: "
                f"runtime = {runtime.runtime}")

    return 0 if passed else 1


def background_model(grid, mapping, background, air_value):
    """Homogeneous background model from conductivities (S/m)."""
    pmap = maps.get_map(mapping)
    return models.ModelParameter(
            grid, pmap.forward(background), pmap.forward(air_value), pmap)


def check_files(cfg, term):
    """Ensure all paths and files exist."""
    error = ""

    # First check if config file exists.
    fname = term['config_file']
    if not os.path.isfile(fname) and fname != '.':  # '.' => no config file.
        error += f"* ERROR   :: Config file not found: {fname}\n"

    # Finally check output directory.
    dname = os.path.split(cfg['files']['log'])[0]
    if not os.path.isdir(dname):
        error += f"* ERROR   :: Output directory does not exist: {dname}\n"

    # If any was not found, exit with error.
    if len(error) > 10:
        sys.exit(error[:-1])


def initiate_logger(cfg, runtime, verb):
    """Initiate logger for CLI of mtsigma."""

    # Get logger of mtsigma.cli.run and add handles.
    logger = logging.getLogger(__name__)
    logger.setLevel(logging.DEBUG)

    # Remove the corresponding handlers if they exist already
    # (e.g., consecutive runs in IPython).
    for h in logger.handlers[:]:
        if h.name in ['mtsigma_fh', 'mtsigma_ch']:
            logger.removeHandler(h)
        h.close()

    # Create file handler; logs everything.
    fh = logging.FileHandler(f"{cfg['files']['log']}", mode='w')
    fh.setLevel(logging.DEBUG)
    fh_format = logging.Formatter('{message}', style='{')
    fh.setFormatter(fh_format)
    fh.set_name('mtsigma_fh')  # Add name to easy remove them.
    logger.addHandler(fh)

    # Create console handler.
    ch = logging.StreamHandler()
    ch.setLevel([40, 30, 20, 10][verb+1])
    ch_format = logging.Formatter('{message}', style='{')
    ch.setFormatter(ch_format)
    ch.set_name('mtsigma_ch')  # Add name to easy remove them.
    logger.addHandler(ch)

    # Add handlers to Python Warnings.
    logging.captureWarnings(True)
    logger_warnings = logging.getLogger("py.warnings")
    logger_warnings.setLevel(logging.DEBUG)
    logger_warnings.addHandler(ch)
    logger_warnings.addHandler(fh)

    return logger
