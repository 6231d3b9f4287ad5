"""
Entry point for the command-line interface (CLI).
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
import argparse

from mtsigma import utils
from mtsigma.cli import run


def main(args=None):
    """Parsing command line inputs of CLI interface."""

    # If not explicitly called, catch arguments.
    if args is None:
        args = sys.argv[1:]

    # Start CLI-arg-parser and define arguments.
    parser = argparse.ArgumentParser(
        description=("Checks of the conductivity mappings between model "
                     "parameters and the edges of a staggered grid.")
    )

    # arg: Optional parameter-file name.
    parser.add_argument(
        "config",
        nargs="?",
        default="mtsigma.cfg",
        type=str,
        help="name of config file; default is 'mtsigma.cfg'"
    )

    # arg: What to run
    group1 = parser.add_mutually_exclusive_group()
    group1.add_argument(
        "-a", "--adjoint",
        action='store_true',
        help="adjoint symmetry test of the linearized mapping (default)"
    )
    group1.add_argument(
        "-t", "--taylor",
        action='store_true',
        help="derivative (Taylor) test of the linearized mapping"
    )

    # arg: Random seed
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="seed for the random perturbations; overrules the config file"
    )

    # arg: Output base name; relative to path
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="output files base name; default is 'mtsigma_out'"
    )

    # arg: Verbosity.
    group3 = parser.add_mutually_exclusive_group()
    group3.add_argument(
        "--verbosity",
        type=int,
        default=0,
        choices=[-1, 0, 1, 2],
        help="set verbosity; default is 0"
    )
    group3.add_argument(
        "-v", "--verbose",
        action="count",
        dest="verbosity",
        help="increase verbosity; can be used multiple times"
    )
    group3.add_argument(
        "-q", "--quiet",
        action="store_const",
        const=-1,
        dest="verbosity",
        help="decrease verbosity"
    )

    # arg: Run without computation.
    parser.add_argument(
        "-d", "--dry-run",
        action="store_true",
        default=False,
        help="only display what would have been done"
    )

    # arg: Report
    parser.add_argument(
        "--report",
        action="store_true",
        default=False,
        help="only display mtsigma report"
    )

    # arg: Version
    parser.add_argument(
        "--version",
        action="store_true",
        default=False,
        help="only display mtsigma version"
    )

    # Get command line arguments.
    args_dict = vars(parser.parse_args(args))

    # Exits without computation.
    if args_dict.pop('version'):  # mtsigma version info.

        print(f"mtsigma v{utils.__version__}")
        return

    elif args_dict.pop('report'):  # mtsigma report.
        print(utils.Report())
        return

    elif len(args) == 0 and not os.path.isfile('mtsigma.cfg'):

        # If no arguments provided, and ./mtsigma.cfg does not exist, print
        # info.
        print(parser.description)
        version = utils.__version__
        print(f"=> Type `mtsigma --help` for more info (mtsigma v{version}).")
        return

    # Run checks with given command line inputs.
    return run.verification(args_dict)


if __name__ == "__main__":
    sys.exit(main())
