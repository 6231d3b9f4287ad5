# -*- coding: utf-8 -*-
import os
import re
from setuptools import setup

# Get README and remove badges.
with open("README.rst") as f:
    readme = re.sub(r"\|.*\|", "", f.read(), flags=re.DOTALL)

setup(
    name="mtsigma",
    description=("Conductivity mappings between model parameters and a "
                 "staggered grid for 3D magnetotelluric inversion."),
    long_description=readme,
    author="The emsig community",
    author_email="info@emsig.xyz",
    url="https://emsig.xyz",
    license="Apache-2.0",
    packages=["mtsigma", "mtsigma.cli"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python",
    ],
    entry_points={
        "console_scripts": [
            "mtsigma=mtsigma.cli.main:main",
        ],
    },
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "scipy>=1.10",
        "numba",
        "scooby",
    ],
    extras_require={
        "tests": [
            "pytest",
            "pytest-console-scripts",
        ],
        "full": [
            "matplotlib",
            "ipython",
        ],
    },
    use_scm_version={
        "root": ".",
        "relative_to": __file__,
        "write_to": os.path.join("mtsigma", "version.py"),
        "fallback_version": "0.1.0",
    },
    setup_requires=["setuptools_scm"],
)
