#!/usr/bin/env python3

# python setup.py sdist --format=zip,gztar

import os
import sys

from setuptools import setup, find_packages

if sys.version_info[:3] < (3, 10, 0):
    sys.exit("Error: Multisig Keystores requires Python version >= 3.10.0...")

with open('contrib/requirements/requirements.txt') as f:
    requirements = f.read().splitlines()

with open('contrib/requirements/requirements-test.txt') as f:
    requirements_test = f.read().splitlines()

version: dict[str, str] = {}
with open(os.path.join('multisig_keystores', 'version.py')) as f:
    exec(f.read(), version)

setup(
    name="multisig-keystores",
    version=version['PACKAGE_VERSION'],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        'test': requirements_test,
    },
    packages=find_packages(include=['multisig_keystores', 'multisig_keystores.*']),
    description="Multisig wallet policies and keystore adapters for Bitcoin multisig "
        "coordinators",
    author="The Multisig Keystores Developers",
    license="MIT Licence",
    long_description="""Multisig wallet policies and keystore adapters for Bitcoin multisig
coordinators""",
)
