# SPDX-License-Identifier: Apache-2.0
from setuptools import setup, find_packages

setup(
    name="ukcas-client",
    version="0.1.0",
    packages=find_packages(exclude=["tests"]),
    install_requires=["requests", "click"],
    entry_points={"console_scripts": ["ukcas=ukcas_client.cli:main"]},
)
