#!/usr/bin/env python
#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille<john@compose-x.io>

"""The setup script for loyalty-infra"""

import os
import re

from setuptools import find_packages, setup

DIR_HERE = os.path.abspath(os.path.dirname(__file__))
# REMOVE UNSUPPORTED RST syntax
REF_REGX = re.compile(r"(\:ref\:)")

try:
    with open(f"{DIR_HERE}/README.rst", encoding="utf-8") as readme_file:
        readme = readme_file.read()
        readme = REF_REGX.sub("", readme)
except FileNotFoundError:
    readme = "Loyalty application infrastructure on AWS ECS Fargate"


def read_requirements(file_name: str) -> list:
    requirements = []
    with open(f"{DIR_HERE}/{file_name}", "r") as req_fd:
        for line in req_fd:
            line = line.strip()
            if line and not line.startswith("#"):
                requirements.append(line)
    return requirements


requirements = read_requirements("requirements.txt")

test_requirements = []
try:
    test_requirements = read_requirements("requirements_dev.txt")
except FileNotFoundError:
    print("Failed to load dev requirements. Skipping")

setup(
    author="John Preston",
    author_email="john@compose-x.io",
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)",
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
    ],
    description="CloudFormation templates for the loyalty application on AWS ECS Fargate,"
    " instrumented with Datadog",
    entry_points={
        "console_scripts": [
            "loyalty-infra=loyalty_infra.cli:main",
        ]
    },
    install_requires=requirements,
    extras_require={"test": test_requirements},
    license="MPL-2.0",
    long_description=readme,
    long_description_content_type="text/x-rst",
    include_package_data=True,
    package_data={"loyalty_infra": ["specs/*.json"]},
    keywords="loyalty aws cloudformation iac ecs fargate datadog",
    name="loyalty_infra",
    packages=find_packages(include=["loyalty_infra", "loyalty_infra.*"]),
    test_suite="tests",
    version="0.1.0",
    zip_safe=False,
)
