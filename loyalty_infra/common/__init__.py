# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Most commonly used functions shared across all modules.
"""

import re

from loyalty_infra.common.logging import LOG

NONALPHANUM = re.compile(r"([^a-zA-Z\d]+)")


def to_logical_name(name: str) -> str:
    """
    Turns a service or resource name into a valid CloudFormation logical ID

    :param str name: the name, i.e. loyalty-web-fargate
    :return: the alphanumerical title, i.e. loyaltywebfargate
    :raises: ValueError if nothing is left once non-alphanumerical characters are removed
    """
    if not isinstance(name, str):
        raise TypeError("name must be", str, "Got", type(name))
    logical_name = NONALPHANUM.sub("", name)
    if not logical_name:
        raise ValueError(f"{name} does not contain any alphanumerical character")
    return logical_name


def merge_env_vars(base: dict, overrides: dict = None) -> dict:
    """
    Merges two environment variables maps. Keys in overrides take precedence.

    :param dict base:
    :param dict overrides:
    :rtype: dict
    """
    merged = dict(base)
    if overrides:
        merged.update(overrides)
    return merged
