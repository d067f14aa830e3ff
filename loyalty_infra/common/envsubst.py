#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille <john@compose-x.io>

"""
Module to do a better env variables handling.

Supports ``$VAR``, ``${VAR}``, ``${VAR:-default}`` (default when VAR is unset or empty)
and ``${VAR:+value}`` (value when VAR is set). ``${AWS::...}`` is left untouched for Fn::Sub.
"""

import os
import re

from loyalty_infra.exceptions import MissingInputError

IF_UNDEFINED = ":-"
IF_DEFINED = ":+"

ENV_VAR_RE = re.compile(
    r"(?<!\\)\$(?:(?P<bare>\w+)|\{(?!AWS::)(?P<name>\w+)(?:(?P<op>:[-+])(?P<alt>[^}]*))?\})"
)


def get_env_var(name: str, default: str = None, environ: dict = None) -> str:
    """
    Gets the value of an environment variable.

    :param str name: name of the variable
    :param str default: value to use when the variable is unset or empty
    :param dict environ: alternative to os.environ
    :raises: MissingInputError when there is neither a value nor a default
    """
    if environ is None:
        environ = os.environ
    value = environ.get(name)
    if value:
        return value
    if default is not None:
        return default
    raise MissingInputError(name)


def expandvars(value: str, environ: dict = None) -> str:
    """
    Expand environment variables of form $var and ${var}.
    Escaped references (preceded by a backslash) are skipped.

    :param str value: string to interpolate
    :param dict environ: alternative to os.environ
    :raises: MissingInputError for a variable that is not set and has no default
    """
    if environ is None:
        environ = os.environ

    def replace_var(match):
        name = match.group("bare") or match.group("name")
        operator = match.group("op")
        if operator == IF_UNDEFINED:
            return environ.get(name) or match.group("alt")
        elif operator == IF_DEFINED:
            return match.group("alt") if environ.get(name) else ""
        if name not in environ:
            raise MissingInputError(name)
        return environ[name]

    return ENV_VAR_RE.sub(replace_var, value)


def interpolate(content, environ: dict = None):
    """
    Walks through dicts and lists to interpolate all the strings found

    :param content: the content to interpolate
    :param dict environ: alternative to os.environ
    :return: a new, interpolated, content
    """
    if isinstance(content, str):
        return expandvars(content, environ)
    elif isinstance(content, dict):
        return {key: interpolate(value, environ) for key, value in content.items()}
    elif isinstance(content, list):
        return [interpolate(item, environ) for item in content]
    return content
