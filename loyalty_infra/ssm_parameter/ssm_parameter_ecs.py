#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module to expose parameters to the ECS containers as secrets
"""

from troposphere.ecs import Secret as EcsSecret

from loyalty_infra.ssm_parameter import ParameterRef


class SecretBinding:
    """
    Binds an environment variable name of a container to a parameter the ECS agent resolves at launch.
    """

    def __init__(self, name: str, parameter: ParameterRef):
        if not isinstance(parameter, ParameterRef):
            raise TypeError(
                f"{name} - parameter is", type(parameter), "expected", ParameterRef
            )
        if not isinstance(name, str) or not name:
            raise ValueError("Secret name must be a non empty string. Got", name)
        self.name = name
        self.parameter = parameter

    def __repr__(self):
        return f"{self.name}={self.parameter}"

    @property
    def ecs_secret(self) -> EcsSecret:
        return EcsSecret(Name=self.name, ValueFrom=self.parameter.value_from)


def define_secrets(secret_variables: dict) -> list:
    """
    From the env var name to parameter mapping, define the secret bindings, sorted by name.

    :param dict secret_variables:
    :rtype: list[SecretBinding]
    """
    if not secret_variables:
        return []
    return [
        SecretBinding(name, parameter)
        for name, parameter in sorted(secret_variables.items())
    ]
