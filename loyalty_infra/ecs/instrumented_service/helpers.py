#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Helper functions to define the application container of an instrumented service
"""

from compose_x_common.compose_x_common import keyisset
from troposphere import AWSHelperFn
from troposphere.ecs import Environment as EcsEnvVar
from troposphere.ecs import PortMapping

from loyalty_infra.common import merge_env_vars
from loyalty_infra.ecs.ecs_params import (
    DD_ENV_LABEL,
    DD_SERVICE_LABEL,
    DD_VERSION_LABEL,
    OTLP_ENDPOINT,
    PORT_PROTOCOLS,
)
from loyalty_infra.exceptions import InvalidCompositionError

REQUIRED_KEYS = ["ServiceName", "Environment", "Version", "Image", "Cluster", "Vpc"]


def validate_definition(title: str, definition: dict) -> None:
    """
    Checks that all the required properties are set.

    :raises: InvalidCompositionError
    """
    if not isinstance(definition, dict):
        raise InvalidCompositionError(
            f"{title} - definition must be a mapping. Got {type(definition)}"
        )
    missing = [key for key in REQUIRED_KEYS if not keyisset(key, definition)]
    if missing:
        raise InvalidCompositionError(
            f"{title} - Missing required properties", missing
        )
    for key in ["EnvVariables", "SecretVariables"]:
        if key in definition and not isinstance(definition[key], (dict, type(None))):
            raise InvalidCompositionError(
                f"{title} - {key} must be a mapping. Got {type(definition[key])}"
            )


def define_base_environment(
    environment: str, service_name: str, version: str
) -> dict:
    """
    The environment variables every instrumented application container gets.
    """
    return {
        "OTLP_ENDPOINT": OTLP_ENDPOINT,
        "Environment": environment,
        "ECS_ENABLE_CONTAINER_METADATA": "true",
        "ENV": environment,
        "DD_ENV": environment,
        "SERVICE_NAME": service_name,
        "DD_SERVICE": service_name,
        "DD_VERSION": version,
        "DD_IAST_ENABLED": "true",
        "RUST_LOG": "info",
    }


def define_environment(
    environment: str, service_name: str, version: str, env_variables: dict = None
) -> list:
    """
    Merges the base environment with the service environment variables, which take precedence.

    :rtype: list[troposphere.ecs.Environment]
    """
    merged = merge_env_vars(
        define_base_environment(environment, service_name, version), env_variables
    )
    return [
        EcsEnvVar(
            Name=name, Value=value if isinstance(value, AWSHelperFn) else f"{value}"
        )
        for name, value in merged.items()
    ]


def define_port_mappings(title: str, port_mappings: list = None) -> list:
    """
    Defines the container port mappings. With awsvpc, the host port is always the container port.

    :param str title:
    :param list[dict] port_mappings: list of {"ContainerPort": int, "Protocol": str}
    :rtype: list[troposphere.ecs.PortMapping]
    """
    if not port_mappings:
        return []
    mappings = []
    for port_mapping in port_mappings:
        if not isinstance(port_mapping, dict) or not isinstance(
            port_mapping.get("ContainerPort"), int
        ):
            raise InvalidCompositionError(
                f"{title} - Port mapping must define ContainerPort as int. Got",
                port_mapping,
            )
        port = port_mapping["ContainerPort"]
        protocol = f"{port_mapping.get('Protocol', 'tcp')}".lower()
        if protocol not in PORT_PROTOCOLS:
            raise InvalidCompositionError(
                f"{title} - Port mapping protocol must be one of {PORT_PROTOCOLS}. Got",
                port_mapping.get("Protocol"),
            )
        mappings.append(
            PortMapping(
                ContainerPort=port,
                HostPort=port,
                Protocol=protocol,
            )
        )
    return mappings


def define_docker_labels(environment: str, service_name: str, version: str) -> dict:
    """
    The labels the Datadog agent uses for the unified service tagging
    """
    return {
        DD_ENV_LABEL: environment,
        DD_SERVICE_LABEL: service_name,
        DD_VERSION_LABEL: version,
    }
