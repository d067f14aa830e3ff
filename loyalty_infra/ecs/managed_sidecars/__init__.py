#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Package for the containers added next to the application container in every task
"""

from troposphere.ecs import ContainerDefinition
from troposphere.ecs import Environment as EcsEnvVar
from troposphere.ecs import PortMapping

from loyalty_infra.common.logging import LOG
from loyalty_infra.ssm_parameter.ssm_parameter_ecs import define_secrets


class ManagedSidecar:
    """
    Base class for a sidecar container, with its image, ports, environment and secrets.

    :ivar list[loyalty_infra.ssm_parameter.ssm_parameter_ecs.SecretBinding] secrets:
    """

    def __init__(
        self,
        name: str,
        image: str,
        is_essential: bool = True,
        ports: list = None,
        environment: dict = None,
        secret_variables: dict = None,
        memory_reservation: int = None,
    ):
        self.name = name
        self.image = image
        self.is_essential = is_essential
        self.ports = ports if ports else []
        self.environment = environment if environment else {}
        self.secrets = define_secrets(secret_variables)
        self.memory_reservation = memory_reservation
        self._container_definition = None

    def __repr__(self):
        return self.name

    @property
    def parameters(self) -> list:
        """The parameters the sidecar reads at launch"""
        return [secret.parameter for secret in self.secrets]

    def define_port_mappings(self) -> list:
        return [
            PortMapping(ContainerPort=port, HostPort=port, Protocol="tcp")
            for port in self.ports
        ]

    def define_environment(self) -> list:
        return [
            EcsEnvVar(Name=name, Value=value) for name, value in self.environment.items()
        ]

    def set_container_definition(self, **extra_props) -> ContainerDefinition:
        """
        Defines the container definition of the sidecar. Extra properties are set as-is.
        """
        props = {
            "Name": self.name,
            "Image": self.image,
            "Essential": self.is_essential,
        }
        if self.ports:
            props["PortMappings"] = self.define_port_mappings()
        if self.environment:
            props["Environment"] = self.define_environment()
        if self.secrets:
            props["Secrets"] = [secret.ecs_secret for secret in self.secrets]
        if self.memory_reservation:
            props["MemoryReservation"] = self.memory_reservation
        props.update(extra_props)
        self._container_definition = ContainerDefinition(**props)
        LOG.debug(f"{self.name} - Container definition set")
        return self._container_definition

    @property
    def container_definition(self) -> ContainerDefinition:
        if self._container_definition is None:
            return self.set_container_definition()
        return self._container_definition
