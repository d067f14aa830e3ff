#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module composing the loyalty application infrastructure: the network, the cluster and the
web, backend and (optional) simulator services.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loyalty_infra.common.settings import LoyaltySettings

from troposphere import GetAtt, Output

from loyalty_infra.common.logging import LOG
from loyalty_infra.common.troposphere_tools import add_outputs, build_template
from loyalty_infra.ecs.instrumented_service import InstrumentedService
from loyalty_infra.ecs_cluster import EcsCluster
from loyalty_infra.ssm_parameter import SsmParameterRef
from loyalty_infra.vpc import Vpc
from loyalty_infra.web_service import WebService

WEB_SERVICE_NAME = "loyalty-web-fargate"
BACKEND_SERVICE_NAME = "loyalty-backend-fargate"
SIMULATOR_SERVICE_NAME = "loyalty-simulator-fargate"
BACKEND_GROUP_ID = "loyalty-fargate"

WEB_SECRETS = ["DATABASE_URL"]
BACKEND_SECRETS = ["DATABASE_URL", "BROKER", "KAFKA_USERNAME", "KAFKA_PASSWORD"]
SIMULATOR_SECRETS = ["BROKER", "KAFKA_USERNAME", "KAFKA_PASSWORD"]


class LoyaltyStack:
    """
    Class to build all the resources of the loyalty application into a single template.

    :ivar Vpc vpc:
    :ivar EcsCluster cluster:
    :ivar dict parameters: env var name to SsmParameterRef
    :ivar WebService web:
    :ivar InstrumentedService backend:
    :ivar InstrumentedService simulator: None unless the simulator is deployed
    """

    def __init__(self, settings: LoyaltySettings, template=None):
        self.settings = settings
        self.template = (
            template
            if template is not None
            else build_template(
                f"Loyalty application on ECS Fargate - {settings.environment}"
            )
        )
        network = settings.network
        self.vpc = Vpc(
            self.template,
            cidr=network["cidr"],
            max_azs=network["max_azs"],
            nat_gateways=network["nat_gateways"],
        )
        self.cluster = EcsCluster(self.template, vpc=self.vpc)
        self.parameters = {
            env_name: SsmParameterRef(parameter_name)
            for env_name, parameter_name in settings.parameters.items()
        }
        self.api_key = SsmParameterRef(settings.telemetry["api_key_parameter"])

        self.web = WebService(
            self.template,
            "LoyaltyWeb",
            self.define_service(
                WEB_SERVICE_NAME,
                settings.web_image,
                settings.image_tag,
                WEB_SECRETS,
                port_mappings=[{"ContainerPort": 8080, "Protocol": "tcp"}],
            ),
        )
        self.backend = InstrumentedService(
            self.template,
            "LoyaltyBackend",
            self.define_service(
                BACKEND_SERVICE_NAME,
                settings.backend_image,
                settings.image_tag,
                BACKEND_SECRETS,
                env_variables={"GROUP_ID": BACKEND_GROUP_ID},
            ),
        )
        self.simulator = None
        if settings.deploy_simulator:
            self.simulator = InstrumentedService(
                self.template,
                "LoyaltySimulator",
                self.define_service(
                    SIMULATOR_SERVICE_NAME,
                    settings.simulator_image,
                    settings.simulator_image_tag,
                    SIMULATOR_SECRETS,
                    env_variables={
                        "FARGATE_API_ENDPOINT": self.web.url,
                        "HTTP_REQ_PER_SECOND": f"{settings.simulator['http_req_per_second']}",
                        "EVENTS_PER_SECOND": f"{settings.simulator['events_per_second']}",
                    },
                ),
            )
        else:
            LOG.info(
                f"{settings.deploy_simulator_env} is not set to Y. Skipping simulator"
            )
        self.grant_parameters_access()
        self.define_outputs()

    @property
    def services(self) -> list:
        services = [self.web.service, self.backend]
        if self.simulator:
            services.append(self.simulator)
        return services

    def define_service(
        self,
        service_name: str,
        image: str,
        version: str,
        secrets: list,
        port_mappings: list = None,
        env_variables: dict = None,
    ) -> dict:
        """
        Defines the properties of an instrumented service
        """
        definition = {
            "ServiceName": service_name,
            "Environment": self.settings.environment,
            "Version": version,
            "Image": image,
            "Cluster": self.cluster,
            "Vpc": self.vpc,
            "EnvVariables": env_variables if env_variables else {},
            "SecretVariables": {
                env_name: self.parameters[env_name] for env_name in secrets
            },
            "Telemetry": self.settings.telemetry,
            "Runtime": self.settings.runtime,
        }
        if port_mappings:
            definition["PortMappings"] = port_mappings
        return definition

    def grant_parameters_access(self) -> None:
        """
        Grants the web and simulator execution roles read access to their parameters.
        """
        for env_name in WEB_SECRETS:
            self.parameters[env_name].grant_read(self.web.execution_role)
        self.api_key.grant_read(self.web.execution_role)
        if self.simulator:
            for env_name in SIMULATOR_SECRETS:
                self.parameters[env_name].grant_read(self.simulator.execution_role)

    def define_outputs(self) -> None:
        outputs = [Output("LoyaltyWebEndpoint", Value=self.web.endpoint)]
        for service in self.services:
            outputs += [
                Output(
                    f"{service.logical_name}ServiceName",
                    Value=GetAtt(service.service.ecs_service, "Name"),
                ),
                Output(
                    f"{service.logical_name}ExecutionRoleArn",
                    Value=service.execution_role.arn,
                ),
            ]
        add_outputs(self.template, outputs)


def generate_full_template(settings: LoyaltySettings):
    """
    Function to generate the template of the loyalty application.

    :param LoyaltySettings settings: The settings for the execution
    :return: the template
    :rtype: troposphere.Template
    """
    LOG.info(f"{settings.name} - Rendering for environment {settings.environment}")
    stack = LoyaltyStack(settings)
    LOG.info(
        f"{settings.name} - {len(stack.template.resources)} resources,"
        f" services {[service.service_name for service in stack.services]}"
    )
    return stack.template
