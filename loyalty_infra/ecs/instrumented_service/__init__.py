#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Package for the InstrumentedService: an ECS Fargate service which application container is
instrumented with a Datadog agent and a Fluent Bit log router.
"""

from __future__ import annotations

from compose_x_common.compose_x_common import set_else_none
from troposphere.ecs import ContainerDefinition, RuntimePlatform, TaskDefinition

from loyalty_infra.common import to_logical_name
from loyalty_infra.common.logging import LOG
from loyalty_infra.common.troposphere_tools import add_resource
from loyalty_infra.ecs import ecs_params
from loyalty_infra.ecs.ecs_firelens import FluentBit, define_datadog_log_configuration
from loyalty_infra.ecs.ecs_service import EcsService
from loyalty_infra.ecs.managed_sidecars.datadog_agent import DatadogAgent
from loyalty_infra.ecs.task_iam import TaskIam
from loyalty_infra.ssm_parameter import SsmParameterRef
from loyalty_infra.ssm_parameter.ssm_parameter_ecs import define_secrets

from .helpers import (
    define_docker_labels,
    define_environment,
    define_port_mappings,
    validate_definition,
)


class InstrumentedService:
    """
    Class to create the task definition (application container, Datadog agent and log router),
    the IAM roles and the ECS service of a workload.

    :ivar EcsService service: the ECS service
    :ivar loyalty_infra.ecs.task_iam.EcsRole execution_role:
    :ivar loyalty_infra.ecs.task_iam.EcsRole task_role: created without any permissions
    :ivar troposphere.ecs.TaskDefinition task_definition:
    :ivar SsmParameterRef api_key: the Datadog API Key parameter
    """

    def __init__(self, template, title: str, definition: dict):
        """
        :param troposphere.Template template: the template to add the resources to
        :param str title: the construct name
        :param dict definition: the service properties
        :raises: InvalidCompositionError if the definition is incomplete
        """
        validate_definition(title, definition)
        self.title = title
        self.template = template
        self.definition = definition
        self.service_name = definition["ServiceName"]
        self.logical_name = to_logical_name(self.service_name)
        self.environment = definition["Environment"]
        self.version = definition["Version"]
        self.image = definition["Image"]
        self.cluster = definition["Cluster"]
        self.vpc = definition["Vpc"]
        self.port_mappings = set_else_none("PortMappings", definition, alt_value=[])
        self.env_variables = set_else_none("EnvVariables", definition, alt_value={})
        self.secret_variables = set_else_none(
            "SecretVariables", definition, alt_value={}
        )
        self.telemetry = dict(ecs_params.DEFAULT_TELEMETRY)
        self.telemetry.update(set_else_none("Telemetry", definition, alt_value={}))
        self.runtime = dict(ecs_params.DEFAULT_RUNTIME)
        self.runtime.update(set_else_none("Runtime", definition, alt_value={}))

        self.secrets = define_secrets(self.secret_variables)
        self.app_port_mappings = define_port_mappings(title, self.port_mappings)
        self.api_key = SsmParameterRef(self.telemetry["api_key_parameter"])

        self.iam_manager = TaskIam(template, self.logical_name)
        self.execution_role = self.iam_manager.exec_role
        self.task_role = self.iam_manager.task_role

        self.datadog_agent = DatadogAgent(
            self.environment,
            self.service_name,
            self.version,
            self.api_key,
            self.telemetry,
        )
        self.log_router = FluentBit(self.telemetry)
        self.container_definition = self.define_application_container()
        self.task_definition = add_resource(template, self.define_task_definition())
        self.service = EcsService(
            template,
            self.logical_name,
            self.service_name,
            self.task_definition,
            self.cluster,
            self.vpc,
        )
        self.grant_launch_permissions()
        LOG.info(
            f"{self.service_name} - Instrumented service defined with containers "
            f"{[container.Name for container in self.task_definition.ContainerDefinitions]}"
        )

    def __repr__(self):
        return self.service_name

    @property
    def parameters(self) -> list:
        """All the parameters the task reads at launch"""
        return [secret.parameter for secret in self.secrets] + [self.api_key]

    def define_application_container(self) -> ContainerDefinition:
        props = {
            "Name": self.service_name,
            "Image": self.image,
            "Essential": True,
            "Environment": define_environment(
                self.environment, self.service_name, self.version, self.env_variables
            ),
            "DockerLabels": define_docker_labels(
                self.environment, self.service_name, self.version
            ),
            "LogConfiguration": define_datadog_log_configuration(
                self.service_name, self.api_key, self.telemetry
            ),
        }
        if self.app_port_mappings:
            props["PortMappings"] = self.app_port_mappings
        if self.secrets:
            props["Secrets"] = [secret.ecs_secret for secret in self.secrets]
        return ContainerDefinition(**props)

    def define_task_definition(self) -> TaskDefinition:
        """
        The application container always comes first, followed by the sidecars.
        """
        return TaskDefinition(
            f"{self.logical_name}{ecs_params.TASK_T}",
            Family=self.service_name,
            Cpu=f"{self.runtime['cpu']}",
            Memory=f"{self.runtime['memory']}",
            NetworkMode=ecs_params.NETWORK_MODE,
            RequiresCompatibilities=[ecs_params.FARGATE_LAUNCH_TYPE],
            RuntimePlatform=RuntimePlatform(
                CpuArchitecture=self.runtime["cpu_architecture"],
                OperatingSystemFamily=self.runtime["os_family"],
            ),
            ExecutionRoleArn=self.execution_role.arn,
            TaskRoleArn=self.task_role.arn,
            ContainerDefinitions=[
                self.container_definition,
                self.datadog_agent.container_definition,
                self.log_router.container_definition,
            ],
        )

    def grant_launch_permissions(self) -> None:
        """
        The execution role fetches the secrets values when starting the containers
        """
        for parameter in self.parameters:
            parameter.grant_read(self.execution_role)
