#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
FireLens: the application container logs go to the Fluent Bit log router, which forwards them
to the Datadog logs intake.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loyalty_infra.ssm_parameter import ParameterRef

from troposphere.ecs import FirelensConfiguration, LogConfiguration
from troposphere.ecs import Secret as EcsSecret

from loyalty_infra.ecs.ecs_params import (
    DEFAULT_TELEMETRY,
    LOG_ROUTER_MEMORY_RESERVATION,
    LOG_ROUTER_NAME,
)
from loyalty_infra.ecs.managed_sidecars import ManagedSidecar

FIRELENS_LOG_DRIVER = "awsfirelens"


class FluentBit(ManagedSidecar):
    fluentbit_firelens_defaults: dict = {
        "Type": "fluentbit",
        "Options": {"enable-ecs-log-metadata": "true"},
    }

    def __init__(self, telemetry: dict = None):
        telemetry = telemetry if telemetry else DEFAULT_TELEMETRY
        super().__init__(
            LOG_ROUTER_NAME,
            telemetry["log_router_image"],
            is_essential=True,
            memory_reservation=LOG_ROUTER_MEMORY_RESERVATION,
        )

    @property
    def firelens_config(self) -> FirelensConfiguration:
        return FirelensConfiguration(**self.fluentbit_firelens_defaults)

    def set_container_definition(self, **extra_props):
        extra_props.setdefault("FirelensConfiguration", self.firelens_config)
        return super().set_container_definition(**extra_props)


def define_datadog_log_configuration(
    service_name: str, api_key: ParameterRef, telemetry: dict = None
) -> LogConfiguration:
    """
    Defines the awsfirelens log driver configuration of the application container, sending
    the logs to Datadog.

    :param str service_name:
    :param ParameterRef api_key: the parameter holding the Datadog API Key
    :param dict telemetry:
    :rtype: troposphere.ecs.LogConfiguration
    """
    telemetry = telemetry if telemetry else DEFAULT_TELEMETRY
    return LogConfiguration(
        LogDriver=FIRELENS_LOG_DRIVER,
        Options={
            "Name": "datadog",
            "Host": telemetry["logs_host"],
            "TLS": "on",
            "dd_service": service_name,
            "dd_source": telemetry["log_source"],
            "dd_message_key": "log",
            "dd_tags": f"project:{service_name}",
            "provider": "ecs",
        },
        SecretOptions=[EcsSecret(Name="apikey", ValueFrom=api_key.value_from)],
    )
