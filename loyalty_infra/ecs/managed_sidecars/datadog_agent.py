#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Simple class to manage the Datadog agent sidecar, receiving the OTLP traces and DogStatsD metrics
of the application container.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loyalty_infra.ssm_parameter import ParameterRef

from loyalty_infra.ecs.ecs_params import (
    DATADOG_AGENT_NAME,
    DATADOG_AGENT_PORTS,
    DEFAULT_TELEMETRY,
    OTLP_GRPC_PORT,
)
from loyalty_infra.ecs.managed_sidecars import ManagedSidecar


def define_agent_environment(
    site: str, environment: str, service_name: str, version: str
) -> dict:
    """
    The Datadog agent settings. Logs are shipped by the log router, not by the agent.
    """
    return {
        "DD_SITE": site,
        "ECS_FARGATE": "true",
        "DD_OTLP_CONFIG_RECEIVER_PROTOCOLS_GRPC_ENDPOINT": f"0.0.0.0:{OTLP_GRPC_PORT}",
        "DD_LOGS_ENABLED": "false",
        "DD_DOGSTATSD_NON_LOCAL_TRAFFIC": "true",
        "DD_APM_ENABLED": "true",
        "DD_APM_NON_LOCAL_TRAFFIC": "true",
        "DD_ENV": environment,
        "DD_SERVICE": service_name,
        "DD_VERSION": version,
    }


class DatadogAgent(ManagedSidecar):
    def __init__(
        self,
        environment: str,
        service_name: str,
        version: str,
        api_key: ParameterRef,
        telemetry: dict = None,
    ):
        telemetry = telemetry if telemetry else DEFAULT_TELEMETRY
        super().__init__(
            DATADOG_AGENT_NAME,
            telemetry["agent_image"],
            is_essential=True,
            ports=DATADOG_AGENT_PORTS,
            environment=define_agent_environment(
                telemetry["site"], environment, service_name, version
            ),
            secret_variables={"DD_API_KEY": api_key},
        )
        self.api_key = api_key
