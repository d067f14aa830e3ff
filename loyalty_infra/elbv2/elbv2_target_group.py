#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Target group with IP targets, the ECS service registers its tasks into.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loyalty_infra.vpc import Vpc

from troposphere.elasticloadbalancingv2 import Matcher, TargetGroup

from loyalty_infra.common.troposphere_tools import add_resource
from loyalty_infra.elbv2.elbv2_params import (
    HEALTH_CHECK_PATH,
    HEALTHY_HTTP_CODES,
    TARGET_GROUP_T,
    TARGET_PORT,
    TARGET_PROTOCOL,
    TARGET_TYPE,
)


def define_target_group(
    template, logical_name: str, vpc: Vpc, port: int = TARGET_PORT
) -> TargetGroup:
    """
    Defines the target group and its health check.

    :param troposphere.Template template:
    :param str logical_name:
    :param Vpc vpc:
    :param int port: the port of the containers, also used for the health checks
    :rtype: troposphere.elasticloadbalancingv2.TargetGroup
    """
    return add_resource(
        template,
        TargetGroup(
            f"{logical_name}{TARGET_GROUP_T}",
            Port=port,
            Protocol=TARGET_PROTOCOL,
            TargetType=TARGET_TYPE,
            VpcId=vpc.vpc_id,
            HealthCheckEnabled=True,
            HealthCheckPath=HEALTH_CHECK_PATH,
            HealthCheckPort=f"{port}",
            HealthCheckProtocol=TARGET_PROTOCOL,
            Matcher=Matcher(HttpCode=HEALTHY_HTTP_CODES),
        ),
    )
