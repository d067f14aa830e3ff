#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Package for the WebService: an InstrumentedService exposed to the internet over HTTP, behind
its own Application Load Balancer.
"""

from __future__ import annotations

from troposphere import Join

from loyalty_infra.common.logging import LOG
from loyalty_infra.ecs.instrumented_service import InstrumentedService
from loyalty_infra.ecs.instrumented_service.helpers import validate_definition
from loyalty_infra.elbv2 import Elbv2
from loyalty_infra.elbv2.elbv2_listener import add_forward_rule, define_http_listener
from loyalty_infra.elbv2.elbv2_params import (
    HEALTH_CHECK_GRACE_PERIOD,
    MIN_LB_SUBNETS,
    SERVICE_INGRESS_T,
    TARGET_PORT,
)
from loyalty_infra.elbv2.elbv2_target_group import define_target_group
from loyalty_infra.exceptions import InvalidCompositionError


def validate_web_port_mappings(title: str, definition: dict) -> None:
    """
    The load balancer targets the application container on port 8080, which must be mapped.

    :raises: InvalidCompositionError
    """
    ports = [
        port_mapping.get("ContainerPort")
        for port_mapping in definition.get("PortMappings") or []
        if isinstance(port_mapping, dict)
    ]
    if TARGET_PORT not in ports:
        raise InvalidCompositionError(
            f"{title} - A web service must map container port {TARGET_PORT}. Got",
            ports,
        )


def validate_web_subnets(title: str, definition: dict) -> None:
    """
    An Application Load Balancer needs subnets in at least two availability zones.

    :raises: InvalidCompositionError
    """
    subnets = definition["Vpc"].public_subnets
    if len(subnets) < MIN_LB_SUBNETS:
        raise InvalidCompositionError(
            f"{title} - The load balancer requires at least {MIN_LB_SUBNETS} public subnets. Got",
            [subnet.title for subnet in subnets],
        )


class WebService:
    """
    Class that contains an InstrumentedService and adds the target group, load balancer,
    listener and listener rule so that the service is reachable on http://<endpoint>/

    :ivar InstrumentedService service:
    :ivar Elbv2 load_balancer:
    """

    def __init__(self, template, title: str, definition: dict):
        validate_definition(title, definition)
        validate_web_port_mappings(title, definition)
        validate_web_subnets(title, definition)
        self.title = title
        self.service = InstrumentedService(template, title, definition)
        logical_name = self.service.logical_name

        self.target_group = define_target_group(
            template, logical_name, self.service.vpc, TARGET_PORT
        )
        self.load_balancer = Elbv2(template, logical_name, self.service.vpc)
        self.service.service.allow_ingress_from(
            self.load_balancer.lb_sg, TARGET_PORT, SERVICE_INGRESS_T
        )
        self.listener = define_http_listener(
            template, logical_name, self.load_balancer.lb
        )
        self.listener_rule = add_forward_rule(
            template, logical_name, self.listener, self.target_group
        )
        self.service.service.add_load_balancer(
            self.target_group,
            self.service.service_name,
            TARGET_PORT,
            depends_on=self.listener_rule,
            grace_period=HEALTH_CHECK_GRACE_PERIOD,
        )
        LOG.info(f"{self.service.service_name} - Exposed via {self.load_balancer.lb.title}")

    def __repr__(self):
        return f"{self.service.service_name} (web)"

    @property
    def execution_role(self):
        return self.service.execution_role

    @property
    def task_role(self):
        return self.service.task_role

    @property
    def endpoint(self):
        """The DNS name of the load balancer"""
        return self.load_balancer.dns_name

    @property
    def url(self):
        return Join("", ["http://", self.endpoint])
