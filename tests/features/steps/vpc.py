#  -*- coding: utf-8 -*-
#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

from behave import given, then, when
from troposphere import Ref
from troposphere.ec2 import NatGateway, Route

from loyalty_infra.common.troposphere_tools import build_template
from loyalty_infra.vpc import Vpc


@given("I want a VPC with {azs:d} availability zones")
def step_impl(context, azs):
    context.cidr_block = "172.16.0.0/20"
    context.azs = azs


@when("I want single NAT")
def step_impl(context):
    context.nat_gateways = 1


@when("this is for production")
def step_impl(context):
    context.nat_gateways = context.azs


@then("I should have {count:d} nat gateways")
def step_impl(context, count):
    template = build_template("VPC")
    context.vpc = Vpc(
        template,
        cidr=context.cidr_block,
        max_azs=context.azs,
        nat_gateways=context.nat_gateways,
    )
    context.template = template
    nats = 0
    for resource in template.resources.values():
        if isinstance(resource, NatGateway):
            nats += 1
    assert nats == count


@then("all application subnets should route through {nat_title}")
def step_impl(context, nat_title):
    routes = [
        resource
        for resource in context.template.resources.values()
        if isinstance(resource, Route) and resource.title.startswith("AppRoute")
    ]
    assert len(routes) == context.azs
    for route in routes:
        assert route.NatGatewayId.to_dict() == Ref(nat_title).to_dict()
