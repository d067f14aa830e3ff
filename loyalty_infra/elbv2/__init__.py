#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Package for the Application Load Balancer exposing a service to the internet
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loyalty_infra.vpc import Vpc

from troposphere import GetAtt, Ref, Sub, Tags
from troposphere.ec2 import SecurityGroup, SecurityGroupRule
from troposphere.elasticloadbalancingv2 import LoadBalancer

from loyalty_infra.common.logging import LOG
from loyalty_infra.common.troposphere_tools import add_resource
from loyalty_infra.elbv2.elbv2_params import LB_SG_T, LB_T, LISTENER_PORT


class Elbv2:
    """
    Class to create a new internet-facing Application Load Balancer in the VPC public subnets,
    with its own security group which allows HTTP from anywhere.

    :ivar troposphere.elasticloadbalancingv2.LoadBalancer lb:
    :ivar troposphere.ec2.SecurityGroup lb_sg:
    """

    def __init__(self, template, logical_name: str, vpc: Vpc):
        self.logical_name = logical_name
        self.lb_sg = add_resource(
            template,
            SecurityGroup(
                f"{logical_name}{LB_SG_T}",
                GroupDescription=Sub(
                    f"{logical_name}{LB_T} in ${{AWS::StackName}}"
                ),
                VpcId=vpc.vpc_id,
                SecurityGroupIngress=[
                    SecurityGroupRule(
                        IpProtocol="tcp",
                        FromPort=LISTENER_PORT,
                        ToPort=LISTENER_PORT,
                        CidrIp="0.0.0.0/0",
                        Description=f"Allow from anyone on port {LISTENER_PORT}",
                    )
                ],
                SecurityGroupEgress=[
                    SecurityGroupRule(
                        IpProtocol="-1",
                        CidrIp="0.0.0.0/0",
                        Description="Allow all outbound traffic by default",
                    )
                ],
            ),
        )
        self.lb = add_resource(
            template,
            LoadBalancer(
                f"{logical_name}{LB_T}",
                Scheme="internet-facing",
                Type="application",
                IpAddressType="ipv4",
                Subnets=vpc.public_subnets_ids,
                SecurityGroups=[GetAtt(self.lb_sg, "GroupId")],
                Tags=Tags(Name=Sub(f"{logical_name}-${{AWS::StackName}}")),
                DependsOn=[vpc.igw_attachment],
            ),
        )
        LOG.debug(f"{self.lb.title} - Internet facing ALB defined")

    @property
    def arn(self):
        return Ref(self.lb)

    @property
    def dns_name(self):
        return GetAtt(self.lb, "DNSName")
