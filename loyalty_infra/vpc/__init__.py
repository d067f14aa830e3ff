# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module to create the VPC the services run in
"""

from troposphere import GetAtt, Output, Ref

from loyalty_infra.common.logging import LOG
from loyalty_infra.common.troposphere_tools import add_outputs
from loyalty_infra.vpc.vpc_maths import get_subnet_layers
from loyalty_infra.vpc.vpc_params import (
    AZ_INDEXES,
    DEFAULT_MAX_AZS,
    DEFAULT_NAT_GATEWAYS,
    DEFAULT_VPC_CIDR,
)
from loyalty_infra.vpc.vpc_template import (
    add_private_subnets,
    add_public_subnets,
    add_vpc_core,
)


class Vpc:
    """
    Class to represent the VPC with its public and private subnets.

    :ivar troposphere.ec2.VPC cfn_resource: the VPC
    :ivar list public_subnets: the public subnets, services are placed in these
    :ivar list private_subnets:
    :ivar list nat_gateways:
    """

    def __init__(
        self,
        template,
        cidr: str = DEFAULT_VPC_CIDR,
        max_azs: int = DEFAULT_MAX_AZS,
        nat_gateways: int = DEFAULT_NAT_GATEWAYS,
    ):
        if not 1 <= max_azs <= len(AZ_INDEXES):
            raise ValueError(
                "max_azs must be between 1 and", len(AZ_INDEXES), "Got", max_azs
            )
        if not 0 <= nat_gateways <= max_azs:
            raise ValueError(
                "nat_gateways must be between 0 and max_azs", max_azs, "Got", nat_gateways
            )
        self.cidr = cidr
        self.max_azs = max_azs
        self.layers = get_subnet_layers(cidr, max_azs)
        LOG.debug(f"VPC {cidr} subnets layers: {self.layers}")
        self.cfn_resource, self.igw, self.igw_attachment = add_vpc_core(template, cidr)
        self.public_subnets, self.nat_gateways = add_public_subnets(
            template,
            self.cfn_resource,
            self.layers,
            self.igw,
            self.igw_attachment,
            nat_gateways,
        )
        self.private_subnets = add_private_subnets(
            template, self.cfn_resource, self.layers, self.nat_gateways
        )
        add_outputs(
            template,
            [Output("VpcId", Value=Ref(self.cfn_resource))],
        )

    @property
    def vpc_id(self):
        return Ref(self.cfn_resource)

    @property
    def cidr_block(self):
        return GetAtt(self.cfn_resource, "CidrBlock")

    @property
    def public_subnets_ids(self) -> list:
        return [Ref(subnet) for subnet in self.public_subnets]

    @property
    def private_subnets_ids(self) -> list:
        return [Ref(subnet) for subnet in self.private_subnets]
