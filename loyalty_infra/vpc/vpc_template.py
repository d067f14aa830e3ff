# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Create the VPC resources: the VPC itself, the internet gateway and the subnets layers.

RTB -> Route Table

Public subnet type: All subnets use the same RTB, route to 0.0.0.0/0 via InternetGateway
Private subnet type: Each subnet has its own RTB, each RTB points to one of the NAT Gateways.
With no NAT Gateway, the private subnets have no route to 0.0.0.0/0
"""

from troposphere import GetAZs, GetAtt, Ref, Select, Sub, Tags
from troposphere.ec2 import (
    EIP,
    VPC,
    InternetGateway,
    NatGateway,
    Route,
    RouteTable,
    Subnet,
    SubnetRouteTableAssociation,
    VPCGatewayAttachment,
)

from loyalty_infra.common.troposphere_tools import add_resource
from loyalty_infra.vpc.vpc_params import (
    AZ_INDEXES,
    IGW_ATTACHMENT_T,
    IGW_T,
    PRIVATE_LAYER,
    PUBLIC_LAYER,
    PUBLIC_ROUTE_T,
    PUBLIC_RTB_T,
    VPC_T,
)


def add_vpc_core(template, vpc_cidr):
    """
    Function to create the core resources of the VPC and add them to the template

    :param template: the Template()
    :param vpc_cidr: str of the VPC CIDR i.e. 10.0.0.0/16

    :return: tuple() with the vpc, igw and the igw attachment objects
    """
    vpc = add_resource(
        template,
        VPC(
            VPC_T,
            CidrBlock=vpc_cidr,
            EnableDnsHostnames=True,
            EnableDnsSupport=True,
            Tags=Tags(Name=Ref("AWS::StackName")),
        ),
    )
    igw = add_resource(template, InternetGateway(IGW_T))
    attachment = add_resource(
        template,
        VPCGatewayAttachment(
            IGW_ATTACHMENT_T,
            InternetGatewayId=Ref(igw),
            VpcId=Ref(vpc),
        ),
    )
    return vpc, igw, attachment


def add_public_subnets(template, vpc, layers, igw, attachment, nat_gateways: int):
    """
    Function to add public subnets for the VPC, and the NAT Gateways in the first subnets

    :param template: the Template()
    :param vpc: VPC() for Ref()
    :param dict layers: layers of subnets
    :param igw: internet gateway to route to
    :param attachment: the internet gateway attachment the default route depends on
    :param int nat_gateways: number of NAT Gateways to create

    :return: tuple() list of subnets, list of nats
    """
    rtb = add_resource(
        template,
        RouteTable(
            PUBLIC_RTB_T,
            VpcId=Ref(vpc),
            Tags=Tags(Name=Sub("${AWS::StackName}-Public")),
        ),
    )
    add_resource(
        template,
        Route(
            PUBLIC_ROUTE_T,
            GatewayId=Ref(igw),
            RouteTableId=Ref(rtb),
            DestinationCidrBlock="0.0.0.0/0",
            DependsOn=[attachment],
        ),
    )
    subnets = []
    nats = []
    for count, subnet_cidr in enumerate(layers[PUBLIC_LAYER]):
        index = AZ_INDEXES[count]
        subnet = add_resource(
            template,
            Subnet(
                f"PublicSubnet{index.upper()}",
                CidrBlock=subnet_cidr,
                VpcId=Ref(vpc),
                AvailabilityZone=Select(count, GetAZs("")),
                MapPublicIpOnLaunch=True,
                Tags=Tags(Name=Sub(f"${{AWS::StackName}}-Public-{index}")),
            ),
        )
        if len(nats) < nat_gateways:
            eip = add_resource(
                template,
                EIP(
                    f"NatGatewayEip{index.upper()}",
                    Domain="vpc",
                    DependsOn=[attachment],
                ),
            )
            nats.append(
                add_resource(
                    template,
                    NatGateway(
                        f"NatGatewayAz{index.upper()}",
                        AllocationId=GetAtt(eip, "AllocationId"),
                        SubnetId=Ref(subnet),
                    ),
                )
            )
        add_resource(
            template,
            SubnetRouteTableAssociation(
                f"PublicSubnetsRtbAssoc{index.upper()}",
                RouteTableId=Ref(rtb),
                SubnetId=Ref(subnet),
            ),
        )
        subnets.append(subnet)
    return subnets, nats


def add_private_subnets(template, vpc, layers, nats):
    """
    Function to add the private subnets to the VPC. The NAT Gateways are spread across the subnets.

    :param template: the Template()
    :param vpc: VPC() for Ref()
    :param dict layers: layers of subnets
    :param list nats: list of NatGateway()

    :returns: list of subnets
    """
    subnets = []
    for count, subnet_cidr in enumerate(layers[PRIVATE_LAYER]):
        index = AZ_INDEXES[count]
        subnet = add_resource(
            template,
            Subnet(
                f"AppSubnet{index.upper()}",
                CidrBlock=subnet_cidr,
                VpcId=Ref(vpc),
                AvailabilityZone=Select(count, GetAZs("")),
                Tags=Tags(Name=Sub(f"${{AWS::StackName}}-App-{index}")),
            ),
        )
        rtb = add_resource(
            template,
            RouteTable(
                f"AppRtb{index.upper()}",
                VpcId=Ref(vpc),
                Tags=Tags(Name=f"AppRtb{index.upper()}"),
            ),
        )
        if nats:
            add_resource(
                template,
                Route(
                    f"AppRoute{index.upper()}",
                    NatGatewayId=Ref(nats[count % len(nats)]),
                    RouteTableId=Ref(rtb),
                    DestinationCidrBlock="0.0.0.0/0",
                ),
            )
        add_resource(
            template,
            SubnetRouteTableAssociation(
                f"SubnetRtbAssoc{index.upper()}",
                RouteTableId=Ref(rtb),
                SubnetId=Ref(subnet),
            ),
        )
        subnets.append(subnet)
    return subnets
