# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Constants related to the VPC settings. Used by loyalty_infra.vpc and others
"""

DEFAULT_VPC_CIDR = "10.0.0.0/16"
DEFAULT_MAX_AZS = 3
DEFAULT_NAT_GATEWAYS = 1

AZ_INDEXES = ["a", "b", "c"]

VPC_T = "Vpc"
IGW_T = "InternetGatewayV4"
IGW_ATTACHMENT_T = "VPCGatewayAttachement"
PUBLIC_RTB_T = "PublicRtb"
PUBLIC_ROUTE_T = "PublicDefaultRoute"

PUBLIC_LAYER = "pub"
PRIVATE_LAYER = "app"
