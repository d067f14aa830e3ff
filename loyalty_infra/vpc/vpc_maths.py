# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
2 Layers subnets calculator for the public/private VPC
"""

import ipaddress
from math import ceil, log

from loyalty_infra.vpc.vpc_params import PRIVATE_LAYER, PUBLIC_LAYER


def nxtpow2(x: int) -> int:
    """
    Function to find the next power of two from given x number

    :param x: number to look for the next power of two
    :returns: int() next power of two
    """
    return int(pow(2, ceil(log(x, 2))))


def cut_per_az(az_cidr, layers_cidr):
    """Subdivide the range of an AZ in two, private and public

    :param az_cidr: CIDR to split
    :param layers_cidr: dict() getting updated with layers

    :returns: NIL
    """
    private, public = list(az_cidr.subnets(prefixlen_diff=1))
    layers_cidr[PUBLIC_LAYER].append(public)
    layers_cidr[PRIVATE_LAYER].append(private)


def get_subnets(cidr, azs):
    """
    Get the lists of Subnets CIDRs, one public and one private per AZ.
    The VPC range is cut in the next power of two of the number of AZs, so a VPC over 3 AZs
    keeps a quarter of its range unallocated.

    :param str cidr: the VPC CIDR
    :param int azs: number of AZs
    """
    if azs < 1:
        raise ValueError("The VPC must span at least 1 AZ. Got", azs)
    vpc_net = ipaddress.IPv4Network(f"{cidr}")
    prefix_diff = int(log(nxtpow2(azs), 2)) if azs > 1 else 0
    layers_cidr = {PUBLIC_LAYER: [], PRIVATE_LAYER: []}
    if vpc_net.prefixlen + prefix_diff + 1 > 28:
        raise ValueError(f"{cidr} is too small to host {azs} AZs with 2 subnets each")
    subnets_per_az = list(vpc_net.subnets(prefixlen_diff=prefix_diff))[:azs]
    for az in subnets_per_az:
        cut_per_az(az, layers_cidr)
    return layers_cidr


def get_subnet_layers(cidr, azs):
    """
    Get Subnets layers based on number of AZs

    :returns: the CIDRs as str per layer
    :rtype: dict
    """
    layers = get_subnets(cidr, azs)
    return {layer: [f"{subnet}" for subnet in subnets] for layer, subnets in layers.items()}
