# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

from troposphere import AWS_STACK_NAME, GetAtt, Output, Ref
from troposphere.ecs import Cluster

from loyalty_infra.common.logging import LOG
from loyalty_infra.common.troposphere_tools import add_outputs, add_resource

CLUSTER_T = "EcsCluster"
FARGATE_PROVIDER = "FARGATE"
FARGATE_SPOT_PROVIDER = "FARGATE_SPOT"
FARGATE_PROVIDERS = [FARGATE_PROVIDER, FARGATE_SPOT_PROVIDER]


class EcsCluster:
    """
    Class to make it easier to manipulate the ECS Cluster to use and its various properties
    """

    def __init__(self, template, title: str = CLUSTER_T, vpc=None):
        """
        :param troposphere.Template template:
        :param str title: logical ID of the cluster
        :param loyalty_infra.vpc.Vpc vpc: the VPC the services of the cluster run in
        """
        self.vpc = vpc
        self.capacity_providers = FARGATE_PROVIDERS
        self.cfn_resource = add_resource(
            template,
            Cluster(
                title,
                ClusterName=Ref(AWS_STACK_NAME),
                CapacityProviders=self.capacity_providers,
            ),
        )
        LOG.debug(f"Cluster {title} - capacity providers {self.capacity_providers}")
        add_outputs(template, [Output("ClusterName", Value=Ref(self.cfn_resource))])

    @property
    def cluster_identifier(self):
        return Ref(self.cfn_resource)

    @property
    def arn(self):
        return GetAtt(self.cfn_resource, "Arn")
