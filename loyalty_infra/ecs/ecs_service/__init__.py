# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Package to build the ECS Service Definition and its security group
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loyalty_infra.ecs_cluster import EcsCluster
    from loyalty_infra.vpc import Vpc

from troposphere import GetAtt, Ref, Sub, Tags
from troposphere.ec2 import SecurityGroup, SecurityGroupIngress, SecurityGroupRule
from troposphere.ecs import (
    AwsvpcConfiguration,
    DeploymentConfiguration,
    DeploymentController,
    LoadBalancer,
    NetworkConfiguration,
    Service,
)

from loyalty_infra.common.logging import LOG
from loyalty_infra.common.troposphere_tools import add_resource
from loyalty_infra.ecs import ecs_params


class EcsService:
    """
    Class representing the ECS Service running the task definition, with one task, in the public
    subnets of the VPC.

    :ivar troposphere.ec2.SecurityGroup security_group: the service security group, egress all.
    :ivar troposphere.ecs.Service ecs_service: the service
    :ivar list lbs: the load balancers the service is registered to
    """

    def __init__(
        self,
        template,
        logical_name: str,
        service_name: str,
        task_definition,
        cluster: EcsCluster,
        vpc: Vpc,
    ):
        """
        :param troposphere.Template template:
        :param str logical_name: the logical name of the service, prefix to all resources titles
        :param str service_name:
        :param troposphere.ecs.TaskDefinition task_definition:
        :param EcsCluster cluster:
        :param Vpc vpc:
        """
        self.template = template
        self.logical_name = logical_name
        self.service_name = service_name
        self.lbs = []
        self.dependencies = []
        self.security_group = add_resource(
            template,
            SecurityGroup(
                f"{logical_name}{ecs_params.SG_T}",
                GroupDescription=Sub(f"{service_name} in ${{AWS::StackName}}"),
                VpcId=vpc.vpc_id,
                SecurityGroupEgress=[
                    SecurityGroupRule(
                        IpProtocol="-1",
                        CidrIp="0.0.0.0/0",
                        Description="Allow all outbound traffic by default",
                    )
                ],
                Tags=Tags(Name=service_name),
            ),
        )
        self.ecs_service = add_resource(
            template,
            Service(
                f"{logical_name}{ecs_params.SERVICE_T}",
                Cluster=cluster.cluster_identifier,
                TaskDefinition=Ref(task_definition),
                DesiredCount=ecs_params.DESIRED_COUNT,
                LaunchType=ecs_params.FARGATE_LAUNCH_TYPE,
                DeploymentController=DeploymentController(Type="ECS"),
                DeploymentConfiguration=DeploymentConfiguration(
                    MaximumPercent=ecs_params.MAX_PERCENT,
                    MinimumHealthyPercent=ecs_params.MIN_HEALTHY_PERCENT,
                ),
                EnableECSManagedTags=True,
                PropagateTags="SERVICE",
                NetworkConfiguration=NetworkConfiguration(
                    AwsvpcConfiguration=AwsvpcConfiguration(
                        AssignPublicIp="ENABLED",
                        SecurityGroups=[GetAtt(self.security_group, "GroupId")],
                        Subnets=vpc.public_subnets_ids,
                    )
                ),
                Tags=Tags(Name=service_name),
            ),
        )

    def __repr__(self):
        return self.service_name

    @property
    def security_group_id(self):
        return GetAtt(self.security_group, "GroupId")

    @property
    def name(self):
        return GetAtt(self.ecs_service, "Name")

    def allow_ingress_from(self, source_group, port: int, title_suffix: str) -> None:
        """
        Allows TCP traffic on the given port from another security group

        :param troposphere.ec2.SecurityGroup source_group:
        :param int port:
        :param str title_suffix: unique suffix for the ingress rule title
        """
        add_resource(
            self.template,
            SecurityGroupIngress(
                f"{self.logical_name}{title_suffix}",
                GroupId=self.security_group_id,
                SourceSecurityGroupId=GetAtt(source_group, "GroupId"),
                IpProtocol="tcp",
                FromPort=port,
                ToPort=port,
                Description=Sub(
                    f"From ${{{source_group.title}}} to {self.service_name} on port {port}"
                ),
            ),
        )

    def add_load_balancer(
        self,
        target_group,
        container_name: str,
        container_port: int,
        depends_on=None,
        grace_period: int = 60,
    ) -> None:
        """
        Registers the service container to the target group. The service depends on the
        listener rule, as the target group must be associated to a load balancer first.

        :param troposphere.elasticloadbalancingv2.TargetGroup target_group:
        :param str container_name:
        :param int container_port:
        :param depends_on: the resource(s) the service must wait for
        :param int grace_period: health check grace period, in seconds
        """
        self.lbs.append(
            LoadBalancer(
                TargetGroupArn=Ref(target_group),
                ContainerName=container_name,
                ContainerPort=container_port,
            )
        )
        setattr(self.ecs_service, "LoadBalancers", self.lbs)
        setattr(self.ecs_service, "HealthCheckGracePeriodSeconds", grace_period)
        if depends_on is not None:
            if not isinstance(depends_on, list):
                depends_on = [depends_on]
            for dependency in depends_on:
                if dependency.title not in self.dependencies:
                    self.dependencies.append(dependency.title)
            setattr(self.ecs_service, "DependsOn", self.dependencies)
        LOG.info(
            f"{self.service_name} - Registered {container_name}:{container_port}"
            f" to {target_group.title}"
        )
