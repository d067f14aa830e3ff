#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Package managing the IAM roles of an ECS task: the execution role, used by the ECS agent to
pull images and fetch secrets, and the task role, assumed by the application.
"""

from troposphere import GetAtt, Ref
from troposphere.iam import Role as IamRole

from loyalty_infra.common.troposphere_tools import add_resource
from loyalty_infra.ecs.ecs_params import (
    ECS_TASK_EXECUTION_POLICY,
    EXEC_ROLE_T,
    TASK_ROLE_T,
)
from loyalty_infra.iam import (
    add_statement_resource,
    define_aws_managed_policy,
    service_role_trust_policy,
)


class EcsRole:
    """
    Class to wrap around the AWS IAM Role
    """

    def __init__(self, logical_name: str, role_type: str):
        """
        :param str logical_name: the logical name of the service the role belongs to
        :param str role_type: one of EXEC_ROLE_T or TASK_ROLE_T
        """
        if role_type not in [TASK_ROLE_T, EXEC_ROLE_T]:
            raise ValueError(
                "role_type is", role_type, "expected one of", [TASK_ROLE_T, EXEC_ROLE_T]
            )
        self._role_type = role_type
        self.logical_name = f"{logical_name}{role_type}"
        self.cfn_resource = None
        self.init_role(role_type)

    def __repr__(self):
        return self.logical_name

    @property
    def title(self) -> str:
        return self.cfn_resource.title

    @property
    def name(self):
        return Ref(self.cfn_resource)

    @property
    def arn(self):
        return GetAtt(self.cfn_resource, "Arn")

    @property
    def policies(self) -> list:
        return getattr(self.cfn_resource, "Policies", [])

    def init_role(self, role_type):
        """
        Initialize the new IAM Role and based on the use for it, sets defaults IAM policies.
        The task role is created without any permissions.
        """
        if role_type == EXEC_ROLE_T:
            self.cfn_resource = IamRole(
                self.logical_name,
                AssumeRolePolicyDocument=service_role_trust_policy("ecs-tasks"),
                ManagedPolicyArns=[
                    define_aws_managed_policy(ECS_TASK_EXECUTION_POLICY)
                ],
            )
        elif role_type == TASK_ROLE_T:
            self.cfn_resource = IamRole(
                self.logical_name,
                AssumeRolePolicyDocument=service_role_trust_policy("ecs-tasks"),
            )

    def grant(self, policy_name: str, sid: str, actions: list, resource) -> bool:
        """
        Grants the actions on the resource to the role. Granting the same resource twice is a no-op.

        :return: whether the role policies changed
        :rtype: bool
        """
        return add_statement_resource(
            self.cfn_resource, policy_name, sid, actions, resource
        )


class TaskIam:
    """
    Class to manage the task IAM roles of a service
    """

    def __init__(self, template, logical_name: str):
        self.logical_name = logical_name
        self.exec_role = EcsRole(logical_name, EXEC_ROLE_T)
        self.task_role = EcsRole(logical_name, TASK_ROLE_T)
        add_resource(template, self.exec_role.cfn_resource)
        add_resource(template, self.task_role.cfn_resource)

    def __repr__(self):
        return f"{self.logical_name}.iam"
