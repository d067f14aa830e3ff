# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>


import re
from json import dumps

from troposphere import Sub, encode_to_dict
from troposphere.iam import Policy, Role

from loyalty_infra.common.logging import LOG

POLICY_RE = re.compile(
    r"((^([a-zA-Z0-9-_./]+)$)|(^(arn:aws:iam::(aws|\d{12}):policy/)[a-zA-Z0-9-_./]+$))"
)


def service_role_trust_policy(service_name: str) -> dict:
    """
    Simple function to format the trust relationship for a Role and an AWS Service

    :param str service_name: name of the AWS service principal, i.e. ecs-tasks
    :return: policy document
    :rtype: dict
    """
    statement = {
        "Effect": "Allow",
        "Principal": {"Service": f"{service_name}.amazonaws.com"},
        "Action": "sts:AssumeRole",
    }
    policy_doc = {"Version": "2012-10-17", "Statement": [statement]}
    return policy_doc


def define_aws_managed_policy(policy: str):
    """
    From input, determines if the policy string is the full ARN or the path and name of an AWS managed policy.
    If the latter, adds the partition aware ARN prefix.

    :param str policy: i.e. service-role/AmazonECSTaskExecutionRolePolicy
    :return: the policy ARN
    """
    if not POLICY_RE.match(policy):
        raise ValueError(
            f"policy name {policy} does not match expected regexp",
            POLICY_RE.pattern,
        )
    if policy.startswith("arn:aws:iam::"):
        return policy
    return Sub(f"arn:${{AWS::Partition}}:iam::aws:policy/{policy}")


def statement_key(value) -> str:
    """
    Serializes a statement value (str, list or troposphere function) so two identical values
    compare equal even when they are different python objects.
    """
    return dumps(encode_to_dict(value), sort_keys=True)


def add_statement_resource(
    role: Role, policy_name: str, sid: str, actions: list, resource
) -> bool:
    """
    Grants the actions on the resource to the role, via an inline policy named policy_name.
    Statements are grouped by sid. Granting the same resource twice is a no-op.

    :param troposphere.iam.Role role: the IAM role to grant permissions to
    :param str policy_name: name of the inline policy holding the grants
    :param str sid: statement ID
    :param list actions: list of IAM actions
    :param resource: the ARN of the resource
    :return: whether the policy was changed
    :rtype: bool
    """
    if not isinstance(role, Role):
        raise TypeError(f"{role} is of type", type(role), "expected", Role)
    if not hasattr(role, "Policies"):
        setattr(role, "Policies", [])
    for policy in role.Policies:
        if policy.PolicyName == policy_name:
            break
    else:
        policy = Policy(
            PolicyName=policy_name,
            PolicyDocument={"Version": "2012-10-17", "Statement": []},
        )
        role.Policies.append(policy)

    statements = policy.PolicyDocument["Statement"]
    for statement in statements:
        if statement["Sid"] == sid:
            break
    else:
        statement = {
            "Sid": sid,
            "Effect": "Allow",
            "Action": list(actions),
            "Resource": [],
        }
        statements.append(statement)
    if statement_key(statement["Action"]) != statement_key(list(actions)):
        raise ValueError(
            f"{role.title}.{policy_name} - Statement {sid} already grants",
            statement["Action"],
            "Cannot grant",
            actions,
        )
    existing = [statement_key(_resource) for _resource in statement["Resource"]]
    if statement_key(resource) in existing:
        LOG.debug(f"{role.title}.{policy_name} - {sid} already granted. Skipping")
        return False
    statement["Resource"].append(resource)
    return True
