# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Functions to create or update the CloudFormation stack from the rendered template.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loyalty_infra.common.files import FileArtifact
    from loyalty_infra.common.settings import LoyaltySettings

from botocore.exceptions import ClientError
from compose_x_common.compose_x_common import keyisset

from loyalty_infra.common.logging import LOG

CAPABILITIES = ["CAPABILITY_IAM", "CAPABILITY_NAMED_IAM"]
TEMPLATE_BODY_MAX_SIZE = 51200


def assert_can_create_stack(client, name: str):
    """
    Checks whether a stack already exists or not
    """
    try:
        stack_r = client.describe_stacks(StackName=name)
        if not keyisset("Stacks", stack_r):
            return True
        stacks = stack_r["Stacks"]
        if len(stacks) != 1:
            raise LookupError("Too many stacks found with machine name", name)
        stack = stacks[0]
        if stack["StackStatus"] == "REVIEW_IN_PROGRESS":
            return stack
        return False
    except ClientError as error:
        if (
            error.response["Error"]["Code"] == "ValidationError"
            and error.response["Error"]["Message"].find("does not exist") > 0
        ):
            return True
        raise error


def assert_can_update_stack(client, name: str) -> bool:
    """
    Checks whether the stack is in a state that allows updates
    """
    can_update_statuses = [
        "CREATE_COMPLETE",
        "ROLLBACK_COMPLETE",
        "UPDATE_COMPLETE",
        "UPDATE_ROLLBACK_COMPLETE",
    ]
    res = client.describe_stacks(StackName=name)
    if not res["Stacks"]:
        return False
    stack = res["Stacks"][0]
    LOG.info(f"{name} - {stack['StackStatus']}")
    if stack["StackStatus"] in can_update_statuses:
        return True
    return False


def define_template_source(template_file: FileArtifact) -> dict:
    """
    Inline body when it fits in the CloudFormation API limits, S3 URL otherwise

    :param FileArtifact template_file:
    :rtype: dict
    """
    if len(template_file.body.encode("utf-8")) <= TEMPLATE_BODY_MAX_SIZE:
        return {"TemplateBody": template_file.body}
    LOG.warning(
        f"Template is larger than {TEMPLATE_BODY_MAX_SIZE} bytes. Uploading to S3."
    )
    return {"TemplateURL": template_file.upload()}


def deploy(settings: LoyaltySettings, template_file: FileArtifact):
    """
    Function to deploy (create or update) the stack to CFN.

    :param LoyaltySettings settings:
    :param FileArtifact template_file:
    :return: the stack ID, None if the stack could be neither created nor updated
    """
    client = settings.session.client("cloudformation")
    stack_props = {
        "StackName": settings.name,
        "Capabilities": CAPABILITIES,
        "Tags": [
            {"Key": "Environment", "Value": settings.environment},
            {"Key": "Application", "Value": "loyalty"},
        ],
    }
    stack_props.update(define_template_source(template_file))
    if assert_can_create_stack(client, settings.name):
        res = client.create_stack(**stack_props)
        LOG.info(f"Stack {settings.name} successfully deployed.")
        LOG.info(res["StackId"])
        return res["StackId"]
    elif assert_can_update_stack(client, settings.name):
        LOG.warning(f"Stack {settings.name} already exists. Updating.")
        try:
            res = client.update_stack(**stack_props)
        except ClientError as error:
            if error.response["Error"]["Message"].startswith("No updates are to be"):
                LOG.info(f"Stack {settings.name} - No changes to apply")
                return None
            LOG.error(error)
            raise
        LOG.info(f"Stack {settings.name} successfully updating.")
        LOG.info(res["StackId"])
        return res["StackId"]
    LOG.error(f"Stack {settings.name} can be neither created nor updated.")
    return None
