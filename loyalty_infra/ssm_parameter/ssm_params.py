#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille <john@compose-x.io>

SSM_READ_ACTIONS = [
    "ssm:DescribeParameters",
    "ssm:GetParameters",
    "ssm:GetParameter",
    "ssm:GetParameterHistory",
]

SSM_POLICY_NAME = "ParametersAccess"
SSM_READ_SID = "SsmParametersRead"

SSM_PARAM_ARN_PREFIX = (
    "arn:${AWS::Partition}:ssm:${AWS::Region}:${AWS::AccountId}:parameter/"
)
