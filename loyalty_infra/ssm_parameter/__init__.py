#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Package to reference existing parameters, in AWS SSM Parameter Store, that services read at launch.
The parameters values are never read nor managed here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loyalty_infra.ecs.task_iam import EcsRole

from abc import ABC, abstractmethod

from troposphere import Sub

from loyalty_infra.common import to_logical_name
from loyalty_infra.common.logging import LOG
from loyalty_infra.ssm_parameter.ssm_params import (
    SSM_PARAM_ARN_PREFIX,
    SSM_POLICY_NAME,
    SSM_READ_ACTIONS,
    SSM_READ_SID,
)


class ParameterRef(ABC):
    """
    Opaque handle to a named configuration entry. Consumers can only ask for the value the
    container runtime resolves at launch, and grant a principal the right to read it.
    """

    def __init__(self, name: str):
        if not isinstance(name, str) or not name:
            raise ValueError("Parameter name must be a non empty string. Got", name)
        self.name = name
        self.logical_name = to_logical_name(name)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.name})"

    @property
    @abstractmethod
    def value_from(self):
        """The value ECS resolves the secret from when the task starts"""

    @abstractmethod
    def grant_read(self, role: EcsRole) -> bool:
        """Grants the role the permissions to read the parameter value"""


class SsmParameterRef(ParameterRef):
    """
    Reference to an existing AWS SSM Parameter, identified by its name.
    """

    def __init__(self, name: str):
        super().__init__(name)
        self.arn = Sub(f"{SSM_PARAM_ARN_PREFIX}{name.lstrip('/')}")

    @property
    def value_from(self):
        return self.arn

    def grant_read(self, role: EcsRole) -> bool:
        """
        Adds the SSM read permissions for this parameter to the role. Granting twice is a no-op.

        :param EcsRole role:
        :return: whether the role policy was changed
        """
        changed = role.grant(
            SSM_POLICY_NAME, SSM_READ_SID, SSM_READ_ACTIONS, self.arn
        )
        if changed:
            LOG.debug(f"{role.title} - Granted read to SSM Parameter {self.name}")
        return changed
