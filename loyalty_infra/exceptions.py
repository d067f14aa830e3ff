#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Custom exceptions for loyalty-infra
"""


class LoyaltyInfraException(Exception):
    """
    Top class for loyalty-infra Exceptions
    """

    def __init__(self, msg, *args):
        super().__init__(msg, *args)


class MissingInputError(LoyaltyInfraException):
    """
    Exception when an environment variable is referenced, is not set and has no default value
    """

    def __init__(self, variable, *args):
        self.variable = variable
        super().__init__(
            f"Environment variable {variable} is not set and has no default value",
            *args,
        )


class InvalidCompositionError(LoyaltyInfraException):
    """
    Exception when constructs are assembled with inputs that cannot work together,
    i.e. a WebService without a port mapping for the load balancer to target
    """


class InvalidConfigError(LoyaltyInfraException):
    """
    Exception when the settings file content does not match the input schema
    """
