#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Helpers around troposphere.Template
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from troposphere import AWSObject

from troposphere import Output, Template

from loyalty_infra import __version__
from loyalty_infra.common.logging import LOG
from loyalty_infra.exceptions import InvalidCompositionError


def build_template(description: str = None) -> Template:
    """
    Function to build a new CFN template, with the generator metadata set

    :param str description: the template description
    :rtype: troposphere.Template
    """
    template = Template(description or "Template generated by loyalty-infra")
    template.set_metadata({"GeneratedBy": "loyalty-infra", "Version": __version__})
    return template


def add_resource(template: Template, resource: AWSObject) -> AWSObject:
    """
    Adds a resource to the template. Two resources with the same title means two constructs were
    given the same name, which we refuse.

    :param troposphere.Template template:
    :param resource: the resource to add
    :return: the resource
    """
    if resource.title in template.resources:
        raise InvalidCompositionError(
            f"Resource {resource.title} is already defined in the template."
            " Check that services names are unique."
        )
    LOG.debug(f"Adding {resource.resource_type} {resource.title}")
    return template.add_resource(resource)


def add_outputs(template: Template, outputs: list) -> None:
    """
    Adds the outputs to the template, skipping the ones already present

    :param troposphere.Template template:
    :param list[troposphere.Output] outputs:
    """
    for output in outputs:
        if not isinstance(output, Output):
            raise TypeError("output must be", Output, "Got", type(output))
        if output.title in template.outputs:
            LOG.debug(f"Output {output.title} already set. Skipping")
            continue
        template.add_output(output)
