#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille <john@compose-x.io>

"""
Functions to manage a template and whether it should be stored in S3
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loyalty_infra.common.settings import LoyaltySettings

from os import makedirs, path

from tabulate import tabulate
from troposphere import Template

from loyalty_infra.common.logging import LOG

JSON_MIME = "application/json"
YAML_MIME = "application/x-yaml"
FILE_PREFIX = "loyalty-infra"


def upload_file(
    body: str,
    bucket_name: str,
    file_name: str,
    settings: LoyaltySettings,
    prefix: str = None,
    mime: str = None,
) -> str:
    """Upload template_body to a file in s3 with given prefix and bucket_name

    :param str body: Template body, would come from troposphere template to_json() or to_yaml()
    :param str bucket_name: name of the bucket to upload the file to
    :param str file_name: Name of the file
    :param LoyaltySettings settings:
    :param str prefix: override default prefix for the file in S3
    :param str mime: the content type of the file
    :returns: url_path, the https://s3.amazonaws.com/ URL to the file
    :rtype: str
    """
    if mime is None:
        mime = JSON_MIME
    if prefix is None:
        prefix = f"{FILE_PREFIX}/{settings.name}"

    key = f"{prefix}/{file_name}"
    client = settings.session.client("s3")
    client.put_object(
        Body=body,
        Key=key,
        Bucket=bucket_name,
        ContentEncoding="utf-8",
        ContentType=mime,
        ServerSideEncryption="AES256",
    )
    return f"https://s3.amazonaws.com/{bucket_name}/{key}"


def summarize_template(template: Template) -> str:
    """
    Renders a table of the resources in the template, sorted by type and logical ID

    :param troposphere.Template template:
    :rtype: str
    """
    rows = sorted(
        (resource.resource_type, title) for title, resource in template.resources.items()
    )
    return tabulate(rows, headers=["Type", "LogicalId"])


class FileArtifact:
    """
    Class to handle the template file. Renders the body in the chosen format,
    writes it to the local filesystem and uploads it to S3 when required.

    :cvar str url: The URL in S3 where the file will be uploaded to or available from.
    :cvar str body: The content of the FileArtifact
    :cvar str file_path: local path of the file once written
    """

    def __init__(self, template: Template, settings: LoyaltySettings):
        if not isinstance(template, Template):
            raise TypeError("template is", type(template), "expected", Template)
        self.template = template
        self.settings = settings
        self.file_name = settings.template_file_name
        self.mime = YAML_MIME if settings.format == "yaml" else JSON_MIME
        self.url = None
        self.file_path = None
        self.body = self.define_body()

    def define_body(self) -> str:
        if self.settings.format == "yaml":
            return self.template.to_yaml()
        return self.template.to_json()

    def write(self) -> str:
        """
        Writes the body to the output directory

        :return: the path to the file
        """
        makedirs(self.settings.output_dir, exist_ok=True)
        self.file_path = path.join(self.settings.output_dir, self.file_name)
        with open(self.file_path, "w") as template_fd:
            template_fd.write(self.body)
        LOG.info(f"Template for {self.settings.name} written to {self.file_path}")
        return self.file_path

    def upload(self) -> str:
        """
        Uploads the file to S3

        :return: the URL of the file
        """
        if not self.settings.bucket_name:
            raise ValueError(
                f"{self.settings.name} - No bucket name defined to upload {self.file_name} to"
            )
        self.url = upload_file(
            self.body,
            self.settings.bucket_name,
            self.file_name,
            self.settings,
            mime=self.mime,
        )
        LOG.info(f"Template for {self.settings.name} uploaded to {self.url}")
        return self.url
