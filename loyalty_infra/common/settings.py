# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for the LoyaltySettings class
"""

from __future__ import annotations

import os
from copy import deepcopy
from json import loads
from os import path
from tempfile import gettempdir

import boto3
import jsonschema
import yaml
from cfn_flip.yaml_dumper import LongCleanDumper
from compose_x_common.compose_x_common import keyisset, set_else_none
from importlib_resources import files as pkg_files

try:
    from yaml import CSafeLoader as Loader
except ImportError:
    from yaml import SafeLoader as Loader

from loyalty_infra import __version__
from loyalty_infra.common.envsubst import get_env_var, interpolate
from loyalty_infra.common.logging import LOG
from loyalty_infra.ecs.ecs_params import (
    DEFAULT_RUNTIME,
    DEFAULT_TELEMETRY,
    FARGATE_MEMORY_PER_CPU,
)
from loyalty_infra.exceptions import InvalidConfigError
from loyalty_infra.vpc.vpc_params import (
    DEFAULT_MAX_AZS,
    DEFAULT_NAT_GATEWAYS,
    DEFAULT_VPC_CIDR,
)

DEFAULT_SETTINGS = {
    "environment": "dev",
    "images": {
        "web": "plantpowerjames/modern-apps-loyalty-web",
        "backend": "plantpowerjames/modern-apps-loyalty-backend",
        "simulator": "plantpowerjames/modern-apps-loyalty-simulator",
    },
    "parameters": {
        "DATABASE_URL": "DatabaseUrl",
        "BROKER": "KafkaBroker",
        "KAFKA_USERNAME": "KafkaUsername",
        "KAFKA_PASSWORD": "KafkaPassword",
    },
    "telemetry": DEFAULT_TELEMETRY,
    "runtime": DEFAULT_RUNTIME,
    "network": {
        "cidr": DEFAULT_VPC_CIDR,
        "max_azs": DEFAULT_MAX_AZS,
        "nat_gateways": DEFAULT_NAT_GATEWAYS,
    },
    "simulator": {"http_req_per_second": 1, "events_per_second": 1},
}


def merge_settings(defaults: dict, overrides: dict) -> dict:
    """
    Recursively merges the overrides into a copy of the defaults

    :param dict defaults:
    :param dict overrides:
    :rtype: dict
    """
    merged = deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


class LoyaltySettings:
    """
    Class to handle the settings to use for loyalty-infra.
    Merges, in order of precedence, the CLI arguments, the environment variables and the settings file.

    :ivar dict config: the effective settings
    :ivar boto3.session.Session session: session to use for API calls, only used to deploy.
    """

    name_arg = "Name"
    command_arg = "command"
    region_arg = "RegionName"
    bucket_arg = "BucketName"
    config_file_arg = "ConfigFile"
    env_name_arg = "EnvironmentName"
    output_dir_arg = "OutputDirectory"
    format_arg = "TemplateFormat"

    default_name = "loyalty-fargate"
    default_format = "json"
    allowed_formats = ["json", "yaml"]
    default_output_dir = path.join(gettempdir(), "loyalty-infra")

    image_tag_env = "IMAGE_TAG"
    simulator_image_tag_env = "SIMULATOR_IMAGE_TAG"
    deploy_simulator_env = "DEPLOY_SIMULATOR"
    default_image_tag = "latest"

    deploy_arg = "up"
    render_arg = "render"
    config_render_arg = "config"
    version_arg = "version"

    active_commands = [
        {
            "name": deploy_arg,
            "help": "Generates the CFN template, then creates or updates the CFN stack",
        },
        {
            "name": render_arg,
            "help": "Generates the CFN template locally",
        },
    ]
    validation_commands = [
        {
            "name": config_render_arg,
            "help": "Prints the effective settings, merged with the defaults",
        }
    ]
    neutral_commands = [
        {"name": version_arg, "help": "loyalty-infra version"},
    ]
    all_commands = active_commands + validation_commands + neutral_commands

    def __init__(self, content: dict = None, session=None, environ=None, **kwargs):
        """
        :param dict content: settings content, instead of a settings file
        :param boto3.session.Session session: override the session for API calls
        :param dict environ: alternative to os.environ
        """
        self.environ = environ if environ is not None else os.environ
        self.name = set_else_none(self.name_arg, kwargs, alt_value=self.default_name)
        self.command = set_else_none(
            self.command_arg, kwargs, alt_value=self.render_arg
        )
        self.session = (
            session
            if session
            else boto3.session.Session(
                region_name=set_else_none(self.region_arg, kwargs)
            )
        )
        self.aws_region = set_else_none(
            self.region_arg, kwargs, alt_value=self.session.region_name
        )
        self.bucket_name = set_else_none(self.bucket_arg, kwargs)
        self.deploy = self.command == self.deploy_arg
        self.format = self.default_format
        self.output_dir = self.default_output_dir
        self.set_output_settings(kwargs)
        self.config = {}
        self.set_content(kwargs, content)
        if keyisset(self.env_name_arg, kwargs):
            self.config["environment"] = kwargs[self.env_name_arg]

        self.image_tag = get_env_var(
            self.image_tag_env, self.default_image_tag, self.environ
        )
        self.simulator_image_tag = get_env_var(
            self.simulator_image_tag_env, self.default_image_tag, self.environ
        )
        self.deploy_simulator = self.environ.get(self.deploy_simulator_env) == "Y"

    def __repr__(self):
        return f"{self.name} - {self.environment} - {self.command}"

    @property
    def environment(self) -> str:
        return self.config["environment"]

    @property
    def parameters(self) -> dict:
        return self.config["parameters"]

    @property
    def telemetry(self) -> dict:
        return self.config["telemetry"]

    @property
    def runtime(self) -> dict:
        return self.config["runtime"]

    @property
    def network(self) -> dict:
        return self.config["network"]

    @property
    def simulator(self) -> dict:
        return self.config["simulator"]

    @property
    def web_image(self) -> str:
        return f"{self.config['images']['web']}:{self.image_tag}"

    @property
    def backend_image(self) -> str:
        return f"{self.config['images']['backend']}:{self.image_tag}"

    @property
    def simulator_image(self) -> str:
        return f"{self.config['images']['simulator']}:{self.simulator_image_tag}"

    @property
    def template_file_name(self) -> str:
        return f"{self.name}.{self.format}"

    def set_output_settings(self, kwargs):
        """
        Method to set the output settings based on kwargs
        """
        if keyisset(self.format_arg, kwargs):
            if kwargs[self.format_arg] not in self.allowed_formats:
                raise ValueError(
                    f"Format {kwargs[self.format_arg]} is not valid. Must be one of",
                    self.allowed_formats,
                )
            self.format = kwargs[self.format_arg]
        self.output_dir = set_else_none(
            self.output_dir_arg, kwargs, alt_value=self.default_output_dir
        )

    def set_content(self, kwargs, content=None):
        """
        Method to initialize the settings content from the settings file or given content.
        The content is interpolated with the environment variables, then validated against
        the input schema before being merged with the defaults.

        :param dict kwargs:
        :param dict content:
        """
        if content is None and keyisset(self.config_file_arg, kwargs):
            LOG.info(f"Loading settings from {kwargs[self.config_file_arg]}")
            with open(path.abspath(kwargs[self.config_file_arg])) as config_fd:
                content = yaml.load(config_fd.read(), Loader=Loader)
        if not content:
            content = {}
        content = interpolate(content, self.environ)
        source = pkg_files("loyalty_infra").joinpath("specs/loyalty-config.spec.json")
        LOG.debug(f"Validating against input schema {source}")
        try:
            jsonschema.validate(content, loads(source.read_text()))
        except jsonschema.ValidationError as error:
            raise InvalidConfigError(
                f"Settings are invalid: {error.message}", list(error.absolute_path)
            ) from error
        self.config = merge_settings(DEFAULT_SETTINGS, content)
        self.validate_runtime()

    def validate_runtime(self) -> None:
        """
        Checks the task CPU and memory are a valid Fargate size

        :raises: InvalidConfigError
        """
        cpu = self.runtime["cpu"]
        memory = self.runtime["memory"]
        if memory not in FARGATE_MEMORY_PER_CPU.get(cpu, []):
            raise InvalidConfigError(
                f"Fargate does not support memory {memory} with cpu {cpu}. Valid values",
                FARGATE_MEMORY_PER_CPU.get(cpu),
            )

    def render_config(self) -> str:
        """
        Returns the effective settings in YAML
        """
        effective = deepcopy(self.config)
        effective.update(
            {
                "stack_name": self.name,
                "region": self.aws_region,
                "image_tag": self.image_tag,
                "simulator_image_tag": self.simulator_image_tag,
                "deploy_simulator": self.deploy_simulator,
                "version": __version__,
            }
        )
        return yaml.dump(effective, Dumper=LongCleanDumper)
