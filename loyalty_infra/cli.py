# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Console script for loyalty_infra.
"""

import argparse
import logging
import sys

from botocore.exceptions import BotoCoreError, ClientError

from loyalty_infra import __version__
from loyalty_infra.common.aws import deploy
from loyalty_infra.common.files import FileArtifact, summarize_template
from loyalty_infra.common.logging import LOG
from loyalty_infra.common.settings import LoyaltySettings
from loyalty_infra.exceptions import LoyaltyInfraException
from loyalty_infra.loyalty_stack import generate_full_template


class ArgparseHelper(argparse._HelpAction):
    """
    Used to help print top level '--help' arguments from argparse
    when used with subparsers
    """

    def __call__(self, parser, namespace, values, option_string=None):
        parser.print_help()
        print()
        subparsers_actions = [
            action
            for action in parser._actions
            if isinstance(action, argparse._SubParsersAction)
        ]
        for subparsers_action in subparsers_actions:
            for choice, subparser in list(subparsers_action.choices.items()):
                if choice in [
                    cmd["name"] for cmd in LoyaltySettings.active_commands
                ] or choice in [
                    cmd["name"] for cmd in LoyaltySettings.validation_commands
                ]:
                    print(f"Command '{choice}'")
                    print(subparser.format_usage())
        parser.exit()


def main_parser():
    """
    Console script for loyalty_infra.
    """
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument(
        "-h",
        "--help",
        action=ArgparseHelper,
        help="show this help message and exit",
    )

    cmd_parsers = parser.add_subparsers(
        dest=LoyaltySettings.command_arg, help="Command to execute."
    )
    base_command_parser = argparse.ArgumentParser(add_help=False)
    files_parser = argparse.ArgumentParser(add_help=False)
    files_parser.add_argument(
        "-f",
        "--config-file",
        dest=LoyaltySettings.config_file_arg,
        required=False,
        help="Path to the settings file, overriding the defaults",
    )
    files_parser.add_argument(
        "--env-name",
        dest=LoyaltySettings.env_name_arg,
        required=False,
        help="Name of the environment, i.e. dev, staging",
    )
    files_parser.add_argument(
        "--loglevel", type=str, help="Log level. Defaults to INFO", required=False
    )
    base_command_parser.add_argument(
        "-n",
        "--name",
        help="Name of your stack",
        required=False,
        type=str,
        dest=LoyaltySettings.name_arg,
        default=LoyaltySettings.default_name,
    )
    base_command_parser.add_argument(
        "-d",
        "--output-dir",
        required=False,
        help="Output directory to write the template to.",
        type=str,
        dest=LoyaltySettings.output_dir_arg,
        default=LoyaltySettings.default_output_dir,
    )
    base_command_parser.add_argument(
        "--format",
        help="Defines the format you want to use.",
        type=str,
        dest=LoyaltySettings.format_arg,
        choices=LoyaltySettings.allowed_formats,
        default=LoyaltySettings.default_format,
    )
    base_command_parser.add_argument(
        "--region",
        required=False,
        dest=LoyaltySettings.region_arg,
        help="Specify the region you want to deploy to. "
        "Defaults to the region from config or environment vars",
    )
    base_command_parser.add_argument(
        "-b",
        "--bucket-name",
        type=str,
        required=False,
        help="Bucket name to upload the template to, when too large to be sent inline",
        dest=LoyaltySettings.bucket_arg,
    )
    for command in LoyaltySettings.active_commands:
        cmd_parsers.add_parser(
            name=command["name"],
            help=command["help"],
            parents=[base_command_parser, files_parser],
        )
    for command in LoyaltySettings.validation_commands:
        cmd_parsers.add_parser(
            name=command["name"], help=command["help"], parents=[files_parser]
        )

    for command in LoyaltySettings.neutral_commands:
        cmd_parsers.add_parser(name=command["name"], help=command["help"])
    return parser


def set_log_level(loglevel: str) -> None:
    valid_levels = [
        "FATAL",
        "CRITICAL",
        "ERROR",
        "WARNING",
        "WARN",
        "INFO",
        "DEBUG",
    ]
    if loglevel.upper() in valid_levels:
        LOG.setLevel(logging.getLevelName(loglevel.upper()))
        LOG.handlers[0].setLevel(logging.getLevelName(loglevel.upper()))
    else:
        print(f"Log level value {loglevel} is invalid. Must me one of {valid_levels}")


def main(argv: list = None):
    """
    Main entry point for CLI
    :return: status code
    """
    parser = main_parser()
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        parser.print_help()
        return 0
    args = parser.parse_args(argv)
    if getattr(args, "loglevel", None):
        set_log_level(args.loglevel)
    LOG.debug(args)
    if args.command == LoyaltySettings.version_arg:
        print("loyalty-infra", __version__)
        return 0
    try:
        settings = LoyaltySettings(**vars(args))
        LOG.debug(settings)
        if args.command == LoyaltySettings.config_render_arg:
            print(settings.render_config())
            return 0
        template = generate_full_template(settings)
        template_file = FileArtifact(template, settings)
        template_file.write()
        LOG.info(f"Resources summary\n{summarize_template(template)}")
        if settings.deploy:
            deploy(settings, template_file)
    except (LoyaltyInfraException, ValueError, ClientError, BotoCoreError) as error:
        LOG.error(error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())  # pragma: no cover
