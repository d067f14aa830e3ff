#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

import yaml
from pytest import raises

from loyalty_infra.common.settings import DEFAULT_SETTINGS, LoyaltySettings, merge_settings
from loyalty_infra.exceptions import InvalidConfigError, MissingInputError


def test_default_settings(make_settings):
    settings = make_settings()
    assert settings.name == "loyalty-fargate"
    assert settings.command == "render"
    assert settings.environment == "dev"
    assert settings.format == "json"
    assert settings.image_tag == "latest"
    assert settings.simulator_image_tag == "latest"
    assert not settings.deploy_simulator
    assert settings.web_image == "plantpowerjames/modern-apps-loyalty-web:latest"
    assert settings.backend_image == "plantpowerjames/modern-apps-loyalty-backend:latest"
    assert settings.parameters == DEFAULT_SETTINGS["parameters"]
    assert settings.telemetry["site"] == "datadoghq.eu"
    assert settings.runtime["cpu_architecture"] == "ARM64"
    assert settings.template_file_name == "loyalty-fargate.json"


def test_images_tags_from_environment(make_settings):
    settings = make_settings(
        environ={
            "IMAGE_TAG": "1.0.1",
            "SIMULATOR_IMAGE_TAG": "abc123",
            "DEPLOY_SIMULATOR": "Y",
        }
    )
    assert settings.web_image.endswith(":1.0.1")
    assert settings.backend_image.endswith(":1.0.1")
    assert settings.simulator_image.endswith(":abc123")
    assert settings.deploy_simulator


def test_deploy_simulator_must_be_y(make_settings):
    for value in ["y", "yes", "true", "1", ""]:
        assert not make_settings(environ={"DEPLOY_SIMULATOR": value}).deploy_simulator


def test_settings_content_override(make_settings):
    settings = make_settings(
        content={
            "environment": "${ENV_NAME:-staging}",
            "parameters": {"DATABASE_URL": "/loyalty/${ENV_NAME:-staging}/DatabaseUrl"},
            "network": {"max_azs": 2},
        }
    )
    assert settings.environment == "staging"
    assert settings.parameters["DATABASE_URL"] == "/loyalty/staging/DatabaseUrl"
    assert settings.parameters["BROKER"] == "KafkaBroker"
    assert settings.network == {"cidr": "10.0.0.0/16", "max_azs": 2, "nat_gateways": 1}


def test_settings_env_name_wins(make_settings):
    settings = make_settings(
        content={"environment": "staging"}, **{LoyaltySettings.env_name_arg: "prod"}
    )
    assert settings.environment == "prod"


def test_settings_from_file(make_settings, tmp_path):
    config_file = tmp_path / "loyalty.yaml"
    config_file.write_text(
        yaml.dump({"environment": "qa", "simulator": {"events_per_second": 5}})
    )
    settings = make_settings(**{LoyaltySettings.config_file_arg: str(config_file)})
    assert settings.environment == "qa"
    assert settings.simulator == {"http_req_per_second": 1, "events_per_second": 5}


def test_invalid_settings(make_settings):
    with raises(InvalidConfigError):
        make_settings(content={"unknown": True})
    with raises(InvalidConfigError):
        make_settings(content={"runtime": {"cpu_architecture": "MIPS"}})
    with raises(InvalidConfigError):
        make_settings(content={"network": {"max_azs": 4}})


def test_settings_missing_variable(make_settings):
    with raises(MissingInputError):
        make_settings(content={"environment": "${ENV_NAME}"})


def test_invalid_format(make_settings):
    with raises(ValueError):
        make_settings(**{LoyaltySettings.format_arg: "toml"})


def test_merge_settings_does_not_alter_defaults():
    merged = merge_settings(DEFAULT_SETTINGS, {"telemetry": {"site": "datadoghq.com"}})
    assert merged["telemetry"]["site"] == "datadoghq.com"
    assert merged["telemetry"]["log_source"] == "aspnet"
    assert DEFAULT_SETTINGS["telemetry"]["site"] == "datadoghq.eu"


def test_render_config(make_settings):
    settings = make_settings(environ={"IMAGE_TAG": "2.0.0"})
    rendered = yaml.safe_load(settings.render_config())
    assert rendered["environment"] == "dev"
    assert rendered["image_tag"] == "2.0.0"
    assert rendered["stack_name"] == "loyalty-fargate"
    assert rendered["deploy_simulator"] is False


def test_fargate_task_sizes(make_settings):
    settings = make_settings(content={"runtime": {"cpu": 1024, "memory": 4096}})
    assert settings.runtime["cpu"] == 1024
    assert settings.runtime["memory"] == 4096
    with raises(InvalidConfigError):
        make_settings(content={"runtime": {"cpu": 256, "memory": 4096}})
    with raises(InvalidConfigError):
        make_settings(content={"runtime": {"cpu": 512, "memory": 512}})
    with raises(InvalidConfigError):
        make_settings(content={"runtime": {"cpu": 4096, "memory": 1536}})
