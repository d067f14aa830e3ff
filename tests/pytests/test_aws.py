#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

from os import path

import placebo
import pytest
from botocore.exceptions import ClientError

from loyalty_infra.common import aws
from loyalty_infra.common.aws import deploy, define_template_source
from loyalty_infra.common.files import FileArtifact
from loyalty_infra.common.troposphere_tools import build_template

HERE = path.abspath(path.dirname(__file__))
STACK_ID = (
    "arn:aws:cloudformation:eu-west-1:123456789012:stack/loyalty-fargate/"
    "b5ea2b40-4fa2-11ed-8d8a-0a8a3c2a5c6b"
)


def playback(session, data_dir: str):
    pill = placebo.attach(session=session, data_path=f"{HERE}/placebo/{data_dir}")
    pill.playback()
    return pill


@pytest.fixture
def template_file(make_settings):
    settings = make_settings(command="up")
    return FileArtifact(build_template("Test deploy"), settings)


def test_deploy_creates_missing_stack(session, template_file):
    playback(session, "deploy_create")
    assert deploy(template_file.settings, template_file) == STACK_ID


def test_deploy_updates_existing_stack(session, template_file):
    playback(session, "deploy_update")
    assert deploy(template_file.settings, template_file) == STACK_ID


def test_deploy_without_changes(session, template_file):
    playback(session, "deploy_no_changes")
    assert deploy(template_file.settings, template_file) is None


def test_deploy_stack_in_progress(session, template_file):
    playback(session, "deploy_in_progress")
    assert deploy(template_file.settings, template_file) is None


def test_inline_template_body(template_file):
    source = define_template_source(template_file)
    assert source == {"TemplateBody": template_file.body}


def test_large_template_without_bucket(template_file, monkeypatch):
    monkeypatch.setattr(aws, "TEMPLATE_BODY_MAX_SIZE", 10)
    with pytest.raises(ValueError):
        define_template_source(template_file)


def test_large_template_uploaded(session, make_settings, monkeypatch):
    monkeypatch.setattr(aws, "TEMPLATE_BODY_MAX_SIZE", 10)
    playback(session, "upload_template")
    settings = make_settings(BucketName="cfn-templates")
    template_file = FileArtifact(build_template("Test deploy"), settings)
    assert define_template_source(template_file) == {
        "TemplateURL": "https://s3.amazonaws.com/cfn-templates/"
        "loyalty-infra/loyalty-fargate/loyalty-fargate.json"
    }


def test_client_errors_are_raised(session, template_file, tmp_path):
    errors_dir = tmp_path / "access_denied"
    errors_dir.mkdir()
    (errors_dir / "cloudformation.DescribeStacks_1.json").write_text(
        '{"status_code": 403, "data": {"Error": {"Code": "AccessDenied",'
        ' "Message": "User is not authorized to perform cloudformation:DescribeStacks"}}}'
    )
    pill = placebo.attach(session=session, data_path=str(errors_dir))
    pill.playback()
    with pytest.raises(ClientError):
        deploy(template_file.settings, template_file)
