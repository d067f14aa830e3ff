#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

from pytest import raises
from template_helpers import (
    container,
    env_map,
    granted_resources,
    resources_of_type,
    secrets_map,
    ssm_arn,
)

from loyalty_infra.ecs.instrumented_service import InstrumentedService
from loyalty_infra.exceptions import InvalidCompositionError


def test_minimal_backend(template, backend_definition):
    service = InstrumentedService(template, "LoyaltyBackend", backend_definition)
    content = template.to_dict()
    resources = content["Resources"]
    task_def = resources["loyaltybackendfargateDefinition"]
    props = task_def["Properties"]
    assert props["Memory"] == "512"
    assert props["Cpu"] == "256"
    assert props["NetworkMode"] == "awsvpc"
    assert props["RequiresCompatibilities"] == ["FARGATE"]
    assert props["RuntimePlatform"] == {
        "CpuArchitecture": "ARM64",
        "OperatingSystemFamily": "LINUX",
    }
    assert props["ExecutionRoleArn"] == {
        "Fn::GetAtt": ["loyaltybackendfargateExecutionRole", "Arn"]
    }
    assert props["TaskRoleArn"] == {
        "Fn::GetAtt": ["loyaltybackendfargateTaskRole", "Arn"]
    }
    assert [container_def["Name"] for container_def in props["ContainerDefinitions"]] == [
        "loyalty-backend-fargate",
        "datadog-agent",
        "log-router",
    ]
    assert all(
        container_def["Essential"] for container_def in props["ContainerDefinitions"]
    )

    app = container(task_def, "loyalty-backend-fargate")
    env = env_map(app)
    assert env["SERVICE_NAME"] == "loyalty-backend-fargate"
    assert env["DD_ENV"] == "dev"
    assert env["GROUP_ID"] == "loyalty-fargate"
    assert env["OTLP_ENDPOINT"] == "http://127.0.0.1:4317"
    assert env["DD_VERSION"] == "latest"
    assert env["RUST_LOG"] == "info"
    assert "PortMappings" not in app
    assert secrets_map(app) == {
        "BROKER": ssm_arn("KafkaBroker"),
        "DATABASE_URL": ssm_arn("DatabaseUrl"),
        "KAFKA_PASSWORD": ssm_arn("KafkaPassword"),
        "KAFKA_USERNAME": ssm_arn("KafkaUsername"),
    }
    assert app["DockerLabels"] == {
        "com.datadoghq.tags.env": "dev",
        "com.datadoghq.tags.service": "loyalty-backend-fargate",
        "com.datadoghq.tags.version": "latest",
    }

    ecs_service = resources["loyaltybackendfargateService"]["Properties"]
    assert ecs_service["DesiredCount"] == 1
    assert ecs_service["LaunchType"] == "FARGATE"
    assert "LoadBalancers" not in ecs_service
    assert "HealthCheckGracePeriodSeconds" not in ecs_service
    network = ecs_service["NetworkConfiguration"]["AwsvpcConfiguration"]
    assert network["AssignPublicIp"] == "ENABLED"
    assert network["Subnets"] == [
        {"Ref": "PublicSubnetA"},
        {"Ref": "PublicSubnetB"},
        {"Ref": "PublicSubnetC"},
    ]
    assert not resources_of_type(content, "AWS::ElasticLoadBalancingV2::TargetGroup")
    assert service.task_role.policies == []


def test_app_logging_to_datadog(template, backend_definition):
    InstrumentedService(template, "LoyaltyBackend", backend_definition)
    task_def = template.to_dict()["Resources"]["loyaltybackendfargateDefinition"]
    log_config = container(task_def, "loyalty-backend-fargate")["LogConfiguration"]
    assert log_config["LogDriver"] == "awsfirelens"
    assert log_config["Options"] == {
        "Name": "datadog",
        "Host": "http-intake.logs.datadoghq.eu",
        "TLS": "on",
        "dd_service": "loyalty-backend-fargate",
        "dd_source": "aspnet",
        "dd_message_key": "log",
        "dd_tags": "project:loyalty-backend-fargate",
        "provider": "ecs",
    }
    assert log_config["SecretOptions"] == [
        {"Name": "apikey", "ValueFrom": ssm_arn("DDApiKey")}
    ]


def test_telemetry_sidecars(template, backend_definition):
    InstrumentedService(template, "LoyaltyBackend", backend_definition)
    task_def = template.to_dict()["Resources"]["loyaltybackendfargateDefinition"]
    agent = container(task_def, "datadog-agent")
    assert agent["Image"] == "public.ecr.aws/datadog/agent:latest"
    assert [port["ContainerPort"] for port in agent["PortMappings"]] == [
        4317,
        5000,
        5002,
        8125,
        8126,
    ]
    assert env_map(agent) == {
        "DD_SITE": "datadoghq.eu",
        "ECS_FARGATE": "true",
        "DD_OTLP_CONFIG_RECEIVER_PROTOCOLS_GRPC_ENDPOINT": "0.0.0.0:4317",
        "DD_LOGS_ENABLED": "false",
        "DD_DOGSTATSD_NON_LOCAL_TRAFFIC": "true",
        "DD_APM_ENABLED": "true",
        "DD_APM_NON_LOCAL_TRAFFIC": "true",
        "DD_ENV": "dev",
        "DD_SERVICE": "loyalty-backend-fargate",
        "DD_VERSION": "latest",
    }
    assert secrets_map(agent) == {"DD_API_KEY": ssm_arn("DDApiKey")}

    router = container(task_def, "log-router")
    assert router["Image"] == "amazon/aws-for-fluent-bit:stable"
    assert router["Essential"] is True
    assert router["FirelensConfiguration"] == {
        "Type": "fluentbit",
        "Options": {"enable-ecs-log-metadata": "true"},
    }


def test_execution_role_grants(template, backend_definition):
    InstrumentedService(template, "LoyaltyBackend", backend_definition)
    resources = template.to_dict()["Resources"]
    exec_role = resources["loyaltybackendfargateExecutionRole"]
    granted = granted_resources(exec_role)
    assert ssm_arn("DDApiKey") in granted
    for name in ["DatabaseUrl", "KafkaBroker", "KafkaUsername", "KafkaPassword"]:
        assert ssm_arn(name) in granted
    assert len(granted) == 5
    assert "Policies" not in resources["loyaltybackendfargateTaskRole"]["Properties"]


def test_environment_override_precedence(template, backend_definition):
    backend_definition["EnvVariables"] = {"DD_ENV": "prod"}
    InstrumentedService(template, "LoyaltyBackend", backend_definition)
    task_def = template.to_dict()["Resources"]["loyaltybackendfargateDefinition"]
    env = env_map(container(task_def, "loyalty-backend-fargate"))
    assert env["DD_ENV"] == "prod"
    assert env["ENV"] == "dev"
    assert env["Environment"] == "dev"


def test_port_mappings(template, backend_definition):
    backend_definition["PortMappings"] = [{"ContainerPort": 9090, "Protocol": "tcp"}]
    InstrumentedService(template, "LoyaltyBackend", backend_definition)
    task_def = template.to_dict()["Resources"]["loyaltybackendfargateDefinition"]
    assert container(task_def, "loyalty-backend-fargate")["PortMappings"] == [
        {"ContainerPort": 9090, "HostPort": 9090, "Protocol": "tcp"}
    ]


def test_runtime_and_telemetry_overrides(template, backend_definition):
    backend_definition["Runtime"] = {"cpu_architecture": "X86_64", "memory": 1024}
    backend_definition["Telemetry"] = {"site": "datadoghq.com"}
    InstrumentedService(template, "LoyaltyBackend", backend_definition)
    task_def = template.to_dict()["Resources"]["loyaltybackendfargateDefinition"]
    assert task_def["Properties"]["Memory"] == "1024"
    assert task_def["Properties"]["Cpu"] == "256"
    assert task_def["Properties"]["RuntimePlatform"]["CpuArchitecture"] == "X86_64"
    assert env_map(container(task_def, "datadog-agent"))["DD_SITE"] == "datadoghq.com"


def test_invalid_definitions(template, backend_definition):
    for key in ["ServiceName", "Environment", "Version", "Image", "Cluster", "Vpc"]:
        definition = dict(backend_definition)
        del definition[key]
        with raises(InvalidCompositionError):
            InstrumentedService(template, "LoyaltyBackend", definition)
    definition = dict(backend_definition)
    definition["PortMappings"] = [{"ContainerPort": "8080"}]
    with raises(InvalidCompositionError):
        InstrumentedService(template, "LoyaltyBackend", definition)


def test_duplicate_service_names(template, backend_definition):
    InstrumentedService(template, "LoyaltyBackend", backend_definition)
    with raises(InvalidCompositionError):
        InstrumentedService(template, "LoyaltyBackendAgain", backend_definition)


def test_port_mappings_protocol(template, backend_definition):
    backend_definition["PortMappings"] = [
        {"ContainerPort": 9090, "Protocol": "TCP"},
        {"ContainerPort": 9091, "Protocol": "Udp"},
    ]
    InstrumentedService(template, "LoyaltyBackend", backend_definition)
    task_def = template.to_dict()["Resources"]["loyaltybackendfargateDefinition"]
    mappings = container(task_def, "loyalty-backend-fargate")["PortMappings"]
    assert [mapping["Protocol"] for mapping in mappings] == ["tcp", "udp"]


def test_port_mappings_invalid_protocol(template, backend_definition):
    backend_definition["PortMappings"] = [{"ContainerPort": 9090, "Protocol": "http"}]
    with raises(InvalidCompositionError):
        InstrumentedService(template, "LoyaltyBackend", backend_definition)
    assert not resources_of_type(template.to_dict(), "AWS::IAM::Role")
