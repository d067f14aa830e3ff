# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Parameters bound to loyalty_infra.ecs
All the titles, maked `_T`, are suffixes appended to the service logical name, which gives
consistent logical IDs from one render to the next.

You can change the names *values* so you like so long as you keep it [a-zA-Z0-9]
"""

EXEC_ROLE_T = "ExecutionRole"
TASK_ROLE_T = "TaskRole"
TASK_T = "Definition"
SERVICE_T = "Service"
SG_T = "ServiceSecurityGroup"

FARGATE_LAUNCH_TYPE = "FARGATE"
NETWORK_MODE = "awsvpc"
PORT_PROTOCOLS = ["tcp", "udp"]
DESIRED_COUNT = 1
MAX_PERCENT = 200
MIN_HEALTHY_PERCENT = 50

ECS_TASK_EXECUTION_POLICY = "service-role/AmazonECSTaskExecutionRolePolicy"

OTLP_GRPC_PORT = 4317
OTLP_ENDPOINT = f"http://127.0.0.1:{OTLP_GRPC_PORT}"

DATADOG_AGENT_NAME = "datadog-agent"
DATADOG_AGENT_PORTS = [OTLP_GRPC_PORT, 5000, 5002, 8125, 8126]
LOG_ROUTER_NAME = "log-router"
LOG_ROUTER_MEMORY_RESERVATION = 50

DD_ENV_LABEL = "com.datadoghq.tags.env"
DD_SERVICE_LABEL = "com.datadoghq.tags.service"
DD_VERSION_LABEL = "com.datadoghq.tags.version"

DEFAULT_TELEMETRY = {
    "site": "datadoghq.eu",
    "logs_host": "http-intake.logs.datadoghq.eu",
    "log_source": "aspnet",
    "api_key_parameter": "DDApiKey",
    "agent_image": "public.ecr.aws/datadog/agent:latest",
    "log_router_image": "amazon/aws-for-fluent-bit:stable",
}

DEFAULT_RUNTIME = {
    "cpu_architecture": "ARM64",
    "os_family": "LINUX",
    "memory": 512,
    "cpu": 256,
}

# Fargate task sizes, CPU units to the allowed memory values in MiB
FARGATE_MEMORY_PER_CPU = {
    256: [512, 1024, 2048],
    512: list(range(1024, 4096 + 1, 1024)),
    1024: list(range(2048, 8192 + 1, 1024)),
    2048: list(range(4096, 16384 + 1, 1024)),
    4096: list(range(8192, 30720 + 1, 1024)),
}
