#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

LB_T = "ApplicationIngressWithListener"
LB_SG_T = "ApplicationIngressWithListenerSecurityGroup"
LISTENER_T = "Listener"
LISTENER_RULE_T = "ListenerECSRule"
TARGET_GROUP_T = "TargetGroup"
SERVICE_INGRESS_T = "ServiceIngressFromLoadBalancer"

LISTENER_PORT = 80
LISTENER_PROTOCOL = "HTTP"

TARGET_PORT = 8080
TARGET_PROTOCOL = "HTTP"
TARGET_TYPE = "ip"
HEALTH_CHECK_PATH = "/"
HEALTHY_HTTP_CODES = "200-404"
HEALTH_CHECK_GRACE_PERIOD = 60
MIN_LB_SUBNETS = 2

DEFAULT_RULE_PRIORITY = 1
DEFAULT_PATH_PATTERNS = ["*"]
