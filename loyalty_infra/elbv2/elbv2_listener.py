#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

from troposphere import Ref
from troposphere.elasticloadbalancingv2 import (
    Action,
    Condition,
    FixedResponseConfig,
    Listener,
    ListenerRule,
    ListenerRuleAction,
    PathPatternConfig,
)

from loyalty_infra.common.logging import LOG
from loyalty_infra.common.troposphere_tools import add_resource
from loyalty_infra.elbv2.elbv2_params import (
    DEFAULT_PATH_PATTERNS,
    DEFAULT_RULE_PRIORITY,
    LISTENER_PORT,
    LISTENER_PROTOCOL,
    LISTENER_RULE_T,
    LISTENER_T,
)


def not_found_default() -> Action:
    """
    Predefined reply for requests that match no rule, returning HTTP 404
    """
    return Action(
        FixedResponseConfig=FixedResponseConfig(StatusCode="404"),
        Type="fixed-response",
    )


def define_path_pattern_conditions(path_patterns: list) -> list:
    """
    :param list[str] path_patterns:
    :return: the conditions for the rule
    """
    if not path_patterns:
        raise ValueError("At least one path pattern is required")
    return [
        Condition(
            Field="path-pattern",
            PathPatternConfig=PathPatternConfig(Values=path_patterns),
        )
    ]


def define_http_listener(
    template, logical_name: str, load_balancer, port: int = LISTENER_PORT
) -> Listener:
    """
    Defines the HTTP listener, which replies 404 when no rule matches.
    """
    return add_resource(
        template,
        Listener(
            f"{logical_name}{LISTENER_T}",
            LoadBalancerArn=Ref(load_balancer),
            Port=port,
            Protocol=LISTENER_PROTOCOL,
            DefaultActions=[not_found_default()],
        ),
    )


def add_forward_rule(
    template,
    logical_name: str,
    listener: Listener,
    target_group,
    priority: int = DEFAULT_RULE_PRIORITY,
    path_patterns: list = None,
) -> ListenerRule:
    """
    Adds a rule to the listener, forwarding the requests matching the path patterns
    to the target group.
    """
    if path_patterns is None:
        path_patterns = DEFAULT_PATH_PATTERNS
    rule = add_resource(
        template,
        ListenerRule(
            f"{logical_name}{LISTENER_RULE_T}",
            ListenerArn=Ref(listener),
            Priority=priority,
            Conditions=define_path_pattern_conditions(path_patterns),
            Actions=[
                ListenerRuleAction(Type="forward", TargetGroupArn=Ref(target_group))
            ],
        ),
    )
    LOG.info(
        f"{listener.title} - Forwarding {path_patterns} to {target_group.title}"
        f" with priority {priority}"
    )
    return rule
