#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

from pytest import raises

from loyalty_infra.ecs_cluster import EcsCluster
from loyalty_infra.exceptions import InvalidCompositionError


def test_cluster(template, cluster):
    content = template.to_dict()
    cluster_props = content["Resources"]["EcsCluster"]["Properties"]
    assert cluster_props["ClusterName"] == {"Ref": "AWS::StackName"}
    assert cluster_props["CapacityProviders"] == ["FARGATE", "FARGATE_SPOT"]
    assert content["Outputs"]["ClusterName"]["Value"] == {"Ref": "EcsCluster"}
    assert cluster.cluster_identifier.to_dict() == {"Ref": "EcsCluster"}
    assert cluster.arn.to_dict() == {"Fn::GetAtt": ["EcsCluster", "Arn"]}


def test_cluster_defined_twice(template, cluster):
    with raises(InvalidCompositionError):
        EcsCluster(template)
