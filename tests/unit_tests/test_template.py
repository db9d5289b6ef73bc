"""Snapshot-style checks on the assembled CloudFormation template."""

import copy
from typing import Any

from conftest import IMAGE_TAG, resources_of_type

from fargate_topology.core.settings import TopologySettings
from fargate_topology.core.topology import (
    ImageReference,
    Topology,
    apply_overrides,
    assemble_topology,
    harden_task_definitions,
)

EXECUTION_POLICY_ID = "MyFargateServiceTaskDefExecutionRoleDefaultPolicy"
EXECUTION_ROLE_ID = "MyFargateServiceTaskDefExecutionRole"
TASK_POLICY_ID = "MyFargateServiceTaskDefTaskRoleDefaultPolicy"

EXPECTED_MOUNTS = {
    "cacheVolume": "/var/cache/nginx",
    "runVolume": "/var/run",
    "tmpVolume": "/tmp/nginx",  # nosec B108
    "confVolume": "/etc/nginx",
    "libAmazonVolume": "/var/lib/amazon",
    "logAmazonVolume": "/var/log/amazon",
}

EXEC_ACTIONS = [
    "ssmmessages:CreateDataChannel",
    "ssmmessages:OpenDataChannel",
    "ssmmessages:OpenControlChannel",
    "ssmmessages:CreateControlChannel",
]


def _execution_statements(template: dict[str, Any]) -> list[dict[str, Any]]:
    policy = template["Resources"][EXECUTION_POLICY_ID]
    assert policy["Properties"]["Roles"] == [{"Ref": EXECUTION_ROLE_ID}]
    return policy["Properties"]["PolicyDocument"]["Statement"]


def _container(template: dict[str, Any]) -> dict[str, Any]:
    task_definition = template["Resources"]["MyFargateServiceTaskDef"]
    return task_definition["Properties"]["ContainerDefinitions"][0]


def test_every_container_is_hardened(template: dict[str, Any]) -> None:
    """Every container runs with a read-only root filesystem and an init process."""
    task_definitions = resources_of_type(template, "AWS::ECS::TaskDefinition")
    assert task_definitions

    for body in task_definitions.values():
        containers = body["Properties"]["ContainerDefinitions"]
        assert containers
        for container in containers:
            assert container["ReadonlyRootFilesystem"] is True
            assert container["LinuxParameters"]["InitProcessEnabled"] is True


def test_scratch_volumes_are_declared_and_mounted_read_write(template: dict[str, Any]) -> None:
    """Exactly the six scratch volumes exist, each mounted writable at its path."""
    task_definition = template["Resources"]["MyFargateServiceTaskDef"]["Properties"]
    volume_names = [volume["Name"] for volume in task_definition["Volumes"]]
    assert sorted(volume_names) == sorted(EXPECTED_MOUNTS)

    mount_points = _container(template)["MountPoints"]
    mounted = {mount["SourceVolume"]: mount["ContainerPath"] for mount in mount_points}
    assert mounted == EXPECTED_MOUNTS
    assert all(mount["ReadOnly"] is False for mount in mount_points)

    paths = [mount["ContainerPath"] for mount in mount_points]
    assert len(paths) == len(set(paths))


def test_execution_role_can_pull_and_push_the_image(template: dict[str, Any]) -> None:
    """The execution role holds pull/push rights on the image repository."""
    statements = _execution_statements(template)
    repository_arn = {
        "Fn::Sub": "arn:${AWS::Partition}:ecr:${AWS::Region}:${AWS::AccountId}:"
        "repository/my-fargate-service"
    }
    ecr_statement = next(s for s in statements if s["Resource"] == repository_arn)

    assert ecr_statement["Effect"] == "Allow"
    for action in (
        "ecr:BatchCheckLayerAvailability",
        "ecr:GetDownloadUrlForLayer",
        "ecr:BatchGetImage",
        "ecr:PutImage",
        "ecr:InitiateLayerUpload",
        "ecr:UploadLayerPart",
        "ecr:CompleteLayerUpload",
    ):
        assert action in ecr_statement["Action"]
    assert {"Action": "ecr:GetAuthorizationToken", "Effect": "Allow", "Resource": "*"} in (
        statements
    )


def test_execution_role_can_write_to_the_log_group(template: dict[str, Any]) -> None:
    """The named log group exists, is destroyed with the stack and is writable."""
    log_group = template["Resources"]["MyLogGroup"]
    assert log_group["Properties"]["LogGroupName"] == "/ecs/my-fargate-service"
    assert log_group["DeletionPolicy"] == "Delete"

    statements = _execution_statements(template)
    assert {
        "Action": ["logs:CreateLogStream", "logs:PutLogEvents"],
        "Effect": "Allow",
        "Resource": {"Fn::GetAtt": ["MyLogGroup", "Arn"]},
    } in statements


def test_execution_role_can_open_session_manager_channels(template: dict[str, Any]) -> None:
    """The four channel actions are granted on every resource by default."""
    statements = _execution_statements(template)
    assert {"Action": EXEC_ACTIONS, "Effect": "Allow", "Resource": "*"} in statements


def test_channel_scope_follows_settings(
    settings: TopologySettings,
    image: ImageReference,
) -> None:
    """Narrowing the channel scope is a configuration choice."""
    scope = "arn:aws:ssmmessages:eu-west-2:123456789012:*"
    narrowed = settings.model_copy(update={"exec_channel_resources": [scope]})

    template = assemble_topology(narrowed, image).template()

    assert {"Action": EXEC_ACTIONS, "Effect": "Allow", "Resource": scope} in (
        _execution_statements(template)
    )
    task_policy = template["Resources"][TASK_POLICY_ID]["Properties"]
    assert task_policy["PolicyDocument"]["Statement"] == [
        {"Action": EXEC_ACTIONS, "Effect": "Allow", "Resource": scope}
    ]
    for body in resources_of_type(template, "AWS::IAM::Policy").values():
        for statement in body["Properties"]["PolicyDocument"]["Statement"]:
            if statement["Action"] == EXEC_ACTIONS:
                assert statement["Resource"] == scope


def test_service_is_public_and_listens_on_port_80(template: dict[str, Any]) -> None:
    """The service fronts port 80 through a public load balancer with public task IPs."""
    service = template["Resources"]["MyFargateServiceService"]["Properties"]
    assert service["ServiceName"] == "ecs-service"
    assert service["EnableExecuteCommand"] is True
    assert service["LoadBalancers"][0]["ContainerPort"] == 80
    assert service["NetworkConfiguration"]["AwsvpcConfiguration"]["AssignPublicIp"] == "ENABLED"

    load_balancer = template["Resources"]["MyFargateServiceLB"]["Properties"]
    assert load_balancer["Scheme"] == "internet-facing"

    listener = template["Resources"]["MyFargateServiceLBPublicListener"]["Properties"]
    assert listener["Port"] == 80

    container = _container(template)
    assert container["PortMappings"] == [{"ContainerPort": 80, "Protocol": "tcp"}]
    assert container["Image"] == {
        "Fn::Sub": "${AWS::AccountId}.dkr.ecr.${AWS::Region}.${AWS::URLSuffix}/"
        f"my-fargate-service:{IMAGE_TAG}"
    }


def test_service_is_placed_in_the_named_cluster(template: dict[str, Any]) -> None:
    cluster = template["Resources"]["MyEcsCluster"]
    assert cluster["Properties"]["ClusterName"] == "my-ecs-cluster"

    service = template["Resources"]["MyFargateServiceService"]
    assert service["Properties"]["Cluster"] == {"Ref": "MyEcsCluster"}
    assert "MyFargateServiceLBPublicListener" in service["DependsOn"]
    assert EXECUTION_POLICY_ID in service["DependsOn"]


def test_container_logs_go_to_the_log_group(template: dict[str, Any]) -> None:
    log_configuration = _container(template)["LogConfiguration"]
    assert log_configuration["LogDriver"] == "awslogs"
    assert log_configuration["Options"]["awslogs-group"] == {"Ref": "MyLogGroup"}
    assert log_configuration["Options"]["awslogs-stream-prefix"] == "ecs-service"


def test_override_pass_is_idempotent(topology: Topology) -> None:
    """Re-running the hardening pass leaves the template unchanged."""
    before = copy.deepcopy(topology.template())

    visited = apply_overrides(
        topology.context, topology.service.scope, harden_task_definitions
    )

    assert visited > 0
    assert topology.template() == before


def test_network_has_two_public_subnets_sized_24(template: dict[str, Any]) -> None:
    """Two zones, one public /24 subnet each, routed through the internet gateway."""
    subnets = resources_of_type(template, "AWS::EC2::Subnet")
    assert len(subnets) == 2

    zones = []
    for index, logical_id in enumerate(sorted(subnets)):
        properties = subnets[logical_id]["Properties"]
        assert properties["MapPublicIpOnLaunch"] is True
        assert properties["CidrBlock"] == {
            "Fn::Select": [
                index,
                {"Fn::Cidr": [{"Fn::GetAtt": ["MyVpc", "CidrBlock"]}, 2, "8"]},
            ]
        }
        zones.append(properties["AvailabilityZone"])
    assert zones == [
        {"Fn::Select": [0, {"Fn::GetAZs": ""}]},
        {"Fn::Select": [1, {"Fn::GetAZs": ""}]},
    ]

    routes = resources_of_type(template, "AWS::EC2::Route")
    assert len(routes) == 2
    for route in routes.values():
        assert route["Properties"]["DestinationCidrBlock"] == "0.0.0.0/0"
        assert route["Properties"]["GatewayId"] == {"Ref": "MyVpcIGW"}
        assert route["DependsOn"] == ["MyVpcVPCGW"]


def test_every_resource_is_destroyed_with_the_stack(template: dict[str, Any]) -> None:
    for body in template["Resources"].values():
        assert body["DeletionPolicy"] == "Delete"
        assert body["UpdateReplacePolicy"] == "Delete"


def test_topology_tags_reach_taggable_resources(template: dict[str, Any]) -> None:
    tags = template["Resources"]["MyEcsCluster"]["Properties"]["Tags"]
    assert {"Key": "topology", "Value": "EcsStack"} in tags
    assert {"Key": "managed-by", "Value": "fargate-topology"} in tags


def test_outputs_expose_the_service_url(template: dict[str, Any]) -> None:
    outputs = template["Outputs"]
    assert outputs["LoadBalancerDNS"]["Value"] == {
        "Fn::GetAtt": ["MyFargateServiceLB", "DNSName"]
    }
    assert outputs["ServiceURL"]["Value"] == {
        "Fn::Join": ["", ["http://", {"Fn::GetAtt": ["MyFargateServiceLB", "DNSName"]}]]
    }
