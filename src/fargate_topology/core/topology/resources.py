"""Resource descriptors that make up the topology graph.

Each CloudFormation resource kind the topology uses has one dataclass here.
Descriptors reference each other directly and render those references as
``Ref``/``Fn::GetAtt`` intrinsics, so the graph stays a plain Python value
until :meth:`Resource.render` turns a node into its template form.
"""

import copy
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, ClassVar

from fargate_topology.core.topology.intrinsics import get_att, ref
from fargate_topology.core.topology.policies import (
    PolicyStatement,
    policy_document,
    service_trust_policy,
)

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


class TopologyError(ValueError):
    """Raised when the assembled graph breaks one of its invariants."""


class RemovalPolicy(StrEnum):
    """What the provisioning engine does with a resource on teardown."""

    DESTROY = "Delete"
    RETAIN = "Retain"


def logical_id_for(scope: str) -> str:
    """Return the template logical id for a scope path."""
    logical_id = _NON_ALPHANUMERIC.sub("", scope)
    if not logical_id:
        raise TopologyError(f"Scope '{scope}' does not yield a logical id.")
    return logical_id


@dataclass(kw_only=True, eq=False)
class Resource:
    """Base descriptor for one template resource."""

    resource_type: ClassVar[str] = ""
    taggable: ClassVar[bool] = False

    scope: str
    depends_on: list["Resource"] = field(default_factory=list)
    removal_policy: RemovalPolicy = RemovalPolicy.DESTROY
    tags: dict[str, str] = field(default_factory=dict)
    overrides: dict[str, Any] = field(default_factory=dict)

    @property
    def logical_id(self) -> str:
        return logical_id_for(self.scope)

    def ref(self) -> dict[str, Any]:
        return ref(self.logical_id)

    def get_att(self, attribute: str) -> dict[str, Any]:
        return get_att(self.logical_id, attribute)

    def properties(self) -> dict[str, Any]:
        """Return the resource properties before overrides."""
        raise NotImplementedError

    def add_dependency(self, *resources: "Resource") -> None:
        for resource in resources:
            if resource not in self.depends_on:
                self.depends_on.append(resource)

    def add_property_override(self, path: str, value: Any) -> None:
        """Force a property value at a dotted path in the rendered properties.

        Numeric path segments index into lists. Setting the same path twice
        keeps the last value.
        """
        self.overrides[path] = value

    def render(self, tags: dict[str, str] | None = None) -> dict[str, Any]:
        """Render the resource as a template entry."""
        properties = self.properties()
        if self.taggable:
            merged_tags = {**(tags or {}), **self.tags}
            if merged_tags:
                properties["Tags"] = [
                    {"Key": key, "Value": value} for key, value in sorted(merged_tags.items())
                ]
        for path, value in self.overrides.items():
            _set_path(properties, path, copy.deepcopy(value))

        body: dict[str, Any] = {"Type": self.resource_type, "Properties": properties}
        if self.depends_on:
            body["DependsOn"] = [resource.logical_id for resource in self.depends_on]
        body["DeletionPolicy"] = self.removal_policy.value
        body["UpdateReplacePolicy"] = self.removal_policy.value
        return body


def _set_path(properties: dict[str, Any], path: str, value: Any) -> None:
    """Set a value at a dotted path, creating intermediate objects."""
    segments = path.split(".")
    current: Any = properties
    for position, segment in enumerate(segments):
        last = position == len(segments) - 1
        if isinstance(current, list):
            if not segment.isdigit() or int(segment) >= len(current):
                raise TopologyError(f"Override path '{path}' has no list element '{segment}'.")
            if last:
                current[int(segment)] = value
            else:
                current = current[int(segment)]
            continue
        if last:
            current[segment] = value
            continue
        child = current.get(segment)
        if not isinstance(child, dict | list):
            child = {}
            current[segment] = child
        current = child


# Network


@dataclass(kw_only=True, eq=False)
class Vpc(Resource):
    resource_type: ClassVar[str] = "AWS::EC2::VPC"
    taggable: ClassVar[bool] = True

    cidr_block: str
    enable_dns_hostnames: bool = True
    enable_dns_support: bool = True

    def properties(self) -> dict[str, Any]:
        return {
            "CidrBlock": self.cidr_block,
            "EnableDnsHostnames": self.enable_dns_hostnames,
            "EnableDnsSupport": self.enable_dns_support,
            "InstanceTenancy": "default",
        }


@dataclass(kw_only=True, eq=False)
class InternetGateway(Resource):
    resource_type: ClassVar[str] = "AWS::EC2::InternetGateway"
    taggable: ClassVar[bool] = True

    def properties(self) -> dict[str, Any]:
        return {}


@dataclass(kw_only=True, eq=False)
class VpcGatewayAttachment(Resource):
    resource_type: ClassVar[str] = "AWS::EC2::VPCGatewayAttachment"

    vpc: Vpc
    internet_gateway: InternetGateway

    def properties(self) -> dict[str, Any]:
        return {"InternetGatewayId": self.internet_gateway.ref(), "VpcId": self.vpc.ref()}


@dataclass(kw_only=True, eq=False)
class Subnet(Resource):
    resource_type: ClassVar[str] = "AWS::EC2::Subnet"
    taggable: ClassVar[bool] = True

    vpc: Vpc
    cidr_block: Any
    availability_zone: Any
    map_public_ip_on_launch: bool

    def properties(self) -> dict[str, Any]:
        return {
            "AvailabilityZone": self.availability_zone,
            "CidrBlock": self.cidr_block,
            "MapPublicIpOnLaunch": self.map_public_ip_on_launch,
            "VpcId": self.vpc.ref(),
        }


@dataclass(kw_only=True, eq=False)
class RouteTable(Resource):
    resource_type: ClassVar[str] = "AWS::EC2::RouteTable"
    taggable: ClassVar[bool] = True

    vpc: Vpc

    def properties(self) -> dict[str, Any]:
        return {"VpcId": self.vpc.ref()}


@dataclass(kw_only=True, eq=False)
class SubnetRouteTableAssociation(Resource):
    resource_type: ClassVar[str] = "AWS::EC2::SubnetRouteTableAssociation"

    route_table: RouteTable
    subnet: Subnet

    def properties(self) -> dict[str, Any]:
        return {"RouteTableId": self.route_table.ref(), "SubnetId": self.subnet.ref()}


@dataclass(kw_only=True, eq=False)
class Route(Resource):
    resource_type: ClassVar[str] = "AWS::EC2::Route"

    route_table: RouteTable
    internet_gateway: InternetGateway
    destination_cidr_block: str = "0.0.0.0/0"

    def properties(self) -> dict[str, Any]:
        return {
            "DestinationCidrBlock": self.destination_cidr_block,
            "GatewayId": self.internet_gateway.ref(),
            "RouteTableId": self.route_table.ref(),
        }


@dataclass(kw_only=True, eq=False)
class SecurityGroup(Resource):
    resource_type: ClassVar[str] = "AWS::EC2::SecurityGroup"
    taggable: ClassVar[bool] = True

    description: str
    vpc: Vpc
    ingress: list[dict[str, Any]] = field(default_factory=list)
    allow_all_outbound: bool = True

    def properties(self) -> dict[str, Any]:
        if self.allow_all_outbound:
            egress = {
                "CidrIp": "0.0.0.0/0",
                "Description": "Allow all outbound traffic by default",
                "IpProtocol": "-1",
            }
        else:
            # Placeholder rule that matches nothing, replacing the implicit allow-all.
            egress = {
                "CidrIp": "255.255.255.255/32",
                "Description": "Disallow all traffic",
                "FromPort": 252,
                "IpProtocol": "icmp",
                "ToPort": 86,
            }
        properties: dict[str, Any] = {
            "GroupDescription": self.description,
            "SecurityGroupEgress": [egress],
            "VpcId": self.vpc.ref(),
        }
        if self.ingress:
            properties["SecurityGroupIngress"] = copy.deepcopy(self.ingress)
        return properties


@dataclass(kw_only=True, eq=False)
class SecurityGroupIngress(Resource):
    resource_type: ClassVar[str] = "AWS::EC2::SecurityGroupIngress"

    group: SecurityGroup
    source_group: SecurityGroup
    port: int
    description: str

    def properties(self) -> dict[str, Any]:
        return {
            "Description": self.description,
            "FromPort": self.port,
            "GroupId": self.group.get_att("GroupId"),
            "IpProtocol": "tcp",
            "SourceSecurityGroupId": self.source_group.get_att("GroupId"),
            "ToPort": self.port,
        }


@dataclass(kw_only=True, eq=False)
class SecurityGroupEgress(Resource):
    resource_type: ClassVar[str] = "AWS::EC2::SecurityGroupEgress"

    group: SecurityGroup
    destination_group: SecurityGroup
    port: int
    description: str

    def properties(self) -> dict[str, Any]:
        return {
            "Description": self.description,
            "DestinationSecurityGroupId": self.destination_group.get_att("GroupId"),
            "FromPort": self.port,
            "GroupId": self.group.get_att("GroupId"),
            "IpProtocol": "tcp",
            "ToPort": self.port,
        }


# Load balancing


@dataclass(kw_only=True, eq=False)
class LoadBalancer(Resource):
    resource_type: ClassVar[str] = "AWS::ElasticLoadBalancingV2::LoadBalancer"
    taggable: ClassVar[bool] = True

    subnets: list[Subnet]
    security_groups: list[SecurityGroup]
    internet_facing: bool = True

    def properties(self) -> dict[str, Any]:
        return {
            "LoadBalancerAttributes": [
                {"Key": "deletion_protection.enabled", "Value": "false"},
            ],
            "Scheme": "internet-facing" if self.internet_facing else "internal",
            "SecurityGroups": [group.get_att("GroupId") for group in self.security_groups],
            "Subnets": [subnet.ref() for subnet in self.subnets],
            "Type": "application",
        }


@dataclass(kw_only=True, eq=False)
class TargetGroup(Resource):
    resource_type: ClassVar[str] = "AWS::ElasticLoadBalancingV2::TargetGroup"
    taggable: ClassVar[bool] = True

    vpc: Vpc
    port: int
    protocol: str = "HTTP"

    def properties(self) -> dict[str, Any]:
        return {
            "Port": self.port,
            "Protocol": self.protocol,
            "TargetGroupAttributes": [{"Key": "stickiness.enabled", "Value": "false"}],
            "TargetType": "ip",
            "VpcId": self.vpc.ref(),
        }


@dataclass(kw_only=True, eq=False)
class Listener(Resource):
    resource_type: ClassVar[str] = "AWS::ElasticLoadBalancingV2::Listener"

    load_balancer: LoadBalancer
    target_group: TargetGroup
    port: int = 80
    protocol: str = "HTTP"

    def properties(self) -> dict[str, Any]:
        return {
            "DefaultActions": [{"TargetGroupArn": self.target_group.ref(), "Type": "forward"}],
            "LoadBalancerArn": self.load_balancer.ref(),
            "Port": self.port,
            "Protocol": self.protocol,
        }


# Identity


@dataclass(kw_only=True, eq=False)
class Policy(Resource):
    resource_type: ClassVar[str] = "AWS::IAM::Policy"

    policy_name: str
    roles: list["Role"] = field(default_factory=list)
    statements: list[PolicyStatement] = field(default_factory=list)

    def add_statements(self, *statements: PolicyStatement) -> None:
        for statement in statements:
            if statement not in self.statements:
                self.statements.append(statement)

    def properties(self) -> dict[str, Any]:
        return {
            "PolicyDocument": policy_document(self.statements),
            "PolicyName": self.policy_name,
            "Roles": [role.ref() for role in self.roles],
        }


@dataclass(kw_only=True, eq=False)
class Role(Resource):
    resource_type: ClassVar[str] = "AWS::IAM::Role"
    taggable: ClassVar[bool] = True

    assumed_by: str
    default_policy: Policy | None = field(default=None, repr=False)

    def add_to_principal_policy(self, statement: PolicyStatement) -> None:
        """Append a statement to the role's default policy."""
        if self.default_policy is None:
            raise TopologyError(f"Role {self.logical_id} has no default policy to extend.")
        self.default_policy.add_statements(statement)

    def statements(self) -> list[PolicyStatement]:
        if self.default_policy is None:
            return []
        return list(self.default_policy.statements)

    def properties(self) -> dict[str, Any]:
        return {"AssumeRolePolicyDocument": service_trust_policy(self.assumed_by)}


# Logging


@dataclass(kw_only=True, eq=False)
class LogGroup(Resource):
    resource_type: ClassVar[str] = "AWS::Logs::LogGroup"
    taggable: ClassVar[bool] = True

    log_group_name: str
    retention_in_days: int | None = None

    def properties(self) -> dict[str, Any]:
        properties: dict[str, Any] = {"LogGroupName": self.log_group_name}
        if self.retention_in_days is not None:
            properties["RetentionInDays"] = self.retention_in_days
        return properties


# Compute


@dataclass(kw_only=True, eq=False)
class Cluster(Resource):
    resource_type: ClassVar[str] = "AWS::ECS::Cluster"
    taggable: ClassVar[bool] = True

    cluster_name: str

    def properties(self) -> dict[str, Any]:
        return {"ClusterName": self.cluster_name}


@dataclass(frozen=True)
class Volume:
    """A named ephemeral volume of a task definition."""

    name: str

    def to_json(self) -> dict[str, Any]:
        return {"Name": self.name}


@dataclass(frozen=True)
class MountPoint:
    """A volume mounted into a container at a path."""

    container_path: str
    source_volume: str
    read_only: bool = False

    def to_json(self) -> dict[str, Any]:
        return {
            "ContainerPath": self.container_path,
            "ReadOnly": self.read_only,
            "SourceVolume": self.source_volume,
        }


@dataclass(eq=False)
class ContainerDefinition:
    """One container of a task definition."""

    name: str
    image: Any
    container_port: int
    essential: bool = True
    mount_points: list[MountPoint] = field(default_factory=list)
    log_configuration: dict[str, Any] | None = None

    def add_mount_points(self, *mount_points: MountPoint) -> None:
        """Mount volumes into the container; each path may be mounted once."""
        for mount_point in mount_points:
            paths = {existing.container_path for existing in self.mount_points}
            if mount_point.container_path in paths:
                raise TopologyError(
                    f"Container {self.name} already mounts a volume at "
                    f"{mount_point.container_path}."
                )
            self.mount_points.append(mount_point)

    def to_json(self) -> dict[str, Any]:
        definition: dict[str, Any] = {
            "Essential": self.essential,
            "Image": self.image,
            "Name": self.name,
            "PortMappings": [{"ContainerPort": self.container_port, "Protocol": "tcp"}],
        }
        if self.log_configuration is not None:
            definition["LogConfiguration"] = copy.deepcopy(self.log_configuration)
        if self.mount_points:
            definition["MountPoints"] = [mount.to_json() for mount in self.mount_points]
        return definition


@dataclass(kw_only=True, eq=False)
class TaskDefinition(Resource):
    resource_type: ClassVar[str] = "AWS::ECS::TaskDefinition"
    taggable: ClassVar[bool] = True

    family: str
    cpu: int
    memory: int
    execution_role: Role
    task_role: Role
    containers: list[ContainerDefinition] = field(default_factory=list)
    volumes: list[Volume] = field(default_factory=list)

    @property
    def default_container(self) -> ContainerDefinition | None:
        return self.containers[0] if self.containers else None

    def add_container(self, container: ContainerDefinition) -> ContainerDefinition:
        if any(existing.name == container.name for existing in self.containers):
            raise TopologyError(f"Task definition already has a container {container.name}.")
        self.containers.append(container)
        return container

    def add_volume(self, volume: Volume) -> Volume:
        """Declare a volume; names are unique within the task definition."""
        if self.has_volume(volume.name):
            raise TopologyError(f"Task definition already declares volume {volume.name}.")
        self.volumes.append(volume)
        return volume

    def has_volume(self, name: str) -> bool:
        return any(volume.name == name for volume in self.volumes)

    def properties(self) -> dict[str, Any]:
        properties: dict[str, Any] = {
            "ContainerDefinitions": [container.to_json() for container in self.containers],
            "Cpu": str(self.cpu),
            "ExecutionRoleArn": self.execution_role.get_att("Arn"),
            "Family": self.family,
            "Memory": str(self.memory),
            "NetworkMode": "awsvpc",
            "RequiresCompatibilities": ["FARGATE"],
            "TaskRoleArn": self.task_role.get_att("Arn"),
        }
        if self.volumes:
            properties["Volumes"] = [volume.to_json() for volume in self.volumes]
        return properties


@dataclass(kw_only=True, eq=False)
class Service(Resource):
    resource_type: ClassVar[str] = "AWS::ECS::Service"
    taggable: ClassVar[bool] = True

    service_name: str
    cluster: Cluster
    task_definition: TaskDefinition
    target_group: TargetGroup
    subnets: list[Subnet]
    security_groups: list[SecurityGroup]
    container_name: str
    container_port: int
    desired_count: int = 1
    assign_public_ip: bool = False
    enable_execute_command: bool = False
    health_check_grace_period_seconds: int = 60

    def properties(self) -> dict[str, Any]:
        return {
            "Cluster": self.cluster.ref(),
            "DeploymentConfiguration": {"MaximumPercent": 200, "MinimumHealthyPercent": 50},
            "DesiredCount": self.desired_count,
            "EnableECSManagedTags": False,
            "EnableExecuteCommand": self.enable_execute_command,
            "HealthCheckGracePeriodSeconds": self.health_check_grace_period_seconds,
            "LaunchType": "FARGATE",
            "LoadBalancers": [
                {
                    "ContainerName": self.container_name,
                    "ContainerPort": self.container_port,
                    "TargetGroupArn": self.target_group.ref(),
                }
            ],
            "NetworkConfiguration": {
                "AwsvpcConfiguration": {
                    "AssignPublicIp": "ENABLED" if self.assign_public_ip else "DISABLED",
                    "SecurityGroups": [group.get_att("GroupId") for group in self.security_groups],
                    "Subnets": [subnet.ref() for subnet in self.subnets],
                }
            },
            "ServiceName": self.service_name,
            "TaskDefinition": self.task_definition.ref(),
        }
