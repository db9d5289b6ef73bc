"""Load-balanced Fargate service and the resources it owns."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from fargate_topology.core.topology.cluster import ClusterPlacement
from fargate_topology.core.topology.context import TopologyContext
from fargate_topology.core.topology.images import ImageReference
from fargate_topology.core.topology.intrinsics import join
from fargate_topology.core.topology.policies import PolicyStatement
from fargate_topology.core.topology.resources import (
    ContainerDefinition,
    Listener,
    LoadBalancer,
    Policy,
    Role,
    SecurityGroup,
    SecurityGroupEgress,
    SecurityGroupIngress,
    Service,
    TargetGroup,
    TaskDefinition,
)

logger = logging.getLogger(__name__)

ECS_TASKS_PRINCIPAL = "ecs-tasks.amazonaws.com"
CONTAINER_NAME = "web"
LISTENER_PORT = 80

EXEC_CHANNEL_ACTIONS = (
    "ssmmessages:CreateDataChannel",
    "ssmmessages:OpenDataChannel",
    "ssmmessages:OpenControlChannel",
    "ssmmessages:CreateControlChannel",
)


@dataclass
class ServiceBundle:
    """A service together with the lower-level resources it expands into."""

    scope: str
    service: Service
    task_definition: TaskDefinition
    container: ContainerDefinition
    execution_role: Role
    task_role: Role
    load_balancer: LoadBalancer
    listener: Listener
    target_group: TargetGroup
    load_balancer_security_group: SecurityGroup
    service_security_group: SecurityGroup
    placement: ClusterPlacement


def define_load_balanced_service(
    context: TopologyContext,
    placement: ClusterPlacement,
    image: ImageReference,
    service_name: str,
    scope: str = "MyFargateService",
    container_port: int = 80,
    public_load_balancer: bool = True,
    assign_public_ip: bool = True,
    enable_execute_command: bool = True,
    exec_channel_resources: Sequence[Any] = ("*",),
    desired_count: int = 1,
    cpu: int = 256,
    memory: int = 512,
) -> ServiceBundle:
    """Declare a Fargate service behind a public application load balancer.

    The service expands into its task definition, execution and task roles,
    load balancer, listener, target group and security groups; all of them are
    returned in the bundle and live under ``scope``.

    Args:
        context: Topology being assembled.
        placement: Cluster the service runs in.
        image: Image the single container runs.
        service_name: Name of the ECS service.
        scope: Scope path the owned resources are declared under.
        container_port: Port the container listens on.
        public_load_balancer: Whether the load balancer is internet-facing.
        assign_public_ip: Whether tasks receive public IPs.
        enable_execute_command: Whether interactive exec is enabled.
        exec_channel_resources: Resources the task role may open exec channels on.
        desired_count: Number of tasks to keep running.
        cpu: Task CPU units.
        memory: Task memory in MiB.

    Returns:
        The service bundle.
    """
    logger.info(f"Defining service {service_name} on port {container_port}")
    network = placement.network
    subnets = network.public_subnets

    lb_security_group = context.add(
        SecurityGroup(
            scope=f"{scope}/LB/SecurityGroup",
            description=f"Automatically created Security Group for ELB {scope}LB",
            vpc=network.vpc,
            ingress=[
                {
                    "CidrIp": "0.0.0.0/0",
                    "Description": f"Allow from anyone on port {LISTENER_PORT}",
                    "FromPort": LISTENER_PORT,
                    "IpProtocol": "tcp",
                    "ToPort": LISTENER_PORT,
                }
            ],
            allow_all_outbound=False,
        )
    )
    load_balancer = context.add(
        LoadBalancer(
            scope=f"{scope}/LB",
            subnets=subnets,
            security_groups=[lb_security_group],
            internet_facing=public_load_balancer,
            depends_on=list(network.routes),
        )
    )
    target_group = context.add(
        TargetGroup(
            scope=f"{scope}/LB/PublicListener/ECSGroup",
            vpc=network.vpc,
            port=container_port,
        )
    )
    listener = context.add(
        Listener(
            scope=f"{scope}/LB/PublicListener",
            load_balancer=load_balancer,
            target_group=target_group,
            port=LISTENER_PORT,
        )
    )

    task_role = context.add(
        Role(scope=f"{scope}/TaskDef/TaskRole", assumed_by=ECS_TASKS_PRINCIPAL)
    )
    execution_role = context.add(
        Role(scope=f"{scope}/TaskDef/ExecutionRole", assumed_by=ECS_TASKS_PRINCIPAL)
    )
    execution_policy = _attach_default_policy(context, execution_role)
    role_policies = [execution_policy]
    if enable_execute_command:
        # Interactive exec opens its channels from inside the task.
        task_policy = _attach_default_policy(context, task_role)
        task_policy.add_statements(
            PolicyStatement(
                actions=EXEC_CHANNEL_ACTIONS, resources=tuple(exec_channel_resources)
            )
        )
        role_policies.append(task_policy)
    task_definition = context.add(
        TaskDefinition(
            scope=f"{scope}/TaskDef",
            family=service_name,
            cpu=cpu,
            memory=memory,
            execution_role=execution_role,
            task_role=task_role,
        )
    )
    container = task_definition.add_container(
        ContainerDefinition(
            name=CONTAINER_NAME,
            image=image.image_uri(),
            container_port=container_port,
        )
    )

    service_security_group = context.add(
        SecurityGroup(
            scope=f"{scope}/Service/SecurityGroup",
            description=f"{context.stack_name}/{scope}/Service/SecurityGroup",
            vpc=network.vpc,
        )
    )
    context.add(
        SecurityGroupIngress(
            scope=f"{scope}/Service/SecurityGroup/from LB",
            group=service_security_group,
            source_group=lb_security_group,
            port=container_port,
            description="Load balancer to target",
        )
    )
    context.add(
        SecurityGroupEgress(
            scope=f"{scope}/LB/SecurityGroup/to Service",
            group=lb_security_group,
            destination_group=service_security_group,
            port=container_port,
            description="Load balancer to target",
        )
    )

    service = context.add(
        Service(
            scope=f"{scope}/Service",
            service_name=service_name,
            cluster=placement.cluster,
            task_definition=task_definition,
            target_group=target_group,
            subnets=subnets,
            security_groups=[service_security_group],
            container_name=container.name,
            container_port=container_port,
            desired_count=desired_count,
            assign_public_ip=assign_public_ip,
            enable_execute_command=enable_execute_command,
            depends_on=[listener, *role_policies],
        )
    )

    context.add_output(
        "LoadBalancerDNS", load_balancer.get_att("DNSName"), "Load balancer DNS name"
    )
    context.add_output(
        "ServiceURL", join("", ["http://", load_balancer.get_att("DNSName")]), "Service URL"
    )

    return ServiceBundle(
        scope=scope,
        service=service,
        task_definition=task_definition,
        container=container,
        execution_role=execution_role,
        task_role=task_role,
        load_balancer=load_balancer,
        listener=listener,
        target_group=target_group,
        load_balancer_security_group=lb_security_group,
        service_security_group=service_security_group,
        placement=placement,
    )


def _attach_default_policy(context: TopologyContext, role: Role) -> Policy:
    """Declare the default policy that grants to a role accumulate in."""
    policy = context.add(
        Policy(
            scope=f"{role.scope}/DefaultPolicy",
            policy_name=f"{role.logical_id}DefaultPolicy",
            roles=[role],
        )
    )
    role.default_policy = policy
    return policy
