"""Network boundary: a VPC with public subnets only."""

import logging
from dataclasses import dataclass, field

from fargate_topology.core.topology.context import TopologyContext
from fargate_topology.core.topology.intrinsics import cidr, get_azs, select
from fargate_topology.core.topology.resources import (
    InternetGateway,
    Route,
    RouteTable,
    Subnet,
    SubnetRouteTableAssociation,
    Vpc,
    VpcGatewayAttachment,
)

logger = logging.getLogger(__name__)

PUBLIC_SUBNET_NAME = "public-subnet"


@dataclass
class NetworkBoundary:
    """The VPC and everything placed directly in it."""

    vpc: Vpc
    internet_gateway: InternetGateway
    gateway_attachment: VpcGatewayAttachment
    public_subnets: list[Subnet] = field(default_factory=list)
    routes: list[Route] = field(default_factory=list)


def define_network(
    context: TopologyContext,
    scope: str = "MyVpc",
    max_azs: int = 2,
    cidr_mask: int = 24,
    cidr_block: str = "10.0.0.0/16",
) -> NetworkBoundary:
    """Declare a VPC with one public subnet per availability zone.

    Zone and mask values are passed through to the template untouched; the
    provisioning engine rejects invalid ones at submission time.
    """
    logger.info(f"Defining network {scope}: {max_azs} zones, /{cidr_mask} public subnets")
    vpc = context.add(
        Vpc(scope=scope, cidr_block=cidr_block, tags={"Name": f"{context.stack_name}/{scope}"})
    )
    internet_gateway = context.add(
        InternetGateway(scope=f"{scope}/IGW", tags={"Name": f"{context.stack_name}/{scope}"})
    )
    attachment = context.add(
        VpcGatewayAttachment(scope=f"{scope}/VPCGW", vpc=vpc, internet_gateway=internet_gateway)
    )
    network = NetworkBoundary(
        vpc=vpc,
        internet_gateway=internet_gateway,
        gateway_attachment=attachment,
    )

    subnet_blocks = cidr(vpc.get_att("CidrBlock"), max_azs, 32 - cidr_mask)
    for index in range(max_azs):
        subnet_scope = f"{scope}/PublicSubnet{index + 1}"
        name_tag = f"{context.stack_name}/{subnet_scope}"
        subnet = context.add(
            Subnet(
                scope=f"{subnet_scope}/Subnet",
                vpc=vpc,
                cidr_block=select(index, subnet_blocks),
                availability_zone=select(index, get_azs()),
                map_public_ip_on_launch=True,
                tags={"Name": name_tag, "subnet-name": PUBLIC_SUBNET_NAME, "subnet-type": "Public"},
            )
        )
        route_table = context.add(
            RouteTable(scope=f"{subnet_scope}/RouteTable", vpc=vpc, tags={"Name": name_tag})
        )
        context.add(
            SubnetRouteTableAssociation(
                scope=f"{subnet_scope}/RouteTableAssociation",
                route_table=route_table,
                subnet=subnet,
            )
        )
        route = context.add(
            Route(
                scope=f"{subnet_scope}/DefaultRoute",
                route_table=route_table,
                internet_gateway=internet_gateway,
                depends_on=[attachment],
            )
        )
        network.public_subnets.append(subnet)
        network.routes.append(route)

    return network
