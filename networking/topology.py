"""Network topology planning.

Turns a validated ``EnvironmentConfig`` and an ordered availability zone pool
into a ``Topology``: the zones used, one public and one private subnet per
zone carved sequentially out of the VPC block, and the NAT gateway layout.

Planning is a pure function of its inputs, so repeated synthesis runs for
the same environment never drift.
"""
import enum
import ipaddress
from typing import Optional, Sequence

from attrs import define, field
from aws_lambda_powertools import Logger

import common.constants as constants
from common.environment_config import EnvironmentConfig
from common.errors import ConfigurationError, ValidationError
from common.stack_context import build_resource_name

logger = Logger(service=constants.LOGGER_SERVICE, level=constants.LOG_LEVEL)


class SubnetKind(str, enum.Enum):
    PUBLIC = "Public"
    PRIVATE_WITH_EGRESS = "PrivateWithEgress"
    PRIVATE_ISOLATED = "PrivateIsolated"


@define(slots=True, frozen=True, kw_only=True)
class SubnetPlan:
    name: str
    subnet_id: str  # planned id until the subnet is provisioned
    availability_zone: str
    cidr_block: str
    subnet_type: SubnetKind
    default_route: Optional[str] = None  # None: isolated, no 0.0.0.0/0 route


@define(slots=True, frozen=True, kw_only=True)
class Topology:
    environment_name: str
    vpc_name: str
    vpc_id: str
    vpc_cidr: str
    availability_zones: tuple[str, ...] = field(converter=tuple)
    public_subnets: tuple[SubnetPlan, ...] = field(converter=tuple)
    private_subnets: tuple[SubnetPlan, ...] = field(converter=tuple)
    nat_gateway_ids: tuple[str, ...] = field(converter=tuple)

    @property
    def nat_gateway_count(self) -> int:
        return len(self.nat_gateway_ids)

    @property
    def nat_gateways_enabled(self) -> bool:
        return self.nat_gateway_count > 0

    @property
    def private_subnet_type(self) -> SubnetKind:
        if self.nat_gateways_enabled:
            return SubnetKind.PRIVATE_WITH_EGRESS
        return SubnetKind.PRIVATE_ISOLATED

    @property
    def public_subnet_ids(self) -> tuple[str, ...]:
        return tuple(subnet.subnet_id for subnet in self.public_subnets)

    @property
    def private_subnet_ids(self) -> tuple[str, ...]:
        return tuple(subnet.subnet_id for subnet in self.private_subnets)


def resolve_nat_gateway_count(config: EnvironmentConfig) -> int:
    """0 when disabled, otherwise the explicit count or one per zone."""
    if not config.enable_nat_gateways:
        return 0
    requested = config.max_azs if config.nat_gateways is None else config.nat_gateways
    return max(0, min(requested, config.max_azs))


class _SubnetAllocator:
    """Hands out consecutive, prefix-aligned blocks of a network."""

    def __init__(self, network: ipaddress.IPv4Network) -> None:
        self._network = network
        self._next = int(network.network_address)

    def allocate(self, prefix_length: int) -> Optional[ipaddress.IPv4Network]:
        size = 2 ** (32 - prefix_length)
        start = -(-self._next // size) * size  # round up to the block boundary
        end = start + size - 1
        if end > int(self._network.broadcast_address):
            return None
        self._next = end + 1
        return ipaddress.IPv4Network((start, prefix_length))


def _select_zones(config: EnvironmentConfig, zone_pool: Sequence[str]) -> tuple[str, ...]:
    if len(zone_pool) < config.max_azs:
        raise ConfigurationError(
            [
                ValidationError(
                    field="maxAzs",
                    message=(
                        f"maxAzs ({config.max_azs}) exceeds the {len(zone_pool)} "
                        "availability zones offered by the region"
                    ),
                )
            ]
        )
    return tuple(zone_pool[: config.max_azs])


def _allocate_blocks(
    config: EnvironmentConfig, prefix_lengths: Sequence[int]
) -> list[str]:
    try:
        network = ipaddress.ip_network(config.vpc_cidr, strict=False)
    except ValueError as e:
        raise ConfigurationError(
            [ValidationError(field="vpcCidr", message=f"Invalid VPC CIDR: {e}")]
        ) from e
    allocator = _SubnetAllocator(network)
    blocks = []
    for prefix_length in prefix_lengths:
        block = allocator.allocate(prefix_length)
        if block is None:
            raise ConfigurationError(
                [
                    ValidationError(
                        field="vpcCidr",
                        message=(
                            f"VPC CIDR {config.vpc_cidr} is too small for "
                            f"{config.max_azs} public /{constants.PUBLIC_SUBNET_CIDR_MASK} and "
                            f"{config.max_azs} private /{constants.PRIVATE_SUBNET_CIDR_MASK} subnets"
                        ),
                    )
                ]
            )
        blocks.append(str(block))
    return blocks


def plan_topology(config: EnvironmentConfig, zone_pool: Sequence[str]) -> Topology:
    """Plan the network for a config that already passed validation.

    Public subnets are allocated before private ones, one of each per zone,
    in zone pool order.

    Raises:
        ConfigurationError: If the pool has too few zones or the VPC block
            cannot hold every subnet.
    """
    zones = _select_zones(config, zone_pool)
    zone_count = len(zones)
    blocks = _allocate_blocks(
        config,
        [constants.PUBLIC_SUBNET_CIDR_MASK] * zone_count
        + [constants.PRIVATE_SUBNET_CIDR_MASK] * zone_count,
    )
    public_blocks, private_blocks = blocks[:zone_count], blocks[zone_count:]

    # NAT gateways live in the first public subnets, one per zone
    nat_gateway_ids = tuple(
        constants.NAT_GATEWAY_ID.format(index=index + 1)
        for index in range(resolve_nat_gateway_count(config))
    )

    public_subnets = []
    for index, (zone, cidr_block) in enumerate(zip(zones, public_blocks)):
        name = build_resource_name(config.name, "public", index + 1)
        public_subnets.append(
            SubnetPlan(
                name=name,
                subnet_id=name,
                availability_zone=zone,
                cidr_block=cidr_block,
                subnet_type=SubnetKind.PUBLIC,
                default_route=constants.INTERNET_GATEWAY,
            )
        )

    private_type = (
        SubnetKind.PRIVATE_WITH_EGRESS if nat_gateway_ids else SubnetKind.PRIVATE_ISOLATED
    )
    private_subnets = []
    for index, (zone, cidr_block) in enumerate(zip(zones, private_blocks)):
        name = build_resource_name(config.name, "private", index + 1)
        private_subnets.append(
            SubnetPlan(
                name=name,
                subnet_id=name,
                availability_zone=zone,
                cidr_block=cidr_block,
                subnet_type=private_type,
                # same-zone gateway first, otherwise round robin over the rest
                default_route=(
                    nat_gateway_ids[index % len(nat_gateway_ids)] if nat_gateway_ids else None
                ),
            )
        )

    vpc_name = build_resource_name(config.name, "vpc")
    topology = Topology(
        environment_name=config.name,
        vpc_name=vpc_name,
        vpc_id=vpc_name,
        vpc_cidr=config.vpc_cidr,
        availability_zones=zones,
        public_subnets=public_subnets,
        private_subnets=private_subnets,
        nat_gateway_ids=nat_gateway_ids,
    )
    logger.debug(
        "Planned network topology",
        extra={
            "environment": config.name,
            "availability_zones": list(zones),
            "public_subnets": public_blocks,
            "private_subnets": private_blocks,
            "nat_gateways": topology.nat_gateway_count,
        },
    )
    return topology
