"""Named values this stack publishes for dependent stacks.

Every value is exported as ``{environment}-{OutputName}``. List values are
comma-joined in topology order.
"""
from types import MappingProxyType
from typing import Mapping

from attrs import define

import common.constants as constants
from common.stack_context import build_export_name
from networking.topology import Topology


@define(slots=True, frozen=True, kw_only=True)
class StackExport:
    output_name: str
    export_name: str
    value: str
    description: str


def _join(values) -> str:
    return ",".join(values)


def _nat_gateway_ips(topology: Topology) -> str:
    # "disabled" tells consumers there are no NAT gateways, as opposed to a
    # value that was never computed.
    if not topology.nat_gateways_enabled:
        return constants.NAT_GATEWAYS_DISABLED
    return _join(topology.nat_gateway_ids)


def build_exports(environment_name: str, topology: Topology) -> tuple[StackExport, ...]:
    values = {
        constants.OUTPUT_VPC_ID: (
            topology.vpc_id,
            f"VPC ID for {environment_name} environment",
        ),
        constants.OUTPUT_VPC_CIDR: (
            topology.vpc_cidr,
            f"VPC CIDR block for {environment_name} environment",
        ),
        constants.OUTPUT_PUBLIC_SUBNET_IDS: (
            _join(topology.public_subnet_ids),
            f"Public subnet IDs for {environment_name} environment (comma-separated)",
        ),
        constants.OUTPUT_PRIVATE_SUBNET_IDS: (
            _join(topology.private_subnet_ids),
            f"Private subnet IDs for {environment_name} environment (comma-separated)",
        ),
        constants.OUTPUT_AVAILABILITY_ZONES: (
            _join(topology.availability_zones),
            f"Availability zones used in {environment_name} environment (comma-separated)",
        ),
        constants.OUTPUT_NAT_GATEWAY_IPS: (
            _nat_gateway_ips(topology),
            f"NAT gateways for {environment_name} environment "
            f"(comma-separated, '{constants.NAT_GATEWAYS_DISABLED}' if none)",
        ),
        constants.OUTPUT_ENVIRONMENT_NAME: (
            environment_name,
            "Environment name",
        ),
    }
    return tuple(
        StackExport(
            output_name=output_name,
            export_name=build_export_name(environment_name, output_name),
            value=values[output_name][0],
            description=values[output_name][1],
        )
        for output_name in constants.OUTPUT_NAMES
    )


def export_all(environment_name: str, topology: Topology) -> Mapping[str, str]:
    """Export name to value, e.g. ``{"dev-NatGatewayIps": "disabled", ...}``."""
    return MappingProxyType(
        {export.export_name: export.value for export in build_exports(environment_name, topology)}
    )
