from typing import Mapping, Optional, Sequence

from attrs import evolve
from aws_cdk import (
    CfnOutput,
    Stack,
    Tags,
    aws_ec2 as ec2,
)
from constructs import Construct

from common import constants
from common.environment_config import (
    DEFAULT_ENVIRONMENT_CONFIGS,
    EnvironmentConfig,
    resolve_environment_config,
)
from common.stack_context import StackContext
from common.validation import ensure_valid
from networking.exports import StackExport, build_exports
from networking.topology import SubnetKind, SubnetPlan, Topology, plan_topology
from networking.zone_pool import stack_zone_pool

SUBNET_TYPES = {
    SubnetKind.PUBLIC: ec2.SubnetType.PUBLIC,
    SubnetKind.PRIVATE_WITH_EGRESS: ec2.SubnetType.PRIVATE_WITH_EGRESS,
    SubnetKind.PRIVATE_ISOLATED: ec2.SubnetType.PRIVATE_ISOLATED,
}


class NetworkingStack(Stack):
    """Base network for one Comprehend environment.

    Resolves and validates the environment configuration, plans the
    topology, provisions it as a VPC and exports the result as
    ``{environment}-{OutputName}`` values for dependent stacks.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        environment_config: Optional[EnvironmentConfig] = None,
        environment_name: Optional[str] = None,
        registry: Mapping[str, EnvironmentConfig] = DEFAULT_ENVIRONMENT_CONFIGS,
        zone_pool: Optional[Sequence[str]] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.environment_config = ensure_valid(
            self.load_environment_config(environment_config, environment_name, registry)
        )
        self.context = StackContext(scope=self, env=self.environment_config.name)

        if zone_pool is None:
            zone_pool = stack_zone_pool(self, self.environment_config.max_azs)
        planned = plan_topology(self.environment_config, zone_pool)

        self.vpc = self.create_vpc(planned)
        self.topology = self.bind_provisioned_ids(planned, self.vpc)
        self.apply_tags()

        self.exports = build_exports(self.environment_config.name, self.topology)
        self.create_outputs(self.exports)

    def load_environment_config(
        self,
        environment_config: Optional[EnvironmentConfig],
        environment_name: Optional[str],
        registry: Mapping[str, EnvironmentConfig],
    ) -> EnvironmentConfig:
        """Explicit config, then explicit name, then the `environment` context value."""
        if environment_config is None and not environment_name:
            environment_name = self.node.try_get_context(constants.CONTEXT_ENVIRONMENT)
        return resolve_environment_config(
            environment_config=environment_config,
            environment_name=environment_name,
            registry=registry,
        )

    def create_vpc(self, topology: Topology) -> ec2.Vpc:
        return ec2.Vpc(
            self,
            self.context.build_resource_id("Vpc"),
            vpc_name=topology.vpc_name,
            ip_addresses=ec2.IpAddresses.cidr(topology.vpc_cidr),
            availability_zones=list(topology.availability_zones),
            enable_dns_hostnames=True,
            enable_dns_support=True,
            create_internet_gateway=True,
            nat_gateways=topology.nat_gateway_count,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=constants.PUBLIC_SUBNET_CIDR_MASK,
                    map_public_ip_on_launch=True,
                ),
                ec2.SubnetConfiguration(
                    name="Private",
                    subnet_type=SUBNET_TYPES[topology.private_subnet_type],
                    cidr_mask=constants.PRIVATE_SUBNET_CIDR_MASK,
                ),
            ],
        )

    @staticmethod
    def bind_provisioned_ids(topology: Topology, vpc: ec2.IVpc) -> Topology:
        """Swap planned subnet and VPC ids for the provisioned ones."""

        def bind(plans: Sequence[SubnetPlan], subnets: Sequence[ec2.ISubnet]) -> list[SubnetPlan]:
            if len(plans) != len(subnets):
                raise RuntimeError(
                    f"VPC provisioned {len(subnets)} subnets where {len(plans)} were planned"
                )
            bound = []
            for plan, subnet in zip(plans, subnets):
                if subnet.ipv4_cidr_block != plan.cidr_block:
                    raise RuntimeError(
                        f"Subnet {plan.name} provisioned as {subnet.ipv4_cidr_block}, "
                        f"planned as {plan.cidr_block}"
                    )
                bound.append(evolve(plan, subnet_id=subnet.subnet_id))
            return bound

        return evolve(
            topology,
            vpc_id=vpc.vpc_id,
            public_subnets=bind(topology.public_subnets, vpc.public_subnets),
            private_subnets=bind(
                topology.private_subnets, vpc.private_subnets + vpc.isolated_subnets
            ),
        )

    def apply_tags(self) -> None:
        for plan, subnet in zip(self.topology.public_subnets, self.vpc.public_subnets):
            Tags.of(subnet).add("Name", plan.name)
            Tags.of(subnet).add("SubnetType", "Public")

        private_subnets = self.vpc.private_subnets + self.vpc.isolated_subnets
        for plan, subnet in zip(self.topology.private_subnets, private_subnets):
            Tags.of(subnet).add("Name", plan.name)
            Tags.of(subnet).add("SubnetType", "Private")

        # Configuration tags land on every taggable resource in the stack
        for key, value in self.environment_config.tags.items():
            Tags.of(self).add(key, value)

    def create_outputs(self, exports: Sequence[StackExport]) -> None:
        for export in exports:
            CfnOutput(
                self,
                export.output_name,
                value=export.value,
                description=export.description,
                export_name=export.export_name,
            )
