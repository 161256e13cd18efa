import ipaddress

import attrs
import pytest
from common.environment_config import DEFAULT_ENVIRONMENT_CONFIGS
from common.errors import ConfigurationError
from networking.topology import SubnetKind, plan_topology, resolve_nat_gateway_count
from stack_test_helpers import TEST_ZONES, EnvironmentTestCase, build_config

# ----------------------------- Address allocation ------------------------

ENVIRONMENT_CASES = (
    EnvironmentTestCase(
        id="dev",
        vpc_cidr="10.0.0.0/16",
        max_azs=2,
        nat_gateways=0,
        public_cidrs=("10.0.0.0/24", "10.0.1.0/24"),
        private_cidrs=("10.0.2.0/23", "10.0.4.0/23"),
    ),
    EnvironmentTestCase(
        id="staging",
        vpc_cidr="10.1.0.0/16",
        max_azs=2,
        nat_gateways=2,
        public_cidrs=("10.1.0.0/24", "10.1.1.0/24"),
        private_cidrs=("10.1.2.0/23", "10.1.4.0/23"),
    ),
    EnvironmentTestCase(
        id="prod",
        vpc_cidr="10.2.0.0/16",
        max_azs=3,
        nat_gateways=3,
        public_cidrs=("10.2.0.0/24", "10.2.1.0/24", "10.2.2.0/24"),
        # /23 blocks start on a /23 boundary, so 10.2.3.0 is skipped
        private_cidrs=("10.2.4.0/23", "10.2.6.0/23", "10.2.8.0/23"),
    ),
)


@pytest.mark.parametrize("case", ENVIRONMENT_CASES, ids=lambda test: test.id)
def test_default_environment_topology(case: EnvironmentTestCase):
    config = DEFAULT_ENVIRONMENT_CONFIGS[case.id]
    topology = plan_topology(config, TEST_ZONES)

    assert topology.vpc_cidr == case.vpc_cidr
    assert topology.availability_zones == TEST_ZONES[: case.max_azs]
    assert tuple(s.cidr_block for s in topology.public_subnets) == case.public_cidrs
    assert tuple(s.cidr_block for s in topology.private_subnets) == case.private_cidrs
    assert topology.nat_gateway_count == case.nat_gateways


def test_subnets_are_spread_one_per_zone():
    topology = plan_topology(DEFAULT_ENVIRONMENT_CONFIGS["prod"], TEST_ZONES)

    assert [s.availability_zone for s in topology.public_subnets] == list(TEST_ZONES)
    assert [s.availability_zone for s in topology.private_subnets] == list(TEST_ZONES)


def test_subnet_names_follow_environment_convention():
    topology = plan_topology(DEFAULT_ENVIRONMENT_CONFIGS["dev"], TEST_ZONES)

    assert topology.vpc_name == "comprehend-dev-vpc"
    assert topology.public_subnet_ids == ("comprehend-dev-public-1", "comprehend-dev-public-2")
    assert topology.private_subnet_ids == ("comprehend-dev-private-1", "comprehend-dev-private-2")


def test_blocks_do_not_overlap():
    topology = plan_topology(DEFAULT_ENVIRONMENT_CONFIGS["prod"], TEST_ZONES)
    blocks = [
        ipaddress.ip_network(s.cidr_block)
        for s in topology.public_subnets + topology.private_subnets
    ]
    vpc = ipaddress.ip_network(topology.vpc_cidr)

    assert all(block.subnet_of(vpc) for block in blocks)
    for index, block in enumerate(blocks):
        assert not any(block.overlaps(other) for other in blocks[index + 1:])


def test_zone_pool_order_is_kept():
    pool = ("us-east-1c", "us-east-1a", "us-east-1b")
    topology = plan_topology(build_config(), pool)
    assert topology.availability_zones == ("us-east-1c", "us-east-1a")


def test_vpc_cidr_with_room_to_spare():
    topology = plan_topology(build_config(vpc_cidr="192.168.0.0/21"), TEST_ZONES)
    assert tuple(s.cidr_block for s in topology.private_subnets) == (
        "192.168.2.0/23",
        "192.168.4.0/23",
    )


# ----------------------------- NAT gateways ------------------------

NAT_CASES = [
    ({"enable_nat_gateways": False}, 0),
    ({"enable_nat_gateways": False, "nat_gateways": 2}, 0),
    ({"enable_nat_gateways": True}, 2),
    ({"enable_nat_gateways": True, "nat_gateways": 1}, 1),
    ({"enable_nat_gateways": True, "nat_gateways": 0}, 0),
    ({"enable_nat_gateways": True, "max_azs": 3}, 3),
]


@pytest.mark.parametrize("overrides,expected", NAT_CASES)
def test_resolve_nat_gateway_count(overrides, expected: int):
    assert resolve_nat_gateway_count(build_config(**overrides)) == expected


def test_nat_gateway_count_is_clamped_to_max_azs():
    # an invalid config never reaches the planner, but the clamp still holds
    assert resolve_nat_gateway_count(build_config(enable_nat_gateways=True, nat_gateways=5)) == 2


def test_private_subnets_are_isolated_without_nat():
    topology = plan_topology(DEFAULT_ENVIRONMENT_CONFIGS["dev"], TEST_ZONES)

    assert topology.nat_gateway_ids == ()
    assert topology.private_subnet_type == SubnetKind.PRIVATE_ISOLATED
    assert all(s.default_route is None for s in topology.private_subnets)
    assert all(s.default_route == "InternetGateway" for s in topology.public_subnets)


def test_private_subnets_route_through_same_zone_nat():
    topology = plan_topology(DEFAULT_ENVIRONMENT_CONFIGS["prod"], TEST_ZONES)

    assert topology.nat_gateway_ids == ("NatGateway1", "NatGateway2", "NatGateway3")
    assert topology.private_subnet_type == SubnetKind.PRIVATE_WITH_EGRESS
    assert [s.default_route for s in topology.private_subnets] == list(topology.nat_gateway_ids)


def test_private_subnets_share_fewer_nat_gateways():
    config = attrs.evolve(DEFAULT_ENVIRONMENT_CONFIGS["prod"], nat_gateways=2)
    topology = plan_topology(config, TEST_ZONES)

    assert [s.default_route for s in topology.private_subnets] == [
        "NatGateway1",
        "NatGateway2",
        "NatGateway1",
    ]


def test_enabled_with_zero_nat_gateways_is_isolated():
    topology = plan_topology(build_config(enable_nat_gateways=True, nat_gateways=0), TEST_ZONES)
    assert topology.private_subnet_type == SubnetKind.PRIVATE_ISOLATED
    assert not topology.nat_gateways_enabled


# ----------------------------- Determinism ------------------------


@pytest.mark.parametrize("name", ["dev", "staging", "prod"])
def test_planning_is_idempotent(name: str):
    config = DEFAULT_ENVIRONMENT_CONFIGS[name]
    first = plan_topology(config, TEST_ZONES)
    second = plan_topology(config, list(TEST_ZONES))

    assert first == second
    assert repr(first) == repr(second)


# ----------------------------- Planner failures ------------------------


def test_too_few_zones_in_pool():
    with pytest.raises(ConfigurationError) as exc_info:
        plan_topology(DEFAULT_ENVIRONMENT_CONFIGS["prod"], TEST_ZONES[:2])
    assert exc_info.value.fields == ("maxAzs",)


@pytest.mark.parametrize("vpc_cidr", ["10.0.0.0/24", "10.0.0.0/22"])
def test_vpc_cidr_too_small_for_subnets(vpc_cidr: str):
    with pytest.raises(ConfigurationError) as exc_info:
        plan_topology(build_config(vpc_cidr=vpc_cidr), TEST_ZONES)
    assert exc_info.value.fields == ("vpcCidr",)


@pytest.mark.parametrize("vpc_cidr", ["10.0.0.00/16", "10.0.0.0/40"])
def test_unparseable_vpc_cidr_is_a_configuration_error(vpc_cidr: str):
    with pytest.raises(ConfigurationError) as exc_info:
        plan_topology(build_config(vpc_cidr=vpc_cidr), TEST_ZONES)
    assert exc_info.value.fields == ("vpcCidr",)
