"""Availability zone pools handed to the topology planner."""
from typing import Any, Optional

import boto3
from aws_cdk import Fn, Stack, Token
from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

import common.constants as constants

logger = Logger(service=constants.LOGGER_SERVICE, level=constants.LOG_LEVEL)


def describe_zone_pool(region: str, ec2_client: Optional[Any] = None) -> tuple[str, ...]:
    """Available zones in ``region``, sorted by name so the pool is stable."""
    client = ec2_client or boto3.client("ec2", region_name=region)
    try:
        response = client.describe_availability_zones(
            Filters=[
                {"Name": "state", "Values": ["available"]},
                {"Name": "zone-type", "Values": ["availability-zone"]},
            ]
        )
    except ClientError as e:
        error_info = (e.response or {}).get("Error", {})
        logger.error(
            f"Failed to describe availability zones in {region}: "
            f"{error_info.get('Code', 'UnknownError')} - {error_info.get('Message')}"
        )
        raise

    zones = tuple(sorted(zone["ZoneName"] for zone in response["AvailabilityZones"]))
    logger.info(f"Resolved {len(zones)} availability zones in {region}", extra={"zones": list(zones)})
    return zones


def stack_zone_pool(stack: Stack, count: int) -> list[str]:
    """Zones a stack can place subnets in.

    Environment-agnostic stacks only know two zones at synth time, so they
    select from Fn::GetAZs at deploy time instead.
    """
    if Token.is_unresolved(stack.region):
        return [Fn.select(index, Fn.get_azs()) for index in range(count)]
    return list(stack.availability_zones)
