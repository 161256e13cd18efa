"""Validation rules for environment configurations.

``validate_environment_config`` runs every rule and returns all defects at
once. It never raises for invalid input: callers decide whether to halt,
usually through ``ensure_valid``.
"""
import re

from aws_lambda_powertools import Logger

import common.constants as constants
from common.environment_config import EnvironmentConfig
from common.errors import ConfigurationError, ValidationError

logger = Logger(service=constants.LOGGER_SERVICE, level=constants.LOG_LEVEL)

_OCTET = r"(0|[1-9]\d{0,2})"  # no leading zeros

# RFC 1918 private ranges
PRIVATE_CIDR_PATTERNS = (
    re.compile(rf"(10)\.{_OCTET}\.{_OCTET}\.{_OCTET}/(\d{{1,2}})", re.ASCII),  # 10.0.0.0/8
    re.compile(rf"(172)\.(1[6-9]|2\d|3[0-1])\.{_OCTET}\.{_OCTET}/(\d{{1,2}})", re.ASCII),  # 172.16.0.0/12
    re.compile(rf"(192)\.(168)\.{_OCTET}\.{_OCTET}/(\d{{1,2}})", re.ASCII),  # 192.168.0.0/16
)


def is_private_cidr(cidr: object) -> bool:
    """Check that ``cidr`` looks like an RFC 1918 block, e.g. ``10.0.0.0/16``.

    Host bits may be set. Anything malformed returns False.
    """
    if not isinstance(cidr, str):
        return False
    for pattern in PRIVATE_CIDR_PATTERNS:
        match = pattern.fullmatch(cidr)
        if match is None:
            continue
        *octets, prefix = (int(group) for group in match.groups())
        return all(octet <= 255 for octet in octets) and prefix <= 32
    return False


def validate_environment_config(
    config: EnvironmentConfig,
) -> tuple[ValidationError, ...]:
    errors: list[ValidationError] = []

    if config.name not in constants.ENVIRONMENT_NAMES:
        allowed = ", ".join(f"'{name}'" for name in constants.ENVIRONMENT_NAMES)
        errors.append(
            ValidationError(
                field="name",
                message=f"Invalid environment name: {config.name}. Must be one of {allowed}",
            )
        )

    if not is_private_cidr(config.vpc_cidr):
        errors.append(
            ValidationError(
                field="vpcCidr",
                message=f"Invalid VPC CIDR: {config.vpc_cidr}. Must be a valid RFC 1918 private IP range",
            )
        )

    if not constants.MIN_AZS <= config.max_azs <= constants.MAX_AZS:
        errors.append(
            ValidationError(
                field="maxAzs",
                message=(
                    f"maxAzs must be between {constants.MIN_AZS} and {constants.MAX_AZS} "
                    f"(inclusive), got: {config.max_azs}"
                ),
            )
        )

    if config.nat_gateways is not None and config.nat_gateways > config.max_azs:
        errors.append(
            ValidationError(
                field="natGateways",
                message=f"natGateways ({config.nat_gateways}) cannot exceed maxAzs ({config.max_azs})",
            )
        )

    for tag in constants.REQUIRED_TAGS:
        if not config.tags.get(tag):
            errors.append(
                ValidationError(field="tags", message=f"Missing required tag: {tag}")
            )

    environment_tag = config.tags.get(constants.TAG_ENVIRONMENT)
    if environment_tag and environment_tag != config.name:
        errors.append(
            ValidationError(
                field="tags.Environment",
                message=f"Environment tag ({environment_tag}) must match config name ({config.name})",
            )
        )

    return tuple(errors)


def ensure_valid(config: EnvironmentConfig) -> EnvironmentConfig:
    """Return ``config`` unchanged, or raise with every defect found."""
    errors = validate_environment_config(config)
    if errors:
        logger.error(
            "Environment configuration failed validation",
            extra={
                "environment": config.name,
                "errors": [str(error) for error in errors],
            },
        )
        raise ConfigurationError(errors)
    return config
