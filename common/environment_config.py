"""Environment configuration for the Comprehend base network stack.

An ``EnvironmentConfig`` describes the parameters that vary between
deployment environments (dev, staging, prod) while the infrastructure
pattern stays the same. Configs are resolved once per synthesis pass, either
from an explicit object or from a registry keyed by environment name.
"""
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Optional

from attrs import define, field
from attrs.validators import deep_mapping, instance_of, optional
from aws_lambda_powertools import Logger

import common.constants as constants
from common.errors import ConfigurationError, ValidationError

logger = Logger(service=constants.LOGGER_SERVICE, level=constants.LOG_LEVEL)


def _freeze_tags(tags: Mapping[str, str]) -> Mapping[str, str]:
    # Non-mappings pass through so the validator reports them against `tags`
    if not isinstance(tags, Mapping):
        return tags
    return MappingProxyType(dict(tags))


@define(slots=True, frozen=True, kw_only=True)
class EnvironmentConfig:
    # Any string is representable so an unknown name can be reported by the
    # validator instead of failing construction.
    name: str = field(validator=instance_of(str))
    vpc_cidr: str = field(validator=instance_of(str))
    max_azs: int = field(validator=instance_of(int))
    enable_nat_gateways: bool = field(validator=instance_of(bool))
    nat_gateways: Optional[int] = field(
        default=None,
        validator=optional(instance_of(int)),
        metadata={"description": "Defaults to max_azs, ignored when NAT is disabled"},
    )
    tags: Mapping[str, str] = field(
        factory=dict,
        converter=_freeze_tags,
        validator=deep_mapping(
            key_validator=instance_of(str),
            value_validator=instance_of(str),
            mapping_validator=instance_of(Mapping),
        ),
    )
    account_id: Optional[str] = field(default=None, validator=optional(instance_of(str)))
    region: Optional[str] = field(default=None, validator=optional(instance_of(str)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EnvironmentConfig":
        """Build a config from its camelCase JSON shape.

        Example:
            {"name": "dev", "vpcCidr": "10.0.0.0/16", "maxAzs": 2,
             "enableNatGateways": false, "tags": {...}}
        """
        missing = [key for key in _REQUIRED_KEYS if key not in data]
        if missing:
            raise ConfigurationError(
                ValidationError(field=key, message=f"Missing required setting: {key}")
                for key in missing
            )
        kwargs = {
            attribute: data[key]
            for key, attribute in _MAPPING_KEYS.items()
            if data.get(key) is not None
        }
        try:
            return cls(**kwargs)
        except TypeError as e:
            # attrs instance_of validators pass the offending attribute as args[1]
            attribute = getattr(e.args[1], "name", "config") if len(e.args) > 1 else "config"
            raise ConfigurationError(
                [
                    ValidationError(
                        field=_EXTERNAL_NAMES.get(attribute, attribute),
                        message=f"Invalid type: {e.args[0]}",
                    )
                ]
            ) from e


_MAPPING_KEYS = {
    "name": "name",
    "vpcCidr": "vpc_cidr",
    "maxAzs": "max_azs",
    "enableNatGateways": "enable_nat_gateways",
    "natGateways": "nat_gateways",
    "tags": "tags",
    "accountId": "account_id",
    "region": "region",
}
_EXTERNAL_NAMES = {attribute: key for key, attribute in _MAPPING_KEYS.items()}
_REQUIRED_KEYS = ("name", "vpcCidr", "maxAzs", "enableNatGateways")


def _default_tags(env: str, cost_center: str) -> dict[str, str]:
    return {
        constants.TAG_APPLICATION: "Comprehend",
        constants.TAG_ENVIRONMENT: env,
        constants.TAG_MANAGED_BY: "CDK",
        "CostCenter": cost_center,
    }


DEFAULT_ENVIRONMENT_CONFIGS: Mapping[str, EnvironmentConfig] = MappingProxyType(
    {
        "dev": EnvironmentConfig(
            name="dev",
            vpc_cidr="10.0.0.0/16",
            max_azs=2,
            enable_nat_gateways=False,  # Cost optimization
            tags=_default_tags("dev", "Development"),
        ),
        "staging": EnvironmentConfig(
            name="staging",
            vpc_cidr="10.1.0.0/16",
            max_azs=2,
            enable_nat_gateways=True,
            tags=_default_tags("staging", "Staging"),
        ),
        "prod": EnvironmentConfig(
            name="prod",
            vpc_cidr="10.2.0.0/16",
            max_azs=3,  # Maximum availability
            enable_nat_gateways=True,
            tags=_default_tags("prod", "Production"),
        ),
    }
)


def resolve_environment_config(
    environment_config: Optional[EnvironmentConfig] = None,
    environment_name: Optional[str] = None,
    registry: Mapping[str, EnvironmentConfig] = DEFAULT_ENVIRONMENT_CONFIGS,
) -> EnvironmentConfig:
    """Pick the configuration for this synthesis pass.

    An explicit config wins over a name lookup. With neither, the registry's
    dev entry is used.

    Raises:
        ConfigurationError: If the name has no entry in the registry.
    """
    if environment_config is not None:
        logger.info(
            "Using explicit environment configuration",
            extra={"environment": environment_config.name},
        )
        return environment_config

    if not environment_name:
        logger.warning(f"No environment specified, defaulting to {constants.DEFAULT_ENV}")
        environment_name = constants.DEFAULT_ENV

    config = registry.get(environment_name)
    if config is None:
        raise ConfigurationError(
            [
                ValidationError(
                    field="name",
                    message=f"No default configuration found for environment: {environment_name}",
                )
            ]
        )
    logger.info(
        "Using default environment configuration",
        extra={"environment": environment_name},
    )
    return config
