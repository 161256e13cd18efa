#!/usr/bin/env python3
"""AWS CDK entrypoint for the Comprehend base network stack.

Select the environment with ``--context environment=dev|staging|prod``. An
explicit configuration can be passed as JSON with
``--context environmentConfig='{"name": "dev", "vpcCidr": ...}'`` and
``--context resolve_zones=true`` looks up the region's zones through EC2
instead of relying on the CDK context.
"""
import json
import os

import aws_cdk as cdk
from aws_cdk import Environment

from common import constants
from common.environment_config import EnvironmentConfig, resolve_environment_config
from common.stack_context import build_stack_name
from networking.networking_stack import NetworkingStack
from networking.zone_pool import describe_zone_pool

app = cdk.App()

config_context = app.node.try_get_context(constants.CONTEXT_ENVIRONMENT_CONFIG)
if isinstance(config_context, str):
    config_context = json.loads(config_context)

environment_config = resolve_environment_config(
    environment_config=(
        EnvironmentConfig.from_mapping(config_context) if config_context else None
    ),
    environment_name=app.node.try_get_context(constants.CONTEXT_ENVIRONMENT),
)

env = Environment(
    account=environment_config.account_id or os.getenv("CDK_DEFAULT_ACCOUNT"),
    region=environment_config.region or os.getenv("CDK_DEFAULT_REGION"),
)

zone_pool = None
if app.node.try_get_context(constants.CONTEXT_RESOLVE_ZONES) in (True, "true"):
    zone_pool = describe_zone_pool(env.region or constants.DEFAULT_REGION)

NetworkingStack(
    app,
    build_stack_name(environment_config.name),
    environment_config=environment_config,
    zone_pool=zone_pool,
    env=env,
)

app.synth()
