import os

DEFAULT_ENV = "dev"
ENVIRONMENT_NAMES = ("dev", "staging", "prod")

# Naming convention components
SERVICE_NAME = "comprehend"  # The application name
LOGGER_SERVICE = "comprehend-network"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Tags every environment must carry
TAG_APPLICATION = "Application"
TAG_ENVIRONMENT = "Environment"
TAG_MANAGED_BY = "ManagedBy"
REQUIRED_TAGS = (TAG_APPLICATION, TAG_ENVIRONMENT, TAG_MANAGED_BY)

MIN_AZS = 2
MAX_AZS = 3

PUBLIC_SUBNET_CIDR_MASK = 24
PRIVATE_SUBNET_CIDR_MASK = 23
DEFAULT_REGION = "us-east-1"

INTERNET_GATEWAY = "InternetGateway"
NAT_GATEWAY_ID = "NatGateway{index}"
NAT_GATEWAYS_DISABLED = "disabled"

# Stack outputs, exported as "{environment}-{output}"
OUTPUT_VPC_ID = "VpcId"
OUTPUT_VPC_CIDR = "VpcCidr"
OUTPUT_PUBLIC_SUBNET_IDS = "PublicSubnetIds"
OUTPUT_PRIVATE_SUBNET_IDS = "PrivateSubnetIds"
OUTPUT_AVAILABILITY_ZONES = "AvailabilityZones"
OUTPUT_NAT_GATEWAY_IPS = "NatGatewayIps"
OUTPUT_ENVIRONMENT_NAME = "EnvironmentName"
OUTPUT_NAMES = (
    OUTPUT_VPC_ID,
    OUTPUT_VPC_CIDR,
    OUTPUT_PUBLIC_SUBNET_IDS,
    OUTPUT_PRIVATE_SUBNET_IDS,
    OUTPUT_AVAILABILITY_ZONES,
    OUTPUT_NAT_GATEWAY_IPS,
    OUTPUT_ENVIRONMENT_NAME,
)

# CDK context keys
CONTEXT_ENVIRONMENT = "environment"
CONTEXT_ENVIRONMENT_CONFIG = "environmentConfig"
CONTEXT_RESOLVE_ZONES = "resolve_zones"
