from attrs import define, field
from aws_cdk import Stack
from typing import Optional

import common.constants as constants


# ---------- naming ----------
def build_resource_name(
    env: str, resource_type: str, index: Optional[int] = None
) -> str:
    """Build resource name with optional 1-based index.

    Examples:
        - Without index: comprehend-dev-vpc
        - With index: comprehend-dev-public-1
    """
    if index is not None:
        return f"{constants.SERVICE_NAME}-{env}-{resource_type}-{index}".lower()
    return f"{constants.SERVICE_NAME}-{env}-{resource_type}".lower()


def build_export_name(env: str, output_name: str) -> str:
    """Export names are read by other stacks: dev-VpcId, prod-PublicSubnetIds."""
    return f"{env}-{output_name}"


def build_stack_name(env: str) -> str:
    """ComprehendDevStack, ComprehendStagingStack, ..."""
    return f"{constants.SERVICE_NAME.capitalize()}{env.capitalize()}Stack"


@define(slots=True, frozen=True)
class StackContext:
    scope: Stack
    env: str = field(
        default=constants.DEFAULT_ENV,
        metadata={"description": "Deployment environment (dev, staging, prod)"},
    )
    service: str = field(default=constants.SERVICE_NAME, init=False)

    def build_resource_id(self, resource_type: str) -> str:
        """Build construct ID.

        Examples:
            - ComprehendDevVpc
            - ComprehendProdNatGateway
        """
        return (
            f"{self.service.capitalize()}"
            f"{self.env.capitalize()}"
            f"{resource_type[:1].upper()}{resource_type[1:]}"
        )
