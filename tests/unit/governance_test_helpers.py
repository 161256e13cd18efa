from enum import Enum


def resource_governance_doc_url(resource: str) -> str:
    governance_doc_url = f"https://comprehend-internal-docs/{resource}-governance"
    return governance_doc_url


class AWSService(str, Enum):
    VPC = "vpc"
    Subnet = "subnet"
    NAT_Gateway = "nat-gateway"
