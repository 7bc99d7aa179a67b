"""
core/data/inventory/services - Per-kind AWS adapters

Each adapter lists one resource kind for a (session, region) scope and
resolves cross-referenced names through its own CacheResolver.
"""

from .base import BaseAdapter, ResourceAdapter, account_from_arn, ec2_name, name_tag, tags_to_dict
from .elasticache import CacheClusterAdapter
from .iam import IAMPolicyAdapter, IAMRoleAdapter, flatten_statements
from .rds import DBInstanceAdapter
from .vpc import SubnetAdapter, VPCAdapter, parse_subnet, route_table_for_subnet

__all__ = [
    # Base
    "BaseAdapter",
    "ResourceAdapter",
    "tags_to_dict",
    "name_tag",
    "ec2_name",
    "account_from_arn",
    # ElastiCache / RDS
    "CacheClusterAdapter",
    "DBInstanceAdapter",
    # VPC
    "VPCAdapter",
    "SubnetAdapter",
    "parse_subnet",
    "route_table_for_subnet",
    # IAM
    "IAMPolicyAdapter",
    "IAMRoleAdapter",
    "flatten_statements",
]
