"""
core/data/inventory/services/rds.py - RDS DB instance adapter

The DB subnet group (VPC id, subnet ids) comes embedded in the listing, so
only the VPC and security group names need resolving.
"""

from __future__ import annotations

from typing import Any

from core.exceptions import APICallError
from core.parallel import CancelToken

from ..types import DBInstance, LookupKind
from .base import BaseAdapter, account_from_arn, ec2_name, tags_to_dict


class DBInstanceAdapter(BaseAdapter[DBInstance]):
    """RDS DB instances in one session/region"""

    kind = "rds"

    def _list_page(self, page_token: str) -> tuple[list[DBInstance], str]:
        params: dict[str, Any] = {}
        if page_token:
            params["Marker"] = page_token
        resp = self._call("rds", "describe_db_instances", **params)
        instances = [self._parse(data) for data in resp.get("DBInstances", [])]
        return instances, resp.get("Marker", "") or ""

    def _parse(self, data: dict[str, Any]) -> DBInstance:
        endpoint = data.get("Endpoint") or {}
        subnet_group = data.get("DBSubnetGroup") or {}
        arn = data.get("DBInstanceArn", "")
        db_id = data.get("DBInstanceIdentifier", "")
        tags = tags_to_dict(data.get("TagList"))

        return DBInstance(
            db_instance_id=db_id,
            display_name=tags.get("Name") or db_id,
            state=data.get("DBInstanceStatus", ""),
            engine=data.get("Engine", ""),
            engine_version=data.get("EngineVersion", ""),
            instance_class=data.get("DBInstanceClass", ""),
            allocated_storage_gb=data.get("AllocatedStorage", 0),
            multi_az=data.get("MultiAZ", False),
            endpoint_address=endpoint.get("Address", ""),
            endpoint_port=endpoint.get("Port", 0),
            subnet_group=subnet_group.get("DBSubnetGroupName", ""),
            arn=arn,
            created_at=data.get("InstanceCreateTime"),
            tags=tags,
            vpc_id=subnet_group.get("VpcId", ""),
            subnet_ids=[
                s.get("SubnetIdentifier", "") for s in subnet_group.get("Subnets", []) if s.get("SubnetIdentifier")
            ],
            security_group_ids=[
                sg.get("VpcSecurityGroupId", "")
                for sg in data.get("VpcSecurityGroups", [])
                if sg.get("VpcSecurityGroupId")
            ],
            account_id=self.account_id or account_from_arn(arn),
            region=self.region,
        )

    def enrich(self, item: DBInstance, cancel_token: CancelToken | None = None) -> DBInstance:
        item.vpc_name = self.resolver.resolve_name(LookupKind.VPC, item.vpc_id, ec2_name)
        item.security_group_names = self.resolver.resolve_names(
            LookupKind.SECURITY_GROUP,
            item.security_group_ids,
            lambda group: group.get("GroupName", ""),
        )
        return item

    def get(self, resource_id: str) -> DBInstance:
        """One DB instance by identifier, enriched"""
        resource_id = self._require_id(resource_id)
        try:
            resp = self._call("rds", "describe_db_instances", DBInstanceIdentifier=resource_id)
        except APICallError as e:
            raise self._get_error(resource_id, cause=e) from e

        instances = resp.get("DBInstances", [])
        if not instances:
            raise self._get_error(resource_id)
        return self.enrich(self._parse(instances[0]))
