"""
core/data/inventory/services/elasticache.py - ElastiCache cluster adapter

Lists cache clusters and cross-references their subnet group, VPC,
subnets and security groups into display names.
"""

from __future__ import annotations

import logging
from typing import Any

from core.exceptions import APICallError, ResolveError
from core.parallel import CancelToken

from ..types import CacheCluster, LookupKind
from .base import BaseAdapter, account_from_arn, ec2_name, tags_to_dict

logger = logging.getLogger(__name__)


def _group_name(group: dict[str, Any]) -> str:
    return str(group.get("GroupName", ""))


class CacheClusterAdapter(BaseAdapter[CacheCluster]):
    """ElastiCache clusters in one session/region"""

    kind = "elasticache"

    def _list_page(self, page_token: str) -> tuple[list[CacheCluster], str]:
        params: dict[str, Any] = {"ShowCacheNodeInfo": True}
        if page_token:
            params["Marker"] = page_token
        resp = self._call("elasticache", "describe_cache_clusters", **params)
        clusters = [self._parse(data) for data in resp.get("CacheClusters", [])]
        return clusters, resp.get("Marker", "") or ""

    def _parse(self, data: dict[str, Any]) -> CacheCluster:
        endpoint = data.get("ConfigurationEndpoint") or {}
        nodes = data.get("CacheNodes", [])
        node_endpoint = (nodes[0].get("Endpoint") or {}) if nodes else {}
        arn = data.get("ARN", "")
        cluster_id = data.get("CacheClusterId", "")

        return CacheCluster(
            cluster_id=cluster_id,
            display_name=cluster_id,
            state=data.get("CacheClusterStatus", ""),
            engine=data.get("Engine", ""),
            engine_version=data.get("EngineVersion", ""),
            node_type=data.get("CacheNodeType", ""),
            num_nodes=data.get("NumCacheNodes", 0),
            replication_group_id=data.get("ReplicationGroupId", ""),
            endpoint_address=node_endpoint.get("Address", "") or endpoint.get("Address", ""),
            endpoint_port=node_endpoint.get("Port", 0) or endpoint.get("Port", 0),
            configuration_endpoint=endpoint.get("Address", ""),
            subnet_group=data.get("CacheSubnetGroupName", ""),
            arn=arn,
            created_at=data.get("CacheClusterCreateTime"),
            security_group_ids=[
                sg.get("SecurityGroupId", "") for sg in data.get("SecurityGroups", []) if sg.get("SecurityGroupId")
            ],
            account_id=self.account_id or account_from_arn(arn),
            region=self.region,
        )

    def _lookups(self):
        lookups = super()._lookups()
        lookups[LookupKind.CACHE_SUBNET_GROUP.value] = self._describe_subnet_group
        return lookups

    def _describe_subnet_group(self, name: str) -> dict[str, Any]:
        resp = self._call("elasticache", "describe_cache_subnet_groups", CacheSubnetGroupName=name)
        groups = resp.get("CacheSubnetGroups", [])
        if not groups:
            raise ResolveError(LookupKind.CACHE_SUBNET_GROUP.value, name)
        return groups[0]

    def enrich(self, item: CacheCluster, cancel_token: CancelToken | None = None) -> CacheCluster:
        """Resolve VPC/subnet/security-group names; each failure only blanks its field"""
        group = self.resolver.try_resolve(LookupKind.CACHE_SUBNET_GROUP, item.subnet_group)
        if group is not None:
            item.vpc_id = group.get("VpcId", "")
            item.subnet_ids = [
                s.get("SubnetIdentifier", "") for s in group.get("Subnets", []) if s.get("SubnetIdentifier")
            ]

        item.vpc_name = self.resolver.resolve_name(LookupKind.VPC, item.vpc_id, ec2_name)
        item.subnet_names = self.resolver.resolve_names(LookupKind.SUBNET, item.subnet_ids, ec2_name)
        item.security_group_names = self.resolver.resolve_names(
            LookupKind.SECURITY_GROUP, item.security_group_ids, _group_name
        )

        item.tags = self._fetch_tags(item.arn)
        if item.tags.get("Name"):
            item.display_name = item.tags["Name"]
        return item

    def _fetch_tags(self, arn: str) -> dict[str, str]:
        if not arn:
            return {}
        try:
            resp = self._call("elasticache", "list_tags_for_resource", ResourceName=arn)
        except APICallError as e:
            logger.debug(f"태그 조회 실패 [{arn}]: {e.error_code}")
            return {}
        return tags_to_dict(resp.get("TagList"))

    def get(self, resource_id: str) -> CacheCluster:
        """One cluster by id, enriched

        Raises:
            ListingError: cluster does not exist or the call failed
        """
        resource_id = self._require_id(resource_id)
        try:
            resp = self._call(
                "elasticache",
                "describe_cache_clusters",
                CacheClusterId=resource_id,
                ShowCacheNodeInfo=True,
            )
        except APICallError as e:
            raise self._get_error(resource_id, cause=e) from e

        clusters = resp.get("CacheClusters", [])
        if not clusters:
            raise self._get_error(resource_id)
        return self.enrich(self._parse(clusters[0]))
