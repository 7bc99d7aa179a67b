"""
core/data/inventory/service.py - Presentation-facing inventory service

Glues an adapter (remote listing + enrichment) to the Paginator and the
fuzzy search engine. One service instance per command invocation.

Usage:
    from core.data.inventory import create_service

    service = create_service("elasticache", session, region="ap-northeast-2")
    result = service.fetch_paginated(limit=20, page=1)
    hits = service.fuzzy_search("prod")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from core.config import Settings, get_settings
from core.exceptions import AggregationError, ValidationError
from core.parallel import CancelToken
from core.search import FuzzyMatcher, SearchSchema, fuzzy_find

from .pagination import paginate
from .searchable import (
    CACHE_CLUSTER_SCHEMA,
    DB_INSTANCE_SCHEMA,
    IAM_POLICY_SCHEMA,
    IAM_ROLE_SCHEMA,
    SUBNET_SCHEMA,
    VPC_SCHEMA,
)
from .services import (
    BaseAdapter,
    CacheClusterAdapter,
    DBInstanceAdapter,
    IAMPolicyAdapter,
    IAMRoleAdapter,
    ResourceAdapter,
    SubnetAdapter,
    VPCAdapter,
)

if TYPE_CHECKING:
    from boto3 import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PaginatedResult(Generic[T]):
    """One page view of a listing

    Attributes:
        items: Resources on this page
        total_count: Size of the full listing
        next_page_token: Non-empty when another page exists
        page: Effective page number
        limit: Effective page size
        enriched: False when the listing fell back to un-enriched records
    """

    items: list[T] = field(default_factory=list)
    total_count: int = 0
    next_page_token: str = ""
    page: int = 1
    limit: int = 0
    enriched: bool = True

    @property
    def has_next(self) -> bool:
        return bool(self.next_page_token)


class InventoryService(Generic[T]):
    """List, page, search and get resources of one kind"""

    def __init__(
        self,
        adapter: ResourceAdapter[T],
        schema: SearchSchema[T],
        settings: Settings | None = None,
        matcher: FuzzyMatcher | None = None,
    ):
        self.adapter = adapter
        self.schema = schema
        self.settings = settings or get_settings()
        self.matcher = matcher or FuzzyMatcher()

    @property
    def kind(self) -> str:
        return self.adapter.kind

    def _load(self, cancel_token: CancelToken | None = None) -> tuple[list[T], bool]:
        """Enriched listing, or the plain listing when enrichment aggregation fails"""
        try:
            return self.adapter.list_enriched(cancel_token), True
        except AggregationError as e:
            logger.warning(f"{self.kind} 보강 실패, 기본 목록으로 대체합니다: {e}")
            return self.adapter.list_all(cancel_token), False

    def fetch_paginated(
        self,
        limit: int = 0,
        page: int = 1,
        cancel_token: CancelToken | None = None,
    ) -> PaginatedResult[T]:
        """Fetch the full listing and return one page of it

        Raises:
            ListingError: the remote listing failed
        """
        items, enriched = self._load(cancel_token)
        view = paginate(items, limit, page, default_limit=self.settings.page_size)
        logger.info(
            f"{self.kind} 페이지 {view.state.page}: {len(view.items)}/{view.state.total_count}개 "
            f"[{self.adapter.scope}]"
        )
        return PaginatedResult(
            items=view.items,
            total_count=view.state.total_count,
            next_page_token=view.state.next_page_token,
            page=view.state.page,
            limit=view.state.limit,
            enriched=enriched,
        )

    def fuzzy_search(self, query: str, cancel_token: CancelToken | None = None) -> list[T]:
        """Resources matching ``query``, best match first (empty query: everything)"""
        items, _ = self._load(cancel_token)
        matched = fuzzy_find(items, query, self.schema, matcher=self.matcher)
        logger.info(f"{self.kind} 검색 '{query}': {len(matched)}/{len(items)}개")
        return matched

    def get(self, resource_id: str) -> T:
        return self.adapter.get(resource_id)

    def list_all(self, cancel_token: CancelToken | None = None) -> list[T]:
        items, _ = self._load(cancel_token)
        return items


# =============================================================================
# Kind registry
# =============================================================================

RESOURCE_KINDS: dict[str, tuple[type[BaseAdapter[Any]], SearchSchema[Any]]] = {
    "elasticache": (CacheClusterAdapter, CACHE_CLUSTER_SCHEMA),
    "rds": (DBInstanceAdapter, DB_INSTANCE_SCHEMA),
    "vpc": (VPCAdapter, VPC_SCHEMA),
    "subnet": (SubnetAdapter, SUBNET_SCHEMA),
    "iam-policy": (IAMPolicyAdapter, IAM_POLICY_SCHEMA),
    "iam-role": (IAMRoleAdapter, IAM_ROLE_SCHEMA),
}


def create_service(
    kind: str,
    session: Session,
    region: str | None = None,
    settings: Settings | None = None,
) -> InventoryService[Any]:
    """Build the adapter and service for a resource kind

    Raises:
        ValidationError: unknown kind
    """
    if kind not in RESOURCE_KINDS:
        raise ValidationError("kind", kind, " | ".join(RESOURCE_KINDS))
    adapter_cls, schema = RESOURCE_KINDS[kind]
    settings = settings or get_settings()
    adapter = adapter_cls(session, region=region, settings=settings)
    return InventoryService(adapter, schema, settings=settings)
