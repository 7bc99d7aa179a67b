"""
core/data/inventory/services/base.py - Adapter base for AWS resource kinds

An adapter binds one resource kind to one (boto3 Session, region) scope.
It owns the only state that outlives a single call: its boto3 clients and
its CacheResolver. Nothing here is process-global.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from core.config import Settings, get_settings
from core.exceptions import APICallError, ListingError, ResolveError, ValidationError, is_not_found
from core.parallel import CancelToken, RetryConfig, call_with_retry, get_client

from ..pagination import drain_pages
from ..resolver import CacheResolver
from ..types import LookupKind

if TYPE_CHECKING:
    from boto3 import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

GLOBAL_SERVICES = frozenset({"iam"})


class ResourceAdapter(Protocol[T_co]):
    """What InventoryService needs from an adapter"""

    kind: str

    @property
    def scope(self) -> str: ...

    def list_page(self, page_token: str = "") -> tuple[list[T_co], str]: ...

    def list_all(self, cancel_token: CancelToken | None = None) -> list[T_co]: ...

    def list_enriched(self, cancel_token: CancelToken | None = None) -> list[T_co]: ...

    def get(self, resource_id: str) -> T_co: ...

    def get_by_id(self, kind: str, identifier: str) -> Any: ...


# =============================================================================
# Tag / name helpers
# =============================================================================


def tags_to_dict(tags: list[dict[str, str]] | None) -> dict[str, str]:
    """Convert an AWS ``[{"Key": ..., "Value": ...}]`` list, skipping ``aws:`` keys"""
    result = {}
    for tag in tags or []:
        key = tag.get("Key", "")
        if key and not key.startswith("aws:"):
            result[key] = tag.get("Value", "")
    return result


def name_tag(tags: list[dict[str, str]] | None) -> str:
    """Value of the ``Name`` tag, or ""."""
    for tag in tags or []:
        if tag.get("Key") == "Name":
            return tag.get("Value", "")
    return ""


def ec2_name(obj: dict[str, Any]) -> str:
    """Display name of a raw EC2 object (Name tag)"""
    return name_tag(obj.get("Tags"))


def account_from_arn(arn: str) -> str:
    """Account id field of an ARN, or ""."""
    parts = arn.split(":")
    return parts[4] if len(parts) > 4 else ""


# =============================================================================
# Base adapter
# =============================================================================


class BaseAdapter(Generic[T]):
    """Common plumbing for per-kind adapters

    Subclasses implement ``_list_page`` (one remote page) and ``get``, and
    optionally ``enrich`` and extra ``_lookups``.

    Example:
        adapter = CacheClusterAdapter(session, region="ap-northeast-2")
        clusters = adapter.list_enriched()
        adapter.resolver.stats  # {"fetches": 3, "hits": 12, ...}
    """

    kind: str = ""

    def __init__(
        self,
        session: Session,
        region: str | None = None,
        account_id: str = "",
        settings: Settings | None = None,
        retry_config: RetryConfig | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.region = region or getattr(session, "region_name", None) or self.settings.default_region
        self.account_id = account_id
        self.retry_config = retry_config or RetryConfig(max_retries=self.settings.max_retries)
        self._clients: dict[str, Any] = {}
        self._clients_lock = threading.Lock()
        self.resolver = CacheResolver(self.get_by_id, name=f"{self.kind}:{self.scope}")

    @property
    def profile_name(self) -> str:
        profile = getattr(self.session, "profile_name", None)
        return profile if isinstance(profile, str) and profile else "default"

    @property
    def scope(self) -> str:
        """Session/region scope label (e.g. "default/ap-northeast-2")"""
        return f"{self.profile_name}/{self.region}"

    # -------------------------------------------------------------------------
    # Remote calls
    # -------------------------------------------------------------------------

    def client(self, service_name: str) -> Any:
        """Cached boto3 client for this scope (global services ignore the region)"""
        with self._clients_lock:
            client = self._clients.get(service_name)
            if client is None:
                region = None if service_name in GLOBAL_SERVICES else self.region
                client = get_client(self.session, service_name, region_name=region)
                self._clients[service_name] = client
            return client

    def _call(
        self,
        service_name: str,
        operation: str,
        cancel_token: CancelToken | None = None,
        **params: Any,
    ) -> dict[str, Any]:
        """Single API call with throttling retry; botocore errors become APICallError"""
        method = getattr(self.client(service_name), operation)
        try:
            return call_with_retry(
                lambda: method(**params),
                operation=f"{service_name}.{operation}",
                retry_config=self.retry_config,
                cancel_token=cancel_token,
            )
        except (ClientError, BotoCoreError) as e:
            raise APICallError.from_client_error(service_name, operation, e) from e

    def _paginate(
        self,
        service_name: str,
        operation: str,
        result_key: str,
        cancel_token: CancelToken | None = None,
        **params: Any,
    ) -> list[dict[str, Any]]:
        """Collect every page of a boto3 paginator, checking cancellation between pages"""
        paginator = self.client(service_name).get_paginator(operation)
        items: list[dict[str, Any]] = []
        try:
            for page in paginator.paginate(**params):
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled(f"{service_name}.{operation}")
                items.extend(page.get(result_key, []))
        except (ClientError, BotoCoreError) as e:
            raise APICallError.from_client_error(service_name, operation, e) from e
        return items

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def _list_page(self, page_token: str) -> tuple[list[T], str]:
        raise NotImplementedError

    def list_page(self, page_token: str = "") -> tuple[list[T], str]:
        """One remote page: ``(items, next_token)``; "" token means the first page

        Raises:
            ListingError: the remote listing call failed
        """
        try:
            return self._list_page(page_token)
        except APICallError as e:
            raise ListingError(self.kind, self.scope, cause=e) from e

    def list_all(self, cancel_token: CancelToken | None = None) -> list[T]:
        """All resources of this kind, without cross-referenced names"""
        return drain_pages(self.list_page, self.kind, self.scope, cancel_token)

    def enrich(self, item: T, cancel_token: CancelToken | None = None) -> T:
        """Fill cross-referenced fields in place (no-op by default)"""
        return item

    def list_enriched(self, cancel_token: CancelToken | None = None) -> list[T]:
        """All resources with cross-referenced names filled in"""
        items = self.list_all(cancel_token)
        for item in items:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled(f"{self.kind}.enrich")
            self.enrich(item, cancel_token)

        stats = self.resolver.stats
        logger.debug(
            f"{self.kind} 보강 완료 [{self.scope}]: {len(items)}개, "
            f"조회 {stats['fetches']}회, 캐시 적중 {stats['hits']}회, 실패 {stats['failures']}건"
        )
        return items

    def get(self, resource_id: str) -> T:
        raise NotImplementedError

    def _get_error(self, resource_id: str, cause: Exception | None = None) -> ListingError:
        """ListingError for a failed single-resource get"""
        if cause is None or is_not_found(cause):
            return ListingError(self.kind, self.scope, cause=cause, reason=f"리소스를 찾을 수 없음: {resource_id}")
        return ListingError(self.kind, self.scope, cause=cause, reason=f"조회 실패: {resource_id}")

    @staticmethod
    def _require_id(resource_id: str) -> str:
        resource_id = (resource_id or "").strip()
        if not resource_id:
            raise ValidationError("resource_id", resource_id, "non-empty resource id")
        return resource_id

    # -------------------------------------------------------------------------
    # Identifier lookups (CacheResolver backend)
    # -------------------------------------------------------------------------

    def _lookups(self) -> dict[str, Callable[[str], Any]]:
        """kind -> single-object lookup. Subclasses extend this mapping."""
        return {
            LookupKind.VPC.value: lambda i: self._describe_one(LookupKind.VPC, "describe_vpcs", "Vpcs", "VpcIds", i),
            LookupKind.SUBNET.value: lambda i: self._describe_one(
                LookupKind.SUBNET, "describe_subnets", "Subnets", "SubnetIds", i
            ),
            LookupKind.SECURITY_GROUP.value: lambda i: self._describe_one(
                LookupKind.SECURITY_GROUP, "describe_security_groups", "SecurityGroups", "GroupIds", i
            ),
            LookupKind.VPC_ROUTE_TABLES.value: lambda i: self._paginate(
                "ec2", "describe_route_tables", "RouteTables", Filters=[{"Name": "vpc-id", "Values": [i]}]
            ),
        }

    def get_by_id(self, kind: str, identifier: str) -> Any:
        """Fetch one object by ``(kind, identifier)``; used by the resolver

        Raises:
            ValidationError: unsupported kind
            ResolveError: object does not exist
            APICallError: remote call failed
        """
        kind = str(getattr(kind, "value", kind))
        lookups = self._lookups()
        lookup = lookups.get(kind)
        if lookup is None:
            raise ValidationError("kind", kind, " | ".join(sorted(lookups)))
        return lookup(identifier)

    def _describe_one(
        self,
        kind: LookupKind,
        operation: str,
        result_key: str,
        id_param: str,
        identifier: str,
    ) -> dict[str, Any]:
        resp = self._call("ec2", operation, **{id_param: [identifier]})
        items = resp.get(result_key, [])
        if not items:
            raise ResolveError(kind.value, identifier)
        return items[0]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(scope={self.scope!r})"
