"""
core/data - Data Services Layer

Modules:
    - inventory: Resource listing, enrichment, paging and search

Design Principle:
    core/ = How (engine + adapters)
    cli/ = presentation only

Usage:
    from core.data.inventory import create_service, InventoryService
"""

from .inventory import InventoryService, PaginatedResult, create_service

__all__ = [
    # Inventory
    "InventoryService",
    "PaginatedResult",
    "create_service",
]
