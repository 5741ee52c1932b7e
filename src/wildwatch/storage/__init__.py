"""Dual-mode persistence: the store gateway and its in-memory fallback."""

from .fallback import FallbackDataset
from .gateway import ENTITIES, Filter, Order, PersistenceGateway

__all__ = [
    "ENTITIES",
    "FallbackDataset",
    "Filter",
    "Order",
    "PersistenceGateway",
]
