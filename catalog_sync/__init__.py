"""Public API exports for catalog decoding and reconciliation helpers."""

from .config import PriceRange, SyncSettings, TransformConfig, load_settings
from .events import EventRecorder, LoggingEventRecorder, NullEventRecorder
from .models import (
    BatchPayload,
    CreateRecord,
    DataIssue,
    OfferParam,
    StoreProduct,
    SupplierOffer,
    UpdateRecord,
)
from .parser import parse_both_catalogs, parse_store_products, parse_supplier_feed
from .reconcile import (
    SyncResult,
    detect_duplicate_skus,
    find_new_items,
    find_out_of_stock_items,
    find_outdated_items,
    index_by_sku,
    merge_batch_payloads,
    reconcile_catalogs,
)
from .transform import normalize_offers

__all__ = [
    "BatchPayload",
    "CreateRecord",
    "DataIssue",
    "EventRecorder",
    "LoggingEventRecorder",
    "NullEventRecorder",
    "OfferParam",
    "PriceRange",
    "StoreProduct",
    "SupplierOffer",
    "SyncResult",
    "SyncSettings",
    "TransformConfig",
    "UpdateRecord",
    "detect_duplicate_skus",
    "find_new_items",
    "find_out_of_stock_items",
    "find_outdated_items",
    "index_by_sku",
    "load_settings",
    "merge_batch_payloads",
    "normalize_offers",
    "parse_both_catalogs",
    "parse_store_products",
    "parse_supplier_feed",
    "reconcile_catalogs",
]
